"""Demo data loaded into a fresh application context."""
from renovatepro.models.material import Material
from renovatepro.models.plan import PricingPlan
from renovatepro.models.project import Project, ProjectSpace, ProjectStatus
from renovatepro.models.user import AdminPermissions, AdminUser, Contractor, Profile

DEFAULT_JOB_TAGS = [s.value for s in ProjectStatus]

_UNSPLASH = "https://images.unsplash.com/photo-{}?ixlib=rb-1.2.1&auto=format&fit=crop&w=800&q=80"


def default_materials() -> list[Material]:
    return [
        Material(id="m1", name="Natural Oak Wide Plank", category="Flooring", sub_category="Hardwood",
                 description="6-inch wide natural oak planks with a matte finish.",
                 image_url="https://picsum.photos/100/100?random=1"),
        Material(id="m2", name="Calacatta Gold", category="Countertops", sub_category="Quartz",
                 description="White quartz with bold grey and gold veining.",
                 image_url="https://picsum.photos/100/100?random=2"),
        Material(id="m3", name="Classic White Subway", category="Tile", sub_category="Ceramic",
                 description="3x6 inch glossy white ceramic subway tile.",
                 image_url="https://picsum.photos/100/100?random=3"),
        Material(id="m4", name="Modern Brass Pendant", category="Lighting", sub_category="Pendants",
                 description="Brushed brass geometric pendant light with warm LED.",
                 image_url="https://picsum.photos/100/100?random=4"),
        Material(id="m5", name="Matte Black Kitchen Faucet", category="Fixtures", sub_category="Kitchen",
                 description="High-arc pull-down kitchen faucet in matte black.",
                 image_url="https://picsum.photos/100/100?random=5"),
        Material(id="m6", name="Repose Gray", category="Paint", sub_category="Sherwin-Williams",
                 description="A warm gray neutral paint color.",
                 image_url="https://picsum.photos/100/100?random=6"),
        Material(id="m7", name="Hale Navy", category="Paint", sub_category="Benjamin Moore",
                 description="A deeply saturated classic navy blue.",
                 image_url="https://picsum.photos/100/100?random=7"),
    ]


def default_projects(materials: list[Material]) -> list[Project]:
    by_id = {m.id: m for m in materials}
    return [
        Project(
            id="p1",
            name="Miller Whole Home Reno",
            cover_photo=_UNSPLASH.format("1518780664697-55e3ad937233"),
            date="2023-10-15",
            status=ProjectStatus.OPEN_JOB.value,
            client_name="Sarah Miller",
            client_email="sarah@example.com",
            client_address="123 Maple Ave, Springfield",
            client_phone="(555) 123-4567",
            quote_amount=45000,
            description="Complete renovation of kitchen and living area.",
            spaces=[
                ProjectSpace(
                    id="s1",
                    name="Kitchen",
                    before_image=_UNSPLASH.format("1556912173-3db496beee71"),
                    after_image=_UNSPLASH.format("1556911220-e15b29be8c8f"),
                    description="Modern open concept kitchen with island.",
                    materials=[by_id["m1"], by_id["m2"]],
                ),
                ProjectSpace(
                    id="s2",
                    name="Living Room",
                    before_image=_UNSPLASH.format("1505691723518-36a5ac3be353"),
                    after_image=_UNSPLASH.format("1600210492486-724fe5c67fb0"),
                    description="Bright and airy living room with new flooring.",
                    materials=[by_id["m1"], by_id["m4"]],
                ),
            ],
        ),
        Project(
            id="p2",
            name="Johnson Master Bath",
            cover_photo=_UNSPLASH.format("1552321554-5fefe8c9ef14"),
            date="2023-11-02",
            status=ProjectStatus.COMPLETE.value,
            client_name="Dave Johnson",
            client_email="dave@example.com",
            client_address="456 Oak Ln, Springfield",
            client_phone="(555) 987-6543",
            quote_amount=18500,
            description="Master bathroom remodel.",
            spaces=[
                ProjectSpace(
                    id="s3",
                    name="Master Bath",
                    before_image=_UNSPLASH.format("1507089947368-19c1da9775ae"),
                    after_image=_UNSPLASH.format("1552321554-5fefe8c9ef14"),
                    description="Luxury spa-like bathroom.",
                    materials=[by_id["m3"], by_id["m5"]],
                ),
            ],
        ),
        Project(
            id="p3",
            name="Westside Commercial Reno",
            cover_photo=_UNSPLASH.format("1504307651254-35680f356dfd"),
            date="2023-12-10",
            status=ProjectStatus.OPEN_QUOTE.value,
            client_name="Urban Corp",
            client_email="contact@urbancorp.com",
            client_address="789 Business Pkwy",
            client_phone="(555) 555-0199",
            quote_amount=120000,
            description="Office floor renovation with modern aesthetics.",
            spaces=[
                ProjectSpace(
                    id="s4",
                    name="Lobby",
                    before_image=_UNSPLASH.format("1497366216548-37526070297c"),
                    description="Modern reception area with marble flooring.",
                ),
                ProjectSpace(
                    id="s5",
                    name="Conference Room",
                    before_image=_UNSPLASH.format("1497366811353-6870744d04b2"),
                    description="Glass walled meeting room.",
                ),
            ],
        ),
    ]


def default_plans() -> list[PricingPlan]:
    return [
        PricingPlan(
            id="monthly",
            name="Pro Monthly",
            price=99,
            interval="monthly",
            features=[
                "Unlimited Projects",
                "AI Before & After Generation",
                "High-Res Exports (4K)",
                "PDF Permit Packages",
                "Client Approval Portal",
            ],
        ),
        PricingPlan(
            id="yearly",
            name="Pro Yearly",
            price=990,
            interval="yearly",
            features=[
                "Everything in Monthly",
                "2 Months Free",
                "Priority Support",
                "Custom Branding",
                "Team Access (up to 3)",
            ],
            recommended=True,
        ),
    ]


def default_contractors() -> list[Contractor]:
    return [
        Contractor(id="c1", first_name="Mike", last_name="Builder", company="Mike Construction",
                   phone="(555) 123-4567", email="mike@example.com", plan="Pro Monthly",
                   status="Active", join_date="2023-10-01"),
        Contractor(id="c2", first_name="Sarah", last_name="Miller", company="Sarah Designs",
                   phone="(555) 987-6543", email="sarah@example.com", plan="Pro Yearly",
                   status="Active", join_date="2023-11-15"),
        Contractor(id="c3", first_name="John", last_name="Doe", company="Elite Roofing",
                   phone="(555) 555-5555", email="contact@eliteroofing.com", plan="Free Trial",
                   status="Inactive", join_date="2024-01-20"),
    ]


def default_admins() -> list[AdminUser]:
    return [
        AdminUser(id="a1", name="Main Admin", email="admin@renovatepro.ai", role="Super Admin",
                  permissions=AdminPermissions(manage_contractors=True, manage_admins=True)),
        AdminUser(id="a2", name="Support Rep", email="support@renovatepro.ai", role="Sub Admin"),
    ]


def default_contractor_profile() -> Profile:
    return Profile(name="Mike Builder", image_url="https://picsum.photos/100/100?u=1")


def default_admin_profile() -> Profile:
    return Profile(
        name="Administrator",
        image_url="https://images.unsplash.com/photo-1472099645785-5658abf4ff4e?auto=format&fit=facearea&facepad=2&w=256&h=256&q=80",
    )

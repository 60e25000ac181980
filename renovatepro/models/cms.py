"""Typed marketing-site configuration.

Each section of the landing page is a declared model so that admin edits are
validated field by field instead of being written into an untyped tree.
Defaults reproduce the launch copy.
"""
from pydantic import BaseModel


class HeroSection(BaseModel):
    badge: str = "✨ Now with 4K AI Rendering"
    headline_part1: str = "One app for before & afters,"
    headline_part2: str = "approvals & permits."
    subheadline: str = (
        "Turn job photos into approvals and permits, fast. The essential tool "
        "for modern contractors, roofers, and remodelers."
    )
    cta_text: str = "Sign Up Now"
    benefits: list[str] = [
        "Unlimited AI Generations",
        "PDF & Email Exports",
        "Project Management Dashboard",
        "Access to 5,000+ Materials",
    ]


class VideoSection(BaseModel):
    title: str = "See RenovateProAI In Action"
    url: str = "https://commondatastorage.googleapis.com/gtv-videos-bucket/sample/ForBiggerEscapes.mp4"
    poster: str = "https://images.unsplash.com/photo-1484154218962-a1c002085d2f?auto=format&fit=crop&q=80&w=2071"


class WorkflowStep(BaseModel):
    title: str
    desc: str


class HowItWorksSection(BaseModel):
    title: str = "From Photo to Permit in Minutes"
    subtitle: str = "A simple workflow designed for the job site."
    steps: list[WorkflowStep] = [
        WorkflowStep(title="Capture & Create", desc="Login, create a project, and snap 'Before' photos directly on site."),
        WorkflowStep(title="Material Selection", desc="Select materials from our extensive database to match client desires."),
        WorkflowStep(title="Voice Description", desc="Simply speak to describe the renovation. Our AI listens and understands."),
        WorkflowStep(title="AI Visualization", desc="Generate realistic Before & After previews instantly."),
        WorkflowStep(title="Refine & Edit", desc="Tweak details with text commands until it's perfect."),
        WorkflowStep(title="Export & Close", desc="Generate PDFs with specs and images. Send to clients and officials."),
    ]


class FeatureItem(BaseModel):
    icon: str
    title: str
    desc: str


class FeaturesSection(BaseModel):
    title: str = "Built for the Trades"
    items: list[FeatureItem] = [
        FeatureItem(icon="🎨", title="AI Image Gen", desc="Photorealistic rendering of any room or exterior."),
        FeatureItem(icon="📱", title="Mobile First", desc="Works perfectly on your phone or tablet."),
        FeatureItem(icon="📋", title="Permit Ready", desc="Exports technical details needed for approvals."),
        FeatureItem(icon="🌤️", title="Cloud Storage", desc="Access your project gallery from anywhere."),
        FeatureItem(icon="🧱", title="Material Library", desc="Real catalog items for accurate visuals."),
        FeatureItem(icon="⚡", title="Instant Speed", desc="No waiting days for a designer."),
    ]


class UseCasesSection(BaseModel):
    title: str = "Who Uses RenovateProAI?"
    items: list[str] = ["Remodelers", "Roofers", "Landscapers", "Interior Designers", "General Contractors"]


class PricingSection(BaseModel):
    title: str = "Simple, Flat Pricing"
    subtitle: str = "No hidden fees. Unlimited projects."


class Testimonial(BaseModel):
    name: str
    role: str
    text: str


class TestimonialsSection(BaseModel):
    title: str = "Trusted by Pros"
    items: list[Testimonial] = [
        Testimonial(name="Mike R.", role="General Contractor", text="This app closed 3 deals for me last week alone. Clients need to see it to believe it."),
        Testimonial(name="Sarah L.", role="Interior Designer", text="The realistic textures on the AI generation are incredible. Saves me hours of rendering."),
        Testimonial(name="David K.", role="Roofer", text="Showing a homeowner their new roof before I even order materials is a game changer."),
    ]


class FaqItem(BaseModel):
    q: str
    a: str


class FaqSection(BaseModel):
    title: str = "Frequently Asked Questions"
    items: list[FaqItem] = [
        FaqItem(q="Is the AI accurate?", a="Yes, our models are specifically tuned for architectural and interior realism."),
        FaqItem(q="Can I use the images commercially?", a="Absolutely. You own full rights to every image you generate."),
        FaqItem(q="Is my data secure?", a="We use enterprise-grade encryption for all project data and photos."),
    ]


class FooterSection(BaseModel):
    headline: str = "Start Creating Before & After Images Today"
    subheadline: str = "Join thousands of contractors closing deals faster."
    cta_text: str = "Sign Up"


class SeoSection(BaseModel):
    meta_title: str = "RenovateProAI - Contractor Tools"


class CmsContent(BaseModel):
    hero: HeroSection = HeroSection()
    video: VideoSection = VideoSection()
    how_it_works: HowItWorksSection = HowItWorksSection()
    features: FeaturesSection = FeaturesSection()
    use_cases: UseCasesSection = UseCasesSection()
    pricing: PricingSection = PricingSection()
    testimonials: TestimonialsSection = TestimonialsSection()
    faq: FaqSection = FaqSection()
    footer: FooterSection = FooterSection()
    seo: SeoSection = SeoSection()


CMS_SECTIONS: dict[str, type[BaseModel]] = {
    name: field.annotation for name, field in CmsContent.model_fields.items()
}

"""Role dispatch at the routing boundary.

The caller's role arrives in the X-User-Role header and is checked once per
router against an explicit allowed-route table. This is route selection for
the three dashboards, not authentication.
"""
from enum import Enum
from fastapi import Depends, Header, HTTPException, Request


class Role(str, Enum):
    VISITOR = "visitor"
    CONTRACTOR = "contractor"
    ADMIN = "admin"


MARKETING_ROUTES = ("/api/v1/marketing",)
CONTRACTOR_ROUTES = (
    "/api/v1/projects",
    "/api/v1/materials",
    "/api/v1/wizard",
    "/api/v1/profile",
)
ADMIN_ROUTES = ("/api/v1/admin",)

ROLE_ROUTES: dict[Role, tuple[str, ...]] = {
    Role.VISITOR: MARKETING_ROUTES,
    Role.CONTRACTOR: MARKETING_ROUTES + CONTRACTOR_ROUTES,
    Role.ADMIN: MARKETING_ROUTES + ADMIN_ROUTES,
}


def is_route_allowed(role: Role, path: str) -> bool:
    return any(path == prefix or path.startswith(prefix + "/") for prefix in ROLE_ROUTES[role])


async def get_current_role(x_user_role: str | None = Header(default=None)) -> Role:
    """Resolve the caller's role; a missing header means an anonymous visitor."""
    if not x_user_role:
        return Role.VISITOR
    try:
        return Role(x_user_role.lower())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown role: {x_user_role}")


async def require_role(request: Request, role: Role = Depends(get_current_role)) -> Role:
    """Router-level dependency: 403 unless the role may use this route."""
    if not is_route_allowed(role, request.url.path):
        raise HTTPException(status_code=403, detail=f"Role '{role.value}' cannot access this area")
    return role

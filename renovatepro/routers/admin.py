from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from renovatepro.auth import require_role
from renovatepro.models.cms import CmsContent
from renovatepro.models.plan import JobTagCreate, PricingPlan, PricingPlanCreate, PricingPlanUpdate
from renovatepro.models.user import (
    Profile,
    ProfileUpdate,
    AdminUser,
    AdminUserCreate,
    AdminUserUpdate,
    Contractor,
    ContractorCreate,
    ContractorUpdate,
)
from renovatepro.store import AppContext, Collection, RecordNotFound, get_context

router = APIRouter(
    prefix="/api/v1/admin",
    tags=["admin"],
    dependencies=[Depends(require_role)],
)


def _get_or_404(collection: Collection, record_id: str):
    try:
        return collection.get(record_id)
    except RecordNotFound:
        raise HTTPException(status_code=404, detail=f"{collection.name} not found")


def _update_or_404(collection: Collection, record_id: str, changes: dict):
    _get_or_404(collection, record_id)
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")
    return collection.update(record_id, changes)


def _delete_or_404(collection: Collection, record_id: str):
    _get_or_404(collection, record_id)
    collection.delete(record_id)


# ── Contractors ──


@router.get("/contractors", response_model=list[Contractor])
async def list_contractors(ctx: AppContext = Depends(get_context)):
    return ctx.contractors.all()


@router.post("/contractors", response_model=Contractor, status_code=201)
async def create_contractor(body: ContractorCreate, ctx: AppContext = Depends(get_context)):
    return ctx.contractors.add(Contractor(**body.model_dump()))


@router.get("/contractors/{contractor_id}", response_model=Contractor)
async def get_contractor(contractor_id: str, ctx: AppContext = Depends(get_context)):
    return _get_or_404(ctx.contractors, contractor_id)


@router.put("/contractors/{contractor_id}", response_model=Contractor)
async def update_contractor(contractor_id: str, body: ContractorUpdate, ctx: AppContext = Depends(get_context)):
    return _update_or_404(ctx.contractors, contractor_id, body.model_dump(exclude_none=True))


@router.delete("/contractors/{contractor_id}", status_code=204)
async def delete_contractor(contractor_id: str, ctx: AppContext = Depends(get_context)):
    _delete_or_404(ctx.contractors, contractor_id)


# ── Admin users ──


@router.get("/admins", response_model=list[AdminUser])
async def list_admins(ctx: AppContext = Depends(get_context)):
    return ctx.admins.all()


@router.post("/admins", response_model=AdminUser, status_code=201)
async def create_admin(body: AdminUserCreate, ctx: AppContext = Depends(get_context)):
    return ctx.admins.add(AdminUser(**body.model_dump()))


@router.get("/admins/{admin_id}", response_model=AdminUser)
async def get_admin(admin_id: str, ctx: AppContext = Depends(get_context)):
    return _get_or_404(ctx.admins, admin_id)


@router.put("/admins/{admin_id}", response_model=AdminUser)
async def update_admin(admin_id: str, body: AdminUserUpdate, ctx: AppContext = Depends(get_context)):
    changes = body.model_dump(exclude_none=True)
    if body.permissions is not None:
        changes["permissions"] = body.permissions
    return _update_or_404(ctx.admins, admin_id, changes)


@router.delete("/admins/{admin_id}", status_code=204)
async def delete_admin(admin_id: str, ctx: AppContext = Depends(get_context)):
    _delete_or_404(ctx.admins, admin_id)


# ── Pricing plans ──


@router.get("/plans", response_model=list[PricingPlan])
async def list_plans(ctx: AppContext = Depends(get_context)):
    return ctx.plans.all()


@router.post("/plans", response_model=PricingPlan, status_code=201)
async def create_plan(body: PricingPlanCreate, ctx: AppContext = Depends(get_context)):
    return ctx.plans.add(PricingPlan(**body.model_dump()))


@router.put("/plans/{plan_id}", response_model=PricingPlan)
async def update_plan(plan_id: str, body: PricingPlanUpdate, ctx: AppContext = Depends(get_context)):
    return _update_or_404(ctx.plans, plan_id, body.model_dump(exclude_none=True))


@router.delete("/plans/{plan_id}", status_code=204)
async def delete_plan(plan_id: str, ctx: AppContext = Depends(get_context)):
    _delete_or_404(ctx.plans, plan_id)


# ── Job tags ──


@router.get("/job-tags", response_model=list[str])
async def list_job_tags(ctx: AppContext = Depends(get_context)):
    return ctx.job_tags


@router.post("/job-tags", response_model=list[str], status_code=201)
async def add_job_tag(body: JobTagCreate, ctx: AppContext = Depends(get_context)):
    return ctx.add_job_tag(body.tag)


@router.delete("/job-tags/{tag}", response_model=list[str])
async def delete_job_tag(tag: str, ctx: AppContext = Depends(get_context)):
    try:
        return ctx.delete_job_tag(tag)
    except RecordNotFound:
        raise HTTPException(status_code=404, detail="Job tag not found")


# ── Landing page CMS ──


@router.get("/cms", response_model=CmsContent)
async def get_cms(ctx: AppContext = Depends(get_context)):
    return ctx.cms


@router.put("/cms", response_model=CmsContent)
async def replace_cms(body: CmsContent, ctx: AppContext = Depends(get_context)):
    return ctx.replace_cms(body)


@router.put("/cms/{section}", response_model=CmsContent)
async def update_cms_section(section: str, body: dict, ctx: AppContext = Depends(get_context)):
    try:
        return ctx.update_cms_section(section, body)
    except RecordNotFound:
        raise HTTPException(status_code=404, detail=f"Unknown CMS section: {section}")
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))


# ── Admin profile ──


@router.get("/profile", response_model=Profile)
async def get_admin_profile(ctx: AppContext = Depends(get_context)):
    return ctx.admin_profile


@router.put("/profile", response_model=Profile)
async def update_admin_profile(body: ProfileUpdate, ctx: AppContext = Depends(get_context)):
    ctx.admin_profile = ctx.admin_profile.model_copy(update=body.model_dump(exclude_none=True))
    return ctx.admin_profile

from fastapi import APIRouter, Depends
from renovatepro.auth import require_role
from renovatepro.models.cms import CmsContent
from renovatepro.models.plan import PricingPlan
from renovatepro.store import AppContext, get_context

router = APIRouter(
    prefix="/api/v1/marketing",
    tags=["marketing"],
    dependencies=[Depends(require_role)],
)


@router.get("/content", response_model=CmsContent)
async def get_content(ctx: AppContext = Depends(get_context)):
    return ctx.cms


@router.get("/plans", response_model=list[PricingPlan])
async def list_plans(ctx: AppContext = Depends(get_context)):
    return ctx.plans.all()

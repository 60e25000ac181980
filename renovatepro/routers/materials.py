from fastapi import APIRouter, Depends, HTTPException
from renovatepro.auth import require_role
from renovatepro.models.material import Material, MaterialCreate, MaterialUpdate
from renovatepro.models.shared import PLACEHOLDER_IMAGE_URL
from renovatepro.services.material_filter import filter_materials, list_categories, list_sub_categories
from renovatepro.store import AppContext, RecordNotFound, get_context

router = APIRouter(
    prefix="/api/v1/materials",
    tags=["materials"],
    dependencies=[Depends(require_role)],
)


def _get_material(ctx: AppContext, material_id: str) -> Material:
    try:
        return ctx.materials.get(material_id)
    except RecordNotFound:
        raise HTTPException(status_code=404, detail="Material not found")


@router.get("", response_model=list[Material])
async def list_materials(
    category: str | None = None,
    sub_category: str | None = None,
    ctx: AppContext = Depends(get_context),
):
    return filter_materials(ctx.materials.all(), category, sub_category)


@router.get("/categories", response_model=list[str])
async def get_categories(ctx: AppContext = Depends(get_context)):
    return list_categories(ctx.materials.all())


@router.get("/categories/{category}/sub-categories", response_model=list[str])
async def get_sub_categories(category: str, ctx: AppContext = Depends(get_context)):
    return list_sub_categories(ctx.materials.all(), category)


@router.post("", response_model=Material, status_code=201)
async def create_material(body: MaterialCreate, ctx: AppContext = Depends(get_context)):
    data = body.model_dump()
    data["image_url"] = data["image_url"] or PLACEHOLDER_IMAGE_URL
    return ctx.materials.add(Material(**data))


@router.get("/{material_id}", response_model=Material)
async def get_material(material_id: str, ctx: AppContext = Depends(get_context)):
    return _get_material(ctx, material_id)


@router.put("/{material_id}", response_model=Material)
async def update_material(material_id: str, body: MaterialUpdate, ctx: AppContext = Depends(get_context)):
    _get_material(ctx, material_id)
    data = body.model_dump(exclude_none=True)
    if not data:
        raise HTTPException(status_code=400, detail="No fields to update")
    return ctx.materials.update(material_id, data)


@router.delete("/{material_id}", status_code=204)
async def delete_material(material_id: str, ctx: AppContext = Depends(get_context)):
    """Remove a catalog entry. Spaces keep the copies they already reference."""
    _get_material(ctx, material_id)
    ctx.materials.delete(material_id)

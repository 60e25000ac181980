from fastapi import APIRouter, Depends, HTTPException, UploadFile, File
from loguru import logger
from renovatepro.auth import require_role
from renovatepro.models.project import Project, ProjectStatusUpdate, ProjectSummary
from renovatepro.models.user import Profile, ProfileUpdate
from renovatepro.processors.image_processor import read_image_file
from renovatepro.store import AppContext, RecordNotFound, get_context

router = APIRouter(
    prefix="/api/v1/projects",
    tags=["projects"],
    dependencies=[Depends(require_role)],
)

profile_router = APIRouter(
    prefix="/api/v1/profile",
    tags=["profile"],
    dependencies=[Depends(require_role)],
)


def _get_project(ctx: AppContext, project_id: str) -> Project:
    try:
        return ctx.projects.get(project_id)
    except RecordNotFound:
        raise HTTPException(status_code=404, detail="Project not found")


@router.get("", response_model=list[ProjectSummary])
async def list_projects(status: str | None = None, ctx: AppContext = Depends(get_context)):
    projects = ctx.projects.all()
    if status:
        projects = [p for p in projects if p.status == status]
    return [ProjectSummary.from_project(p) for p in projects]


@router.get("/{project_id}", response_model=Project)
async def get_project(project_id: str, ctx: AppContext = Depends(get_context)):
    return _get_project(ctx, project_id)


@router.delete("/{project_id}", status_code=204)
async def delete_project(project_id: str, ctx: AppContext = Depends(get_context)):
    _get_project(ctx, project_id)
    ctx.projects.delete(project_id)


@router.put("/{project_id}/status", response_model=Project)
async def update_status(project_id: str, body: ProjectStatusUpdate, ctx: AppContext = Depends(get_context)):
    _get_project(ctx, project_id)
    try:
        return ctx.set_project_status(project_id, body.status)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/{project_id}/cover-photo", response_model=Project)
async def upload_cover_photo(
    project_id: str,
    file: UploadFile = File(...),
    ctx: AppContext = Depends(get_context),
):
    _get_project(ctx, project_id)
    try:
        image = read_image_file(await file.read(), file.filename or "cover.jpg")
    except ValueError as e:
        logger.warning(f"Cover photo rejected for project {project_id}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    return ctx.projects.update(project_id, {"cover_photo": image.data_url})


@profile_router.get("", response_model=Profile)
async def get_profile(ctx: AppContext = Depends(get_context)):
    return ctx.contractor_profile


@profile_router.put("", response_model=Profile)
async def update_profile(body: ProfileUpdate, ctx: AppContext = Depends(get_context)):
    ctx.contractor_profile = ctx.contractor_profile.model_copy(update=body.model_dump(exclude_none=True))
    return ctx.contractor_profile

"""Visualization wizard endpoints.

Each wizard session lives in the application context; every endpoint loads
it, applies one action and returns the full state snapshot.
"""
from contextlib import contextmanager
from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Query
from fastapi.responses import HTMLResponse, Response
from loguru import logger
from renovatepro.agents.generation import ConfigurationError, GenerationError
from renovatepro.auth import require_role
from renovatepro.models.project import Project
from renovatepro.models.wizard import (
    DescriptionsUpdate,
    DictationFragment,
    MaterialFilterUpdate,
    MaterialView,
    PreviewOptions,
    ProjectInfo,
    RefineRequest,
    SpaceNameUpdate,
    TrackSelect,
    WizardStart,
    WizardState,
)
from renovatepro.pdf.export_renderer import build_export_context, export_session, render_export_html
from renovatepro.processors.image_processor import read_image_file
from renovatepro.store import AppContext, RecordNotFound, get_context
from renovatepro.wizard.session import WizardBusyError, WizardSession, WizardStep, WizardValidationError

router = APIRouter(
    prefix="/api/v1/wizard",
    tags=["wizard"],
    dependencies=[Depends(require_role)],
)


@contextmanager
def wizard_errors():
    """Translate wizard and generation failures into HTTP errors."""
    try:
        yield
    except ConfigurationError as e:
        logger.error(f"Generation service not configured: {e}")
        raise HTTPException(status_code=503, detail=str(e))
    except GenerationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except WizardBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except WizardValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RecordNotFound as e:
        raise HTTPException(status_code=404, detail=e.args[0] if e.args else "Not found")


def _get_session(session_id: str, ctx: AppContext = Depends(get_context)) -> WizardSession:
    try:
        return ctx.get_session(session_id)
    except RecordNotFound:
        raise HTTPException(status_code=404, detail="Wizard session not found")


@router.post("", response_model=WizardState, status_code=201)
async def start_wizard(body: WizardStart, ctx: AppContext = Depends(get_context)):
    with wizard_errors():
        try:
            session = ctx.start_session(body.mode, body.project_id, body.space_id)
        except ValueError as e:
            raise WizardValidationError(str(e))
    return session.to_state()


@router.get("/{session_id}", response_model=WizardState)
async def get_wizard(session: WizardSession = Depends(_get_session)):
    return session.to_state()


@router.delete("/{session_id}", status_code=204)
async def cancel_wizard(session: WizardSession = Depends(_get_session), ctx: AppContext = Depends(get_context)):
    """Cancel the wizard. Nothing is persisted and late responses are dropped."""
    session.cancel()
    ctx.discard_session(session.id)


# ── Steps 1-2 ──


@router.put("/{session_id}/project-info", response_model=WizardState)
async def set_project_info(body: ProjectInfo, session: WizardSession = Depends(_get_session)):
    with wizard_errors():
        session.set_project_info(body)
    return session.to_state()


@router.put("/{session_id}/space", response_model=WizardState)
async def set_space_name(body: SpaceNameUpdate, session: WizardSession = Depends(_get_session)):
    with wizard_errors():
        session.set_space_name(body.name)
    return session.to_state()


@router.put("/{session_id}/before-image", response_model=WizardState)
async def upload_before_image(
    file: UploadFile = File(...),
    session: WizardSession = Depends(_get_session),
):
    try:
        image = read_image_file(await file.read(), file.filename or "before.jpg")
    except ValueError as e:
        logger.warning(f"Wizard {session.id}: before photo rejected: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    with wizard_errors():
        session.set_before_image(image.data_url)
    return session.to_state()


@router.delete("/{session_id}/before-image", response_model=WizardState)
async def clear_before_image(session: WizardSession = Depends(_get_session)):
    with wizard_errors():
        session.clear_before_image()
    return session.to_state()


# ── Step 3 ──


@router.put("/{session_id}/descriptions", response_model=WizardState)
async def set_descriptions(body: DescriptionsUpdate, session: WizardSession = Depends(_get_session)):
    with wizard_errors():
        session.set_descriptions(body.vision, body.ai_suggestion)
    return session.to_state()


@router.post("/{session_id}/analyze", response_model=WizardState)
async def analyze(session: WizardSession = Depends(_get_session)):
    with wizard_errors():
        await session.analyze()
    return session.to_state()


@router.post("/{session_id}/smart-describe", response_model=WizardState)
async def smart_describe(session: WizardSession = Depends(_get_session)):
    with wizard_errors():
        await session.smart_describe()
    return session.to_state()


@router.post("/{session_id}/dictation/start", response_model=WizardState)
async def start_dictation(session: WizardSession = Depends(_get_session)):
    with wizard_errors():
        session.start_dictation()
    return session.to_state()


@router.post("/{session_id}/dictation/fragment", response_model=WizardState)
async def dictation_fragment(body: DictationFragment, session: WizardSession = Depends(_get_session)):
    session.dictation.feed(body.text)
    return session.to_state()


@router.post("/{session_id}/dictation/cancel", response_model=WizardState)
async def cancel_dictation(session: WizardSession = Depends(_get_session)):
    session.dictation.cancel()
    return session.to_state()


# ── Step 4 ──


@router.get("/{session_id}/materials", response_model=MaterialView)
async def get_material_view(session: WizardSession = Depends(_get_session), ctx: AppContext = Depends(get_context)):
    return session.material_view(ctx.materials.all())


@router.put("/{session_id}/material-filter", response_model=MaterialView)
async def set_material_filter(
    body: MaterialFilterUpdate,
    session: WizardSession = Depends(_get_session),
    ctx: AppContext = Depends(get_context),
):
    with wizard_errors():
        session.set_material_filter(body.category, body.sub_category)
    return session.material_view(ctx.materials.all())


@router.post("/{session_id}/materials/{material_id}/toggle", response_model=WizardState)
async def toggle_material(
    material_id: str,
    session: WizardSession = Depends(_get_session),
    ctx: AppContext = Depends(get_context),
):
    with wizard_errors():
        session.toggle_material(ctx.materials.get(material_id))
    return session.to_state()


# ── Navigation ──


@router.post("/{session_id}/next", response_model=WizardState)
async def next_step(session: WizardSession = Depends(_get_session)):
    with wizard_errors():
        await session.next_step()
    return session.to_state()


@router.post("/{session_id}/back", response_model=WizardState)
async def previous_step(session: WizardSession = Depends(_get_session)):
    with wizard_errors():
        session.previous_step()
    return session.to_state()


# ── Step 5 ──


@router.post("/{session_id}/generate", response_model=WizardState)
async def generate(session: WizardSession = Depends(_get_session)):
    """Enter the preview from the materials step, or regenerate inside it."""
    with wizard_errors():
        if session.step == WizardStep.PREVIEW:
            await session.regenerate()
        else:
            await session.generate()
    return session.to_state()


@router.put("/{session_id}/track", response_model=WizardState)
async def select_track(body: TrackSelect, session: WizardSession = Depends(_get_session)):
    with wizard_errors():
        session.select_track(body.track)
    return session.to_state()


@router.put("/{session_id}/options", response_model=WizardState)
async def set_options(body: PreviewOptions, session: WizardSession = Depends(_get_session)):
    with wizard_errors():
        session.set_options(**body.model_dump())
    return session.to_state()


@router.post("/{session_id}/refine", response_model=WizardState)
async def refine(body: RefineRequest, session: WizardSession = Depends(_get_session)):
    with wizard_errors():
        await session.refine(body.instruction)
    return session.to_state()


@router.get("/{session_id}/export")
async def export(
    format: str = Query(default="pdf", pattern="^(pdf|html)$"),
    session: WizardSession = Depends(_get_session),
):
    """Client-facing summary of the current preview, as PDF or printable HTML."""
    if format == "html":
        return HTMLResponse(render_export_html(build_export_context(session)))

    try:
        document = export_session(session)
    except Exception as e:
        logger.error(f"Export failed for wizard {session.id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate PDF")

    filename = f"{session.space.name or 'visualization'}.pdf".replace('"', "")
    return Response(
        content=document,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ── Step 6 ──


@router.post("/{session_id}/finish", response_model=Project)
async def finish(session: WizardSession = Depends(_get_session), ctx: AppContext = Depends(get_context)):
    """Save the active track and close the session."""
    with wizard_errors():
        return ctx.finish_session(session.id)

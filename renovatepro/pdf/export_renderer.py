"""Visualization export: two-page client summary rendered with WeasyPrint.

Page 1 carries the project summary, the before photo and the scope of work.
Page 2 carries the proposed after image and the inclusions checklist. The
document is rendered from the wizard's current state only; the renderer has
no state of its own.
"""
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol
from loguru import logger
from jinja2 import Environment, FileSystemLoader, select_autoescape
from weasyprint import HTML

from renovatepro.config import get_settings
from renovatepro.wizard.session import WizardSession

TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_NAME = "visualization_export.html"

INCLUSION_ELECTRICAL = ("Electrical", "Rough-in, trim, wiring, and fixture installation per code.")
INCLUSION_PLUMBING = ("Plumbing", "Rough-in, supply/waste lines, valves, and fixture installation.")
INCLUSION_PERMITS = ("Permits", "Contractor handles all required building permits and inspections.")
INCLUSION_DESIGN = ("Design Concept", "Implementation of the proposed aesthetic and layout.")


class Printer(Protocol):
    def print_document(self, html_content: str) -> bytes: ...


class WeasyPrintPrinter:
    """Server-side print: turns the export HTML into PDF bytes."""

    def print_document(self, html_content: str) -> bytes:
        return HTML(string=html_content).write_pdf()


def _format_money(value) -> str:
    try:
        return f"{float(value):,.2f}"
    except (TypeError, ValueError):
        return "0.00"


def build_inclusions(
    include_electrical: bool,
    include_plumbing: bool,
    pull_permit: bool,
    material_names: list[str],
) -> list[dict]:
    """Checklist entries for page 2.

    Trade entries appear only when their flag is set; the design concept is
    always listed.
    """
    items = []
    for enabled, (title, detail) in (
        (include_electrical, INCLUSION_ELECTRICAL),
        (include_plumbing, INCLUSION_PLUMBING),
        (pull_permit, INCLUSION_PERMITS),
    ):
        if enabled:
            items.append({"title": title, "detail": detail})
    items.append({"title": INCLUSION_DESIGN[0], "detail": INCLUSION_DESIGN[1]})
    if material_names:
        items.append({"title": "Selected Materials", "detail": ", ".join(material_names)})
    return items


def build_export_context(session: WizardSession, generated_at: datetime | None = None) -> dict:
    settings = get_settings()
    generated_at = generated_at or datetime.now(timezone.utc)
    info = session.project_info

    return {
        "brand_name": settings.brand_name,
        "space_name": session.space.name,
        "project_name": info.name or "Renovation Project",
        "client_name": info.client_name or "Valued Client",
        "generated_date": generated_at.strftime("%B %d, %Y"),
        "budget": _format_money(info.quote_amount),
        "before_image": session.space.before_image,
        "after_image": session.active_image,
        "scope_text": session.active_text or "No description provided.",
        "inclusions": build_inclusions(
            session.include_electrical,
            session.include_plumbing,
            session.pull_permit,
            [m.name for m in session.space.materials],
        ),
    }


def render_export_html(context: dict) -> str:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(["html"]),
    )
    template = env.get_template(TEMPLATE_NAME)
    return template.render(**context)


def export_session(session: WizardSession, printer: Printer | None = None) -> bytes:
    """Render the session's current preview and hand it to the printer."""
    html_content = render_export_html(build_export_context(session))
    printer = printer or WeasyPrintPrinter()
    document = printer.print_document(html_content)
    logger.info(
        f"Export generated for wizard {session.id} "
        f"(track={session.active_track.value}, {len(document)} bytes)"
    )
    return document

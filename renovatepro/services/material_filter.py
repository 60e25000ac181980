"""Filtering and grouping over the materials catalog.

Everything here is a pure function of the catalog plus the two filter
selections, so the wizard can re-derive its material views at any time.
"""
from typing import Sequence
from renovatepro.models.material import Material


def filter_materials(
    catalog: Sequence[Material],
    category: str | None = None,
    sub_category: str | None = None,
) -> list[Material]:
    """Return catalog entries matching the category/sub-category when given."""
    return [
        m for m in catalog
        if (not category or m.category == category)
        and (not sub_category or m.sub_category == sub_category)
    ]


def list_categories(catalog: Sequence[Material]) -> list[str]:
    return sorted({m.category for m in catalog})


def list_sub_categories(catalog: Sequence[Material], category: str | None) -> list[str]:
    """Sorted, de-duplicated sub-categories within a category (empty without one)."""
    if not category:
        return []
    return sorted({m.sub_category for m in catalog if m.category == category})


def toggle_material(selection: Sequence[Material], material: Material) -> list[Material]:
    """Add a material to the selection, or remove it if already selected (by id)."""
    if any(m.id == material.id for m in selection):
        return [m for m in selection if m.id != material.id]
    return [*selection, material]


def materials_prompt_text(selection: Sequence[Material]) -> str:
    """Render selected materials for a generation prompt: "Name (description), ..."."""
    return ", ".join(f"{m.name} ({m.description})" for m in selection)

"""rendering - Paystub layouts behind one PaystubRenderer interface.

Formats:
- pdf:  vector layout drawn with ReportLab
- html: styled markup from a Jinja2 template (also the input of the
        browser HTML-to-PDF path)

render_w2_pdf() draws the year-end wage statement with the same page
geometry as the vector stub.

Callers pick a renderer by format with get_renderer(); they never need to
know which library draws it.
"""

from typing import Dict, Optional, Type

from ..schemas import ProfileModel
from .base import PaystubRenderer, RenderError
from .formatting import (
    PLACEHOLDER,
    StubView,
    build_stub_view,
    display_employee_id,
    format_date,
    mask_employee_id,
    money,
    verification_tag,
)
from .html import HtmlPaystubRenderer
from .pdf import ReportLabPaystubRenderer
from .w2 import render_w2_pdf

RENDERERS: Dict[str, Type[PaystubRenderer]] = {
    ReportLabPaystubRenderer.format: ReportLabPaystubRenderer,
    HtmlPaystubRenderer.format: HtmlPaystubRenderer,
}


def get_renderer(fmt: str, profile: Optional[ProfileModel] = None) -> PaystubRenderer:
    """Return the renderer for a format ('pdf' or 'html').

    Raises:
        ValueError: If the format is unknown
    """
    try:
        renderer_cls = RENDERERS[fmt.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown paystub format '{fmt}'. Expected one of: {', '.join(sorted(RENDERERS))}"
        )
    return renderer_cls(profile)


__all__ = [
    "PaystubRenderer",
    "RenderError",
    "ReportLabPaystubRenderer",
    "HtmlPaystubRenderer",
    "RENDERERS",
    "get_renderer",
    "PLACEHOLDER",
    "StubView",
    "build_stub_view",
    "display_employee_id",
    "format_date",
    "mask_employee_id",
    "money",
    "verification_tag",
    "render_w2_pdf",
]

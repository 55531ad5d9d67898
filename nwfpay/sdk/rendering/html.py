"""Styled markup paystub rendered with Jinja2.

The markup is a deliverable on its own (preview, verification pages) and
the input of the browser HTML-to-PDF path, which is why page size and
margins are embedded as an @page rule.
"""

from typing import Optional

from jinja2 import Environment, PackageLoader, select_autoescape

from ..backends import PageOptions
from ..schemas import ProfileModel
from .base import PaystubRenderer
from .formatting import StubView

TEMPLATE_NAME = "paystub.html"

_env = Environment(
    loader=PackageLoader("nwfpay.sdk.rendering", "templates"),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


class HtmlPaystubRenderer(PaystubRenderer):
    """Two-stub HTML paystub."""

    format = "html"
    content_type = "text/html; charset=utf-8"
    extension = "html"

    def __init__(self, profile: Optional[ProfileModel] = None, page: Optional[PageOptions] = None):
        super().__init__(profile)
        self.page = page or PageOptions()

    def render_markup(self, view: StubView) -> str:
        return _env.get_template(TEMPLATE_NAME).render(v=view, page=self.page)

    def _render_view(self, view: StubView) -> bytes:
        return self.render_markup(view).encode("utf-8")

"""PaystubRenderer capability interface."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

from ..schemas import Employee, PayrollRun, Paystub, ProfileModel, YtdTotals
from .formatting import StubView, build_stub_view

logger = logging.getLogger(__name__)


class RenderError(Exception):
    """Raised when a layout cannot be produced."""
    pass


class PaystubRenderer(ABC):
    """Turns (employee, run, paystub, YTD) into document bytes.

    Subclasses implement _render_view() over a pre-formatted StubView;
    rendering runs in a worker thread so callers can await it without
    blocking the event loop.
    """

    format: str = ""
    content_type: str = "application/octet-stream"
    extension: str = ""

    def __init__(self, profile: Optional[ProfileModel] = None):
        self.profile = profile or ProfileModel()

    async def render(
        self,
        employee: Employee,
        run: PayrollRun,
        paystub: Paystub,
        ytd: YtdTotals,
    ) -> bytes:
        view = build_stub_view(employee, run, paystub, ytd, self.profile)
        try:
            return await asyncio.to_thread(self._render_view, view)
        except Exception as e:
            logger.error(f"{self.format} render failed for paystub {paystub.id}: {e}")
            raise RenderError(f"Could not render {self.format} paystub {paystub.id}: {e}") from e

    @abstractmethod
    def _render_view(self, view: StubView) -> bytes:
        """Produce the document for an already-formatted view."""

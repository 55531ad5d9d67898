"""HTML-to-PDF rendering backends.

The backend is a black box: it receives markup plus fixed page options and
returns raw PDF bytes. The only shipped implementation drives a headless
Chrome/Chromium with --print-to-pdf; page size and margins travel inside
the markup as an @page rule, which Chromium honors.

Binary resolution:
1. NWF_PAY_CHROMIUM environment variable
2. settings.json "chromium_path"
3. chromium / chromium-browser / google-chrome on PATH
"""

import asyncio
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from .config import get_setting

logger = logging.getLogger(__name__)

BROWSER_CANDIDATES = ["chromium", "chromium-browser", "google-chrome", "google-chrome-stable"]
DEFAULT_TIMEOUT = 30


class BackendError(Exception):
    """Raised when the HTML-to-PDF backend fails or is unavailable."""
    pass


@dataclass(frozen=True)
class PageOptions:
    """Fixed page options for paystub PDFs."""

    format: str = "Letter"
    margin: str = "5mm"


class HtmlToPdfBackend(Protocol):
    async def html_to_pdf(self, markup: str, options: PageOptions) -> bytes:
        ...


def find_browser() -> Optional[str]:
    """Locate a headless-capable browser binary, or None."""
    configured = os.environ.get("NWF_PAY_CHROMIUM") or get_setting("chromium_path")
    if configured:
        return configured
    for name in BROWSER_CANDIDATES:
        path = shutil.which(name)
        if path:
            return path
    return None


class ChromiumBackend:
    """Prints markup to PDF with a headless Chromium subprocess."""

    def __init__(self, binary: Optional[str] = None, timeout: int = DEFAULT_TIMEOUT):
        self.binary = binary
        self.timeout = timeout

    def _command(self, binary: str, html_path: Path, pdf_path: Path) -> list:
        return [
            binary,
            "--headless=new",
            "--disable-gpu",
            "--no-sandbox",
            "--disable-setuid-sandbox",
            "--no-pdf-header-footer",
            f"--print-to-pdf={pdf_path}",
            html_path.as_uri(),
        ]

    async def html_to_pdf(self, markup: str, options: PageOptions) -> bytes:
        binary = self.binary or find_browser()
        if not binary:
            raise BackendError(
                "No headless browser found. Install Chromium or set NWF_PAY_CHROMIUM "
                "(or settings.json 'chromium_path')."
            )

        if "@page" not in markup:
            page_rule = f"<style>@page {{ size: {options.format}; margin: {options.margin}; }}</style>"
            markup = markup.replace("</head>", f"{page_rule}</head>", 1)

        with tempfile.TemporaryDirectory(prefix="nwf-pay-") as tmp:
            html_path = Path(tmp) / "paystub.html"
            pdf_path = Path(tmp) / "paystub.pdf"
            html_path.write_text(markup, encoding="utf-8")

            cmd = self._command(binary, html_path, pdf_path)
            logger.debug(f"running {' '.join(cmd[:2])} ... (timeout {self.timeout}s)")
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            try:
                _, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
            except asyncio.TimeoutError:
                proc.kill()
                await proc.wait()
                raise BackendError(f"Headless browser timed out after {self.timeout}s")

            if proc.returncode != 0 or not pdf_path.exists():
                detail = stderr.decode(errors="replace").strip()[-500:]
                logger.error(f"Headless browser exited {proc.returncode}: {detail}")
                raise BackendError(f"Headless browser failed (exit {proc.returncode}): {detail}")

            return pdf_path.read_bytes()

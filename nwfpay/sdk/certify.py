"""Document certification: stamp product metadata onto rendered PDFs.

Certification loads a rendered paystub PDF, copies its pages into a fresh
document, and sets Creator, Producer, Author and Title to fixed
product-identifying values. Re-certifying yields the same metadata; the
bytes are re-serialized each time and need not be identical.

Certification is strict. A document that cannot be parsed is never
passed through as "certified": every failure raises CertificationError.
"""

import asyncio
import io
import logging
from typing import Dict, Optional

from PyPDF2 import PdfReader, PdfWriter

from .schemas import CertificationProfile

logger = logging.getLogger(__name__)

METADATA_KEYS = {
    "creator": "/Creator",
    "producer": "/Producer",
    "author": "/Author",
    "title": "/Title",
}


class CertificationError(Exception):
    """Raised when a document cannot be certified."""
    pass


def _load(raw: bytes) -> PdfReader:
    if not raw:
        raise CertificationError("Cannot certify an empty document")
    try:
        reader = PdfReader(io.BytesIO(raw))
        if reader.is_encrypted:
            raise CertificationError("Cannot certify an encrypted document")
        page_count = len(reader.pages)
    except CertificationError:
        raise
    except Exception as e:
        raise CertificationError(f"Could not parse document for certification: {e}") from e
    if page_count == 0:
        raise CertificationError("Cannot certify a document with no pages")
    return reader


def read_metadata(raw: bytes) -> Dict[str, Optional[str]]:
    """Return creator/producer/author/title of a PDF.

    Raises:
        CertificationError: If the document cannot be parsed
    """
    info = _load(raw).metadata or {}
    return {name: (str(info[key]) if key in info else None) for name, key in METADATA_KEYS.items()}


class DocumentCertifier:
    """Rewrites authorship metadata to the configured product identity."""

    def __init__(self, identity: Optional[CertificationProfile] = None):
        self.identity = identity or CertificationProfile()

    @property
    def metadata(self) -> Dict[str, str]:
        return {key: getattr(self.identity, name) for name, key in METADATA_KEYS.items()}

    def certify_bytes(self, raw: bytes) -> bytes:
        """Synchronous certification.

        Raises:
            CertificationError: On empty, unparseable, encrypted or
                page-less input, or if re-serialization fails
        """
        reader = _load(raw)
        try:
            writer = PdfWriter()
            for page in reader.pages:
                writer.add_page(page)
            writer.add_metadata(self.metadata)

            out = io.BytesIO()
            writer.write(out)
        except Exception as e:
            logger.error(f"PDF metadata injection failed: {e}")
            raise CertificationError(f"Could not inject metadata into document: {e}") from e

        certified = out.getvalue()
        logger.debug(f"certified document: {len(raw)} -> {len(certified)} bytes")
        return certified

    def is_certified(self, raw: bytes) -> bool:
        """True if the document carries exactly this certifier's metadata."""
        try:
            found = read_metadata(raw)
        except CertificationError:
            return False
        return all(found[name] == getattr(self.identity, name) for name in METADATA_KEYS)

    async def certify(self, raw: bytes) -> bytes:
        """Certify without blocking the event loop."""
        return await asyncio.to_thread(self.certify_bytes, raw)


async def certify(raw: bytes, identity: Optional[CertificationProfile] = None) -> bytes:
    """Certify a rendered PDF with the given (or default) identity."""
    return await DocumentCertifier(identity).certify(raw)

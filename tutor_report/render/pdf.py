"""
PDF export from a loaded render session.
"""

import logging
from typing import Any, Dict

from playwright.async_api import Error as PlaywrightError

from ..errors import ExportFailed

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF-"

PDF_OPTIONS: Dict[str, Any] = {
    "format": "A4",
    "print_background": True,
    "margin": {"top": "30px", "bottom": "30px", "left": "30px", "right": "30px"},
}


class PdfExporter:
    """Exports the currently loaded document as A4 PDF bytes."""

    def __init__(self, options: Dict[str, Any] = None):
        self.options = dict(PDF_OPTIONS, **(options or {}))

    async def export(self, session) -> bytes:
        """
        Export the session's page to PDF.

        Raises:
            ExportFailed: the engine raised, or returned something that is not a PDF
        """
        try:
            pdf_bytes = await session.pdf(**self.options)
        except PlaywrightError as e:
            logger.error(f"PDF export failed: {e}")
            raise ExportFailed(f"PDF export failed: {e}") from e

        if not pdf_bytes or not pdf_bytes.startswith(PDF_MAGIC):
            raise ExportFailed("Rendering engine returned an invalid PDF")

        logger.info(f"Generated PDF: {len(pdf_bytes)} bytes")
        return pdf_bytes

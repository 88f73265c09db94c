"""
Headless rendering: Chromium sessions, MathJax readiness, PDF export.

Requires playwright and an installed Chromium
(pip install playwright && playwright install chromium).
"""

from .engine import (
    EmbeddedChromiumProvider,
    LocalChromiumProvider,
    RenderEngineProvider,
    RenderSession,
    create_engine_provider,
    get_engine_provider,
)
from .pdf import PDF_OPTIONS, PdfExporter
from .typeset import TypesetGate

__all__ = [
    "EmbeddedChromiumProvider",
    "LocalChromiumProvider",
    "RenderEngineProvider",
    "RenderSession",
    "create_engine_provider",
    "get_engine_provider",
    "PDF_OPTIONS",
    "PdfExporter",
    "TypesetGate",
]

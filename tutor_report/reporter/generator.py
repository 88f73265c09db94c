"""
Report Generator - Main orchestrator for PDF generation.

validate -> build document -> acquire session -> load -> await MathJax
-> export -> release session -> bytes + filename

A failure at any step releases the render session before the error
surfaces. There are no retries and no partial output.
"""

import asyncio
import logging
import os
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, List, Optional

from ..content.models import report_summary, validate_report
from ..content.topic import build_filename, extract_topic
from ..errors import ExportFailed, ReportError
from ..render.engine import RenderEngineProvider, get_engine_provider
from ..render.pdf import PdfExporter
from ..render.typeset import TypesetGate
from ..utils.config import Settings, get_settings
from .document import RenderedDocument
from .report import ReportBuilder

logger = logging.getLogger(__name__)

PAGE_PATTERN = re.compile(rb"/Type\s*/Page(?!s)")


class PipelineState(str, Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    DOCUMENT_BUILT = "document_built"
    SESSION_ACQUIRED = "session_acquired"
    DOCUMENT_LOADED = "document_loaded"
    TYPESET_COMPLETE = "typeset_complete"
    EXPORTED = "exported"
    SESSION_RELEASED = "session_released"
    RESPONDED = "responded"
    FAILED = "failed"


@dataclass
class PipelineRun:
    """State history of one generate() call."""
    states: List[PipelineState] = field(default_factory=lambda: [PipelineState.RECEIVED])

    @property
    def state(self) -> PipelineState:
        return self.states[-1]

    def advance(self, state: PipelineState) -> None:
        logger.debug(f"Pipeline: {self.state.value} -> {state.value}")
        self.states.append(state)


@dataclass
class GeneratedReport:
    """A generated PDF report."""
    filename: str
    pdf_bytes: bytes
    topic: str
    page_count: int
    generated_at: datetime
    states: List[PipelineState] = field(default_factory=list)


class ReportGenerator:
    """
    Main report generator coordinating PDF creation.

    One fresh render session per call, released on every exit path.
    """

    def __init__(
        self,
        builder: Optional[ReportBuilder] = None,
        provider: Optional[RenderEngineProvider] = None,
        gate: Optional[TypesetGate] = None,
        exporter: Optional[PdfExporter] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.settings = settings or get_settings()
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.builder = builder or ReportBuilder(settings=self.settings, clock=self.clock)
        self._provider = provider
        self.gate = gate or TypesetGate(settings=self.settings)
        self.exporter = exporter or PdfExporter()

    @property
    def provider(self) -> RenderEngineProvider:
        # Resolved lazily so building HTML never needs a browser
        if self._provider is None:
            self._provider = get_engine_provider()
        return self._provider

    def build_document(self, raw: Any) -> RenderedDocument:
        """Validate and build the HTML document without rendering it."""
        return self.builder.build(validate_report(raw))

    async def generate(self, raw: Any) -> GeneratedReport:
        """
        Generate the PDF for a raw report.

        Args:
            raw: Decoded report JSON

        Returns:
            GeneratedReport with PDF bytes and download filename

        Raises:
            SchemaError: input is missing required fields
            EngineUnavailable: Chromium could not be launched
            ExportFailed: load, typesetting or export failed or timed out
        """
        run = PipelineRun()
        try:
            report = validate_report(raw)
            run.advance(PipelineState.VALIDATED)
            logger.info(f"Generating report: {report_summary(report)}")

            document = self.builder.build(report)
            run.advance(PipelineState.DOCUMENT_BUILT)

            try:
                pdf_bytes = await asyncio.wait_for(
                    self._render(document, run),
                    timeout=self.settings.RENDER_TIMEOUT,
                )
            except asyncio.TimeoutError as e:
                raise ExportFailed(
                    f"Rendering did not complete within {self.settings.RENDER_TIMEOUT}s"
                ) from e

        except ReportError as e:
            run.advance(PipelineState.FAILED)
            logger.warning(f"Report generation failed ({type(e).__name__}): {e}")
            raise
        except Exception as e:
            run.advance(PipelineState.FAILED)
            logger.error(f"Report generation failed unexpectedly: {e}")
            raise ExportFailed(str(e)) from e

        topic = extract_topic(report.query_text)
        finished_at = self.clock()
        filename = build_filename(topic, finished_at)
        run.advance(PipelineState.RESPONDED)

        return GeneratedReport(
            filename=filename,
            pdf_bytes=pdf_bytes,
            topic=topic,
            page_count=self._count_pages(pdf_bytes),
            generated_at=finished_at,
            states=list(run.states),
        )

    async def _render(self, document: RenderedDocument, run: PipelineRun) -> bytes:
        async with self.provider.acquire() as session:
            run.advance(PipelineState.SESSION_ACQUIRED)

            await session.load(document.html)
            run.advance(PipelineState.DOCUMENT_LOADED)

            await self.gate.wait(session)
            run.advance(PipelineState.TYPESET_COMPLETE)

            pdf_bytes = await self.exporter.export(session)
            run.advance(PipelineState.EXPORTED)

        run.advance(PipelineState.SESSION_RELEASED)
        return pdf_bytes

    def _count_pages(self, pdf_bytes: bytes) -> int:
        """Count page objects; at least one."""
        return max(1, len(PAGE_PATTERN.findall(pdf_bytes)))

    def save_report(self, report: GeneratedReport, output_dir: str) -> str:
        """
        Save report to disk.

        Args:
            report: Generated report
            output_dir: Directory to save to

        Returns:
            Full path to saved file
        """
        os.makedirs(output_dir, exist_ok=True)
        filepath = os.path.join(output_dir, report.filename)

        with open(filepath, "wb") as f:
            f.write(report.pdf_bytes)

        logger.info(f"Saved report: {filepath}")
        return filepath

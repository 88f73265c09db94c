"""
Pytest Configuration and Shared Fixtures

Provides report inputs, a fixed clock and fake render sessions so the
pipeline can be exercised without a browser.
"""

import pytest
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from tutor_report.render.typeset import READINESS_SCRIPT
from tutor_report.utils.config import Settings


FAKE_PDF = b"%PDF-1.4\n1 0 obj << /Type /Pages /Count 1 >> endobj\n2 0 obj << /Type /Page >> endobj\n%%EOF"


# ============================================================================
# Mock Data Fixtures
# ============================================================================

@pytest.fixture
def minimal_report() -> Dict[str, Any]:
    return {"query": {"text": "x"}, "result": {"data": {}}}


@pytest.fixture
def sample_report() -> Dict[str, Any]:
    """The end-to-end example: one heading block and one concept card."""
    return {
        "query": {"text": "Explain inertia"},
        "result": {
            "data": {
                "concept": [{"script": "S", "conceptTitle": "T", "conceptLink": "L"}],
            }
        },
        "reasoning": {"general_script": [{"heading": "Inertia"}]},
    }


@pytest.fixture
def full_report() -> Dict[str, Any]:
    """Report using every block field and every resource category."""
    return {
        "query": {"text": "Explain Newton's laws of motion"},
        "metadata": {
            "timestamp": "2026-10-19T10:15:00Z",
            "logo": "https://example.com/logo.svg",
        },
        "reasoning": {
            "general_script": [
                {"heading": "Newton's Laws", "paragraph": "Three laws describe motion."},
                {"subheading": "First Law"},
                {"bold": "An object at rest stays at rest."},
                {"bullet": ["Inertia", "Net force", "Equilibrium"]},
                {"latex": "\\[F = ma\\]"},
                {"callout": {"content": "Force is a vector."}},
                {"quote": {"content": "If I have seen further...", "author": "Isaac Newton"}},
            ]
        },
        "result": {
            "data": {
                "concept": [
                    {"script": "Review the concept", "conceptTitle": "Laws of Motion", "conceptLink": "https://example.com/c1"},
                    {"script": "Second concept", "conceptTitle": "Friction", "conceptLink": "https://example.com/c2"},
                ],
                "practiceAssignment": [
                    {"script": "Try these", "practiceAssignmentTitle": "Set A", "practiceAssignmentLink": "https://example.com/a"},
                ],
                "practiceTest": [
                    {"script": "Test yourself", "practiceTestTitle": "Quiz 1", "practiceTestLink": "https://example.com/t"},
                ],
                "formula": [
                    {"script": "Keep handy", "formulaTitle": "Mechanics", "formulaLink": "https://example.com/f"},
                ],
            }
        },
    }


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 10, 19, 3, 45, 12, 345000, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock(fixed_now):
    return lambda: fixed_now


@pytest.fixture
def settings() -> Settings:
    return Settings(
        ENVIRONMENT="development",
        REPORT_TIMEZONE="UTC",
        TYPESET_TIMEOUT=1.0,
        TYPESET_POLL_INTERVAL=0.01,
        RENDER_TIMEOUT=5.0,
    )


# ============================================================================
# Fake Rendering Engine
# ============================================================================

class FakeSession:
    """
    Stands in for RenderSession.

    readiness_states is the sequence of answers to the MathJax readiness check;
    the last answer repeats once the sequence is exhausted.
    """

    def __init__(
        self,
        readiness_states: Optional[List[Optional[str]]] = None,
        pdf_bytes: bytes = FAKE_PDF,
        load_error: Optional[Exception] = None,
    ):
        self.readiness_states = list(readiness_states if readiness_states is not None else ["typeset"])
        self.pdf_bytes = pdf_bytes
        self.load_error = load_error
        self.loaded_html: Optional[str] = None
        self.evaluated: List[str] = []
        self.pdf_options: Optional[Dict[str, Any]] = None
        self.closed = False

    async def load(self, html: str) -> None:
        if self.load_error:
            raise self.load_error
        self.loaded_html = html

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        self.evaluated.append(expression)
        if expression == READINESS_SCRIPT:
            if len(self.readiness_states) > 1:
                return self.readiness_states.pop(0)
            return self.readiness_states[0] if self.readiness_states else None
        return True

    async def pdf(self, **options: Any) -> bytes:
        self.pdf_options = options
        return self.pdf_bytes

    async def close(self) -> None:
        self.closed = True


class FakeProvider:
    """Stands in for a RenderEngineProvider; releases the session on exit."""

    name = "fake"

    def __init__(self, session: Optional[FakeSession] = None, launch_error: Optional[Exception] = None):
        self.session = session or FakeSession()
        self.launch_error = launch_error
        self.acquired = 0

    @asynccontextmanager
    async def acquire(self):
        if self.launch_error:
            raise self.launch_error
        self.acquired += 1
        try:
            yield self.session
        finally:
            await self.session.close()


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def fake_provider(fake_session) -> FakeProvider:
    return FakeProvider(fake_session)


@pytest.fixture
def make_session():
    """Factory for FakeSession with custom behaviour."""
    return FakeSession


@pytest.fixture
def make_provider():
    """Factory for FakeProvider with custom behaviour."""
    return FakeProvider

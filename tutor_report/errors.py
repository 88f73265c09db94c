"""
Report Errors

Every failure the service reports to a caller is a ReportError carrying the
HTTP status it maps to. Nothing else escapes the pipeline.
"""

from typing import Optional


class ReportError(Exception):
    """Base exception for report generation failures."""

    status_code: int = 500
    message: str = "Failed to generate PDF"

    def __init__(self, details: Optional[str] = None, message: Optional[str] = None):
        super().__init__(details or message or self.message)
        if message:
            self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class SchemaError(ReportError):
    """Report input is missing required fields."""

    status_code = 400
    message = "Invalid input.json format"


class MethodNotAllowed(ReportError):
    status_code = 405
    message = "Method not allowed"


class EngineUnavailable(ReportError):
    """The headless browser could not be resolved or launched."""

    status_code = 500


class ExportFailed(ReportError):
    """Loading the document or exporting the PDF failed."""

    status_code = 500


class TypesetTimeout(ExportFailed):
    """MathJax never signalled completion within the configured timeout."""

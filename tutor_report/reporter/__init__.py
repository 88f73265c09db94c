"""
Tutor Report - Report Generation

This module handles document building and PDF generation:
- ReportBuilder turns a validated report into an HTML document tree
- ReportGenerator runs the full pipeline through headless Chromium

Note: PDF generation requires playwright. HTML generation works without a browser.
"""

from .document import Node, RenderedDocument, Text, el, render_html
from .generator import GeneratedReport, PipelineState, ReportGenerator
from .report import ReportBuilder, format_report_timestamp

__all__ = [
    "Node",
    "RenderedDocument",
    "Text",
    "el",
    "render_html",
    "GeneratedReport",
    "PipelineState",
    "ReportGenerator",
    "ReportBuilder",
    "format_report_timestamp",
]

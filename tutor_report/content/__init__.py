"""Report input: content model, validation and topic naming."""

from .models import (
    RESOURCE_CATEGORIES,
    Callout,
    ContentBlock,
    Quote,
    ReportInput,
    ReportMetadata,
    ResourceCard,
    ResourceCategory,
    report_summary,
    validate_report,
)
from .topic import FALLBACK_TOPIC, build_filename, export_timestamp, extract_topic

__all__ = [
    "RESOURCE_CATEGORIES",
    "Callout",
    "ContentBlock",
    "Quote",
    "ReportInput",
    "ReportMetadata",
    "ResourceCard",
    "ResourceCategory",
    "report_summary",
    "validate_report",
    "FALLBACK_TOPIC",
    "build_filename",
    "export_timestamp",
    "extract_topic",
]

"""
Report Content Model

Typed, read-only view of a tutoring session report:
- query text and metadata (timestamp, logo)
- explanatory content blocks (reasoning.general_script)
- follow-up resource cards (result.data)

Validation is deliberately shallow. Only the fields needed to produce a
non-empty document are required; everything nested is parsed leniently and
missing or wrong-typed values simply become absent.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..errors import SchemaError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceCategory:
    """One kind of follow-up resource and how its card is labelled."""
    key: str
    title_key: str
    link_key: str
    label: str


# Fixed render order
RESOURCE_CATEGORIES: Tuple[ResourceCategory, ...] = (
    ResourceCategory("concept", "conceptTitle", "conceptLink", "Concept"),
    ResourceCategory("practiceAssignment", "practiceAssignmentTitle", "practiceAssignmentLink", "Assignment"),
    ResourceCategory("practiceTest", "practiceTestTitle", "practiceTestLink", "Test"),
    ResourceCategory("formula", "formulaTitle", "formulaLink", "Formula Sheet"),
)


@dataclass(frozen=True)
class Callout:
    content: Optional[str] = None


@dataclass(frozen=True)
class Quote:
    content: Optional[str] = None
    author: Optional[str] = None


@dataclass(frozen=True)
class ContentBlock:
    """
    One entry of the response script.

    Fields are independent: a block may populate any subset of them and
    every populated field is rendered.
    """
    heading: Optional[str] = None
    subheading: Optional[str] = None
    paragraph: Optional[str] = None
    bold: Optional[str] = None
    bullet: Optional[Tuple[str, ...]] = None  # an empty list still renders <ul>
    latex: Optional[str] = None
    callout: Optional[Callout] = None
    quote: Optional[Quote] = None

    @classmethod
    def from_dict(cls, data: Any) -> "ContentBlock":
        if not isinstance(data, dict):
            return cls()

        bullet = data.get("bullet")
        if isinstance(bullet, (list, tuple)):
            bullet = tuple(str(item) for item in bullet if item is not None)
        else:
            bullet = None

        callout = data.get("callout")
        quote = data.get("quote")

        return cls(
            heading=_text(data.get("heading")),
            subheading=_text(data.get("subheading")),
            paragraph=_text(data.get("paragraph")),
            bold=_text(data.get("bold")),
            bullet=bullet,
            latex=_text(data.get("latex")),
            callout=Callout(content=_text(callout.get("content"))) if isinstance(callout, dict) else None,
            quote=Quote(
                content=_text(quote.get("content")),
                author=_text(quote.get("author")),
            ) if isinstance(quote, dict) else None,
        )


@dataclass(frozen=True)
class ResourceCard:
    """First item of a resource category, normalized to script/title/link."""
    category: ResourceCategory
    script: Optional[str] = None
    title: Optional[str] = None
    link: Optional[str] = None

    @classmethod
    def from_dict(cls, category: ResourceCategory, data: Any) -> "ResourceCard":
        if not isinstance(data, dict):
            return cls(category=category)
        return cls(
            category=category,
            script=_text(data.get("script")),
            title=_text(data.get(category.title_key)),
            link=_text(data.get(category.link_key)),
        )


@dataclass(frozen=True)
class ReportMetadata:
    timestamp: Optional[str] = None
    logo: Optional[str] = None


@dataclass(frozen=True)
class ReportInput:
    """Validated report, ready for the document builder."""
    query_text: str
    metadata: ReportMetadata = field(default_factory=ReportMetadata)
    blocks: Tuple[ContentBlock, ...] = ()
    resources: Tuple[ResourceCard, ...] = ()

    def resource(self, key: str) -> Optional[ResourceCard]:
        """Get the card for a category key, if that category is non-empty."""
        for card in self.resources:
            if card.category.key == key:
                return card
        return None


def _text(value: Any) -> Optional[str]:
    """Treat empty strings and non-scalars as absent; stringify numbers."""
    if value is None or isinstance(value, (dict, list, tuple)):
        return None
    if isinstance(value, bool):
        return None
    text = value if isinstance(value, str) else str(value)
    return text or None


def validate_report(raw: Any) -> ReportInput:
    """
    Validate raw report JSON and build the content model.

    Args:
        raw: Decoded JSON body

    Returns:
        ReportInput

    Raises:
        SchemaError: raw is not an object, query.text is missing or not a
            string, or result.data is missing
    """
    if not isinstance(raw, dict):
        raise SchemaError("Report input must be a JSON object")

    query = raw.get("query")
    if not isinstance(query, dict) or not isinstance(query.get("text"), str):
        raise SchemaError("query.text is required and must be a string")

    result = raw.get("result")
    data = result.get("data") if isinstance(result, dict) else None
    # An empty object counts as present
    if data is None or data is False or data == "" or data == 0:
        raise SchemaError("result.data is required")

    metadata = raw.get("metadata") if isinstance(raw.get("metadata"), dict) else {}
    reasoning = raw.get("reasoning") if isinstance(raw.get("reasoning"), dict) else {}
    script = reasoning.get("general_script") or []
    if not isinstance(script, list):
        logger.warning("reasoning.general_script is not a list, ignoring it")
        script = []

    resources: List[ResourceCard] = []
    if isinstance(data, dict):
        for category in RESOURCE_CATEGORIES:
            items = data.get(category.key)
            if isinstance(items, list) and items:
                resources.append(ResourceCard.from_dict(category, items[0]))

    return ReportInput(
        query_text=query["text"],
        metadata=ReportMetadata(
            timestamp=_text(metadata.get("timestamp")),
            logo=_text(metadata.get("logo")),
        ),
        blocks=tuple(ContentBlock.from_dict(block) for block in script),
        resources=tuple(resources),
    )


def report_summary(report: ReportInput) -> Dict[str, Any]:
    """Short description of a report for log lines."""
    return {
        "query_chars": len(report.query_text),
        "blocks": len(report.blocks),
        "resources": [card.category.key for card in report.resources],
    }

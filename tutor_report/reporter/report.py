"""
Session Report Builder

Builds the report document from a validated ReportInput:
- Header with logo, institution label and localized timestamp
- Query echo and response sections
- Response blocks rendered field by field (all populated fields render)
- Up to four resource cards (concept, assignment, test, formula)
- MathJax configuration so math typesets once the page loads
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..content.models import ContentBlock, ReportInput, ResourceCard
from ..utils.config import Settings, get_settings
from .document import Node, RenderedDocument, el, raw

logger = logging.getLogger(__name__)

# Template directory
TEMPLATE_DIR = Path(__file__).parent / "templates"

FALLBACK_TITLE = "Test Report"
FOOTER_TEXT = "© 2025 Acadza Technologies — Auto-generated report"

MATHJAX_CONFIG = r"""
window.MathJax = {
  tex: { inlineMath: [['$', '$'], ['\\(', '\\)']] },
  svg: { fontCache: 'global' }
};
"""

WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def format_report_timestamp(moment: datetime) -> str:
    """
    Format like en-IN toLocaleString with weekday/day/month/year/hour/minute.

    e.g. "Mon, 19 Oct 2026, 03:45 pm"
    """
    hour = moment.hour % 12 or 12
    meridiem = "am" if moment.hour < 12 else "pm"
    return (
        f"{WEEKDAYS[moment.weekday()]}, {moment.day:02d} {MONTHS[moment.month - 1]} "
        f"{moment.year}, {hour:02d}:{moment.minute:02d} {meridiem}"
    )


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp; naive values are taken as UTC."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def strip_display_delimiters(latex: str) -> str:
    """Remove literal \\[ and \\] so the source can be wrapped as inline math."""
    return latex.replace("\\[", "").replace("\\]", "")


class ReportBuilder:
    """
    Builds the session report document.

    Pure given a fixed clock: identical input yields identical markup.
    """

    def __init__(
        self,
        template_dir: Path = TEMPLATE_DIR,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.template_dir = template_dir
        self.settings = settings or get_settings()
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self._css = self._load_css()

    def build(self, report: ReportInput) -> RenderedDocument:
        """
        Build the complete HTML document.

        Returns:
            RenderedDocument with node tree and serialized HTML
        """
        title = report.query_text or FALLBACK_TITLE

        body = el(
            "body",
            self._build_header(report),
            el("hr", class_="header-divider"),
            el("div", "Query:", class_="section-label"),
            el("p", title, class_="query-block"),
            el("div", "Response:", class_="section-label"),
            *self._build_response(report.blocks),
            *[self._build_card(card) for card in report.resources],
            el("div", FOOTER_TEXT, class_="footer"),
        )

        root = el("html", self._build_head(title), body)
        document = RenderedDocument.from_tree(root, title=title)

        logger.debug(
            f"Built report document: {len(report.blocks)} blocks, "
            f"{len(report.resources)} cards, {len(document.html)} chars"
        )
        return document

    def _load_css(self) -> str:
        css_path = self.template_dir / "styles.css"
        if css_path.exists():
            return css_path.read_text(encoding="utf-8")
        logger.warning(f"Stylesheet not found: {css_path}")
        return ""

    # =========================================================================
    # HEAD & HEADER
    # =========================================================================

    def _build_head(self, title: str) -> Node:
        return el(
            "head",
            el("meta", charset="UTF-8"),
            el("title", title),
            el("script", raw(MATHJAX_CONFIG)),
            el("script", src=self.settings.MATHJAX_URL),
            el("style", raw(self._css)),
        )

    def _build_header(self, report: ReportInput) -> Node:
        logo = report.metadata.logo or self.settings.DEFAULT_LOGO_URL
        return el(
            "div",
            el(
                "div",
                el("img", src=logo, alt="Logo", class_="logo"),
                el("span", self.settings.INSTITUTION_NAME, class_="institution"),
                class_="logo-line",
            ),
            el("div", self._header_timestamp(report.metadata.timestamp), class_="timestamp"),
            class_="report-header",
        )

    def _header_timestamp(self, raw_timestamp: Optional[str]) -> str:
        moment = None
        if raw_timestamp:
            moment = parse_timestamp(raw_timestamp)
            if moment is None:
                logger.warning(f"Unparseable metadata.timestamp {raw_timestamp!r}, using current time")
        if moment is None:
            moment = self.clock()
            if moment.tzinfo is None:
                moment = moment.replace(tzinfo=timezone.utc)
        return format_report_timestamp(moment.astimezone(self._timezone()))

    def _timezone(self):
        try:
            return ZoneInfo(self.settings.REPORT_TIMEZONE)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown REPORT_TIMEZONE {self.settings.REPORT_TIMEZONE!r}, using UTC")
            return timezone.utc

    # =========================================================================
    # RESPONSE BLOCKS
    # =========================================================================

    def _build_response(self, blocks) -> List[Node]:
        nodes: List[Node] = []
        for block in blocks:
            nodes.extend(self.render_block(block))
        return nodes

    def render_block(self, block: ContentBlock) -> List[Node]:
        """
        Render every populated field of a block, in fixed order:
        heading, subheading, paragraph, bold, bullet, latex, callout, quote.
        """
        nodes: List[Node] = []
        if block.heading:
            nodes.append(el("h1", block.heading))
        if block.subheading:
            nodes.append(el("h2", block.subheading))
        if block.paragraph:
            nodes.append(el("p", block.paragraph))
        if block.bold:
            nodes.append(el("p", el("strong", block.bold)))
        if block.bullet is not None:
            nodes.append(el("ul", *[el("li", item) for item in block.bullet]))
        if block.latex:
            latex = strip_display_delimiters(block.latex)
            nodes.append(el("p", el("span", f"\\({latex}\\)")))
        if block.callout:
            nodes.append(el("div", block.callout.content or "", class_="callout"))
        if block.quote:
            nodes.append(el("div", f'"{block.quote.content or ""}"', class_="quote"))
            nodes.append(el("div", f"– {block.quote.author or ''}", class_="quote-author"))
        return nodes

    # =========================================================================
    # RESOURCE CARDS
    # =========================================================================

    def _build_card(self, card: ResourceCard) -> Node:
        return el(
            "div",
            el("p", card.script or ""),
            el(
                "a",
                f"{card.category.label}: {card.title or ''}",
                href=card.link or "",
                class_="test-link",
            ),
            class_="test-box",
        )

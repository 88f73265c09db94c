"""
Topic extraction and output file naming.
"""

import re
from datetime import datetime, timezone
from typing import Optional

FALLBACK_TOPIC = "report"

# Topic ends up in a Content-Disposition header and on disk
UNSAFE_TOPIC_CHARS = re.compile(r"[^a-z0-9_-]")


def extract_topic(query_text: Optional[str]) -> str:
    """
    Derive a short filename token from the query.

    First whitespace-separated word longer than 3 characters, lower-cased
    and stripped to ASCII [a-z0-9_-]. Words with nothing left are skipped.
    Falls back to "report".
    """
    if not query_text:
        return FALLBACK_TOPIC
    for word in query_text.lower().split():
        if len(word) <= 3:
            continue
        token = UNSAFE_TOPIC_CHARS.sub("", word)
        if token:
            return token
    return FALLBACK_TOPIC


def export_timestamp(now: Optional[datetime] = None) -> str:
    """UTC ISO timestamp with milliseconds, made filesystem-safe."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    iso = now.strftime("%Y-%m-%dT%H:%M:%S") + f".{now.microsecond // 1000:03d}Z"
    return iso.replace(":", "-").replace(".", "-")


def build_filename(topic: str, now: Optional[datetime] = None) -> str:
    """e.g. explain_report_2026-10-19T03-45-12-345Z.pdf"""
    return f"{topic}_report_{export_timestamp(now)}.pdf"

#!/usr/bin/env python3
"""
Render a Session Report Locally

Render a report JSON file to PDF (or HTML) without running the API.

Usage:
    python scripts/render_report.py input.json
    python scripts/render_report.py input.json -o output/ --html-only
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from tutor_report.content import extract_topic, validate_report
from tutor_report.errors import ReportError
from tutor_report.reporter import ReportGenerator


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(),
        ]
    )


async def render(input_file: Path, output_dir: Path, html_only: bool) -> int:
    """Render one report file. Returns a process exit code."""
    logger = logging.getLogger("render_report")

    try:
        payload = json.loads(input_file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not read {input_file}: {e}")
        return 2

    generator = ReportGenerator()

    try:
        if html_only:
            report_input = validate_report(payload)
            document = generator.builder.build(report_input)
            output_dir.mkdir(parents=True, exist_ok=True)
            html_path = output_dir / f"{extract_topic(report_input.query_text)}_report.html"
            html_path.write_text(document.html, encoding="utf-8")
            logger.info(f"Saved HTML: {html_path}")
            return 0

        report = await generator.generate(payload)
    except ReportError as e:
        logger.error(f"{e.message}: {e.details or ''}")
        return 1

    path = generator.save_report(report, str(output_dir))
    print(f"{path} ({report.page_count} pages, {len(report.pdf_bytes)} bytes)")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Render a session report JSON file to PDF")
    parser.add_argument("input", type=Path, help="Report JSON file")
    parser.add_argument("-o", "--output", type=Path, default=Path("output"), help="Output directory")
    parser.add_argument("--html-only", action="store_true", help="Write the HTML document instead of a PDF")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    args = parser.parse_args()

    load_dotenv()
    setup_logging(args.verbose)

    sys.exit(asyncio.run(render(args.input, args.output, args.html_only)))


if __name__ == "__main__":
    main()

"""
Tutor Report PDF Service

Turns a tutoring session report (JSON) into a styled PDF:
1. Validates the report input into a content model
2. Builds the HTML document (MathJax for math notation)
3. Renders it in headless Chromium and waits for typesetting
4. Exports an A4 PDF
"""

__version__ = "0.1.0"

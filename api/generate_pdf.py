"""
API Endpoint for Session Report PDFs

FastAPI app that:
1. Receives a tutoring session report (JSON) on POST /api/generate-pdf
2. Renders it in headless Chromium with MathJax typesetting
3. Returns the PDF as a download

Also serves the static upload page and a health check.
"""

import json
import logging
import sys
from datetime import datetime
from functools import lru_cache
from pathlib import Path

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse, Response

from tutor_report import __version__
from tutor_report.errors import MethodNotAllowed, ReportError, SchemaError
from tutor_report.render import get_engine_provider
from tutor_report.reporter import ReportGenerator
from tutor_report.utils.config import get_settings

settings = get_settings()

# Configure logging to stdout
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
    force=True,
)
logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent.parent / "static"

# Create FastAPI app
app = FastAPI(
    title="Tutor Report PDF Service",
    description="Converts tutoring session reports into MathJax-typeset PDFs",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


# ============================================================================
# ERROR HANDLING
# ============================================================================

@app.exception_handler(ReportError)
async def report_error_handler(request: Request, exc: ReportError):
    """Render every ReportError as a structured JSON body."""
    if exc.status_code >= 500:
        logger.error(f"Error generating PDF: {exc}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# ============================================================================
# DEPENDENCIES
# ============================================================================

@lru_cache
def get_report_generator() -> ReportGenerator:
    """Shared generator; each call to generate() still gets its own browser."""
    return ReportGenerator(settings=settings)


# ============================================================================
# API ENDPOINTS
# ============================================================================

@app.get("/")
@app.get("/index.html")
async def index():
    """Serve the upload page."""
    index_path = STATIC_DIR / "index.html"
    if not index_path.exists():
        return PlainTextResponse("index.html not found", status_code=404)
    return FileResponse(index_path, media_type="text/html")


@app.get("/api/health")
async def health():
    """Health check with engine strategy."""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": __version__,
        "environment": settings.ENVIRONMENT,
        "engine": get_engine_provider().name,
    }


@app.post("/api/generate-pdf")
async def generate_pdf(
    request: Request,
    generator: ReportGenerator = Depends(get_report_generator),
):
    """
    Generate a PDF from a session report.

    Returns:
        application/pdf attachment named <topic>_report_<timestamp>.pdf
    """
    body = await request.body()
    if not body.strip():
        raise SchemaError(message="No input data provided")

    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise SchemaError(f"Request body is not valid JSON: {e}")

    report = await generator.generate(payload)
    logger.info(f"Sending {report.filename} ({len(report.pdf_bytes)} bytes, {report.page_count} pages)")

    return Response(
        content=report.pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{report.filename}"',
            "Content-Length": str(len(report.pdf_bytes)),
        },
    )


@app.api_route("/api/generate-pdf", methods=["GET", "PUT", "PATCH", "DELETE"])
async def generate_pdf_wrong_method():
    raise MethodNotAllowed()


@app.options("/{path:path}")
async def preflight(path: str):
    """Answer bare OPTIONS requests (CORS preflights are handled by the middleware)."""
    return Response(status_code=200)


# ============================================================================
# RUN SERVER
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.generate_pdf:app",
        host="0.0.0.0",
        port=settings.PORT,
    )

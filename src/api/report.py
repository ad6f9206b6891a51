"""PDF report endpoint."""

import logging

from fastapi import APIRouter, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from src.api.analyze import read_json_object
from src.models.analysis_models import ReportRequest
from src.services.report_renderer import RenderError, render_report, report_filename

logger = logging.getLogger(__name__)
router = APIRouter()

RENDER_FAILURE_MESSAGE = "PDF could not be generated."


@router.post("/pdf")
async def create_pdf(request: Request):
    """Render title/content into a downloadable PDF."""
    report = ReportRequest.model_validate(await read_json_object(request))

    try:
        # PyMuPDF layout is CPU-bound; keep it off the event loop
        pdf_bytes = await run_in_threadpool(render_report, report.title, report.content)
    except RenderError as e:
        logger.error("PDF rendering failed: %s", e)
        return JSONResponse(status_code=500, content={"error": RENDER_FAILURE_MESSAGE})

    filename = report_filename(report.title)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

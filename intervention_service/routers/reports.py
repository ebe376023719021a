"""Report and outreach export endpoints."""

from datetime import date
from typing import Optional
from aiocache import Cache
from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import Response
import structlog

from intervention_service.analytics.analysis_engine import AnalysisEngine
from intervention_service.core.config import settings
from intervention_service.core.dependencies import get_analysis_cache, get_analysis_engine
from intervention_service.reports.outreach import OutreachScriptGenerator, outreach_filename
from intervention_service.reports.workbook import (
    XLSX_MEDIA_TYPE,
    attention_workbook_filename,
    build_attention_workbook,
)
from intervention_service.routers.uploads import (
    cached_analysis,
    ensure_course,
    load_directory,
    load_learner_rows,
)

logger = structlog.get_logger()
router = APIRouter(tags=["reports"])


def _attachment(filename: str) -> dict:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


@router.post("/workbook")
async def download_attention_workbook(
    file: UploadFile = File(...),
    current_week: int = Form(..., ge=1, le=settings.MAX_PROGRAM_WEEK),
    course: Optional[str] = Form(None),
    directory: Optional[UploadFile] = File(None),
    engine: AnalysisEngine = Depends(get_analysis_engine),
    cache: Cache = Depends(get_analysis_cache)
):
    """Excel workbook of learners needing attention."""
    rows, digest = await load_learner_rows(file)
    ensure_course(engine, rows, course)
    learner_directory = await load_directory(directory)

    result = await cached_analysis(engine, cache, rows, digest, current_week, course)
    today = date.today()

    logger.info("Attention workbook served", current_week=current_week, course=course)

    return Response(
        content=build_attention_workbook(result, learner_directory, today),
        media_type=XLSX_MEDIA_TYPE,
        headers=_attachment(attention_workbook_filename(today))
    )


@router.post("/outreach")
async def download_outreach_scripts(
    file: UploadFile = File(...),
    current_week: int = Form(..., ge=1, le=settings.MAX_PROGRAM_WEEK),
    course: Optional[str] = Form(None),
    directory: Optional[UploadFile] = File(None),
    engine: AnalysisEngine = Depends(get_analysis_engine),
    cache: Cache = Depends(get_analysis_cache)
):
    """Markdown Slack outreach scripts grouped by course."""
    rows, digest = await load_learner_rows(file)
    ensure_course(engine, rows, course)
    learner_directory = await load_directory(directory)

    result = await cached_analysis(engine, cache, rows, digest, current_week, course)
    script = OutreachScriptGenerator(learner_directory).generate(result)
    logger.info("Outreach scripts served", current_week=current_week, course=course)

    return Response(
        content=script,
        media_type="text/markdown; charset=utf-8",
        headers=_attachment(outreach_filename(date.today()))
    )

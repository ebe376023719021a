"""Learner analysis endpoints."""

from typing import Any, Dict, List, Optional
from aiocache import Cache
from fastapi import APIRouter, Depends, File, Form, UploadFile
import structlog

from intervention_service.analytics.analysis_engine import AnalysisEngine
from intervention_service.analytics.insights import generate_insights
from intervention_service.analytics.normalization import rows_for_course
from intervention_service.core.config import settings
from intervention_service.core.dependencies import get_analysis_cache, get_analysis_engine
from intervention_service.models.analysis import AnalysisResult, CourseOverview
from intervention_service.routers.uploads import (
    cached_analysis,
    ensure_course,
    load_directory,
    load_learner_rows,
)

logger = structlog.get_logger()
router = APIRouter(tags=["analysis"])


@router.post("", response_model=AnalysisResult)
async def analyze_upload(
    file: UploadFile = File(...),
    current_week: int = Form(..., ge=1, le=settings.MAX_PROGRAM_WEEK),
    course: Optional[str] = Form(None),
    engine: AnalysisEngine = Depends(get_analysis_engine),
    cache: Cache = Depends(get_analysis_cache)
):
    """Classify and aggregate an uploaded progress sheet."""
    rows, digest = await load_learner_rows(file)
    ensure_course(engine, rows, course)

    return await cached_analysis(engine, cache, rows, digest, current_week, course)


@router.post("/courses", response_model=Dict[str, Any])
async def list_courses(
    file: UploadFile = File(...),
    engine: AnalysisEngine = Depends(get_analysis_engine)
):
    """List the courses present in an uploaded progress sheet."""
    rows, _ = await load_learner_rows(file)

    return {
        "courses": engine.available_courses(rows),
        "rows": len(rows)
    }


@router.post("/overview", response_model=List[CourseOverview])
async def course_overview(
    file: UploadFile = File(...),
    current_week: int = Form(..., ge=1, le=settings.MAX_PROGRAM_WEEK),
    engine: AnalysisEngine = Depends(get_analysis_engine)
):
    """Analyze every course in the upload separately for side-by-side comparison."""
    rows, _ = await load_learner_rows(file)
    overview = engine.analyze_all_courses(rows, current_week)

    logger.info("Course overview served", courses=len(overview), current_week=current_week)
    return overview


@router.post("/insights", response_model=Dict[str, Any])
async def analysis_insights(
    file: UploadFile = File(...),
    current_week: int = Form(..., ge=1, le=settings.MAX_PROGRAM_WEEK),
    course: Optional[str] = Form(None),
    directory: Optional[UploadFile] = File(None),
    engine: AnalysisEngine = Depends(get_analysis_engine),
    cache: Cache = Depends(get_analysis_cache)
):
    """Headline metrics, course ranking and recommendations for an upload."""
    rows, digest = await load_learner_rows(file)
    ensure_course(engine, rows, course)
    learner_directory = await load_directory(directory) if directory is not None else None

    result = await cached_analysis(engine, cache, rows, digest, current_week, course)
    scoped_rows = rows_for_course(rows, course) if course else rows

    insights = generate_insights(result, scoped_rows, learner_directory)

    logger.info(
        "Insights served",
        current_week=current_week,
        course=course,
        directory_loaded=learner_directory is not None
    )
    return insights

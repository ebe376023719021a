"""Upload handling shared by the analysis and report endpoints."""

from typing import List, Optional, Tuple
from aiocache import Cache
from fastapi import HTTPException, UploadFile, status
import structlog

from intervention_service.analytics.analysis_engine import AnalysisEngine
from intervention_service.core.config import settings
from intervention_service.core.dependencies import analysis_cache_key, upload_digest
from intervention_service.core.logging import bind_upload_context
from intervention_service.ingest.parser import (
    EmptyUploadError,
    UploadError,
    parse_directory_upload,
    parse_learner_upload,
)
from intervention_service.models.analysis import AnalysisResult
from intervention_service.models.learner import LearnerRecord
from intervention_service.reports.directory import LearnerDirectory

logger = structlog.get_logger()


async def read_upload(file: UploadFile) -> bytes:
    """Read an uploaded file, enforcing the configured size limit."""
    content = await file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds {settings.MAX_UPLOAD_BYTES} bytes"
        )
    return content


async def load_learner_rows(file: UploadFile) -> Tuple[List[LearnerRecord], str]:
    """Parse a progress upload, returning its rows and content digest."""
    content = await read_upload(file)
    try:
        rows = parse_learner_upload(file.filename or "", content)
    except EmptyUploadError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except UploadError as e:
        logger.warning("Rejected learner upload", filename=file.filename, error=str(e))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    digest = upload_digest(content)
    bind_upload_context(file.filename or "", digest)
    return rows, digest


async def load_directory(file: Optional[UploadFile]) -> LearnerDirectory:
    """Parse an optional learner directory upload."""
    if file is None:
        return LearnerDirectory()

    content = await read_upload(file)
    try:
        entries = parse_directory_upload(file.filename or "", content)
    except UploadError as e:
        logger.warning("Rejected directory upload", filename=file.filename, error=str(e))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return LearnerDirectory(entries)


def ensure_course(engine: AnalysisEngine, rows: List[LearnerRecord], course: Optional[str]) -> None:
    """404 when a course filter names a course absent from the upload."""
    if course and course not in engine.available_courses(rows):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Course '{course}' not found")


async def cached_analysis(
    engine: AnalysisEngine,
    cache: Cache,
    rows: List[LearnerRecord],
    digest: str,
    current_week: int,
    course: Optional[str]
) -> AnalysisResult:
    """Analyze rows, reusing a cached result for the same upload, week and course."""
    key = analysis_cache_key(digest, current_week, course)

    cached = await cache.get(key)
    if cached is not None:
        logger.debug("Analysis cache hit", key=key)
        return AnalysisResult.model_validate_json(cached)

    result = engine.analyze(rows, current_week, course=course)
    await cache.set(key, result.model_dump_json(), ttl=settings.CACHE_TTL)
    return result

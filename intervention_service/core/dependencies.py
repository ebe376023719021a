"""Shared dependencies for the Learner Intervention Service."""

import hashlib
from typing import Optional
from aiocache import Cache
import structlog

from intervention_service.analytics.analysis_engine import AnalysisEngine, policy_from_settings
from intervention_service.core.config import settings

logger = structlog.get_logger()

# Global instances
_analysis_cache: Optional[Cache] = None
_analysis_engine: Optional[AnalysisEngine] = None


async def get_analysis_cache() -> Cache:
    """Get the analysis result cache, in-memory unless CACHE_URL is set."""
    global _analysis_cache

    if _analysis_cache is None:
        if settings.CACHE_URL:
            try:
                _analysis_cache = Cache.from_url(settings.CACHE_URL)
                await _analysis_cache.exists("health_check")  # Test connection
                logger.info("Analysis cache connection established")
            except Exception as e:
                logger.warning(f"Analysis cache not available: {e}")
                _analysis_cache = None

        if _analysis_cache is None:
            _analysis_cache = Cache(Cache.MEMORY)

    return _analysis_cache


def get_analysis_engine() -> AnalysisEngine:
    """Get the shared analysis engine configured from settings."""
    global _analysis_engine

    if _analysis_engine is None:
        _analysis_engine = AnalysisEngine(policy_from_settings(settings))

    return _analysis_engine


def upload_digest(content: bytes) -> str:
    """Content hash identifying one uploaded file."""
    return hashlib.sha256(content).hexdigest()


def analysis_cache_key(digest: str, current_week: int, course: Optional[str]) -> str:
    """Cache key for an analysis of one upload at one week and course filter."""
    return f"analysis:{digest}:{current_week}:{course or '*'}"

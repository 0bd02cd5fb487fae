"""
FastAPI dependency injection.
Provides the result sink, the analyzer, and API key validation.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from app.config import settings
from app.pipeline.orchestrator import DocumentAnalyzer
from app.storage.base import ResultSink


# ── Singleton instances ──────────────────────────────────────
_result_sink: Optional[ResultSink] = None


def build_result_sink(kind: str) -> ResultSink:
    """Create the sink named by RESULT_SINK."""
    if kind == "memory":
        from app.storage.memory_sink import MemoryResultSink
        return MemoryResultSink()
    if kind == "sql":
        from app.storage.sql_sink import SqlResultSink
        return SqlResultSink()
    raise ValueError(f"Unknown RESULT_SINK: {kind!r} (expected 'sql' or 'memory')")


def get_result_sink() -> ResultSink:
    """Get or create the result sink singleton."""
    global _result_sink
    if _result_sink is None:
        _result_sink = build_result_sink(settings.RESULT_SINK)
    return _result_sink


def get_analyzer(sink: ResultSink = Depends(get_result_sink)) -> DocumentAnalyzer:
    return DocumentAnalyzer(sink)


async def verify_api_key(
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
) -> Optional[str]:
    """
    Verify API key if configured.
    If API_KEY is not set, all requests are allowed (dev mode).
    """
    if settings.API_KEY is None:
        return None

    if x_api_key is None or x_api_key != settings.API_KEY:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
        )
    return x_api_key

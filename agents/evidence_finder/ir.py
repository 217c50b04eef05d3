from common.config import Config
from common.http import error_response
from common.logging import logger
from common.models import SearchForm, SearchResults
from agents.evidence_finder.pipeline import EvidenceSearchPipeline
from typing import Dict, Any
from pydantic import field_validator
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

router = APIRouter()

MIN_FACT_PATTERN_CHARS = 20


class SearchRequest(SearchForm):
    """Search form as submitted over HTTP, validated before the pipeline runs."""

    @field_validator("rule", "court_id")
    @classmethod
    def _required(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be empty")
        return value.strip()

    @field_validator("fact_pattern")
    @classmethod
    def _fact_pattern_length(cls, value: str) -> str:
        if len((value or "").strip()) < MIN_FACT_PATTERN_CHARS:
            raise ValueError(
                f"add a short fact pattern (at least {MIN_FACT_PATTERN_CHARS} characters)")
        return value.strip()


def get_pipeline() -> EvidenceSearchPipeline:
    return EvidenceSearchPipeline()


@router.post("/api/cases/search", response_model=SearchResults, response_model_exclude_none=True)
async def search_cases(request: SearchRequest, pipeline: EvidenceSearchPipeline = Depends(get_pipeline)):
    try:
        return await pipeline.run(request)
    except Exception:
        logger.exception("Evidence search failed")
        return JSONResponse(status_code=500, content=error_response("search_failed", "Search failed"))


@router.get("/health")
async def health() -> Dict[str, Any]:
    return {
        "status": "ok",
        "providers": {
            "exa": bool(Config.EXA_API_KEY),
            "courtlistener": bool(Config.COURTLISTENER_API_TOKEN),
        },
    }

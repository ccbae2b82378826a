"""ASO_Scores - FastAPI server exposing the scores over HTTP."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Union

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from aso.config import AppConfig
from aso.schemas import (
    KeywordScores,
    Strategy,
    SuggestionResult,
    SuggestOptions,
    VisibilityScore,
)
from aso.service import AsoService
from aso.utils.exceptions import (
    InvalidInputError,
    InvalidStrategyError,
    NoDataError,
    UpstreamError,
)
from aso.utils.logger import setup_logging

logger = logging.getLogger(__name__)


class SuggestRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    seed: Union[str, int, list[Union[str, int]]]
    strategy: str = Strategy.CATEGORY.value
    num: int = Field(default=30, ge=1)
    exclude: list[str] = Field(default_factory=list)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the marketplace store on startup, close it on shutdown."""
    config = AppConfig()
    setup_logging(config.log_level)
    if not hasattr(app.state, "service"):
        app.state.service = AsoService.from_config(config)
    logger.info("ASO_Scores server started")
    yield
    await app.state.service.aclose()
    logger.info("ASO_Scores server stopped")


app = FastAPI(title="ASO_Scores", lifespan=lifespan)


def _service(request: Request) -> AsoService:
    return request.app.state.service


@app.exception_handler(InvalidStrategyError)
@app.exception_handler(InvalidInputError)
async def _bad_request(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse({"detail": str(exc)}, status_code=400)


@app.exception_handler(NoDataError)
async def _no_data(request: Request, exc: NoDataError) -> JSONResponse:
    return JSONResponse({"detail": str(exc)}, status_code=404)


@app.exception_handler(UpstreamError)
async def _upstream(request: Request, exc: UpstreamError) -> JSONResponse:
    logger.error("Upstream failure on %s: %s", request.url.path, exc)
    return JSONResponse({"detail": str(exc)}, status_code=502)


@app.get("/health")
async def health() -> JSONResponse:
    return JSONResponse({"status": "ok"})


@app.get("/scores/{keyword}", response_model=KeywordScores, response_model_by_alias=True)
async def keyword_scores(keyword: str, request: Request) -> KeywordScores:
    return await _service(request).scores(keyword)


@app.get(
    "/visibility/{app_id}",
    response_model=VisibilityScore,
    response_model_by_alias=True,
)
async def visibility(app_id: str, request: Request) -> VisibilityScore:
    return await _service(request).visibility(app_id)


@app.get("/apps/{app_id}/keywords")
async def app_keywords(app_id: str, request: Request) -> list[str]:
    return await _service(request).app_keywords(app_id)


@app.post("/suggest", response_model=SuggestionResult)
async def suggest(body: SuggestRequest, request: Request) -> SuggestionResult:
    options = SuggestOptions(num=body.num, exclude=body.exclude)
    return await _service(request).suggest(body.seed, body.strategy, options)

"""Tests for the FastAPI surface with the service mocked."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from aso.main import app
from aso.schemas import Strategy, SuggestionResult
from aso.utils.exceptions import InvalidInputError, NoDataError, UpstreamError


@pytest.fixture
def service() -> MagicMock:
    mock = MagicMock()
    mock.aclose = AsyncMock()
    mock.app_keywords = AsyncMock(return_value=["chess", "puzzles"])
    mock.suggest = AsyncMock(return_value=SuggestionResult(
        strategy=Strategy.KEYWORDS, keywords=["chess"],
    ))
    app.state.service = mock
    return mock


class TestApi:
    def test_health(self, service: MagicMock):
        with TestClient(app) as client:
            assert client.get("/health").json() == {"status": "ok"}

    def test_app_keywords(self, service: MagicMock):
        with TestClient(app) as client:
            response = client.get("/apps/123/keywords")
        assert response.json() == ["chess", "puzzles"]
        service.app_keywords.assert_awaited_once_with("123")

    def test_suggest(self, service: MagicMock):
        with TestClient(app) as client:
            response = client.post("/suggest", json={
                "seed": ["chess"], "strategy": "keywords", "num": 5,
            })
        assert response.status_code == 200
        assert response.json()["keywords"] == ["chess"]
        args = service.suggest.await_args.args
        assert args[0] == ["chess"] and args[1] == "keywords"
        assert args[2].num == 5

    @pytest.mark.parametrize("seed", [284882215, [1, "com.chess.pro"]])
    def test_suggest_accepts_numeric_app_ids(self, service: MagicMock, seed):
        with TestClient(app) as client:
            response = client.post("/suggest", json={"seed": seed, "strategy": "similar"})
        assert response.status_code == 200
        assert service.suggest.await_args.args[0] == seed

    @pytest.mark.parametrize("exc,status", [
        (InvalidInputError("list required"), 400),
        (NoDataError("nothing"), 404),
        (UpstreamError("store down"), 502),
    ])
    def test_error_mapping(self, service: MagicMock, exc: Exception, status: int):
        service.suggest.side_effect = exc
        with TestClient(app) as client:
            response = client.post("/suggest", json={"seed": "123"})
        assert response.status_code == status

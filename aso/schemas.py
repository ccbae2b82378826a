"""ASO_Scores - Pydantic data contracts.

All models use strict validation (extra="forbid") and are frozen: every
transformation produces a new value.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from aso.scoring import calc


# ---------------------------------------------------------------------------
# Marketplace records
# ---------------------------------------------------------------------------

class AppRecord(BaseModel):
    """Snapshot of one marketplace app.

    ``description`` is None for summary hits (charts, plain search results)
    that were not fetched with full detail.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    title: str
    description: Optional[str] = None
    summary: Optional[str] = None
    free: bool = True
    installs: int = 0
    reviews: int = 0
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    updated: Optional[datetime] = None
    genre_id: Optional[str] = None
    url: Optional[str] = None

    @field_validator("id", "genre_id", mode="before")
    @classmethod
    def _stringify_id(cls, value: object) -> object:
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("updated", mode="before")
    @classmethod
    def _parse_updated(cls, value: object) -> object:
        """Accept ISO strings, datetimes and epoch-milliseconds numbers."""
        if value is None or value == "":
            return None
        if isinstance(value, bool):
            raise ValueError("updated must be a timestamp")
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        return value

    @field_validator("updated")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def has_detail(self) -> bool:
        return self.description is not None


class CollectionQuery(BaseModel):
    """A chart listing request: (collection, category) with a page size."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    collection: str
    category: Optional[str] = None
    num: int = Field(..., ge=1)

    def without_category(self) -> CollectionQuery:
        return self.model_copy(update={"category": None})


# ---------------------------------------------------------------------------
# Difficulty breakdown
# ---------------------------------------------------------------------------

class _Frozen(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class TitleMatchStats(_Frozen):
    exact: int = 0
    broad: int = 0
    partial: int = 0
    none: int = 0
    score: float


class CompetitorStats(_Frozen):
    count: int = Field(..., ge=0)
    score: float


class InstallsStats(_Frozen):
    avg: float
    score: float


class RatingStats(_Frozen):
    avg: float
    score: float


class AgeStats(_Frozen):
    avg_days_since_updated: Optional[float] = None
    score: float


class DifficultyScore(_Frozen):
    """How hard a keyword is to rank for, 1 (easy) - 10 (hard)."""

    # title, competitors, installs, rating, age
    WEIGHTS: ClassVar[tuple[int, ...]] = (4, 3, 5, 2, 1)

    title_matches: TitleMatchStats
    competitors: CompetitorStats
    installs: InstallsStats
    rating: RatingStats
    age: AgeStats
    score: float

    def recompute(self) -> float:
        return calc.aggregate(self.WEIGHTS, [
            self.title_matches.score,
            self.competitors.score,
            self.installs.score,
            self.rating.score,
            self.age.score,
        ])


# ---------------------------------------------------------------------------
# Traffic breakdown
# ---------------------------------------------------------------------------

class SuggestStats(_Frozen):
    length: Optional[int] = None
    index: Optional[int] = None
    score: float


class LengthStats(_Frozen):
    length: int
    score: float


class RankedStats(_Frozen):
    count: int = 0
    avg_rank: Optional[float] = None
    score: float


class TrafficScore(_Frozen):
    """Estimated search volume of a keyword, 1 (low) - 10 (high)."""

    # suggest, length, installs, ranked
    WEIGHTS: ClassVar[tuple[int, ...]] = (8, 1, 2, 3)

    suggest: SuggestStats
    length: LengthStats
    installs: InstallsStats
    ranked: RankedStats
    score: float

    def recompute(self) -> float:
        return calc.aggregate(self.WEIGHTS, [
            self.suggest.score,
            self.length.score,
            self.installs.score,
            self.ranked.score,
        ])


class KeywordScores(_Frozen):
    keyword: str
    difficulty: DifficultyScore
    traffic: TrafficScore


# ---------------------------------------------------------------------------
# Visibility breakdown
# ---------------------------------------------------------------------------

class KeywordVisibility(_Frozen):
    traffic: float
    rank: int = Field(..., ge=1)
    score: float


class CollectionRank(_Frozen):
    rank: Optional[int] = None
    score: float = 0.0


class CollectionScores(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    global_: CollectionRank = Field(..., alias="global")
    category: CollectionRank


class VisibilityScore(_Frozen):
    """Unbounded visibility of one app: keyword scores plus chart scores."""

    app_id: str
    keywords: dict[str, KeywordVisibility] = Field(default_factory=dict)
    collections: CollectionScores
    score: float


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------

class Strategy(str, Enum):
    SIMILAR = "similar"
    COMPETITION = "competition"
    CATEGORY = "category"
    ARBITRARY = "arbitrary"
    KEYWORDS = "keywords"
    SEARCH = "search"


class SuggestOptions(_Frozen):
    num: int = Field(default=30, ge=1)
    exclude: list[str] = Field(default_factory=list)


class SuggestionResult(_Frozen):
    strategy: Strategy
    keywords: list[str] = Field(default_factory=list)

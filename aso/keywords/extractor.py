"""ASO_Scores - Free-text keyword extraction.

Words and short phrases are mined with scikit-learn's text analyzer
(English stop words, 1-3 grams) and ranked by relative frequency, with
multi-word phrases boosted over single words.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Callable

from pydantic import BaseModel, ConfigDict
from sklearn.feature_extraction.text import CountVectorizer

logger = logging.getLogger(__name__)

MAX_KEYWORDS = 20
MAX_PHRASE_WORDS = 3
MIN_PHRASE_OCCURRENCES = 2
PHRASE_BOOST = 2.5

_CONTRACTIONS = re.compile(r"'(t|s|ll|re|ve)\b", re.IGNORECASE)


class Keyword(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    value: str
    score: float


class KeywordExtractor:
    """Rank the salient words and phrases of a block of text.

    Output is deterministic: ties keep first-occurrence order.
    """

    def __init__(self, maximum: int = MAX_KEYWORDS) -> None:
        self._maximum = maximum
        self._analyze: Callable[[str], list[str]] = CountVectorizer(
            stop_words="english",
            ngram_range=(1, MAX_PHRASE_WORDS),
            lowercase=True,
        ).build_analyzer()

    def extract_scored(self, text: str) -> list[Keyword]:
        """Return keywords with their relevance, most relevant first."""
        clean = _CONTRACTIONS.sub("", text or "")
        counts = Counter(self._analyze(clean))
        if not counts:
            return []

        words = [(t, c) for t, c in counts.items() if " " not in t]
        phrases = [
            (t, c) for t, c in counts.items()
            if " " in t and c >= MIN_PHRASE_OCCURRENCES
        ]
        top = max((c for _, c in words), default=1)

        words = sorted(words, key=lambda item: -item[1])[: self._maximum]
        phrases = sorted(phrases, key=lambda item: -item[1])[: self._maximum]

        keywords = [
            Keyword(value=t, score=c / top) for t, c in words if len(t) > 1
        ]
        keywords.extend(
            Keyword(value=t, score=c / top * PHRASE_BOOST) for t, c in phrases
        )
        return sorted(keywords, key=lambda kw: -kw.score)

    def extract(self, text: str) -> list[str]:
        """Return keyword values only, most relevant first."""
        return [kw.value for kw in self.extract_scored(text)]

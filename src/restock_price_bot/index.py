"""
Weighted fuzzy search over catalog products.

Each product is matched on three fields (full name, TCGplayer's clean name
and the set name). A field counts as a hit when its similarity clears the
threshold; hits are combined into one score per product, weighted by field.

Scoring follows Fuse.js conventions so thresholds carry over: scores run
from 0 (perfect) to 1 (anything), and the threshold is the highest score
still accepted.
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

from rapidfuzz import fuzz, process, utils

from .models import ProductWithPrice
from .normalizer import normalize

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.4
DEFAULT_MIN_MATCH_CHAR_LENGTH = 3
DEFAULT_WEIGHTS: dict[str, float] = {
    "name": 0.7,
    "clean_name": 0.5,
    "group_name": 0.3,
}

# Stands in for a zero distance so an exact hit doesn't zero out the product
EPSILON = 1e-3


@dataclass
class SearchHit:
    """A matched record and its combined score (lower is better)."""

    record: ProductWithPrice
    score: float
    position: int


def preprocess(text: str) -> str:
    """Lowercase, turn punctuation into spaces and collapse whitespace."""
    return " ".join(utils.default_process(text).split())


def query_terms(query: str, min_length: int = DEFAULT_MIN_MATCH_CHAR_LENGTH) -> str:
    """Drop query terms too short to score on."""
    return " ".join(term for term in query.split() if len(term) >= min_length)


class CatalogIndex:
    """
    Immutable fuzzy index over a list of ProductWithPrice records.

    Field strings are preprocessed once at build time; queries are scored
    against every field with rapidfuzz's WRatio (edit distance plus partial
    and token-order tolerant alignment).
    """

    def __init__(
        self,
        records: Sequence[ProductWithPrice],
        threshold: float = DEFAULT_THRESHOLD,
        min_match_char_length: int = DEFAULT_MIN_MATCH_CHAR_LENGTH,
        weights: dict[str, float] | None = None,
    ):
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"threshold must be between 0 and 1, got {threshold}")

        self.records: tuple[ProductWithPrice, ...] = tuple(records)
        self.threshold = threshold
        self.min_match_char_length = min_match_char_length
        self.weights = dict(weights or DEFAULT_WEIGHTS)

        total_weight = sum(self.weights.values())
        self._norm_weights = {key: w / total_weight for key, w in self.weights.items()}
        self._fields: dict[str, list[str]] = {
            key: [preprocess(getattr(r, key) or "") for r in self.records]
            for key in self.weights
        }

    @classmethod
    def build(
        cls,
        records: Sequence[ProductWithPrice],
        threshold: float = DEFAULT_THRESHOLD,
        min_match_char_length: int = DEFAULT_MIN_MATCH_CHAR_LENGTH,
        weights: dict[str, float] | None = None,
    ) -> "CatalogIndex":
        """Build an index over the given records."""
        index = cls(records, threshold, min_match_char_length, weights)
        logger.debug(f"Built fuzzy index over {len(index)} products")
        return index

    def __len__(self) -> int:
        return len(self.records)

    @property
    def score_cutoff(self) -> float:
        """Minimum rapidfuzz similarity (0-100) for a field to count."""
        return (1.0 - self.threshold) * 100

    def search_with_scores(self, query: str, limit: int = 5) -> list[SearchHit]:
        """
        Find the best matching records for a query.

        Returns at most ``limit`` hits, best first. Ties keep the order of
        the source collection.
        """
        if limit <= 0 or not self.records:
            return []

        processed = preprocess(query_terms(normalize(query), self.min_match_char_length))
        if not processed:
            return []

        # position -> {field: distance}
        distances: dict[int, dict[str, float]] = {}
        for key, choices in self._fields.items():
            matches = process.extract(
                processed,
                choices,
                scorer=fuzz.WRatio,
                processor=None,
                score_cutoff=self.score_cutoff,
                limit=None,
            )
            for _choice, similarity, position in matches:
                distance = max(1.0 - similarity / 100.0, EPSILON)
                distances.setdefault(position, {})[key] = distance

        hits = [
            SearchHit(
                record=self.records[position],
                score=self._combine(field_distances),
                position=position,
            )
            for position, field_distances in distances.items()
        ]
        hits.sort(key=lambda hit: (hit.score, hit.position))
        return hits[:limit]

    def search(self, query: str, limit: int = 5) -> list[ProductWithPrice]:
        """Find the best matching records for a query, best first."""
        return [hit.record for hit in self.search_with_scores(query, limit)]

    def _combine(self, field_distances: dict[str, float]) -> float:
        """Weighted geometric combination of per-field distances."""
        log_score = sum(
            self._norm_weights[key] * math.log(distance)
            for key, distance in field_distances.items()
        )
        return math.exp(log_score)

"""
Column Classifier

Scores a raw column against every field in the catalog using three kinds of
evidence:

1. Name: exact normalized match on the field's display name or id, exact
   alias match, or a fuzzy match above a threshold (thefuzz).
2. Keywords: phrases or regexes found in the normalized column name.
3. Type: the fraction of sample values consistent with the field's
   expected type.

The weighted sum, clipped to 1.0, is the candidate's confidence.
"""

import logging
from functools import lru_cache
from typing import FrozenSet, List, Optional, Set, Tuple

from thefuzz import fuzz

from fieldmap.catalog.field_catalog import FieldCatalog, FieldDefinition
from fieldmap.config import ScoringConfig, get_config
from fieldmap.constants import MatchReason
from fieldmap.mapping.model import CandidateMatch, RawColumn
from fieldmap.mapping.type_inference import profile_samples, type_match_fraction
from fieldmap.utils.sanitize import sanitize_for_logging
from fieldmap.utils.text import normalize_name

logger = logging.getLogger(__name__)

# Minimum type-match fraction for "type_match" to be listed as a reason
TYPE_REASON_MIN_FRACTION = 0.5


@lru_cache(maxsize=None)
def _field_names(field: FieldDefinition) -> Tuple[FrozenSet[str], FrozenSet[str]]:
    """Spaced and compact forms of a field's own names and of its aliases."""
    names = set(field.normalized_names)
    names |= {n.replace(" ", "") for n in field.normalized_names}
    aliases = set(field.aliases)
    aliases |= {a.replace(" ", "") for a in field.aliases}
    return frozenset(names), frozenset(aliases)


def _keyword_hits(normalized: str, field: FieldDefinition) -> int:
    padded = f" {normalized} "
    hits = 0
    for pattern in field.keyword_patterns:
        if isinstance(pattern, str):
            if f" {pattern} " in padded:
                hits += 1
        elif pattern.search(normalized):
            hits += 1
    return hits


class ColumnClassifier:
    """Proposes scored business-field candidates for raw columns"""

    def __init__(self, scoring: Optional[ScoringConfig] = None, sample_size: Optional[int] = None):
        """
        Initialize the classifier.

        Args:
            scoring: Scoring weights (defaults to the configured weights)
            sample_size: Maximum number of sample values inspected per column
        """
        app_config = get_config()
        self.scoring = scoring or app_config.scoring
        self.sample_size = sample_size if sample_size is not None else app_config.sample_size

    def classify(self, column: RawColumn, catalog: FieldCatalog) -> Tuple[CandidateMatch, ...]:
        """
        Score a column against every catalog field.

        Args:
            column: Raw column with its sample values
            catalog: Field catalog

        Returns:
            Candidates with confidence > 0, by descending confidence; ties
            keep catalog declaration order
        """
        normalized = normalize_name(column.name)
        compact = normalized.replace(" ", "")
        samples = column.sample_values[: self.sample_size] if self.sample_size else ()
        kind_counts = profile_samples(samples)

        candidates: List[CandidateMatch] = []
        for field in catalog:
            reasons: Set[str] = set()
            score = 0.0

            name_score, name_reason = self._score_name(normalized, compact, field)
            if name_reason:
                score += self.scoring.name_weight * name_score
                reasons.add(name_reason)

            hits = _keyword_hits(normalized, field)
            if hits:
                score += min(hits * self.scoring.keyword_weight, self.scoring.keyword_cap)
                reasons.add(MatchReason.KEYWORD_MATCH)

            fraction = type_match_fraction(kind_counts, field.expected_type)
            if fraction > 0:
                score += self.scoring.type_weight * fraction
                if fraction >= TYPE_REASON_MIN_FRACTION:
                    reasons.add(MatchReason.TYPE_MATCH)

            confidence = round(min(score, 1.0), 4)
            if confidence > 0:
                candidates.append(
                    CandidateMatch(
                        field_id=field.id,
                        column_name=column.name,
                        confidence=confidence,
                        reasons=frozenset(reasons),
                    )
                )

        candidates.sort(key=lambda c: (-c.confidence, catalog.order_of(c.field_id)))

        if candidates:
            top = candidates[0]
            logger.debug(
                f"Column {sanitize_for_logging(column.name)!r}: best candidate "
                f"{top.field_id} ({top.confidence:.2f}) of {len(candidates)}"
            )
        return tuple(candidates)

    def _score_name(self, normalized: str, compact: str, field: FieldDefinition) -> Tuple[float, Optional[str]]:
        """Name component in 0.0 - 1.0 and the reason it was earned."""
        if not normalized:
            return 0.0, None

        names, aliases = _field_names(field)
        if normalized in names or compact in names:
            return 1.0, MatchReason.NAME_MATCH
        if normalized in aliases or compact in aliases:
            return self.scoring.alias_factor, MatchReason.ALIAS_MATCH

        best_ratio = 0
        best_reason = None
        for name in field.normalized_names:
            ratio = fuzz.token_sort_ratio(normalized, name)
            if ratio > best_ratio:
                best_ratio, best_reason = ratio, MatchReason.NAME_MATCH
        for alias in field.aliases:
            ratio = fuzz.token_sort_ratio(normalized, alias)
            if ratio > best_ratio:
                best_ratio, best_reason = ratio, MatchReason.ALIAS_MATCH

        if best_ratio >= self.scoring.fuzzy_threshold:
            return self.scoring.fuzzy_factor * best_ratio / 100, best_reason
        return 0.0, None


def classify(column: RawColumn, catalog: FieldCatalog) -> Tuple[CandidateMatch, ...]:
    """Classify a column with the configured default weights."""
    return ColumnClassifier().classify(column, catalog)

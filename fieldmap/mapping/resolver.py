"""
Mapping Resolver

Turns per-column candidates into a one-to-one column -> field mapping and
applies user overrides on top of an existing mapping.
"""

import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple

from fieldmap.catalog.field_catalog import FieldCatalog
from fieldmap.config import get_config
from fieldmap.exceptions import MappingConflict, UnknownColumnError, UnknownFieldError
from fieldmap.mapping.classifier import ColumnClassifier
from fieldmap.mapping.model import CandidateMatch, ColumnMapping, RawColumn
from fieldmap.utils.sanitize import sanitize_for_logging

logger = logging.getLogger(__name__)


def validate_bijection(mappings: Sequence[ColumnMapping]) -> None:
    """
    Check that no column and no field appears in more than one mapped entry.

    Raises:
        MappingConflict: On the first duplicate found
    """
    seen_columns: Set[str] = set()
    seen_fields: Set[str] = set()
    for mapping in mappings:
        if mapping.source_column in seen_columns:
            raise MappingConflict(
                f"Column {mapping.source_column!r} appears more than once",
                mapping.source_column,
                mapping.business_field,
            )
        seen_columns.add(mapping.source_column)
        if not mapping.mapped:
            continue
        if mapping.business_field in seen_fields:
            raise MappingConflict(
                f"Field {mapping.business_field!r} is mapped by more than one column",
                mapping.source_column,
                mapping.business_field,
            )
        seen_fields.add(mapping.business_field)


def _repair(mappings: List[ColumnMapping]) -> Tuple[ColumnMapping, ...]:
    """Demote later duplicates until the mapping is one-to-one."""
    while True:
        try:
            validate_bijection(mappings)
            return tuple(mappings)
        except MappingConflict as e:
            logger.warning(f"Repairing mapping conflict: {e}")
            index = max(
                i for i, m in enumerate(mappings)
                if m.source_column == e.column_name and m.business_field == e.field_id
            )
            conflicting = mappings[index]
            if conflicting.mapped:
                mappings[index] = ColumnMapping.unmapped(conflicting.source_column, conflicting.confidence)
            else:
                del mappings[index]


class MappingResolver:
    """Resolves candidates into a one-to-one mapping"""

    def __init__(self, classifier: Optional[ColumnClassifier] = None, threshold: Optional[float] = None):
        """
        Initialize the resolver.

        Args:
            classifier: Classifier used when candidates are not supplied
            threshold: Confidence a candidate must exceed to be accepted
        """
        self.classifier = classifier or ColumnClassifier()
        self.threshold = threshold if threshold is not None else get_config().acceptance_threshold

    def resolve(
        self,
        columns: Sequence[RawColumn],
        catalog: FieldCatalog,
        candidates: Optional[Sequence[Sequence[CandidateMatch]]] = None,
    ) -> Tuple[ColumnMapping, ...]:
        """
        Produce exactly one ColumnMapping per input column, in column order.

        Each column proposes only its best candidate, and only when that
        candidate exceeds the threshold. Proposals are accepted greedily by
        descending confidence (ties: earlier column, then earlier catalog
        field). A column whose proposal loses its field to a stronger column
        stays unmapped and reports its best confidence.

        Args:
            columns: Raw columns in source order
            catalog: Field catalog
            candidates: Pre-computed candidates per column (same order as
                columns); classified here when omitted

        Returns:
            Tuple of ColumnMapping aligned with columns
        """
        if candidates is None:
            candidates = [self.classifier.classify(column, catalog) for column in columns]

        if len(candidates) != len(columns):
            raise ValueError(
                f"Got candidates for {len(candidates)} columns but {len(columns)} columns were given"
            )

        pool = []
        for column_index, column_candidates in enumerate(candidates):
            best = self._best_candidate(column_candidates, catalog)
            if best is not None and best.confidence > self.threshold:
                pool.append((-best.confidence, column_index, catalog.order_of(best.field_id), best))
        pool.sort(key=lambda entry: entry[:3])

        assigned: Dict[int, CandidateMatch] = {}
        taken_fields: Set[str] = set()
        for _, column_index, _, candidate in pool:
            if column_index in assigned or candidate.field_id in taken_fields:
                continue
            assigned[column_index] = candidate
            taken_fields.add(candidate.field_id)

        mappings: List[ColumnMapping] = []
        for column_index, column in enumerate(columns):
            chosen = assigned.get(column_index)
            if chosen is not None:
                mappings.append(
                    ColumnMapping(
                        source_column=column.name,
                        business_field=chosen.field_id,
                        mapped=True,
                        confidence=chosen.confidence,
                    )
                )
            else:
                best = self._best_candidate(candidates[column_index], catalog)
                mappings.append(ColumnMapping.unmapped(column.name, best.confidence if best else 0.0))

        mapped_count = sum(1 for m in mappings if m.mapped)
        logger.info(f"Resolved {mapped_count}/{len(mappings)} columns to business fields")
        return _repair(mappings)

    @staticmethod
    def _best_candidate(
        column_candidates: Sequence[CandidateMatch], catalog: FieldCatalog
    ) -> Optional[CandidateMatch]:
        """Highest-confidence candidate whose field is in the catalog (ties: catalog order)."""
        known = [c for c in column_candidates if c.field_id in catalog]
        if not known:
            return None
        return min(known, key=lambda c: (-c.confidence, catalog.order_of(c.field_id)))

    def override(
        self,
        mappings: Sequence[ColumnMapping],
        column_name: str,
        field_id: Optional[str],
        catalog: Optional[FieldCatalog] = None,
    ) -> Tuple[ColumnMapping, ...]:
        """
        Force a column to a field, or unmap it when field_id is None.

        A column that previously held the field is demoted to unmapped. The
        input mappings are not modified.

        Args:
            mappings: Current mappings
            column_name: Source column to change
            field_id: Target field id, or None to unmap
            catalog: Catalog used to validate field_id

        Returns:
            New tuple of mappings, same length and order

        Raises:
            UnknownColumnError: If no mapping exists for column_name
            UnknownFieldError: If field_id is not in the catalog
        """
        if not any(m.source_column == column_name for m in mappings):
            raise UnknownColumnError(column_name)
        if field_id is not None and catalog is not None and field_id not in catalog:
            raise UnknownFieldError(field_id)

        updated: List[ColumnMapping] = []
        for mapping in mappings:
            if mapping.source_column == column_name:
                if field_id is None:
                    updated.append(ColumnMapping.unmapped(column_name, mapping.confidence, overridden=True))
                else:
                    updated.append(
                        ColumnMapping(
                            source_column=column_name,
                            business_field=field_id,
                            mapped=True,
                            confidence=1.0,
                            overridden=True,
                        )
                    )
            elif field_id is not None and mapping.mapped and mapping.business_field == field_id:
                logger.info(
                    f"Column {sanitize_for_logging(mapping.source_column)!r} unmapped: "
                    f"{field_id} reassigned to {sanitize_for_logging(column_name)!r}"
                )
                updated.append(ColumnMapping.unmapped(mapping.source_column, mapping.confidence))
            else:
                updated.append(mapping)

        return _repair(updated)

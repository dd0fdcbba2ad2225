"""Phenotype grouping of matched records."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from genomatch.models import MatchedRecord

GroupedRecords = dict[str, list[MatchedRecord]]


def group_by_phenotype(records: Iterable[MatchedRecord]) -> GroupedRecords:
    """Sort records by phenotype and partition them into ordered groups.

    The sort is stable, so records sharing a phenotype keep their discovery
    order.
    """

    groups: GroupedRecords = {}
    for record in sorted(records, key=lambda item: item.phenotype):
        groups.setdefault(record.phenotype, []).append(record)
    return groups


def flatten_groups(groups: Mapping[str, Sequence[MatchedRecord]]) -> list[MatchedRecord]:
    return [record for members in groups.values() for record in members]

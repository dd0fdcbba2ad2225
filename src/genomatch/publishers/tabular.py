"""Flat CSV and JSON exports of grouped matches."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path

import pandas as pd

from genomatch.models import MatchedRecord
from genomatch.publishers.base import Publisher

EXPORT_COLUMNS: tuple[str, ...] = (
    "phenotype",
    "rsid",
    "genotype",
    "broken_geno",
    "chromosome",
    "position",
    "gene",
)


class CsvReportPublisher(Publisher):
    """Write every matched record as one CSV row, in grouped order."""

    def __init__(self, *, output_path: str | Path) -> None:
        self.output_path = Path(output_path)

    def publish(self, groups: Mapping[str, Sequence[MatchedRecord]]) -> None:
        rows = [record.to_row() for records in groups.values() for record in records]
        frame = pd.DataFrame(rows, columns=list(EXPORT_COLUMNS), dtype=str)

        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(self.output_path, index=False)


class JsonReportPublisher(Publisher):
    """Write ``{phenotype: [record, ...]}`` as JSON."""

    def __init__(self, *, output_path: str | Path, indent: int | None = 2) -> None:
        self.output_path = Path(output_path)
        self.indent = indent

    def publish(self, groups: Mapping[str, Sequence[MatchedRecord]]) -> None:
        payload = {
            phenotype: [record.to_row() for record in records]
            for phenotype, records in groups.items()
        }

        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        with self.output_path.open("w", encoding="utf-8") as stream:
            json.dump(payload, stream, indent=self.indent)

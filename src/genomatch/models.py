"""Canonical in-memory data models used by genomatch."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

RawField = Union[str, int, float]
RawRow = tuple[RawField, ...]


@dataclass(frozen=True)
class ReferenceEntry:
    """Annotation for one variant identifier in the reference table."""

    phenotype: str
    broken_genotype: str | None = None
    gene: str | None = None


@dataclass(frozen=True)
class CanonicalVariant:
    """Format-independent representation of one genotype row."""

    rsid: str
    chromosome: str
    position: str
    genotype: str


@dataclass(frozen=True)
class MatchedRecord:
    """Variant found in the reference table, with its annotation merged in.

    Annotation fields are always text; missing reference values arrive here as
    empty strings.
    """

    rsid: str
    chromosome: str
    position: str
    genotype: str
    phenotype: str
    broken_genotype: str = ""
    gene: str = ""

    def to_row(self) -> dict[str, Any]:
        """Serialize into a plain dict for report writers."""

        return {
            "rsid": self.rsid,
            "chromosome": self.chromosome,
            "position": self.position,
            "genotype": self.genotype,
            "phenotype": self.phenotype,
            "broken_geno": self.broken_genotype,
            "gene": self.gene,
        }


@dataclass
class ProgressState:
    """Bytes consumed so far for the active run."""

    processed: int = 0
    total: int | None = None

    def advance_to(self, processed: int) -> None:
        """Record ``processed`` bytes consumed; earlier positions are ignored."""

        if processed > self.processed:
            self.processed = processed

    @property
    def percent(self) -> float | None:
        """Share of ``total`` consumed, clamped to 0-100; ``None`` without a size."""

        if not self.total:
            return None
        return min(100.0, max(0.0, self.processed * 100.0 / self.total))

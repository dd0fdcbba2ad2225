"""Read-only reference table of annotated variants."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

from jsonschema.validators import validator_for

from genomatch.errors import ReferenceTableUnavailableError
from genomatch.models import ReferenceEntry

logger = logging.getLogger(__name__)


REFERENCE_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "additionalProperties": {
        "type": "object",
        "required": ["phenotype"],
        "properties": {
            "phenotype": {"type": "string"},
            "broken_geno": {"type": ["string", "null"]},
            "gene": {"type": ["string", "null"]},
        },
    },
}


def _compile_validator():
    Validator = validator_for(REFERENCE_SCHEMA)
    Validator.check_schema(REFERENCE_SCHEMA)
    return Validator(REFERENCE_SCHEMA)


class ReferenceTable(Mapping[str, ReferenceEntry]):
    """Mapping from variant identifier to its phenotype annotation.

    Keys are compared as exact text. The table is never modified once built,
    so a single instance can be shared between pipelines.
    """

    def __init__(self, entries: Mapping[str, ReferenceEntry]) -> None:
        self._entries = dict(entries)

    def __getitem__(self, rsid: str) -> ReferenceEntry:
        return self._entries[rsid]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ReferenceTable(entries={len(self._entries)})"

    @classmethod
    def from_mapping(cls, payload: Any) -> "ReferenceTable":
        """Validate a decoded JSON payload and build the table.

        Expected format:
        ``{"rs123": {"phenotype": "...", "broken_geno": "AA", "gene": null}}``.
        """

        if not payload:
            raise ReferenceTableUnavailableError("Reference table is empty")

        errors = sorted(
            _compile_validator().iter_errors(payload),
            key=lambda err: [str(part) for part in err.path],
        )
        if errors:
            first = errors[0]
            location = "/" + "/".join(str(part) for part in first.path)
            raise ReferenceTableUnavailableError(
                f"Reference table is invalid at {location}: {first.message}"
                f" ({len(errors)} error(s))"
            )

        entries = {
            str(rsid): ReferenceEntry(
                phenotype=details["phenotype"],
                broken_genotype=details.get("broken_geno"),
                gene=details.get("gene"),
            )
            for rsid, details in payload.items()
        }
        return cls(entries)

    @classmethod
    def from_json(cls, json_path: str | Path) -> "ReferenceTable":
        """Load and validate a reference table from a JSON file."""

        path = Path(json_path)
        try:
            with path.open("r", encoding="utf-8") as fh:
                payload = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            raise ReferenceTableUnavailableError(
                f"Could not load reference table {path}: {exc}"
            ) from exc

        table = cls.from_mapping(payload)
        logger.info("Loaded %d reference variants from %s", len(table), path)
        return table


def ensure_available(reference: Mapping[str, ReferenceEntry] | None) -> None:
    """Raise if the reference table cannot be used to start a run."""

    if reference is None or len(reference) == 0:
        raise ReferenceTableUnavailableError("Reference table is missing or empty")

"""Publisher interface for grouped report outputs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence

from genomatch.models import MatchedRecord


class Publisher(ABC):
    """Renders grouped matched records into consumer-facing artifacts."""

    @abstractmethod
    def publish(self, groups: Mapping[str, Sequence[MatchedRecord]]) -> None:
        """Publish one run's phenotype groups."""

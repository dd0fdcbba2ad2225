"""Input boundary: genotype exports supplied as files or in-memory buffers."""

from __future__ import annotations

import io
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from genomatch.errors import SourceReadError

StreamOpener = Callable[[], BinaryIO]


@dataclass(frozen=True)
class InputSource:
    """A named genotype export and a way to open it as a binary stream.

    ``open`` must return a fresh stream on every call; parsing a source twice
    re-opens it from the start.
    """

    name: str
    size: int
    opener: StreamOpener

    @property
    def extension(self) -> str:
        """Lower-cased text after the final dot of the name, or ``""``."""

        _, dot, suffix = self.name.rpartition(".")
        return suffix.lower() if dot else ""

    def open(self) -> BinaryIO:
        try:
            return self.opener()
        except OSError as exc:
            raise SourceReadError(f"Could not open {self.name}: {exc}") from exc

    def read_all(self) -> bytes:
        """Buffer the whole source in memory."""

        with self.open() as stream:
            try:
                return stream.read()
            except OSError as exc:
                raise SourceReadError(f"Could not read {self.name}: {exc}") from exc

    @classmethod
    def from_path(cls, path: str | Path) -> "InputSource":
        file_path = Path(path)
        try:
            size = file_path.stat().st_size
        except OSError as exc:
            raise SourceReadError(f"Could not stat {file_path}: {exc}") from exc
        return cls(name=file_path.name, size=size, opener=lambda: file_path.open("rb"))

    @classmethod
    def from_bytes(cls, payload: bytes, *, name: str = "<memory>") -> "InputSource":
        return cls(name=name, size=len(payload), opener=lambda: io.BytesIO(payload))

    @classmethod
    def from_text(
        cls,
        text: str,
        *,
        name: str = "<memory>",
        encoding: str = "utf-8",
    ) -> "InputSource":
        return cls.from_bytes(text.encode(encoding), name=name)

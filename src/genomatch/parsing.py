"""Bounded-memory delimited text parsing.

The parser reads a binary stream ``chunk_size`` bytes at a time and exposes
whole rows only: bytes after the last line break of a chunk are carried over and
completed by the next read.
"""

from __future__ import annotations

import csv
import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import BinaryIO

from genomatch.config import DEFAULT_CHUNK_SIZE, DEFAULT_MAX_LINE_BYTES
from genomatch.errors import ChunkProcessingError, SourceReadError
from genomatch.models import RawField, RawRow

_BOM = "\ufeff"


@dataclass(frozen=True)
class RowBatch:
    """Rows completed by one chunk read."""

    index: int
    rows: tuple[RawRow, ...]
    bytes_consumed: int


def coerce_field(value: str) -> RawField:
    """Interpret a field as a number when it round-trips to the same text.

    ``str(coerce_field(text)) == text`` always holds, so identifiers and
    positions can be recovered exactly.
    """

    if not value:
        return value

    try:
        return _round_trip(int(value), value)
    except ValueError:
        pass

    try:
        number = float(value)
    except ValueError:
        return value

    if not math.isfinite(number):
        return value
    return _round_trip(number, value)


def _round_trip(number: int | float, text: str) -> RawField:
    return number if str(number) == text else text


def parse_lines(lines: Iterable[str], delimiter: str) -> tuple[RawRow, ...]:
    """Split complete lines into typed rows, one row per line.

    Quote characters are ordinary text: genotype exports never quote fields,
    and a stray ``"`` must not pull following lines into its row.
    """

    reader = csv.reader(
        (line.rstrip("\r") for line in lines),
        delimiter=delimiter,
        quoting=csv.QUOTE_NONE,
    )
    return tuple(tuple(coerce_field(field) for field in fields) for fields in reader)


def split_lines(text: str) -> list[str]:
    """Split on ``\\r\\n``, ``\\n`` or a lone ``\\r``; a final terminator adds no line."""

    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def _line_end(data: bytes) -> int:
    # A trailing \r may open a \r\n pair; it is held until the next byte.
    search = data[:-1] if data.endswith(b"\r") else data
    return max(search.rfind(b"\n"), search.rfind(b"\r")) + 1


def _decode(payload: bytes, encoding: str) -> str:
    try:
        return payload.decode(encoding)
    except UnicodeDecodeError as exc:
        raise SourceReadError(f"Input is not valid {encoding} text: {exc}") from exc


def _batch(index: int, lines: list[str], delimiter: str, consumed: int) -> RowBatch:
    if index == 0 and lines:
        lines = [lines[0].removeprefix(_BOM), *lines[1:]]
    try:
        rows = parse_lines(lines, delimiter)
    except csv.Error as exc:
        raise ChunkProcessingError(
            f"Malformed row in chunk {index}: {exc}", chunk_index=index
        ) from exc
    return RowBatch(index=index, rows=rows, bytes_consumed=consumed)


def iter_row_batches(
    stream: BinaryIO,
    delimiter: str,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    encoding: str = "utf-8",
    max_line_bytes: int = DEFAULT_MAX_LINE_BYTES,
) -> Iterator[RowBatch]:
    """Yield row batches from ``stream`` in input order.

    Lines may end in ``\\n``, ``\\r\\n`` or ``\\r``. A chunk that completes no
    line yields nothing; its bytes are held until a line ends or input runs
    out, but never more than ``max_line_bytes`` of them
    (``ChunkProcessingError`` otherwise). Read failures raise
    ``SourceReadError`` and end the sequence.
    """

    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if max_line_bytes <= 0:
        raise ValueError(f"max_line_bytes must be positive, got {max_line_bytes}")

    carry = b""
    consumed = 0
    index = 0

    while True:
        try:
            block = stream.read(chunk_size)
        except OSError as exc:
            raise SourceReadError(f"Read failed after {consumed} bytes: {exc}") from exc

        if not block:
            break

        consumed += len(block)

        data = carry + block
        cut = _line_end(data)
        complete, carry = data[:cut], data[cut:]
        if len(carry) > max_line_bytes:
            raise ChunkProcessingError(
                f"Line in chunk {index} exceeds {max_line_bytes} bytes", chunk_index=index
            )
        if not complete:
            continue

        yield _batch(index, split_lines(_decode(complete, encoding)), delimiter, consumed)
        index += 1

    if carry:
        yield _batch(index, split_lines(_decode(carry, encoding)), delimiter, consumed)

import io
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from genomatch.errors import ChunkProcessingError, SourceReadError  # noqa: E402
from genomatch.parsing import coerce_field, iter_row_batches  # noqa: E402


def _sample_text(rows: int = 200) -> str:
    lines = ["# This data file generated by 23andMe at: Mon Jan 01", "# rsid\tchromosome\tposition\tgenotype"]
    for index in range(rows):
        genotype = "é-" if index % 17 == 0 else "AG"
        lines.append(f"rs{index}\t{index % 22 + 1}\t{1000 + index}\t{genotype}")
    return "\n".join(lines) + "\n"


def _all_rows(payload: bytes, delimiter: str, chunk_size: int) -> list[tuple]:
    rows: list[tuple] = []
    for batch in iter_row_batches(io.BytesIO(payload), delimiter, chunk_size=chunk_size):
        rows.extend(batch.rows)
    return rows


def test_coerce_field_keeps_exact_text() -> None:
    assert coerce_field("100") == 100
    assert coerce_field("1.5") == 1.5
    assert coerce_field("rs123") == "rs123"
    assert coerce_field("007") == "007"
    assert coerce_field("1e5") == "1e5"
    assert coerce_field("nan") == "nan"
    assert coerce_field("") == ""

    for text in ("100", "1.5", "007", "1e5", "-3", "+3", "1_000", "inf"):
        assert str(coerce_field(text)) == text


@pytest.mark.parametrize("chunk_size", [1, 2, 3, 7, 64, 1000, 1_000_000])
def test_rows_straddling_chunks_match_unchunked_parse(chunk_size: int) -> None:
    payload = _sample_text().encode("utf-8")
    expected = _all_rows(payload, "\t", len(payload) + 1)

    assert _all_rows(payload, "\t", chunk_size) == expected
    assert expected[2] == ("rs0", 1, 1000, "é-")
    assert len(expected) == 202


def test_batches_are_ordered_and_report_bytes_consumed() -> None:
    payload = _sample_text(50).encode("utf-8")
    batches = list(iter_row_batches(io.BytesIO(payload), "\t", chunk_size=256))

    assert [batch.index for batch in batches] == list(range(len(batches)))
    consumed = [batch.bytes_consumed for batch in batches]
    assert consumed == sorted(consumed)
    assert consumed[-1] == len(payload)
    assert all(len(batch.rows) >= 1 for batch in batches)


def test_final_line_without_newline_and_crlf_endings() -> None:
    payload = b"rs1,1,10,AA\r\nrs2,2,20,CT"
    rows = _all_rows(payload, ",", 4)

    assert rows == [("rs1", 1, 10, "AA"), ("rs2", 2, 20, "CT")]


@pytest.mark.parametrize("chunk_size", [1, 5, 24, 1000])
def test_stray_quote_stays_inside_its_own_row(chunk_size: int) -> None:
    payload = b"==> filename.txt <===\nrs1,1,10,\"AA\nrs2,1,11,GG\nrs3,1,12,CC\n"

    assert _all_rows(payload, ",", chunk_size) == [
        ("==> filename.txt <===",),
        ("rs1", 1, 10, '"AA'),
        ("rs2", 1, 11, "GG"),
        ("rs3", 1, 12, "CC"),
    ]


@pytest.mark.parametrize("chunk_size", [1, 3, 16, 1024])
def test_carriage_return_only_line_endings(chunk_size: int) -> None:
    payload = b"rs1\t1\t10\tAA\rrs2\t1\t11\tGG\rrs3\t1\t12\tCC"

    assert _all_rows(payload, "\t", chunk_size) == [
        ("rs1", 1, 10, "AA"),
        ("rs2", 1, 11, "GG"),
        ("rs3", 1, 12, "CC"),
    ]


def test_mixed_line_endings_parse_the_same_at_every_chunk_size() -> None:
    payload = b"a\t1\r\nb\t2\rc\t3\n\rd\t4\r\n"
    expected = [("a", 1), ("b", 2), ("c", 3), (), ("d", 4)]

    for chunk_size in range(1, len(payload) + 2):
        assert _all_rows(payload, "\t", chunk_size) == expected


def test_unterminated_line_longer_than_limit_is_rejected() -> None:
    stream = io.BytesIO(b"rs1\t1\t10\tAA\n" + b"x" * 100)
    batches = iter_row_batches(stream, "\t", chunk_size=8, max_line_bytes=32)

    with pytest.raises(ChunkProcessingError):
        list(batches)

    short = b"rs1\t1\t10\tAA\n" + b"x" * 32
    batches = iter_row_batches(io.BytesIO(short), "\t", chunk_size=8, max_line_bytes=32)
    rows = [row for batch in batches for row in batch.rows]
    assert rows[-1] == ("x" * 32,)


def test_byte_order_mark_is_dropped() -> None:
    payload = b"\xef\xbb\xbfrs1\t1\t10\tAA\n"
    assert _all_rows(payload, "\t", 2) == [("rs1", 1, 10, "AA")]


def test_blank_lines_become_empty_rows() -> None:
    rows = _all_rows(b"rs1\t1\t10\tAA\n\nrs2\t1\t11\tGG\n", "\t", 1024)
    assert rows == [("rs1", 1, 10, "AA"), (), ("rs2", 1, 11, "GG")]


class _FailingStream(io.BytesIO):
    def __init__(self, payload: bytes) -> None:
        super().__init__(payload)
        self.reads = 0

    def read(self, size: int = -1) -> bytes:
        self.reads += 1
        if self.reads > 1:
            raise OSError("device went away")
        return super().read(size)


def test_read_failure_raises_source_read_error_after_first_batch() -> None:
    stream = _FailingStream(b"rs1\t1\t10\tAA\nrs2\t1\t11\tGG\n")
    batches = iter_row_batches(stream, "\t", chunk_size=13)

    first = next(batches)
    assert first.rows == (("rs1", 1, 10, "AA"),)

    with pytest.raises(SourceReadError):
        next(batches)


def test_invalid_encoding_raises_source_read_error() -> None:
    with pytest.raises(SourceReadError):
        _all_rows(b"rs1\t1\t10\t\xff\xfe\n", "\t", 1024)


def test_chunk_size_must_be_positive() -> None:
    with pytest.raises(ValueError):
        list(iter_row_batches(io.BytesIO(b""), "\t", chunk_size=0))

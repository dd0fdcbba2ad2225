#!/usr/bin/env python3
"""Match a consumer genotype export against a reference table and write reports."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from genomatch import (  # noqa: E402
    GenotypeReportPipeline,
    InputSource,
    PipelineError,
    PipelineSettings,
    ReferenceTable,
)
from genomatch.publishers import (  # noqa: E402
    CsvReportPublisher,
    HtmlReportPublisher,
    JsonReportPublisher,
    Publisher,
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build a phenotype report from a raw genotype export")
    parser.add_argument("--reference", required=True, help="Path to the reference table JSON")
    parser.add_argument("--input", required=True, help="23andMe, AncestryDNA or VCF export")
    parser.add_argument("--html", help="Write an HTML report to this path")
    parser.add_argument("--csv", help="Write a flat CSV export to this path")
    parser.add_argument("--json", help="Write grouped JSON to this path")
    parser.add_argument("--config", help="Optional pipeline settings JSON")
    parser.add_argument("--chunk-size", type=int, help="Bytes read per chunk")
    parser.add_argument("--stream-threshold", type=int, help="Input size that switches to streaming")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level.",
    )
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> PipelineSettings:
    settings = PipelineSettings.from_json(args.config) if args.config else PipelineSettings()
    return settings.merged(
        {
            "chunk_size": args.chunk_size,
            "stream_threshold": args.stream_threshold,
        }
    )


def build_publishers(args: argparse.Namespace) -> list[Publisher]:
    publishers: list[Publisher] = []
    if args.html:
        publishers.append(HtmlReportPublisher(output_path=args.html))
    if args.csv:
        publishers.append(CsvReportPublisher(output_path=args.csv))
    if args.json:
        publishers.append(JsonReportPublisher(output_path=args.json))
    return publishers


class ProgressLogger:
    """Log progress each time another ``step`` percent has been processed."""

    def __init__(self, logger: logging.Logger, step: float = 10.0) -> None:
        self.logger = logger
        self.step = step
        self._next = step

    def __call__(self, percent: float) -> None:
        if percent < self._next:
            return
        self.logger.info("Progress: %.0f%%", percent)
        while self._next <= percent:
            self._next += self.step


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logger = logging.getLogger("genomatch.report")

    try:
        reference = ReferenceTable.from_json(args.reference)
        source = InputSource.from_path(args.input)
    except PipelineError as exc:
        logger.error("%s: %s", exc.kind, exc)
        payload = {"status": "failed", "error": {"kind": exc.kind, "message": str(exc)}}
        print(json.dumps(payload, indent=2))
        return 1

    report = GenotypeReportPipeline(
        reference=reference,
        settings=build_settings(args),
        publishers=build_publishers(args),
        on_progress=ProgressLogger(logger),
    ).run(source)

    print(json.dumps(report.summary(), indent=2))
    return 0 if report.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())

"""Static HTML report with one table per phenotype."""

from __future__ import annotations

import html
from collections.abc import Mapping, Sequence
from pathlib import Path
from urllib.parse import quote

import pandas as pd

from genomatch.models import MatchedRecord
from genomatch.publishers.base import Publisher

SNPEDIA_URL = "https://www.snpedia.com/index.php/"

REPORT_COLUMNS: tuple[tuple[str, str], ...] = (
    ("rsid", "RSID"),
    ("genotype", "Genotype"),
    ("broken_geno", "Broken"),
    ("chromosome", "Chromosome"),
    ("position", "Position"),
    ("gene", "Gene"),
)

_PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>table {{ width: 100%; border-collapse: collapse; }}</style>
</head>
<body>
<h1>{title}</h1>
{body}
</body>
</html>
"""


def snpedia_link(rsid: str) -> str:
    """Anchor tag pointing at the SNPedia page of an rsid."""

    href = html.escape(SNPEDIA_URL + quote(rsid, safe=""), quote=True)
    return f'<a href="{href}">{html.escape(rsid)}</a>'


class HtmlReportPublisher(Publisher):
    """Write grouped matches as an HTML page.

    Every cell is escaped before rendering; only the RSID column carries
    markup, a link to SNPedia.
    """

    def __init__(self, *, output_path: str | Path, title: str = "Genotype report") -> None:
        self.output_path = Path(output_path)
        self.title = title

    def publish(self, groups: Mapping[str, Sequence[MatchedRecord]]) -> None:
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.output_path.write_text(self.render(groups), encoding="utf-8")

    def render(self, groups: Mapping[str, Sequence[MatchedRecord]]) -> str:
        sections: list[str] = []
        for phenotype, records in groups.items():
            sections.append(f"<h3>{html.escape(phenotype)}</h3>")
            sections.append(self._render_table(records))

        if not sections:
            sections.append("<p>No matching variants found.</p>")

        return _PAGE_TEMPLATE.format(title=html.escape(self.title), body="\n".join(sections))

    @staticmethod
    def _render_table(records: Sequence[MatchedRecord]) -> str:
        rows = []
        for record in records:
            payload = record.to_row()
            rows.append(
                {
                    label: (
                        snpedia_link(str(payload[key]))
                        if key == "rsid"
                        else html.escape(str(payload[key]))
                    )
                    for key, label in REPORT_COLUMNS
                }
            )

        frame = pd.DataFrame(rows, columns=[label for _, label in REPORT_COLUMNS])
        return frame.to_html(index=False, escape=False, border=1)

"""genomatch report publishers."""

from .base import Publisher
from .html_report import HtmlReportPublisher
from .tabular import CsvReportPublisher, JsonReportPublisher

__all__ = [
    "Publisher",
    "HtmlReportPublisher",
    "CsvReportPublisher",
    "JsonReportPublisher",
]

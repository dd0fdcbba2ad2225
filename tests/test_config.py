import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from genomatch import FORMAT_LAYOUTS, PipelineSettings, SourceFormat  # noqa: E402


def test_default_settings_match_documented_limits() -> None:
    settings = PipelineSettings()

    assert settings.chunk_size == 50 * 1024
    assert settings.stream_threshold == 100 * 1024 * 1024
    assert settings.max_line_bytes == 1024 * 1024
    assert settings.encoding == "utf-8"


def test_settings_from_json_and_overrides(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"chunk_size": 1024}))

    settings = PipelineSettings.from_json(path).merged({"stream_threshold": 2048, "encoding": None})

    assert settings.chunk_size == 1024
    assert settings.stream_threshold == 2048
    assert settings.encoding == "utf-8"


def test_invalid_settings_are_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        PipelineSettings(chunk_size=0)

    with pytest.raises(ValueError):
        PipelineSettings(max_line_bytes=0)

    with pytest.raises(ValueError):
        PipelineSettings().merged({"chunk_sz": 10})

    path = tmp_path / "settings.json"
    path.write_text("[1, 2]")
    with pytest.raises(ValueError):
        PipelineSettings.from_json(path)


def test_every_format_has_a_layout() -> None:
    assert set(FORMAT_LAYOUTS) == set(SourceFormat)
    assert FORMAT_LAYOUTS[SourceFormat.VCF].min_fields == 5
    assert FORMAT_LAYOUTS[SourceFormat.ANCESTRY].skip_comments is False

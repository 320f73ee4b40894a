# Shared pytest fixtures
from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Any

import pandas as pd
import pytest
import yaml

from obsimport.config.loader import build_config
from obsimport.logging.init import LOGGER_NAME, reset_logging
from obsimport.models.config_models import AppConfig, ColumnSchemaRegistry

RINGING_COLUMNS = ["species", "sexCode", "date", "latitude", "longitude"]


@pytest.fixture(autouse=True)
def _clean_logging():
    # capsys の差し替え済 stdout にハンドラを張り直すため毎テスト初期化
    reset_logging()
    logging.getLogger(LOGGER_NAME).handlers.clear()
    yield
    reset_logging()
    logging.getLogger(LOGGER_NAME).handlers.clear()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def ringing_schema() -> dict[str, Any]:
    return {
        "type": "object",
        "required": RINGING_COLUMNS,
        "properties": {
            "species": {"type": "string", "minLength": 1},
            "sexCode": {"type": "string", "enum": ["M", "F", "U"]},
            "date": {"type": "string", "minLength": 1, "format": "date"},
            "latitude": {"type": "number", "finite": True, "minimum": -90, "maximum": 90},
            "longitude": {"type": "number", "finite": True, "minimum": -180, "maximum": 180},
        },
    }


@pytest.fixture()
def registry() -> ColumnSchemaRegistry:
    return ColumnSchemaRegistry({"ringing": RINGING_COLUMNS, "empty": []})


@pytest.fixture()
def sample_config_yaml() -> str:
    return """record_types:
  ringing:
    columns: [species, sexCode, date, latitude, longitude]
    record_schema:
      type: object
      required: [species, sexCode, date, latitude, longitude]
      properties:
        species: {type: string, minLength: 1}
        sexCode: {type: string, enum: [M, F, U]}
        date: {type: string, minLength: 1, format: date}
        latitude: {type: number, finite: true, minimum: -90, maximum: 90}
        longitude: {type: number, finite: true, minimum: -180, maximum: 180}
  sightings:
    columns: [place, count]
document_style:
  sheet_name: Ringing
  column_width: 18
  header:
    fill_color: "C6EFCE"
    font_color: "000000"
import:
  max_workers: 2
  source_directory: ./data
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def app_config(sample_config_yaml: str) -> AppConfig:
    return build_config(yaml.safe_load(sample_config_yaml))


def write_xlsx(path: Path, rows: list[list[object]], sheet_name: str = "Sheet1") -> Path:
    """Write rows (first row = header) to an .xlsx file via pandas."""
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return path


@pytest.fixture()
def make_xlsx():
    return write_xlsx

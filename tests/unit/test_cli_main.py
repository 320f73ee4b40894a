from __future__ import annotations

from pathlib import Path

import pytest

from obsimport.cli import main as cli_main


def test_missing_subcommand_is_usage_error(capsys):
    with pytest.raises(SystemExit) as exc:
        cli_main([])
    assert exc.value.code == 2


def test_debug_flag_enables_debug_lines(temp_workdir: Path, write_config, make_xlsx, capsys):
    make_xlsx(
        temp_workdir / "data" / "a.xlsx",
        [["species", "sexCode", "date", "latitude", "longitude"], ["Parus major", "M", "2020-05-01", 51.5, 0.1]],
    )
    assert cli_main(["--debug", "import", "--type", "ringing"]) == 0
    out = capsys.readouterr().out
    assert "DEBUG debug mode enabled" in out
    assert "DEBUG row=2 valid=True" in out


def test_custom_config_path(temp_workdir: Path, sample_config_yaml: str, capsys):
    cfg = temp_workdir / "other.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    out_path = temp_workdir / "sightings.xlsx"
    assert cli_main(["--config", str(cfg), "template", "--type", "sightings", "-o", str(out_path)]) == 0
    assert out_path.exists()


def test_import_directory_argument_missing(temp_workdir: Path, write_config, capsys):
    assert cli_main(["import", "--type", "ringing", str(temp_workdir / "nowhere")]) == 1
    assert "ERROR input: File not found" in capsys.readouterr().out

from __future__ import annotations

from pathlib import Path

import pytest

from parkline.cli.__main__ import main as cli_main

"""Exit code contract: 0 sheet loaded, 2 sample data served, 1 fatal."""


def test_exit_code_fatal_startup(temp_workdir: Path, capsys):
    # no config/site.yml
    code = cli_main([])
    captured = capsys.readouterr()
    assert code == 1
    assert "ERROR config:" in captured.out


def test_exit_code_fatal_invalid_config(write_config, capsys):
    write_config.write_text("sheet_url: 42\n", encoding="utf-8")
    assert cli_main([]) == 1
    assert "ERROR config: config validation failed" in capsys.readouterr().out


def test_exit_code_sheet_loaded(write_config, sheet_csv_file):
    assert cli_main([]) == 0


def test_exit_code_fell_back(write_config):
    assert cli_main([]) == 2


def test_exit_code_usage_error(write_config):
    with pytest.raises(SystemExit) as e:
        cli_main(["--no-such-flag"])
    assert e.value.code == 2

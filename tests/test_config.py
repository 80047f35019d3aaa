from __future__ import annotations

from pathlib import Path

import pytest

from dpx_reader.config import ReaderConfig, load_config


def test_load_config_reads_reader_options(tmp_path: Path) -> None:
    cfg_file = tmp_path / "dpx.yaml"
    cfg_file.write_text(
        """
log_level: DEBUG
log_file: ./logs/dpx.log
reader:
  rawcolor: true
  default_subimage: 1
export:
  float: true
""",
        encoding="utf-8",
    )

    cfg = load_config(cfg_file)
    assert cfg.rawcolor is True
    assert cfg.default_subimage == 1
    assert cfg.tiff_export_float is True
    assert cfg.log_level == "DEBUG"
    assert cfg.log_file == (tmp_path / "logs" / "dpx.log").resolve()


def test_load_config_defaults(tmp_path: Path) -> None:
    cfg_file = tmp_path / "empty.yaml"
    cfg_file.write_text("", encoding="utf-8")
    assert load_config(cfg_file) == ReaderConfig()


def test_load_config_rejects_negative_subimage(tmp_path: Path) -> None:
    cfg_file = tmp_path / "bad.yaml"
    cfg_file.write_text("reader:\n  default_subimage: -2\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(cfg_file)


def test_load_config_normalises_log_level(tmp_path: Path) -> None:
    cfg_file = tmp_path / "dpx.yaml"
    cfg_file.write_text("log_level: warning\n", encoding="utf-8")
    assert load_config(cfg_file).log_level == "WARNING"


@pytest.mark.parametrize(
    "text",
    [
        "log_level: LOUD\n",
        "reader: [1, 2]\n",
        "export: yes\n",
        "- just\n- a list\n",
    ],
)
def test_load_config_rejects_malformed_values(tmp_path: Path, text: str) -> None:
    cfg_file = tmp_path / "bad.yaml"
    cfg_file.write_text(text, encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(cfg_file)

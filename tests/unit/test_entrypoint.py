import logging
from pathlib import Path

import chanlevel.__main__ as entrypoint
from chanlevel.app import setup_logging
from chanlevel.config import LoggingConfig


def test_parse_args_overrides() -> None:
    args = entrypoint.parse_args(["--config", "x.yaml", "--bind", "127.0.0.1", "--port", "9000"])
    assert args.config == "x.yaml"
    assert args.bind == "127.0.0.1"
    assert args.port == 9000


def test_parse_args_defaults_to_shipped_config(monkeypatch) -> None:
    monkeypatch.delenv("CHANLEVEL_CONFIG", raising=False)
    args = entrypoint.parse_args([])
    assert Path(args.config).name == "chanlevel.yaml"
    assert args.port is None


def test_uvicorn_log_level_falls_back_to_info() -> None:
    assert entrypoint._uvicorn_log_level("WARNING") == "warning"
    assert entrypoint._uvicorn_log_level("warn") == "info"


def test_setup_logging_writes_file(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "chanlevel.log"
    setup_logging(LoggingConfig(level="WARNING", file=str(log_file)))
    try:
        logging.getLogger("chanlevel.test").debug("frame corrected")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "frame corrected" in log_file.read_text(encoding="utf-8")
    finally:
        setup_logging(LoggingConfig())

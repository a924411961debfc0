from __future__ import annotations

import logging
import logging.handlers
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, TextIO

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from . import __version__
from .api import request_validation_handler
from .api import router as api_router
from .config import AppConfig, LoggingConfig
from .state import AppState


class SafeStreamHandler(logging.StreamHandler[TextIO]):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            super().emit(record)
        except ValueError:
            pass


# Handlers installed by setup_logging, replaced on every call
_installed_handlers: list[logging.Handler] = []


def setup_logging(config: LoggingConfig) -> None:
    """Configure console logging and, when configured, a rotating log file.

    The file rotates at 5MB with 3 backups.
    """
    root_logger = logging.getLogger()
    for handler in _installed_handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    level = logging.getLevelName(config.level.strip().upper())
    if not isinstance(level, int):
        level = logging.INFO
    root_logger.setLevel(logging.DEBUG if config.file else level)

    console_handler = SafeStreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(
        '[%(levelname)s] %(name)s: %(message)s'
    ))
    root_logger.addHandler(console_handler)
    _installed_handlers.append(console_handler)

    if config.file:
        log_file = Path(config.file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=3,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        root_logger.addHandler(file_handler)
        _installed_handlers.append(file_handler)
        logging.info("File logging initialized: %s", log_file)


def create_app(
    config: AppConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the channel-level service.

    ``transport`` replaces the network transport of the downstream client;
    tests pass an ``httpx.MockTransport``.
    """
    setup_logging(config.logging)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app_state: AppState = app.state.app_state
        logging.info(
            "Channel ready: frame loss %d/1000, bit error %d/1000, forwarding to %s",
            config.channel.frame_loss_probability_per_mille,
            config.channel.bit_error_probability_per_mille,
            config.transfer.endpoint if config.transfer.enabled else "nowhere (disabled)",
        )
        try:
            yield
        finally:
            try:
                await app_state.shutdown()
            except Exception as e:
                logging.warning("Error during shutdown: %s", e)

    app = FastAPI(title="chanlevel", version=__version__, lifespan=lifespan)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.state.app_state = AppState.from_config(config, transport=transport)

    app.include_router(api_router)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app

"""Shared pytest fixtures for chanlevel tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Iterable

import httpx
import numpy as np
import pytest

from chanlevel.config import AppConfig


class ScriptedRng:
    """Stand-in generator that replays a fixed sequence of draws."""

    def __init__(self, values: Iterable[int]) -> None:
        self.values = list(values)
        self.calls: list[tuple[int, int]] = []

    def integers(self, low: int, high: int) -> int:
        self.calls.append((low, high))
        if not self.values:
            raise AssertionError("ScriptedRng ran out of values")
        value = self.values.pop(0)
        assert low <= value < high, f"{value} outside [{low}, {high})"
        return value


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def scripted_rng() -> Callable[[Iterable[int]], ScriptedRng]:
    return ScriptedRng


@pytest.fixture
def hello() -> bytes:
    return b"HELLO"


@pytest.fixture
def quiet_config() -> AppConfig:
    """Config with a perfect channel and a fixed seed."""
    cfg = AppConfig()
    cfg.channel.frame_loss_probability_per_mille = 0
    cfg.channel.bit_error_probability_per_mille = 0
    cfg.channel.seed = 42
    cfg.transfer.endpoint = "http://transport.test/transfer"
    cfg.server.shutdown_grace_seconds = 5.0
    return cfg


@pytest.fixture
def downstream() -> Callable[..., tuple[httpx.MockTransport, list[dict[str, Any]]]]:
    """Factory for a mock transfer service recording every JSON body it receives."""

    def _make(status_code: int = 200, fail: bool = False) -> tuple[httpx.MockTransport, list[dict[str, Any]]]:
        received: list[dict[str, Any]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            if fail:
                raise httpx.ConnectError("connection refused", request=request)
            received.append(json.loads(request.content))
            return httpx.Response(status_code)

        return httpx.MockTransport(handler), received

    return _make


@pytest.fixture
def code_request_body() -> dict[str, Any]:
    return {
        "id": 7,
        "message_id": 1001,
        "login": "alice",
        "timestamp": 1_700_000_000,
        "segments_count": 2,
        "segment_number": 1,
        "data": "HELLO",
        "error": "",
    }


@pytest.fixture
def project_root() -> Path:
    return Path(__file__).parent.parent

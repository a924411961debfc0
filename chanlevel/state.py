from __future__ import annotations

import asyncio
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import httpx

from .channel import RandomSource
from .config import AppConfig
from .stats import ChannelStats
from .transfer import Forwarder


def create_codec_executor(cfg: AppConfig) -> ThreadPoolExecutor:
    """Worker pool for the codec so the event loop keeps serving requests."""
    max_workers = min(cfg.server.max_workers, (os.cpu_count() or 4) + 2)
    return ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="Codec-")


@dataclass
class AppState:
    config: AppConfig
    random_source: RandomSource
    stats: ChannelStats
    executor: ThreadPoolExecutor
    forwarder: Forwarder

    @classmethod
    def from_config(
        cls,
        cfg: AppConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "AppState":
        random_source = RandomSource(cfg.channel.seed)
        stats = ChannelStats()
        executor = create_codec_executor(cfg)
        forwarder = Forwarder(
            channel=cfg.channel,
            transfer=cfg.transfer,
            random_source=random_source,
            executor=executor,
            stats=stats,
            transport=transport,
        )
        return cls(
            config=cfg,
            random_source=random_source,
            stats=stats,
            executor=executor,
            forwarder=forwarder,
        )

    async def shutdown(self) -> None:
        await self.forwarder.drain(self.config.server.shutdown_grace_seconds)
        await self.forwarder.close()
        await asyncio.to_thread(self.executor.shutdown, wait=True, cancel_futures=True)

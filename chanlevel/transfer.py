"""Background processing and downstream forwarding of segments.

Every accepted segment becomes one asyncio task: the codec pipeline runs on
the worker pool, then the result is posted to the transfer endpoint. Nothing
is retried; delivery problems are logged and counted.
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Executor
from typing import Callable

import httpx

from .channel import IntegerSource, RandomSource
from .config import ChannelConfig, TransferConfig
from .models import CodeRequest, CodeTransferRequest
from .pipeline import Completed, Dropped, Failed, Outcome, process_payload
from .stats import ChannelStats

logger = logging.getLogger(__name__)

Processor = Callable[[bytes, int, int, IntegerSource], Outcome]


class Forwarder:
    def __init__(
        self,
        channel: ChannelConfig,
        transfer: TransferConfig,
        random_source: RandomSource,
        executor: Executor,
        stats: ChannelStats,
        transport: httpx.AsyncBaseTransport | None = None,
        processor: Processor = process_payload,
    ) -> None:
        self.channel = channel
        self.transfer_config = transfer
        self.random_source = random_source
        self.executor = executor
        self.stats = stats
        self._transport = transport
        self._processor = processor
        self._client: httpx.AsyncClient | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.transfer_config.timeout_seconds,
                transport=self._transport,
            )
        return self._client

    def submit(self, request: CodeRequest) -> asyncio.Task[None]:
        """Schedule processing of one segment and return immediately."""
        self.stats.record_received()
        task = asyncio.get_running_loop().create_task(self.transfer(request))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def transfer(self, request: CodeRequest) -> None:
        try:
            await self._transfer(request)
        except asyncio.CancelledError:
            logger.warning("Transfer of message %s cancelled", request.messageId)
            raise
        except Exception:
            logger.exception("Unexpected error while processing message %s", request.messageId)

    async def _transfer(self, request: CodeRequest) -> None:
        loop = asyncio.get_running_loop()
        rng = self.random_source.spawn()
        outcome = await loop.run_in_executor(
            self.executor,
            self._processor,
            request.data.encode("utf-8"),
            self.channel.frame_loss_probability_per_mille,
            self.channel.bit_error_probability_per_mille,
            rng,
        )
        self.stats.record_outcome(outcome)

        if isinstance(outcome, Dropped):
            logger.info("Message %s segment %s lost", request.messageId, request.segmentNumber)
            return
        if isinstance(outcome, Failed):
            logger.error(
                "Error while processing message %s: %s (%s)",
                request.messageId,
                outcome.reason.value,
                outcome.detail,
            )
            return
        assert isinstance(outcome, Completed)

        body = CodeTransferRequest.from_request(request, outcome.payload, outcome.mismatch_detected)
        logger.info("Prepared message: %s", body.data)

        if not self.transfer_config.enabled:
            return
        await self.send(body)

    async def send(self, body: CodeTransferRequest) -> bool:
        """POST one processed segment downstream. Never raises on delivery errors."""
        endpoint = self.transfer_config.endpoint
        try:
            response = await self._get_client().post(endpoint, json=body.model_dump(by_alias=True))
        except httpx.HTTPError as e:
            logger.error("Transfer request issue: %s", e)
            self.stats.record_forward(False)
            return False

        if response.status_code != 200:
            logger.warning("Unexpected status code while transferring %d", response.status_code)
            self.stats.record_forward(False)
            return False

        self.stats.record_forward(True)
        return True

    async def drain(self, timeout: float) -> int:
        """Wait up to ``timeout`` seconds for in-flight transfers.

        Returns:
            Number of transfers that had to be cancelled
        """
        if not self._tasks:
            return 0
        logger.info("Waiting up to %.1fs for %d in-flight transfers", timeout, len(self._tasks))
        _done, pending = await asyncio.wait(set(self._tasks), timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.warning("Cancelled %d transfers still running at shutdown", len(pending))
        return len(pending)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

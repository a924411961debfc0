"""Per-message processing pipeline.

One run walks a single payload through the simulated link:

    RECEIVED -> (DROPPED | ENCODED) -> CHANNEL_APPLIED -> DECODED -> VALIDATED -> REPORTED

DROPPED is terminal and happens before any bytes are transformed. A payload
that fails validation still reaches REPORTED carrying the mismatch flag; only
codec invariant violations end a run early with a ``Failed`` outcome.

The pipeline is synchronous and does no I/O. Scheduling and reporting live in
``chanlevel.transfer``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from chanlevel.channel import ChannelSimulator, IntegerSource
from chanlevel.errors import DecodingFailure, EncodingFailure
from chanlevel.fec.hamming import CorrectionOutcome, decode_message, encode_blocks
from chanlevel.typing import Message
from chanlevel.utils.packing import pack_blocks, unpack_blocks
from chanlevel.validation import validate_payload, validate_probability_per_mille

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    RECEIVED = "received"
    DROPPED = "dropped"
    ENCODED = "encoded"
    CHANNEL_APPLIED = "channel_applied"
    DECODED = "decoded"
    VALIDATED = "validated"
    REPORTED = "reported"


class FailureReason(str, Enum):
    ENCODING = "encoding_failure"
    DECODING = "decoding_failure"


@dataclass(frozen=True)
class Dropped:
    """The message was lost before processing."""


@dataclass(frozen=True)
class Completed:
    payload: bytes
    mismatch_detected: bool
    corrected_frames: int = 0
    uncorrectable_frames: int = 0


@dataclass(frozen=True)
class Failed:
    reason: FailureReason
    detail: str = ""


Outcome = Union[Dropped, Completed, Failed]


@dataclass(frozen=True)
class DecodeResult:
    payload: bytes
    mismatch_detected: bool
    outcomes: tuple[CorrectionOutcome, ...] = ()

    @property
    def corrected_frames(self) -> int:
        return sum(1 for o in self.outcomes if o.error_was_corrected)

    @property
    def uncorrectable_frames(self) -> int:
        return sum(1 for o in self.outcomes if o.error_was_uncorrectable)


@dataclass
class MessagePipeline:
    """Runs one payload through encode, channel, decode and validation."""

    rng: IntegerSource
    simulator: ChannelSimulator | None = None
    history: list[PipelineState] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.simulator is None:
            self.simulator = ChannelSimulator(self.rng)

    @property
    def state(self) -> PipelineState | None:
        return self.history[-1] if self.history else None

    def _advance(self, state: PipelineState) -> None:
        self.history.append(state)

    def run(
        self,
        payload: bytes,
        frame_loss_probability_per_mille: int,
        bit_error_probability_per_mille: int,
    ) -> Outcome:
        for value, label in (
            (frame_loss_probability_per_mille, "frame_loss_probability_per_mille"),
            (bit_error_probability_per_mille, "bit_error_probability_per_mille"),
        ):
            ok, reason = validate_probability_per_mille(value, label)
            if not ok:
                raise ValueError(reason)

        simulator = self.simulator
        assert simulator is not None
        self.history.clear()
        self._advance(PipelineState.RECEIVED)

        if simulator.should_drop_message(frame_loss_probability_per_mille):
            self._advance(PipelineState.DROPPED)
            return Dropped()

        original_byte_length = len(payload)
        try:
            message = encode_blocks(pack_blocks(payload))
        except EncodingFailure as e:
            logger.error("Encoding issue: %s", e)
            return Failed(FailureReason.ENCODING, str(e))
        self._advance(PipelineState.ENCODED)

        simulator.apply_bit_errors(message, bit_error_probability_per_mille)
        self._advance(PipelineState.CHANNEL_APPLIED)

        try:
            result = self.decode(message, original_byte_length, payload)
        except DecodingFailure as e:
            logger.error("Decoding issue: %s", e)
            return Failed(FailureReason.DECODING, str(e))
        self._advance(PipelineState.DECODED)

        if result.mismatch_detected:
            logger.warning("Frames inequality: payload changed after correction")
        self._advance(PipelineState.VALIDATED)

        outcome = Completed(
            payload=result.payload,
            mismatch_detected=result.mismatch_detected,
            corrected_frames=result.corrected_frames,
            uncorrectable_frames=result.uncorrectable_frames,
        )
        self._advance(PipelineState.REPORTED)
        return outcome

    @staticmethod
    def decode(message: Message, original_byte_length: int, original: bytes) -> DecodeResult:
        """Correct, reassemble and validate one received message."""
        blocks, outcomes = decode_message(message)
        try:
            reconstructed = unpack_blocks(blocks, original_byte_length)
        except ValueError as e:
            raise DecodingFailure(str(e)) from e
        return DecodeResult(
            payload=reconstructed,
            mismatch_detected=validate_payload(original, reconstructed),
            outcomes=tuple(outcomes),
        )


def process_payload(
    payload: bytes,
    frame_loss_probability_per_mille: int,
    bit_error_probability_per_mille: int,
    rng: IntegerSource,
) -> Outcome:
    """Simulate transmission of ``payload`` over the protected lossy link."""
    return MessagePipeline(rng).run(
        payload,
        frame_loss_probability_per_mille,
        bit_error_probability_per_mille,
    )


__all__ = [
    "Completed",
    "DecodeResult",
    "Dropped",
    "Failed",
    "FailureReason",
    "MessagePipeline",
    "Outcome",
    "PipelineState",
    "process_payload",
]

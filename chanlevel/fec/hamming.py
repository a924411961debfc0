"""Hamming(15,11) Forward Error Correction codec.

The Hamming(15,11) code encodes 11 data bits into a 15-bit codeword and can:
- Correct any single bit error
- Not reliably detect or correct two or more errors (a double error is
  "corrected" into a different valid codeword)

Codeword layout, using 1-based Hamming positions:
- Positions 1, 2, 4, 8 hold parity bits
- Positions 3, 5, 6, 7, 9..15 hold the data bits, data MSB first
- Position p is stored at integer bit (15 - p), so position 1 is the MSB

Parity bit 2^k is the XOR of every data position whose index has bit k set.
The syndrome of a received word is therefore the position of a single
flipped bit, or 0 when all checks pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from chanlevel.errors import DecodingFailure, EncodingFailure
from chanlevel.typing import Message, NDArrayInt

logger = logging.getLogger(__name__)

CODEWORD_BITS = 15
DATA_BITS = 11
PARITY_BITS = 4

CODEWORD_MASK = (1 << CODEWORD_BITS) - 1
DATA_MASK = (1 << DATA_BITS) - 1

PARITY_POSITIONS = (1, 2, 4, 8)
DATA_POSITIONS = (3, 5, 6, 7, 9, 10, 11, 12, 13, 14, 15)

# Parity portion of the generator matrix.
# Row i is data bit i (MSB first), column k is parity position 2^k.
HAMMING_PARITY = np.array(
    [[(pos >> k) & 1 for k in range(PARITY_BITS)] for pos in DATA_POSITIONS],
    dtype=np.uint8,
)


@dataclass(frozen=True)
class CorrectionOutcome:
    """Per-codeword result of syndrome decoding."""

    corrected_block: int
    error_was_corrected: bool = False
    error_was_uncorrectable: bool = False
    # 1-based Hamming position that was flipped, None when nothing was flipped
    error_position: int | None = None

    @property
    def parity_only(self) -> bool:
        """True when the corrected bit was a parity bit (data was intact)."""
        return self.error_position in PARITY_POSITIONS


def _position_mask(position: int) -> int:
    return 1 << (CODEWORD_BITS - position)


def _data_bits(codeword: int) -> NDArrayInt:
    return np.array(
        [(codeword >> (CODEWORD_BITS - pos)) & 1 for pos in DATA_POSITIONS],
        dtype=np.uint8,
    )


def _parity_bits(data_bits: NDArrayInt) -> NDArrayInt:
    return np.mod(np.dot(data_bits, HAMMING_PARITY), 2)


def _extract_data(codeword: int) -> int:
    data = 0
    for pos in DATA_POSITIONS:
        data = (data << 1) | ((codeword >> (CODEWORD_BITS - pos)) & 1)
    return data


def hamming_encode(data: int) -> int:
    """Encode 11 bits of data using Hamming(15,11).

    Args:
        data: 11-bit data block (0-2047)

    Returns:
        15-bit systematic codeword

    Raises:
        EncodingFailure: if ``data`` does not fit in 11 bits
    """
    if data < 0 or data > DATA_MASK:
        raise EncodingFailure(f"data block {data!r} does not fit in {DATA_BITS} bits")

    data_bits = np.array([(data >> (DATA_BITS - 1 - i)) & 1 for i in range(DATA_BITS)], dtype=np.uint8)
    parity_bits = _parity_bits(data_bits)

    codeword = 0
    for bit, pos in zip(data_bits, DATA_POSITIONS):
        if bit:
            codeword |= _position_mask(pos)
    for bit, pos in zip(parity_bits, PARITY_POSITIONS):
        if bit:
            codeword |= _position_mask(pos)

    return codeword


def hamming_syndrome(codeword: int) -> int:
    """Calculate the 4-bit syndrome of a Hamming(15,11) codeword.

    The stored parity bits are XORed with parity recomputed from the received
    data bits. Read as an integer, the result is the 1-based position of a
    single bit error (0 = all checks pass).
    """
    expected = _parity_bits(_data_bits(codeword))

    syndrome = 0
    for k, pos in enumerate(PARITY_POSITIONS):
        received = (codeword >> (CODEWORD_BITS - pos)) & 1
        syndrome |= (received ^ int(expected[k])) << k

    return syndrome


def hamming_decode(codeword: int) -> tuple[int, CorrectionOutcome]:
    """Correct up to one bit error and extract the 11 data bits.

    Args:
        codeword: 15-bit received codeword

    Returns:
        Tuple of (data_block, outcome)

    Raises:
        DecodingFailure: if ``codeword`` does not fit in 15 bits
    """
    if codeword < 0 or codeword > CODEWORD_MASK:
        raise DecodingFailure(f"codeword {codeword!r} does not fit in {CODEWORD_BITS} bits")

    syndrome = hamming_syndrome(codeword)

    if syndrome == 0:
        data = _extract_data(codeword)
        return data, CorrectionOutcome(corrected_block=data)

    if 1 <= syndrome <= CODEWORD_BITS:
        corrected = codeword ^ _position_mask(syndrome)
        data = _extract_data(corrected)
        return data, CorrectionOutcome(
            corrected_block=data,
            error_was_corrected=True,
            error_position=syndrome,
        )

    # A 4-bit syndrome always names a position; kept for an explicit outcome
    logger.warning("Hamming decode: syndrome %#x maps to no position", syndrome)
    data = _extract_data(codeword)
    return data, CorrectionOutcome(corrected_block=data, error_was_uncorrectable=True)


def encode_blocks(blocks: Iterable[int]) -> Message:
    """Encode a sequence of data blocks into a message of codewords."""
    return np.array([hamming_encode(int(block)) for block in blocks], dtype=np.uint16)


def decode_message(message: Sequence[int] | Message) -> tuple[list[int], list[CorrectionOutcome]]:
    """Decode every codeword of a message.

    Returns:
        Tuple of (data_blocks, outcomes), both in message order
    """
    blocks: list[int] = []
    outcomes: list[CorrectionOutcome] = []
    for codeword in message:
        block, outcome = hamming_decode(int(codeword))
        blocks.append(block)
        outcomes.append(outcome)
    return blocks, outcomes

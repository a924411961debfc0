from __future__ import annotations

from typing import Sequence

DATA_BLOCK_BITS = 11


def int_to_bits(value: int, width: int) -> list[int]:
    """Convert int to big-endian bit list of fixed width."""
    if width <= 0:
        raise ValueError("width must be positive")
    if value < 0 or value >= (1 << width):
        raise ValueError(f"value {value} does not fit in {width} bits")
    return [(value >> (width - 1 - i)) & 1 for i in range(width)]


def bits_to_int(bits: Sequence[int], start: int, length: int) -> int:
    """Extract an integer from a bit sequence."""
    if length <= 0:
        raise ValueError("length must be positive")
    if start < 0 or start + length > len(bits):
        raise ValueError(
            f"cannot read {length} bits from offset {start} (len={len(bits)})"
        )
    value = 0
    for i in range(length):
        value = (value << 1) | (int(bits[start + i]) & 1)
    return value


def bytes_to_bits(data: bytes | bytearray) -> list[int]:
    """Expand bytes into a big-endian bit list."""
    bits: list[int] = []
    for byte in data:
        bits.extend(int_to_bits(byte, 8))
    return bits


def bits_to_bytes(bits: Sequence[int]) -> bytes:
    """Pack a sequence of bits into bytes (MSB first)."""
    if len(bits) % 8 != 0:
        raise ValueError("bit length must be a multiple of 8 to convert to bytes")
    out = bytearray(len(bits) // 8)
    for i in range(len(out)):
        out[i] = bits_to_int(bits, i * 8, 8)
    return bytes(out)


def pad_bits(bits: Sequence[int], block_size: int, pad_bit: int = 0) -> list[int]:
    """Pad bits to a multiple of block_size using pad_bit."""
    if block_size <= 0:
        raise ValueError("block_size must be positive")
    if pad_bit not in (0, 1):
        raise ValueError("pad_bit must be 0 or 1")
    padded = list(bits)
    remainder = len(padded) % block_size
    if remainder:
        padded.extend([pad_bit] * (block_size - remainder))
    return padded


def pack_blocks(data: bytes | bytearray) -> list[int]:
    """Slice a byte stream into 11-bit data blocks.

    The payload is read as one MSB-first bit string. The final block is
    zero-padded on its low-order end, so ``len(result)`` is
    ``ceil(len(data) * 8 / 11)``. Empty input yields no blocks.
    """
    bits = pad_bits(bytes_to_bits(data), DATA_BLOCK_BITS)
    return [
        bits_to_int(bits, start, DATA_BLOCK_BITS)
        for start in range(0, len(bits), DATA_BLOCK_BITS)
    ]


def unpack_blocks(blocks: Sequence[int], original_byte_length: int) -> bytes:
    """Reassemble 11-bit blocks into bytes, dropping the pack-time padding.

    ``original_byte_length`` is the length of the payload handed to
    :func:`pack_blocks`; the caller carries it alongside the blocks.
    """
    if original_byte_length < 0:
        raise ValueError("original_byte_length must be non-negative")
    bits: list[int] = []
    for block in blocks:
        bits.extend(int_to_bits(int(block), DATA_BLOCK_BITS))
    wanted = original_byte_length * 8
    if wanted > len(bits):
        raise ValueError(
            f"{len(blocks)} blocks carry {len(bits)} bits, need {wanted} "
            f"for {original_byte_length} bytes"
        )
    return bits_to_bytes(bits[:wanted])


__all__ = [
    "DATA_BLOCK_BITS",
    "bits_to_bytes",
    "bits_to_int",
    "bytes_to_bits",
    "int_to_bits",
    "pack_blocks",
    "pad_bits",
    "unpack_blocks",
]

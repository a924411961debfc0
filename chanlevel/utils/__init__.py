"""Utility modules for chanlevel."""

from chanlevel.utils.packing import (
    DATA_BLOCK_BITS,
    bits_to_bytes,
    bits_to_int,
    bytes_to_bits,
    int_to_bits,
    pack_blocks,
    pad_bits,
    unpack_blocks,
)

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

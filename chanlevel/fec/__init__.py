"""Forward Error Correction (FEC) module for the simulated channel.

This module provides the block code protecting every frame:
- Hamming(15,11) - Corrects a single bit error per 15-bit codeword

Frames are 11-bit data blocks packed from the payload byte stream.
"""

from chanlevel.fec.hamming import (
    CorrectionOutcome,
    decode_message,
    encode_blocks,
    hamming_decode,
    hamming_encode,
    hamming_syndrome,
)

__all__ = [
    "CorrectionOutcome",
    "decode_message",
    "encode_blocks",
    "hamming_decode",
    "hamming_encode",
    "hamming_syndrome",
]

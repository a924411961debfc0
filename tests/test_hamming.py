"""Reference tests for the Hamming(15,11) codec.

Covers the single-error-correcting guarantee exhaustively: every 11-bit data
block with every single-bit flip of its codeword.
"""

import pytest

from chanlevel.errors import DecodingFailure, EncodingFailure
from chanlevel.fec.hamming import (
    CODEWORD_BITS,
    DATA_POSITIONS,
    PARITY_POSITIONS,
    CorrectionOutcome,
    decode_message,
    encode_blocks,
    hamming_decode,
    hamming_encode,
    hamming_syndrome,
)


class TestHammingEncode:
    """Encoder test vectors and structural checks."""

    def test_encode_zero(self):
        """Encoding zero should produce zero codeword."""
        assert hamming_encode(0) == 0

    def test_encode_all_ones(self):
        """Every parity check covers seven data positions, so all ones stays all ones."""
        assert hamming_encode(0x7FF) == 0x7FFF

    def test_encode_reference_vectors(self):
        # Data MSB sits in position 3, covered by parity 1 and 2
        assert hamming_encode(0x400) == 0x7000
        # Data LSB sits in position 15, covered by every parity bit
        assert hamming_encode(0x001) == 0x6881

    def test_encode_is_systematic(self):
        """Data bits appear unchanged at the data positions."""
        for data in [0x000, 0x7FF, 0x555, 0x2AA, 0x123, 0x4F0]:
            codeword = hamming_encode(data)
            extracted = 0
            for pos in DATA_POSITIONS:
                extracted = (extracted << 1) | ((codeword >> (CODEWORD_BITS - pos)) & 1)
            assert extracted == data

    def test_encode_is_pure(self):
        for data in range(0, 0x800, 37):
            assert hamming_encode(data) == hamming_encode(data)

    def test_encode_is_injective(self):
        codewords = {hamming_encode(data) for data in range(0x800)}
        assert len(codewords) == 0x800
        assert all(0 <= cw <= 0x7FFF for cw in codewords)

    def test_minimum_distance_is_three(self):
        """Any two distinct codewords differ in at least three positions."""
        weights = [bin(hamming_encode(data)).count("1") for data in range(1, 0x800)]
        assert min(weights) == 3

    @pytest.mark.parametrize("data", [-1, 0x800, 0xFFFF])
    def test_encode_rejects_out_of_range(self, data):
        with pytest.raises(EncodingFailure):
            hamming_encode(data)


class TestHammingDecode:
    """Syndrome decoding and single-bit correction."""

    def test_decode_no_errors(self):
        for data in [0x000, 0x7FF, 0x555, 0x2AA, 0x123]:
            decoded, outcome = hamming_decode(hamming_encode(data))
            assert decoded == data
            assert outcome == CorrectionOutcome(corrected_block=data)

    def test_syndrome_names_flipped_position(self):
        codeword = hamming_encode(0x3C5)
        assert hamming_syndrome(codeword) == 0
        for pos in range(1, CODEWORD_BITS + 1):
            corrupted = codeword ^ (1 << (CODEWORD_BITS - pos))
            assert hamming_syndrome(corrupted) == pos

    def test_single_bit_error_correction_exhaustive(self):
        """All 2^11 blocks x 15 flipped positions decode to the original block."""
        for data in range(0x800):
            codeword = hamming_encode(data)
            for bit in range(CODEWORD_BITS):
                decoded, outcome = hamming_decode(codeword ^ (1 << bit))
                assert decoded == data, f"Failed for data={data:#05x} bit={bit}"
                assert outcome.error_was_corrected
                assert not outcome.error_was_uncorrectable
                assert outcome.error_position == CODEWORD_BITS - bit

    def test_parity_error_leaves_data_intact(self):
        data = 0x6A1
        codeword = hamming_encode(data)
        for pos in PARITY_POSITIONS:
            decoded, outcome = hamming_decode(codeword ^ (1 << (CODEWORD_BITS - pos)))
            assert decoded == data
            assert outcome.parity_only
            assert outcome.error_was_corrected

    def test_data_error_is_not_parity_only(self):
        data = 0x6A1
        decoded, outcome = hamming_decode(hamming_encode(data) ^ (1 << (CODEWORD_BITS - 3)))
        assert decoded == data
        assert not outcome.parity_only

    def test_double_error_is_miscorrected(self):
        """Two flipped bits exceed the code's capability and yield a different block.

        This is a limitation of Hamming(15,11), not a decoder defect.
        """
        data = 0x123
        corrupted = hamming_encode(data) ^ 0b11
        decoded, outcome = hamming_decode(corrupted)
        assert decoded != data
        assert outcome.error_was_corrected

    @pytest.mark.parametrize("codeword", [-1, 0x8000, 0x1FFFF])
    def test_decode_rejects_out_of_range(self, codeword):
        with pytest.raises(DecodingFailure):
            hamming_decode(codeword)


class TestMessageHelpers:
    def test_encode_blocks_dtype_and_order(self):
        message = encode_blocks([0x000, 0x7FF, 0x400])
        assert message.dtype.name == "uint16"
        assert list(message) == [0x0000, 0x7FFF, 0x7000]

    def test_encode_blocks_empty(self):
        assert len(encode_blocks([])) == 0

    def test_decode_message_round_trip(self):
        blocks = [0x242, 0x153, 0x098, 0x4F0]
        decoded, outcomes = decode_message(encode_blocks(blocks))
        assert decoded == blocks
        assert not any(o.error_was_corrected for o in outcomes)

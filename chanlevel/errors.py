"""Exceptions raised by the Hamming channel core."""

from __future__ import annotations


class ChannelLevelError(RuntimeError):
    pass


class EncodingFailure(ChannelLevelError):
    """The packer or encoder could not produce a well-formed block sequence."""


class DecodingFailure(ChannelLevelError):
    """Correction, extraction or reassembly violated the codeword shape."""


__all__ = ["ChannelLevelError", "DecodingFailure", "EncodingFailure"]

"""Streaming LZ4 block decompression.

Blocks produced by a stream compressor may refer back to up to 64 KiB of
data decoded before them.  A decompressor keeps that history between calls,
so blocks must be fed in the order they were compressed.
"""

from __future__ import annotations

from .lz4_decompress import (
    WINDOW_SIZE,
    decompress_fast_using_dict,
    decompress_safe_using_dict,
)


class StreamDecompressor:
    """Decode a sequence of LZ4 blocks that share a sliding history."""

    def __init__(self) -> None:
        self._history = b""

    @property
    def dictionary(self) -> bytes:
        """The decoded data the next block may refer to."""
        return self._history

    def set_dictionary(self, dictionary) -> None:
        """Use ``dictionary`` as the data preceding the next block.

        An empty dictionary resets the stream.  Only the last 64 KiB matter.
        """
        self._history = bytes(dictionary)[-WINDOW_SIZE:]

    def _advance(self, decoded: bytes) -> None:
        self._history = (self._history + decoded)[-WINDOW_SIZE:]

    def decompress_safe(self, source, max_output_size: int) -> bytes:
        """Decode the next block, whose output is at most ``max_output_size``.

        Raises LZ4DecodeError on malformed input; the history is then left
        as it was.
        """
        decoded = decompress_safe_using_dict(source, max_output_size, self._history)
        self._advance(decoded)
        return decoded

    def decompress_fast(self, source, original_size: int) -> tuple[bytes, int]:
        """Decode the next block of known decoded size ``original_size``.

        Returns the decoded data and the number of input bytes the block used.
        """
        decoded, consumed = decompress_fast_using_dict(
            source, original_size, self._history
        )
        self._advance(decoded)
        return decoded, consumed
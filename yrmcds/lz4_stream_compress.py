"""Streaming LZ4 block compression.

Each block may refer back to up to 64 KiB of data compressed before it, so
blocks must be decoded in order with the preceding data as dictionary.
"""

from __future__ import annotations

from .lz4_compress import (
    LASTLITERALS,
    MAX_DISTANCE,
    MAX_INPUT_SIZE,
    MEMORY_USAGE,
    MFLIMIT,
    MIN_LENGTH,
    MINMATCH,
    ML_BITS,
    ML_MASK,
    RUN_MASK,
)

WINDOW_SIZE = 64 * 1024

_HASHLOG = MEMORY_USAGE - 2
_HASH_SHIFT = MINMATCH * 8 - _HASHLOG
_SKIP_TRIGGER = 6
_PRIME = 2654435761


class _OutputLimitExceeded(Exception):
    pass


def _write_length(out: bytearray, length: int) -> None:
    while length >= 255:
        out.append(255)
        length -= 255
    out.append(length)


class StreamCompressor:
    """Compress a sequence of blocks that share a sliding 64 KiB history."""

    def __init__(self) -> None:
        self._table: list[int] = []
        self._history = b""
        self._position = 0
        self.reset()

    def reset(self) -> None:
        """Forget all history and start a fresh stream."""
        self._table = [-1] * (1 << _HASHLOG)
        self._history = b""
        self._position = 0

    @property
    def dictionary(self) -> bytes:
        """The data the next block may refer to."""
        return self._history

    def load_dict(self, dictionary) -> int:
        """Replace the history with ``dictionary`` and return its used size.

        Only the last 64 KiB are kept; a dictionary shorter than four bytes
        is ignored and 0 is returned.
        """
        data = bytes(dictionary)
        self.reset()
        if len(data) < MINMATCH:
            return 0
        data = data[-WINDOW_SIZE:]
        self._history = data
        self._position = len(data)
        for p in range(0, len(data) - MINMATCH + 1, 3):
            self._table[self._hash(data, p)] = p
        return len(data)

    def save_dict(self, dict_size: int) -> bytes:
        """Shrink the history to its last ``dict_size`` bytes and return it.

        Sizes above 64 KiB or above the current history are clamped.
        """
        if dict_size < 0:
            raise ValueError("dict_size must not be negative")
        size = min(dict_size, WINDOW_SIZE, len(self._history))
        self._history = self._history[len(self._history) - size:]
        return self._history

    def compress(self, source) -> bytes:
        """Compress ``source`` as the next block of the stream."""
        return self._compress(bytes(source), None)

    def compress_limited(self, source, max_output_size: int) -> bytes:
        """Compress the next block into at most ``max_output_size`` bytes.

        Raises ValueError if the block does not fit; the history still
        advances past ``source`` in that case.
        """
        if max_output_size < 0:
            raise ValueError("max_output_size must not be negative")
        try:
            return self._compress(bytes(source), max_output_size)
        except _OutputLimitExceeded:
            raise ValueError("compressed data does not fit in max_output_size") from None

    @staticmethod
    def _hash(buf: bytes, p: int) -> int:
        seq = int.from_bytes(buf[p:p + 4], "little")
        return ((seq * _PRIME) & 0xFFFFFFFF) >> _HASH_SHIFT

    def _compress(self, src: bytes, max_output: int | None) -> bytes:
        n = len(src)
        if n > MAX_INPUT_SIZE:
            raise ValueError("input too large for LZ4 compression")
        buf = self._history + src
        start = len(self._history)
        base = self._position - start
        try:
            return self._encode(buf, start, base, max_output)
        finally:
            self._history = buf[-WINDOW_SIZE:]
            self._position += n

    def _encode(self, buf: bytes, start: int, base: int, max_output: int | None) -> bytes:
        table = self._table
        hash_at = self._hash
        iend = len(buf)
        out = bytearray()
        anchor = start

        def check(size: int) -> None:
            if max_output is not None and size > max_output:
                raise _OutputLimitExceeded

        def usable(match: int, ip: int) -> bool:
            return (
                match >= 0
                and match + MAX_DISTANCE >= ip
                and buf[match:match + 4] == buf[ip:ip + 4]
            )

        if iend - start >= MIN_LENGTH:
            mflimit = iend - MFLIMIT
            matchlimit = iend - LASTLITERALS

            table[hash_at(buf, start)] = base + start
            ip = start + 1
            forward_h = hash_at(buf, ip)

            while True:
                forward_ip = ip
                step = 1
                search = 1 << _SKIP_TRIGGER
                finished = False
                while True:
                    h = forward_h
                    ip = forward_ip
                    forward_ip += step
                    step = search >> _SKIP_TRIGGER
                    search += 1
                    if forward_ip > mflimit:
                        finished = True
                        break
                    entry = table[h]
                    match = entry - base if entry >= 0 else -1
                    forward_h = hash_at(buf, forward_ip)
                    table[h] = base + ip
                    if usable(match, ip):
                        break
                if finished:
                    break

                while ip > anchor and match > 0 and buf[ip - 1] == buf[match - 1]:
                    ip -= 1
                    match -= 1

                lit_len = ip - anchor
                token = len(out)
                out.append(0)
                check(len(out) + lit_len + (2 + 1 + LASTLITERALS) + lit_len // 255)
                if lit_len >= RUN_MASK:
                    out[token] = RUN_MASK << ML_BITS
                    _write_length(out, lit_len - RUN_MASK)
                else:
                    out[token] = lit_len << ML_BITS
                out += buf[anchor:ip]

                while True:
                    out += (ip - match).to_bytes(2, "little")
                    p_in, p_match = ip + MINMATCH, match + MINMATCH
                    while p_in < matchlimit and buf[p_in] == buf[p_match]:
                        p_in += 1
                        p_match += 1
                    match_len = p_in - (ip + MINMATCH)
                    ip = p_in
                    check(len(out) + (1 + LASTLITERALS) + (match_len >> 8))
                    if match_len >= ML_MASK:
                        out[token] += ML_MASK
                        match_len -= ML_MASK
                        while match_len >= 510:
                            out += b"\xff\xff"
                            match_len -= 510
                        if match_len >= 255:
                            match_len -= 255
                            out.append(255)
                        out.append(match_len)
                    else:
                        out[token] += match_len

                    anchor = ip
                    if ip > mflimit:
                        finished = True
                        break

                    table[hash_at(buf, ip - 2)] = base + ip - 2
                    h = hash_at(buf, ip)
                    entry = table[h]
                    match = entry - base if entry >= 0 else -1
                    table[h] = base + ip
                    if usable(match, ip):
                        token = len(out)
                        out.append(0)
                        continue
                    break
                if finished:
                    break

                ip += 1
                forward_h = hash_at(buf, ip)

        last_run = iend - anchor
        check(len(out) + last_run + 1 + (last_run + 255 - RUN_MASK) // 255)
        if last_run >= RUN_MASK:
            out.append(RUN_MASK << ML_BITS)
            _write_length(out, last_run - RUN_MASK)
        else:
            out.append(last_run << ML_BITS)
        out += buf[anchor:]
        return bytes(out)
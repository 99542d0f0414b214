"""LZ4 block compression (the raw block format, no framing)."""

from __future__ import annotations

VERSION_MAJOR = 1
VERSION_MINOR = 5
VERSION_RELEASE = 0
VERSION_NUMBER = VERSION_MAJOR * 100 * 100 + VERSION_MINOR * 100 + VERSION_RELEASE

MAX_INPUT_SIZE = 0x7E000000
MEMORY_USAGE = 14

MINMATCH = 4
COPYLENGTH = 8
LASTLITERALS = 5
MFLIMIT = COPYLENGTH + MINMATCH
MIN_LENGTH = MFLIMIT + 1
MAX_DISTANCE = (1 << 16) - 1

ML_BITS = 4
ML_MASK = (1 << ML_BITS) - 1
RUN_MASK = (1 << (8 - ML_BITS)) - 1

_HASHLOG = MEMORY_USAGE - 2
_LIMIT_64K = 64 * 1024 + (MFLIMIT - 1)
_SKIP_TRIGGER = 6
_PRIME = 2654435761


class _OutputLimitExceeded(Exception):
    pass


def version_number() -> int:
    """Return the version number of the LZ4 format implementation."""
    return VERSION_NUMBER


def compress_bound(isize: int) -> int:
    """Return the worst-case compressed size for ``isize`` input bytes.

    Returns 0 when the size is negative or larger than ``MAX_INPUT_SIZE``.
    """
    if isize < 0 or isize > MAX_INPUT_SIZE:
        return 0
    return isize + isize // 255 + 16


def _count(src: bytes, p_in: int, p_match: int, limit: int) -> int:
    start = p_in
    while p_in < limit and src[p_in] == src[p_match]:
        p_in += 1
        p_match += 1
    return p_in - start


def _write_length(out: bytearray, length: int) -> None:
    while length >= 255:
        out.append(255)
        length -= 255
    out.append(length)


def _compress_block(src: bytes, max_output: int | None) -> bytes:
    n = len(src)
    if n > MAX_INPUT_SIZE:
        raise ValueError("input too large for LZ4 compression")

    def check(size: int) -> None:
        if max_output is not None and size > max_output:
            raise _OutputLimitExceeded

    out = bytearray()
    anchor = 0

    if n >= MIN_LENGTH:
        small = n < _LIMIT_64K
        hashlog = _HASHLOG + 1 if small else _HASHLOG
        shift = MINMATCH * 8 - hashlog
        check_distance = not small
        table = [0] * (1 << hashlog)

        def hash_at(p: int) -> int:
            seq = int.from_bytes(src[p:p + 4], "little")
            return ((seq * _PRIME) & 0xFFFFFFFF) >> shift

        mflimit = n - MFLIMIT
        matchlimit = n - LASTLITERALS

        table[hash_at(0)] = 0
        ip = 1
        forward_h = hash_at(ip)

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
                match = table[h]
                forward_h = hash_at(forward_ip)
                table[h] = ip
                if check_distance and match + MAX_DISTANCE < ip:
                    continue
                if src[match:match + 4] != src[ip:ip + 4]:
                    continue
                break
            if finished:
                break

            while ip > anchor and match > 0 and src[ip - 1] == src[match - 1]:
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
            out += src[anchor:ip]

            while True:
                out += (ip - match).to_bytes(2, "little")
                match_len = _count(src, ip + MINMATCH, match + MINMATCH, matchlimit)
                ip += MINMATCH + match_len
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

                table[hash_at(ip - 2)] = ip - 2
                h = hash_at(ip)
                match = table[h]
                table[h] = ip
                if match + MAX_DISTANCE >= ip and src[match:match + 4] == src[ip:ip + 4]:
                    token = len(out)
                    out.append(0)
                    continue
                break
            if finished:
                break

            ip += 1
            forward_h = hash_at(ip)

    last_run = n - anchor
    check(len(out) + last_run + 1 + (last_run + 255 - RUN_MASK) // 255)
    if last_run >= RUN_MASK:
        out.append(RUN_MASK << ML_BITS)
        _write_length(out, last_run - RUN_MASK)
    else:
        out.append(last_run << ML_BITS)
    out += src[anchor:]
    return bytes(out)


def compress(source) -> bytes:
    """Compress ``source`` into a single LZ4 block.

    Raises ValueError if the input exceeds ``MAX_INPUT_SIZE``.
    """
    return _compress_block(bytes(source), None)


def compress_limited(source, max_output_size: int) -> bytes:
    """Compress ``source`` into a block of at most ``max_output_size`` bytes.

    Raises ValueError if the input is too large or the output would not fit.
    """
    if max_output_size < 0:
        raise ValueError("max_output_size must not be negative")
    try:
        return _compress_block(bytes(source), max_output_size)
    except _OutputLimitExceeded:
        raise ValueError("compressed data does not fit in max_output_size") from None
"""LZ4 block decompression (the raw block format, no framing)."""

from __future__ import annotations

from .lz4_compress import COPYLENGTH, LASTLITERALS, MFLIMIT, MINMATCH, ML_BITS, ML_MASK, RUN_MASK

WINDOW_SIZE = 64 * 1024


class LZ4DecodeError(ValueError):
    """Raised when a compressed block is malformed or does not fit the output."""

    def __init__(self, position: int) -> None:
        super().__init__(f"malformed LZ4 block near input offset {position}")
        self.position = position


def _check_size(name: str, value: int) -> None:
    if value < 0:
        raise ValueError(f"{name} must not be negative")


def _decode_block(
    source,
    output_size: int,
    *,
    safe: bool,
    target_size: int | None = None,
    dictionary=b"",
) -> tuple[bytes, int]:
    """Decode one block and return ``(decoded, bytes_consumed)``.

    ``safe`` selects decoding bounded by the input size, where ``output_size``
    is the largest output allowed; otherwise ``output_size`` is the exact
    decoded size.  ``target_size`` enables partial decoding.  ``dictionary``
    holds data that precedes the block and may be referenced by matches.
    """
    src = bytes(source)
    iend = len(src)
    prefix = bytes(dictionary)[-WINDOW_SIZE:]
    out = bytearray(prefix)
    base = len(prefix)
    oend = output_size
    partial = target_size is not None
    oexit = min(target_size, oend - MFLIMIT) if partial else 0

    if output_size == 0:
        if safe:
            if iend == 1 and src[0] == 0:
                return b"", 1
            raise LZ4DecodeError(0)
        if iend >= 1 and src[0] == 0:
            return b"", 1
        raise LZ4DecodeError(0)

    ip = 0
    while True:
        if ip >= iend:
            raise LZ4DecodeError(ip)
        token = src[ip]
        ip += 1

        length = token >> ML_BITS
        if length == RUN_MASK:
            while True:
                if ip >= iend:
                    raise LZ4DecodeError(ip)
                s = src[ip]
                ip += 1
                length += s
                if s != 255 or (safe and not ip < iend - RUN_MASK):
                    break

        op = len(out) - base
        cpy = op + length
        if safe:
            limit = oexit if partial else oend - MFLIMIT
            last = cpy > limit or ip + length > iend - (2 + 1 + LASTLITERALS)
        else:
            last = cpy > oend - COPYLENGTH

        if last:
            if partial:
                if cpy > oend or (safe and ip + length > iend):
                    raise LZ4DecodeError(ip)
            elif safe:
                if ip + length != iend or cpy > oend:
                    raise LZ4DecodeError(ip)
            elif cpy != oend:
                raise LZ4DecodeError(ip)
            if ip + length > iend:
                raise LZ4DecodeError(ip)
            out += src[ip:ip + length]
            ip += length
            break

        if ip + length + 2 > iend:
            raise LZ4DecodeError(ip)
        out += src[ip:ip + length]
        ip += length

        offset = src[ip] | (src[ip + 1] << 8)
        ip += 2
        match = len(out) - offset
        if offset == 0 or match < 0:
            raise LZ4DecodeError(ip)

        length = token & ML_MASK
        if length == ML_MASK:
            while True:
                if (safe and ip > iend - LASTLITERALS) or ip >= iend:
                    raise LZ4DecodeError(ip)
                s = src[ip]
                ip += 1
                length += s
                if s != 255:
                    break
        length += MINMATCH

        op = len(out) - base
        if op + length > oend - LASTLITERALS:
            raise LZ4DecodeError(ip)

        if offset >= length:
            out += out[match:match + length]
        else:
            pattern = bytes(out[match:])
            repeats = length // offset + 1
            out += (pattern * repeats)[:length]

    return bytes(out[base:]), ip


def decompress_safe(source, max_decompressed_size: int) -> bytes:
    """Decode a whole block whose output is at most ``max_decompressed_size``.

    Raises LZ4DecodeError on malformed input or when the output would not fit.
    """
    _check_size("max_decompressed_size", max_decompressed_size)
    data, _ = _decode_block(source, max_decompressed_size, safe=True)
    return data


def decompress_safe_partial(source, target_output_size: int, max_decompressed_size: int) -> bytes:
    """Decode a block, stopping once ``target_output_size`` bytes are reached.

    The result may be longer than the target; it is always a prefix of the
    fully decoded block.
    """
    _check_size("target_output_size", target_output_size)
    _check_size("max_decompressed_size", max_decompressed_size)
    data, _ = _decode_block(
        source, max_decompressed_size, safe=True, target_size=target_output_size
    )
    return data


def decompress_fast(source, original_size: int) -> tuple[bytes, int]:
    """Decode a block of known decoded size ``original_size``.

    Returns the decoded data and the number of input bytes the block used,
    so ``source`` may carry trailing data.
    """
    _check_size("original_size", original_size)
    return _decode_block(source, original_size, safe=False)


def decompress_safe_using_dict(source, max_decompressed_size: int, dictionary) -> bytes:
    """Like :func:`decompress_safe`, with ``dictionary`` preceding the block."""
    _check_size("max_decompressed_size", max_decompressed_size)
    data, _ = _decode_block(
        source, max_decompressed_size, safe=True, dictionary=dictionary
    )
    return data


def decompress_fast_using_dict(source, original_size: int, dictionary) -> tuple[bytes, int]:
    """Like :func:`decompress_fast`, with ``dictionary`` preceding the block."""
    _check_size("original_size", original_size)
    return _decode_block(source, original_size, safe=False, dictionary=dictionary)
# yrmcds

A dependency-free, pure Python implementation of the LZ4 block format
(raw blocks, no frame format), as used for transparent value compression
by yrmcds clients. It offers one-shot compression and decompression and
a streaming mode in which each block can refer back to up to 64 KiB of
earlier data.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## One-shot compression

`yrmcds.lz4_compress` provides:

- `compress(source)`: compress bytes-like data into one block.
- `compress_limited(source, max_output_size)`: the same, but raises
  `ValueError` if the block would be larger than `max_output_size`.
- `compress_bound(isize)`: the worst-case block size for `isize` input
  bytes, or 0 for a negative size or one above `MAX_INPUT_SIZE`.
- `version_number()`: the LZ4 format version number (10500).

Input larger than `MAX_INPUT_SIZE` raises `ValueError`.

## One-shot decompression

`yrmcds.lz4_decompress` provides:

- `decompress_safe(source, max_decompressed_size)`: decode a whole
  block whose output is at most `max_decompressed_size` bytes.
- `decompress_safe_partial(source, target_output_size, max_decompressed_size)`:
  stop once at least `target_output_size` bytes are decoded; the result
  is a prefix of the full output and may be longer than the target.
- `decompress_fast(source, original_size)`: decode a block of known
  output size; returns `(data, bytes_consumed)`, so `source` may carry
  trailing data.
- `decompress_safe_using_dict(source, max_decompressed_size, dictionary)`
  and `decompress_fast_using_dict(source, original_size, dictionary)`:
  the same, with `dictionary` as the data that precedes the block.

Malformed input, or output that does not fit, raises `LZ4DecodeError`
(a subclass of `ValueError`) whose `position` attribute is the input
offset where decoding failed. Negative sizes raise `ValueError`.

```python
from yrmcds.lz4_compress import compress, compress_bound
from yrmcds.lz4_decompress import decompress_safe

data = b"hello hello hello hello hello"
packed = compress(data)
assert len(packed) <= compress_bound(len(data))
assert decompress_safe(packed, len(data)) == data
```

## Streaming

`yrmcds.lz4_stream_compress.StreamCompressor` compresses a sequence of
blocks that share a sliding 64 KiB history:

- `compress(source)` and `compress_limited(source, max_output_size)`
  compress the next block.
- `load_dict(dictionary)` replaces the history with the last 64 KiB of
  `dictionary` and returns the size used (0 if shorter than four bytes).
- `save_dict(dict_size)` shrinks the history to its last `dict_size`
  bytes (at most 64 KiB) and returns it.
- `reset()` starts a fresh stream; `dictionary` shows the current history.

`yrmcds.lz4_stream_decompress.StreamDecompressor` decodes such blocks in
the order they were compressed:

- `decompress_safe(source, max_output_size)` returns the decoded block.
- `decompress_fast(source, original_size)` returns
  `(data, bytes_consumed)`.
- `set_dictionary(dictionary)` sets the data preceding the next block;
  an empty dictionary resets the stream.

```python
from yrmcds.lz4_stream_compress import StreamCompressor
from yrmcds.lz4_stream_decompress import StreamDecompressor

blocks = [b"first line of a log\n", b"first line of a log, again\n"]
compressor = StreamCompressor()
packed = [compressor.compress(block) for block in blocks]

decompressor = StreamDecompressor()
for block, data in zip(blocks, packed):
    assert decompressor.decompress_safe(data, 1024) == block
```

## What this package does not do

It contains no network client: it does not connect to a yrmcds or
memcached server, send commands or read replies, and it installs no
command-line tools. It implements only the LZ4 block format, not the
LZ4 frame format.
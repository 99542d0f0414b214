"""Pure Python LZ4 block codec with one-shot and streaming compression."""

__version__ = "1.2.1"
"""LZ77 variant used by SQSH chunks (compression type 1).

Each tag byte carries eight flags, least significant bit first. A clear flag
means one literal byte follows. A set flag means a little-endian 16-bit word
follows: the high 12 bits are a pointer into a 4096-byte ring window and the
low 4 bits are the copy length minus two. A zero pointer ends the stream.
"""

from __future__ import annotations

WINDOW_SIZE = 4096
WINDOW_MASK = WINDOW_SIZE - 1


class Lz77Error(ValueError):
    """Compressed stream is malformed or overruns its declared size."""


def decompress_lz77(src: bytes, expected_size: int) -> bytes:
    """Decode one LZ77 stream, refusing to produce more than ``expected_size`` bytes."""
    window = bytearray(WINDOW_SIZE)
    write_pos = 1
    out = bytearray()
    pos = 0
    end = len(src)

    while True:
        if pos >= end:
            raise Lz77Error("stream ended before terminator")
        tag = src[pos]
        pos += 1
        for bit in range(8):
            if not tag & (1 << bit):
                if pos >= end:
                    raise Lz77Error("literal past end of stream")
                value = src[pos]
                pos += 1
                out.append(value)
                window[write_pos] = value
                write_pos = (write_pos + 1) & WINDOW_MASK
            else:
                if pos + 1 >= end:
                    raise Lz77Error("back-reference past end of stream")
                word = src[pos] | (src[pos + 1] << 8)
                pos += 2
                read_pos = word >> 4
                if read_pos == 0:
                    return bytes(out)
                for _ in range((word & 0x0F) + 2):
                    value = window[read_pos]
                    out.append(value)
                    window[write_pos] = value
                    read_pos = (read_pos + 1) & WINDOW_MASK
                    write_pos = (write_pos + 1) & WINDOW_MASK
            if len(out) > expected_size:
                raise Lz77Error(f"output exceeds declared size {expected_size}")


__all__ = ["Lz77Error", "WINDOW_SIZE", "decompress_lz77"]

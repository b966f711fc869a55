"""
PackBits Compression for Raster Lines.

Raster data sent in TIFF compression mode is PackBits encoded:

    Control  Meaning
    0..127   Copy the next (control + 1) bytes literally
    -127..-1 Repeat the next byte (1 - control) times
    -128     No operation

Encoding is done by the packbits library, which picks runs greedily from
the left: a repeat run needs at least two identical bytes and a lone byte
is always part of a literal run.
"""

import packbits

# Bytes per raster line (128 print head pins, one bit per pin)
RASTER_LINE_BYTES = 16


def compress(line: bytes) -> bytes:
    """
    Compress a raster line.

    Args:
        line: Uncompressed raster bytes (normally RASTER_LINE_BYTES long)

    Returns:
        PackBits encoded bytes, never longer than twice the input
    """
    return packbits.encode(bytes(line))


def _check_runs(data: bytes) -> None:
    """Raise ValueError if a run is cut off by the end of the data."""
    pos = 0
    while pos < len(data):
        control = data[pos]
        if control == 0x80:
            pos += 1
            continue
        literal = control < 0x80
        needed = control + 1 if literal else 1
        if pos + 1 + needed > len(data):
            kind = "literal" if literal else "repeat"
            raise ValueError(f"Truncated {kind} run at offset {pos}")
        pos += 1 + needed


def decompress(data: bytes) -> bytes:
    """
    Expand PackBits encoded data.

    Raises:
        ValueError: If the data ends in the middle of a run
    """
    data = bytes(data)
    _check_runs(data)
    return packbits.decode(data)

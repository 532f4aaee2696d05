"""Byte to binary-digit text rendering."""

_BYTE_BITS = tuple(format(value, "08b") for value in range(256))


def byte_to_bits(value: int) -> str:
    """Render one byte as 8 binary digits, most significant bit first.

    Args:
        value: Unsigned byte value (0-255)

    Returns:
        8-character string of '0' and '1'

    Raises:
        ValueError: If value is outside 0-255
    """
    if not 0 <= value <= 255:
        raise ValueError(f"Byte value out of range: {value}")
    return _BYTE_BITS[value]


def render_chunk(data: bytes | bytearray | memoryview) -> str:
    """Render a chunk of bytes as concatenated 8-digit groups.

    No separator is placed between bytes of the same chunk.
    """
    return "".join(map(_BYTE_BITS.__getitem__, bytes(data)))

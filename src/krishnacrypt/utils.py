"""
Utility functions for byte/state conversions and hex formatting.

The cipher state is a 4x4 byte matrix in row-major order:
  state[row][col] where row, col in [0..3]

Row-major mapping from a 16-byte block:
  byte[0]  -> state[0][0]
  byte[1]  -> state[0][1]
  byte[2]  -> state[0][2]
  byte[3]  -> state[0][3]
  byte[4]  -> state[1][0]
  ...
  byte[15] -> state[3][3]
"""

from .config import BLOCK_SIZE


def require_block(data: bytes, name: str = "Block") -> None:
    """Raise ValueError unless data is exactly one block long."""
    if len(data) != BLOCK_SIZE:
        raise ValueError(f"{name} must be {BLOCK_SIZE} bytes, got {len(data)}")


def bytes_to_state(data: bytes) -> list[list[int]]:
    """
    Convert 16 bytes to a 4x4 state (row-major).

    Args:
        data: 16 bytes of input

    Returns:
        4x4 list of integers (0-255)
    """
    require_block(data, "Data")
    return [list(data[row * 4:row * 4 + 4]) for row in range(4)]


def format_state_grid(state: list[list[int]]) -> str:
    """
    Format state as a readable 4x4 grid.

    Returns multi-line string like:
      2b 28 ab 09
      7e ae f7 cf
      15 d2 15 4f
      16 a6 88 3c
    """
    lines = []
    for row in range(4):
        row_hex = [f"{state[row][col]:02x}" for col in range(4)]
        lines.append("  " + " ".join(row_hex))
    return "\n".join(lines)


def format_bytes_grid(data: bytes) -> str:
    """
    Format 16 bytes as a readable 4x4 grid (row-major view).
    """
    return format_state_grid(bytes_to_state(data))


def xor_bytes(a: bytes, b: bytes) -> bytes:
    """
    XOR two byte sequences of equal length.
    """
    if len(a) != len(b):
        raise ValueError(f"Length mismatch: {len(a)} vs {len(b)}")
    return bytes(x ^ y for x, y in zip(a, b))


def split_blocks(data: bytes) -> list[bytes]:
    """Split block-aligned data into 16-byte blocks."""
    if len(data) % BLOCK_SIZE:
        raise ValueError(f"Length {len(data)} is not a multiple of {BLOCK_SIZE}")
    return [data[i:i + BLOCK_SIZE] for i in range(0, len(data), BLOCK_SIZE)]


def encode_text(text: str) -> bytes:
    """
    Encode text as UTF-8, replacing unpaired surrogates with U+FFFD.

    Surrogate pairs are joined into one character first, so the bytes
    match what a UTF-16 string runtime would hash or encrypt.
    """
    utf16 = text.encode("utf-16-le", "surrogatepass")
    return utf16.decode("utf-16-le", "replace").encode("utf-8")

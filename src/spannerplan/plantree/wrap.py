"""Hard wrapping of operator text by terminal cell width."""

from __future__ import annotations

from rich.cells import cell_len


def wrap(text: str, width: int) -> str:
    """
    Insert line breaks so no line exceeds `width` terminal cells.

    Breaks fall between characters, not words. Existing newlines reset the
    line. A break is only inserted after a line holds at least one
    character, so a character wider than `width` still gets its own line.

    Args:
        text: Text to wrap.
        width: Maximum line width in cells; values below 1 count as 1.

    Returns:
        The wrapped text.
    """
    width = max(width, 1)

    out: list[str] = []
    line_width = 0
    for char in text:
        if char == "\n":
            out.append(char)
            line_width = 0
            continue

        char_width = cell_len(char)
        if line_width > 0 and line_width + char_width > width:
            out.append("\n")
            line_width = 0
        out.append(char)
        line_width += char_width
    return "".join(out)

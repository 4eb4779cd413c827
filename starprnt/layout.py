"""Cell contents for tables and boxes, and rendering them to printed lines.

A cell is either literal text or a callback that receives a fresh, embedded
encoder of the cell's width. Either way the result is a list of byte strings,
one per printed line, each exactly as wide as the cell.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, List, Union

from starprnt.exceptions import InvalidWidthError
from starprnt.wrapping import wrap

if TYPE_CHECKING:
    from starprnt.encoder import StarPrntEncoder

logger = logging.getLogger(__name__)

LINE_TERMINATOR = b"\n\r"


@dataclass(frozen=True)
class Literal:
    """Plain text, wrapped and padded to the cell width."""

    text: str


@dataclass(frozen=True)
class Composed:
    """Callback drawing the cell on an embedded encoder."""

    render: Callable[["StarPrntEncoder"], Any]


CellContent = Union[Literal, Composed]


def as_content(value: Any) -> CellContent:
    """Convert a string or callable into a cell content variant."""
    if isinstance(value, (Literal, Composed)):
        return value
    if isinstance(value, str):
        return Literal(value)
    if callable(value):
        return Composed(value)
    raise TypeError(f"Cell content must be a string or a callable, not {type(value).__name__}")


def split_lines(data: bytes) -> List[bytes]:
    """Split encoded output into printed lines at every line terminator.

    A trailing empty fragment does not count as a line.
    """
    lines = data.split(LINE_TERMINATOR)
    if not lines[-1]:
        lines.pop()
    return lines


def blank_line(width: int) -> bytes:
    return b" " * width


def pad_lines(lines: List[bytes], count: int, width: int, vertical_align: str = "top") -> List[bytes]:
    """Add blank lines until ``count`` lines are present.

    Blank lines go in front for ``bottom`` alignment, after the content otherwise.
    """
    missing = [blank_line(width)] * max(0, count - len(lines))
    if vertical_align == "bottom":
        return missing + lines
    return lines + missing


def render_cell(
    content: CellContent,
    width: int,
    align: str,
    encode_text: Callable[[str], bytes],
    nested: Callable[[], "StarPrntEncoder"],
) -> List[bytes]:
    """Render ``content`` into lines of exactly ``width`` columns.

    ``encode_text`` turns literal lines into bytes, ``nested`` builds the
    embedded encoder handed to composed content.
    """

    if width < 1:
        raise InvalidWidthError(f"Cell width must be at least 1, got {width}")

    if isinstance(content, Literal):
        lines = wrap(content.text, width)
        if align == "right":
            return [encode_text(line.rjust(width)) for line in lines]
        return [encode_text(line.ljust(width)) for line in lines]

    encoder = nested()
    content.render(encoder)
    lines = split_lines(encoder.encode())
    logger.debug("Rendered composed cell of width %d into %d line(s)", width, len(lines))
    return lines

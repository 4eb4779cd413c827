"""Word wrapping that respects text already printed on the current line."""

from __future__ import annotations

import textwrap
from typing import List

# Stands in for characters already on the line; must not be whitespace
_PLACEHOLDER = "-"


def wrap(value: str, width: int | None, indent: int = 0) -> List[str]:
    """Wrap ``value`` to ``width`` columns and return the lines.

    ``indent`` is the cursor position on the current line: the first returned
    line only gets the remaining ``width - indent`` columns, and is empty when
    the cursor is already at or past ``width``. Explicit ``\\n``
    characters always break. Whitespace at the end of the text is kept when it
    still fits, so consecutive calls can be chained without losing spaces.
    """

    if not width:
        return [value]

    if indent >= width:
        # Nothing fits on the current line, continue on the next one
        return [""] + wrap(value.lstrip(" "), width)

    wrapper = textwrap.TextWrapper(
        width=width,
        expand_tabs=False,
        replace_whitespace=False,
        break_on_hyphens=False,
    )

    lines: List[str] = []
    for paragraph in (_PLACEHOLDER * indent + value).split("\n"):
        wrapped = wrapper.wrap(paragraph) or [""]
        trailing = paragraph[len(paragraph.rstrip()):]
        if trailing and len(wrapped[-1]) + len(trailing) <= width:
            wrapped[-1] += trailing
        lines.extend(wrapped)

    # The placeholder is shorter than a line, so it always opens the first one
    lines[0] = lines[0][indent:]
    return lines

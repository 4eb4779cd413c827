"""Chainable command encoder for StarPRNT and Star Line receipt printers."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable, List, Mapping, Sequence, Union

from starprnt import codepages, raster
from starprnt.exceptions import (
    InvalidHeightError,
    InvalidImageDimensionsError,
    InvalidQrErrorLevelError,
    InvalidQrModelError,
    InvalidQrSizeError,
    InvalidWidthError,
    UnknownCodepageError,
    UnsupportedAlignmentError,
    UnsupportedCodepageError,
    UnsupportedInEmbeddedContextError,
    UnsupportedSymbologyError,
)
from starprnt.layout import Literal, as_content, blank_line, pad_lines, render_cell
from starprnt.options import EncoderOptions
from starprnt.wrapping import wrap

logger = logging.getLogger(__name__)

ESC = 0x1B
GS = 0x1D
RS = 0x1E

NEWLINE = b"\n\r"

ALIGNMENTS = {
    "left": 0x00,
    "center": 0x01,
    "right": 0x02,
}

SYMBOLOGIES = {
    "upce": 0x00,
    "upca": 0x01,
    "ean8": 0x02,
    "ean13": 0x03,
    "code39": 0x04,
    "itf": 0x05,
    "code128": 0x06,
    "code93": 0x07,
    "nw-7": 0x08,
    "gs1-128": 0x09,
    "gs1-databar-omni": 0x0A,
    "gs1-databar-truncated": 0x0B,
    "gs1-databar-limited": 0x0C,
    "gs1-databar-expanded": 0x0D,
}

QR_MODELS = {1: 0x01, 2: 0x02}

QR_ERROR_LEVELS = {
    "l": 0x00,
    "m": 0x01,
    "q": 0x02,
    "h": 0x03,
}

# Line drawing glyphs in cp437: top-left, top-right, bottom-left, bottom-right, horizontal, vertical
BOX_GLYPHS = {
    "single": (0xDA, 0xBF, 0xC0, 0xD9, 0xC4, 0xB3),
    "double": (0xC9, 0xBB, 0xC8, 0xBC, 0xCD, 0xBA),
}

_SNAKE_CASE = {
    "marginLeft": "margin_left",
    "marginRight": "margin_right",
    "paddingLeft": "padding_left",
    "paddingRight": "padding_right",
    "verticalAlign": "vertical_align",
}

Raw = Union[bytes, bytearray, int, Iterable[Any]]


def _option(options: Mapping[str, Any], name: str, default: Any = None) -> Any:
    """Read a layout option by its camelCase or snake_case name."""
    if name in options:
        return options[name]
    return options.get(_SNAKE_CASE.get(name, name), default)


def _to_bytes(item: Raw) -> bytes:
    if isinstance(item, (bytes, bytearray)):
        return bytes(item)
    if isinstance(item, int):
        return bytes((item,))
    if isinstance(item, str):
        raise TypeError("Raw data must be bytes or integers; use text() for strings")
    return b"".join(_to_bytes(part) for part in item)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class StyleState:
    """Text style currently active on the printer."""

    codepage: int = 0
    align: str = "left"
    bold: bool = False
    italic: bool = False
    underline: Union[bool, int] = False
    invert: bool = False
    width: int = 1
    height: int = 1


class StarPrntEncoder:
    """Build a byte stream of StarPRNT commands.

    Every command method returns the encoder itself so calls can be chained::

        data = (
            StarPrntEncoder(width=48)
            .initialize()
            .align("center")
            .bold()
            .line("Receipt")
            .bold()
            .cut()
            .encode()
        )

    An encoder created with a ``width`` and ``embedded=True`` renders the
    contents of a table cell or box: alignment is applied by padding every
    line to the full width, and commands that cannot live inside a cell
    (barcodes, QR codes, images, cut, pulse) are rejected.
    """

    language = "star-prnt"

    def __init__(self, options: EncoderOptions | None = None, **overrides: Any) -> None:
        self._options = replace(options or EncoderOptions(), **EncoderOptions.normalize(overrides))
        self._mapping = codepages.resolve_mapping(self._options.codepage_mapping)
        self._embedded = bool(self._options.width and self._options.embedded)
        self._reset()

    def _reset(self) -> None:
        """Clear the queue, buffer and style state, keeping the options."""

        self._buffer: List[bytes] = []
        self._queued: List[bytes] = []
        self._cursor = 0
        self._codepage = "ascii"
        self._state = StyleState()

    @property
    def options(self) -> EncoderOptions:
        return self._options

    @property
    def embedded(self) -> bool:
        return self._embedded

    @property
    def cursor(self) -> int:
        """Columns used on the current line, scaled by the text width."""
        return self._cursor

    @property
    def state(self) -> StyleState:
        return replace(self._state)

    def _encode(self, value: str) -> bytes:
        """Encode text with the current code page, switching code pages in auto mode."""

        if self._codepage != "auto":
            return codepages.encode(value, self._codepage)

        candidates = [c for c in self._options.codepage_candidates if c in self._mapping]

        data = bytearray()
        for run in codepages.auto_encode(value, candidates):
            identifier = self._mapping[run.codepage]
            data += bytes((ESC, GS, 0x74, identifier))
            data += run.data
            self._state.codepage = identifier
        return bytes(data)

    def _queue(self, *items: Raw) -> None:
        self._queued.extend(_to_bytes(item) for item in items)

    def _flush(self, line_end: bool = False) -> None:
        """Move queued fragments into the buffer.

        Embedded encoders pad the line to their full width here, as only now
        the final cursor position is known. Nothing happens when there is no
        pending content, unless a line is being terminated.
        """

        if not (self._queued or self._cursor or line_end):
            return

        if self._embedded:
            indent = max(0, self._options.width - self._cursor)

            if self._state.align == "left":
                self._queued.append(blank_line(indent))

            elif self._state.align == "center":
                remainder = indent % 2
                indent = indent // 2

                if indent > 0:
                    self._queued.append(blank_line(indent))

                if indent + remainder > 0:
                    self._queued.insert(0, blank_line(indent + remainder))

            elif self._state.align == "right":
                self._queued.insert(0, blank_line(indent))

        self._buffer.extend(self._queued)
        self._queued = []
        self._cursor = 0

    def _restore_state(self) -> None:
        """Re-emit styles and code page after drawing boxes or lines."""

        self.bold(self._state.bold)
        self.italic(self._state.italic)
        self.underline(self._state.underline)
        self.invert(self._state.invert)
        self._queue(bytes((ESC, GS, 0x74, self._state.codepage)))

    def _select_line_drawing(self) -> bytes:
        return bytes((ESC, GS, 0x74, self._codepage_identifier("cp437")))

    def _codepage_identifier(self, codepage: str) -> int:
        try:
            return self._mapping[codepage]
        except KeyError:
            raise UnsupportedCodepageError(codepage) from None

    def _nested(self, width: int, align: str) -> Callable[[], "StarPrntEncoder"]:
        """Return a factory for embedded encoders used by cells and boxes."""

        def factory() -> StarPrntEncoder:
            encoder = StarPrntEncoder(self._options, width=width, embedded=True)
            encoder._codepage = self._codepage
            encoder._state.codepage = self._state.codepage
            encoder.align(align)
            return encoder

        return factory

    def _ensure_not_embedded(self, command: str) -> None:
        if self._embedded:
            raise UnsupportedInEmbeddedContextError(command)

    def initialize(self) -> "StarPrntEncoder":
        """Reset the printer to its power-on state."""

        self._queue(bytes((ESC, 0x40, 0x18)))
        self._flush()
        return self

    def codepage(self, codepage: str) -> "StarPrntEncoder":
        """Select the code page used for following text.

        ``auto`` picks a code page per run of text from the configured
        candidates and emits the switches as needed.
        """

        if codepage == "auto":
            self._codepage = codepage
            return self

        if not codepages.supports(codepage):
            raise UnknownCodepageError(codepage)

        identifier = self._codepage_identifier(codepage)

        self._codepage = codepage
        self._state.codepage = identifier
        self._queue(bytes((ESC, GS, 0x74, identifier)))
        return self

    def text(self, value: str, wrap_width: int | None = None) -> "StarPrntEncoder":
        """Print text, wrapping at ``wrap_width`` or the paper width."""

        width = wrap_width or (self._options.width if self._options.word_wrap else None)
        lines = wrap(value, width, self._cursor)

        for index, line in enumerate(lines):
            self._queue(self._encode(line))

            self._cursor += len(line) * self._state.width

            if self._options.width and not self._embedded:
                self._cursor = self._cursor % self._options.width

            if index < len(lines) - 1:
                self.newline()

        return self

    def newline(self) -> "StarPrntEncoder":
        self._flush(line_end=True)
        self._queue(NEWLINE)

        # Star Line page buffering loses styles per line in composed output
        if self._embedded:
            self._restore_state()

        return self

    def line(self, value: str, wrap_width: int | None = None) -> "StarPrntEncoder":
        """Print text followed by a newline."""
        return self.text(value, wrap_width).newline()

    def underline(self, value: Union[bool, int, None] = None) -> "StarPrntEncoder":
        if value is None:
            value = not self._state.underline

        self._state.underline = value
        self._queue(bytes((ESC, 0x2D, int(value))))
        return self

    def italic(self, value: bool | None = None) -> "StarPrntEncoder":
        """No-op: StarPRNT printers have no italic mode."""
        return self

    def bold(self, value: bool | None = None) -> "StarPrntEncoder":
        if value is None:
            value = not self._state.bold

        self._state.bold = bool(value)
        self._queue(bytes((ESC, 0x45 if value else 0x46)))
        return self

    def invert(self, value: bool | None = None) -> "StarPrntEncoder":
        """White text on black."""
        if value is None:
            value = not self._state.invert

        self._state.invert = bool(value)
        self._queue(bytes((ESC, 0x34 if value else 0x35)))
        return self

    def _select_size(self) -> None:
        # Width and height are always set together
        self._queue(bytes((ESC, 0x69, self._state.height - 1, self._state.width - 1)))

    def width(self, width: int = 1) -> "StarPrntEncoder":
        """Change the width multiplier of text, 1 to 6."""

        if not _is_int(width):
            raise InvalidWidthError("Width must be a number")

        if width < 1 or width > 6:
            raise InvalidWidthError("Width must be between 1 and 6")

        self._state.width = width
        self._select_size()
        return self

    def height(self, height: int = 1) -> "StarPrntEncoder":
        """Change the height multiplier of text, 1 to 6."""

        if not _is_int(height):
            raise InvalidHeightError("Height must be a number")

        if height < 1 or height > 6:
            raise InvalidHeightError("Height must be between 1 and 6")

        self._state.height = height
        self._select_size()
        return self

    def size(self, value: str = "normal") -> "StarPrntEncoder":
        """Select the font size: ``smaller``, ``small`` or ``normal``."""

        if value == "smaller":
            font = 0x02
        elif value == "small":
            font = 0x01
        else:
            font = 0x00

        self._queue(bytes((ESC, RS, 0x46, font)))
        return self

    def align(self, value: str) -> "StarPrntEncoder":
        """Align following lines ``left``, ``center`` or ``right``."""

        if value not in ALIGNMENTS:
            raise UnsupportedAlignmentError(value)

        self._state.align = value

        if not self._embedded:
            self._queue(bytes((ESC, GS, 0x61, ALIGNMENTS[value])))

        return self

    def table(self, columns: Sequence[Mapping[str, Any]], rows: Sequence[Sequence[Any]]) -> "StarPrntEncoder":
        """Print rows of cells laid out in fixed-width columns.

        Args:
            columns: column definitions with ``width`` and optionally
                ``marginLeft``, ``marginRight``, ``align`` (left or right) and
                ``verticalAlign`` (top or bottom).
            rows: rows of cells; a cell is a string or a callable receiving an
                embedded encoder for the column.
        """

        if self._cursor != 0:
            self.newline()

        for row in rows:
            cells: List[List[bytes]] = []

            for index, column in enumerate(columns):
                width = column["width"]
                align = _option(column, "align", "left")
                content = as_content(row[index]) if index < len(row) else Literal("")

                cells.append(render_cell(content, width, align, self._encode, self._nested(width, align)))

            max_lines = max((len(lines) for lines in cells), default=0)

            cells = [
                pad_lines(lines, max_lines, column["width"], _option(column, "verticalAlign", "top"))
                for column, lines in zip(columns, cells)
            ]

            for index in range(max_lines):
                for column, lines in zip(columns, cells):
                    margin_left = _option(column, "marginLeft", 0)
                    margin_right = _option(column, "marginRight", 0)

                    self._queue(blank_line(margin_left), lines[index], blank_line(margin_right))
                    self._cursor += margin_left + column["width"] + margin_right

                self.newline()

        return self

    def rule(self, options: Mapping[str, Any] | None = None, **kwargs: Any) -> "StarPrntEncoder":
        """Print a horizontal line, ``single`` or ``double``."""

        settings = {"style": "single", "width": self._options.width or 10}
        settings.update(options or {}, **kwargs)

        glyph = 0xCD if settings["style"] == "double" else 0xC4

        self._queue(
            self._select_line_drawing(),
            bytes((glyph,)) * settings["width"],
            bytes((ESC, GS, 0x74, self._state.codepage)),
        )
        self._cursor += settings["width"]
        self.newline()
        return self

    def box(self, options: Mapping[str, Any] | None, contents: Any) -> "StarPrntEncoder":
        """Draw a border around text or around the output of a callback.

        Options: ``style`` (single or double), ``width`` (defaults to the
        paper width), ``marginLeft``, ``marginRight``, ``paddingLeft``,
        ``paddingRight`` and ``align``.
        """

        options = options or {}
        style = _option(options, "style", "single")
        width = _option(options, "width", None) or self._options.width or 30
        margin_left = _option(options, "marginLeft", 0)
        margin_right = _option(options, "marginRight", 0)
        padding_left = _option(options, "paddingLeft", 0)
        padding_right = _option(options, "paddingRight", 0)
        align = _option(options, "align", "left")

        top_left, top_right, bottom_left, bottom_right, horizontal, vertical = BOX_GLYPHS.get(
            style, BOX_GLYPHS["single"]
        )
        outer = margin_left + width + margin_right
        inner = width - 2 - padding_left - padding_right

        if inner < 1:
            raise InvalidWidthError(f"Box width {width} leaves no room for content inside borders and padding")

        if self._cursor != 0:
            self.newline()

        self._restore_state()
        self._queue(self._select_line_drawing())
        self._queue(
            blank_line(margin_left),
            top_left,
            bytes((horizontal,)) * (width - 2),
            top_right,
            blank_line(margin_right),
        )
        self._cursor += outer
        self.newline()

        lines = render_cell(as_content(contents), inner, align, self._encode, self._nested(inner, align))

        for line in lines:
            self._queue(blank_line(margin_left), vertical, blank_line(padding_left), line)
            self._restore_state()
            self._queue(self._select_line_drawing())
            self._queue(blank_line(padding_right), vertical, blank_line(margin_right))
            self._cursor += outer
            self.newline()

        self._queue(
            blank_line(margin_left),
            bottom_left,
            bytes((horizontal,)) * (width - 2),
            bottom_right,
            blank_line(margin_right),
        )
        self._restore_state()
        self._cursor += outer
        self.newline()

        return self

    def barcode(self, value: str, symbology: str, height: int = 60) -> "StarPrntEncoder":
        """Print a barcode of the given symbology and height in dots."""

        self._ensure_not_embedded("Barcodes are")

        if symbology not in SYMBOLOGIES:
            raise UnsupportedSymbologyError(symbology)

        self._queue(
            bytes((ESC, 0x62, SYMBOLOGIES[symbology], 0x01, 0x03, height)),
            codepages.encode(value, "ascii"),
            RS,
        )
        self._flush()
        return self

    def qrcode(self, value: str, model: int = 2, size: int = 6, errorlevel: str = "m") -> "StarPrntEncoder":
        """Print a QR code.

        Args:
            value: data to encode, as ISO 8859-1.
            model: QR model, 1 or 2.
            size: module size, 1 to 8.
            errorlevel: error correction, ``l``, ``m``, ``q`` or ``h``.
        """

        self._ensure_not_embedded("QR codes are")

        if not _is_int(model) or model not in QR_MODELS:
            raise InvalidQrModelError("Model must be 1 or 2")

        if not _is_int(size):
            raise InvalidQrSizeError("Size must be a number")

        if size < 1 or size > 8:
            raise InvalidQrSizeError("Size must be between 1 and 8")

        if errorlevel not in QR_ERROR_LEVELS:
            raise InvalidQrErrorLevelError("Error level must be l, m, q or h")

        data = codepages.encode(value, "iso88591")
        length = len(data)

        # Force printing the print buffer and moving to a new line
        self._queue(0x0A)
        self._queue(bytes((ESC, GS, 0x79, 0x53, 0x30, QR_MODELS[model])))
        self._queue(bytes((ESC, GS, 0x79, 0x53, 0x32, size)))
        self._queue(bytes((ESC, GS, 0x79, 0x53, 0x31, QR_ERROR_LEVELS[errorlevel])))
        # Length is split on 255, not 256
        self._queue(
            bytes((ESC, GS, 0x79, 0x44, 0x31, 0x00, length % 0xFF, int(length / 0xFF) & 0xFF)),
            data,
        )
        self._queue(bytes((ESC, GS, 0x79, 0x50)))

        self._flush()
        return self

    def image(
        self,
        element: raster.ImageSource,
        width: int,
        height: int,
        algorithm: str = "threshold",
        threshold: int = 128,
    ) -> "StarPrntEncoder":
        """Print an image scaled to ``width`` x ``height`` dots.

        The width must be a multiple of 8 and the height a multiple of 24.
        ``algorithm`` is one of ``threshold``, ``bayer``, ``floydsteinberg``
        or ``atkinson``.
        """

        self._ensure_not_embedded("Images are")

        if width % 8 != 0:
            raise InvalidImageDimensionsError("Width must be a multiple of 8")

        if height % 24 != 0:
            raise InvalidImageDimensionsError("Height must be a multiple of 24")

        bands = raster.rasterize(element, width, height, algorithm, threshold)

        self._queue(bytes((ESC, 0x30)))
        for band in bands:
            self._queue(bytes((ESC, 0x58, width & 0xFF, (width >> 8) & 0xFF)), band, NEWLINE)
        self._queue(bytes((ESC, 0x7A, 0x01)))

        self._flush()
        return self

    def cut(self, value: str = "full") -> "StarPrntEncoder":
        """Cut the paper, ``full`` or ``partial``."""

        self._ensure_not_embedded("Cut is")

        self._queue(bytes((ESC, 0x64, 0x01 if value == "partial" else 0x00)))
        return self

    def pulse(self, device: int = 0, on: int = 200, off: int = 200) -> "StarPrntEncoder":
        """Pulse the cash drawer kick-out connector.

        Args:
            device: 0 or 1, the pin the drawer is connected to.
            on: pulse on time in milliseconds.
            off: pulse off time in milliseconds.
        """

        self._ensure_not_embedded("Pulse is")

        on = min(127, math.floor(on / 10 + 0.5))
        off = min(127, math.floor(off / 10 + 0.5))

        self._queue(bytes((ESC, 0x07, on & 0xFF, off & 0xFF, 0x1A if device else 0x07)))
        return self

    def raw(self, data: Raw) -> "StarPrntEncoder":
        """Add raw printer commands."""

        self._queue(data)
        return self

    def encode(self) -> bytes:
        """Return all commands as bytes and reset the encoder for the next job."""

        self._flush()

        result = b"".join(self._buffer)
        logger.debug("Encoded %d fragments into %d bytes", len(self._buffer), len(result))

        self._reset()
        return result

"""Exceptions raised while building a StarPRNT command stream.

All of them derive from ``ValueError``: they signal bad input from the caller,
never a transient condition, so there is nothing to retry.
"""

from __future__ import annotations

__all__ = [
    "StarPrntError",
    "UnknownCodepageError",
    "UnsupportedCodepageError",
    "UnsupportedAlignmentError",
    "InvalidWidthError",
    "InvalidHeightError",
    "InvalidQrModelError",
    "InvalidQrSizeError",
    "InvalidQrErrorLevelError",
    "UnsupportedSymbologyError",
    "InvalidImageDimensionsError",
    "UnsupportedInEmbeddedContextError",
]


class StarPrntError(ValueError):
    """Base class for all encoder errors."""


class UnknownCodepageError(StarPrntError):
    """The character encoder does not know the requested code page."""

    def __init__(self, codepage: str) -> None:
        super().__init__(f"Unknown codepage: {codepage}")
        self.codepage = codepage


class UnsupportedCodepageError(StarPrntError):
    """The code page is known, but the printer mapping has no identifier for it."""

    def __init__(self, codepage: str) -> None:
        super().__init__(f"Codepage not supported by printer: {codepage}")
        self.codepage = codepage


class UnsupportedAlignmentError(StarPrntError):
    def __init__(self, value: object) -> None:
        super().__init__(f"Unknown alignment: {value!r}")


class InvalidWidthError(StarPrntError):
    pass


class InvalidHeightError(StarPrntError):
    pass


class InvalidQrModelError(StarPrntError):
    pass


class InvalidQrSizeError(StarPrntError):
    pass


class InvalidQrErrorLevelError(StarPrntError):
    pass


class UnsupportedSymbologyError(StarPrntError):
    def __init__(self, symbology: object) -> None:
        super().__init__(f"Symbology not supported by printer: {symbology!r}")
        self.symbology = symbology


class InvalidImageDimensionsError(StarPrntError):
    pass


class UnsupportedInEmbeddedContextError(StarPrntError):
    """Raised for commands that cannot be placed inside table cells or boxes."""

    def __init__(self, command: str) -> None:
        super().__init__(f"{command} not supported in table cells or boxes")
        self.command = command

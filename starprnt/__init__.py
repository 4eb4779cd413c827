"""Create byte streams of commands for StarPRNT and Star Line receipt printers."""

from starprnt.codepages import CODEPAGE_MAPPINGS
from starprnt.encoder import StarPrntEncoder, StyleState
from starprnt.exceptions import (
    InvalidHeightError,
    InvalidImageDimensionsError,
    InvalidQrErrorLevelError,
    InvalidQrModelError,
    InvalidQrSizeError,
    InvalidWidthError,
    StarPrntError,
    UnknownCodepageError,
    UnsupportedAlignmentError,
    UnsupportedCodepageError,
    UnsupportedInEmbeddedContextError,
    UnsupportedSymbologyError,
)
from starprnt.layout import Composed, Literal
from starprnt.options import EncoderOptions

__version__ = "3.0.0"

__all__ = [
    "CODEPAGE_MAPPINGS",
    "Composed",
    "EncoderOptions",
    "InvalidHeightError",
    "InvalidImageDimensionsError",
    "InvalidQrErrorLevelError",
    "InvalidQrModelError",
    "InvalidQrSizeError",
    "InvalidWidthError",
    "Literal",
    "StarPrntEncoder",
    "StarPrntError",
    "StyleState",
    "UnknownCodepageError",
    "UnsupportedAlignmentError",
    "UnsupportedCodepageError",
    "UnsupportedInEmbeddedContextError",
    "UnsupportedSymbologyError",
]

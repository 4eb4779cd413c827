"""Code page tables and the character encoder.

Text is turned into single-byte, code-page specific buffers. In ``auto`` mode a
string is split into runs, each run encodable by one of the candidate code
pages, so the encoder can emit a code page switch in front of every run.

Characters that cannot be represented are replaced by ``?``: the printer has
no notion of invalid text, so encoding never fails on content.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Mapping, Sequence

from starprnt.exceptions import UnknownCodepageError

logger = logging.getLogger(__name__)

# Printer identifiers used with ESC GS t n
CODEPAGE_MAPPINGS: Mapping[str, Mapping[str, int]] = MappingProxyType({
    "star": MappingProxyType({
        "cp437": 0x01,
        "cp858": 0x04,
        "cp852": 0x05,
        "cp860": 0x06,
        "cp861": 0x07,
        "cp863": 0x08,
        "cp865": 0x09,
        "cp866": 0x0A,
        "cp855": 0x0B,
        "cp857": 0x0C,
        "cp862": 0x0D,
        "cp864": 0x0E,
        "cp737": 0x0F,
        "cp869": 0x11,
        "cp874": 0x14,
        "windows1252": 0x20,
        "windows1250": 0x21,
        "windows1251": 0x22,
    }),
})

DEFAULT_CANDIDATES: tuple[str, ...] = (
    "cp437", "cp858", "cp860", "cp861", "cp863", "cp865",
    "cp852", "cp857", "cp855", "cp866", "cp869",
)

# Code page name -> Python codec
_CODECS: Mapping[str, str] = MappingProxyType({
    "ascii": "ascii",
    "cp437": "cp437",
    "cp737": "cp737",
    "cp775": "cp775",
    "cp850": "cp850",
    "cp852": "cp852",
    "cp855": "cp855",
    "cp857": "cp857",
    "cp858": "cp858",
    "cp860": "cp860",
    "cp861": "cp861",
    "cp862": "cp862",
    "cp863": "cp863",
    "cp864": "cp864",
    "cp865": "cp865",
    "cp866": "cp866",
    "cp869": "cp869",
    "cp874": "cp874",
    "windows1250": "cp1250",
    "windows1251": "cp1251",
    "windows1252": "cp1252",
    "windows1253": "cp1253",
    "windows1254": "cp1254",
    "windows1255": "cp1255",
    "windows1256": "cp1256",
    "windows1257": "cp1257",
    "windows1258": "cp1258",
    "iso88591": "latin_1",
    "iso88592": "iso8859_2",
    "iso88595": "iso8859_5",
    "iso88597": "iso8859_7",
    "iso885915": "iso8859_15",
})

REPLACEMENT = b"?"


@dataclass(frozen=True)
class EncodedRun:
    """Maximal run of text encoded with a single code page."""

    codepage: str
    data: bytes


def supports(codepage: str) -> bool:
    """Return True if the character encoder knows ``codepage``."""
    return codepage in _CODECS


def resolve_mapping(mapping: str | Mapping[str, int]) -> Mapping[str, int]:
    """Return the name -> printer id table for a profile name or explicit mapping."""
    if isinstance(mapping, str):
        try:
            return CODEPAGE_MAPPINGS[mapping]
        except KeyError:
            raise UnknownCodepageError(mapping) from None
    return MappingProxyType(dict(mapping))


def _codec(codepage: str) -> str:
    try:
        return _CODECS[codepage]
    except KeyError:
        raise UnknownCodepageError(codepage) from None


def _can_encode(char: str, codepage: str) -> bool:
    try:
        char.encode(_codec(codepage))
    except UnicodeEncodeError:
        return False
    return True


def encode(value: str, codepage: str) -> bytes:
    """Encode ``value``, substituting ``?`` for unencodable characters."""
    return value.encode(_codec(codepage), errors="replace")


def auto_encode(value: str, candidates: Sequence[str]) -> List[EncodedRun]:
    """Split ``value`` into runs, each encoded by the first suitable candidate.

    A character that fits the code page of the current run extends it. Other
    characters start a new run with the first candidate able to encode them.
    When no candidate can, the character stays in the current run and is
    substituted.
    """

    if not candidates:
        raise ValueError("At least one candidate codepage is required")

    runs: List[EncodedRun] = []
    current: str | None = None
    chars: List[str] = []

    for char in value:
        if current is None or not _can_encode(char, current):
            found = next((c for c in candidates if _can_encode(char, c)), None)
            if found is not None:
                if chars:
                    runs.append(EncodedRun(current, encode("".join(chars), current)))
                current, chars = found, []
            elif current is None:
                current = candidates[0]
        chars.append(char)

    if chars:
        runs.append(EncodedRun(current, encode("".join(chars), current)))

    logger.debug(
        "Auto-encoded %d chars into %d run(s): %s",
        len(value),
        len(runs),
        ", ".join(run.codepage for run in runs),
    )
    return runs

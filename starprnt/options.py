"""Construction-time options of an encoder."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Tuple, Union

from starprnt.codepages import DEFAULT_CANDIDATES

# camelCase spellings accepted for the option fields
_ALIASES = {
    "wordWrap": "word_wrap",
    "codepageMapping": "codepage_mapping",
    "codepageCandidates": "codepage_candidates",
}


@dataclass(frozen=True)
class EncoderOptions:
    """Paper width, wrapping and code page configuration."""

    width: int | None = None
    embedded: bool = False
    word_wrap: bool = True
    codepage_mapping: Union[str, Mapping[str, int]] = "star"
    codepage_candidates: Tuple[str, ...] = DEFAULT_CANDIDATES

    def __post_init__(self) -> None:
        # Lists are accepted and stored as a tuple
        object.__setattr__(self, "codepage_candidates", tuple(self.codepage_candidates))

    @classmethod
    def normalize(cls, overrides: Mapping[str, Any]) -> Dict[str, Any]:
        """Map camelCase aliases to field names, rejecting unknown keys."""
        names = {f.name for f in fields(cls)}
        result: Dict[str, Any] = {}
        for key, value in overrides.items():
            key = _ALIASES.get(key, key)
            if key not in names:
                raise TypeError(f"Unknown encoder option: {key}")
            result[key] = value
        return result

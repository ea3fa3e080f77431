"""Fixed vocabularies the summariser's output is checked against.

The lists live in ``vocabulary.json`` next to this module and are loaded
once per process.  Callers may pass their own :class:`Vocabulary` to the
validation functions instead.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

_VOCABULARY_PATH = Path(__file__).resolve().parent / "vocabulary.json"


@dataclass(frozen=True)
class Vocabulary:
    client_base: Tuple[str, ...]
    default_client_base: str
    owner_demographic: Tuple[str, ...]
    payment_methods: Tuple[str, ...]
    banned_phrases: Tuple[str, ...]

    def match_client_base(self, value: Optional[str]) -> str:
        """Case-insensitive match, falling back to ``default_client_base``."""
        wanted = (value or "").strip().lower()
        for option in self.client_base:
            if option.lower() == wanted:
                return option
        return self.default_client_base

    def match_owner_demographic(self, value: Optional[str]) -> Optional[str]:
        wanted = " ".join((value or "").replace("-", " ").split()).lower()
        for option in self.owner_demographic:
            if option.replace("-", " ").lower() == wanted:
                return option
        return None

    def match_payment_method(self, value: Optional[str]) -> Optional[str]:
        wanted = " ".join((value or "").split()).lower()
        for option in self.payment_methods:
            if option.lower() == wanted:
                return option
        return None


def parse_vocabulary(data: dict) -> Vocabulary:
    return Vocabulary(
        client_base=tuple(data["client_base"]),
        default_client_base=data.get("default_client_base", data["client_base"][0]),
        owner_demographic=tuple(data["owner_demographic"]),
        payment_methods=tuple(data["payment_methods"]),
        banned_phrases=tuple(data["banned_phrases"]),
    )


@lru_cache(maxsize=None)
def load_vocabulary(path: Optional[str] = None) -> Vocabulary:
    """Load and cache the vocabulary file (the bundled one by default)."""
    source = Path(path) if path else _VOCABULARY_PATH
    with source.open(encoding="utf-8") as fh:
        return parse_vocabulary(json.load(fh))

"""Neutralise untrusted identifiers before they are echoed back or logged."""

from __future__ import annotations

import re
from dataclasses import dataclass
from html.parser import HTMLParser
from typing import List, Protocol

MAX_IDENTIFIER_LENGTH = 64

_DISALLOWED = re.compile(r"[^A-Za-z0-9 _.:/-]")
_HIDDEN_ELEMENTS = {"script", "style"}


class Sanitizer(Protocol):
    """Capability turning a raw identifier into a display-safe string.

    Implementations must be deterministic, idempotent and side-effect free.
    """

    def for_display(self, raw: str) -> str:  # pragma: no cover - protocol signature
        ...


class _TextExtractor(HTMLParser):
    """Collect character data, dropping tags and script/style bodies."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.parts: List[str] = []
        self._hidden_depth = 0

    def handle_starttag(self, tag, attrs) -> None:
        if tag in _HIDDEN_ELEMENTS:
            self._hidden_depth += 1

    def handle_endtag(self, tag) -> None:
        if tag in _HIDDEN_ELEMENTS and self._hidden_depth:
            self._hidden_depth -= 1

    def handle_data(self, data) -> None:
        if not self._hidden_depth:
            self.parts.append(data)


class MarkupSanitizer:
    """Default :class:`Sanitizer` stripping markup and non-identifier characters."""

    def __init__(self, max_length: int = MAX_IDENTIFIER_LENGTH) -> None:
        self.max_length = max_length

    def for_display(self, raw: str) -> str:
        parser = _TextExtractor()
        parser.feed(str(raw))
        parser.close()
        text = "".join(parser.parts)
        text = _DISALLOWED.sub("", text).strip()
        return text[: self.max_length].strip()


@dataclass(frozen=True)
class SanitizedIdentifier:
    """An untrusted identifier paired with its display-safe form."""

    raw: str
    value: str

    @classmethod
    def wrap(cls, raw: str, sanitizer: Sanitizer) -> "SanitizedIdentifier":
        return cls(raw=raw, value=sanitizer.for_display(raw))

    def __str__(self) -> str:
        return self.value

"""Descriptive metadata attached to a dataset.

Editor, copyright and terms of use come as translated links; usage terms
are additionally summarised as booleans so that callers can check them
programmatically (always double-check against the linked terms).
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Generic, TypeVar

from swissdata.models.common import SwissdataBase

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Translated values
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Translated(Generic[T]):
    """Read-only language code -> value mapping with a default language."""

    contents: Mapping[str, T]
    default_lang: str

    def __post_init__(self) -> None:
        if self.default_lang not in self.contents:
            msg = f"default language {self.default_lang!r} has no translation"
            raise ValueError(msg)
        object.__setattr__(self, "contents", MappingProxyType(dict(self.contents)))

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, T]]) -> Translated[T]:
        """Build from ``(lang, value)`` pairs; the first language is the default."""
        contents: dict[str, T] = {}
        for lang, value in pairs:
            contents[lang] = value
        if not contents:
            msg = "a translated value needs at least one language"
            raise ValueError(msg)
        return cls(contents=contents, default_lang=next(iter(contents)))

    @property
    def default(self) -> T:
        return self.contents[self.default_lang]

    @property
    def languages(self) -> list[str]:
        return sorted(self.contents)

    def get(self, lang: str) -> T | None:
        return self.contents.get(lang)

    def get_or_default(self, lang: str) -> T:
        """Value for *lang*, falling back to the default language."""
        return self.contents.get(lang, self.default)

    def __iter__(self) -> Iterator[tuple[str, T]]:
        return iter(self.contents.items())

    def __str__(self) -> str:
        return str(self.default)


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class Link(SwissdataBase):
    """A display name with its URL."""

    name: str
    url: str

    def __str__(self) -> str:
        return f"[{self.name}]({self.url})"


class Terms(SwissdataBase):
    """Machine-readable summary of the terms of use."""

    free_commercial_use: bool
    free_noncommercial_use: bool
    citation_mandatory: bool


class Citation(SwissdataBase):
    """Bibliographic references for citing a dataset."""

    bibtex: str | None = None
    ris: str | None = None


def translated_links(rows: Iterable[tuple[str, str, str]]) -> Translated[Link]:
    """Build translated links from ``(lang, name, url)`` rows."""
    return Translated.from_pairs((lang, Link(name=name, url=url)) for lang, name, url in rows)


@dataclass(frozen=True)
class Meta:
    """Everything a consumer needs to attribute and legally reuse a dataset.

    ``lang`` lists the languages the data itself is available in; ``None``
    means the content is language independent.
    """

    editor: Translated[Link]
    copyright: Translated[Link]
    terms: Translated[Link]
    terms_automatic: Terms
    citation: Citation = field(default_factory=Citation)
    lang: tuple[str, ...] | None = None

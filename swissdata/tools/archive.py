"""Locate dataset members inside a ZIP archive by naming convention.

FSO archives name their members
``{fso_id}/{version}/{free text}_{...}_{CODE}.txt``; the entity-type code
(``KT``, ``BEZ``, ``GDE``, ...) is taken from a fixed ``_``-separated
position once prefix, version segment and extension are stripped.
"""

from __future__ import annotations

import logging
import zipfile
import zlib
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from swissdata.errors import ArchiveError, MissingMemberError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MemberNameFilter:
    """Naming convention of one dataset's archive members."""

    prefix: str
    segment: str
    extension: str
    code_index: int = 2

    def entity_code(self, name: str) -> str | None:
        """Return the entity-type code encoded in *name*, or ``None``."""
        if not name.startswith(self.prefix):
            return None
        rest = name[len(self.prefix):]
        if not rest.startswith(self.segment):
            return None
        rest = rest[len(self.segment):]
        if not rest.endswith(self.extension):
            return None
        rest = rest[: len(rest) - len(self.extension)]
        parts = rest.split("_")
        if len(parts) <= self.code_index:
            return None
        return parts[self.code_index]


class ArchiveResolver:
    """Map entity-type codes to member names of an open archive."""

    def __init__(
        self,
        archive: zipfile.ZipFile,
        name_filter: MemberNameFilter,
    ) -> None:
        self._archive = archive
        self._filter = name_filter
        self._path = archive.filename or "<archive>"
        self._members: dict[str, str] = {}
        for name in archive.namelist():
            code = name_filter.entity_code(name)
            if code is None:
                continue
            if code in self._members:
                logger.debug("Member %s replaces %s for code %s", name, self._members[code], code)
            self._members[code] = name

    @classmethod
    @contextmanager
    def open(
        cls,
        path: str | Path,
        name_filter: MemberNameFilter,
    ) -> Iterator[ArchiveResolver]:
        """Open the ZIP file at *path* for the duration of the ``with`` block.

        Raises:
            ArchiveError: If the file is missing or not a valid ZIP archive.
        """
        try:
            archive = zipfile.ZipFile(path)
        except (zipfile.BadZipFile, OSError) as exc:
            raise ArchiveError(path, str(exc)) from exc
        with archive:
            yield cls(archive, name_filter)

    @property
    def members(self) -> dict[str, str]:
        """Entity-type code -> member name."""
        return dict(self._members)

    def member_name(self, code: str) -> str:
        """Member name for *code*.

        Raises:
            MissingMemberError: If no member carries *code*.
        """
        try:
            return self._members[code]
        except KeyError:
            raise MissingMemberError(code, self._path) from None

    def read(self, code: str) -> bytes:
        """Raw bytes of the member for *code*."""
        name = self.member_name(code)
        try:
            return self._archive.read(name)
        except (zipfile.BadZipFile, zlib.error, OSError) as exc:
            raise ArchiveError(self._path, f"cannot read member {name!r}: {exc}") from exc

"""Shared pytest fixtures for the swissdata test suite.

Provides:
- write_archive / make_archive: build communes ZIP archives in tmp_path
- minimal_archive: one canton, one district, one municipality
- recording_client: httpx.Client over MockTransport that records requests

No live network calls anywhere in the suite.
"""

from __future__ import annotations

import zipfile
from collections.abc import Callable, Iterator
from pathlib import Path

import httpx
import pytest

from swissdata.fso.communes import TXT_FSO_ID

CANTON_ROW = "1\tZZ\tZztown\t01.01.2000"
DISTRICT_ROW = "100\t1\t10\tBezirk Zztown\tZztown\t15\t1\t20\t01.01.2000\t\t\t\t01.01.2000"
MUNICIPALITY_ROW = (
    "1000\t100\tZZ\t10\tZztown\tZztown\t11\t1\t1\t20\t01.01.2000\t\t\t\t01.01.2000"
)

MINIMAL_MEMBERS: dict[str, list[str]] = {
    "KT": [CANTON_ROW],
    "BEZ": [DISTRICT_ROW],
    "GDE": [MUNICIPALITY_ROW],
}


def member_name(code: str) -> str:
    return f"{TXT_FSO_ID}/1.2/20240101_GDEHist_{code}.txt"


def encode_rows(rows: list[str], encoding: str = "iso8859_3") -> bytes:
    return "".join(f"{row}\r\n" for row in rows).encode(encoding)


def write_archive(path: Path, members: dict[str, list[str]], extra: dict[str, bytes] | None = None) -> Path:
    """Write a communes archive with one member per entity-type code."""
    with zipfile.ZipFile(path, "w") as zf:
        for code, rows in members.items():
            zf.writestr(member_name(code), encode_rows(rows))
        for name, payload in (extra or {}).items():
            zf.writestr(name, payload)
    return path


@pytest.fixture
def make_archive(tmp_path: Path) -> Callable[..., Path]:
    """Factory: ``make_archive(members, name="communes.zip")``."""

    def _make(
        members: dict[str, list[str]] | None = None,
        name: str = "communes.zip",
        extra: dict[str, bytes] | None = None,
    ) -> Path:
        return write_archive(tmp_path / name, MINIMAL_MEMBERS if members is None else members, extra)

    return _make


@pytest.fixture
def minimal_archive(make_archive: Callable[..., Path]) -> Path:
    return make_archive()


class RecordingTransport:
    """Serve canned responses by URL and remember every request made."""

    def __init__(self, routes: dict[str, httpx.Response | Exception] | None = None) -> None:
        self.routes: dict[str, httpx.Response | Exception] = dict(routes or {})
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.routes.get(str(request.url))
        if outcome is None:
            return httpx.Response(404, content=b"not found")
        if isinstance(outcome, Exception):
            raise outcome
        return httpx.Response(outcome.status_code, content=outcome.content)


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def recording_client(transport: RecordingTransport) -> Iterator[httpx.Client]:
    with httpx.Client(transport=httpx.MockTransport(transport)) as client:
        yield client

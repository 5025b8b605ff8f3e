"""Row decoder for the FSO tab-delimited text dialect.

Turns the bytes of one archive member into a lazy sequence of typed
records. The dialect is fixed:

- legacy single-byte encoding (ISO-8859-3 for the communes tables),
  transcoded with replacement so that decoding text never fails;
- ``\\t`` between fields, CRLF between records (a bare CR or LF is
  accepted too), no quoting, no header row;
- field count and order are part of the format and are described per
  record type by a :class:`RecordLayout`.

Rows are decoded independently: a malformed row produces a
:class:`RowResult` carrying a :class:`RowDecodeError` and the following
rows are still decoded.
"""

from __future__ import annotations

import codecs
import re
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from enum import IntEnum
from typing import IO, Any, Generic, TypeVar

from swissdata.errors import RowDecodeError
from swissdata.tools.dates import format_dotted_date, parse_dotted_date

T = TypeVar("T")
E = TypeVar("E", bound=IntEnum)

DEFAULT_ENCODING = "iso8859_3"
FIELD_DELIMITER = "\t"

_TERMINATOR_RE = re.compile(r"\r\n|\r|\n")
_INTEGER_RE = re.compile(r"\+?[0-9]+")

# Byte order marks take precedence over the declared encoding.
_BOMS: tuple[tuple[bytes, str], ...] = (
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)


# ---------------------------------------------------------------------------
# Transcoding and row splitting
# ---------------------------------------------------------------------------


def transcode(payload: bytes, encoding: str = DEFAULT_ENCODING) -> str:
    """Decode *payload* to text, replacing bytes the encoding does not define."""
    for bom, bom_encoding in _BOMS:
        if payload.startswith(bom):
            return payload[len(bom):].decode(bom_encoding, errors="replace")
    return payload.decode(encoding, errors="replace")


def iter_rows(text: str) -> Iterator[tuple[int, list[str]]]:
    """Yield ``(line_number, fields)`` for every non-empty line of *text*.

    Line numbers are 1-based and count empty lines, so they point at the
    physical line in the source file.
    """
    pos = 0
    line = 0
    end = len(text)
    while pos < end:
        line += 1
        match = _TERMINATOR_RE.search(text, pos)
        stop = match.start() if match else end
        if stop > pos:
            yield line, text[pos:stop].split(FIELD_DELIMITER)
        if match is None:
            return
        pos = match.end()


# ---------------------------------------------------------------------------
# Field definitions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldSpec:
    """One positional column: its attribute name, parser and encoder."""

    name: str
    parse: Callable[[str], Any]
    encode: Callable[[Any], str] = str


def _parse_integer(raw: str, bits: int) -> int:
    if not _INTEGER_RE.fullmatch(raw):
        msg = f"expected unsigned integer, got {raw!r}"
        raise ValueError(msg)
    value = int(raw)
    if value >= 1 << bits:
        msg = f"integer {value} out of range for {bits}-bit field"
        raise ValueError(msg)
    return value


def integer_field(name: str, bits: int) -> FieldSpec:
    """Unsigned integer of at most *bits* bits."""
    return FieldSpec(name, lambda raw: _parse_integer(raw, bits))


def text_field(name: str) -> FieldSpec:
    return FieldSpec(name, lambda raw: raw)


def enum_field(name: str, enum_type: type[E], bits: int = 8) -> FieldSpec:
    """Integer code restricted to the members of *enum_type*."""

    def parse(raw: str) -> E:
        code = _parse_integer(raw, bits)
        try:
            return enum_type(code)
        except ValueError:
            msg = f"unrecognized {enum_type.__name__} code {code}"
            raise ValueError(msg) from None

    return FieldSpec(name, parse, lambda value: str(int(value)))


def date_field(name: str) -> FieldSpec:
    return FieldSpec(name, parse_dotted_date, format_dotted_date)


def optional(spec: FieldSpec) -> FieldSpec:
    """Wrap *spec* so that an empty column decodes to ``None``."""

    def parse(raw: str) -> Any:
        return None if raw == "" else spec.parse(raw)

    def encode(value: Any) -> str:
        return "" if value is None else spec.encode(value)

    return FieldSpec(spec.name, parse, encode)


# ---------------------------------------------------------------------------
# Record layouts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RecordLayout(Generic[T]):
    """Positional mapping between a tab-delimited row and a record type.

    ``check`` runs on the built record and raises ``ValueError`` for
    cross-field rules a single column cannot express.
    """

    record_type: Callable[..., T]
    fields: tuple[FieldSpec, ...]
    check: Callable[[T], None] | None = None

    @property
    def width(self) -> int:
        return len(self.fields)

    def decode(self, values: Sequence[str], line: int) -> T:
        """Build a record from one row.

        Raises:
            RowDecodeError: Wrong field count, unparseable field, or a
                failed cross-field check.
        """
        if len(values) != self.width:
            msg = f"expected {self.width} fields, found {len(values)}"
            raise RowDecodeError(line, msg)

        kwargs: dict[str, Any] = {}
        for spec, raw in zip(self.fields, values):
            try:
                kwargs[spec.name] = spec.parse(raw)
            except ValueError as exc:
                raise RowDecodeError(line, str(exc), field=spec.name) from exc

        record = self.record_type(**kwargs)
        if self.check is not None:
            try:
                self.check(record)
            except ValueError as exc:
                raise RowDecodeError(line, str(exc)) from exc
        return record

    def encode(self, record: T) -> str:
        """Render *record* back to a tab-delimited row (no terminator)."""
        return FIELD_DELIMITER.join(
            spec.encode(getattr(record, spec.name)) for spec in self.fields
        )


@dataclass(frozen=True)
class RowResult(Generic[T]):
    """Outcome of decoding one row: a record or the error that prevented it."""

    line: int
    record: T | None = None
    error: RowDecodeError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the record, raising the row's decode error if there is one."""
        if self.error is not None:
            raise self.error
        return self.record  # type: ignore[return-value]


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def decode_records(text: str, layout: RecordLayout[T]) -> Iterator[RowResult[T]]:
    """Lazily decode every row of *text* with *layout*, in source order."""
    for line, values in iter_rows(text):
        try:
            record = layout.decode(values, line)
        except RowDecodeError as exc:
            yield RowResult(line=line, error=exc)
        else:
            yield RowResult(line=line, record=record)


def decode_stream(
    stream: IO[bytes],
    layout: RecordLayout[T],
    encoding: str = DEFAULT_ENCODING,
) -> Iterator[RowResult[T]]:
    """Read a whole member stream, transcode it and decode its rows."""
    return decode_records(transcode(stream.read(), encoding), layout)

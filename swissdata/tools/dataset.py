"""Datasets: owned text payloads that decode into typed records on demand.

A :class:`Dataset` keeps the transcoded member text and re-parses it on
every iteration, so any number of consumers can iterate independently.
How bad rows are treated is always the caller's choice (:class:`OnError`).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from datetime import date
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Generic, Protocol, TypeVar

from swissdata.errors import RowDecodeError
from swissdata.tools.decoder import RecordLayout, RowResult, decode_records
from swissdata.tools.meta import Meta

if TYPE_CHECKING:
    from swissdata.tools.cache import CacheStore

logger = logging.getLogger(__name__)

T = TypeVar("T")
S = TypeVar("S")


class OnError(StrEnum):
    """What :meth:`Dataset.records` does with a row that failed to decode."""

    RAISE = "raise"
    SKIP = "skip"
    LOG = "log"


class Dataset(Generic[T]):
    """Decoded text of one archive member plus the layout of its rows."""

    def __init__(self, raw: str, layout: RecordLayout[T], *, name: str = "") -> None:
        self._raw = raw
        self._layout = layout
        self._name = name

    @property
    def raw(self) -> str:
        return self._raw

    @property
    def layout(self) -> RecordLayout[T]:
        return self._layout

    @property
    def name(self) -> str:
        return self._name

    def __iter__(self) -> Iterator[RowResult[T]]:
        return decode_records(self._raw, self._layout)

    def results(self) -> Iterator[RowResult[T]]:
        """Every row as a :class:`RowResult`, in source order."""
        return iter(self)

    def errors(self) -> Iterator[RowDecodeError]:
        for result in self:
            if result.error is not None:
                yield result.error

    def records(self, on_error: OnError = OnError.RAISE) -> Iterator[T]:
        """Successfully decoded records, applying *on_error* to the others.

        Raises:
            RowDecodeError: With ``OnError.RAISE``, at the first bad row
                (records before it have already been yielded).
        """
        for result in self:
            if result.error is None:
                yield result.record  # type: ignore[misc]
            elif on_error == OnError.RAISE:
                raise result.error
            elif on_error == OnError.LOG:
                logger.warning("Skipping row in %s: %s", self._name or "dataset", result.error)

    def where(
        self,
        predicate: Callable[[T], bool],
        on_error: OnError = OnError.RAISE,
    ) -> Iterator[T]:
        return (record for record in self.records(on_error) if predicate(record))


# ---------------------------------------------------------------------------
# Historicized records
# ---------------------------------------------------------------------------


class _Mutation(Protocol):
    number: int
    date: date


class Historized(Protocol):
    """A record version bounded by an admission and an optional abolition."""

    hist_id: int

    @property
    def admission(self) -> _Mutation: ...

    @property
    def abolition(self) -> Any: ...


H = TypeVar("H", bound=Historized)


class HistorizedDataset(Dataset[H]):
    """Dataset of versioned records sharing a ``hist_id`` lineage key."""

    def active(self, on_error: OnError = OnError.RAISE) -> Iterator[H]:
        """Versions without abolition, i.e. currently in force."""
        return self.where(lambda record: record.abolition is None, on_error)

    def historic(self, on_error: OnError = OnError.RAISE) -> Iterator[H]:
        """Versions closed by an abolition mutation."""
        return self.where(lambda record: record.abolition is not None, on_error)

    def lineage(self, hist_id: int, on_error: OnError = OnError.RAISE) -> list[H]:
        """All versions of *hist_id*, oldest admission first."""
        versions = list(self.where(lambda record: record.hist_id == hist_id, on_error))
        versions.sort(key=lambda record: (record.admission.date, record.admission.number))
        return versions


# ---------------------------------------------------------------------------
# Datastore interface
# ---------------------------------------------------------------------------


class Datastore(ABC, Generic[S]):
    """Entry point for one published dataset: metadata before, records after loading."""

    @abstractmethod
    def meta(self, store: CacheStore | None = None) -> Meta:
        """Attribution and terms of use; citations are fetched when *store* is given."""
        ...

    def available_languages(self) -> list[str] | None:
        """Languages of the data when known before download; ``None`` otherwise."""
        return None

    @abstractmethod
    def load(self, store: CacheStore) -> S:
        """Download (or reuse the cached copy) and return the decoded datasets."""
        ...

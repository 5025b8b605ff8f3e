"""Historicized list of the communes of Switzerland (FSO ``dz-b-00.04-hgv-01``).

The TXT edition is a ZIP archive holding one tab-delimited, ISO-8859-3
encoded table per entity type:

- ``KT``: cantons (not historicized);
- ``BEZ``: districts;
- ``GDE``: municipalities, including municipality-free areas and cantonal
  lake portions.

Districts and municipalities are historicized: each row is one version of
an entity, opened by an admission mutation and, unless still in force,
closed by an abolition mutation. Versions of the same entity share a
``hist_id``; the numeric ``id`` may be reassigned over time.

The same content also exists as XML (``dz-b-00.04-hgv-03``); only its
asset is exposed here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import IntEnum
from pathlib import Path
from typing import Generic, TypeVar

from swissdata.fso import publisher
from swissdata.fso.asset import Asset, AssetId
from swissdata.tools.archive import ArchiveResolver, MemberNameFilter
from swissdata.tools.cache import CacheStore
from swissdata.tools.dataset import Dataset, Datastore, HistorizedDataset, OnError
from swissdata.tools.decoder import (
    DEFAULT_ENCODING,
    RecordLayout,
    date_field,
    enum_field,
    integer_field,
    optional,
    text_field,
    transcode,
)
from swissdata.tools.meta import Citation, Meta, Terms

logger = logging.getLogger(__name__)

TXT_ASSET_ID: AssetId = 23886071
XML_ASSET_ID: AssetId = 23886070

TXT_FSO_ID = "dz-b-00.04-hgv-01"
XML_FSO_ID = "dz-b-00.04-hgv-03"

ENCODING = DEFAULT_ENCODING

# Members look like "dz-b-00.04-hgv-01/1.2/20240101_GDEHist_GDE.txt".
TXT_NAME_FILTER = MemberNameFilter(prefix=TXT_FSO_ID, segment="/1.2/", extension=".txt")

CANTONS_CODE = "KT"
DISTRICTS_CODE = "BEZ"
MUNICIPALITIES_CODE = "GDE"

TERMS_TITLE = "OPEN-BY-ASK"
TERMS_AUTOMATIC = Terms(
    free_commercial_use=False,
    free_noncommercial_use=True,
    citation_mandatory=True,
)

CantonId = int
DistrictHistId = int
DistrictId = int
MunicipalityHistId = int
MunicipalityId = int
MutationId = int


# ---------------------------------------------------------------------------
# Enumerated codes
# ---------------------------------------------------------------------------


class Status(IntEnum):
    """Whether a mutation has completed every procedure (commune, canton, federal)."""

    TENTATIVE = 0
    FINAL = 1


class MunicipalityMode(IntEnum):
    """Kind of territory a municipality row describes."""

    POLITICAL_COMMUNE = 11
    MUNICIPALITY_FREE_AREA = 12
    CANTONAL_LAKE_PORTION = 13


class DistrictMode(IntEnum):
    """Kind of territory a district row describes."""

    DISTRICT = 15
    CANTON_WITHOUT_DISTRICTS = 16
    DISTRICT_FREE_AREA = 17


class AdmissionMode(IntEnum):
    """Reason a district or municipality version was opened."""

    FIRST_REGISTRATION = 20
    CREATION = 21
    DISTRICT_RENAME = 22
    MUNICIPALITY_RENAME = 23
    REASSIGNMENT = 24
    TERRITORY_CHANGE = 26
    FORMAL_RENUMBERING = 27


class AbolitionMode(IntEnum):
    """Reason a district or municipality version was closed."""

    DISTRICT_RENAME = 22
    MUNICIPALITY_RENAME = 23
    REASSIGNMENT = 24
    TERRITORY_CHANGE = 26
    FORMAL_RENUMBERING = 27
    RADIATION = 29
    MUTATION_ANNULLED = 30


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

M = TypeVar("M", AdmissionMode, AbolitionMode)


@dataclass(frozen=True)
class Mutation(Generic[M]):
    """An admission or abolition event."""

    number: MutationId
    mode: M
    date: date


class _Versioned:
    """Admission/abolition views shared by districts and municipalities."""

    admission_number: MutationId
    admission_mode: AdmissionMode
    admission_date: date
    abolition_number: MutationId | None
    abolition_mode: AbolitionMode | None
    abolition_date: date | None

    @property
    def admission(self) -> Mutation[AdmissionMode]:
        return Mutation(self.admission_number, self.admission_mode, self.admission_date)

    @property
    def abolition(self) -> Mutation[AbolitionMode] | None:
        if self.abolition_number is None or self.abolition_mode is None or self.abolition_date is None:
            return None
        return Mutation(self.abolition_number, self.abolition_mode, self.abolition_date)

    @property
    def is_active(self) -> bool:
        return self.abolition is None

    def in_force_on(self, day: date) -> bool:
        """True if this version was valid on *day*."""
        if day < self.admission_date:
            return False
        return self.abolition_date is None or day < self.abolition_date


@dataclass(frozen=True)
class Canton:
    id: CantonId
    abbreviation: str
    name: str
    date_of_change: date


@dataclass(frozen=True)
class District(_Versioned):
    hist_id: DistrictHistId
    canton_id: CantonId
    id: DistrictId
    name: str
    short_name: str
    entry_mode: DistrictMode
    admission_number: MutationId
    admission_mode: AdmissionMode
    admission_date: date
    abolition_number: MutationId | None
    abolition_mode: AbolitionMode | None
    abolition_date: date | None
    date_of_change: date


@dataclass(frozen=True)
class Municipality(_Versioned):
    hist_id: MunicipalityHistId
    district_hist_id: DistrictHistId
    canton_abbreviation: str
    id: MunicipalityId
    name: str
    short_name: str
    entry_mode: MunicipalityMode
    status: Status
    admission_number: MutationId
    admission_mode: AdmissionMode
    admission_date: date
    abolition_number: MutationId | None
    abolition_mode: AbolitionMode | None
    abolition_date: date | None
    date_of_change: date


# ---------------------------------------------------------------------------
# Row layouts
# ---------------------------------------------------------------------------


def _check_abolition(record: _Versioned) -> None:
    present = [
        record.abolition_number is not None,
        record.abolition_mode is not None,
        record.abolition_date is not None,
    ]
    if any(present) and not all(present):
        msg = "abolition number, mode and date must be all present or all absent"
        raise ValueError(msg)


_MUTATION_FIELDS = (
    integer_field("admission_number", 16),
    enum_field("admission_mode", AdmissionMode),
    date_field("admission_date"),
    optional(integer_field("abolition_number", 16)),
    optional(enum_field("abolition_mode", AbolitionMode)),
    optional(date_field("abolition_date")),
    date_field("date_of_change"),
)

CANTON_LAYOUT: RecordLayout[Canton] = RecordLayout(
    Canton,
    (
        integer_field("id", 8),
        text_field("abbreviation"),
        text_field("name"),
        date_field("date_of_change"),
    ),
)

DISTRICT_LAYOUT: RecordLayout[District] = RecordLayout(
    District,
    (
        integer_field("hist_id", 32),
        integer_field("canton_id", 8),
        integer_field("id", 16),
        text_field("name"),
        text_field("short_name"),
        enum_field("entry_mode", DistrictMode),
        *_MUTATION_FIELDS,
    ),
    check=_check_abolition,
)

MUNICIPALITY_LAYOUT: RecordLayout[Municipality] = RecordLayout(
    Municipality,
    (
        integer_field("hist_id", 32),
        integer_field("district_hist_id", 32),
        text_field("canton_abbreviation"),
        integer_field("id", 16),
        text_field("name"),
        text_field("short_name"),
        enum_field("entry_mode", MunicipalityMode),
        enum_field("status", Status),
        *_MUTATION_FIELDS,
    ),
    check=_check_abolition,
)


# ---------------------------------------------------------------------------
# Loaded datasets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Datasets:
    """All tables of one load of the communes archive."""

    cantons: Dataset[Canton]
    districts: HistorizedDataset[District]
    municipalities: HistorizedDataset[Municipality]

    def unresolved_district_refs(self, on_error: OnError = OnError.RAISE) -> list[Municipality]:
        """Municipalities whose ``district_hist_id`` matches no district row."""
        known = {district.hist_id for district in self.districts.records(on_error)}
        return [
            municipality
            for municipality in self.municipalities.records(on_error)
            if municipality.district_hist_id not in known
        ]


class CommunesDatastore(Datastore[Datasets]):
    """Loader for the TXT edition of the historicized list of communes."""

    def asset(self) -> Asset:
        """Asset of the TXT edition (tab-delimited tables in a ZIP)."""
        return Asset(TXT_ASSET_ID)

    def asset_xml(self) -> Asset:
        """Asset of the XML edition (XML and XSD in a ZIP); not decoded here."""
        return Asset(XML_ASSET_ID)

    def meta(self, store: CacheStore | None = None) -> Meta:
        citation = Citation()
        if store is not None:
            asset = self.asset()
            citation = Citation(bibtex=asset.bibtex(store), ris=asset.ris(store))
        return Meta(
            editor=publisher.editor(),
            copyright=publisher.copyright(),
            terms=publisher.terms(TERMS_TITLE),
            terms_automatic=TERMS_AUTOMATIC,
            citation=citation,
        )

    def load(self, store: CacheStore) -> Datasets:
        return self.load_archive(self.asset().data_file(store))

    def load_archive(self, path: str | Path) -> Datasets:
        """Decode a communes archive already on disk.

        Raises:
            ArchiveError: If the archive cannot be opened.
            MissingMemberError: If the cantons, districts or municipalities
                table is absent.
        """
        with ArchiveResolver.open(path, TXT_NAME_FILTER) as resolver:
            texts = {
                code: transcode(resolver.read(code), ENCODING)
                for code in (CANTONS_CODE, DISTRICTS_CODE, MUNICIPALITIES_CODE)
            }
            logger.info(
                "Loaded communes archive %s (%s)",
                path,
                ", ".join(f"{code}={resolver.member_name(code)}" for code in texts),
            )

        return Datasets(
            cantons=Dataset(texts[CANTONS_CODE], CANTON_LAYOUT, name="cantons"),
            districts=HistorizedDataset(texts[DISTRICTS_CODE], DISTRICT_LAYOUT, name="districts"),
            municipalities=HistorizedDataset(
                texts[MUNICIPALITIES_CODE], MUNICIPALITY_LAYOUT, name="municipalities"
            ),
        )


def datastore() -> CommunesDatastore:
    """The communes datastore."""
    return CommunesDatastore()

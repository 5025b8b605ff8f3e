"""End-to-end loading of the communes archive, from disk and through the cache.

Archives are built in tmp_path by the conftest fixtures; downloads are
served by an httpx.MockTransport.
"""

from __future__ import annotations

import io
import zipfile
from datetime import date
from pathlib import Path

import httpx
import pytest

from swissdata.errors import ArchiveError, DownloadError, MissingMemberError
from swissdata.fso.communes import (
    TXT_ASSET_ID,
    TXT_FSO_ID,
    XML_ASSET_ID,
    AdmissionMode,
    CommunesDatastore,
    MunicipalityMode,
    Mutation,
    datastore,
)
from swissdata.tools.cache import CacheStore
from swissdata.tools.dataset import OnError

CANTON_ROW = "1\tZZ\tZztown\t01.01.2000"
DISTRICT_ROW = "100\t1\t10\tBezirk Zztown\tZztown\t15\t1\t20\t01.01.2000\t\t\t\t01.01.2000"
MUNICIPALITY_ROW = "1000\t100\tZZ\t10\tZztown\tZztown\t11\t1\t1\t20\t01.01.2000\t\t\t\t01.01.2000"
ORPHAN_ROW = "1001\t999\tZZ\t11\tWaisen\tWaisen\t11\t1\t1\t20\t01.01.2000\t\t\t\t01.01.2000"
BAD_ROW = "1002\t100\tZZ\t12\tKaputt\tKaputt\t99\t1\t1\t20\t01.01.2000\t\t\t\t01.01.2000"


def _zip_bytes(members: dict[str, str]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for code, text in members.items():
            zf.writestr(f"{TXT_FSO_ID}/1.2/20240101_GDEHist_{code}.txt", text.encode("iso8859_3"))
    return buffer.getvalue()


# ===================================================================
# From a local archive
# ===================================================================


class TestLoadArchive:
    """Decoding an archive already on disk."""

    def test_minimal_archive(self, minimal_archive: Path) -> None:
        datasets = CommunesDatastore().load_archive(minimal_archive)

        (canton,) = datasets.cantons.records()
        (district,) = datasets.districts.records()
        (municipality,) = datasets.municipalities.records()
        assert canton.abbreviation == "ZZ"
        assert district.canton_id == canton.id
        assert municipality.district_hist_id == district.hist_id
        assert municipality.entry_mode is MunicipalityMode.POLITICAL_COMMUNE
        assert district.abolition is None
        assert municipality.is_active
        assert municipality.admission == Mutation(1, AdmissionMode.FIRST_REGISTRATION, date(2000, 1, 1))
        assert datasets.unresolved_district_refs() == []

    def test_minimal_archive_active_views(self, minimal_archive: Path) -> None:
        datasets = CommunesDatastore().load_archive(minimal_archive)
        assert len(list(datasets.districts.active())) == 1
        assert len(list(datasets.municipalities.active())) == 1
        assert list(datasets.districts.historic()) == []
        assert list(datasets.municipalities.historic()) == []

    def test_dataset_names(self, minimal_archive: Path) -> None:
        datasets = CommunesDatastore().load_archive(minimal_archive)
        assert datasets.cantons.name == "cantons"
        assert datasets.districts.name == "districts"
        assert datasets.municipalities.name == "municipalities"

    def test_missing_municipalities_member(self, make_archive) -> None:
        path = make_archive({"KT": [CANTON_ROW], "BEZ": [DISTRICT_ROW]})
        with pytest.raises(MissingMemberError) as info:
            CommunesDatastore().load_archive(path)
        assert info.value.code == "GDE"

    def test_not_an_archive(self, tmp_path: Path) -> None:
        path = tmp_path / "communes.zip"
        path.write_text("<html>maintenance</html>")
        with pytest.raises(ArchiveError):
            CommunesDatastore().load_archive(path)

    def test_unrelated_members_ignored(self, make_archive) -> None:
        path = make_archive(extra={f"{TXT_FSO_ID}/1.2/readme.pdf": b"%PDF", "other/1.2/a_b_GDE.txt": b"junk"})
        datasets = CommunesDatastore().load_archive(path)
        assert len(list(datasets.municipalities.records())) == 1

    def test_latin3_text(self, make_archive) -> None:
        row = MUNICIPALITY_ROW.replace("Zztown\tZztown", "Zürich\tZürich")
        path = make_archive({"KT": [CANTON_ROW], "BEZ": [DISTRICT_ROW], "GDE": [row]})
        (municipality,) = CommunesDatastore().load_archive(path).municipalities.records()
        assert municipality.name == "Zürich"

    def test_bad_row_isolated(self, make_archive) -> None:
        path = make_archive({"KT": [CANTON_ROW], "BEZ": [DISTRICT_ROW], "GDE": [BAD_ROW, MUNICIPALITY_ROW]})
        municipalities = CommunesDatastore().load_archive(path).municipalities
        (error,) = municipalities.errors()
        assert error.line == 1
        assert [m.hist_id for m in municipalities.records(OnError.SKIP)] == [1000]

    def test_unresolved_district_refs(self, make_archive) -> None:
        path = make_archive(
            {"KT": [CANTON_ROW], "BEZ": [DISTRICT_ROW], "GDE": [MUNICIPALITY_ROW, ORPHAN_ROW]}
        )
        orphans = CommunesDatastore().load_archive(path).unresolved_district_refs()
        assert [m.name for m in orphans] == ["Waisen"]


# ===================================================================
# Through the download cache
# ===================================================================


class TestLoadThroughCache:
    """Download once, then serve from the cache."""

    @pytest.fixture
    def served(self, transport) -> str:
        url = datastore().asset().url_data
        transport.routes[url] = httpx.Response(
            200,
            content=_zip_bytes(
                {
                    "KT": CANTON_ROW + "\r\n",
                    "BEZ": DISTRICT_ROW + "\r\n",
                    "GDE": MUNICIPALITY_ROW + "\r\n",
                }
            ),
        )
        return url

    def test_load_downloads_once(self, served: str, recording_client, transport, tmp_path: Path) -> None:
        store = CacheStore(recording_client, cache_dir=tmp_path)
        first = datastore().load(store)
        second = datastore().load(store)
        assert len(transport.requests) == 1
        assert str(transport.requests[0].url) == served
        assert list(first.municipalities.records()) == list(second.municipalities.records())

    def test_download_failure(self, recording_client, tmp_path: Path) -> None:
        store = CacheStore(recording_client, cache_dir=tmp_path)
        with pytest.raises(DownloadError, match="404"):
            datastore().load(store)
        assert list(tmp_path.iterdir()) == []


# ===================================================================
# Assets and metadata
# ===================================================================


class TestCommunesMeta:
    """Assets, terms and citations."""

    def test_assets(self) -> None:
        store = datastore()
        assert store.asset().asset_id == TXT_ASSET_ID == 23886071
        assert store.asset_xml().asset_id == XML_ASSET_ID == 23886070

    def test_languages_unknown_before_download(self) -> None:
        assert datastore().available_languages() is None

    def test_meta_without_store(self) -> None:
        meta = datastore().meta()
        assert meta.terms_automatic.free_commercial_use is False
        assert meta.terms_automatic.free_noncommercial_use is True
        assert meta.terms_automatic.citation_mandatory is True
        assert meta.terms.default.name == "OPEN-BY-ASK"
        assert meta.citation.bibtex is None
        assert meta.lang is None

    def test_meta_with_store_fetches_citations(self, recording_client, transport, tmp_path: Path) -> None:
        asset = datastore().asset()
        transport.routes[asset.url_bibtex] = httpx.Response(200, content=b"@misc{communes}")
        transport.routes[asset.url_ris] = httpx.Response(200, content=b"TY  - DATA")
        meta = datastore().meta(CacheStore(recording_client, cache_dir=tmp_path))
        assert meta.citation.bibtex == "@misc{communes}"
        assert meta.citation.ris == "TY  - DATA"

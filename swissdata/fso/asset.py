"""FSO assets: data and citation URLs of the DAM API.

Every FSO publication is an asset with a numeric id; the same id gives
the downloadable file and its BibTeX / RIS references (citation of the
source may be mandatory under the terms of use).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from swissdata.tools.cache import CacheStore

AssetId = int

ASSET_URL_TEMPLATE = "https://dam-api.bfs.admin.ch/hub/api/dam/assets/{asset_id}/{mode}"


class AccessMode(StrEnum):
    """Representation of an asset served by the DAM API."""

    DATA = "master"
    BIBTEX = "bibtex"
    RIS = "ris"


@dataclass(frozen=True)
class Asset:
    """An FSO asset, addressed by its DAM id."""

    asset_id: AssetId

    def url(self, mode: AccessMode = AccessMode.DATA) -> str:
        return ASSET_URL_TEMPLATE.format(asset_id=self.asset_id, mode=mode.value)

    @property
    def url_data(self) -> str:
        return self.url(AccessMode.DATA)

    @property
    def url_bibtex(self) -> str:
        return self.url(AccessMode.BIBTEX)

    @property
    def url_ris(self) -> str:
        return self.url(AccessMode.RIS)

    def data_file(self, store: CacheStore) -> Path:
        """Local path of the data file, downloaded unless a fresh copy is cached."""
        return store.fetch_or_use_cache(self.url_data)

    def bibtex(self, store: CacheStore) -> str:
        return store.http_get(self.url_bibtex).decode("utf-8", errors="replace")

    def ris(self, store: CacheStore) -> str:
        return store.http_get(self.url_ris).decode("utf-8", errors="replace")

"""Federal Statistical Office as a publisher: editor, copyright and terms links.

The tables are built once at import time and never mutated.
"""

from __future__ import annotations

from swissdata.tools.meta import Link, Translated, translated_links

_EDITOR: Translated[Link] = translated_links(
    [
        ("en", "Federal Statistical Office", "https://www.bfs.admin.ch/bfs/en/home.html"),
        ("de", "Bundesamt für Statistik", "https://www.bfs.admin.ch/bfs/de/home.html"),
        ("fr", "Office fédéral de la statistique", "https://www.bfs.admin.ch/bfs/fr/home.html"),
        ("it", "Ufficio federale di statistica", "https://www.bfs.admin.ch/bfs/it/home.html"),
        ("rm", "Uffizi federal da statistica", "https://www.bfs.admin.ch/bfs/rm/home.html"),
    ]
)

_COPYRIGHT: Translated[Link] = translated_links(
    [
        (
            "en",
            "Federal Statistical Office - Legal framework",
            "https://www.bfs.admin.ch/bfs/en/home/fso/swiss-federal-statistical-office/legal-framework.html",
        ),
        (
            "de",
            "Bundesamt für Statistik - Rechtliche Hinweise",
            "https://www.bfs.admin.ch/bfs/de/home/bfs/bundesamt-statistik/rechtliche-hinweise.html",
        ),
        (
            "fr",
            "Office fédéral de la statistique - Informations juridiques",
            "https://www.bfs.admin.ch/bfs/fr/home/ofs/office-federal-statistique/informations-juridiques.html",
        ),
        (
            "it",
            "Ufficio federale di statistica - Basi legali",
            "https://www.bfs.admin.ch/bfs/it/home/ust/ufficio-federale-statistica/basi-legali.html",
        ),
    ]
)

_TERMS_URLS: tuple[tuple[str, str], ...] = (
    ("en", "https://www.bfs.admin.ch/bfs/en/home/fso/swiss-federal-statistical-office/terms-of-use.html"),
    ("de", "https://www.bfs.admin.ch/bfs/de/home/bfs/bundesamt-statistik/nutzungsbedingungen.html"),
    ("fr", "https://www.bfs.admin.ch/bfs/fr/home/ofs/office-federal-statistique/conditions-utilisation.html"),
    ("it", "https://www.bfs.admin.ch/bfs/it/home/ust/ufficio-federale-statistica/condizioni-uso.html"),
)


def editor() -> Translated[Link]:
    return _EDITOR


def copyright() -> Translated[Link]:  # noqa: A001
    return _COPYRIGHT


def terms(title: str) -> Translated[Link]:
    """Terms-of-use page, labelled with the dataset's licence *title* (e.g. ``OPEN-BY-ASK``)."""
    return translated_links((lang, title, url) for lang, url in _TERMS_URLS)

"""Print the districts and municipalities currently in force in one canton.

Downloads (or reuses the cached copy of) the FSO historicized list of
communes, then lists the canton's active districts and, for each, its
active municipalities grouped by entry mode.

Usage:
    python -m scripts.commune_report [CANTON] [--lang fr] [--validity-hours 24]
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from datetime import timedelta

import httpx
import structlog

from swissdata.config.settings import Environment, Settings, get_settings
from swissdata.errors import ArchiveError, CacheError, DownloadError
from swissdata.fso.communes import Datasets, datastore
from swissdata.tools.cache import CacheStore
from swissdata.tools.dataset import OnError
from swissdata.tools.meta import Meta

NAMES_PER_LINE = 10

_LOG_NAME_TO_LEVEL: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def configure_logging(settings: Settings) -> None:
    """Structured logging for the script, stdlib logging for the library modules."""
    level = _LOG_NAME_TO_LEVEL[settings.LOG_LEVEL.value]
    logging.basicConfig(level=level, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer() if settings.ENVIRONMENT == Environment.DEV
            else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def render_meta(meta: Meta, lang: str) -> list[str]:
    terms = meta.terms_automatic
    copyright_link = meta.copyright.get_or_default(lang)
    return [
        f"Data editor        : {meta.editor.get_or_default(lang).name}",
        f"Copyright          : {copyright_link.name} -> {copyright_link.url}",
        f"Terms of use       : {meta.terms.get_or_default(lang)}",
        f"Commercial use     : {terms.free_commercial_use}",
        f"Non-commercial use : {terms.free_noncommercial_use}",
        f"Citation required  : {terms.citation_mandatory}",
    ]


def render_report(datasets: Datasets, canton_abbreviation: str) -> list[str]:
    """Report lines for one canton; rows that fail to decode are logged and skipped.

    Raises:
        LookupError: If no canton has *canton_abbreviation*.
    """
    abbreviation = canton_abbreviation.upper()
    canton = next(
        (kt for kt in datasets.cantons.records(OnError.LOG) if kt.abbreviation == abbreviation),
        None,
    )
    if canton is None:
        msg = f"Unknown canton abbreviation: {abbreviation!r}"
        raise LookupError(msg)

    districts = sorted(
        (d for d in datasets.districts.active(OnError.LOG) if d.canton_id == canton.id),
        key=lambda d: (d.entry_mode, d.short_name),
    )
    historic_count = sum(
        1 for d in datasets.districts.historic(OnError.LOG) if d.canton_id == canton.id
    )

    lines = [
        f"{canton.name} has {len(districts)} districts",
        f"{' ' * len(canton.name)} and {historic_count} districts in historic",
    ]
    municipalities = list(datasets.municipalities.active(OnError.LOG))
    for district in districts:
        members = sorted(
            (m for m in municipalities if m.district_hist_id == district.hist_id),
            key=lambda m: m.name,
        )
        lines.append(
            f"{'(' + district.entry_mode.name + ')':<18} {district.short_name} "
            f"has {len(members)} municipalities/areas"
        )
        for mode in sorted({m.entry_mode for m in members}):
            names = [m.name for m in members if m.entry_mode == mode]
            label = mode.name
            for start in range(0, len(names), NAMES_PER_LINE):
                chunk = ", ".join(names[start:start + NAMES_PER_LINE])
                if start == 0:
                    lines.append(f"{'':21}{label}: {chunk}")
                else:
                    lines.append(f"{'':21}{' ' * len(label)}  {chunk}")
    return lines


def main(argv: Sequence[str] | None = None) -> int:
    """Commune report entry point."""
    parser = argparse.ArgumentParser(
        description="List the districts and municipalities in force in a Swiss canton",
    )
    parser.add_argument("canton", nargs="?", default="BE", help="Canton abbreviation (default: BE)")
    parser.add_argument("--lang", default="fr", help="Language of the metadata (default: fr)")
    parser.add_argument(
        "--validity-hours",
        type=float,
        default=None,
        help="Override the cache validity window",
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings)
    log = structlog.get_logger()

    store_ds = datastore()
    with httpx.Client(follow_redirects=True, timeout=settings.HTTP_TIMEOUT_SECONDS) as client:
        store = CacheStore.from_settings(client, settings)
        if args.validity_hours is not None:
            store = CacheStore(
                client,
                cache_dir=settings.cache_root,
                validity=timedelta(hours=args.validity_hours),
            )
        try:
            datasets = store_ds.load(store)
        except (DownloadError, CacheError, ArchiveError) as e:
            log.error("load_failed", error=str(e))
            print(f"FAIL | {e}")
            return 1

    for line in render_meta(store_ds.meta(), args.lang):
        print(line)
    try:
        report = render_report(datasets, args.canton)
    except LookupError as e:
        log.error("unknown_canton", canton=args.canton)
        print(f"FAIL | {e}")
        return 1
    for line in report:
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())

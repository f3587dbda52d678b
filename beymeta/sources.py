"""
beymeta/sources.py
==================
Glue between the data sources (hosted REST store or local sqlite mirror)
and the analyzers. Both sources expose the same read methods, so every
surface loads tournament inputs the same way.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from beymeta.database import Database
from beymeta.parser import MatchRecord, matches_from_rows
from beymeta.parts import PartCatalog, catalog_from_rows
from beymeta.player_analyzer import registrations_from_rows
from beymeta.settings import Settings
from beymeta.store_client import StoreClient

LOGGER = logging.getLogger(__name__)

DataSource = Union[StoreClient, Database]


@dataclass(frozen=True)
class TournamentInputs:
    tournament_id: str
    catalog: PartCatalog
    matches: tuple[MatchRecord, ...]
    registrations: Optional[dict[str, list[str]]]


def open_source(settings: Settings, prefer_local: bool = False) -> DataSource:
    """Hosted store when credentials are configured, otherwise the local mirror."""
    if settings.use_hosted_store and not prefer_local:
        LOGGER.info("Using hosted store at %s", settings.supabase_url)
        return StoreClient(settings.supabase_url, settings.supabase_key, settings.http_timeout_seconds)
    LOGGER.info("Using local mirror at %s", settings.db_path)
    return Database(settings.db_path)


def load_catalog(source: DataSource) -> PartCatalog:
    part_rows = source.get_part_rows()
    return catalog_from_rows(part_rows.get('blade', []), part_rows.get('ratchet', []), part_rows.get('bit', []))


def load_tournament_inputs(source: DataSource, tournament_id: Any) -> TournamentInputs:
    """
    Fetch everything one tournament's analytics need.

    Registrations are None when the tournament has none recorded, so player
    analytics fall back to discovering players from the matches.
    """
    catalog = load_catalog(source)
    matches = tuple(matches_from_rows(source.get_match_results(tournament_id)))
    registrations = registrations_from_rows(source.get_registrations(tournament_id)) or None
    LOGGER.info(
        "Loaded tournament %s: %s matches, %s catalog parts, %s registrations",
        tournament_id, len(matches), len(catalog), len(registrations or {}),
    )
    return TournamentInputs(str(tournament_id), catalog, matches, registrations)


def sync_from_store(store: StoreClient, db: Database) -> dict[str, int]:
    """
    Copy tournaments, match results, registrations and reference parts from the
    hosted store into the local mirror.

    Tournament rows, match results and registrations are replaced, so the
    mirror holds exactly what the hosted store lists. Local tournaments the
    hosted store no longer has are deleted with their matches.

    Returns:
        Counts of what was written
    """
    counts = {'tournaments': 0, 'matches': 0, 'registrations': 0, 'removed': 0}
    written = db.save_part_rows(store.get_part_rows())
    counts.update({f"{part_type}s": n for part_type, n in written.items()})

    hosted = store.get_tournaments()
    hosted_ids = {str(t.get('id')) for t in hosted}
    for local in db.get_tournaments():
        if local['id'] not in hosted_ids:
            db.delete_tournament(local['id'])
            counts['removed'] += 1
            LOGGER.info("Removed tournament %s (%s) no longer in hosted store", local['name'], local['id'])

    for tournament in hosted:
        tournament_id = str(tournament.get('id'))
        db.add_tournament(
            tournament_id,
            tournament.get('name') or tournament_id,
            status=tournament.get('status') or 'upcoming',
            tournament_date=tournament.get('tournament_date'),
        )
        counts['tournaments'] += 1
        counts['matches'] += db.replace_match_results(tournament_id, store.get_match_results(tournament_id))
        counts['registrations'] += db.replace_registrations(
            tournament_id, registrations_from_rows(store.get_registrations(tournament_id))
        )
        LOGGER.info("Synced tournament %s (%s)", tournament.get('name'), tournament_id)

    return counts

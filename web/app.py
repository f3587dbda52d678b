from fastapi import FastAPI, HTTPException
from fastapi.responses import PlainTextResponse
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from beymeta.meta_analyzer import MetaAnalyzer
from beymeta.overview import LeagueOverview
from beymeta.parser import matches_from_rows
from beymeta.player_analyzer import PlayerAnalyzer
from beymeta.settings import Settings, configure_logging, load_env
from beymeta.sources import TournamentInputs, load_tournament_inputs, open_source
from beymeta.store_client import StoreError
from beymeta.table import BUILD_COLUMNS, BUILD_MATCH_COLUMNS, PART_COLUMNS, PLAYER_MATCH_COLUMNS, StatTable
from beymeta.thresholds import PART_TYPES

load_env()
settings = Settings.from_env()
logger = logging.getLogger(__name__)

app = FastAPI(title="BEYMETA")
source = None
player_analyzer = PlayerAnalyzer()
league_overview = LeagueOverview()


def get_source():
    global source
    if source is None:
        source = open_source(settings)
    return source


def _load_inputs(tournament_id: str) -> TournamentInputs:
    src = get_source()
    try:
        tournaments = src.get_tournaments()
        if not any(str(t.get("id")) == str(tournament_id) for t in tournaments):
            raise HTTPException(status_code=404, detail=f"Tournament {tournament_id} not found")
        return load_tournament_inputs(src, tournament_id)
    except StoreError as e:
        logger.warning("Hosted store error loading tournament %s: %s", tournament_id, e)
        raise HTTPException(status_code=502, detail=f"Hosted store error: {str(e)}")
    except RuntimeError as e:
        logger.error("Failed to load tournament %s: %s", tournament_id, e)
        raise HTTPException(status_code=500, detail=f"Failed to load tournament data: {str(e)}")


def _table_payload(table: StatTable) -> dict:
    return {
        "columns": [{"key": c.key, "label": c.label} for c in table.columns],
        "rows": table.to_records(),
        "display": table.display_rows(),
        "sort": table.sort_key,
        "direction": table.direction,
        "count": len(table),
    }


def _sorted(table: StatTable, sort: str | None, direction: str) -> StatTable:
    if not sort:
        return table
    try:
        return table.sort(sort, direction)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/")
async def root() -> dict:
    return {
        "service": "beymeta",
        "source": "hosted" if settings.use_hosted_store else "local",
        "endpoints": [
            "/api/tournaments",
            "/api/overview",
            "/api/meta/{tournament_id}",
            "/api/meta/{tournament_id}/builds",
            "/api/meta/{tournament_id}/matches",
            "/api/meta/{tournament_id}/export/{part_type}",
            "/api/players/{tournament_id}",
            "/api/players/{tournament_id}/{name}",
        ],
    }


@app.get("/api/tournaments")
async def tournaments() -> dict:
    try:
        rows = get_source().get_tournaments()
        return {"tournaments": rows, "count": len(rows)}
    except StoreError as e:
        raise HTTPException(status_code=502, detail=f"Hosted store error: {str(e)}")


@app.get("/api/overview")
async def overview() -> dict:
    src = get_source()
    try:
        matches = matches_from_rows(src.get_all_match_results())
        return league_overview.build(src.get_tournaments(), matches)
    except StoreError as e:
        raise HTTPException(status_code=502, detail=f"Hosted store error: {str(e)}")


@app.get("/api/meta/{tournament_id}")
async def meta(tournament_id: str, sort: str = "wilson", direction: str = "desc") -> dict:
    inputs = _load_inputs(tournament_id)
    result = MetaAnalyzer(inputs.catalog).aggregate(inputs.matches)
    tables = {
        part_type: _table_payload(_sorted(StatTable.from_stats(PART_COLUMNS, result.used(part_type)), sort, direction))
        for part_type in PART_TYPES
    }
    return {
        "tournament_id": tournament_id,
        "matches_analyzed": result.matches_analyzed,
        "unparsed_combos": result.unparsed_combos,
        "part_keys": {part_type: result.used_keys(part_type) for part_type in PART_TYPES},
        "tables": tables,
    }


@app.get("/api/meta/{tournament_id}/builds")
async def builds(tournament_id: str, part_type: str, part_key: str,
                 sort: str = "wilson", direction: str = "desc") -> dict:
    if part_type not in PART_TYPES:
        raise HTTPException(status_code=400, detail=f"part_type must be one of {', '.join(PART_TYPES)}")
    inputs = _load_inputs(tournament_id)
    stats = MetaAnalyzer(inputs.catalog).builds_for_part(inputs.matches, part_type, part_key)
    table = _sorted(StatTable.from_stats(BUILD_COLUMNS, stats), sort, direction)
    return {"tournament_id": tournament_id, "part_type": part_type, "part_key": part_key,
            "table": _table_payload(table)}


@app.get("/api/meta/{tournament_id}/matches")
async def build_matches(tournament_id: str, build: str, player: str) -> dict:
    inputs = _load_inputs(tournament_id)
    rows = MetaAnalyzer(inputs.catalog).matches_for_build(inputs.matches, build, player)
    return {"tournament_id": tournament_id, "build": build, "player": player,
            "table": _table_payload(StatTable.from_stats(BUILD_MATCH_COLUMNS, rows))}


@app.get("/api/meta/{tournament_id}/export/{part_type}")
async def export_parts(tournament_id: str, part_type: str) -> PlainTextResponse:
    if part_type not in PART_TYPES:
        raise HTTPException(status_code=400, detail=f"part_type must be one of {', '.join(PART_TYPES)}")
    inputs = _load_inputs(tournament_id)
    result = MetaAnalyzer(inputs.catalog).aggregate(inputs.matches)
    table = StatTable.from_stats(PART_COLUMNS, result.ranked(part_type))
    return PlainTextResponse(
        table.to_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{tournament_id}_{part_type}.csv"'},
    )


@app.get("/api/players/{tournament_id}")
async def players(tournament_id: str) -> dict:
    inputs = _load_inputs(tournament_id)
    cards = player_analyzer.analyze(inputs.matches, inputs.registrations)
    summaries = [player_analyzer.summary(cards[name]) for name in sorted(cards)]
    return {"tournament_id": tournament_id, "players": summaries, "count": len(summaries)}


@app.get("/api/players/{tournament_id}/{name}")
async def player_card(tournament_id: str, name: str) -> dict:
    inputs = _load_inputs(tournament_id)
    cards = player_analyzer.analyze(inputs.matches, inputs.registrations)
    card = cards.get(name)
    if card is None:
        raise HTTPException(status_code=404, detail=f"Player '{name}' not found in tournament {tournament_id}")
    return {
        "tournament_id": tournament_id,
        "summary": player_analyzer.summary(card),
        "breakdown": player_analyzer.finish_breakdown(card),
        "matches": _table_payload(StatTable(PLAYER_MATCH_COLUMNS, player_analyzer.match_rows(card))),
    }


if __name__ == "__main__":
    import uvicorn

    configure_logging(settings)
    print("Starting BEYMETA Web Server...")
    print(f"Open http://{settings.web_host}:{settings.web_port} in your browser")
    uvicorn.run(app, host=settings.web_host, port=settings.web_port)

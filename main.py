# main.py

import argparse
from pathlib import Path

from beymeta.database import Database
from beymeta.meta_analyzer import MetaAnalyzer
from beymeta.overview import LeagueOverview
from beymeta.parser import matches_from_rows
from beymeta.player_analyzer import PlayerAnalyzer
from beymeta.settings import Settings, configure_logging, load_env
from beymeta.sources import load_tournament_inputs, open_source, sync_from_store
from beymeta.store_client import StoreClient, StoreError
from beymeta.table import BUILD_COLUMNS, BUILD_MATCH_COLUMNS, PART_COLUMNS, PLAYER_MATCH_COLUMNS, StatTable
from beymeta.thresholds import PART_TYPES
from beymeta.ui import TerminalUI


def _part_table(meta, part_type: str, sort_key: str = 'wilson', direction: str = 'desc') -> StatTable:
    return StatTable.from_stats(PART_COLUMNS, meta.used(part_type)).sort(sort_key, direction)


def _require_inputs(ui: TerminalUI, inputs) -> bool:
    if inputs is None:
        ui.show_error("Select a tournament first (option 1)")
        return False
    return True


def main(argv=None):
    load_env()
    arg_parser = argparse.ArgumentParser(description="Tournament meta and player analytics")
    arg_parser.add_argument("--local", action="store_true", help="Read the local sqlite mirror even if a hosted store is configured")
    arg_parser.add_argument("--export-dir", default="exports", help="Directory for CSV exports")
    args = arg_parser.parse_args(argv)

    settings = Settings.from_env()
    configure_logging(settings)

    ui = TerminalUI()
    source = open_source(settings, prefer_local=args.local)
    player_analyzer = PlayerAnalyzer()
    overview = LeagueOverview()

    tournament = None
    inputs = None
    analyzer = None
    meta = None

    try:
        while True:
            label = tournament['name'] if tournament else None
            choice = ui.show_menu(label)

            try:
                if choice == '1':
                    picked = ui.choose_tournament(source.get_tournaments())
                    if picked is None:
                        continue
                    tournament = picked
                    inputs = load_tournament_inputs(source, picked['id'])
                    analyzer = MetaAnalyzer(inputs.catalog)
                    meta = analyzer.aggregate(inputs.matches)
                    ui.show_success(
                        f"Loaded {meta.matches_analyzed} matches for {picked['name']}"
                        + (f" ({meta.unparsed_combos} unrecognised combos skipped)" if meta.unparsed_combos else "")
                    )

                elif choice == '2':
                    if not _require_inputs(ui, inputs):
                        continue
                    sort_key = ui.ask("Sort by column (Enter for Wilson)") or 'wilson'
                    direction = 'asc' if ui.ask("Direction [asc/desc] (default desc)").lower() == 'asc' else 'desc'
                    for part_type in PART_TYPES:
                        table = _part_table(meta, part_type, sort_key, direction)
                        ui.show_table(f"{part_type.upper()}S", table, "No recognised parts in this tournament")

                elif choice == '3':
                    if not _require_inputs(ui, inputs):
                        continue
                    part_type = ui.choose_part_type()
                    if part_type is None:
                        continue
                    keys = meta.used_keys(part_type)
                    index = ui.choose_from(f"{part_type.capitalize()}s used", keys)
                    if index is None:
                        continue
                    builds = analyzer.builds_for_part(inputs.matches, part_type, keys[index])
                    table = StatTable.from_stats(BUILD_COLUMNS, builds).sort('wilson', 'desc')
                    ui.show_table(f"BUILDS WITH {keys[index]}", table)

                elif choice == '4':
                    if not _require_inputs(ui, inputs):
                        continue
                    build = ui.ask("Build (e.g. Dran Sword 3-60F)")
                    player = ui.ask("Player")
                    rows = analyzer.matches_for_build(inputs.matches, build, player)
                    table = StatTable.from_stats(BUILD_MATCH_COLUMNS, rows)
                    ui.show_table(f"MATCHES FOR {build} BY {player}", table, "No matches for that build and player")

                elif choice == '5':
                    if not _require_inputs(ui, inputs):
                        continue
                    players = player_analyzer.analyze(inputs.matches, inputs.registrations)
                    names = sorted(players)
                    index = ui.choose_from("Players", names)
                    if index is None:
                        continue
                    card = players[names[index]]
                    ui.show_player_card(player_analyzer.summary(card), player_analyzer.finish_breakdown(card))
                    table = StatTable(PLAYER_MATCH_COLUMNS, player_analyzer.match_rows(card))
                    ui.show_table("ALL MATCHES", table)

                elif choice == '6':
                    tournaments = source.get_tournaments()
                    matches = matches_from_rows(source.get_all_match_results())
                    ui.show_overview(overview.build(tournaments, matches))

                elif choice == '7':
                    if not _require_inputs(ui, inputs):
                        continue
                    part_type = ui.choose_part_type()
                    if part_type is None:
                        continue
                    export_dir = Path(args.export_dir)
                    export_dir.mkdir(parents=True, exist_ok=True)
                    path = export_dir / f"{inputs.tournament_id}_{part_type}.csv"
                    path.write_text(_part_table(meta, part_type).to_csv(), encoding="utf-8")
                    ui.show_success(f"Exported {path}")

                elif choice == '8':
                    if not isinstance(source, StoreClient):
                        ui.show_error("No hosted store configured (set SUPABASE_URL and SUPABASE_KEY)")
                        continue
                    db = Database(settings.db_path)
                    try:
                        counts = sync_from_store(source, db)
                    finally:
                        db.close()
                    ui.show_success(
                        "Synced " + ", ".join(f"{n} {name}" for name, n in counts.items())
                    )

                elif choice == '9':
                    print("Goodbye!")
                    break

            except StoreError as e:
                ui.show_error(f"Hosted store error: {e}")
            except (ValueError, RuntimeError) as e:
                ui.show_error(str(e))

    except KeyboardInterrupt:
        print("\nGoodbye!")
    finally:
        source.close()


if __name__ == '__main__':
    main()

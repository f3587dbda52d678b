#!/usr/bin/env python3
# scripts/import_sheets.py
"""
CLI script for loading published-sheet CSV exports into the local mirror.

Usage:
    python scripts/import_sheets.py --tournament-id t1 --name "Spring Cup" --matches matches.csv
    python scripts/import_sheets.py --tournament-id t1 --name "Spring Cup" --matches matches.csv \\
        --blades blades.csv --ratchets ratchets.csv --bits bits.csv
"""

import sys
import os
import argparse
from pathlib import Path

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from beymeta.database import Database
from beymeta.meta_analyzer import MetaAnalyzer
from beymeta.parser import MatchSheetParser
from beymeta.parts import catalog_from_csv
from beymeta.settings import Settings, configure_logging, load_env
from beymeta.sources import load_catalog


def _read(path):
    return Path(path).read_text(encoding='utf-8') if path else ''


def _part_rows(catalog):
    """Catalog entries in hosted reference-table naming."""
    return {
        'blade': [{'Blades': p.name, 'Line': p.line} for p in catalog.blade.values()],
        'ratchet': [{'Ratchet': p.name} for p in catalog.ratchet.values()],
        'bit': [{'Bit': p.full_name, 'Shortcut': p.name} for p in catalog.bit.values()],
    }


def _match_rows(matches):
    return [
        {
            'player1_name': m.player1,
            'player2_name': m.player2,
            'player1_beyblade': m.bey1,
            'player2_beyblade': m.bey2,
            'winner_name': m.winner,
            'outcome': m.finish,
        }
        for m in matches
    ]


def main():
    """Main CLI entrypoint."""
    load_env()
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(
        description='Import match and part sheets (CSV) into the local database',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--tournament-id', required=True, help='Tournament id to import into')
    parser.add_argument('--name', help='Tournament name (default: the id)')
    parser.add_argument('--status', default='completed', help='Tournament status (default: completed)')
    parser.add_argument('--date', help='Tournament date, YYYY-MM-DD')
    parser.add_argument('--matches', required=True, help='Match sheet CSV')
    parser.add_argument('--blades', help='Blade sheet CSV')
    parser.add_argument('--ratchets', help='Ratchet sheet CSV')
    parser.add_argument('--bits', help='Bit sheet CSV')
    parser.add_argument('--db', default=settings.db_path, help=f'Database path (default: {settings.db_path})')
    args = parser.parse_args()

    configure_logging(settings)

    try:
        matches = MatchSheetParser().parse(_read(args.matches))
    except (OSError, ValueError) as e:
        print(f"✗ ERROR: Could not read match sheet: {e}")
        sys.exit(1)

    db = Database(args.db)
    try:
        if args.blades or args.ratchets or args.bits:
            catalog = catalog_from_csv(_read(args.blades), _read(args.ratchets), _read(args.bits))
            written = db.save_part_rows(_part_rows(catalog))
            print(f"✓ Parts: {written['blade']} blades, {written['ratchet']} ratchets, {written['bit']} bits")

        db.add_tournament(args.tournament_id, args.name or args.tournament_id,
                          status=args.status, tournament_date=args.date)
        count = db.replace_match_results(args.tournament_id, _match_rows(matches))
        print(f"✓ Imported {count} matches into tournament {args.tournament_id}")

        meta = MetaAnalyzer(load_catalog(db)).aggregate(matches)
        if meta.unparsed_combos:
            print(f"⚠ {meta.unparsed_combos} combos did not match a known bit")
    except (OSError, RuntimeError) as e:
        print(f"✗ ERROR: {e}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == '__main__':
    main()

# tests/helpers.py

from beymeta.database import Database
from beymeta.parser import MatchRecord
from beymeta.parts import PartCatalog


def sample_catalog() -> PartCatalog:
    """Small catalog with a multi-word blade and overlapping bit shortcuts."""
    return PartCatalog.from_mappings(
        blade={
            'Dran Sword': {'line': 'BX'},
            'Wizard Rod': {'line': 'BX'},
            'Hells Scythe': {'line': 'BX'},
            'Phoenix Wing': {'line': 'BX'},
        },
        ratchet=['3-60', '9-60', '4-60', '5-60'],
        bit={
            'F': {'full_name': 'Flat'},
            'B': {'full_name': 'Ball'},
            'T': {'full_name': 'Taper'},
            'LF': {'full_name': 'Low Flat'},
            'HN': {'full_name': 'High Needle'},
        },
    )


def sample_part_rows() -> dict:
    """Reference rows in hosted naming for the sample catalog."""
    return {
        'blade': [
            {'Blades': 'Dran Sword', 'Line': 'BX'},
            {'Blades': 'Wizard Rod', 'Line': 'BX'},
            {'Blades': 'Hells Scythe', 'Line': 'BX'},
            {'Blades': 'Phoenix Wing', 'Line': 'BX'},
        ],
        'ratchet': [{'Ratchet': code} for code in ('3-60', '9-60', '4-60', '5-60')],
        'bit': [
            {'Bit': 'Flat', 'Shortcut': 'F'},
            {'Bit': 'Ball', 'Shortcut': 'B'},
            {'Bit': 'Taper', 'Shortcut': 'T'},
            {'Bit': 'Low Flat', 'Shortcut': 'LF'},
            {'Bit': 'High Needle', 'Shortcut': 'HN'},
        ],
    }


def sample_match_rows() -> list:
    """Four matches in hosted ``match_results`` naming."""
    return [
        {'player1_name': 'Alice', 'player2_name': 'Bob',
         'player1_beyblade': 'Dran Sword 3-60F', 'player2_beyblade': 'Wizard Rod 9-60B',
         'winner_name': 'Alice', 'outcome': 'Burst Finish (2 pts)'},
        {'player1_name': 'Alice', 'player2_name': 'Cara',
         'player1_beyblade': 'Dran Sword 3-60F', 'player2_beyblade': 'Hells Scythe 4-60T',
         'winner_name': 'Cara', 'outcome': 'Spin Finish (1 pt)'},
        {'player1_name': 'Bob', 'player2_name': 'Cara',
         'player1_beyblade': 'Wizard Rod 9-60B', 'player2_beyblade': 'Phoenix Wing 5-60LF',
         'winner_name': 'Bob', 'outcome': 'Extreme Finish (3 pts)'},
        {'player1_name': 'Alice', 'player2_name': 'Bob',
         'player1_beyblade': 'Wizard Rod 3-60HN', 'player2_beyblade': 'Dran Sword 3-60F',
         'winner_name': 'Alice', 'outcome': 'Over Finish (2 pts)'},
    ]


def sample_matches() -> list:
    return [
        MatchRecord(
            player1=row['player1_name'],
            player2=row['player2_name'],
            bey1=row['player1_beyblade'],
            bey2=row['player2_beyblade'],
            winner=row['winner_name'],
            finish=row['outcome'],
        )
        for row in sample_match_rows()
    ]


def seed_tournament(db: Database, tournament_id: str = 't1', name: str = 'Spring Cup',
                    status: str = 'completed', tournament_date: str = '2025-03-01'):
    """Insert the sample parts, one tournament and its matches."""
    db.save_part_rows(sample_part_rows())
    db.add_tournament(tournament_id, name, status=status, tournament_date=tournament_date)
    db.replace_match_results(tournament_id, sample_match_rows())

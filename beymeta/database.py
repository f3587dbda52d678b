# beymeta/database.py

import sqlite3
import os
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional


class Database:
    """Local sqlite mirror of the league tables the analytics read."""

    def __init__(self, db_path: str = 'data/beymeta.db'):
        self.db_path = self._resolve_db_path(db_path)
        self.conn = None
        self.init_database()

    @staticmethod
    def _resolve_db_path(db_path: str) -> str:
        """Return an absolute database path anchored to project root when relative."""
        path = Path(db_path)
        if path.is_absolute():
            return str(path)

        project_root = Path(__file__).resolve().parents[1]
        return str(project_root / path)

    def init_database(self):
        """Create tables if they don't exist."""
        try:
            db_dir = os.path.dirname(self.db_path)
            if db_dir:
                try:
                    os.makedirs(db_dir, exist_ok=True)
                except OSError as e:
                    raise RuntimeError(f"Failed to create database directory '{db_dir}': {e}")

            # the web app's connection is opened outside the event-loop thread that later uses it
            self.conn = sqlite3.connect(self.db_path, timeout=30.0, check_same_thread=False)
            self.conn.row_factory = sqlite3.Row
            self.conn.execute("PRAGMA busy_timeout = 30000")
            self.conn.execute("PRAGMA foreign_keys = ON")

            cursor = self.conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS tournaments (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    status TEXT DEFAULT 'upcoming',
                    tournament_date TEXT,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS match_results (
                    match_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    tournament_id TEXT NOT NULL,
                    player1_name TEXT,
                    player2_name TEXT,
                    player1_beyblade TEXT,
                    player2_beyblade TEXT,
                    winner_name TEXT,
                    outcome TEXT,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    FOREIGN KEY (tournament_id) REFERENCES tournaments(id) ON DELETE CASCADE
                )
            """)

            # Reference parts, keyed the way combo strings spell them
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS blades (
                    name TEXT PRIMARY KEY,
                    line TEXT
                )
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS ratchets (
                    name TEXT PRIMARY KEY
                )
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS bits (
                    shortcut TEXT PRIMARY KEY,
                    name TEXT
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS registrations (
                    registration_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    tournament_id TEXT NOT NULL,
                    player_name TEXT NOT NULL,
                    status TEXT DEFAULT 'confirmed',
                    UNIQUE (tournament_id, player_name),
                    FOREIGN KEY (tournament_id) REFERENCES tournaments(id) ON DELETE CASCADE
                )
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS registration_beyblades (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    registration_id INTEGER NOT NULL,
                    beyblade_name TEXT NOT NULL,
                    FOREIGN KEY (registration_id) REFERENCES registrations(registration_id) ON DELETE CASCADE
                )
            """)

            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_match_results_tournament ON match_results(tournament_id)"
            )

            self._commit_with_retry(context="initialize schema")
        except sqlite3.Error as e:
            raise RuntimeError(f"Failed to initialize database: {e}")

    def _commit_with_retry(self, retries: int = 8, delay_seconds: float = 0.25, context: str = "commit") -> None:
        """
        Retry commit on transient SQLITE_BUSY/locked errors.
        """
        last_error = None
        for attempt in range(retries):
            try:
                self.conn.commit()
                return
            except sqlite3.OperationalError as e:
                last_error = e
                if "locked" not in str(e).lower() and "busy" not in str(e).lower():
                    raise
                if attempt == retries - 1:
                    break
                time.sleep(delay_seconds)
        raise RuntimeError(
            f"Failed to {context}: database remained locked after {retries} attempts ({last_error})"
        )

    # --- Tournaments ---

    def add_tournament(self, tournament_id: str, name: str, status: str = 'completed',
                       tournament_date: Optional[str] = None) -> str:
        """Insert or update a tournament. Returns its id."""
        try:
            cursor = self.conn.cursor()
            cursor.execute("""
                INSERT INTO tournaments (id, name, status, tournament_date)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    status = excluded.status,
                    tournament_date = excluded.tournament_date
            """, (str(tournament_id), name, status, tournament_date))
            self._commit_with_retry(context="add tournament commit")
            return str(tournament_id)
        except sqlite3.Error as e:
            self.conn.rollback()
            raise RuntimeError(f"Failed to add tournament '{name}': {e}")

    def get_tournaments(self) -> List[Dict]:
        """All tournaments, newest first."""
        try:
            cursor = self.conn.cursor()
            cursor.execute(
                "SELECT id, name, status, tournament_date FROM tournaments "
                "ORDER BY tournament_date DESC, name"
            )
            return [dict(row) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            raise RuntimeError(f"Failed to get tournaments: {e}")

    def get_tournament(self, tournament_id: str) -> Optional[Dict]:
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT id, name, status, tournament_date FROM tournaments WHERE id = ?",
            (str(tournament_id),),
        )
        row = cursor.fetchone()
        return dict(row) if row else None

    def delete_tournament(self, tournament_id: str) -> None:
        """Delete a tournament with its matches and registrations."""
        try:
            cursor = self.conn.cursor()
            cursor.execute("DELETE FROM tournaments WHERE id = ?", (str(tournament_id),))
            self._commit_with_retry(context="delete tournament commit")
        except sqlite3.Error as e:
            self.conn.rollback()
            raise RuntimeError(f"Failed to delete tournament {tournament_id}: {e}")

    # --- Match results ---

    def replace_match_results(self, tournament_id: str, rows: Iterable[Dict[str, Any]]) -> int:
        """
        Replace a tournament's match results with ``rows``.

        Args:
            tournament_id: Owning tournament (must exist)
            rows: Dicts in hosted column naming (player1_name, ..., outcome)

        Returns:
            Number of rows written
        """
        try:
            cursor = self.conn.cursor()
            cursor.execute("DELETE FROM match_results WHERE tournament_id = ?", (str(tournament_id),))
            values = [
                (
                    str(tournament_id),
                    row.get('player1_name'),
                    row.get('player2_name'),
                    row.get('player1_beyblade'),
                    row.get('player2_beyblade'),
                    row.get('winner_name'),
                    row.get('outcome'),
                )
                for row in rows
            ]
            cursor.executemany("""
                INSERT INTO match_results (
                    tournament_id, player1_name, player2_name,
                    player1_beyblade, player2_beyblade, winner_name, outcome
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """, values)
            self._commit_with_retry(context="replace match results commit")
            return len(values)
        except sqlite3.Error as e:
            self.conn.rollback()
            raise RuntimeError(f"Failed to save match results for tournament {tournament_id}: {e}")

    def get_match_results(self, tournament_id: str) -> List[Dict]:
        try:
            cursor = self.conn.cursor()
            cursor.execute("""
                SELECT tournament_id, player1_name, player2_name, player1_beyblade,
                       player2_beyblade, winner_name, outcome
                FROM match_results
                WHERE tournament_id = ?
                ORDER BY match_id
            """, (str(tournament_id),))
            return [dict(row) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            raise RuntimeError(f"Failed to get match results for tournament {tournament_id}: {e}")

    def get_all_match_results(self) -> List[Dict]:
        cursor = self.conn.cursor()
        cursor.execute("""
            SELECT tournament_id, player1_name, player2_name, player1_beyblade,
                   player2_beyblade, winner_name, outcome
            FROM match_results
            ORDER BY match_id
        """)
        return [dict(row) for row in cursor.fetchall()]

    # --- Reference parts ---

    def save_part_rows(self, part_rows: Dict[str, List[Dict[str, Any]]]) -> Dict[str, int]:
        """
        Upsert reference rows given in hosted naming.

        Args:
            part_rows: {'blade': [{'Blades', 'Line'}], 'ratchet': [{'Ratchet'}],
                        'bit': [{'Bit', 'Shortcut'}]}

        Returns:
            Rows written per part type; rows without a key are ignored
        """
        written = {'blade': 0, 'ratchet': 0, 'bit': 0}
        try:
            cursor = self.conn.cursor()
            for row in part_rows.get('blade', []):
                name = str(row.get('Blades') or '').strip()
                if not name:
                    continue
                cursor.execute("""
                    INSERT INTO blades (name, line) VALUES (?, ?)
                    ON CONFLICT(name) DO UPDATE SET line = excluded.line
                """, (name, row.get('Line')))
                written['blade'] += 1
            for row in part_rows.get('ratchet', []):
                name = str(row.get('Ratchet') or '').strip()
                if not name:
                    continue
                cursor.execute("INSERT OR IGNORE INTO ratchets (name) VALUES (?)", (name,))
                written['ratchet'] += 1
            for row in part_rows.get('bit', []):
                shortcut = str(row.get('Shortcut') or '').strip()
                if not shortcut:
                    continue
                cursor.execute("""
                    INSERT INTO bits (shortcut, name) VALUES (?, ?)
                    ON CONFLICT(shortcut) DO UPDATE SET name = excluded.name
                """, (shortcut, row.get('Bit')))
                written['bit'] += 1
            self._commit_with_retry(context="save parts commit")
            return written
        except sqlite3.Error as e:
            self.conn.rollback()
            raise RuntimeError(f"Failed to save reference parts: {e}")

    def get_part_rows(self) -> Dict[str, List[Dict[str, Any]]]:
        """Reference rows in hosted naming, same shape the REST client returns."""
        try:
            cursor = self.conn.cursor()
            cursor.execute("SELECT name, line FROM blades ORDER BY rowid")
            blades = [{'Blades': row['name'], 'Line': row['line']} for row in cursor.fetchall()]
            cursor.execute("SELECT name FROM ratchets ORDER BY rowid")
            ratchets = [{'Ratchet': row['name']} for row in cursor.fetchall()]
            cursor.execute("SELECT shortcut, name FROM bits ORDER BY rowid")
            bits = [{'Bit': row['name'], 'Shortcut': row['shortcut']} for row in cursor.fetchall()]
            return {'blade': blades, 'ratchet': ratchets, 'bit': bits}
        except sqlite3.Error as e:
            raise RuntimeError(f"Failed to get reference parts: {e}")

    # --- Registrations ---

    def replace_registrations(self, tournament_id: str, registrations: Dict[str, Iterable[str]]) -> int:
        """
        Replace a tournament's registrations with ``registrations``.

        Args:
            tournament_id: Owning tournament (must exist)
            registrations: Player name -> registered builds, all confirmed

        Returns:
            Number of players written
        """
        try:
            cursor = self.conn.cursor()
            cursor.execute("DELETE FROM registrations WHERE tournament_id = ?", (str(tournament_id),))
            for player_name, beyblades in registrations.items():
                cursor.execute(
                    "INSERT INTO registrations (tournament_id, player_name, status) VALUES (?, ?, 'confirmed')",
                    (str(tournament_id), player_name),
                )
                cursor.executemany(
                    "INSERT INTO registration_beyblades (registration_id, beyblade_name) VALUES (?, ?)",
                    [(cursor.lastrowid, bey) for bey in beyblades if bey],
                )
            self._commit_with_retry(context="replace registrations commit")
            return len(registrations)
        except sqlite3.Error as e:
            self.conn.rollback()
            raise RuntimeError(f"Failed to save registrations for tournament {tournament_id}: {e}")

    def get_registrations(self, tournament_id: str) -> List[Dict]:
        """Confirmed registrations with embedded builds, same shape the REST client returns."""
        try:
            cursor = self.conn.cursor()
            cursor.execute("""
                SELECT r.registration_id, r.player_name, r.status, rb.beyblade_name
                FROM registrations r
                LEFT JOIN registration_beyblades rb ON rb.registration_id = r.registration_id
                WHERE r.tournament_id = ? AND r.status = 'confirmed'
                ORDER BY r.registration_id, rb.id
            """, (str(tournament_id),))
            registrations: Dict[int, Dict[str, Any]] = {}
            for row in cursor.fetchall():
                entry = registrations.setdefault(row['registration_id'], {
                    'player_name': row['player_name'],
                    'status': row['status'],
                    'tournament_beyblades': [],
                })
                if row['beyblade_name']:
                    entry['tournament_beyblades'].append({'beyblade_name': row['beyblade_name']})
            return list(registrations.values())
        except sqlite3.Error as e:
            raise RuntimeError(f"Failed to get registrations for tournament {tournament_id}: {e}")

    def close(self):
        """Close database connection."""
        if self.conn:
            self.conn.close()

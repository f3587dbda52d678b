"""
beymeta/player_analyzer.py
==========================
Per-player tournament card: record, finish-type points, and a breakdown by
the builds each player brought.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from beymeta.calculator import StatsCalculator
from beymeta.parser import MatchRecord
from beymeta.thresholds import FINISH_TYPES

LOGGER = logging.getLogger(__name__)


@dataclass
class BuildRecord:
    wins: int = 0
    losses: int = 0
    points: int = 0
    finishes: dict[str, int] = field(default_factory=dict)
    loss_finishes: dict[str, int] = field(default_factory=dict)


@dataclass
class PlayerMatch:
    result: str
    bey: str
    finish: str
    opponent: str
    opponent_bey: str


@dataclass
class PlayerStat:
    name: str
    beys: list[str] = field(default_factory=list)
    wins: int = 0
    losses: int = 0
    points: int = 0
    win_finishes: dict[str, int] = field(default_factory=dict)
    loss_finishes: dict[str, int] = field(default_factory=dict)
    bey_stats: dict[str, BuildRecord] = field(default_factory=dict)
    matches: list[PlayerMatch] = field(default_factory=list)

    @property
    def total_matches(self) -> int:
        return self.wins + self.losses


def _bump(counter: dict[str, int], key: str) -> None:
    counter[key] = counter.get(key, 0) + 1


class PlayerAnalyzer:
    """Build player cards from one tournament's match records."""

    def __init__(self, calculator: Optional[StatsCalculator] = None):
        self.calculator = calculator or StatsCalculator()

    def analyze(
        self,
        matches: Iterable[MatchRecord],
        registrations: Optional[Mapping[str, list[str]]] = None,
    ) -> dict[str, PlayerStat]:
        """
        Tally every match into the winner's and loser's cards.

        Args:
            matches: Match records for one tournament
            registrations: Player name -> registered builds. When given, only
                registered players get cards and a match involving anyone
                else is skipped; when None, players are discovered from the
                matches and their builds listed in order of first use.

        Returns:
            Player name -> PlayerStat
        """
        players: dict[str, PlayerStat] = {}
        discover = registrations is None
        if not discover:
            for name, beys in registrations.items():
                players[name] = PlayerStat(name=name, beys=list(beys))

        skipped = 0
        for match in matches:
            winner = match.winner
            if winner == match.player1:
                loser, win_bey, lose_bey = match.player2, match.bey1, match.bey2
            else:
                loser, win_bey, lose_bey = match.player1, match.bey2, match.bey1
            finish = self.calculator.finish_type(match.finish)
            points = self.calculator.finish_points(finish)

            if discover and winner in (match.player1, match.player2):
                for name, bey in ((winner, win_bey), (loser, lose_bey)):
                    if not name:
                        continue
                    stat = players.setdefault(name, PlayerStat(name=name))
                    if bey and bey not in stat.beys:
                        stat.beys.append(bey)

            if winner not in players or loser not in players:
                skipped += 1
                continue

            win_card = players[winner]
            win_card.wins += 1
            win_card.points += points
            _bump(win_card.win_finishes, finish)
            win_card.matches.append(PlayerMatch('win', win_bey, finish, loser, lose_bey))
            win_build = win_card.bey_stats.setdefault(win_bey, BuildRecord())
            win_build.wins += 1
            win_build.points += points
            _bump(win_build.finishes, finish)

            lose_card = players[loser]
            lose_card.losses += 1
            _bump(lose_card.loss_finishes, finish)
            lose_card.matches.append(PlayerMatch('loss', lose_bey, finish, winner, win_bey))
            lose_build = lose_card.bey_stats.setdefault(lose_bey, BuildRecord())
            lose_build.losses += 1
            _bump(lose_build.loss_finishes, finish)

        if skipped:
            LOGGER.info("Skipped %s matches involving unregistered players", skipped)
        return players

    def most_valuable_bey(self, player: PlayerStat) -> str:
        """Listed build with the most points; first listed wins ties, '' when none."""
        best, best_points = '', -1
        for bey in player.beys:
            record = player.bey_stats.get(bey)
            points = record.points if record else 0
            if points > best_points:
                best, best_points = bey, points
        return best

    def summary(self, player: PlayerStat) -> dict[str, Any]:
        """Flat card for display and JSON."""
        mvb = self.most_valuable_bey(player)
        mvb_record = player.bey_stats.get(mvb, BuildRecord())
        total = player.total_matches
        return {
            'name': player.name,
            'wins': player.wins,
            'losses': player.losses,
            'matches': total,
            'win_rate': self.calculator.win_rate(player.wins, player.losses),
            'points': player.points,
            'points_per_match': self.calculator.ratio(player.points, total),
            'most_valuable_bey': mvb,
            'most_valuable_bey_wins': mvb_record.wins,
            'most_valuable_bey_points': mvb_record.points,
            'top_win_finish': self.calculator.top_finish(player.win_finishes),
            'top_loss_finish': self.calculator.top_finish(player.loss_finishes),
            'finish_bias': {finish: player.win_finishes.get(finish, 0) for finish in FINISH_TYPES},
        }

    def finish_breakdown(self, player: PlayerStat) -> dict[str, list[dict[str, Any]]]:
        """
        Per-build finish counts for the player's listed builds.

        Returns:
            {'wins': rows, 'losses': rows}; win rows carry points scored,
            loss rows carry points given up
        """
        win_rows, loss_rows = [], []
        for bey in player.beys:
            record = player.bey_stats.get(bey, BuildRecord())
            win_row = {'bey': bey}
            loss_row = {'bey': bey}
            for finish in FINISH_TYPES:
                win_row[finish] = record.finishes.get(finish, 0)
                loss_row[finish] = record.loss_finishes.get(finish, 0)
            win_row['wins'] = record.wins
            win_row['points'] = self.calculator.points_for(
                {finish: record.finishes.get(finish, 0) for finish in FINISH_TYPES}
            )
            loss_row['losses'] = sum(record.loss_finishes.get(finish, 0) for finish in FINISH_TYPES)
            loss_row['points_given'] = self.calculator.points_for(
                {finish: record.loss_finishes.get(finish, 0) for finish in FINISH_TYPES}
            )
            win_rows.append(win_row)
            loss_rows.append(loss_row)
        return {'wins': win_rows, 'losses': loss_rows}

    def match_rows(self, player: PlayerStat) -> list[dict[str, Any]]:
        return [
            {
                'result': 'Win' if match.result == 'win' else 'Loss',
                'bey': match.bey,
                'finish': match.finish,
                'opponent': match.opponent,
                'opponent_bey': match.opponent_bey,
            }
            for match in player.matches
        ]


def registrations_from_rows(rows: Iterable[Mapping[str, Any]]) -> dict[str, list[str]]:
    """
    Player -> registered builds from hosted registration rows.

    Rows carry ``player_name`` and an embedded ``tournament_beyblades`` list of
    ``{'beyblade_name': ...}``. Only confirmed registrations count when a
    ``status`` column is present.
    """
    registrations: dict[str, list[str]] = {}
    for row in rows or []:
        status = row.get('status')
        if status is not None and status != 'confirmed':
            continue
        name = str(row.get('player_name') or '').strip()
        if not name:
            continue
        beys = [
            str(entry.get('beyblade_name') or '').strip()
            for entry in (row.get('tournament_beyblades') or [])
        ]
        registrations.setdefault(name, []).extend(bey for bey in beys if bey)
    return registrations

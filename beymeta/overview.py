# beymeta/overview.py

from typing import Any, Dict, Iterable, List, Mapping, Optional

from beymeta.calculator import StatsCalculator
from beymeta.parser import MatchRecord
from beymeta.thresholds import TOP_PLAYERS_LIMIT, TOURNAMENT_STATUSES


class LeagueOverview:
    """League-wide counts for the analytics landing page."""

    def __init__(self, calculator: Optional[StatsCalculator] = None):
        self.calculator = calculator or StatsCalculator()

    def tournament_counts(self, tournaments: Iterable[Mapping[str, Any]]) -> Dict[str, int]:
        counts = {status: 0 for status in TOURNAMENT_STATUSES}
        total = 0
        for tournament in tournaments:
            total += 1
            status = tournament.get('status')
            if status in counts:
                counts[status] += 1
        counts['total'] = total
        return counts

    def player_win_rates(self, matches: Iterable[MatchRecord], limit: int = TOP_PLAYERS_LIMIT) -> List[Dict[str, Any]]:
        """
        Top players by rounded win percentage across every given match.

        Ties keep first-seen order.
        """
        records: Dict[str, List[int]] = {}
        for match in matches:
            for player in (match.player1, match.player2):
                if not player:
                    continue
                record = records.setdefault(player, [0, 0])
                record[1] += 1
                if match.winner == player:
                    record[0] += 1

        rates = [
            {
                'player': player,
                'wins': wins,
                'matches': played,
                'win_rate': round(self.calculator.ratio(wins, played) * 100),
            }
            for player, (wins, played) in records.items()
        ]
        rates.sort(key=lambda row: row['win_rate'], reverse=True)
        return rates[:limit] if limit else rates

    def build(self, tournaments: Iterable[Mapping[str, Any]], matches: Iterable[MatchRecord]) -> Dict[str, Any]:
        tournaments = list(tournaments)
        matches = list(matches)
        counts = self.tournament_counts(tournaments)
        return {
            'tournaments': counts,
            'completed_tournaments': [t for t in tournaments if t.get('status') == 'completed'],
            'matches_recorded': len(matches),
            'players': len({p for m in matches for p in (m.player1, m.player2) if p}),
            'top_players': self.player_win_rates(matches),
        }

# beymeta/calculator.py

import math
from typing import Dict, Optional

from beymeta.thresholds import WILSON_Z, FINISH_POINTS


class StatsCalculator:
    """Rate, confidence and point math shared by every analyzer."""

    @staticmethod
    def _safe_div(numerator: float, denominator: float) -> float:
        """Safely divide and return 0.0 on zero denominator."""
        return numerator / denominator if denominator > 0 else 0.0

    def ratio(self, numerator: float, denominator: float) -> float:
        return self._safe_div(numerator, denominator)

    def win_rate(self, wins: int, losses: int) -> float:
        """Fraction of decided games won, 0.0 when nothing was played."""
        return self._safe_div(wins, wins + losses)

    def wilson(self, wins: int, total: int, z: float = WILSON_Z) -> float:
        """
        Lower bound of the Wilson score interval for a binomial proportion.

        Ranks small samples conservatively: one win from one game scores
        well below 45 wins from 50 games.

        Args:
            wins: Number of successes
            total: Number of trials
            z: Normal quantile for the confidence level

        Returns:
            Score in [0, 1]; 0.0 when total is 0
        """
        if total <= 0:
            return 0.0
        phat = wins / total
        z2 = z * z
        denom = 1 + z2 / total
        center = phat + z2 / (2 * total)
        spread = z * math.sqrt((phat * (1 - phat) + z2 / (4 * total)) / total)
        # float noise can push a perfect-score bound a hair past 1
        return min(1.0, max(0.0, (center - spread) / denom))

    @staticmethod
    def finish_type(finish_label: Optional[str]) -> str:
        """Category prefix of an outcome label, e.g. 'Burst Finish (2 pts)' -> 'Burst Finish'."""
        if not finish_label:
            return ''
        return str(finish_label).split(' (')[0].strip()

    @staticmethod
    def finish_points(finish_type: str) -> int:
        return FINISH_POINTS.get(finish_type, 0)

    def points_for(self, finishes: Dict[str, int]) -> int:
        """Total points for a finish-type -> count mapping."""
        return sum(self.finish_points(finish) * count for finish, count in finishes.items())

    @staticmethod
    def top_finish(finishes: Dict[str, int]) -> str:
        """Most frequent finish type; first seen wins ties, '' when empty."""
        top, top_count = '', -1
        for finish, count in finishes.items():
            if count > top_count:
                top, top_count = finish, count
        return top

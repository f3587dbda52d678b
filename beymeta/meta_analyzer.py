# beymeta/meta_analyzer.py

import logging
from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from beymeta.calculator import StatsCalculator
from beymeta.parser import BuildParser, MatchRecord
from beymeta.parts import Part, PartCatalog
from beymeta.thresholds import PART_TYPES, UNKNOWN_FINISH

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class PartStat:
    part_type: str
    name: str
    full_name: str
    line: str
    used: int
    wins: int
    losses: int
    win_rate: float
    wilson: float

    def to_record(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BuildStat:
    build: str
    player: str
    wins: int
    losses: int
    win_rate: float
    wilson: float

    @property
    def used(self) -> int:
        return self.wins + self.losses

    def to_record(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BuildMatch:
    result: str
    opponent: str
    opponent_bey: str
    finish: str

    def to_record(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MetaResult:
    """One aggregation pass. Every part type maps catalog key -> PartStat, used or not."""
    blade: Mapping[str, PartStat]
    ratchet: Mapping[str, PartStat]
    bit: Mapping[str, PartStat]
    matches_analyzed: int
    unparsed_combos: int

    def of_type(self, part_type: str) -> Mapping[str, PartStat]:
        if part_type not in PART_TYPES:
            raise ValueError(f"Unknown part type '{part_type}' (expected one of {', '.join(PART_TYPES)})")
        return getattr(self, part_type)

    def used(self, part_type: str) -> List[PartStat]:
        """Parts with at least one appearance, in catalog order."""
        return [stat for stat in self.of_type(part_type).values() if stat.used > 0]

    def ranked(self, part_type: str) -> List[PartStat]:
        """Used parts, best Wilson score first; ties keep catalog order."""
        return sorted(self.used(part_type), key=lambda stat: stat.wilson, reverse=True)

    def used_keys(self, part_type: str) -> List[str]:
        return [stat.name for stat in self.used(part_type)]


class MetaAnalyzer:
    """Part and build usage statistics for one tournament's matches."""

    def __init__(self, catalog: PartCatalog, calculator: Optional[StatsCalculator] = None):
        self.catalog = catalog
        self.calculator = calculator or StatsCalculator()
        self.parser = BuildParser(catalog.bit_keys)

    def _stat(self, part_type: str, part: Part, tally: List[int]) -> PartStat:
        used, wins, losses = tally
        return PartStat(
            part_type=part_type,
            name=part.name,
            full_name=part.full_name,
            line=part.line,
            used=used,
            wins=wins,
            losses=losses,
            win_rate=self.calculator.win_rate(wins, losses) if used else 0.0,
            wilson=self.calculator.wilson(wins, wins + losses) if used else 0.0,
        )

    def aggregate(self, matches: Iterable[MatchRecord]) -> MetaResult:
        """
        Tally usage, wins and losses for every part on both sides of every match.

        Unparseable combos and keys missing from the catalog are skipped
        without error; reference data and match data drift independently.

        Args:
            matches: Match records for one tournament

        Returns:
            Fresh MetaResult; nothing is shared with previous calls
        """
        tallies: Dict[str, Dict[str, List[int]]] = {
            part_type: {key: [0, 0, 0] for key in self.catalog.of_type(part_type)}
            for part_type in PART_TYPES
        }
        match_count = 0
        unparsed = 0

        for match in matches:
            match_count += 1
            for player, bey, _opponent, _opponent_bey in match.sides():
                build = self.parser.parse(bey)
                if not build.is_known:
                    unparsed += 1
                    continue
                is_win = match.winner == player
                for part_type in PART_TYPES:
                    tally = tallies[part_type].get(build.key_for(part_type))
                    if tally is None:
                        continue
                    tally[0] += 1
                    if is_win:
                        tally[1] += 1
                    else:
                        tally[2] += 1

        if unparsed:
            LOGGER.debug("%s of %s combos did not match a known bit", unparsed, match_count * 2)

        stats = {
            part_type: MappingProxyType({
                key: self._stat(part_type, self.catalog.of_type(part_type)[key], tally)
                for key, tally in tallies[part_type].items()
            })
            for part_type in PART_TYPES
        }
        return MetaResult(
            blade=stats['blade'],
            ratchet=stats['ratchet'],
            bit=stats['bit'],
            matches_analyzed=match_count,
            unparsed_combos=unparsed,
        )

    def builds_for_part(self, matches: Iterable[MatchRecord], part_type: str, part_key: str) -> List[BuildStat]:
        """
        Every (build, player) pair that used ``part_key`` as its ``part_type``.

        Raises:
            ValueError: If part_type is not blade, ratchet or bit
        """
        if part_type not in PART_TYPES:
            raise ValueError(f"Unknown part type '{part_type}' (expected one of {', '.join(PART_TYPES)})")

        tallies: Dict[Tuple[str, str], List[int]] = {}
        for match in matches:
            for player, bey, _opponent, _opponent_bey in match.sides():
                build = self.parser.parse(bey)
                if not build.is_known or build.key_for(part_type) != part_key:
                    continue
                tally = tallies.setdefault((build.build_string, player), [0, 0])
                if match.winner == player:
                    tally[0] += 1
                else:
                    tally[1] += 1

        return [
            BuildStat(
                build=build_string,
                player=player,
                wins=wins,
                losses=losses,
                win_rate=self.calculator.win_rate(wins, losses),
                wilson=self.calculator.wilson(wins, wins + losses),
            )
            for (build_string, player), (wins, losses) in tallies.items()
        ]

    def matches_for_build(self, matches: Iterable[MatchRecord], build: str, player: str) -> List[BuildMatch]:
        """One row per match side where ``player`` fielded ``build``."""
        rows = []
        for match in matches:
            for side_player, bey, opponent, opponent_bey in match.sides():
                if side_player != player:
                    continue
                parsed = self.parser.parse(bey)
                if not parsed.is_known or parsed.build_string != build:
                    continue
                rows.append(BuildMatch(
                    result='Win' if side_player == match.winner else 'Loss',
                    opponent=opponent,
                    opponent_bey=opponent_bey,
                    finish=match.finish or UNKNOWN_FINISH,
                ))
        return rows


def aggregate(matches: Iterable[MatchRecord], catalog: PartCatalog) -> MetaResult:
    return MetaAnalyzer(catalog).aggregate(matches)


def builds_for_part(matches: Iterable[MatchRecord], catalog: PartCatalog, part_type: str, part_key: str) -> List[BuildStat]:
    return MetaAnalyzer(catalog).builds_for_part(matches, part_type, part_key)


def matches_for_build(matches: Iterable[MatchRecord], catalog: PartCatalog, build: str, player: str) -> List[BuildMatch]:
    return MetaAnalyzer(catalog).matches_for_build(matches, build, player)

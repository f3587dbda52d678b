# beymeta/table.py

import csv
import io
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

SORT_DIRECTIONS = ('asc', 'desc')


@dataclass(frozen=True)
class Column:
    key: str
    label: str
    kind: str = 'text'   # text | int | pct | score


PART_COLUMNS = (
    Column('name', 'Name'),
    Column('used', 'Usage', 'int'),
    Column('wins', 'Wins', 'int'),
    Column('losses', 'Losses', 'int'),
    Column('win_rate', 'Win Rate', 'pct'),
    Column('wilson', 'Wilson', 'score'),
)

BUILD_COLUMNS = (
    Column('build', 'Build'),
    Column('player', 'User'),
    Column('wins', 'Win', 'int'),
    Column('losses', 'Loss', 'int'),
    Column('win_rate', 'Win Rate', 'pct'),
    Column('wilson', 'Wilson', 'score'),
)

BUILD_MATCH_COLUMNS = (
    Column('result', 'Result'),
    Column('opponent', 'Opponent'),
    Column('opponent_bey', "Opponent's Bey"),
    Column('finish', 'Finish Type'),
)

PLAYER_MATCH_COLUMNS = (
    Column('result', 'Result'),
    Column('bey', 'Bey'),
    Column('opponent', 'Opponent'),
    Column('opponent_bey', "Opponent's Bey"),
    Column('finish', 'Finish Type'),
)


def _format_cell(value: Any, kind: str) -> str:
    if value is None:
        return 'N/A'
    if kind == 'pct':
        return f'{float(value) * 100:.1f}%'
    if kind == 'score':
        return f'{float(value):.3f}'
    return str(value)


def _sort_key(value: Any):
    # ascending: numbers, then text (case-insensitive), then blanks
    if isinstance(value, bool):
        return (0, int(value), '')
    if isinstance(value, (int, float)):
        return (0, value, '')
    if value is None or value == '':
        return (2, 0, '')
    return (1, 0, str(value).casefold())


class StatTable:
    """
    Row-oriented view over stat records with stable column sorting.

    Sorting never mutates the table it is called on; rows that tie on the
    sort column keep their relative order, so re-sorting is reversible.
    """

    def __init__(
        self,
        columns: Sequence[Column],
        records: Iterable[Dict[str, Any]],
        sort_key: Optional[str] = None,
        direction: str = 'asc',
    ):
        self.columns = tuple(columns)
        self.records = [dict(record) for record in records]
        self.sort_key = sort_key
        self.direction = direction

    @classmethod
    def from_stats(cls, columns: Sequence[Column], stats: Iterable[Any]) -> 'StatTable':
        """Build from objects exposing ``to_record()`` (PartStat, BuildStat, BuildMatch)."""
        return cls(columns, [stat.to_record() for stat in stats])

    def __len__(self) -> int:
        return len(self.records)

    @property
    def headers(self) -> List[str]:
        return [column.label for column in self.columns]

    def column(self, key: str) -> Column:
        for column in self.columns:
            if column.key == key or column.label == key:
                return column
        raise ValueError(f"Unknown column '{key}' (expected one of {', '.join(c.key for c in self.columns)})")

    def sort(self, key: str, direction: str = 'asc') -> 'StatTable':
        """
        Return a new table sorted by one column.

        Raises:
            ValueError: On an unknown column or direction
        """
        if direction not in SORT_DIRECTIONS:
            raise ValueError(f"Sort direction must be 'asc' or 'desc', got '{direction}'")
        column = self.column(key)
        rows = sorted(
            self.records,
            key=lambda record: _sort_key(record.get(column.key)),
            reverse=direction == 'desc',
        )
        return StatTable(self.columns, rows, sort_key=column.key, direction=direction)

    def toggle_sort(self, key: str) -> 'StatTable':
        """Header-click behaviour: the same column flips direction, a new column starts ascending."""
        column = self.column(key)
        if self.sort_key == column.key and self.direction == 'asc':
            return self.sort(column.key, 'desc')
        return self.sort(column.key, 'asc')

    def display_rows(self) -> List[List[str]]:
        return [
            [_format_cell(record.get(column.key), column.kind) for column in self.columns]
            for record in self.records
        ]

    def to_records(self) -> List[Dict[str, Any]]:
        """Flat records with every field, derived ones included, for export."""
        return [dict(record) for record in self.records]

    def to_csv(self) -> str:
        buffer = io.StringIO()
        fieldnames: List[str] = []
        for record in self.records:
            for name in record:
                if name not in fieldnames:
                    fieldnames.append(name)
        if not fieldnames:
            fieldnames = [column.key for column in self.columns]
        writer = csv.DictWriter(buffer, fieldnames=fieldnames, lineterminator='\n')
        writer.writeheader()
        for record in self.records:
            writer.writerow(record)
        return buffer.getvalue()

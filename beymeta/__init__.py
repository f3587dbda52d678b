# beymeta/__init__.py
"""
League meta analytics: combo parsing, part and build statistics, player cards.
"""

from .parser import BuildParser, MatchRecord, ParsedBuild, parse_build
from .parts import Part, PartCatalog
from .meta_analyzer import MetaAnalyzer, MetaResult, aggregate, builds_for_part, matches_for_build

__all__ = [
    'BuildParser',
    'MatchRecord',
    'ParsedBuild',
    'parse_build',
    'Part',
    'PartCatalog',
    'MetaAnalyzer',
    'MetaResult',
    'aggregate',
    'builds_for_part',
    'matches_for_build',
]

# tests/test_parser.py

import logging

import pytest
from beymeta.parser import (
    UNPARSEABLE,
    BuildParser,
    MatchRecord,
    MatchSheetParser,
    ParsedBuild,
    match_from_row,
    matches_from_rows,
    parse_build,
)


class TestBuildParser:
    """Test suite for combo string parsing."""

    @pytest.fixture
    def parser(self):
        """Parser over a bit list where LF and HN share suffixes with F and N."""
        return BuildParser(['F', 'B', 'T', 'LF', 'HN', 'N'])

    def test_parse_basic_combo(self, parser):
        """Test blade, ratchet and bit split for a simple combo."""
        assert parser.parse('Wizard Rod 9-60B') == ParsedBuild('Wizard Rod', '9-60', 'B')

    def test_multi_word_blade(self, parser):
        """Only the last space separates blade from ratchet."""
        build = parser.parse('Dran Sword 3-60F')
        assert build.blade == 'Dran Sword'
        assert build.ratchet == '3-60'
        assert build.bit == 'F'

    def test_longest_suffix_wins(self, parser):
        """LF must beat F when both end the combo."""
        assert parser.parse('Phoenix Wing 5-60LF') == ParsedBuild('Phoenix Wing', '5-60', 'LF')
        assert parser.parse('Hells Scythe 4-60HN').bit == 'HN'

    def test_longest_suffix_regardless_of_catalog_order(self):
        """Shorter keys listed first must not shadow longer ones."""
        parser = BuildParser(['B', 'AB'])
        assert parser.parse('Blade RatchetAB') == ParsedBuild('Blade', 'Ratchet', 'AB')

    def test_equal_length_keys_keep_catalog_order(self):
        parser = BuildParser(['F', 'LF', 'RF'])
        assert parser.bit_keys == ['LF', 'RF', 'F']

    def test_unknown_bit(self, parser):
        assert parser.parse('Dran Sword 3-60Z') == UNPARSEABLE

    def test_no_space_before_ratchet(self, parser):
        """A bit match without a blade/ratchet separator is unparseable."""
        assert parser.parse('DranSword3-60F') == UNPARSEABLE

    def test_empty_and_non_string(self, parser):
        assert parser.parse('') == UNPARSEABLE
        assert parser.parse(None) == UNPARSEABLE
        assert parser.parse(42) == UNPARSEABLE

    def test_empty_bit_keys_are_ignored(self):
        parser = BuildParser(['', 'F'])
        assert parser.bit_keys == ['F']
        assert parser.parse('Dran Sword 3-60F').bit == 'F'

    def test_no_bits_known(self):
        assert BuildParser([]).parse('Dran Sword 3-60F') == UNPARSEABLE

    def test_build_string(self, parser):
        build = parser.parse('Dran Sword 3-60F')
        assert build.is_known
        assert build.build_string == 'Dran Sword 3-60F'
        assert build.key_for('ratchet') == '3-60'

    def test_unparseable_is_not_known(self):
        assert not UNPARSEABLE.is_known

    def test_parse_build_helper(self):
        assert parse_build('Wizard Rod 9-60B', ['B']).blade == 'Wizard Rod'


class TestMatchRows:
    """Test suite for hosted match row conversion."""

    def test_match_from_row(self):
        match = match_from_row({
            'player1_name': ' Alice ',
            'player2_name': 'Bob',
            'player1_beyblade': 'Dran Sword 3-60F',
            'player2_beyblade': 'Wizard Rod 9-60B',
            'winner_name': 'Alice',
            'outcome': 'Burst Finish (2 pts)',
        })
        assert match.player1 == 'Alice'
        assert match.winner == 'Alice'
        assert match.finish == 'Burst Finish (2 pts)'

    def test_missing_outcome_defaults_to_unknown(self):
        match = match_from_row({'player1_name': 'A', 'player2_name': 'B', 'winner_name': 'A'})
        assert match.finish == 'Unknown'
        assert match.bey1 == ''

    def test_matches_from_rows_handles_none(self):
        assert matches_from_rows(None) == []

    def test_sides(self):
        match = MatchRecord('A', 'B', 'x 1-60F', 'y 3-60B', 'A')
        assert list(match.sides()) == [
            ('A', 'x 1-60F', 'B', 'y 3-60B'),
            ('B', 'y 3-60B', 'A', 'x 1-60F'),
        ]


class TestMatchSheetParser:
    """Test suite for the legacy published match sheet."""

    @pytest.fixture
    def sheet(self):
        return (
            "PLAYER 1,PLAYER 2,BEY 1,BEY 2,WINNER,OUTCOME\n"
            "Alice,Bob,Dran Sword 3-60F,Wizard Rod 9-60B,Alice,Burst Finish (2 pts)\n"
            "Bob,Cara,Wizard Rod 9-60B,Hells Scythe 4-60T,Cara,\n"
        )

    def test_parse_sheet(self, sheet):
        matches = MatchSheetParser().parse(sheet)
        assert len(matches) == 2
        assert matches[0] == MatchRecord(
            'Alice', 'Bob', 'Dran Sword 3-60F', 'Wizard Rod 9-60B', 'Alice', 'Burst Finish (2 pts)'
        )
        assert matches[1].finish == 'Unknown'

    def test_column_order_does_not_matter(self):
        text = "WINNER,BEY 2,BEY 1,PLAYER 2,PLAYER 1\nBob,b 3-60F,a 3-60B,Bob,Alice\n"
        match = MatchSheetParser().parse(text)[0]
        assert match.player1 == 'Alice'
        assert match.bey2 == 'b 3-60F'
        assert match.winner == 'Bob'

    def test_missing_required_column(self):
        with pytest.raises(ValueError, match="WINNER"):
            MatchSheetParser().parse("PLAYER 1,PLAYER 2,BEY 1,BEY 2\nA,B,x,y\n")

    def test_empty_sheet(self):
        assert MatchSheetParser().parse('') == []

    def test_short_row_is_padded(self, sheet, caplog):
        with caplog.at_level(logging.WARNING, logger="beymeta.parser"):
            matches = MatchSheetParser().parse(sheet + "Cara,Alice,Hells Scythe 4-60T\n")
        assert "line 4 has 3 cells" in caplog.text
        assert matches[-1].bey2 == ''
        assert matches[-1].winner == ''

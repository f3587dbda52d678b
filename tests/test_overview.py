# tests/test_overview.py

import pytest
from beymeta.overview import LeagueOverview
from tests.helpers import sample_matches


class TestLeagueOverview:
    """Test suite for league-wide counts."""

    @pytest.fixture
    def overview(self):
        return LeagueOverview()

    @pytest.fixture
    def tournaments(self):
        return [
            {'id': 't1', 'name': 'Spring Cup', 'status': 'completed'},
            {'id': 't2', 'name': 'Summer Cup', 'status': 'active'},
            {'id': 't3', 'name': 'Fall Cup', 'status': 'upcoming'},
            {'id': 't4', 'name': 'Winter Cup', 'status': 'completed'},
            {'id': 't5', 'name': 'Odd Cup', 'status': 'cancelled'},
        ]

    def test_tournament_counts(self, overview, tournaments):
        assert overview.tournament_counts(tournaments) == {
            'upcoming': 1, 'active': 1, 'completed': 2, 'total': 5,
        }

    def test_player_win_rates(self, overview):
        rates = overview.player_win_rates(sample_matches())
        assert [(r['player'], r['win_rate']) for r in rates] == [
            ('Alice', 67), ('Cara', 50), ('Bob', 33),
        ]
        assert rates[0]['wins'] == 2
        assert rates[0]['matches'] == 3

    def test_player_win_rates_limit(self, overview):
        assert len(overview.player_win_rates(sample_matches(), limit=2)) == 2

    def test_build(self, overview, tournaments):
        data = overview.build(tournaments, sample_matches())
        assert data['matches_recorded'] == 4
        assert data['players'] == 3
        assert [t['id'] for t in data['completed_tournaments']] == ['t1', 't4']
        assert data['tournaments']['total'] == 5
        assert len(data['top_players']) == 3

    def test_build_empty(self, overview):
        data = overview.build([], [])
        assert data['matches_recorded'] == 0
        assert data['top_players'] == []

"""
Unit tests for standings bookkeeping and ranking.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from tournament_core.standings import apply_result_to_standings, rank_teams


class TestApplyResult:

    def test_winner_gets_three_points(self, make_teams):
        teams = {t.id: t for t in make_teams(2)}
        updates = apply_result_to_standings(teams, 'team-1', 'team-2')

        assert updates['team-1'].wins == 1
        assert updates['team-1'].points == 3
        assert updates['team-2'].losses == 1
        assert updates['team-2'].points == 0

    def test_returns_copies(self, make_teams):
        teams = {t.id: t for t in make_teams(2)}
        updates = apply_result_to_standings(teams, 'team-1', 'team-2')

        assert updates['team-1'] is not teams['team-1']
        assert teams['team-1'].wins == 0

    def test_no_loser(self, make_teams):
        teams = {t.id: t for t in make_teams(2)}
        updates = apply_result_to_standings(teams, 'team-1')
        assert list(updates) == ['team-1']

    def test_unknown_team_skipped(self, make_teams):
        teams = {t.id: t for t in make_teams(1)}
        assert apply_result_to_standings(teams, 'missing', 'also-missing') == {}

    def test_null_counters_treated_as_zero(self, make_teams):
        team = make_teams(1)[0]
        team.wins = None
        team.points = None
        updates = apply_result_to_standings({team.id: team}, team.id)
        assert updates[team.id].wins == 1
        assert updates[team.id].points == 3


class TestRankTeams:

    def test_points_then_wins_then_losses(self, make_teams):
        teams = make_teams(4)
        teams[0].points, teams[0].wins, teams[0].losses = 3, 1, 2
        teams[1].points, teams[1].wins, teams[1].losses = 6, 2, 0
        teams[2].points, teams[2].wins, teams[2].losses = 3, 1, 0
        teams[3].points, teams[3].wins, teams[3].losses = 3, 1, 1

        table = rank_teams(teams)

        assert [row['team'].id for row in table] == ['team-2', 'team-3', 'team-4', 'team-1']
        assert [row['rank'] for row in table] == [1, 2, 3, 4]

    def test_empty(self):
        assert rank_teams([]) == []

"""
Unit tests for the data models (Team, Match, Tournament).
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from tournament_core.models import (
    Team, Match, Tournament, new_id,
    MATCH_PENDING, MATCH_COMPLETED, DEFAULT_SWISS_ROUNDS, SWISS,
)


class TestTeam:
    """Tests for the Team model."""

    def test_team_defaults(self):
        """A new team starts with empty standings."""
        team = Team(id="a", tournament_id="t1", name="Alpha")
        assert team.wins == 0
        assert team.losses == 0
        assert team.points == 0
        assert team.is_removed is False

    def test_team_from_dict_fills_missing_counters(self):
        """Null counters from storage become zero."""
        team = Team.from_dict({'id': 'a', 'tournamentId': 't1', 'name': 'Alpha',
                               'wins': None, 'points': 6})
        assert team.wins == 0
        assert team.losses == 0
        assert team.points == 6

    def test_team_to_dict_uses_camel_case(self):
        team = Team(id="a", tournament_id="t1", name="Alpha", wins=2, points=6)
        data = team.to_dict()
        assert data['tournamentId'] == "t1"
        assert data['isRemoved'] is False
        assert data['points'] == 6

    def test_team_repr(self):
        """Test team string representation."""
        repr_str = repr(Team(id="a", tournament_id="t1", name="Alpha"))
        assert "Alpha" in repr_str


class TestMatch:
    """Tests for the Match model."""

    def test_match_defaults(self):
        match = Match(id="m1", tournament_id="t1", round=1)
        assert match.status == MATCH_PENDING
        assert match.team1_id is None
        assert match.team2_id is None
        assert match.winner_id is None
        assert match.is_bye is False
        assert not match.is_completed

    def test_participants_skip_empty_slots(self):
        match = Match(id="m1", tournament_id="t1", round=1, team1_id="a")
        assert match.participants() == ["a"]

    def test_from_dict_reads_stored_record(self):
        match = Match.from_dict({
            'id': 'm1', 'tournamentId': 't1', 'round': 2,
            'team1Id': 'a', 'team2Id': 'b', 'winnerId': 'a',
            'team1Score': 3, 'team2Score': 1, 'status': 'completed', 'isBye': 0,
        })
        assert match.round == 2
        assert match.is_completed
        assert match.status == MATCH_COMPLETED
        assert match.is_bye is False
        assert match.to_dict()['team1Score'] == 3


class TestTournament:
    """Tests for the Tournament model."""

    def test_swiss_rounds_default(self):
        """Unset swiss_rounds falls back to the default target."""
        tournament = Tournament(id="t1", name="Open", format=SWISS)
        assert tournament.current_round == 1
        assert tournament.target_swiss_rounds == DEFAULT_SWISS_ROUNDS

    def test_swiss_rounds_explicit(self):
        tournament = Tournament(id="t1", name="Open", format=SWISS, swiss_rounds=3)
        assert tournament.target_swiss_rounds == 3

    def test_from_dict_defaults(self):
        tournament = Tournament.from_dict({'id': 't1', 'name': 'Open', 'format': SWISS,
                                           'currentRound': None})
        assert tournament.status == 'upcoming'
        assert tournament.current_round == 1
        assert tournament.swiss_rounds is None


def test_new_id_is_unique():
    assert new_id() != new_id()

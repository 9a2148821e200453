"""
Applying a completed match to standings and to the bracket.

The resolver never mutates its arguments. It returns a MatchResolution that
lists every change the caller has to persist, and the caller is expected to
write all of them in a single transaction.
"""
import copy
from typing import List, Dict, Optional

from .models import (
    Match, Team, Tournament,
    MATCH_COMPLETED, SINGLE_ELIMINATION, ROUND_ROBIN, SWISS, TOURNAMENT_COMPLETED,
)
from .brackets import generate_swiss_system_round
from .standings import apply_result_to_standings, rank_teams


class BracketError(ValueError):
    """Base class for results that cannot be applied to a tournament."""


class MatchAlreadyCompletedError(BracketError):
    pass


class InvalidWinnerError(BracketError):
    pass


class BracketStateError(BracketError):
    """The stored bracket does not have the shape the format requires."""


class MatchResolution:
    def __init__(self, match: Match):
        self.match = match
        self.team_updates: Dict[str, Team] = {}
        self.match_updates: List[Match] = []
        self.new_matches: List[Match] = []
        self.current_round: Optional[int] = None
        self.tournament_status: Optional[str] = None
        self.champion_id: Optional[str] = None

    def __repr__(self):
        return (f"MatchResolution(match={self.match.id}, teams={list(self.team_updates)}, "
                f"updated_matches={len(self.match_updates)}, new_matches={len(self.new_matches)}, "
                f"current_round={self.current_round}, status={self.tournament_status})")


def _group_by_round(matches: List[Match]) -> Dict[int, List[Match]]:
    """Group matches by round number, keeping their stored order inside each round."""
    rounds = {}
    for match in matches:
        rounds.setdefault(match.round, []).append(match)
    return rounds


def _advance_winner(rounds: Dict[int, List[Match]], match: Match, winner_id: str,
                    changed: Dict[str, Match]) -> Optional[str]:
    """
    Write ``winner_id`` into the next round slot fed by ``match``.

    ``rounds`` holds working copies that are modified in place; every copy
    that changes is recorded in ``changed``. A next-round match with a single
    feeder is completed as a bye and the winner keeps moving up.

    Returns the winner when ``match`` was the final, otherwise None.
    """
    round_matches = rounds.get(match.round, [])
    match_index = next((i for i, m in enumerate(round_matches) if m.id == match.id), -1)
    if match_index == -1:
        raise BracketStateError(f"Match {match.id} is not part of round {match.round}")

    next_round = rounds.get(match.round + 1)
    if not next_round:
        return winner_id

    next_index = match_index // 2
    if next_index >= len(next_round):
        raise BracketStateError(
            f"Round {match.round + 1} has no match at position {next_index + 1} "
            f"to receive the winner of match {match.id}")

    next_match = next_round[next_index]
    if next_match.is_completed:
        raise BracketStateError(f"Match {next_match.id} is already completed")
    slot = 'team1_id' if match_index % 2 == 0 else 'team2_id'
    occupant = getattr(next_match, slot)
    if occupant and occupant != winner_id:
        raise BracketStateError(
            f"Slot {slot} of match {next_match.id} already holds team {occupant}")
    setattr(next_match, slot, winner_id)
    changed[next_match.id] = next_match

    has_sibling_feeder = match_index % 2 == 1 or match_index + 1 < len(round_matches)
    if not has_sibling_feeder:
        next_match.is_bye = True
        next_match.winner_id = winner_id
        next_match.status = MATCH_COMPLETED
        return _advance_winner(rounds, next_match, winner_id, changed)

    return None


def _working_rounds(matches: List[Match]) -> Dict[int, List[Match]]:
    return _group_by_round([copy.copy(m) for m in matches])


def propagate_byes(matches: List[Match]) -> List[Match]:
    """
    Move the winners of pre-decided bye matches into their next-round slots.

    Used right after a single elimination bracket is generated. Returns the
    full match list with updated copies in place of the changed matches.
    """
    rounds = _working_rounds(matches)
    changed = {}
    for match in rounds.get(1, []):
        if match.is_bye and match.winner_id:
            _advance_winner(rounds, match, match.winner_id, changed)
    return [changed.get(m.id, m) for m in matches]


def _resolve_single_elimination(resolution: MatchResolution, matches_after: List[Match]):
    rounds = _working_rounds(matches_after)
    changed = {}
    champion_id = _advance_winner(rounds, resolution.match, resolution.match.winner_id, changed)
    resolution.match_updates = list(changed.values())
    if champion_id:
        resolution.champion_id = champion_id
        resolution.tournament_status = TOURNAMENT_COMPLETED


def _leader(teams: List[Team]) -> Optional[str]:
    table = rank_teams([team for team in teams if not team.is_removed])
    return table[0]['team'].id if table else None


def _resolve_swiss(resolution: MatchResolution, tournament: Tournament,
                   matches_after: List[Match], teams_after: List[Team]):
    current_round = tournament.current_round or 1
    round_matches = [m for m in matches_after if m.round == current_round]
    if not round_matches or not all(m.is_completed for m in round_matches):
        return

    if current_round < tournament.target_swiss_rounds:
        next_round = current_round + 1
        resolution.new_matches = generate_swiss_system_round(
            tournament.id, teams_after, next_round, matches_after)['matches']
        resolution.current_round = next_round
    else:
        resolution.tournament_status = TOURNAMENT_COMPLETED
        resolution.champion_id = _leader(teams_after)


def _resolve_round_robin(resolution: MatchResolution, matches_after: List[Match],
                         teams_after: List[Team]):
    if all(m.is_completed for m in matches_after):
        resolution.tournament_status = TOURNAMENT_COMPLETED
        resolution.champion_id = _leader(teams_after)


def resolve_match_completion(match: Match, tournament: Tournament, all_matches: List[Match],
                             all_teams: List[Team]) -> MatchResolution:
    """
    Compute everything that follows from ``match`` being completed.

    Args:
        match: The match carrying the new result (winner_id and scores).
        tournament: The owning tournament (format, current_round, swiss_rounds).
        all_matches: Every match of the tournament as stored before this result.
        all_teams: Every team of the tournament with its current standings.

    Returns:
        MatchResolution with the completed match, updated teams, next-round
        slots filled (single elimination), the next round's matches (Swiss),
        the advanced current round and the tournament status when finished.

    Raises:
        BracketStateError: the match is not one of ``all_matches``, is still
            waiting for a team, or the bracket has no open slot for the winner.
        MatchAlreadyCompletedError: the stored match is already completed.
        InvalidWinnerError: the winner is not one of the match's teams.
    """
    stored = next((m for m in all_matches if m.id == match.id), None)
    if stored is None:
        raise BracketStateError(f"Match {match.id} does not belong to tournament {tournament.id}")
    if stored.is_completed:
        raise MatchAlreadyCompletedError(f"Match {match.id} is already completed")

    participants = stored.participants()
    if len(participants) < 2:
        raise BracketStateError(f"Match {match.id} is still waiting for a team")
    if not match.winner_id or match.winner_id not in participants:
        raise InvalidWinnerError("Winner must be one of the match participants")

    completed = copy.copy(stored)
    completed.winner_id = match.winner_id
    completed.team1_score = match.team1_score
    completed.team2_score = match.team2_score
    completed.status = MATCH_COMPLETED

    resolution = MatchResolution(completed)
    loser_id = next((team_id for team_id in participants if team_id != match.winner_id), None)
    resolution.team_updates = apply_result_to_standings(
        {team.id: team for team in all_teams}, match.winner_id, loser_id)

    matches_after = [completed if m.id == completed.id else m for m in all_matches]
    teams_after = [resolution.team_updates.get(team.id, team) for team in all_teams]

    if tournament.format == SINGLE_ELIMINATION:
        _resolve_single_elimination(resolution, matches_after)
    elif tournament.format == SWISS:
        _resolve_swiss(resolution, tournament, matches_after, teams_after)
    elif tournament.format == ROUND_ROBIN:
        _resolve_round_robin(resolution, matches_after, teams_after)

    return resolution

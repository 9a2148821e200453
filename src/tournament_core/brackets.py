"""
Fixture generation for single elimination, round robin and Swiss tournaments.

All generators are pure: they take the tournament id and an ordered list of
teams and return ``{'matches': [...]}`` without touching storage.
"""
import math
from itertools import combinations
from typing import List, Dict, Optional

from .models import Match, Team, MATCH_COMPLETED, new_id


def calculate_total_rounds(num_teams: int) -> int:
    """Number of rounds needed to reduce ``num_teams`` to a single winner."""
    if num_teams < 2:
        return 0
    return math.ceil(math.log2(num_teams))


def matches_per_round(num_teams: int) -> List[int]:
    """
    Match count of every single elimination round.

    Round 1 has ceil(n/2) matches (byes included) and each later round
    halves the previous one, rounding up, until the final.
    """
    counts = []
    remaining = num_teams
    for _ in range(calculate_total_rounds(num_teams)):
        remaining = math.ceil(remaining / 2)
        counts.append(remaining)
    return counts


def get_round_name(round_number: int, total_rounds: int) -> str:
    """Display name of a single elimination round."""
    teams_in_round = 2 ** (total_rounds - round_number + 1)
    if teams_in_round == 2:
        return "Final"
    elif teams_in_round == 4:
        return "Semifinal"
    elif teams_in_round == 8:
        return "Quarterfinal"
    else:
        return f"Round of {teams_in_round}"


def _bye_match(tournament_id: str, round_number: int, team: Team) -> Match:
    # A bye is decided the moment it is created.
    return Match(
        id=new_id(),
        tournament_id=tournament_id,
        round=round_number,
        team1_id=team.id,
        team2_id=None,
        winner_id=team.id,
        status=MATCH_COMPLETED,
        is_bye=True,
    )


def _pair_sequentially(tournament_id: str, teams: List[Team], round_number: int) -> List[Match]:
    """Pair teams[0] v teams[1], teams[2] v teams[3], ...; a trailing odd team gets a bye."""
    matches = []
    for i in range(0, len(teams), 2):
        if i + 1 < len(teams):
            matches.append(Match(
                id=new_id(),
                tournament_id=tournament_id,
                round=round_number,
                team1_id=teams[i].id,
                team2_id=teams[i + 1].id,
            ))
        else:
            matches.append(_bye_match(tournament_id, round_number, teams[i]))
    return matches


def generate_single_elimination_bracket(tournament_id: str, teams: List[Team]) -> Dict[str, List[Match]]:
    """
    Generate the full single elimination bracket.

    Round 1 pairs the teams in the order given. Later rounds are created with
    empty slots; the feeder at index ``i`` of a round fills match ``i // 2``
    of the next round (team1 for even ``i``, team2 for odd ``i``).

    Fewer than two teams produce no matches.
    """
    counts = matches_per_round(len(teams))
    if not counts:
        return {'matches': []}

    matches = _pair_sequentially(tournament_id, teams, 1)
    for round_number, num_matches in enumerate(counts[1:], start=2):
        for _ in range(num_matches):
            matches.append(Match(id=new_id(), tournament_id=tournament_id, round=round_number))

    return {'matches': matches}


def generate_round_robin_bracket(tournament_id: str, teams: List[Team]) -> Dict[str, List[Match]]:
    """One match for every unordered pair of teams, all in round 1."""
    matches = []
    for team1, team2 in combinations(teams, 2):
        matches.append(Match(
            id=new_id(),
            tournament_id=tournament_id,
            round=1,
            team1_id=team1.id,
            team2_id=team2.id,
        ))
    return {'matches': matches}


def sort_swiss_standings(teams: List[Team]) -> List[Team]:
    """Order teams by points, highest first; equal points keep their input order."""
    return sorted(teams, key=lambda team: -(team.points or 0))


def generate_swiss_system_round(tournament_id: str, teams: List[Team], round_number: int,
                                previous_matches: Optional[List[Match]] = None) -> Dict[str, List[Match]]:
    """
    Generate the pairings of one Swiss round.

    Round 1 pairs teams in input order. Later rounds pair down the standings
    (rank 1 v rank 2, rank 3 v rank 4, ...) using the points already recorded
    on the teams. An odd team count gives the last team a bye. Removed teams
    are not paired.

    ``previous_matches`` is accepted for callers that have the history at
    hand; pairing relies on the standings carried by ``teams`` and repeat
    pairings are not avoided.
    """
    active_teams = [team for team in teams if not team.is_removed]
    if round_number > 1:
        active_teams = sort_swiss_standings(active_teams)

    return {'matches': _pair_sequentially(tournament_id, active_teams, round_number)}

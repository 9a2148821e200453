"""
Standings bookkeeping shared by the match resolver and the standings table.
"""
import copy
from typing import List, Dict, Optional

from .models import Team, POINTS_PER_WIN


def apply_result_to_standings(teams: Dict[str, Team], winner_id: str,
                              loser_id: Optional[str] = None) -> Dict[str, Team]:
    """
    Return updated copies of the winner and loser for one decided match.

    The winner gets a win and POINTS_PER_WIN points, the loser a loss.
    Team ids missing from ``teams`` are skipped.
    """
    updates = {}

    winner = teams.get(winner_id)
    if winner is not None:
        winner = copy.copy(winner)
        winner.wins = (winner.wins or 0) + 1
        winner.points = (winner.points or 0) + POINTS_PER_WIN
        updates[winner.id] = winner

    if loser_id:
        loser = teams.get(loser_id)
        if loser is not None:
            loser = copy.copy(loser)
            loser.losses = (loser.losses or 0) + 1
            updates[loser.id] = loser

    return updates


def rank_teams(teams: List[Team]) -> List[Dict]:
    """
    Build the standings table: points desc, then wins desc, then losses asc.

    Returns a list of ``{'rank': n, 'team': Team}`` dicts, rank starting at 1.
    """
    ordered = sorted(
        teams,
        key=lambda t: (-(t.points or 0), -(t.wins or 0), t.losses or 0)
    )
    return [{'rank': index + 1, 'team': team} for index, team in enumerate(ordered)]

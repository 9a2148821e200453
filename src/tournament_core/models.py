import os
import uuid

MATCH_PENDING = 'pending'
MATCH_IN_PROGRESS = 'in_progress'
MATCH_COMPLETED = 'completed'
MATCH_STATUSES = (MATCH_PENDING, MATCH_IN_PROGRESS, MATCH_COMPLETED)

SINGLE_ELIMINATION = 'single_elimination'
ROUND_ROBIN = 'round_robin'
SWISS = 'swiss'
TOURNAMENT_FORMATS = (SINGLE_ELIMINATION, ROUND_ROBIN, SWISS)

TOURNAMENT_UPCOMING = 'upcoming'
TOURNAMENT_IN_PROGRESS = 'in_progress'
TOURNAMENT_COMPLETED = 'completed'
TOURNAMENT_STATUSES = (TOURNAMENT_UPCOMING, TOURNAMENT_IN_PROGRESS, TOURNAMENT_COMPLETED)

DEFAULT_SWISS_ROUNDS = int(os.environ.get('DEFAULT_SWISS_ROUNDS', 5))
POINTS_PER_WIN = 3


def new_id():
    return str(uuid.uuid4())


class Team:
    def __init__(self, id, tournament_id, name, wins=0, losses=0, points=0, is_removed=False):
        self.id = id
        self.tournament_id = tournament_id
        self.name = name
        self.wins = wins
        self.losses = losses
        self.points = points
        self.is_removed = is_removed

    def to_dict(self):
        return {
            'id': self.id,
            'tournamentId': self.tournament_id,
            'name': self.name,
            'wins': self.wins,
            'losses': self.losses,
            'points': self.points,
            'isRemoved': self.is_removed,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            tournament_id=data['tournamentId'],
            name=data['name'],
            wins=data.get('wins') or 0,
            losses=data.get('losses') or 0,
            points=data.get('points') or 0,
            is_removed=bool(data.get('isRemoved', False)),
        )

    def __repr__(self):
        return f"Team(name={self.name}, wins={self.wins}, losses={self.losses}, points={self.points})"


class Match:
    def __init__(self, id, tournament_id, round, team1_id=None, team2_id=None, winner_id=None,
                 team1_score=None, team2_score=None, status=MATCH_PENDING, is_bye=False):
        self.id = id
        self.tournament_id = tournament_id
        self.round = round
        self.team1_id = team1_id
        self.team2_id = team2_id
        self.winner_id = winner_id
        self.team1_score = team1_score
        self.team2_score = team2_score
        self.status = status
        self.is_bye = is_bye

    @property
    def is_completed(self):
        return self.status == MATCH_COMPLETED

    def participants(self):
        """Team ids actually present in the match (a bye has only one)."""
        return [team_id for team_id in (self.team1_id, self.team2_id) if team_id]

    def to_dict(self):
        return {
            'id': self.id,
            'tournamentId': self.tournament_id,
            'round': self.round,
            'team1Id': self.team1_id,
            'team2Id': self.team2_id,
            'winnerId': self.winner_id,
            'team1Score': self.team1_score,
            'team2Score': self.team2_score,
            'status': self.status,
            'isBye': self.is_bye,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            tournament_id=data['tournamentId'],
            round=data['round'],
            team1_id=data.get('team1Id'),
            team2_id=data.get('team2Id'),
            winner_id=data.get('winnerId'),
            team1_score=data.get('team1Score'),
            team2_score=data.get('team2Score'),
            status=data.get('status') or MATCH_PENDING,
            is_bye=bool(data.get('isBye', False)),
        )

    def __repr__(self):
        return (f"Match(round={self.round}, team1={self.team1_id}, team2={self.team2_id}, "
                f"winner={self.winner_id}, status={self.status})")


class Tournament:
    def __init__(self, id, name, format, status=TOURNAMENT_UPCOMING, total_teams=0,
                 current_round=1, swiss_rounds=None, created_at=None):
        self.id = id
        self.name = name
        self.format = format
        self.status = status
        self.total_teams = total_teams
        self.current_round = current_round
        self.swiss_rounds = swiss_rounds  # None means DEFAULT_SWISS_ROUNDS
        self.created_at = created_at

    @property
    def target_swiss_rounds(self):
        return self.swiss_rounds or DEFAULT_SWISS_ROUNDS

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'format': self.format,
            'status': self.status,
            'totalTeams': self.total_teams,
            'currentRound': self.current_round,
            'swissRounds': self.swiss_rounds,
            'createdAt': self.created_at,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            name=data['name'],
            format=data['format'],
            status=data.get('status') or TOURNAMENT_UPCOMING,
            total_teams=data.get('totalTeams') or 0,
            current_round=data.get('currentRound') or 1,
            swiss_rounds=data.get('swissRounds'),
            created_at=data.get('createdAt'),
        )

    def __repr__(self):
        return f"Tournament(name={self.name}, format={self.format}, status={self.status})"

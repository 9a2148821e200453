"""
Flask web application exposing tournaments, teams and matches as a JSON API.
"""
import os
import copy
import yaml
from datetime import datetime
from filelock import FileLock
from flask import Flask, request, jsonify
from tournament_core.models import (
    Team, Match, Tournament, new_id,
    TOURNAMENT_FORMATS, TOURNAMENT_STATUSES, TOURNAMENT_IN_PROGRESS,
    SINGLE_ELIMINATION, ROUND_ROBIN, SWISS, MATCH_IN_PROGRESS,
)
from tournament_core.brackets import (
    generate_single_elimination_bracket, generate_round_robin_bracket, generate_swiss_system_round,
)
from tournament_core.progression import (
    resolve_match_completion, propagate_byes,
    InvalidWinnerError, MatchAlreadyCompletedError, BracketStateError,
)
from tournament_core.standings import rank_teams
import tournament_core.models as models

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('TOURNAMENT_DATA_DIR', os.path.join(BASE_DIR, 'data'))
LOCK_TIMEOUT_SECONDS = 10

TOURNAMENTS_FILENAME = 'tournaments.yaml'
TEAMS_FILENAME = 'teams.yaml'
MATCHES_FILENAME = 'matches.yaml'


def _data_file(filename: str) -> str:
    return os.path.join(DATA_DIR, filename)


def _data_lock() -> FileLock:
    """Lock guarding every read-modify-write of the data files."""
    os.makedirs(DATA_DIR, exist_ok=True)
    return FileLock(_data_file('.lock'), timeout=LOCK_TIMEOUT_SECONDS)


def _load_records(filename: str, key: str) -> list:
    path = _data_file(filename)
    if not os.path.exists(path):
        return []
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        app.logger.warning(f'Failed to parse {path}: {e}')
        return []
    if not data:
        return []
    records = (data.get(key) or []) if isinstance(data, dict) else None
    if not isinstance(records, list):
        app.logger.warning(f'Ignoring {path}: expected a "{key}" list')
        return []
    return records


def _save_records(filename: str, key: str, records: list):
    os.makedirs(DATA_DIR, exist_ok=True)
    with open(_data_file(filename), 'w', encoding='utf-8') as f:
        yaml.dump({key: records}, f, default_flow_style=False, sort_keys=False)


def load_tournaments() -> list:
    """Load all tournaments from YAML."""
    return [Tournament.from_dict(d) for d in _load_records(TOURNAMENTS_FILENAME, 'tournaments')]


def save_tournaments(tournaments: list):
    _save_records(TOURNAMENTS_FILENAME, 'tournaments', [t.to_dict() for t in tournaments])


def load_teams() -> list:
    """Load all teams from YAML."""
    return [Team.from_dict(d) for d in _load_records(TEAMS_FILENAME, 'teams')]


def save_teams(teams: list):
    _save_records(TEAMS_FILENAME, 'teams', [t.to_dict() for t in teams])


def load_matches() -> list:
    """Load all matches from YAML, in creation order."""
    return [Match.from_dict(d) for d in _load_records(MATCHES_FILENAME, 'matches')]


def save_matches(matches: list):
    _save_records(MATCHES_FILENAME, 'matches', [m.to_dict() for m in matches])


def _find(records: list, record_id: str):
    return next((r for r in records if r.id == record_id), None)


def _replace(records: list, updates: list) -> list:
    by_id = {r.id: r for r in updates}
    return [by_id.get(r.id, r) for r in records]


def _error(message: str, status: int):
    return jsonify({'error': message}), status


def _parse_positive_int(value):
    """Return value as an int >= 1, or None if it is not one."""
    if isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number >= 1 else None


def _parse_score(value):
    """Return a non-negative int score, None when absent; raise ValueError otherwise."""
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise ValueError(value)
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(value)
    score = int(value)
    if score < 0:
        raise ValueError(value)
    return score


def generate_initial_matches(tournament: Tournament, teams: list) -> list:
    """Generate the opening fixture for the tournament's format."""
    if tournament.format == ROUND_ROBIN:
        return generate_round_robin_bracket(tournament.id, teams)['matches']
    if tournament.format == SINGLE_ELIMINATION:
        matches = generate_single_elimination_bracket(tournament.id, teams)['matches']
        return propagate_byes(matches)
    if tournament.format == SWISS:
        return generate_swiss_system_round(tournament.id, teams, 1, [])['matches']
    return []


# ---------------------------------------------------------------------------
# Tournaments
# ---------------------------------------------------------------------------

@app.route('/api/tournaments', methods=['GET'])
def api_list_tournaments():
    return jsonify([t.to_dict() for t in load_tournaments()])


@app.route('/api/tournaments/<tournament_id>', methods=['GET'])
def api_get_tournament(tournament_id):
    tournament = _find(load_tournaments(), tournament_id)
    if not tournament:
        return _error('Tournament not found', 404)
    return jsonify(tournament.to_dict())


@app.route('/api/tournaments', methods=['POST'])
def api_create_tournament():
    """Create a tournament, its teams and the opening matches."""
    data = request.get_json(silent=True) or {}

    name = str(data.get('name') or '').strip()
    if not name:
        return _error('Tournament name is required', 400)

    tournament_format = data.get('format')
    if tournament_format not in TOURNAMENT_FORMATS:
        return _error(f'Format must be one of: {", ".join(TOURNAMENT_FORMATS)}', 400)

    swiss_rounds = None
    if data.get('swissRounds') is not None:
        swiss_rounds = _parse_positive_int(data['swissRounds'])
        if swiss_rounds is None:
            return _error('swissRounds must be a positive integer', 400)
    elif tournament_format == SWISS:
        swiss_rounds = models.DEFAULT_SWISS_ROUNDS

    team_names = data.get('teamNames') or []
    if not isinstance(team_names, list):
        return _error('teamNames must be a list', 400)
    team_names = [str(n).strip() for n in team_names if str(n).strip()]
    if len(team_names) == 1:
        return _error('At least 2 teams are required', 400)

    tournament = Tournament(
        id=new_id(),
        name=name,
        format=tournament_format,
        total_teams=_parse_positive_int(data.get('totalTeams')) or len(team_names),
        swiss_rounds=swiss_rounds,
        created_at=datetime.now().isoformat(),
    )
    teams = [Team(id=new_id(), tournament_id=tournament.id, name=n) for n in team_names]
    matches = []
    if teams:
        matches = generate_initial_matches(tournament, teams)
        tournament.status = TOURNAMENT_IN_PROGRESS

    with _data_lock():
        save_tournaments(load_tournaments() + [tournament])
        save_teams(load_teams() + teams)
        save_matches(load_matches() + matches)

    app.logger.info(f'Created {tournament_format} tournament "{name}" with {len(teams)} teams '
                    f'and {len(matches)} matches')
    return jsonify(tournament.to_dict()), 201


@app.route('/api/tournaments/<tournament_id>', methods=['PATCH'])
def api_update_tournament(tournament_id):
    data = request.get_json(silent=True) or {}
    with _data_lock():
        tournaments = load_tournaments()
        tournament = _find(tournaments, tournament_id)
        if not tournament:
            return _error('Tournament not found', 404)

        if 'name' in data:
            name = str(data['name'] or '').strip()
            if not name:
                return _error('Tournament name is required', 400)
            tournament.name = name
        if 'status' in data:
            if data['status'] not in TOURNAMENT_STATUSES:
                return _error(f'Status must be one of: {", ".join(TOURNAMENT_STATUSES)}', 400)
            tournament.status = data['status']
        if 'swissRounds' in data:
            swiss_rounds = _parse_positive_int(data['swissRounds'])
            if swiss_rounds is None:
                return _error('swissRounds must be a positive integer', 400)
            tournament.swiss_rounds = swiss_rounds

        save_tournaments(tournaments)
    return jsonify(tournament.to_dict())


# ---------------------------------------------------------------------------
# Teams
# ---------------------------------------------------------------------------

@app.route('/api/tournaments/<tournament_id>/teams', methods=['GET'])
def api_tournament_teams(tournament_id):
    teams = [t for t in load_teams() if t.tournament_id == tournament_id]
    return jsonify([t.to_dict() for t in teams])


@app.route('/api/tournaments/<tournament_id>/standings', methods=['GET'])
def api_tournament_standings(tournament_id):
    if not _find(load_tournaments(), tournament_id):
        return _error('Tournament not found', 404)
    teams = [t for t in load_teams() if t.tournament_id == tournament_id]
    return jsonify([
        {'rank': row['rank'], 'team': row['team'].to_dict()}
        for row in rank_teams(teams)
    ])


@app.route('/api/teams', methods=['POST'])
def api_create_team():
    data = request.get_json(silent=True) or {}
    name = str(data.get('name') or '').strip()
    tournament_id = data.get('tournamentId')
    if not name or not tournament_id:
        return _error('Team name and tournamentId are required', 400)

    with _data_lock():
        if not _find(load_tournaments(), tournament_id):
            return _error('Tournament not found', 404)
        team = Team(id=new_id(), tournament_id=tournament_id, name=name)
        save_teams(load_teams() + [team])
    return jsonify(team.to_dict()), 201


@app.route('/api/teams/<team_id>/remove', methods=['POST'])
def api_remove_team(team_id):
    """Flag a team as manually eliminated; it is kept but no longer paired."""
    data = request.get_json(silent=True) or {}
    with _data_lock():
        teams = load_teams()
        team = _find(teams, team_id)
        if not team:
            return _error('Team not found', 404)
        team.is_removed = bool(data.get('isRemoved', True))
        save_teams(teams)
    app.logger.info(f'Team {team.name} removed flag set to {team.is_removed}')
    return jsonify(team.to_dict())


# ---------------------------------------------------------------------------
# Matches
# ---------------------------------------------------------------------------

@app.route('/api/tournaments/<tournament_id>/matches', methods=['GET'])
def api_tournament_matches(tournament_id):
    matches = [m for m in load_matches() if m.tournament_id == tournament_id]
    return jsonify([m.to_dict() for m in matches])


@app.route('/api/matches/<match_id>', methods=['GET'])
def api_get_match(match_id):
    match = _find(load_matches(), match_id)
    if not match:
        return _error('Match not found', 404)
    return jsonify(match.to_dict())


@app.route('/api/matches/<match_id>', methods=['PATCH'])
def api_update_match(match_id):
    """
    Record a score and/or the winner of a match.

    Scores without a winner mark the match in progress. A winner together
    with both scores completes the match and applies the result to the
    standings and the bracket; all resulting changes are saved together.
    """
    data = request.get_json(silent=True) or {}
    winner_id = data.get('winnerId')
    try:
        team1_score = _parse_score(data.get('team1Score'))
        team2_score = _parse_score(data.get('team2Score'))
    except (TypeError, ValueError):
        return _error('Scores must be non-negative integers', 400)

    with _data_lock():
        matches = load_matches()
        current = _find(matches, match_id)
        if not current:
            return _error('Match not found', 404)

        if winner_id and winner_id not in current.participants():
            return _error('Winner must be one of the match participants', 400)
        if current.is_completed:
            return _error('Match is already completed', 409)
        if winner_id and len(current.participants()) < 2:
            return _error('Match is still waiting for a team', 409)

        if not winner_id:
            if team1_score is not None:
                current.team1_score = team1_score
            if team2_score is not None:
                current.team2_score = team2_score
            if team1_score is not None or team2_score is not None:
                current.status = MATCH_IN_PROGRESS
            save_matches(matches)
            return jsonify(current.to_dict())

        if team1_score is None or team2_score is None:
            return _error('Both scores are required to record a winner', 400)

        tournaments = load_tournaments()
        tournament = _find(tournaments, current.tournament_id)
        if not tournament:
            return _error('Tournament not found', 404)
        teams = load_teams()

        result = copy.copy(current)
        result.winner_id = winner_id
        result.team1_score = team1_score
        result.team2_score = team2_score
        try:
            resolution = resolve_match_completion(
                result,
                tournament,
                [m for m in matches if m.tournament_id == tournament.id],
                [t for t in teams if t.tournament_id == tournament.id],
            )
        except InvalidWinnerError as e:
            return _error(str(e), 400)
        except MatchAlreadyCompletedError as e:
            app.logger.warning(f'Refused to resolve match {match_id} twice: {e}')
            return _error(str(e), 409)
        except BracketStateError as e:
            app.logger.error(f'Bracket state error in tournament {tournament.id}: {e}')
            return _error(str(e), 409)

        matches = _replace(matches, [resolution.match] + resolution.match_updates)
        matches.extend(resolution.new_matches)
        teams = _replace(teams, list(resolution.team_updates.values()))
        if resolution.current_round is not None:
            tournament.current_round = resolution.current_round
            app.logger.info(f'Tournament {tournament.name} advanced to round {tournament.current_round}')
        if resolution.tournament_status is not None:
            tournament.status = resolution.tournament_status
            app.logger.info(f'Tournament {tournament.name} finished, champion {resolution.champion_id}')

        save_teams(teams)
        save_matches(matches)
        save_tournaments(tournaments)

    return jsonify(resolution.match.to_dict())


if __name__ == '__main__':
    app.run(debug=True, port=5000)

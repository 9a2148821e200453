import argparse
import yaml
from tournament_core.models import Team, TOURNAMENT_FORMATS, SINGLE_ELIMINATION, ROUND_ROBIN, new_id
from tournament_core.progression import propagate_byes
from tournament_core.brackets import (
    generate_single_elimination_bracket,
    generate_round_robin_bracket,
    generate_swiss_system_round,
    calculate_total_rounds,
    get_round_name,
)

PREVIEW_TOURNAMENT_ID = 'preview'


def load_teams(file_path):
    """Load team names from a YAML list (or a mapping with a 'teams' list)."""
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file) or []
    if isinstance(data, dict):
        data = data.get('teams', [])
    return [Team(id=new_id(), tournament_id=PREVIEW_TOURNAMENT_ID, name=str(name)) for name in data]


def generate_fixture(teams, tournament_format):
    if tournament_format == SINGLE_ELIMINATION:
        return propagate_byes(generate_single_elimination_bracket(PREVIEW_TOURNAMENT_ID, teams)['matches'])
    if tournament_format == ROUND_ROBIN:
        return generate_round_robin_bracket(PREVIEW_TOURNAMENT_ID, teams)['matches']
    return generate_swiss_system_round(PREVIEW_TOURNAMENT_ID, teams, 1, [])['matches']


def format_fixture(matches, teams, tournament_format):
    """Render matches as text lines grouped by round."""
    names = {team.id: team.name for team in teams}
    total_rounds = calculate_total_rounds(len(teams))
    lines = []
    for round_number in sorted({m.round for m in matches}):
        if lines:
            lines.append('')
        if tournament_format == SINGLE_ELIMINATION:
            lines.append(f"# {get_round_name(round_number, total_rounds)}")
        else:
            lines.append(f"# Round {round_number}")
        for match in (m for m in matches if m.round == round_number):
            if match.is_bye:
                lines.append(f"{names[match.winner_id]} (bye)")
            elif match.team1_id is None and match.team2_id is None:
                lines.append("TBD vs TBD")
            else:
                lines.append(f"{names.get(match.team1_id, 'TBD')} vs {names.get(match.team2_id, 'TBD')}")
    return lines


def main(argv=None):
    parser = argparse.ArgumentParser(description='Preview the fixture generated for a list of teams.')
    parser.add_argument('teams_file', help='YAML file with the team names, in seeding order')
    parser.add_argument('--format', choices=TOURNAMENT_FORMATS, default=SINGLE_ELIMINATION,
                        dest='tournament_format')
    args = parser.parse_args(argv)

    teams = load_teams(args.teams_file)
    if len(teams) < 2:
        print("At least 2 teams are required.")
        return 1

    matches = generate_fixture(teams, args.tournament_format)
    for line in format_fixture(matches, teams, args.tournament_format):
        print(line)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())

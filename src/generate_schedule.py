import argparse
import logging
import os
import sys

import yaml

from league.config import load_settings, settings_file_path
from league.errors import InfeasibleScheduleError, ValidationError
from league.models import Team
from league.scheduling import generate_schedule


def load_teams(file_path):
    """Read ``group: [team, ...]`` from a YAML file. Team names double as ids."""
    teams = []
    with open(file_path, mode='r', encoding='utf-8') as file:
        groups_data = yaml.safe_load(file) or {}
    for group_id, group_data in groups_data.items():
        # Accept both a bare list and the {'teams': [...]} form
        team_names = group_data.get('teams', []) if isinstance(group_data, dict) else group_data
        for team_name in team_names or []:
            teams.append(Team(id=str(team_name), name=str(team_name), group_id=str(group_id)))
    return teams


def format_schedule(matches):
    """Render matches as text, one ``# <date>`` block per match day."""
    lines = []
    current_day = None
    for match in matches:
        if match.date != current_day:
            if current_day is not None:
                lines.append('')
            lines.append(f'# {match.date}')
            current_day = match.date
        lines.append(f'{match.time}  {match.home_team_name} vs {match.away_team_name} (Group {match.group_id})')
    return '\n'.join(lines)


def main(argv=None):
    script_dir = os.path.dirname(__file__)
    base_dir = os.path.dirname(script_dir)

    parser = argparse.ArgumentParser(description='Generate a round-robin group stage schedule.')
    parser.add_argument('teams_file', nargs='?', default=os.path.join(base_dir, 'data', 'teams.yaml'),
                        help='YAML file mapping each group to its team names')
    parser.add_argument('--start-date', help='first match day (YYYY-MM-DD), default tomorrow')
    parser.add_argument('--seed', type=int, help='random seed for a reproducible schedule')
    parser.add_argument('--settings', help='settings YAML file')
    parser.add_argument('--verbose', action='store_true', help='log scheduling attempts')
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s')

    teams = load_teams(args.teams_file)
    settings = load_settings(args.settings or settings_file_path(os.path.dirname(os.path.abspath(args.teams_file))))

    try:
        matches = generate_schedule(teams, start_date=args.start_date, settings=settings, seed=args.seed)
    except (InfeasibleScheduleError, ValidationError) as e:
        print(f'Error: {e}', file=sys.stderr)
        return 1

    print(format_schedule(matches))
    return 0


if __name__ == '__main__':
    sys.exit(main())

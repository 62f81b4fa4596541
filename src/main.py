# Command line entry point: print a round-robin day or a playoff bracket.

import argparse
import random
import sys
import yaml
from core.models import Team, Standing
from core.playoffs import auto_seed_pairings, default_bye_teams, generate_playoff_bracket, get_round_name, validate_playoff_selection
from core.errors import PlayoffSetupError
from core.round_robin import generate_schedule, group_time_slots


def load_teams(file_path):
    """Teams YAML: a list of names or of {id, name} mappings."""
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file) or []
    teams = []
    for i, entry in enumerate(data):
        if isinstance(entry, dict):
            teams.append(Team(id=str(entry.get('id', i + 1)), name=entry['name']))
        else:
            teams.append(Team(id=str(i + 1), name=str(entry)))
    return teams


def load_standings(file_path):
    """Standings YAML ranked best-first: team names or standing mappings."""
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file) or []
    standings = []
    for i, entry in enumerate(data):
        if isinstance(entry, dict) and 'team' in entry:
            standings.append(Standing.from_dict(entry))
        elif isinstance(entry, dict):
            standings.append(Standing(Team(id=str(entry.get('id', i + 1)), name=entry['name'])))
        else:
            standings.append(Standing(Team(id=str(i + 1), name=str(entry))))
    return standings


def print_schedule(args):
    teams = load_teams(args.teams_file)
    rng = random.Random(args.seed) if args.seed is not None else None
    schedule, error = generate_schedule(teams, args.day, args.courts, rng)
    if error:
        print(f"Error: {error}", file=sys.stderr)
        return 1

    print(f"# Day {args.day}")
    for slot_number, slot in enumerate(group_time_slots(schedule, args.courts), start=1):
        print(f"\nSlot {slot_number}:")
        for match in slot:
            print(f"  Court {match.court}: {match.team1.name} vs {match.team2.name}")
    return 0


def print_bracket(args):
    standings = load_standings(args.standings_file)
    if args.byes:
        by_name = {s.team.name: s.team for s in standings}
        missing = [name for name in args.byes if name not in by_name]
        if missing:
            print(f"Error: unknown team(s): {', '.join(missing)}", file=sys.stderr)
            return 1
        byes = [by_name[name] for name in args.byes]
    else:
        byes = default_bye_teams(standings, args.num_teams)
    pairings = auto_seed_pairings(standings, args.num_teams, byes)

    try:
        validate_playoff_selection(standings, args.num_teams, pairings, byes)
    except PlayoffSetupError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    bracket = generate_playoff_bracket(standings, args.num_teams, args.sets_to_win, pairings, byes)
    total_rounds = len(bracket.rounds)
    first_round = True
    for round_index, round_matches in enumerate(bracket.rounds):
        if not first_round:
            print()
        print(f"# {get_round_name(round_index, total_rounds)}")
        for match in round_matches:
            team1 = match.team1.name if match.team1 else 'TBD'
            team2 = match.team2.name if match.team2 else 'TBD'
            suffix = ' (bye)' if round_index == 0 and match.winner_id else ''
            print(f"{match.id}: {team1} vs {team2}{suffix}")
        first_round = False
    return 0


def build_parser():
    parser = argparse.ArgumentParser(description='Volleyball tournament scheduling tools')
    subparsers = parser.add_subparsers(dest='command', required=True)

    schedule_parser = subparsers.add_parser('schedule', help='Generate a round-robin day')
    schedule_parser.add_argument('teams_file', help='YAML list of teams playing that day')
    schedule_parser.add_argument('--day', type=int, default=1)
    schedule_parser.add_argument('--courts', type=int, default=2)
    schedule_parser.add_argument('--seed', type=int, default=None, help='Seed for a reproducible schedule')
    schedule_parser.set_defaults(func=print_schedule)

    bracket_parser = subparsers.add_parser('bracket', help='Generate an auto-seeded playoff bracket')
    bracket_parser.add_argument('standings_file', help='YAML list of teams ranked best-first')
    bracket_parser.add_argument('--num-teams', type=int, required=True)
    bracket_parser.add_argument('--sets-to-win', type=int, default=2)
    bracket_parser.add_argument('--byes', nargs='*', default=None, help='Team names receiving a bye')
    bracket_parser.set_defaults(func=print_bracket)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())

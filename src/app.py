"""
Flask JSON API for the Volleyball Tournament Manager.
"""
import os
import logging
import yaml
from flask import Flask, request, jsonify
from core.errors import BracketConflictError, TournamentError, TournamentNotFoundError, TeamNotFoundError, UnknownMatchError
from core.playoffs import calculate_byes, get_champion, get_round_name
from core.round_robin import group_time_slots
from tournament_store import TournamentStore

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('TOURNAMENT_DATA_DIR', os.path.join(BASE_DIR, 'data'))

TOURNAMENTS_FILE = os.path.join(DATA_DIR, 'tournaments.yaml')
SETTINGS_FILE = os.path.join(DATA_DIR, 'settings.yaml')

_store = None

if not app.debug:
    app.logger.setLevel(logging.INFO)


def get_store() -> TournamentStore:
    """Return the process-wide store, loading it from TOURNAMENTS_FILE on first use."""
    global _store
    if _store is None:
        _store = TournamentStore(path=TOURNAMENTS_FILE)
    return _store


def get_default_settings():
    """Default tournament settings."""
    return {
        'sets_to_win': 2,
        'num_courts': 2,
        'auto_seed': True,
    }


def load_settings():
    """Load settings from YAML file, merging with defaults."""
    defaults = get_default_settings()
    if not os.path.exists(SETTINGS_FILE):
        return defaults
    with open(SETTINGS_FILE, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            app.logger.warning(f'Failed to parse {SETTINGS_FILE}: {e}')
            return defaults
        if not data:
            return defaults
        return {**defaults, **data}


def _json_body() -> dict:
    return request.get_json(silent=True) or {}


def _require_int(data: dict, key: str, default=None) -> int:
    value = data.get(key, default)
    if value is None:
        raise TournamentError(f'Missing {key}')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise TournamentError(f'{key} must be an integer')


def _require_id_list(data: dict, key: str, default=None) -> list:
    value = data.get(key, default)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise TournamentError(f'{key} must be a list of ids')
    return value


def _is_id_pair(pair) -> bool:
    return isinstance(pair, (list, tuple)) and len(pair) == 2 and all(isinstance(i, str) for i in pair)


def _parse_scores(data: dict, key: str) -> list:
    scores = data.get(key)
    if not isinstance(scores, list):
        raise TournamentError(f'{key} must be a list of set scores')
    parsed = []
    for score in scores:
        if score is None or score == '':
            parsed.append(0)
            continue
        try:
            parsed.append(int(score))
        except (TypeError, ValueError):
            raise TournamentError(f'Invalid score: {score}')
    return parsed


def serialize_bracket(bracket) -> dict:
    """Bracket dict with round names and the champion, if decided."""
    if bracket is None:
        return None
    data = bracket.to_dict()
    total_rounds = len(bracket.rounds)
    data['round_names'] = [get_round_name(i, total_rounds) for i in range(total_rounds)]
    champion = get_champion(bracket)
    data['champion'] = champion.to_dict() if champion else None
    return data


def serialize_tournament(tournament) -> dict:
    data = tournament.to_dict()
    data['playoff_bracket'] = serialize_bracket(tournament.playoff_bracket)
    data['days'] = sorted({m.day for m in tournament.schedule})
    return data


@app.errorhandler(TournamentError)
def handle_tournament_error(e):
    """Report validation failures as JSON instead of a 500."""
    if isinstance(e, (TournamentNotFoundError, TeamNotFoundError, UnknownMatchError)):
        status = 404
    elif isinstance(e, BracketConflictError):
        status = 409
    else:
        status = 400
    app.logger.info(f'{request.method} {request.path} rejected: {e}')
    return jsonify({'error': str(e)}), status


@app.route('/api/settings', methods=['GET'])
def api_settings():
    return jsonify(load_settings())


@app.route('/api/tournaments', methods=['GET'])
def api_list_tournaments():
    tournaments = get_store().list_tournaments()
    return jsonify({'tournaments': [
        {'id': t.id, 'name': t.name, 'sets_to_win': t.sets_to_win, 'teams': len(t.teams)}
        for t in tournaments
    ]})


@app.route('/api/tournaments', methods=['POST'])
def api_create_tournament():
    """API endpoint to create a tournament."""
    data = _json_body()
    name = (data.get('name') or '').strip()
    if not name:
        return jsonify({'error': 'Missing tournament name'}), 400
    sets_to_win = _require_int(data, 'sets_to_win', load_settings()['sets_to_win'])
    if sets_to_win < 1:
        return jsonify({'error': 'sets_to_win must be at least 1'}), 400

    tournament = get_store().create_tournament(name, sets_to_win)
    return jsonify({'success': True, 'tournament': serialize_tournament(tournament)}), 201


@app.route('/api/tournaments/<tournament_id>', methods=['GET'])
def api_get_tournament(tournament_id):
    return jsonify(serialize_tournament(get_store().get(tournament_id)))


@app.route('/api/tournaments/<tournament_id>', methods=['DELETE'])
def api_delete_tournament(tournament_id):
    get_store().delete_tournament(tournament_id)
    app.logger.info(f'Deleted tournament {tournament_id}')
    return jsonify({'success': True})


@app.route('/api/tournaments/<tournament_id>/teams', methods=['POST'])
def api_add_team(tournament_id):
    data = _json_body()
    name = (data.get('name') or '').strip()
    if not name:
        return jsonify({'error': 'Missing team name'}), 400
    team = get_store().add_team(tournament_id, name)
    return jsonify({'success': True, 'team': team.to_dict()}), 201


@app.route('/api/tournaments/<tournament_id>/teams/<team_id>', methods=['PATCH'])
def api_rename_team(tournament_id, team_id):
    data = _json_body()
    name = (data.get('name') or '').strip()
    if not name:
        return jsonify({'error': 'Missing team name'}), 400
    tournament = get_store().rename_team(tournament_id, team_id, name)
    return jsonify({'success': True, 'tournament': serialize_tournament(tournament)})


@app.route('/api/tournaments/<tournament_id>/teams/<team_id>', methods=['DELETE'])
def api_delete_team(tournament_id, team_id):
    """Remove a team. Schedule and bracket are reset since they reference it."""
    tournament = get_store().delete_team(tournament_id, team_id)
    return jsonify({'success': True, 'tournament': serialize_tournament(tournament)})


@app.route('/api/tournaments/<tournament_id>/days', methods=['POST'])
def api_generate_day(tournament_id):
    """API endpoint to append a round-robin day to the schedule."""
    data = _json_body()
    day = _require_int(data, 'day')
    num_courts = _require_int(data, 'num_courts', load_settings()['num_courts'])
    team_ids = _require_id_list(data, 'team_ids')

    tournament = get_store().generate_day(tournament_id, day, team_ids, num_courts)
    day_matches = [m.to_dict() for m in tournament.schedule if m.day == day]
    app.logger.info(f'Generated day {day} for {tournament_id}: {len(day_matches)} matches on {num_courts} courts')
    return jsonify({'success': True, 'matches': day_matches})


@app.route('/api/tournaments/<tournament_id>/days/<int:day>/regenerate', methods=['POST'])
def api_regenerate_day(tournament_id, day):
    """Regenerate a day. Later days and the playoff bracket are cleared."""
    data = _json_body()
    num_courts = _require_int(data, 'num_courts', load_settings()['num_courts'])
    team_ids = _require_id_list(data, 'team_ids')

    tournament = get_store().regenerate_day(tournament_id, day, team_ids, num_courts)
    return jsonify({'success': True, 'tournament': serialize_tournament(tournament)})


@app.route('/api/tournaments/<tournament_id>/days/<int:day>', methods=['DELETE'])
def api_clear_day(tournament_id, day):
    tournament = get_store().clear_day(tournament_id, day)
    return jsonify({'success': True, 'tournament': serialize_tournament(tournament)})


@app.route('/api/tournaments/<tournament_id>/days/<int:day>/slots', methods=['GET'])
def api_day_slots(tournament_id, day):
    """Matches of a day grouped into time slots of num_courts matches."""
    num_courts = request.args.get('num_courts', load_settings()['num_courts'], type=int)
    tournament = get_store().get(tournament_id)
    day_matches = [m for m in tournament.schedule if m.day == day]
    slots = group_time_slots(day_matches, num_courts)
    return jsonify({'day': day, 'slots': [[m.to_dict() for m in slot] for slot in slots]})


@app.route('/api/tournaments/<tournament_id>/matches/<match_id>', methods=['DELETE'])
def api_delete_match(tournament_id, match_id):
    tournament = get_store().delete_match(tournament_id, match_id)
    return jsonify({'success': True, 'tournament': serialize_tournament(tournament)})


@app.route('/api/tournaments/<tournament_id>/matches/<match_id>/score', methods=['POST'])
def api_update_score(tournament_id, match_id):
    """API endpoint to save a league or playoff match result."""
    data = _json_body()
    team1_scores = _parse_scores(data, 'team1')
    team2_scores = _parse_scores(data, 'team2')

    tournament = get_store().update_match_score(tournament_id, match_id, team1_scores, team2_scores)
    return jsonify({'success': True, 'tournament': serialize_tournament(tournament)})


@app.route('/api/tournaments/<tournament_id>/standings', methods=['GET'])
def api_standings(tournament_id):
    standings = get_store().standings(tournament_id)
    return jsonify({'standings': [s.to_dict() for s in standings]})


@app.route('/api/tournaments/<tournament_id>/playoffs/auto-seed', methods=['GET'])
def api_auto_seed(tournament_id):
    """Suggest byes and first-round pairings for a playoff field."""
    num_teams = request.args.get('num_teams', type=int)
    if num_teams is None:
        return jsonify({'error': 'Missing num_teams'}), 400
    bye_team_ids = request.args.getlist('bye_team_ids') or None
    byes, pairings = get_store().auto_seed(tournament_id, num_teams, bye_team_ids)
    return jsonify({
        'num_byes': calculate_byes(num_teams),
        'bye_team_ids': [team.id for team in byes],
        'pairings': [[team1.id, team2.id] for team1, team2 in pairings],
    })


@app.route('/api/tournaments/<tournament_id>/playoffs', methods=['POST'])
def api_generate_playoffs(tournament_id):
    """API endpoint to generate (or regenerate) the playoff bracket."""
    data = _json_body()
    num_teams = _require_int(data, 'num_teams')
    store = get_store()
    sets_to_win = _require_int(data, 'sets_to_win', store.get(tournament_id).sets_to_win)
    bye_team_ids = _require_id_list(data, 'bye_team_ids', [])
    pairings = data.get('pairings')

    if pairings is None and load_settings().get('auto_seed'):
        byes, suggested = store.auto_seed(tournament_id, num_teams, bye_team_ids or None)
        bye_team_ids = [team.id for team in byes]
        pairings = [(team1.id, team2.id) for team1, team2 in suggested]
    if not isinstance(pairings, list) or not all(_is_id_pair(p) for p in pairings):
        return jsonify({'error': 'pairings must be a list of [team1_id, team2_id]'}), 400

    tournament = store.generate_playoffs(tournament_id, num_teams, sets_to_win, pairings, bye_team_ids)
    app.logger.info(f'Generated playoff bracket for {tournament_id} with {num_teams} teams')
    return jsonify({'success': True, 'bracket': serialize_bracket(tournament.playoff_bracket)})


if __name__ == '__main__':
    app.run(debug=True)

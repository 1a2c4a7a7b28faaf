"""
Flask JSON API for the league manager.
"""
from datetime import date

from flask import Flask, jsonify, request

from league import (
    InfeasibleScheduleError,
    TransientStoreError,
    TournamentService,
    UnknownRecordError,
    ValidationError,
    YamlRepository,
)
from league.config import DATA_DIR, load_settings, settings_file_path
from league.models import Card, Goal, Player, Team, STATUS_COMPLETED
from league.repository import new_id

app = Flask(__name__)


def get_service() -> TournamentService:
    """Service bound to the YAML store in DATA_DIR."""
    return TournamentService(YamlRepository(DATA_DIR), load_settings(settings_file_path(DATA_DIR)))


def _error(message, status):
    return jsonify({'success': False, 'error': message}), status


@app.errorhandler(UnknownRecordError)
def handle_unknown_record(e):
    return _error(str(e), 404)


@app.errorhandler(ValidationError)
def handle_validation_error(e):
    return _error(str(e), 400)


@app.errorhandler(InfeasibleScheduleError)
def handle_infeasible_schedule(e):
    app.logger.warning(f'Schedule generation failed: {e}')
    return jsonify({
        'success': False,
        'error': str(e),
        'attempts': e.attempts,
        'unscheduled': e.unscheduled,
    }), 409


@app.errorhandler(TransientStoreError)
def handle_store_error(e):
    app.logger.error(f'Store failure: {e}')
    return _error('Storage temporarily unavailable, try again', 503)


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Expected a JSON object')
    return data


def _int_field(data, key, default=None, required=True):
    """An integer from the JSON body. Floats, booleans and strings are refused."""
    value = data.get(key, default)
    if value is None:
        if required:
            raise ValidationError(f'Missing {key}')
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f'{key} must be an integer, got {value!r}')
    return value


def _matches_json(matches):
    return [m.to_dict() for m in matches]


def _stage_json(stage):
    return {
        'quarter_finals': _matches_json(stage['quarter_finals']),
        'semi_finals': _matches_json(stage['semi_finals']),
        'final': _matches_json(stage['final']),
        'champion': stage['champion'],
    }


@app.route('/api/teams', methods=['GET'])
def api_list_teams():
    group = request.args.get('group')
    teams = get_service().repository.list_teams(group)
    return jsonify({'success': True, 'teams': [t.to_dict() for t in teams]})


@app.route('/api/teams', methods=['POST'])
def api_save_team():
    """Create or replace a team."""
    data = _json_body()
    name = (data.get('name') or '').strip()
    group_id = (data.get('group_id') or '').strip()
    if not name or not group_id:
        raise ValidationError('Team name and group are required.')

    team = Team(id=data.get('id') or new_id(), name=name, group_id=group_id)
    team.players = [Player.from_dict(p) for p in data.get('players') or []]
    for player in team.players:
        player.team_id = team.id
    team = get_service().repository.save_team(team)
    return jsonify({'success': True, 'team': team.to_dict()})


@app.route('/api/teams/<team_id>', methods=['DELETE'])
def api_delete_team(team_id):
    get_service().delete_team(team_id)
    return jsonify({'success': True})


@app.route('/api/schedule/generate', methods=['POST'])
def api_generate_schedule():
    """Replace the whole schedule with a newly generated one."""
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    elif not isinstance(data, dict):
        raise ValidationError('Expected a JSON object')
    start_date = data.get('start_date')
    seed = _int_field(data, 'seed', required=False)
    matches = get_service().generate_schedule(start_date=start_date, seed=seed)
    app.logger.info(f'Generated {len(matches)} matches starting {start_date or date.today()}')
    return jsonify({'success': True, 'matches': _matches_json(matches)})


@app.route('/api/matches', methods=['GET'])
def api_list_matches():
    status = request.args.get('status')
    round_name = request.args.get('round')
    matches = get_service().repository.list_matches(status=status, round=round_name)
    return jsonify({'success': True, 'matches': _matches_json(matches)})


@app.route('/api/matches/<match_id>/result', methods=['POST'])
def api_record_result(match_id):
    """Save a group match score; standings are recomputed."""
    data = _json_body()
    standings = get_service().record_result(
        match_id,
        _int_field(data, 'home_score'),
        _int_field(data, 'away_score'),
        data.get('status', STATUS_COMPLETED),
    )
    return jsonify({'success': True, 'standings': [s.to_dict() for s in standings]})


@app.route('/api/standings', methods=['GET'])
def api_standings():
    grouped = get_service().standings_by_group()
    return jsonify({
        'success': True,
        'standings': {group: [s.to_dict() for s in rows] for group, rows in grouped.items()},
    })


@app.route('/api/standings/recalculate', methods=['POST'])
def api_recalculate_standings():
    standings = get_service().recalculate_standings()
    return jsonify({'success': True, 'standings': [s.to_dict() for s in standings]})


@app.route('/api/knockout', methods=['GET'])
def api_knockout():
    return jsonify({'success': True, 'stage': _stage_json(get_service().knockout_stage())})


@app.route('/api/knockout/setup', methods=['POST'])
def api_setup_knockout():
    matches = get_service().setup_knockout_stage()
    return jsonify({'success': True, 'matches': _matches_json(matches)})


@app.route('/api/knockout/seed', methods=['POST'])
def api_seed_knockout():
    matches = get_service().seed_knockout()
    return jsonify({'success': True, 'matches': _matches_json(matches)})


@app.route('/api/knockout/<match_id>/result', methods=['POST'])
def api_knockout_result(match_id):
    """Complete a knockout match and advance the winner."""
    data = _json_body()
    stage = get_service().record_knockout_result(
        match_id,
        _int_field(data, 'home_score'),
        _int_field(data, 'away_score'),
        date=data.get('date'),
        time=data.get('time'),
        venue=data.get('venue'),
        penalty_winner=data.get('penalty_winner'),
    )
    return jsonify({'success': True, 'stage': _stage_json(stage)})


@app.route('/api/knockout', methods=['DELETE'])
def api_delete_knockout():
    deleted = get_service().delete_knockout_stage()
    return jsonify({'success': True, 'deleted': deleted})


@app.route('/api/goals', methods=['POST'])
def api_add_goal():
    data = _json_body()
    goal = Goal.from_dict(data)
    goal_id = get_service().add_goal(goal)
    return jsonify({'success': True, 'id': goal_id})


@app.route('/api/cards', methods=['POST'])
def api_add_card():
    data = _json_body()
    card = Card.from_dict(data)
    card_id = get_service().add_card(card)
    return jsonify({'success': True, 'id': card_id})


@app.route('/api/awards/top-scorers', methods=['GET'])
def api_top_scorers():
    limit = request.args.get('limit', type=int)
    return jsonify({'success': True, 'top_scorers': get_service().top_scorers(limit)})


@app.route('/api/awards/best-players', methods=['GET'])
def api_best_players():
    limit = request.args.get('limit', 10, type=int)
    return jsonify({'success': True, 'best_players': get_service().best_players(limit)})


@app.route('/api/awards/best-keepers', methods=['GET'])
def api_best_keepers():
    limit = request.args.get('limit', 5, type=int)
    return jsonify({'success': True, 'best_keepers': get_service().best_keepers(limit)})


@app.route('/api/discipline', methods=['GET'])
def api_discipline():
    service = get_service()
    return jsonify({
        'success': True,
        'players': service.discipline_report(),
        'banned': service.banned_players(),
    })


if __name__ == '__main__':
    app.run(debug=True, port=5000)

"""
Top scorers, card discipline and the player and goalkeeper awards.
"""
from typing import Dict, List, Optional, Sequence

from .models import Card, Goal, Match, Team, CARD_RED, CARD_YELLOW

YELLOW_CARD_BAN_THRESHOLD = 3

POINTS_PER_GOAL = 3
POINTS_PER_MATCH = 1
POINTS_PER_CLEAN_SHEET = 4
WIN_BONUS = 2
DRAW_BONUS = 1
YELLOW_CARD_PENALTY = -1
RED_CARD_PENALTY = -3

GOALKEEPER_POSITIONS = ('goalkeeper', 'kiper', 'penjaga gawang', 'gk', 'kipper')


def top_scorers(goals: Sequence[Goal], limit: Optional[int] = None) -> List[Dict]:
    """
    Goal tally per player, best first.

    Returns: [{'player_id', 'player_name', 'team_id', 'team_name', 'goals'}, ...]
    sorted by goals (desc) then player name.
    """
    tally = {}
    for goal in goals:
        if not goal.player_id:
            continue
        entry = tally.setdefault(goal.player_id, {
            'player_id': goal.player_id,
            'player_name': goal.player_name,
            'team_id': goal.team_id,
            'team_name': goal.team_name,
            'goals': 0,
        })
        entry['goals'] += 1

    ranked = sorted(tally.values(), key=lambda e: (-e['goals'], e['player_name'] or ''))
    if limit is not None:
        ranked = ranked[:limit]
    return ranked


def is_banned(yellow_cards: int, red_cards: int) -> bool:
    return yellow_cards >= YELLOW_CARD_BAN_THRESHOLD or red_cards > 0


def card_summary(cards: Sequence[Card]) -> List[Dict]:
    """
    Yellow and red card counts per player with a ban flag.

    A player is banned after three yellow cards or any red card.
    """
    summary = {}
    for card in cards:
        if not card.player_id:
            continue
        entry = summary.setdefault(card.player_id, {
            'player_id': card.player_id,
            'player_name': card.player_name,
            'team_id': card.team_id,
            'team_name': card.team_name,
            'yellow_cards': 0,
            'red_cards': 0,
            'match_ids': [],
        })
        if card.type == CARD_RED:
            entry['red_cards'] += 1
        elif card.type == CARD_YELLOW:
            entry['yellow_cards'] += 1
        if card.match_id and card.match_id not in entry['match_ids']:
            entry['match_ids'].append(card.match_id)

    for entry in summary.values():
        entry['banned'] = is_banned(entry['yellow_cards'], entry['red_cards'])

    return sorted(summary.values(), key=lambda e: (e['team_name'] or '', e['player_name'] or ''))


def banned_players(cards: Sequence[Card]) -> List[Dict]:
    return [entry for entry in card_summary(cards) if entry['banned']]


def is_goalkeeper(position: Optional[str]) -> bool:
    return bool(position) and position.strip().lower() in GOALKEEPER_POSITIONS


def _sides(match: Match):
    return (
        ('home', match.home_team_id, match.home_score, match.away_score),
        ('away', match.away_team_id, match.away_score, match.home_score),
    )


def _result_bonus(scored: int, conceded: int) -> int:
    if scored > conceded:
        return WIN_BONUS
    if scored == conceded:
        return DRAW_BONUS
    return 0


def _apply_cards(entry: Dict, cards: Sequence[Card]):
    for card in cards:
        if card.player_id != entry['player_id']:
            continue
        if card.type == CARD_YELLOW:
            entry['yellow_cards'] += 1
            entry['card_points'] += YELLOW_CARD_PENALTY
        elif card.type == CARD_RED:
            entry['red_cards'] += 1
            entry['card_points'] += RED_CARD_PENALTY


def _player_entry(player_id, player_name, team_id, team_name) -> Dict:
    return {
        'player_id': player_id,
        'player_name': player_name,
        'team_id': team_id,
        'team_name': team_name,
        'goals': 0,
        'clean_sheets': 0,
        'matches_played': 0,
        'yellow_cards': 0,
        'red_cards': 0,
        'goal_points': 0,
        'match_points': 0,
        'card_points': 0,
        'total_points': 0,
    }


def _rank(entries, limit):
    ranked = sorted(entries, key=lambda e: -e['total_points'])
    if limit is not None:
        ranked = ranked[:limit]
    return ranked


def best_players(goals: Sequence[Goal], matches: Sequence[Match], teams: Sequence[Team],
                 limit: Optional[int] = 10) -> List[Dict]:
    """
    Player of the tournament ranking, best first.

    Only players who scored are ranked. Points per player:

        3 per goal
        1 per completed match of their team, plus 2 for a win or 1 for a draw
        -1 per yellow card and -3 per red card in those matches

    Players level on points keep the order of their first goal.
    """
    entries = {}
    for goal in goals:
        if not goal.player_id:
            continue
        entry = entries.setdefault(
            goal.player_id, _player_entry(goal.player_id, goal.player_name, goal.team_id, goal.team_name))
        entry['goals'] += 1
        entry['goal_points'] = entry['goals'] * POINTS_PER_GOAL

    teams_by_id = {team.id: team for team in teams}
    for match in matches:
        if not match.is_completed:
            continue
        for side, team_id, scored, conceded in _sides(match):
            team = teams_by_id.get(team_id)
            if team is None:
                continue
            for player in team.players:
                entry = entries.get(player.id)
                if entry is None:
                    continue
                entry['matches_played'] += 1
                entry['match_points'] += POINTS_PER_MATCH + _result_bonus(scored, conceded)
                _apply_cards(entry, match.cards.get(side, []))

    for entry in entries.values():
        entry['total_points'] = entry['goal_points'] + entry['match_points'] + entry['card_points']
    return _rank(entries.values(), limit)


def best_keepers(matches: Sequence[Match], teams: Sequence[Team], limit: Optional[int] = 5) -> List[Dict]:
    """
    Goalkeeper of the tournament ranking, best first.

    Every rostered goalkeeper of a team earns, per completed match: 1 point,
    4 more for a clean sheet, 2 for a win or 1 for a draw, and the same card
    penalties as ``best_players``. Keepers without a completed match are left out.
    """
    entries = {}
    for team in teams:
        for player in team.players:
            if is_goalkeeper(player.position):
                entries[player.id] = _player_entry(player.id, player.name, team.id, team.name)

    teams_by_id = {team.id: team for team in teams}
    for match in matches:
        if not match.is_completed:
            continue
        for side, team_id, scored, conceded in _sides(match):
            team = teams_by_id.get(team_id)
            if team is None:
                continue
            for player in team.players:
                entry = entries.get(player.id)
                if entry is None:
                    continue
                entry['matches_played'] += 1
                entry['match_points'] += POINTS_PER_MATCH + _result_bonus(scored, conceded)
                if conceded == 0:
                    entry['clean_sheets'] += 1
                    entry['goal_points'] += POINTS_PER_CLEAN_SHEET
                _apply_cards(entry, match.cards.get(side, []))

    for entry in entries.values():
        entry['total_points'] = entry['goal_points'] + entry['match_points'] + entry['card_points']
    return _rank([e for e in entries.values() if e['matches_played'] > 0], limit)

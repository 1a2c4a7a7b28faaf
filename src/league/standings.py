"""
League table computation from completed group matches.
"""
import logging
from typing import Dict, List, Sequence

from .models import Match, Standing, Team, KNOCKOUT_GROUP

logger = logging.getLogger(__name__)

POINTS_WIN = 3
POINTS_DRAW = 1
POINTS_LOSS = 0


def _score(value):
    """Return a usable goal count or None."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


def standing_sort_key(standing: Standing):
    return (-standing.points, -standing.goal_difference, -standing.goals_for)


def sort_standings(standings: Sequence[Standing]) -> List[Standing]:
    """
    Order standings by points, then goal difference, then goals scored.

    The sort is stable: teams level on all three keep their incoming order.
    """
    return sorted(standings, key=standing_sort_key)


def compute_standings(teams: Sequence[Team], matches: Sequence[Match]) -> List[Standing]:
    """
    Build the league table from scratch.

    One Standing per team is created with zeroed counters and every completed
    group match is applied to both sides (3 points for a win, 1 for a draw).
    Knockout matches, matches involving unknown teams and matches without
    valid scores are skipped. The inputs are never modified.

    Returns: standings sorted with ``sort_standings``.
    """
    table = {}
    for team in teams:
        table[team.id] = Standing(team_id=team.id, team_name=team.name, group_id=team.group_id)

    for match in matches:
        if not match.is_completed or match.group_id == KNOCKOUT_GROUP:
            continue

        home = table.get(match.home_team_id)
        away = table.get(match.away_team_id)
        if home is None or away is None:
            logger.debug('Skipping match %s: team not in table', match.id)
            continue

        home_score = _score(match.home_score)
        away_score = _score(match.away_score)
        if home_score is None or away_score is None:
            logger.debug('Skipping match %s: invalid score %r-%r', match.id, match.home_score, match.away_score)
            continue

        home.matches_played += 1
        away.matches_played += 1
        home.goals_for += home_score
        home.goals_against += away_score
        away.goals_for += away_score
        away.goals_against += home_score

        if home_score > away_score:
            home.wins += 1
            away.losses += 1
            home.points += POINTS_WIN
            away.points += POINTS_LOSS
        elif home_score < away_score:
            away.wins += 1
            home.losses += 1
            away.points += POINTS_WIN
            home.points += POINTS_LOSS
        else:
            home.draws += 1
            away.draws += 1
            home.points += POINTS_DRAW
            away.points += POINTS_DRAW

    return sort_standings(table.values())


def group_standings(standings: Sequence[Standing]) -> Dict[str, List[Standing]]:
    """Split standings per group, each group sorted, groups in key order."""
    grouped = {}
    for standing in standings:
        grouped.setdefault(standing.group_id, []).append(standing)
    return {group_id: sort_standings(grouped[group_id]) for group_id in sorted(grouped, key=str)}

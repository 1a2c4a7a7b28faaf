"""
Round-robin schedule generation with rest-period and daily-capacity constraints.

Each group plays a single round robin. Pairings from every group share one
pool that is shuffled and then laid out day by day: a day is used only when
it can hold exactly ``matches_per_day`` matches, no team plays twice on a day,
and every team gets at least ``min_rest_days`` between its matches. A walk
that leaves pairings behind is thrown away and retried with a new shuffle.
"""
import copy
import datetime
import logging
import random
from collections import Counter
from itertools import combinations
from typing import Dict, List, Optional, Sequence

from .config import merge_settings, validate_settings
from .errors import InfeasibleScheduleError, ValidationError
from .models import Match, Team, STATUS_SCHEDULED

logger = logging.getLogger(__name__)


def group_teams(teams: Sequence[Team]) -> Dict[str, List[Team]]:
    """Group teams by group id, keeping input order inside each group."""
    groups = {}
    for team in teams:
        groups.setdefault(team.group_id, []).append(team)
    return groups


def validate_groups(teams: Sequence[Team], teams_per_group: Optional[int] = None) -> Dict[str, List[Team]]:
    """
    Check that teams can be scheduled fairly and return them grouped.

    Every team needs an id, a name and a group. All groups must have the same
    size (at least 2), equal to ``teams_per_group`` when that is given.
    """
    if not teams:
        raise ValidationError('No teams to schedule')

    seen_ids = set()
    for team in teams:
        if not team.id or not team.name or not team.group_id:
            raise ValidationError(f'Team is missing id, name or group: {team!r}')
        if team.id in seen_ids:
            raise ValidationError(f'Duplicate team id: {team.id}')
        seen_ids.add(team.id)

    groups = group_teams(teams)
    sizes = {group_id: len(group) for group_id, group in groups.items()}

    too_small = sorted(g for g, size in sizes.items() if size < 2)
    if too_small:
        raise ValidationError(f"Groups need at least 2 teams: {', '.join(map(str, too_small))}")

    if len(set(sizes.values())) > 1:
        detail = ', '.join(f'{g}={n}' for g, n in sorted(sizes.items()))
        raise ValidationError(f'Groups must have equal size ({detail})')

    if teams_per_group is not None:
        wrong = sorted(g for g, size in sizes.items() if size != teams_per_group)
        if wrong:
            raise ValidationError(
                f"Expected {teams_per_group} teams per group, group(s) {', '.join(map(str, wrong))} differ"
            )

    return groups


def generate_pairings(teams: Sequence[Team], venue: str = '') -> List[Match]:
    """
    Create one unscheduled match per unordered pair of teams in each group.

    For n teams in a group this yields n(n-1)/2 matches. The team listed
    first in the input plays at home.
    """
    matches = []
    for group_id, group in group_teams(teams).items():
        for home, away in combinations(group, 2):
            matches.append(Match(
                home_team_id=home.id,
                away_team_id=away.id,
                group_id=group_id,
                home_team_name=home.name,
                away_team_name=away.name,
                date='',
                time='',
                venue=venue,
                status=STATUS_SCHEDULED,
            ))
    return matches


def parse_date(value) -> datetime.date:
    """Accept a date, a datetime or an ISO ``YYYY-MM-DD`` string, optionally followed by a time."""
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    try:
        text = str(value).strip().split('T', 1)[0].split(' ', 1)[0]
        return datetime.date.fromisoformat(text)
    except ValueError:
        raise ValidationError(f'Invalid date: {value!r}')


def _days_between(later: str, earlier: str) -> int:
    return (parse_date(later) - parse_date(earlier)).days


def _team_history(scheduled: Sequence[Match]):
    games = Counter()
    last_date = {}
    for match in scheduled:
        for team_id in match.team_ids:
            games[team_id] += 1
            if team_id not in last_date or match.date > last_date[team_id]:
                last_date[team_id] = match.date
    return games, last_date


def _pick_disjoint(candidates: List[Match], count: int, used: frozenset, start: int = 0) -> Optional[List[Match]]:
    """First selection of ``count`` matches without a shared team, in candidate order."""
    if count == 0:
        return []
    for i in range(start, len(candidates)):
        match = candidates[i]
        if match.home_team_id in used or match.away_team_id in used:
            continue
        rest = _pick_disjoint(candidates, count - 1, used | {match.home_team_id, match.away_team_id}, i + 1)
        if rest is not None:
            return [match] + rest
    return None


def find_schedulable_matches(day: str, pool: Sequence[Match], scheduled: Sequence[Match], count: int,
                             min_rest_days: int = 2, max_games: int = 5, horizon: int = 30) -> List[Match]:
    """
    Choose up to ``count`` matches from ``pool`` that can be played on ``day``.

    Candidates are ranked by a priority that favours teams with fewer games
    so far and a longer rest since their last match:

        (max_games - home_games) * 10 + (max_games - away_games) * 10
            + min(home_rest, away_rest) * 5

    A team that has not played yet counts as rested for ``horizon`` days.
    Matches whose teams rested less than ``min_rest_days`` are not eligible.
    If a full set of ``count`` team-disjoint matches exists it is returned,
    otherwise the greedy partial selection is.
    """
    games, last_date = _team_history(scheduled)

    def rest_days(team_id):
        if team_id not in last_date:
            return horizon
        return _days_between(day, last_date[team_id])

    def priority(match):
        return (
            (max_games - games[match.home_team_id]) * 10
            + (max_games - games[match.away_team_id]) * 10
            + min(rest_days(match.home_team_id), rest_days(match.away_team_id)) * 5
        )

    # sorted() is stable, equal priorities keep the shuffled pool order
    ranked = sorted(pool, key=priority, reverse=True)
    eligible = [
        m for m in ranked
        if not m.is_scheduled
        and rest_days(m.home_team_id) >= min_rest_days
        and rest_days(m.away_team_id) >= min_rest_days
    ]

    selection = _pick_disjoint(eligible, count, frozenset())
    if selection is not None:
        return selection

    # No full day possible: report what a greedy pass manages
    greedy = []
    used = set()
    for match in eligible:
        if len(greedy) >= count:
            break
        if match.home_team_id in used or match.away_team_id in used:
            continue
        greedy.append(match)
        used.update(match.team_ids)
    return greedy


def validate_schedule(matches: Sequence[Match], teams_by_group: Dict[str, List[Team]], matches_per_day: int) -> bool:
    """
    Fairness check for a complete schedule.

    Every used day holds exactly ``matches_per_day`` matches, every team plays
    each group rival exactly once, and nobody is booked twice on a day.
    """
    per_day = Counter(match.date for match in matches)
    if any(count != matches_per_day for count in per_day.values()):
        return False

    pairs = Counter(frozenset(match.team_ids) for match in matches)
    if any(count != 1 for count in pairs.values()):
        return False

    per_team = Counter()
    booked = set()
    for match in matches:
        for team_id in match.team_ids:
            per_team[team_id] += 1
            if (team_id, match.date) in booked:
                return False
            booked.add((team_id, match.date))

    for group in teams_by_group.values():
        expected = len(group) - 1
        if any(per_team[team.id] != expected for team in group):
            return False

    return True


def _walk_days(pairings: List[Match], start: datetime.date, settings: Dict, rng: random.Random, max_games: int):
    """One attempt: shuffle the pool and fill days from ``start``. Returns (scheduled, remaining)."""
    per_day = settings['matches_per_day']
    slots = settings['daily_slots']
    horizon = settings['max_schedule_horizon_days']

    remaining = [copy.deepcopy(m) for m in pairings]
    rng.shuffle(remaining)

    scheduled = []
    consecutive_failures = 0
    current = start

    for _ in range(horizon):
        if not remaining:
            break
        day = current.isoformat()
        chosen = find_schedulable_matches(
            day, remaining, scheduled, per_day,
            min_rest_days=settings['min_rest_days'],
            max_games=max_games,
            horizon=horizon,
        )

        if len(chosen) == per_day:
            consecutive_failures = 0
            for slot, match in zip(slots, chosen):
                match.date = day
                match.time = slot
                scheduled.append(match)
            chosen_ids = {id(m) for m in chosen}
            remaining = [m for m in remaining if id(m) not in chosen_ids]
        else:
            consecutive_failures += 1
            if consecutive_failures >= settings['max_consecutive_failures']:
                logger.debug('Giving up on %s after %d days without a full slate',
                             day, consecutive_failures)
                break

        current += datetime.timedelta(days=1)

    return scheduled, remaining


def generate_schedule(teams: Sequence[Team], start_date=None, settings: Optional[Dict] = None,
                      seed=None) -> List[Match]:
    """
    Generate a complete group-stage schedule.

    Args:
        teams: all teams; groups must be of equal size.
        start_date: first possible match day (date or ISO string), default tomorrow.
        settings: overrides for ``config.get_default_settings()``.
        seed: seed for the shuffle, for reproducible schedules.

    Returns:
        Matches sorted by date and time, each with date, time and venue set.

    Raises:
        ValidationError: teams or settings are malformed.
        InfeasibleScheduleError: no fair complete schedule after ``max_retries`` attempts.
    """
    settings = validate_settings(merge_settings(settings))
    teams_by_group = validate_groups(teams, settings.get('teams_per_group'))
    per_day = settings['matches_per_day']

    pairings = generate_pairings(teams, settings.get('venue', ''))
    leftover = len(pairings) % per_day
    if leftover:
        # Every used day must be full, so this can never work out
        raise InfeasibleScheduleError(
            f'{len(pairings)} matches cannot be split into days of {per_day}',
            attempts=0,
            unscheduled=leftover,
        )

    if start_date is None:
        start = datetime.date.today() + datetime.timedelta(days=1)
    else:
        start = parse_date(start_date)

    group_size = len(next(iter(teams_by_group.values())))
    max_games = group_size - 1
    rng = random.Random(seed)
    max_retries = settings['max_retries']
    fewest_left = len(pairings)

    for attempt in range(1, max_retries + 1):
        scheduled, remaining = _walk_days(pairings, start, settings, rng, max_games)
        fewest_left = min(fewest_left, len(remaining))

        if remaining:
            logger.debug('Attempt %d/%d left %d matches unscheduled', attempt, max_retries, len(remaining))
            continue

        if not validate_schedule(scheduled, teams_by_group, per_day):
            logger.debug('Attempt %d/%d failed the fairness check', attempt, max_retries)
            continue

        scheduled.sort(key=lambda m: (m.date, m.time))
        logger.info('Scheduled %d matches over %d days from %s (attempt %d)',
                    len(scheduled), len({m.date for m in scheduled}), start.isoformat(), attempt)
        return scheduled

    logger.warning('No valid schedule for %d teams after %d attempts', len(teams), max_retries)
    raise InfeasibleScheduleError(
        f'Could not build a valid schedule after {max_retries} attempts',
        attempts=max_retries,
        unscheduled=fewest_left,
    )

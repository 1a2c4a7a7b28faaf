"""
Knockout stage: quarterfinal seeding from group standings and winner propagation.

The bracket is fixed: four quarterfinals, two semifinals, one final. Group
winners meet the runner-up of the paired group, and the feed table below
decides which semifinal each quarterfinal winner goes to.
"""
import copy
import logging
import warnings
from typing import Dict, List, Optional, Sequence, Tuple

from .errors import StaleStateWarning, ValidationError
from .models import (
    KnockoutMatch, Standing, KNOCKOUT_GROUP, KNOCKOUT_ROUNDS,
    QUARTER, SEMI, FINAL, STATUS_COMPLETED, STATUS_SCHEDULED,
)
from .standings import group_standings

logger = logging.getLogger(__name__)

DEFAULT_KNOCKOUT_GROUPS = ('A', 'B', 'C', 'D')

# (winner's group, runner-up's group) for QF1..QF4
QUARTER_FINAL_PAIRINGS = [
    ('A', 'B'),
    ('B', 'A'),
    ('C', 'D'),
    ('D', 'C'),
]

# QF1 and QF3 meet in SEMI 1, QF2 and QF4 in SEMI 2
NEXT_MATCH = {
    (QUARTER, 1): 1,
    (QUARTER, 2): 2,
    (QUARTER, 3): 1,
    (QUARTER, 4): 2,
    (SEMI, 1): 1,
    (SEMI, 2): 1,
}

NEXT_ROUND = {QUARTER: SEMI, SEMI: FINAL}

MATCHES_PER_ROUND = {QUARTER: 4, SEMI: 2, FINAL: 1}


def quarter_final_pairings(groups: Optional[Sequence[str]] = None) -> List[Tuple[str, str]]:
    """
    Cross-bracket table for four groups: 1st of G1 v 2nd of G2, 1st of G2 v 2nd of G1,
    1st of G3 v 2nd of G4, 1st of G4 v 2nd of G3.
    """
    if groups is None:
        return list(QUARTER_FINAL_PAIRINGS)
    if len(groups) != 4:
        raise ValidationError(f'Knockout stage needs exactly 4 groups, got {len(groups)}')
    g1, g2, g3, g4 = groups
    return [(g1, g2), (g2, g1), (g3, g4), (g4, g3)]


def is_knockout(match) -> bool:
    return getattr(match, 'round', None) in KNOCKOUT_ROUNDS


def _empty_slots() -> Dict:
    return {
        'home_team_id': None,
        'home_team_name': '',
        'away_team_id': None,
        'away_team_name': '',
    }


def _reset_result() -> Dict:
    return {
        'status': STATUS_SCHEDULED,
        'home_score': 0,
        'away_score': 0,
        'winner': None,
        'goals': [],
        'cards': {'home': [], 'away': []},
    }


def create_knockout_stage(venue: str = '') -> List[KnockoutMatch]:
    """Unseeded skeletons for all knockout matches, in round order."""
    matches = []
    for round_name in KNOCKOUT_ROUNDS:
        for number in range(1, MATCHES_PER_ROUND[round_name] + 1):
            matches.append(KnockoutMatch(
                round=round_name,
                match_number=number,
                next_match_number=NEXT_MATCH.get((round_name, number)),
                group_id=KNOCKOUT_GROUP,
                venue=venue,
            ))
    return matches


def seed_quarter_finals(quarter_finals: Sequence[KnockoutMatch], standings: Sequence[Standing],
                        groups: Optional[Sequence[str]] = None) -> Dict[int, Dict]:
    """
    Work out the quarterfinal line-up from final group standings.

    Returns: {match_number: fields} with both team slots filled and the result
    reset, one entry per quarterfinal.

    Raises:
        ValidationError: a quarterfinal is missing or a group has fewer than two teams.
    """
    by_number = {m.match_number: m for m in quarter_finals if m.round == QUARTER}
    tables = group_standings(standings)

    assignments = {}
    for number, (winner_group, runner_up_group) in enumerate(quarter_final_pairings(groups), start=1):
        if number not in by_number:
            raise ValidationError(f'Quarterfinal {number} does not exist')
        for group_id in (winner_group, runner_up_group):
            if len(tables.get(group_id, [])) < 2:
                raise ValidationError(f'Group {group_id} has no winner and runner-up yet')

        home = tables[winner_group][0]
        away = tables[runner_up_group][1]
        fields = {
            'home_team_id': home.team_id,
            'home_team_name': home.team_name,
            'away_team_id': away.team_id,
            'away_team_name': away.team_name,
        }
        fields.update(_reset_result())
        assignments[number] = fields

    return assignments


def clear_later_rounds(matches: Sequence[KnockoutMatch]) -> Dict[str, Dict]:
    """Fields that empty every semifinal and final. Returns {match_id: fields}."""
    cleared = {}
    for match in matches:
        if match.round in (SEMI, FINAL):
            fields = _empty_slots()
            fields.update(_reset_result())
            cleared[match.id] = fields
    return cleared


def decide_winner(match: KnockoutMatch, home_score: int, away_score: int,
                  penalty_winner: Optional[str] = None) -> Dict:
    """
    Winner of a knockout match as ``{'id': ..., 'name': ...}``.

    A level score needs ``penalty_winner``, the id of the team that won the
    shoot-out.
    """
    if not match.is_seeded:
        raise ValidationError(f'{match.round} {match.match_number} has no opponents yet')
    for score in (home_score, away_score):
        if isinstance(score, bool) or not isinstance(score, int) or score < 0:
            raise ValidationError(f'Invalid score: {score!r}')

    home = {'id': match.home_team_id, 'name': match.home_team_name}
    away = {'id': match.away_team_id, 'name': match.away_team_name}

    if home_score > away_score:
        return home
    if away_score > home_score:
        return away
    if penalty_winner == match.home_team_id:
        return home
    if penalty_winner == match.away_team_id:
        return away
    raise ValidationError(
        f'{match.round} {match.match_number} ended {home_score}-{away_score}; a penalty winner is required'
    )


def record_knockout_result(match: KnockoutMatch, home_score: int, away_score: int, date: Optional[str] = None,
                           time: Optional[str] = None, venue: Optional[str] = None,
                           penalty_winner: Optional[str] = None) -> Dict:
    """Fields that complete ``match`` with the given score."""
    fields = {
        'home_score': home_score,
        'away_score': away_score,
        'status': STATUS_COMPLETED,
        'winner': decide_winner(match, home_score, away_score, penalty_winner),
    }
    if date is not None:
        fields['date'] = date
    if time is not None:
        fields['time'] = time
    if venue is not None:
        fields['venue'] = venue
    return fields


def find_next_match(match: KnockoutMatch, bracket: Sequence[KnockoutMatch]) -> Optional[KnockoutMatch]:
    """The match that receives the winner of ``match``, if any."""
    next_round = NEXT_ROUND.get(match.round)
    if next_round is None or not match.next_match_number:
        return None
    for candidate in bracket:
        if candidate.round == next_round and candidate.match_number == match.next_match_number:
            return candidate
    return None


def feeder_slot(match: KnockoutMatch, bracket: Sequence[KnockoutMatch]) -> str:
    """
    'home' or 'away': the slot the winner of ``match`` takes in its next match.

    The matches feeding one successor are ordered by match number; the first
    one fills the home slot, the second the away slot.
    """
    feeders = sorted(
        (m.match_number for m in bracket
         if m.round == match.round and m.next_match_number == match.next_match_number),
    )
    if match.match_number not in feeders:
        feeders = sorted(feeders + [match.match_number])
    return 'home' if feeders.index(match.match_number) % 2 == 0 else 'away'


def propagate_winner(match: KnockoutMatch, next_match: Optional[KnockoutMatch],
                     bracket: Sequence[KnockoutMatch]) -> Optional[Dict]:
    """
    Fields that put the winner of ``match`` into ``next_match``.

    Returns None when there is nothing to write: no winner, no next match,
    or the winner is already in place. When the target slot holds another
    team and the next match is full or finished, a StaleStateWarning is
    issued and nothing is overwritten.
    """
    if not match.winner or next_match is None:
        return None

    slot = feeder_slot(match, bracket)
    current = getattr(next_match, f'{slot}_team_id')
    if current == match.winner['id']:
        return None

    if current and (next_match.is_seeded or next_match.status == STATUS_COMPLETED):
        message = (f'{next_match.round} {next_match.match_number} already has {slot} team {current}; '
                   f'not replacing it with {match.winner["id"]}')
        logger.warning(message)
        warnings.warn(message, StaleStateWarning, stacklevel=2)
        return None

    return {
        f'{slot}_team_id': match.winner['id'],
        f'{slot}_team_name': match.winner['name'],
    }


def apply_fields(match: KnockoutMatch, fields: Dict) -> KnockoutMatch:
    """Copy of ``match`` with ``fields`` set."""
    updated = copy.deepcopy(match)
    for key, value in fields.items():
        setattr(updated, key, value)
    return updated


def knockout_stage(matches: Sequence) -> Dict:
    """Knockout matches split per round and sorted, with the champion once the final is decided."""
    knockout = [m for m in matches if is_knockout(m)]

    def of_round(round_name):
        return sorted((m for m in knockout if m.round == round_name), key=lambda m: m.match_number)

    final = of_round(FINAL)
    champion = final[0].winner if final and final[0].status == STATUS_COMPLETED else None
    return {
        'quarter_finals': of_round(QUARTER),
        'semi_finals': of_round(SEMI),
        'final': final,
        'champion': champion,
    }

"""
Tournament operations: the pure scheduling, standings and bracket functions
wired to a repository.

Every operation that reads, computes and writes runs under
``repository.lock()`` so two of them never interleave. Store failures
(TransientStoreError) are passed through untouched; retrying is up to the
caller.
"""
import logging
from typing import Dict, List, Optional

from . import awards, knockout, scheduling, standings as standings_module
from .config import merge_settings, validate_settings
from .errors import UnknownRecordError, ValidationError
from .models import (
    Card, Goal, KnockoutMatch, Match,
    CARD_RED, CARD_YELLOW, KNOCKOUT_ROUNDS, MATCH_STATUSES, QUARTER, STATUS_COMPLETED,
)
from .repository import Repository

logger = logging.getLogger(__name__)


class TournamentService:
    def __init__(self, repository: Repository, settings: Optional[Dict] = None):
        self.repository = repository
        self.settings = validate_settings(merge_settings(settings))

    # Teams

    def delete_team(self, team_id: str):
        """Remove a team. Its matches stay until the schedule is regenerated."""
        with self.repository.lock():
            if not any(t.id == team_id for t in self.repository.list_teams()):
                raise UnknownRecordError(f'Unknown team: {team_id}')
            self.repository.delete_team(team_id)
        logger.info('Deleted team %s', team_id)

    # Group stage

    def generate_schedule(self, start_date=None, seed=None) -> List[Match]:
        """
        Generate and store a new group-stage schedule.

        This is a reset: all stored matches, knockout ones and completed ones
        included, are replaced and standings are cleared.
        """
        with self.repository.lock():
            teams = self.repository.list_teams()
            matches = scheduling.generate_schedule(teams, start_date, self.settings, seed)
            stored = self.repository.replace_all_matches(matches)
            self.repository.replace_all_standings(standings_module.compute_standings(teams, []))
        return stored

    def record_result(self, match_id: str, home_score: int, away_score: int, status: str = STATUS_COMPLETED):
        """Enter a group match score and refresh the standings."""
        if status not in MATCH_STATUSES:
            raise ValidationError(f'Unknown status: {status}')
        for score in (home_score, away_score):
            if isinstance(score, bool) or not isinstance(score, int) or score < 0:
                raise ValidationError(f'Invalid score: {score!r}')

        with self.repository.lock():
            match = self.repository.get_match(match_id)
            if match is None:
                raise UnknownRecordError(f'Unknown match: {match_id}')
            if knockout.is_knockout(match):
                raise ValidationError(f'Match {match_id} is a knockout match')
            self.repository.update_match(match_id, {
                'home_score': home_score,
                'away_score': away_score,
                'status': status,
            })
            return self.recalculate_standings()

    def recalculate_standings(self):
        """Recompute the whole table from the stored completed matches and replace it."""
        with self.repository.lock():
            teams = self.repository.list_teams()
            matches = self.repository.list_matches(status=STATUS_COMPLETED)
            table = standings_module.compute_standings(teams, matches)
            self.repository.replace_all_standings(table)
        return table

    def standings_by_group(self):
        return standings_module.group_standings(self.repository.list_standings())

    # Knockout stage

    def knockout_matches(self) -> List[KnockoutMatch]:
        return self.repository.list_matches(round=KNOCKOUT_ROUNDS)

    def knockout_stage(self) -> Dict:
        return knockout.knockout_stage(self.knockout_matches())

    def setup_knockout_stage(self) -> List[KnockoutMatch]:
        """Create the seven knockout skeletons unless a bracket already exists."""
        with self.repository.lock():
            existing = self.knockout_matches()
            if existing:
                return existing
            return self.repository.add_matches(knockout.create_knockout_stage(self.settings.get('venue', '')))

    def seed_knockout(self) -> List[KnockoutMatch]:
        """Fill the quarterfinals from stored standings; later rounds are emptied."""
        with self.repository.lock():
            bracket = self.setup_knockout_stage()
            table = self.repository.list_standings()
            assignments = knockout.seed_quarter_finals(
                bracket, table, self.settings.get('knockout_groups'))

            for match in bracket:
                if match.round == QUARTER:
                    self.repository.update_match(match.id, assignments[match.match_number])
            for match_id, fields in knockout.clear_later_rounds(bracket).items():
                self.repository.update_match(match_id, fields)

            logger.info('Seeded %d quarterfinals', len(assignments))
            return self.knockout_matches()

    def record_knockout_result(self, match_id: str, home_score: int, away_score: int, date=None,
                               time=None, venue=None, penalty_winner=None) -> Dict:
        """
        Complete a knockout match and move its winner on.

        The successor is re-read by id under the lock before its slot is
        decided, so propagation never works from stale data.
        """
        with self.repository.lock():
            match = self.repository.get_match(match_id)
            if match is None or not knockout.is_knockout(match):
                raise UnknownRecordError(f'Unknown knockout match: {match_id}')

            fields = knockout.record_knockout_result(
                match, home_score, away_score, date, time, venue, penalty_winner)
            self.repository.update_match(match_id, fields)
            completed = knockout.apply_fields(match, fields)

            bracket = self.knockout_matches()
            next_match = knockout.find_next_match(completed, bracket)
            if next_match is not None:
                next_match = self.repository.get_match(next_match.id)
                update = knockout.propagate_winner(completed, next_match, bracket)
                if update:
                    self.repository.update_match(next_match.id, update)
                    logger.info('%s advances to %s %s', completed.winner['name'],
                                next_match.round, next_match.match_number)
            return self.knockout_stage()

    def delete_knockout_stage(self) -> int:
        """Remove every knockout match; group matches and standings are untouched."""
        with self.repository.lock():
            ids = [m.id for m in self.knockout_matches()]
            return self.repository.delete_matches(ids)

    # Goals, cards, awards

    def add_goal(self, goal: Goal) -> str:
        if not goal.match_id or not goal.player_id:
            raise ValidationError('A goal needs a match and a player')
        return self.repository.add_goal(goal)

    def add_card(self, card: Card) -> str:
        if not card.match_id or not card.player_id:
            raise ValidationError('A card needs a match and a player')
        if card.type not in (CARD_YELLOW, CARD_RED):
            raise ValidationError(f'Unknown card type: {card.type}')
        return self.repository.add_card(card)

    def top_scorers(self, limit: Optional[int] = None):
        return awards.top_scorers(self.repository.list_goals(), limit)

    def discipline_report(self):
        return awards.card_summary(self.repository.list_cards())

    def banned_players(self):
        return awards.banned_players(self.repository.list_cards())

    def best_players(self, limit: Optional[int] = 10):
        return awards.best_players(self.repository.list_goals(), self.repository.list_matches(),
                                   self.repository.list_teams(), limit)

    def best_keepers(self, limit: Optional[int] = 5):
        return awards.best_keepers(self.repository.list_matches(), self.repository.list_teams(), limit)

"""
Unit tests for league data models.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from league.models import (
    Card, Goal, KnockoutMatch, Match, Player, Standing, Team,
    CARD_RED, KNOCKOUT_GROUP, QUARTER, STATUS_COMPLETED, STATUS_SCHEDULED,
)


class TestTeam:
    """Tests for Team and Player."""

    def test_team_defaults_to_no_players(self):
        """Test that a team without players gets an empty list."""
        team = Team(id='t1', name='Lions', group_id='A')
        assert team.players == []

    def test_team_from_dict_builds_players(self):
        """Test that player records become Player objects."""
        team = Team.from_dict({
            'id': 't1', 'name': 'Lions', 'group_id': 'A',
            'players': [{'id': 'p1', 'name': 'Ada', 'number': 9, 'team_id': 't1'}],
        })
        assert isinstance(team.players[0], Player)
        assert team.players[0].number == 9
        assert team.to_dict()['players'][0]['name'] == 'Ada'

    def test_team_repr(self):
        """Test string representation of Team."""
        assert repr(Team(id='t1', name='Lions', group_id='A')) == 'Team(id=t1, name=Lions, group_id=A)'


class TestMatch:
    """Tests for Match and KnockoutMatch."""

    def test_new_match_is_unscheduled(self):
        """Test that a match without a date is not scheduled."""
        match = Match(home_team_id='a', away_team_id='b', group_id='A')
        assert not match.is_scheduled
        assert match.status == STATUS_SCHEDULED
        assert match.cards == {'home': [], 'away': []}
        assert match.team_ids == ('a', 'b')

    def test_match_dict_keeps_goals_and_cards(self):
        """Test that goals and cards survive to_dict/from_dict."""
        match = Match(home_team_id='a', away_team_id='b', group_id='A', id='m1', date='2025-03-01',
                      time='13:30', status=STATUS_COMPLETED, home_score=2, away_score=1)
        match.goals.append(Goal(match_id='m1', player_id='p1', team_id='a', minute=10))
        match.cards['away'].append(Card(match_id='m1', player_id='p2', team_id='b', type=CARD_RED))

        restored = Match.from_dict(match.to_dict())

        assert restored.is_completed
        assert restored.goals[0].minute == 10
        assert restored.cards['away'][0].type == CARD_RED
        assert type(restored) is Match

    def test_from_dict_with_round_gives_knockout_match(self):
        """Test that a record with a round is read back as a KnockoutMatch."""
        record = KnockoutMatch(round=QUARTER, match_number=2, next_match_number=2, id='k2').to_dict()
        match = Match.from_dict(record)
        assert isinstance(match, KnockoutMatch)
        assert match.match_number == 2
        assert match.group_id == KNOCKOUT_GROUP

    def test_knockout_match_seeded_only_with_both_teams(self):
        """Test is_seeded requires both slots."""
        match = KnockoutMatch(round=QUARTER, match_number=1, home_team_id='a')
        assert not match.is_seeded
        match.away_team_id = 'b'
        assert match.is_seeded

    def test_knockout_winner_is_copied(self):
        """Test that the winner dict is not shared with the source record."""
        record = {'round': QUARTER, 'match_number': 1, 'winner': {'id': 'a', 'name': 'A'}}
        match = KnockoutMatch.from_dict(record)
        match.winner['name'] = 'changed'
        assert record['winner']['name'] == 'A'


class TestStanding:
    """Tests for Standing."""

    def test_goal_difference_is_derived(self):
        """Test goal difference follows goals for and against."""
        standing = Standing(team_id='a', team_name='A', group_id='A', goals_for=5, goals_against=7)
        assert standing.goal_difference == -2
        assert standing.to_dict()['goal_difference'] == -2

    def test_from_dict_ignores_stored_goal_difference(self):
        """Test that a stale stored goal difference is recomputed."""
        standing = Standing.from_dict({'team_id': 'a', 'group_id': 'A', 'goals_for': 3,
                                       'goals_against': 1, 'goal_difference': 99})
        assert standing.goal_difference == 2

    def test_standings_compare_by_value(self):
        """Test equality of two standings with the same counters."""
        a = Standing(team_id='a', team_name='A', group_id='A', points=3)
        b = Standing(team_id='a', team_name='A', group_id='A', points=3)
        assert a == b
        b.points = 4
        assert a != b

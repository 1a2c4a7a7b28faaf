"""
Unit tests for standings computation.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from conftest import completed, make_teams
from league.models import KnockoutMatch, Match, Standing, QUARTER, STATUS_COMPLETED, STATUS_LIVE
from league.standings import compute_standings, group_standings, sort_standings


def _by_team(table):
    return {s.team_id: s for s in table}


class TestComputeStandings:
    """Tests for compute_standings."""

    def test_home_win(self):
        """Test a 3-1 home win."""
        teams = make_teams('A', 2)
        table = _by_team(compute_standings(teams, [completed('A1', 'A2', 3, 1)]))

        home, away = table['A1'], table['A2']
        assert (home.matches_played, home.wins, home.points) == (1, 1, 3)
        assert (home.goals_for, home.goals_against, home.goal_difference) == (3, 1, 2)
        assert (away.matches_played, away.losses, away.points) == (1, 1, 0)
        assert (away.goals_for, away.goals_against, away.goal_difference) == (1, 3, -2)

    def test_draw(self):
        """Test a draw gives both teams a point."""
        table = _by_team(compute_standings(make_teams('A', 2), [completed('A1', 'A2', 2, 2)]))
        assert table['A1'].draws == table['A2'].draws == 1
        assert table['A1'].points == table['A2'].points == 1

    def test_every_team_listed(self):
        """Test teams without a completed match get a zero row."""
        table = compute_standings(make_teams('AB', 3), [])
        assert len(table) == 6
        assert all(s.points == 0 and s.matches_played == 0 for s in table)

    def test_ignores_incomplete_and_knockout_matches(self):
        """Test that only completed group matches count."""
        teams = make_teams('A', 2)
        live = completed('A1', 'A2', 1, 0, match_id='live')
        live.status = STATUS_LIVE
        cup = KnockoutMatch(round=QUARTER, match_number=1, home_team_id='A1', away_team_id='A2',
                            home_score=4, away_score=0, status=STATUS_COMPLETED)
        table = compute_standings(teams, [live, cup])
        assert all(s.matches_played == 0 for s in table)

    def test_ignores_unknown_teams_and_bad_scores(self):
        """Test that matches with unknown teams or invalid scores are skipped."""
        teams = make_teams('A', 2)
        stranger = completed('A1', 'Z9', 1, 0)
        negative = completed('A1', 'A2', -1, 0, match_id='neg')
        missing = completed('A1', 'A2', None, 0, match_id='none')
        table = compute_standings(teams, [stranger, negative, missing])
        assert all(s.matches_played == 0 for s in table)

    def test_idempotent(self):
        """Test that computing twice from the same matches gives the same table."""
        teams = make_teams('A', 4)
        matches = [completed('A1', 'A2', 1, 0), completed('A3', 'A4', 2, 2), completed('A1', 'A3', 0, 1)]
        assert compute_standings(teams, matches) == compute_standings(teams, matches)

    def test_inputs_not_modified(self):
        """Test that matches are left alone."""
        match = completed('A1', 'A2', 3, 1)
        before = match.to_dict()
        compute_standings(make_teams('A', 2), [match])
        assert match.to_dict() == before

    def test_points_total_matches_results(self):
        """Test wins and draws account for every point."""
        teams = make_teams('A', 4)
        matches = [completed('A1', 'A2', 1, 0), completed('A3', 'A4', 2, 2),
                   completed('A1', 'A3', 0, 1), completed('A2', 'A4', 5, 5)]
        for standing in compute_standings(teams, matches):
            assert standing.points == 3 * standing.wins + standing.draws
            assert standing.matches_played == standing.wins + standing.draws + standing.losses


class TestSorting:
    """Tests for table order."""

    def test_points_then_goal_difference_then_goals_for(self):
        """Test the three sort keys in order."""
        rows = [
            Standing('low', 'low', 'A', points=3, goals_for=1, goals_against=0),
            Standing('more_goals', 'more_goals', 'A', points=4, goals_for=5, goals_against=3),
            Standing('better_gd', 'better_gd', 'A', points=4, goals_for=3, goals_against=0),
            Standing('fewer_goals', 'fewer_goals', 'A', points=4, goals_for=4, goals_against=2),
        ]
        order = [s.team_id for s in sort_standings(rows)]
        assert order == ['better_gd', 'more_goals', 'fewer_goals', 'low']

    def test_full_tie_keeps_input_order(self):
        """Test that teams level on every key keep their order."""
        rows = [Standing(name, name, 'A', points=1, goals_for=1, goals_against=1) for name in ('x', 'y', 'z')]
        assert [s.team_id for s in sort_standings(rows)] == ['x', 'y', 'z']
        assert [s.team_id for s in sort_standings(rows[::-1])] == ['z', 'y', 'x']

    def test_group_standings_split_and_sorted(self):
        """Test grouping by group id, each group sorted."""
        teams = make_teams('BA', 2)
        table = compute_standings(teams, [completed('A2', 'A1', 1, 0), completed('B1', 'B2', 0, 0, group_id='B')])
        grouped = group_standings(table)
        assert list(grouped) == ['A', 'B']
        assert [s.team_id for s in grouped['A']] == ['A2', 'A1']
        assert len(grouped['B']) == 2

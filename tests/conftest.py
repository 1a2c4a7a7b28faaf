"""
Shared pytest fixtures for league tests.

Running tests:
    pytest tests/                  - full suite
    pytest tests/ -m "not slow"   - fast subset (skips multi-seed schedule sweeps)
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from league.models import Team, Match, Standing, STATUS_COMPLETED
from league.repository import InMemoryRepository
from league.service import TournamentService


def make_teams(groups, per_group):
    """Teams named '<group><n>' (A1, A2, ...), with the name doubling as id."""
    teams = []
    for group_id in groups:
        for n in range(1, per_group + 1):
            teams.append(Team(id=f'{group_id}{n}', name=f'{group_id}{n}', group_id=group_id))
    return teams


def completed(home, away, home_score, away_score, group_id='A', match_id=None):
    """A completed group match between two team ids."""
    return Match(
        id=match_id or f'{home}-{away}',
        home_team_id=home,
        away_team_id=away,
        home_team_name=home,
        away_team_name=away,
        group_id=group_id,
        home_score=home_score,
        away_score=away_score,
        status=STATUS_COMPLETED,
    )


@pytest.fixture
def league_teams():
    """Four groups of six teams."""
    return make_teams('ABCD', 6)


@pytest.fixture
def small_teams():
    """Two groups of four teams."""
    return make_teams('AB', 4)


@pytest.fixture
def settings():
    """Default settings with extra retries so random shuffles always succeed."""
    return {'max_retries': 200}


@pytest.fixture
def small_settings():
    return {'teams_per_group': 4, 'max_retries': 200}


@pytest.fixture
def group_standings_table():
    """Final-looking standings for groups A-D; '<group>1' wins, '<group>2' is runner-up."""
    table = []
    for group_id in 'ABCD':
        for n, points in ((1, 9), (2, 6), (3, 3), (4, 0)):
            team_id = f'{group_id}{n}'
            table.append(Standing(team_id=team_id, team_name=team_id, group_id=group_id,
                                  matches_played=3, points=points))
    return table


@pytest.fixture
def repository():
    return InMemoryRepository()


@pytest.fixture
def service(repository, league_teams, settings):
    """Service over an in-memory store holding the 24 league teams."""
    for team in league_teams:
        repository.save_team(team)
    return TournamentService(repository, settings)


@pytest.fixture
def client():
    """Flask test client."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the app at an empty data directory with a settings file."""
    import app as app_module

    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "settings.yaml").write_text("max_retries: 200\n")

    monkeypatch.delenv('LEAGUE_SETTINGS_FILE', raising=False)
    monkeypatch.setattr(app_module, 'DATA_DIR', str(data_dir))
    return data_dir

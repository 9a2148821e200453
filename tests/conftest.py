"""
Shared pytest fixtures for tournament engine tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from tournament_core.models import Team, Tournament, SINGLE_ELIMINATION, ROUND_ROBIN, SWISS


def build_teams(count, tournament_id='t1'):
    """Teams named Team 1..Team N with ids team-1..team-N."""
    return [
        Team(id=f"team-{i}", tournament_id=tournament_id, name=f"Team {i}")
        for i in range(1, count + 1)
    ]


@pytest.fixture
def make_teams():
    return build_teams


@pytest.fixture
def four_teams():
    return build_teams(4)


@pytest.fixture
def single_elimination_tournament():
    return Tournament(id='t1', name='Cup', format=SINGLE_ELIMINATION, status='in_progress')


@pytest.fixture
def round_robin_tournament():
    return Tournament(id='t1', name='League', format=ROUND_ROBIN, status='in_progress')


@pytest.fixture
def swiss_tournament():
    return Tournament(id='t1', name='Open', format=SWISS, status='in_progress', swiss_rounds=3)


@pytest.fixture
def client():
    """Create a Flask test client."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the app's data directory at an empty temporary directory."""
    import app as app_module

    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setattr(app_module, 'DATA_DIR', str(data_dir))
    return str(data_dir)

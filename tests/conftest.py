"""
Shared pytest fixtures for volleyball tournament manager tests.

Running tests:
    pytest tests/                  - full suite
    pytest tests/ -m "not slow"   - fast subset
"""
import pytest
import random
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from tests.helpers import make_teams


@pytest.fixture
def sample_teams():
    """Create a simple set of six teams."""
    return make_teams(6)


@pytest.fixture
def rng():
    """Seeded random source for reproducible schedules."""
    return random.Random(1234)


@pytest.fixture
def store(tmp_path):
    """File-backed tournament store in a temporary directory."""
    from tournament_store import TournamentStore
    return TournamentStore(path=str(tmp_path / "tournaments.yaml"), rng=random.Random(42))


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the Flask app at a temporary data directory with a fresh store."""
    import app as app_module
    from tournament_store import TournamentStore

    tournaments_file = tmp_path / "tournaments.yaml"
    settings_file = tmp_path / "settings.yaml"

    monkeypatch.setattr(app_module, 'DATA_DIR', str(tmp_path))
    monkeypatch.setattr(app_module, 'TOURNAMENTS_FILE', str(tournaments_file))
    monkeypatch.setattr(app_module, 'SETTINGS_FILE', str(settings_file))
    monkeypatch.setattr(app_module, '_store', TournamentStore(path=str(tournaments_file), rng=random.Random(7)))

    return str(tmp_path)


@pytest.fixture
def client(temp_data_dir):
    """Create a Flask test client backed by the temporary data directory."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client

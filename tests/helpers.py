"""
Test data builders shared across test modules.
"""
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from core.models import Team, Standing


def make_teams(count):
    """Teams with ids t1..tN and names Team 1..Team N."""
    return [Team(id=f"t{i + 1}", name=f"Team {i + 1}") for i in range(count)]


def make_standings(count):
    """Standings ranked best-first: Team 1 is seed 1."""
    return [Standing(team) for team in make_teams(count)]

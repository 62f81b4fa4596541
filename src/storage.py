"""
YAML persistence for tournaments.
"""
import logging
import os
from typing import List

import yaml
from filelock import FileLock

from core.models import Tournament

logger = logging.getLogger(__name__)


def _lock_for(path: str) -> FileLock:
    return FileLock(path + '.lock', timeout=10)


def load_tournaments(path: str) -> List[Tournament]:
    """Load tournaments from YAML file. Missing, empty or unreadable files load as []."""
    if not os.path.exists(path):
        return []
    with _lock_for(path):
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.warning(f'Failed to parse {path}: {e}')
            return []
    if not data:
        return []
    return [Tournament.from_dict(t) for t in data.get('tournaments') or []]


def save_tournaments(path: str, tournaments: List[Tournament]):
    """Save tournaments to YAML file."""
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    with _lock_for(path):
        with open(path, 'w', encoding='utf-8') as f:
            yaml.dump({'tournaments': [t.to_dict() for t in tournaments]}, f, default_flow_style=False)

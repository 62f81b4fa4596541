"""
In-memory tournament repository with command handlers.

Each command deep-copies the tournament it touches and applies its change to
the copy. When a path is given the result is written to YAML before the copy
is swapped in, so a failing command or a failed write leaves state untouched.
"""
import copy
import logging
import random
import threading
import uuid
from typing import Dict, List, Optional, Sequence, Tuple

from core.errors import (
    BracketConflictError,
    ScheduleError,
    TeamNotFoundError,
    TournamentNotFoundError,
    UnknownMatchError,
)
from core.models import Team, Tournament
from core.playoffs import (
    advance_winner,
    auto_seed_pairings,
    default_bye_teams,
    find_playoff_match,
    generate_playoff_bracket,
    validate_playoff_selection,
)
from core.round_robin import generate_schedule
from core.scoring import apply_score, winner_id_for
from core.standings import calculate_standings
from storage import load_tournaments, save_tournaments

logger = logging.getLogger(__name__)


class TournamentStore:
    def __init__(self, path: Optional[str] = None, rng: Optional[random.Random] = None):
        self.path = path
        self.rng = rng
        self._lock = threading.RLock()
        self._tournaments: Dict[str, Tournament] = {}
        if path:
            for tournament in load_tournaments(path):
                self._tournaments[tournament.id] = tournament

    # --- queries ---

    def list_tournaments(self) -> List[Tournament]:
        with self._lock:
            return [copy.deepcopy(t) for t in self._tournaments.values()]

    def get(self, tournament_id: str) -> Tournament:
        with self._lock:
            return copy.deepcopy(self._get(tournament_id))

    def standings(self, tournament_id: str):
        tournament = self.get(tournament_id)
        return calculate_standings(tournament.teams, tournament.schedule)

    def auto_seed(self, tournament_id: str, num_teams: int,
                  bye_team_ids: Optional[Sequence[str]] = None) -> Tuple[List[Team], List[Tuple[Team, Team]]]:
        """Suggest byes (top seeds unless given) and first-round pairings."""
        tournament = self.get(tournament_id)
        standings = calculate_standings(tournament.teams, tournament.schedule)
        if bye_team_ids is None:
            byes = default_bye_teams(standings, num_teams)
        else:
            byes = [self._find_team(tournament, team_id) for team_id in bye_team_ids]
        return byes, auto_seed_pairings(standings, num_teams, byes)

    # --- tournament commands ---

    def create_tournament(self, name: str, sets_to_win: int) -> Tournament:
        tournament = Tournament(id=uuid.uuid4().hex, name=name, sets_to_win=sets_to_win)
        with self._lock:
            self._commit({**self._tournaments, tournament.id: tournament})
        logger.info(f'Created tournament {tournament.name} ({tournament.id})')
        return copy.deepcopy(tournament)

    def delete_tournament(self, tournament_id: str):
        with self._lock:
            self._get(tournament_id)
            self._commit({tid: t for tid, t in self._tournaments.items() if tid != tournament_id})

    # --- team commands ---

    def add_team(self, tournament_id: str, name: str) -> Team:
        team = Team(id=uuid.uuid4().hex, name=name)

        def update(t):
            t.teams.append(team)

        self._update(tournament_id, update)
        return copy.deepcopy(team)

    def rename_team(self, tournament_id: str, team_id: str, name: str) -> Tournament:
        def update(t):
            self._find_team(t, team_id).name = name
            for match in t.schedule:
                for team in (match.team1, match.team2):
                    if team.id == team_id:
                        team.name = name
            if t.playoff_bracket:
                for round_matches in t.playoff_bracket.rounds:
                    for match in round_matches:
                        for team in match.teams():
                            if team.id == team_id:
                                team.name = name

        return self._update(tournament_id, update)

    def delete_team(self, tournament_id: str, team_id: str) -> Tournament:
        def update(t):
            self._find_team(t, team_id)
            t.teams = [team for team in t.teams if team.id != team_id]
            t.schedule = []
            t.playoff_bracket = None

        return self._update(tournament_id, update)

    # --- schedule commands ---

    def generate_day(self, tournament_id: str, day: int, team_ids: Sequence[str], num_courts: int) -> Tournament:
        """Append a freshly generated round-robin day to the schedule."""
        def update(t):
            t.schedule.extend(self._schedule_day(t, day, team_ids, num_courts))

        return self._update(tournament_id, update)

    def regenerate_day(self, tournament_id: str, day: int, team_ids: Sequence[str], num_courts: int) -> Tournament:
        """Replace the given day (dropping every later day) and reset the playoffs."""
        def update(t):
            new_matches = self._schedule_day(t, day, team_ids, num_courts)
            t.schedule = [m for m in t.schedule if m.day < day] + new_matches
            t.playoff_bracket = None

        return self._update(tournament_id, update)

    def clear_day(self, tournament_id: str, day: int) -> Tournament:
        def update(t):
            t.schedule = [m for m in t.schedule if m.day < day]
            t.playoff_bracket = None

        return self._update(tournament_id, update)

    def delete_match(self, tournament_id: str, match_id: str) -> Tournament:
        def update(t):
            if not any(m.id == match_id for m in t.schedule):
                raise UnknownMatchError(f'Match {match_id} not found')
            t.schedule = [m for m in t.schedule if m.id != match_id]
            t.playoff_bracket = None

        return self._update(tournament_id, update)

    def update_match_score(self, tournament_id: str, match_id: str,
                           team1_scores: List[int], team2_scores: List[int]) -> Tournament:
        """Record scores on a league or playoff match; decided playoff matches advance."""
        def update(t):
            playoff_match = find_playoff_match(t.playoff_bracket, match_id) if t.playoff_bracket else None
            if playoff_match is not None:
                if len(playoff_match.teams()) < 2:
                    raise BracketConflictError(f'Match {match_id} does not have two teams yet')
                sets_to_win = t.playoff_bracket.sets_to_win
                winner_id = winner_id_for(playoff_match, team1_scores, team2_scores, sets_to_win)
                t.playoff_bracket = advance_winner(t.playoff_bracket, match_id, winner_id)
                apply_score(find_playoff_match(t.playoff_bracket, match_id), team1_scores, team2_scores, sets_to_win)
                return

            match = next((m for m in t.schedule if m.id == match_id), None)
            if match is None:
                raise UnknownMatchError(f'Match {match_id} not found')
            apply_score(match, team1_scores, team2_scores, t.sets_to_win)

        return self._update(tournament_id, update)

    # --- playoff commands ---

    def generate_playoffs(self, tournament_id: str, num_teams: int, sets_to_win: int,
                          pairings: Sequence[Tuple[str, str]], bye_team_ids: Sequence[str]) -> Tournament:
        """Validate the selection and build a new bracket, replacing any previous one."""
        def update(t):
            standings = calculate_standings(t.teams, t.schedule)
            first_round = [(self._find_team(t, id1), self._find_team(t, id2)) for id1, id2 in pairings]
            byes = [self._find_team(t, team_id) for team_id in bye_team_ids]
            validate_playoff_selection(standings, num_teams, first_round, byes)
            t.playoff_bracket = generate_playoff_bracket(standings, num_teams, sets_to_win, first_round, byes)

        return self._update(tournament_id, update)

    # --- internals ---

    def _get(self, tournament_id: str) -> Tournament:
        tournament = self._tournaments.get(tournament_id)
        if tournament is None:
            raise TournamentNotFoundError(f'Tournament {tournament_id} not found')
        return tournament

    @staticmethod
    def _find_team(tournament: Tournament, team_id: str) -> Team:
        for team in tournament.teams:
            if team.id == team_id:
                return team
        raise TeamNotFoundError(f'Team {team_id} not found')

    def _schedule_day(self, tournament, day, team_ids, num_courts):
        if len(set(team_ids)) != len(team_ids):
            raise ScheduleError('Each team can only be listed once for a day.')
        teams =[self._find_team(tournament, team_id) for team_id in team_ids]
        matches, error = generate_schedule(teams, day, num_courts, self.rng)
        if error:
            raise ScheduleError(error)
        return matches

    def _update(self, tournament_id: str, update_fn) -> Tournament:
        with self._lock:
            updated = copy.deepcopy(self._get(tournament_id))
            update_fn(updated)
            self._commit({**self._tournaments, tournament_id: updated})
            return copy.deepcopy(updated)

    def _commit(self, tournaments: Dict[str, Tournament]):
        """Write tournaments to disk, then make them the live state."""
        if self.path:
            save_tournaments(self.path, list(tournaments.values()))
        self._tournaments = tournaments

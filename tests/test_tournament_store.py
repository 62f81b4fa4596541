"""
Tests for the tournament store command handlers and YAML persistence.
"""
import pytest
import sys
import os
import yaml

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from core.errors import (
    BracketConflictError,
    PlayoffSetupError,
    ScheduleError,
    TeamNotFoundError,
    TournamentNotFoundError,
    UnknownMatchError,
)
from core.models import Tournament, Team
from storage import load_tournaments, save_tournaments
from tournament_store import TournamentStore


@pytest.fixture
def league(store):
    """Tournament with five teams and one generated day on two courts."""
    tournament = store.create_tournament("Beach Open", sets_to_win=2)
    team_ids = [store.add_team(tournament.id, f"Team {i}").id for i in range(1, 6)]
    store.generate_day(tournament.id, 1, team_ids, 2)
    return tournament.id, team_ids


def play_all(store, tournament_id):
    """Let the first-listed team of every undecided league match win."""
    for match in store.get(tournament_id).schedule:
        if not match.winner_id:
            store.update_match_score(tournament_id, match.id, [25, 25], [20, 20])


class TestTournamentCommands:
    """Tests for tournament and team commands."""

    def test_create_and_list(self, store):
        created = store.create_tournament("Spring Cup", sets_to_win=3)
        tournaments = store.list_tournaments()
        assert [t.name for t in tournaments] == ["Spring Cup"]
        assert store.get(created.id).sets_to_win == 3

    def test_get_unknown_tournament(self, store):
        with pytest.raises(TournamentNotFoundError):
            store.get("missing")

    def test_delete_tournament(self, store):
        created = store.create_tournament("Gone", 2)
        store.delete_tournament(created.id)
        assert store.list_tournaments() == []
        with pytest.raises(TournamentNotFoundError):
            store.delete_tournament(created.id)

    def test_returned_snapshots_are_copies(self, store):
        created = store.create_tournament("Snap", 2)
        snapshot = store.get(created.id)
        snapshot.teams.append(Team("x", "X"))
        assert store.get(created.id).teams == []

    def test_rename_team_propagates(self, store, league):
        tournament_id, team_ids = league
        store.rename_team(tournament_id, team_ids[0], "Net Ninjas")
        tournament = store.get(tournament_id)
        assert tournament.teams[0].name == "Net Ninjas"
        names = {t.name for m in tournament.schedule for t in (m.team1, m.team2) if t.id == team_ids[0]}
        assert names == {"Net Ninjas"}

    def test_rename_unknown_team(self, store, league):
        with pytest.raises(TeamNotFoundError):
            store.rename_team(league[0], "nope", "X")

    def test_delete_team_resets_schedule(self, store, league):
        tournament_id, team_ids = league
        tournament = store.delete_team(tournament_id, team_ids[0])
        assert len(tournament.teams) == 4
        assert tournament.schedule == []
        assert tournament.playoff_bracket is None


class TestScheduleCommands:
    """Tests for day generation commands."""

    def test_generate_day_appends(self, store, league):
        tournament_id, team_ids = league
        assert len(store.get(tournament_id).schedule) == 10
        store.generate_day(tournament_id, 2, team_ids[:4], 2)
        schedule = store.get(tournament_id).schedule
        assert len(schedule) == 16
        assert sum(1 for m in schedule if m.day == 2) == 6

    def test_generate_day_error_leaves_state(self, store, league):
        tournament_id, team_ids = league
        with pytest.raises(ScheduleError):
            store.generate_day(tournament_id, 2, team_ids[:1], 2)
        with pytest.raises(ScheduleError):
            store.generate_day(tournament_id, 2, team_ids, 0)
        assert len(store.get(tournament_id).schedule) == 10

    def test_generate_day_unknown_team(self, store, league):
        with pytest.raises(TeamNotFoundError):
            store.generate_day(league[0], 2, ["nope", league[1][0]], 1)

    def test_generate_day_rejects_repeated_team(self, store, league):
        tournament_id, team_ids = league
        with pytest.raises(ScheduleError):
            store.generate_day(tournament_id, 2, [team_ids[0], team_ids[0]], 1)
        with pytest.raises(ScheduleError):
            store.regenerate_day(tournament_id, 1, team_ids + [team_ids[2]], 2)
        assert all(m.team1.id != m.team2.id for m in store.get(tournament_id).schedule)
        assert len(store.get(tournament_id).schedule) == 10

    def test_regenerate_day_drops_later_days(self, store, league):
        tournament_id, team_ids = league
        store.generate_day(tournament_id, 2, team_ids, 2)
        store.generate_day(tournament_id, 3, team_ids, 2)
        tournament = store.regenerate_day(tournament_id, 2, team_ids[:4], 1)
        assert sorted({m.day for m in tournament.schedule}) == [1, 2]
        assert sum(1 for m in tournament.schedule if m.day == 2) == 6

    def test_clear_day(self, store, league):
        tournament_id, team_ids = league
        store.generate_day(tournament_id, 2, team_ids, 2)
        tournament = store.clear_day(tournament_id, 2)
        assert {m.day for m in tournament.schedule} == {1}

    def test_delete_match(self, store, league):
        tournament_id, _ = league
        match_id = store.get(tournament_id).schedule[0].id
        tournament = store.delete_match(tournament_id, match_id)
        assert match_id not in [m.id for m in tournament.schedule]
        with pytest.raises(UnknownMatchError):
            store.delete_match(tournament_id, match_id)

    def test_score_updates_standings(self, store, league):
        tournament_id, _ = league
        match = store.get(tournament_id).schedule[0]
        store.update_match_score(tournament_id, match.id, [25, 25], [20, 20])
        standings = {s.team.id: s for s in store.standings(tournament_id)}
        assert standings[match.team1.id].wins == 1
        assert standings[match.team2.id].losses == 1

    def test_score_unknown_match(self, store, league):
        with pytest.raises(UnknownMatchError):
            store.update_match_score(league[0], "nope", [25], [20])


class TestPlayoffCommands:
    """Tests for playoff generation and advancement through the store."""

    def test_generate_playoffs_and_play_to_champion(self, store, league):
        tournament_id, _ = league
        play_all(store, tournament_id)
        byes, pairings = store.auto_seed(tournament_id, 4)
        assert byes == []

        tournament = store.generate_playoffs(
            tournament_id, 4, 3, [(a.id, b.id) for a, b in pairings], [])
        bracket = tournament.playoff_bracket
        assert bracket.sets_to_win == 3
        assert len(bracket.rounds) == 2

        for match in bracket.rounds[0]:
            store.update_match_score(tournament_id, match.id, [25, 25, 25], [10, 10, 10])
        final = store.get(tournament_id).playoff_bracket.rounds[1][0]
        assert final.team1 is not None and final.team2 is not None

        tournament = store.update_match_score(tournament_id, final.id, [10, 10, 10], [25, 25, 25])
        assert tournament.playoff_bracket.rounds[1][0].winner_id == final.team2.id

    def test_playoff_match_uses_bracket_sets_to_win(self, store, league):
        """Two set wins do not decide a best-of-five playoff match."""
        tournament_id, _ = league
        _, pairings = store.auto_seed(tournament_id, 4)
        tournament = store.generate_playoffs(tournament_id, 4, 3, [(a.id, b.id) for a, b in pairings], [])
        match_id = tournament.playoff_bracket.rounds[0][0].id
        tournament = store.update_match_score(tournament_id, match_id, [25, 25, 0], [10, 10, 0])
        assert tournament.playoff_bracket.rounds[0][0].winner_id is None
        assert tournament.playoff_bracket.rounds[1][0].teams() == []

    def test_generate_playoffs_with_byes(self, store, league):
        tournament_id, _ = league
        byes, pairings = store.auto_seed(tournament_id, 5)
        assert len(byes) == 3
        tournament = store.generate_playoffs(
            tournament_id, 5, 2, [(a.id, b.id) for a, b in pairings], [t.id for t in byes])
        assert sum(1 for m in tournament.playoff_bracket.rounds[0] if m.winner_id) == 3

    def test_rescored_playoff_winner_replaces_previous(self, store, league):
        """A flipped semifinal result sends the new winner to the final instead."""
        tournament_id, _ = league
        _, pairings = store.auto_seed(tournament_id, 4)
        bracket = store.generate_playoffs(
            tournament_id, 4, 2, [(a.id, b.id) for a, b in pairings], []).playoff_bracket
        semi1, semi2 = bracket.rounds[0]

        store.update_match_score(tournament_id, semi1.id, [25, 25], [10, 10])
        store.update_match_score(tournament_id, semi1.id, [10, 10], [25, 25])
        store.update_match_score(tournament_id, semi2.id, [25, 25], [10, 10])

        final = store.get(tournament_id).playoff_bracket.rounds[1][0]
        assert {t.id for t in final.teams()} == {semi1.team2.id, semi2.team1.id}

    def test_rescored_to_undecided_withdraws_team(self, store, league):
        tournament_id, _ = league
        _, pairings = store.auto_seed(tournament_id, 4)
        bracket = store.generate_playoffs(
            tournament_id, 4, 2, [(a.id, b.id) for a, b in pairings], []).playoff_bracket
        semi1 = bracket.rounds[0][0]

        store.update_match_score(tournament_id, semi1.id, [25, 25], [10, 10])
        tournament = store.update_match_score(tournament_id, semi1.id, [25], [10])
        assert tournament.playoff_bracket.rounds[0][0].winner_id is None
        assert tournament.playoff_bracket.rounds[1][0].teams() == []

    def test_result_locked_after_final_played(self, store, league):
        tournament_id, _ = league
        _, pairings = store.auto_seed(tournament_id, 4)
        bracket = store.generate_playoffs(
            tournament_id, 4, 2, [(a.id, b.id) for a, b in pairings], []).playoff_bracket
        for match in bracket.rounds[0]:
            store.update_match_score(tournament_id, match.id, [25, 25], [10, 10])
        final_id = bracket.rounds[1][0].id
        store.update_match_score(tournament_id, final_id, [25, 25], [10, 10])

        with pytest.raises(BracketConflictError):
            store.update_match_score(tournament_id, bracket.rounds[0][0].id, [10, 10], [25, 25])
        tournament = store.get(tournament_id)
        assert tournament.playoff_bracket.rounds[0][0].scores['team1'] == [25, 25]
        assert tournament.playoff_bracket.rounds[1][0].winner_id is not None

    def test_bye_match_cannot_be_scored(self, store, league):
        tournament_id, _ = league
        byes, pairings = store.auto_seed(tournament_id, 5)
        bracket = store.generate_playoffs(
            tournament_id, 5, 2, [(a.id, b.id) for a, b in pairings], [t.id for t in byes]).playoff_bracket
        with pytest.raises(BracketConflictError):
            store.update_match_score(tournament_id, bracket.rounds[0][0].id, [0, 0], [25, 25])

    def test_invalid_selection_rejected(self, store, league):
        tournament_id, team_ids = league
        with pytest.raises(PlayoffSetupError):
            store.generate_playoffs(tournament_id, 4, 2, [(team_ids[0], team_ids[1])], [])
        assert store.get(tournament_id).playoff_bracket is None

    def test_schedule_change_resets_bracket(self, store, league):
        tournament_id, _ = league
        _, pairings = store.auto_seed(tournament_id, 2)
        store.generate_playoffs(tournament_id, 2, 2, [(a.id, b.id) for a, b in pairings], [])
        match_id = store.get(tournament_id).schedule[0].id
        assert store.delete_match(tournament_id, match_id).playoff_bracket is None


class TestPersistence:
    """Tests for the YAML file behind the store."""

    def test_store_reloads_from_file(self, tmp_path, store, league):
        tournament_id, _ = league
        reloaded = TournamentStore(path=store.path)
        tournament = reloaded.get(tournament_id)
        assert tournament.name == "Beach Open"
        assert len(tournament.schedule) == 10

    def test_missing_file_loads_empty(self, tmp_path):
        assert load_tournaments(str(tmp_path / "none.yaml")) == []

    def test_empty_file_loads_empty(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_tournaments(str(path)) == []

    def test_corrupt_file_loads_empty(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("tournaments: [unclosed")
        assert load_tournaments(str(path)) == []

    def test_save_writes_plain_yaml(self, tmp_path):
        path = tmp_path / "nested" / "tournaments.yaml"
        save_tournaments(str(path), [Tournament(id="1", name="Cup", sets_to_win=2)])
        data = yaml.safe_load(path.read_text())
        assert data['tournaments'][0]['name'] == "Cup"
        assert data['tournaments'][0]['playoff_bracket'] is None

    def test_in_memory_store_writes_nothing(self, tmp_path):
        store = TournamentStore()
        store.create_tournament("Memory", 2)
        assert list(tmp_path.iterdir()) == []

    def test_failed_write_leaves_state_untouched(self, store, league, monkeypatch):
        tournament_id, _ = league

        def fail(path, tournaments):
            raise OSError("disk full")

        monkeypatch.setattr('tournament_store.save_tournaments', fail)
        with pytest.raises(OSError):
            store.add_team(tournament_id, "Late Entry")
        with pytest.raises(OSError):
            store.create_tournament("Never Saved", 2)
        with pytest.raises(OSError):
            store.delete_tournament(tournament_id)

        assert len(store.get(tournament_id).teams) == 5
        assert [t.name for t in store.list_tournaments()] == ["Beach Open"]

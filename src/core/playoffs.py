"""
Single elimination playoff bracket generation and winner advancement.
"""
import copy
import logging
import math
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import BracketConflictError, InvalidWinnerError, PlayoffSetupError, UnknownMatchError
from .models import PlayoffBracket, PlayoffMatch, Standing, Team

logger = logging.getLogger(__name__)


def get_round_name(round_index: int, total_rounds: int) -> str:
    """Get the display name of a round (0-based index)."""
    matches_in_round = 2 ** (total_rounds - round_index - 1)
    if matches_in_round == 1:
        return "Final"
    elif matches_in_round == 2:
        return "Semifinals"
    else:
        return f"Round {round_index + 1}"


def calculate_bracket_size(num_teams: int) -> int:
    """Calculate the bracket size (next power of 2)."""
    if num_teams <= 0:
        return 0
    return 2 ** math.ceil(math.log2(num_teams))


def calculate_byes(num_teams: int) -> int:
    """Calculate number of byes needed."""
    bracket_size = calculate_bracket_size(num_teams)
    return bracket_size - num_teams


def generate_seed_order(bracket_size: int) -> List[int]:
    """
    Generate the standard tournament seed order for a bracket.

    For 8 teams: [1, 8, 4, 5, 2, 7, 3, 6]
    This gives matchups: 1v8, 4v5, 2v7, 3v6
    Seeds 1 and 2 can only meet in the final.
    """
    order = [1, 2]
    while len(order) < bracket_size:
        total = len(order) * 2 + 1
        next_order = []
        for seed in order:
            next_order.extend([seed, total - seed])
        order = next_order
    return order


def _build_match_shells(bracket_size: int) -> List[List[PlayoffMatch]]:
    """Create empty matches for every round and link each one to its successor."""
    num_rounds = int(math.log2(bracket_size))
    rounds = []
    for r in range(num_rounds):
        num_matches = bracket_size // 2 ** (r + 1)
        rounds.append([
            PlayoffMatch(id=f"p-r{r + 1}-m{m + 1}", round=r + 1, match_number=m + 1)
            for m in range(num_matches)
        ])

    for r in range(num_rounds - 1):
        for m, match in enumerate(rounds[r]):
            match.next_match_id = rounds[r + 1][m // 2].id

    return rounds


def _seed_positions(playoff_teams: List[Team], bracket_size: int) -> List[Optional[Team]]:
    """Place ranked teams at their seed-order positions; unused positions are None."""
    seed_order = generate_seed_order(bracket_size)
    positions: List[Optional[Team]] = [None] * bracket_size
    for rank, team in enumerate(playoff_teams):
        positions[seed_order.index(rank + 1)] = team
    return positions


def _index_matches(rounds: List[List[PlayoffMatch]]) -> Dict[str, PlayoffMatch]:
    return {match.id: match for round_matches in rounds for match in round_matches}


def _place_winner(matches_by_id: Dict[str, PlayoffMatch], match: PlayoffMatch) -> bool:
    """
    Seat the winner of match in its next match: team1 if empty, else team2.

    Returns True when a slot was filled. A winner already seated in the next
    match is left where it is, and occupied slots are never overwritten.
    """
    if not match.winner_id or not match.next_match_id:
        return False
    winner = match.team1 if match.team1 and match.team1.id == match.winner_id else match.team2
    if winner is None:
        return False
    next_match = matches_by_id.get(match.next_match_id)
    if next_match is None:
        return False

    if any(team.id == winner.id for team in next_match.teams()):
        return False
    if next_match.team1 is None:
        next_match.team1 = winner
    elif next_match.team2 is None:
        next_match.team2 = winner
    else:
        logger.warning(f"Cannot advance {winner.name} into {next_match.id}: both slots are taken")
        return False
    return True


def generate_playoff_bracket(standings: List[Standing], num_teams: int, sets_to_win: int,
                             first_round_pairings: List[Tuple[Team, Team]],
                             teams_with_byes: Iterable[Team]) -> PlayoffBracket:
    """
    Build a single elimination bracket for the top num_teams of standings.

    Teams are placed by standard seed order. A first-round team facing an
    empty bracket position, or holding a caller-selected bye, wins its match
    automatically and is advanced. The remaining playable first-round matches
    are filled in order from first_round_pairings.

    standings must already be ranked best-first. Pairings and byes are
    expected to be validated by the caller (see validate_playoff_selection).
    """
    if num_teams < 2:
        return PlayoffBracket(rounds=[], sets_to_win=sets_to_win)

    playoff_teams = [standing.team for standing in standings[:num_teams]]
    bracket_size = calculate_bracket_size(num_teams)
    rounds = _build_match_shells(bracket_size)

    positions = _seed_positions(playoff_teams, bracket_size)

    bye_ids = {team.id for team in teams_with_byes}
    playable_slots = []
    for i, match in enumerate(rounds[0]):
        team1 = positions[i * 2]
        team2 = positions[i * 2 + 1]

        if team1 and team1.id in bye_ids:
            match.team1 = team1
            match.winner_id = team1.id
        if team2 and team2.id in bye_ids:
            match.team2 = team2
            match.winner_id = team2.id

        if team1 and not team2:
            match.team1 = team1
            match.winner_id = team1.id
        elif team2 and not team1:
            match.team2 = team2
            match.winner_id = team2.id

        if team1 and team2 and not match.winner_id:
            playable_slots.append(match)

    if len(playable_slots) != len(first_round_pairings):
        logger.warning(
            f"Pairing count mismatch: {len(playable_slots)} playable first-round matches, "
            f"{len(first_round_pairings)} pairings supplied. Bracket may be incomplete."
        )
    for match, (team1, team2) in zip(playable_slots, first_round_pairings):
        match.team1 = team1
        match.team2 = team2

    matches_by_id = _index_matches(rounds)
    for match in rounds[0]:
        _place_winner(matches_by_id, match)

    return PlayoffBracket(rounds=rounds, sets_to_win=sets_to_win)


def find_playoff_match(bracket: PlayoffBracket, match_id: str) -> Optional[PlayoffMatch]:
    """Find a match anywhere in the bracket by id."""
    return _index_matches(bracket.rounds).get(match_id)


def _unseat_winner(matches_by_id: Dict[str, PlayoffMatch], match: PlayoffMatch, team_id: str):
    """
    Take team_id back out of the match its win in match had sent it to.

    Raises BracketConflictError once that next match has a result, since the
    team has already played on.
    """
    next_match = matches_by_id.get(match.next_match_id) if match.next_match_id else None
    if next_match is None:
        return
    for slot in ('team1', 'team2'):
        team = getattr(next_match, slot)
        if team is None or team.id != team_id:
            continue
        if next_match.winner_id:
            raise BracketConflictError(
                f"{team.name} has already played {next_match.id}; clear that result first"
            )
        setattr(next_match, slot, None)
        next_match.scores = {'team1': [], 'team2': []}


def advance_winner(bracket: PlayoffBracket, match_id: str, winner_id: Optional[str]) -> PlayoffBracket:
    """
    Record winner_id on a match and move the winner into the next round.

    Returns a new bracket; the one passed in is not modified. Advancing a
    winner that already sits in the next match changes nothing. A different
    winner, or None for an undecided match, first removes the previous
    winner from the next match.
    """
    updated = copy.deepcopy(bracket)
    matches_by_id = _index_matches(updated.rounds)
    match = matches_by_id.get(match_id)
    if match is None:
        raise UnknownMatchError(f"Playoff match {match_id} not found")
    if winner_id is not None and winner_id not in [team.id for team in match.teams()]:
        raise InvalidWinnerError(f"Team {winner_id} is not playing in {match_id}")

    if match.winner_id and match.winner_id != winner_id:
        _unseat_winner(matches_by_id, match, match.winner_id)
    match.winner_id = winner_id
    _place_winner(matches_by_id, match)
    return updated


def get_champion(bracket: Optional[PlayoffBracket]) -> Optional[Team]:
    """Return the winner of the final, or None while it is undecided."""
    if not bracket or not bracket.rounds:
        return None
    final = bracket.rounds[-1][0]
    if not final.winner_id:
        return None
    for team in final.teams():
        if team.id == final.winner_id:
            return team
    return None


def auto_seed_pairings(standings: List[Standing], num_teams: int,
                       teams_with_byes: Iterable[Team]) -> List[Tuple[Team, Team]]:
    """
    Suggest first-round pairings from the seeded bracket positions.

    Pairings come in playable-slot order (seed 1's half first), so feeding
    them back into generate_playoff_bracket keeps seeds 1 and 2 apart until
    the final. With the top seeds on byes this pairs the best remaining team
    against the worst remaining one.
    """
    if num_teams < 2:
        return []
    bye_ids = {team.id for team in teams_with_byes}
    positions = _seed_positions([s.team for s in standings[:num_teams]], calculate_bracket_size(num_teams))
    pairings = []
    for i in range(0, len(positions), 2):
        team1, team2 = positions[i], positions[i + 1]
        if team1 and team2 and team1.id not in bye_ids and team2.id not in bye_ids:
            pairings.append((team1, team2))
    return pairings


def validate_playoff_selection(standings: List[Standing], num_teams: int,
                               first_round_pairings: List[Tuple[Team, Team]],
                               teams_with_byes: Iterable[Team]) -> None:
    """
    Check a playoff selection before the bracket is built.

    Raises PlayoffSetupError describing the first problem found.
    """
    if num_teams < 2:
        raise PlayoffSetupError("At least 2 teams are required for a playoff bracket.")
    if num_teams > len(standings):
        raise PlayoffSetupError(f"Only {len(standings)} teams are available for the playoffs.")

    field_ids = {s.team.id for s in standings[:num_teams]}
    bye_ids = {team.id for team in teams_with_byes}
    num_byes = calculate_byes(num_teams)
    if len(bye_ids) != num_byes:
        raise PlayoffSetupError(f"Please select exactly {num_byes} team(s) to receive a bye.")
    if not bye_ids <= field_ids:
        raise PlayoffSetupError("Bye teams must be part of the playoff field.")

    used_ids = set()
    for team1, team2 in first_round_pairings:
        if team1 is None or team2 is None:
            raise PlayoffSetupError("All matches must have two teams selected.")
        if team1.id == team2.id:
            raise PlayoffSetupError("A team cannot be matched against itself.")
        for team in (team1, team2):
            if team.id in used_ids or team.id in bye_ids:
                raise PlayoffSetupError("Each team can only be assigned to one match in the first round.")
            if team.id not in field_ids:
                raise PlayoffSetupError(f"{team.name} is not part of the playoff field.")
            used_ids.add(team.id)

    if used_ids != field_ids - bye_ids:
        raise PlayoffSetupError(
            f"Expected {(num_teams - num_byes) // 2} first-round pairings, got {len(first_round_pairings)}."
        )

    # A bye seeded against a real team would knock that team out of the bracket.
    positions = _seed_positions([s.team for s in standings[:num_teams]], calculate_bracket_size(num_teams))
    for i in range(0, len(positions), 2):
        team1, team2 = positions[i], positions[i + 1]
        if team1 and team2 and (team1.id in bye_ids or team2.id in bye_ids):
            raise PlayoffSetupError(
                f"Byes must go to the teams without a first-round opponent: {', '.join(t.name for t in default_bye_teams(standings, num_teams))}."
            )


def default_bye_teams(standings: List[Standing], num_teams: int) -> List[Team]:
    """Teams seeded against an empty bracket position, i.e. the top seeds."""
    return [s.team for s in standings[:calculate_byes(num_teams)]] if num_teams >= 2 else []

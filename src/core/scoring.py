"""
Set counting and winner detection for match score entry.
"""
from typing import List, Optional, Tuple


def sets_per_match(sets_to_win: int) -> int:
    """Maximum number of sets in a match (1 set, best of 3, best of 5...)."""
    return 1 if sets_to_win == 1 else sets_to_win * 2 - 1


def count_sets(team1_scores: List[int], team2_scores: List[int]) -> Tuple[int, int]:
    """Count sets won by each side. Missing or empty scores count as 0."""
    team1_sets = 0
    team2_sets = 0
    for i in range(max(len(team1_scores), len(team2_scores))):
        score1 = _score_at(team1_scores, i)
        score2 = _score_at(team2_scores, i)
        if score1 > score2:
            team1_sets += 1
        elif score2 > score1:
            team2_sets += 1
    return team1_sets, team2_sets


def _score_at(scores, index):
    if index >= len(scores) or scores[index] is None:
        return 0
    return scores[index]


def determine_winner(team1_scores: List[int], team2_scores: List[int], sets_to_win: int) -> Optional[int]:
    """Return 0 if team1 won, 1 if team2 won, None if the match is undecided."""
    team1_sets, team2_sets = count_sets(team1_scores, team2_scores)
    if team1_sets >= sets_to_win:
        return 0
    elif team2_sets >= sets_to_win:
        return 1
    return None


def winner_id_for(match, team1_scores: List[int], team2_scores: List[int], sets_to_win: int) -> Optional[str]:
    """Id of the team these scores make the winner of match, or None."""
    winner_idx = determine_winner(team1_scores, team2_scores, sets_to_win)
    if winner_idx == 0 and match.team1:
        return match.team1.id
    elif winner_idx == 1 and match.team2:
        return match.team2.id
    return None


def apply_score(match, team1_scores: List[int], team2_scores: List[int], sets_to_win: int) -> Optional[str]:
    """
    Store scores on a league or playoff match and recompute its winner.

    Returns the new winner_id (None if undecided).
    """
    match.scores = {'team1': list(team1_scores), 'team2': list(team2_scores)}
    match.winner_id = winner_id_for(match, team1_scores, team2_scores, sets_to_win)
    return match.winner_id

"""
Standings aggregation from completed round-robin matches.
"""
from typing import List

from .models import Match, Standing, Team
from .scoring import count_sets


def calculate_standings(teams: List[Team], matches: List[Match]) -> List[Standing]:
    """
    Calculate standings for all teams based on decided matches.

    Ranking: wins -> set_differential -> point_differential (all descending).
    Teams that remain tied keep the order they have in `teams`.
    """
    stats = {team.id: Standing(team) for team in teams}

    for match in matches:
        if not match.winner_id:
            continue

        loser_id = match.team2.id if match.winner_id == match.team1.id else match.team1.id
        if match.winner_id in stats:
            stats[match.winner_id].wins += 1
        if loser_id in stats:
            stats[loser_id].losses += 1

        team1_scores = match.scores.get('team1', [])
        team2_scores = match.scores.get('team2', [])
        team1_sets, team2_sets = count_sets(team1_scores, team2_scores)
        team1_points = sum(score or 0 for score in team1_scores)
        team2_points = sum(score or 0 for score in team2_scores)

        if match.team1.id in stats:
            standing = stats[match.team1.id]
            standing.sets_won += team1_sets
            standing.sets_lost += team2_sets
            standing.points_for += team1_points
            standing.points_against += team2_points
        if match.team2.id in stats:
            standing = stats[match.team2.id]
            standing.sets_won += team2_sets
            standing.sets_lost += team1_sets
            standing.points_for += team2_points
            standing.points_against += team1_points

    return sorted(stats.values(), key=lambda s: (-s.wins, -s.set_diff, -s.point_diff))

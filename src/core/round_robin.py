"""
Round-robin day scheduling using the circle method.
"""
import random
import uuid
from typing import List, Optional, Tuple

from .errors import INSUFFICIENT_TEAMS_MESSAGE, INVALID_COURT_COUNT_MESSAGE
from .models import BYE, Match, Team


def generate_round_robin_rounds(teams: List[Team], rng: Optional[random.Random] = None) -> List[List[Tuple[Team, Team]]]:
    """
    Generate the pairings of a full round-robin for the given teams.

    An odd field gets a BYE slot; pairings against it are dropped, so the team
    drawn against the bye sits that round out. Home/away order inside each
    pairing is randomized.

    Returns a list of rounds, each a list of (team1, team2) tuples.
    """
    rng = rng or random.Random()
    slots = list(teams)
    if len(slots) % 2 != 0:
        slots.append(BYE)

    num_slots = len(slots)
    rounds = []
    for _ in range(num_slots - 1):
        round_pairings = []
        for i in range(num_slots // 2):
            team1 = slots[i]
            team2 = slots[num_slots - 1 - i]
            if team1 is BYE or team2 is BYE:
                continue
            if rng.random() > 0.5:
                round_pairings.append((team1, team2))
            else:
                round_pairings.append((team2, team1))
        rounds.append(round_pairings)

        # Slot 0 is the anchor; the last slot moves to index 1.
        slots.insert(1, slots.pop())

    return rounds


def generate_schedule(teams_for_day: List[Team], day: int, num_courts: int,
                      rng: Optional[random.Random] = None) -> Tuple[List[Match], Optional[str]]:
    """
    Generate one day of round-robin matches spread across courts.

    Rounds are played in shuffled order and matches are shuffled within each
    round; courts are assigned round-robin over the flattened order, so every
    num_courts consecutive matches form one time slot.

    Returns (schedule, error). On invalid input the schedule is empty and
    error holds a human readable message; nothing is raised.
    """
    if len(teams_for_day) < 2:
        return [], INSUFFICIENT_TEAMS_MESSAGE
    if num_courts < 1:
        return [], INVALID_COURT_COUNT_MESSAGE

    rng = rng or random.Random()
    rounds = generate_round_robin_rounds(teams_for_day, rng)
    rng.shuffle(rounds)

    batch = uuid.uuid4().hex[:8]
    schedule = []
    for round_pairings in rounds:
        rng.shuffle(round_pairings)
        for team1, team2 in round_pairings:
            index = len(schedule)
            schedule.append(Match(
                id=f"match-d{day}-{batch}-{index}",
                team1=team1,
                team2=team2,
                day=day,
                court=(index % num_courts) + 1,
            ))

    return schedule, None


def group_time_slots(schedule: List[Match], num_courts: int) -> List[List[Match]]:
    """Split a day's ordered matches into time slots of num_courts matches."""
    if num_courts < 1:
        return []
    return [schedule[i:i + num_courts] for i in range(0, len(schedule), num_courts)]

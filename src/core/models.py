class Team:
    def __init__(self, id, name):
        self.id = id
        self.name = name

    def __eq__(self, other):
        return isinstance(other, Team) and self.id == other.id

    def __hash__(self):
        return hash(self.id)

    def __repr__(self):
        return f"Team(id={self.id}, name={self.name})"

    def to_dict(self):
        return {'id': self.id, 'name': self.name}

    @classmethod
    def from_dict(cls, data):
        return cls(id=str(data['id']), name=data['name'])


class Bye:
    """Empty slot used to balance an odd round-robin field. Never a team."""

    def __repr__(self):
        return "BYE"


BYE = Bye()


def _empty_scores():
    return {'team1': [], 'team2': []}


def _team_or_none(data):
    return Team.from_dict(data) if data else None


class Match:
    def __init__(self, id, team1, team2, day, court, scores=None, winner_id=None):
        self.id = id
        self.team1 = team1
        self.team2 = team2
        self.day = day
        self.court = court
        self.scores = scores if scores else _empty_scores()
        self.winner_id = winner_id

    def __repr__(self):
        return (f"Match(id={self.id}, day={self.day}, court={self.court}, "
                f"team1={self.team1.name}, team2={self.team2.name})")

    def to_dict(self):
        return {
            'id': self.id,
            'team1': self.team1.to_dict(),
            'team2': self.team2.to_dict(),
            'scores': {'team1': list(self.scores['team1']), 'team2': list(self.scores['team2'])},
            'winner_id': self.winner_id,
            'day': self.day,
            'court': self.court,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            team1=Team.from_dict(data['team1']),
            team2=Team.from_dict(data['team2']),
            day=data['day'],
            court=data['court'],
            scores=data.get('scores'),
            winner_id=data.get('winner_id'),
        )


class Standing:
    def __init__(self, team, wins=0, losses=0, sets_won=0, sets_lost=0, points_for=0, points_against=0):
        self.team = team
        self.wins = wins
        self.losses = losses
        self.sets_won = sets_won
        self.sets_lost = sets_lost
        self.points_for = points_for
        self.points_against = points_against

    @property
    def set_diff(self):
        return self.sets_won - self.sets_lost

    @property
    def point_diff(self):
        return self.points_for - self.points_against

    def __repr__(self):
        return (f"Standing(team={self.team.name}, wins={self.wins}, losses={self.losses}, "
                f"set_diff={self.set_diff}, point_diff={self.point_diff})")

    def to_dict(self):
        return {
            'team': self.team.to_dict(),
            'wins': self.wins,
            'losses': self.losses,
            'sets_won': self.sets_won,
            'sets_lost': self.sets_lost,
            'set_diff': self.set_diff,
            'points_for': self.points_for,
            'points_against': self.points_against,
            'point_diff': self.point_diff,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            team=Team.from_dict(data['team']),
            wins=data.get('wins', 0),
            losses=data.get('losses', 0),
            sets_won=data.get('sets_won', 0),
            sets_lost=data.get('sets_lost', 0),
            points_for=data.get('points_for', 0),
            points_against=data.get('points_against', 0),
        )


class PlayoffMatch:
    def __init__(self, id, round, match_number, team1=None, team2=None, scores=None,
                 winner_id=None, next_match_id=None):
        self.id = id
        self.round = round
        self.match_number = match_number
        self.team1 = team1
        self.team2 = team2
        self.scores = scores if scores else _empty_scores()
        self.winner_id = winner_id
        self.next_match_id = next_match_id

    def teams(self):
        """Teams currently seated in this match, team1 first."""
        return [team for team in (self.team1, self.team2) if team is not None]

    def __repr__(self):
        return (f"PlayoffMatch(id={self.id}, team1={self.team1}, team2={self.team2}, "
                f"winner_id={self.winner_id}, next_match_id={self.next_match_id})")

    def to_dict(self):
        return {
            'id': self.id,
            'round': self.round,
            'match_number': self.match_number,
            'team1': self.team1.to_dict() if self.team1 else None,
            'team2': self.team2.to_dict() if self.team2 else None,
            'scores': {'team1': list(self.scores['team1']), 'team2': list(self.scores['team2'])},
            'winner_id': self.winner_id,
            'next_match_id': self.next_match_id,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            round=data['round'],
            match_number=data['match_number'],
            team1=_team_or_none(data.get('team1')),
            team2=_team_or_none(data.get('team2')),
            scores=data.get('scores'),
            winner_id=data.get('winner_id'),
            next_match_id=data.get('next_match_id'),
        )


class PlayoffBracket:
    def __init__(self, rounds, sets_to_win):
        self.rounds = rounds
        self.sets_to_win = sets_to_win

    def __repr__(self):
        return f"PlayoffBracket(rounds={len(self.rounds)}, sets_to_win={self.sets_to_win})"

    def to_dict(self):
        return {
            'rounds': [[match.to_dict() for match in round_matches] for round_matches in self.rounds],
            'sets_to_win': self.sets_to_win,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            rounds=[[PlayoffMatch.from_dict(m) for m in round_matches] for round_matches in data.get('rounds', [])],
            sets_to_win=data['sets_to_win'],
        )


class Tournament:
    def __init__(self, id, name, sets_to_win, teams=None, schedule=None, playoff_bracket=None):
        self.id = id
        self.name = name
        self.sets_to_win = sets_to_win
        self.teams = teams if teams else []
        self.schedule = schedule if schedule else []
        self.playoff_bracket = playoff_bracket

    def __repr__(self):
        return f"Tournament(id={self.id}, name={self.name}, teams={len(self.teams)}, matches={len(self.schedule)})"

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'sets_to_win': self.sets_to_win,
            'teams': [team.to_dict() for team in self.teams],
            'schedule': [match.to_dict() for match in self.schedule],
            'playoff_bracket': self.playoff_bracket.to_dict() if self.playoff_bracket else None,
        }

    @classmethod
    def from_dict(cls, data):
        bracket = data.get('playoff_bracket')
        return cls(
            id=str(data['id']),
            name=data['name'],
            sets_to_win=data.get('sets_to_win', 2),
            teams=[Team.from_dict(t) for t in data.get('teams') or []],
            schedule=[Match.from_dict(m) for m in data.get('schedule') or []],
            playoff_bracket=PlayoffBracket.from_dict(bracket) if bracket else None,
        )

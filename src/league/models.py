STATUS_SCHEDULED = 'scheduled'
STATUS_LIVE = 'live'
STATUS_COMPLETED = 'completed'
MATCH_STATUSES = (STATUS_SCHEDULED, STATUS_LIVE, STATUS_COMPLETED)

KNOCKOUT_GROUP = 'knockout'

QUARTER = 'QUARTER'
SEMI = 'SEMI'
FINAL = 'FINAL'
KNOCKOUT_ROUNDS = (QUARTER, SEMI, FINAL)

CARD_YELLOW = 'yellow'
CARD_RED = 'red'


class Player:
    def __init__(self, id, name, number=None, position='', team_id=None):
        self.id = id
        self.name = name
        self.number = number
        self.position = position
        self.team_id = team_id

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'number': self.number,
            'position': self.position,
            'team_id': self.team_id,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data.get('id'),
            name=data.get('name'),
            number=data.get('number'),
            position=data.get('position', ''),
            team_id=data.get('team_id'),
        )

    def __repr__(self):
        return f"Player(id={self.id}, name={self.name}, number={self.number})"


class Team:
    def __init__(self, id, name, group_id, players=None):
        self.id = id
        self.name = name
        self.group_id = group_id
        self.players = players if players else []

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'group_id': self.group_id,
            'players': [player.to_dict() for player in self.players],
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data.get('id'),
            name=data.get('name'),
            group_id=data.get('group_id'),
            players=[Player.from_dict(p) for p in data.get('players') or []],
        )

    def __repr__(self):
        return f"Team(id={self.id}, name={self.name}, group_id={self.group_id})"


class Goal:
    def __init__(self, match_id, player_id, team_id, minute=0, player_name='', team_name='', id=None):
        self.id = id
        self.match_id = match_id
        self.player_id = player_id
        self.team_id = team_id
        self.minute = minute
        self.player_name = player_name
        self.team_name = team_name

    def to_dict(self):
        return {
            'id': self.id,
            'match_id': self.match_id,
            'player_id': self.player_id,
            'team_id': self.team_id,
            'minute': self.minute,
            'player_name': self.player_name,
            'team_name': self.team_name,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data.get('id'),
            match_id=data.get('match_id'),
            player_id=data.get('player_id'),
            team_id=data.get('team_id'),
            minute=data.get('minute', 0),
            player_name=data.get('player_name', ''),
            team_name=data.get('team_name', ''),
        )

    def __repr__(self):
        return f"Goal(player={self.player_name}, team={self.team_name}, minute={self.minute})"


class Card:
    def __init__(self, match_id, player_id, team_id, type=CARD_YELLOW, minute=0,
                 player_name='', team_name='', id=None):
        self.id = id
        self.match_id = match_id
        self.player_id = player_id
        self.team_id = team_id
        self.type = type
        self.minute = minute
        self.player_name = player_name
        self.team_name = team_name

    def to_dict(self):
        return {
            'id': self.id,
            'match_id': self.match_id,
            'player_id': self.player_id,
            'team_id': self.team_id,
            'type': self.type,
            'minute': self.minute,
            'player_name': self.player_name,
            'team_name': self.team_name,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data.get('id'),
            match_id=data.get('match_id'),
            player_id=data.get('player_id'),
            team_id=data.get('team_id'),
            type=data.get('type', CARD_YELLOW),
            minute=data.get('minute', 0),
            player_name=data.get('player_name', ''),
            team_name=data.get('team_name', ''),
        )

    def __repr__(self):
        return f"Card(type={self.type}, player={self.player_name}, minute={self.minute})"


class Match:
    def __init__(self, home_team_id, away_team_id, group_id, id=None,
                 home_team_name='', away_team_name='', date='', time='', venue='',
                 home_score=0, away_score=0, status=STATUS_SCHEDULED, goals=None, cards=None):
        self.id = id
        self.group_id = group_id
        self.home_team_id = home_team_id
        self.away_team_id = away_team_id
        self.home_team_name = home_team_name
        self.away_team_name = away_team_name
        self.date = date  # '' while unscheduled
        self.time = time
        self.venue = venue
        self.home_score = home_score
        self.away_score = away_score
        self.status = status
        self.goals = goals if goals else []
        self.cards = cards if cards else {'home': [], 'away': []}

    @property
    def team_ids(self):
        return (self.home_team_id, self.away_team_id)

    @property
    def is_scheduled(self):
        return self.date != ''

    @property
    def is_completed(self):
        return self.status == STATUS_COMPLETED

    def to_dict(self):
        return {
            'id': self.id,
            'group_id': self.group_id,
            'home_team_id': self.home_team_id,
            'away_team_id': self.away_team_id,
            'home_team_name': self.home_team_name,
            'away_team_name': self.away_team_name,
            'date': self.date,
            'time': self.time,
            'venue': self.venue,
            'home_score': self.home_score,
            'away_score': self.away_score,
            'status': self.status,
            'goals': [goal.to_dict() for goal in self.goals],
            'cards': {
                'home': [card.to_dict() for card in self.cards.get('home', [])],
                'away': [card.to_dict() for card in self.cards.get('away', [])],
            },
        }

    @classmethod
    def from_dict(cls, data):
        """Build a Match, or a KnockoutMatch when the record carries a round."""
        if data.get('round') and cls is Match:
            return KnockoutMatch.from_dict(data)
        cards = data.get('cards') or {}
        return cls(**cls._common_kwargs(data), cards={
            'home': [Card.from_dict(c) for c in cards.get('home') or []],
            'away': [Card.from_dict(c) for c in cards.get('away') or []],
        })

    @staticmethod
    def _common_kwargs(data):
        return {
            'id': data.get('id'),
            'group_id': data.get('group_id'),
            'home_team_id': data.get('home_team_id'),
            'away_team_id': data.get('away_team_id'),
            'home_team_name': data.get('home_team_name') or '',
            'away_team_name': data.get('away_team_name') or '',
            'date': data.get('date') or '',
            'time': data.get('time') or '',
            'venue': data.get('venue') or '',
            'home_score': data.get('home_score', 0),
            'away_score': data.get('away_score', 0),
            'status': data.get('status', STATUS_SCHEDULED),
            'goals': [Goal.from_dict(g) for g in data.get('goals') or []],
        }

    def __repr__(self):
        return (f"Match(id={self.id}, group={self.group_id}, {self.home_team_name or self.home_team_id} vs "
                f"{self.away_team_name or self.away_team_id}, date={self.date}, time={self.time}, "
                f"status={self.status})")


class KnockoutMatch(Match):
    def __init__(self, round, match_number, next_match_number=None, winner=None, **kwargs):
        kwargs.setdefault('home_team_id', None)
        kwargs.setdefault('away_team_id', None)
        kwargs.setdefault('group_id', KNOCKOUT_GROUP)
        super().__init__(**kwargs)
        self.round = round
        self.match_number = match_number
        self.next_match_number = next_match_number
        self.winner = winner  # {'id': ..., 'name': ...} once decided

    @property
    def is_seeded(self):
        return bool(self.home_team_id) and bool(self.away_team_id)

    def to_dict(self):
        data = super().to_dict()
        data.update({
            'round': self.round,
            'match_number': self.match_number,
            'next_match_number': self.next_match_number,
            'winner': dict(self.winner) if self.winner else None,
        })
        return data

    @classmethod
    def from_dict(cls, data):
        cards = data.get('cards') or {}
        winner = data.get('winner')
        return cls(
            round=data.get('round'),
            match_number=data.get('match_number'),
            next_match_number=data.get('next_match_number'),
            winner=dict(winner) if winner else None,
            cards={
                'home': [Card.from_dict(c) for c in cards.get('home') or []],
                'away': [Card.from_dict(c) for c in cards.get('away') or []],
            },
            **Match._common_kwargs(data),
        )

    def __repr__(self):
        return (f"KnockoutMatch(round={self.round}, match_number={self.match_number}, "
                f"{self.home_team_name or '?'} vs {self.away_team_name or '?'}, status={self.status})")


class Standing:
    def __init__(self, team_id, team_name, group_id, matches_played=0, wins=0, draws=0, losses=0,
                 goals_for=0, goals_against=0, points=0):
        self.id = team_id
        self.team_id = team_id
        self.team_name = team_name
        self.group_id = group_id
        self.matches_played = matches_played
        self.wins = wins
        self.draws = draws
        self.losses = losses
        self.goals_for = goals_for
        self.goals_against = goals_against
        self.points = points

    @property
    def goal_difference(self):
        return self.goals_for - self.goals_against

    def to_dict(self):
        return {
            'id': self.id,
            'team_id': self.team_id,
            'team_name': self.team_name,
            'group_id': self.group_id,
            'matches_played': self.matches_played,
            'wins': self.wins,
            'draws': self.draws,
            'losses': self.losses,
            'goals_for': self.goals_for,
            'goals_against': self.goals_against,
            'goal_difference': self.goal_difference,
            'points': self.points,
        }

    @classmethod
    def from_dict(cls, data):
        # goal_difference is derived, the stored copy is ignored
        return cls(
            team_id=data.get('team_id') or data.get('id'),
            team_name=data.get('team_name', ''),
            group_id=data.get('group_id'),
            matches_played=data.get('matches_played', 0),
            wins=data.get('wins', 0),
            draws=data.get('draws', 0),
            losses=data.get('losses', 0),
            goals_for=data.get('goals_for', 0),
            goals_against=data.get('goals_against', 0),
            points=data.get('points', 0),
        )

    def __eq__(self, other):
        if not isinstance(other, Standing):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"Standing(team={self.team_name}, group={self.group_id}, played={self.matches_played}, "
                f"points={self.points}, gd={self.goal_difference})")

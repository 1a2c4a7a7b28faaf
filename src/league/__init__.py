from .errors import (
    LeagueError,
    InfeasibleScheduleError,
    StaleStateWarning,
    TransientStoreError,
    UnknownRecordError,
    ValidationError,
)
from .models import Card, Goal, KnockoutMatch, Match, Player, Standing, Team
from .repository import InMemoryRepository, Repository, YamlRepository
from .service import TournamentService

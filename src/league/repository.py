"""
Persistence gateway for teams, matches, goals, cards and standings.

``Repository`` implements the record operations on top of two primitives,
``_read(collection)`` and ``_write(collection, records)``. Records are plain
dicts, so any document store can sit underneath. Two stores are provided:
an in-memory one for tests and a YAML one that keeps one file per collection
in a data directory guarded by a file lock.
"""
import copy
import logging
import os
import threading
import uuid
from contextlib import contextmanager
from typing import Dict, Iterable, List, Optional, Sequence

import yaml
from filelock import FileLock, Timeout

from .errors import TransientStoreError, UnknownRecordError
from .models import Card, Goal, Match, Standing, Team

logger = logging.getLogger(__name__)

TEAMS = 'teams'
MATCHES = 'matches'
GOALS = 'goals'
CARDS = 'cards'
STANDINGS = 'standings'
COLLECTIONS = (TEAMS, MATCHES, GOALS, CARDS, STANDINGS)


def new_id() -> str:
    return uuid.uuid4().hex


def _plain(value):
    """Convert model objects and tuples to YAML-safe builtins."""
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


class Repository:
    """Record operations shared by every store."""

    def _read(self, collection: str) -> List[Dict]:
        raise NotImplementedError

    def _write(self, collection: str, records: List[Dict]):
        raise NotImplementedError

    @contextmanager
    def lock(self):
        """Serialize a read-modify-write sequence."""
        raise NotImplementedError
        yield

    # Teams

    def list_teams(self, group: Optional[str] = None) -> List[Team]:
        teams = [Team.from_dict(r) for r in self._read(TEAMS)]
        if group is not None:
            teams = [t for t in teams if t.group_id == group]
        return teams

    def save_team(self, team: Team) -> Team:
        """Insert or replace a team, assigning an id when it has none."""
        if not team.id:
            team.id = new_id()
        with self.lock():
            records = [r for r in self._read(TEAMS) if r.get('id') != team.id]
            records.append(team.to_dict())
            self._write(TEAMS, records)
        return team

    def delete_team(self, team_id: str):
        with self.lock():
            self._write(TEAMS, [r for r in self._read(TEAMS) if r.get('id') != team_id])

    # Matches

    def list_matches(self, status: Optional[str] = None, round=None) -> List[Match]:
        """All matches, optionally filtered by status and knockout round (a name or a list of names)."""
        rounds = None
        if round is not None:
            rounds = {round} if isinstance(round, str) else set(round)
        matches = []
        for record in self._read(MATCHES):
            if status is not None and record.get('status') != status:
                continue
            if rounds is not None and record.get('round') not in rounds:
                continue
            matches.append(Match.from_dict(record))
        return matches

    def get_match(self, match_id: str) -> Optional[Match]:
        for record in self._read(MATCHES):
            if record.get('id') == match_id:
                return Match.from_dict(record)
        return None

    def replace_all_matches(self, matches: Sequence[Match]) -> List[Match]:
        """Delete every stored match, then store ``matches`` with fresh ids."""
        for match in matches:
            match.id = new_id()
        with self.lock():
            self._write(MATCHES, [m.to_dict() for m in matches])
        logger.info('Replaced all matches with %d new ones', len(matches))
        return list(matches)

    def add_matches(self, matches: Sequence[Match]) -> List[Match]:
        for match in matches:
            if not match.id:
                match.id = new_id()
        with self.lock():
            records = self._read(MATCHES)
            records.extend(m.to_dict() for m in matches)
            self._write(MATCHES, records)
        return list(matches)

    def update_match(self, match_id: str, fields: Dict):
        """Set ``fields`` on one match. Raises UnknownRecordError for an unknown id."""
        fields = _plain(fields)
        fields.pop('id', None)
        with self.lock():
            records = self._read(MATCHES)
            for record in records:
                if record.get('id') == match_id:
                    record.update(fields)
                    break
            else:
                raise UnknownRecordError(f'Unknown match: {match_id}')
            self._write(MATCHES, records)

    def delete_matches(self, match_ids: Iterable[str]) -> int:
        doomed = set(match_ids)
        with self.lock():
            records = self._read(MATCHES)
            kept = [r for r in records if r.get('id') not in doomed]
            self._write(MATCHES, kept)
        return len(records) - len(kept)

    # Standings

    def list_standings(self) -> List[Standing]:
        return [Standing.from_dict(r) for r in self._read(STANDINGS)]

    def replace_all_standings(self, standings: Sequence[Standing]):
        with self.lock():
            self._write(STANDINGS, [s.to_dict() for s in standings])

    # Goals and cards

    def list_goals(self) -> List[Goal]:
        return [Goal.from_dict(r) for r in self._read(GOALS)]

    def add_goal(self, goal: Goal) -> str:
        """Store a goal and append it to its match. Returns the new goal id."""
        goal.id = new_id()
        with self.lock():
            goals = self._read(GOALS)
            goals.append(goal.to_dict())
            self._write(GOALS, goals)

            matches = self._read(MATCHES)
            for record in matches:
                if record.get('id') == goal.match_id:
                    record.setdefault('goals', []).append(goal.to_dict())
                    self._write(MATCHES, matches)
                    break
        return goal.id

    def list_cards(self) -> List[Card]:
        return [Card.from_dict(r) for r in self._read(CARDS)]

    def add_card(self, card: Card) -> str:
        """Store a card and attach it to the home or away side of its match."""
        card.id = new_id()
        with self.lock():
            cards = self._read(CARDS)
            cards.append(card.to_dict())
            self._write(CARDS, cards)

            matches = self._read(MATCHES)
            for record in matches:
                if record.get('id') != card.match_id:
                    continue
                if card.team_id == record.get('home_team_id'):
                    side = 'home'
                elif card.team_id == record.get('away_team_id'):
                    side = 'away'
                else:
                    break
                record.setdefault('cards', {'home': [], 'away': []}).setdefault(side, []).append(card.to_dict())
                self._write(MATCHES, matches)
                break
        return card.id


class InMemoryRepository(Repository):
    """Dict-backed store. Reads hand out copies so callers cannot alias stored state."""

    def __init__(self):
        self._collections = {name: [] for name in COLLECTIONS}
        self._lock = threading.RLock()

    @contextmanager
    def lock(self):
        with self._lock:
            yield

    def _read(self, collection):
        return copy.deepcopy(self._collections[collection])

    def _write(self, collection, records):
        self._collections[collection] = copy.deepcopy(list(records))


class YamlRepository(Repository):
    """One YAML file per collection inside ``data_dir``."""

    def __init__(self, data_dir: str, lock_timeout: float = 10):
        self.data_dir = data_dir
        os.makedirs(data_dir, exist_ok=True)
        self._file_lock = FileLock(os.path.join(data_dir, '.lock'), timeout=lock_timeout)

    def _path(self, collection: str) -> str:
        return os.path.join(self.data_dir, f'{collection}.yaml')

    @contextmanager
    def lock(self):
        try:
            self._file_lock.acquire()
        except Timeout as e:
            raise TransientStoreError(f'Timed out waiting for {self._file_lock.lock_file}') from e
        try:
            yield
        finally:
            self._file_lock.release()

    def _read(self, collection):
        path = self._path(collection)
        if not os.path.exists(path):
            return []
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise TransientStoreError(f'Failed to read {path}: {e}') from e
        if not data:
            return []
        return data.get(collection, []) if isinstance(data, dict) else list(data)

    def _write(self, collection, records):
        path = self._path(collection)
        try:
            with self.lock():
                with open(path, 'w', encoding='utf-8') as f:
                    yaml.dump({collection: _plain(list(records))}, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            raise TransientStoreError(f'Failed to write {path}: {e}') from e

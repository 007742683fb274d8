# client/entitlements.py
"""
Client-local entitlement tracking.

Free-trial usage and the subscribed flag live in client-side storage keyed
by user id. The analysis endpoint does not check either, so this gate is
advisory: a client calling the endpoint directly bypasses it.
"""
from __future__ import annotations

import json
import logging
import threading
from collections.abc import MutableMapping
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Union

logger = logging.getLogger(__name__)

FREE_TRIAL_LIMIT = 1

TRIAL_KEY = "healpet_trial_{user_id}"
SUBSCRIPTION_KEY = "healpet_subscription_{user_id}"


class LocalStorage(MutableMapping):
    """
    String key/value store persisted to a JSON file.

    Every write rewrites the file. A missing or corrupt file reads as empty.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)
        self._lock = threading.Lock()
        self._data = self._load()

    def _load(self) -> dict:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Ignoring corrupt storage file {self._path}")
            return {}
        return {str(k): str(v) for k, v in data.items()} if isinstance(data, dict) else {}

    def _flush(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(self._data, indent=2, sort_keys=True), encoding="utf-8")
        tmp.replace(self._path)

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __setitem__(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = str(value)
            self._flush()

    def __delitem__(self, key: str) -> None:
        with self._lock:
            del self._data[key]
            self._flush()

    def __iter__(self) -> Iterator[str]:
        return iter(dict(self._data))

    def __len__(self) -> int:
        return len(self._data)


@dataclass(frozen=True)
class EntitlementState:
    free_trial_used: int
    is_subscribed: bool

    @property
    def can_analyze(self) -> bool:
        return self.is_subscribed or self.free_trial_used < FREE_TRIAL_LIMIT

    @property
    def remaining_free_trials(self) -> int:
        return max(0, FREE_TRIAL_LIMIT - self.free_trial_used)


class EntitlementStore:
    """Reads and writes entitlement counters for one storage backend."""

    def __init__(self, storage: Optional[MutableMapping] = None):
        self._storage = storage if storage is not None else {}

    def get_state(self, user_id: Optional[str]) -> EntitlementState:
        trial_raw = self._storage.get(TRIAL_KEY.format(user_id=user_id))
        try:
            used = int(trial_raw) if trial_raw is not None else 0
        except ValueError:
            used = 0
        subscribed = self._storage.get(SUBSCRIPTION_KEY.format(user_id=user_id)) == "true"
        return EntitlementState(free_trial_used=used, is_subscribed=subscribed)

    def can_analyze(self, user_id: Optional[str]) -> bool:
        return self.get_state(user_id).can_analyze

    def remaining_free_trials(self, user_id: Optional[str]) -> int:
        return self.get_state(user_id).remaining_free_trials

    def record_analysis(self, user_id: Optional[str]) -> EntitlementState:
        """Count a successful analysis against the free trial (subscribers are not counted)."""
        state = self.get_state(user_id)
        if state.is_subscribed:
            return state
        used = state.free_trial_used + 1
        self._storage[TRIAL_KEY.format(user_id=user_id)] = str(used)
        return EntitlementState(free_trial_used=used, is_subscribed=False)

    def mark_subscribed(self, user_id: Optional[str]) -> EntitlementState:
        """Set after a successful checkout return."""
        self._storage[SUBSCRIPTION_KEY.format(user_id=user_id)] = "true"
        return self.get_state(user_id)

import json
import os
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from smart_invite.core.logging import logger

CACHE_KEY = "smart-invite-cache"
CACHE_DURATION = 24 * 60 * 60  # seconds


@dataclass
class CachedResponse:
    token: str
    num_people: int
    confirmed: bool
    declined: bool
    last_updated: float  # epoch seconds

    def to_json(self) -> Dict:
        return {
            "token": self.token,
            "numPeople": self.num_people,
            "confirmed": self.confirmed,
            "declined": self.declined,
            "lastUpdated": int(self.last_updated * 1000),
        }

    @classmethod
    def from_json(cls, data: Dict) -> "CachedResponse":
        return cls(
            token=data["token"],
            num_people=int(data["numPeople"]),
            confirmed=bool(data["confirmed"]),
            declined=bool(data["declined"]),
            last_updated=data["lastUpdated"] / 1000.0,
        )


class InviteCache:
    """A guest's own last response, kept on their device.

    Advisory only: the server stays authoritative. Storage problems are
    logged and treated as a cache miss.
    """

    def __init__(self, path: str, clock: Callable[[], float] = time.time, duration: float = CACHE_DURATION):
        self.path = path
        self.clock = clock
        self.duration = duration
        self._lock = threading.Lock()

    @staticmethod
    def key(token: str) -> str:
        return f"{CACHE_KEY}-{token}"

    def _read(self) -> Dict[str, Dict]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            logger.warning("invite cache unreadable, ignoring path=%s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, Dict]) -> None:
        directory = os.path.dirname(self.path)
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            tmp = f"{self.path}.tmp"
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp, self.path)
        except OSError:
            logger.exception("invite cache write failed path=%s", self.path)

    def load(self, token: str) -> Optional[CachedResponse]:
        if not token:
            return None
        with self._lock:
            data = self._read()
            raw = data.get(self.key(token))
            if raw is None:
                return None
            try:
                entry = CachedResponse.from_json(raw)
            except (KeyError, TypeError, ValueError):
                entry = None
            if entry is None or self.clock() - entry.last_updated >= self.duration:
                # expired or garbled: drop it silently
                data.pop(self.key(token), None)
                self._write(data)
                return None
            return entry

    def save(self, token: str, num_people: int, confirmed: bool, declined: bool) -> Optional[CachedResponse]:
        if not token:
            return None
        entry = CachedResponse(
            token=token,
            num_people=num_people,
            confirmed=confirmed,
            declined=declined,
            last_updated=self.clock(),
        )
        with self._lock:
            data = self._read()
            data[self.key(token)] = entry.to_json()
            self._write(data)
        return entry

    def clear(self, token: str) -> None:
        if not token:
            return
        with self._lock:
            data = self._read()
            if data.pop(self.key(token), None) is not None:
                self._write(data)

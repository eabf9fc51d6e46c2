from typing import Any, Dict, Optional

from smart_invite.client.api import ApiClient
from smart_invite.client.cache import CachedResponse, InviteCache
from smart_invite.core.logging import logger
from smart_invite.services.rsvp import (
    DECLINED,
    MAX_PARTY_SIZE,
    MIN_PARTY_SIZE,
    PENDING,
    Confirmed,
    Declined,
    GuestStatus,
    change_party_size,
    check_party_size,
    status_from_row,
    submit_confirm,
    submit_decline,
)


class InviteSession:
    """Guest side of one invite: load, confirm, decline, edit party size.

    Every server write is an unconditional overwrite (last writer wins). The
    local cache is refreshed after each successful write and from the
    server on load.
    """

    def __init__(self, client: ApiClient, token: str, cache: Optional[InviteCache] = None):
        self.client = client
        self.token = token
        self.cache = cache
        self.invite: Optional[Dict[str, Any]] = None
        self.status: GuestStatus = PENDING
        self.party_size = MIN_PARTY_SIZE

    @property
    def confirmed(self) -> bool:
        return isinstance(self.status, Confirmed)

    @property
    def declined(self) -> bool:
        return isinstance(self.status, Declined)

    def peek(self) -> Optional[CachedResponse]:
        """Last cached response, for showing something before load() returns."""
        return self.cache.load(self.token) if self.cache else None

    def load(self) -> Dict[str, Any]:
        data = self.client.get_invite(self.token)
        self.invite = data
        self.status = status_from_row(data.get("confirmed"), data.get("num_people"))
        n = data.get("num_people") or 0
        self.party_size = n if n >= MIN_PARTY_SIZE else MIN_PARTY_SIZE

        cached = self.peek()
        if cached and (cached.confirmed, cached.declined) != (self.confirmed, self.declined):
            logger.info("invite cache disagreed with server, using server token=%s", self.token[:8])
        self._remember()
        return data

    def confirm(self, party_size: Optional[int] = None) -> Confirmed:
        new_status = submit_confirm(party_size if party_size is not None else self.party_size)
        self._write(new_status)
        return new_status

    def decline(self) -> Declined:
        new_status = submit_decline()
        self._write(new_status)
        return new_status

    def set_party_size(self, party_size: int) -> int:
        check_party_size(party_size)
        if self.confirmed:
            self._write(change_party_size(self.status, party_size))
        else:
            # not answered yet: only remembered locally
            self.party_size = party_size
            self._remember()
        return self.party_size

    def increment(self) -> int:
        if self.party_size >= MAX_PARTY_SIZE:
            return self.party_size
        return self.set_party_size(self.party_size + 1)

    def decrement(self) -> int:
        if self.party_size <= MIN_PARTY_SIZE:
            return self.party_size
        return self.set_party_size(self.party_size - 1)

    def change_mind(self) -> None:
        """Back from declined to the confirmation form. No server write."""
        if self.declined:
            self.status = PENDING
            self.party_size = MIN_PARTY_SIZE

    def _write(self, new_status: GuestStatus) -> None:
        confirmed, num_people = new_status.to_wire()
        self.client.update_guest(self.token, confirmed, num_people)
        self.status = new_status
        if isinstance(new_status, Confirmed):
            self.party_size = new_status.count
        if self.invite is not None:
            self.invite.update(confirmed=confirmed, num_people=num_people, status=new_status.label)
        self._remember()

    def _remember(self) -> None:
        if not self.cache:
            return
        num_people = DECLINED.to_wire()[1] if self.declined else self.party_size
        self.cache.save(self.token, num_people, self.confirmed, self.declined)

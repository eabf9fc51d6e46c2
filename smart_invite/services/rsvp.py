"""Guest response status.

Storage and the wire keep the legacy pair (confirmed, num_people):

    pending   -> (False, 0)
    confirmed -> (True, 1..10)
    declined  -> (False, -1)

Inside the code a response is one of Pending / Confirmed(count) / Declined.
"""

from dataclasses import dataclass
from typing import Tuple, Union

MIN_PARTY_SIZE = 1
MAX_PARTY_SIZE = 10
DECLINED_SENTINEL = -1


@dataclass(frozen=True)
class Pending:
    label = "pending"

    def to_wire(self) -> Tuple[bool, int]:
        return False, 0


@dataclass(frozen=True)
class Confirmed:
    count: int
    label = "confirmed"

    def to_wire(self) -> Tuple[bool, int]:
        return True, self.count


@dataclass(frozen=True)
class Declined:
    label = "declined"

    def to_wire(self) -> Tuple[bool, int]:
        return False, DECLINED_SENTINEL


GuestStatus = Union[Pending, Confirmed, Declined]

PENDING = Pending()
DECLINED = Declined()


class InvalidTransition(ValueError):
    pass


def status_from_row(confirmed, num_people) -> GuestStatus:
    """Decode a stored row. Never raises: rows written by older clients may
    hold counts outside 1..10."""
    n = int(num_people or 0)
    if confirmed:
        return Confirmed(n)
    if n == DECLINED_SENTINEL:
        return DECLINED
    return PENDING


def check_party_size(party_size: int) -> int:
    if not isinstance(party_size, int) or isinstance(party_size, bool):
        raise InvalidTransition(f"party size must be an integer, got {party_size!r}")
    if not MIN_PARTY_SIZE <= party_size <= MAX_PARTY_SIZE:
        raise InvalidTransition(f"party size must be between {MIN_PARTY_SIZE} and {MAX_PARTY_SIZE}")
    return party_size


def submit_confirm(party_size: int) -> Confirmed:
    # Allowed from every state; confirming again just overwrites the count.
    return Confirmed(check_party_size(party_size))


def submit_decline() -> Declined:
    return DECLINED


def change_party_size(current: GuestStatus, party_size: int) -> Confirmed:
    if not isinstance(current, Confirmed):
        raise InvalidTransition(f"cannot change party size while {current.label}")
    return Confirmed(check_party_size(party_size))

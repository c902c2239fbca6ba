from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from .errors import InvalidLotteryNumber
from .project_constants import MAX_BETTING_NUMBER, MIN_BETTING_NUMBER


@dataclass(frozen=True)
class Ticket:
    buyer: str
    betting_number: int
    stake: int


def is_valid_number(number: int) -> bool:
    if isinstance(number, bool) or not isinstance(number, int):
        return False
    return MIN_BETTING_NUMBER <= number <= MAX_BETTING_NUMBER


def require_betting_number(number: int) -> int:
    if not is_valid_number(number):
        raise InvalidLotteryNumber(repr(number))
    return number


class TicketLedger:
    def __init__(self) -> None:
        self._by_number: Dict[int, List[Ticket]] = defaultdict(list)
        self._count = 0

    def __len__(self) -> int:
        return self._count

    def record(self, ticket: Ticket) -> Ticket:
        require_betting_number(ticket.betting_number)
        self._by_number[ticket.betting_number].append(ticket)
        self._count += 1
        return ticket

    def tickets_for(self, betting_number: int) -> Tuple[Ticket, ...]:
        # .get so lookups never grow the map
        return tuple(self._by_number.get(betting_number, ()))

    def numbers(self) -> List[int]:
        return sorted(n for n, tickets in self._by_number.items() if tickets)

    def all_tickets(self) -> Iterable[Ticket]:
        for number in self.numbers():
            yield from self._by_number[number]

    def clear(self) -> None:
        self._by_number.clear()
        self._count = 0

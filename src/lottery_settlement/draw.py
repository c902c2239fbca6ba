from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, List, Sequence, Tuple

from .errors import InvalidResultLength, InvalidSchedule, InvalidScheduleLength, NumberOutOfRange
from .project_constants import CONSOLATION_TIERS, SPECIAL_TIERS, TIER_COUNT
from .tickets import Ticket, is_valid_number


def tier_name(position: int) -> str:
    if position == 0:
        return "first"
    if position == 1:
        return "second"
    if position == 2:
        return "third"
    if position in SPECIAL_TIERS:
        return f"special-{position - SPECIAL_TIERS.start + 1}"
    if position in CONSOLATION_TIERS:
        return f"consolation-{position - CONSOLATION_TIERS.start + 1}"
    raise IndexError(position)


class PrizeSchedule:
    """Tier multipliers by rank. Fixed once built."""

    __slots__ = ("_multipliers",)

    def __init__(self, multipliers: Sequence[int]) -> None:
        values = tuple(multipliers)
        if len(values) != TIER_COUNT:
            raise InvalidScheduleLength(f"got {len(values)}")
        for m in values:
            if isinstance(m, bool) or not isinstance(m, int) or m <= 0:
                raise InvalidSchedule(repr(m))
        object.__setattr__(self, "_multipliers", values)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("PrizeSchedule is immutable")

    def __getitem__(self, position: int) -> int:
        return self._multipliers[position]

    def __len__(self) -> int:
        return len(self._multipliers)

    def __iter__(self) -> Iterator[int]:
        return iter(self._multipliers)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PrizeSchedule):
            return NotImplemented
        return self._multipliers == other._multipliers

    def __hash__(self) -> int:
        return hash(self._multipliers)

    def __repr__(self) -> str:
        return f"PrizeSchedule({list(self._multipliers)!r})"

    def as_list(self) -> List[int]:
        return list(self._multipliers)


@dataclass(frozen=True)
class Payout:
    tier: int
    betting_number: int
    winner: str
    stake: int
    multiplier: int

    @property
    def amount(self) -> int:
        return self.stake * self.multiplier


def validate_results(results: Sequence[int]) -> Tuple[int, ...]:
    values = tuple(results)
    if len(values) != TIER_COUNT:
        raise InvalidResultLength(f"got {len(values)}")
    for position, value in enumerate(values):
        if not is_valid_number(value):
            raise NumberOutOfRange(position, value)
    return values


def plan_payouts(
    schedule: PrizeSchedule,
    results: Sequence[int],
    tickets_for: Callable[[int], Sequence[Ticket]],
) -> List[Payout]:
    """
    Every prize the draw owes, in payment order.

    Tier order first, then ticket purchase order inside a tier. A number that
    appears at several positions is paid once per position.
    """
    payouts: List[Payout] = []
    for tier, number in enumerate(validate_results(results)):
        multiplier = schedule[tier]
        for t in tickets_for(number):
            payouts.append(Payout(tier, number, t.buyer, t.stake, multiplier))
    return payouts


def total_owed(payouts: Sequence[Payout]) -> int:
    return sum(p.amount for p in payouts)

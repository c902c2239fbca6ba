from __future__ import annotations

import enum
import logging
import threading
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .accounts import InMemoryHost, parse_identity
from .draw import Payout, PrizeSchedule, plan_payouts, tier_name, total_owed, validate_results
from .errors import (
    DeadlineNotReached,
    InsufficientSystemFunds,
    InvalidLotteryState,
    InvalidStateTransition,
    Unauthorized,
)
from .events import EventLog, LotteryWinning, Subscriber
from .pool import FundPool, require_amount
from .project_constants import DEFAULT_PRIZE_SCHEDULE
from .tickets import Ticket, TicketLedger, require_betting_number

log = logging.getLogger(__name__)


class LotteryState(enum.IntEnum):
    ONGOING = 0
    COMPLETED = 1


class Lottery:
    """
    One lottery instance: pool, tickets, schedule and the draw for the current cycle.

    Each public mutator validates everything before it touches state, and runs
    under the instance lock, so a rejected call changes nothing and no two calls
    interleave.
    """

    def __init__(
        self,
        admin: str,
        beneficiary: str,
        schedule: Sequence[int] | PrizeSchedule = DEFAULT_PRIZE_SCHEDULE,
        host: Optional[InMemoryHost] = None,
    ) -> None:
        self.admin = parse_identity(admin)
        self.beneficiary = parse_identity(beneficiary)
        self.schedule = schedule if isinstance(schedule, PrizeSchedule) else PrizeSchedule(schedule)
        self.host = host or InMemoryHost()

        self.state = LotteryState.ONGOING
        self.pool = FundPool()
        self.ledger = TicketLedger()
        self.events = EventLog()
        self.draw_deadline: Optional[int] = None
        self.draw_results: Optional[Tuple[int, ...]] = None
        self.cycle = 1

        self._lock = threading.RLock()

    # --- reads ---

    @property
    def total_fund(self) -> int:
        return self.pool.balance

    def tickets_for(self, betting_number: int) -> Tuple[Ticket, ...]:
        return self.ledger.tickets_for(betting_number)

    def subscribe(self, callback: Subscriber, from_sequence: int = 0):
        # Not under self._lock: listeners may call back into the engine
        return self.events.subscribe(callback, from_sequence)

    # --- funding ---

    def deposit(self, amount: int) -> int:
        with self._lock:
            balance = self.pool.deposit(amount)
        log.info("Funding received: %d (pool %d)", amount, balance)
        return balance

    def buy_ticket(self, betting_number: int, stake: int, buyer: str) -> Ticket:
        require_betting_number(betting_number)
        require_amount(stake)
        buyer = parse_identity(buyer)
        with self._lock:
            if self.state is not LotteryState.ONGOING:
                raise InvalidLotteryState("tickets are only sold while the lottery is ongoing")
            ticket = self.ledger.record(Ticket(buyer, betting_number, stake))
            self.pool.deposit(stake)
        log.info("Ticket %04d bought by %s for %d", betting_number, buyer, stake)
        return ticket

    def withdraw(self, amount: int, sender: str, to: Optional[str] = None) -> int:
        recipient = self.beneficiary if to is None else parse_identity(to)
        with self._lock:
            self._require_admin(sender)
            if self.state is not LotteryState.COMPLETED:
                raise InvalidLotteryState("withdrawal only after the lottery is completed")
            balance = self.pool.withdraw(amount)
            self.host.transfer(recipient, amount)
        log.info("Withdrew %d to %s (pool %d)", amount, recipient, balance)
        return balance

    # --- lifecycle ---

    def set_completed_state(self, sender: str) -> None:
        with self._lock:
            self._require_admin(sender)
            if self.state is LotteryState.COMPLETED:
                log.debug("Lottery already completed")
                return
            self.state = LotteryState.COMPLETED
        log.info("Lottery cycle %d completed", self.cycle)

    def reset(self, sender: str) -> None:
        with self._lock:
            self._require_admin(sender)
            self.state = LotteryState.ONGOING
            self.ledger.clear()
            self.draw_deadline = None
            self.draw_results = None
            self.cycle += 1
        log.info("Lottery reset to cycle %d, %d carried over", self.cycle, self.pool.balance)

    # --- draw ---

    def set_draw_deadline(self, timestamp: int, sender: str) -> None:
        with self._lock:
            self._require_admin(sender)
            self.draw_deadline = int(timestamp)
        log.info("Draw deadline set to %d", self.draw_deadline)

    def finish_result_drawing(self, results: Sequence[int], sender: str) -> List[LotteryWinning]:
        with self._lock:
            self._require_admin(sender)
            if self.draw_deadline is not None and self.host.now() < self.draw_deadline:
                raise DeadlineNotReached(f"deadline {self.draw_deadline}")
            if self.draw_results is not None:
                raise InvalidStateTransition(f"cycle {self.cycle}")

            results = validate_results(results)
            payouts = plan_payouts(self.schedule, results, self.ledger.tickets_for)
            owed = total_owed(payouts)
            # The pool must cover the whole draw before the first prize moves
            self.pool.ensure_covers(owed, InsufficientSystemFunds)

            self.draw_results = results
            emitted = [self._pay(p.amount, p.winner, p.tier, p.betting_number) for p in payouts]

        # Listeners may call back in; the draw is fully applied by now
        self.events.publish(emitted)
        log.info(
            "Draw finished for cycle %d: %d winning tickets, %d paid",
            self.cycle,
            len(payouts),
            owed,
        )
        for p in payouts:
            log.debug("  %s tier: %04d -> %s x%d", tier_name(p.tier), p.betting_number, p.winner, p.multiplier)
        return emitted

    def distribute_prize(self, multiplier: int, stake: int, winner: str, sender: str) -> LotteryWinning:
        require_amount(multiplier)
        require_amount(stake)
        winner = parse_identity(winner)
        with self._lock:
            self._require_admin(sender)
            event = self._pay(multiplier * stake, winner)
        self.events.publish([event])
        return event

    def preview_payouts(self, results: Sequence[int]) -> List[Payout]:
        """What a draw with `results` would pay now. Changes nothing."""
        with self._lock:
            return plan_payouts(self.schedule, results, self.ledger.tickets_for)

    # --- internals ---

    def _require_admin(self, sender: str) -> None:
        if parse_identity(sender) != self.admin:
            raise Unauthorized(sender)

    def _pay(
        self,
        amount: int,
        winner: str,
        tier: Optional[int] = None,
        betting_number: Optional[int] = None,
    ) -> LotteryWinning:
        self.pool.payout(amount)
        self.host.transfer(winner, amount)
        return self.events.record(winner, amount, tier, betting_number, self.cycle)

    # --- persistence ---

    def to_dict(self) -> Dict[str, Any]:
        return {
            "admin": self.admin,
            "beneficiary": self.beneficiary,
            "schedule": self.schedule.as_list(),
            "state": self.state.name,
            "cycle": self.cycle,
            "total_fund": self.pool.balance,
            "draw_deadline": self.draw_deadline,
            "draw_results": None if self.draw_results is None else list(self.draw_results),
            # Purchase order within a number is part of payment order
            "tickets": [
                {"buyer": t.buyer, "betting_number": t.betting_number, "stake": t.stake}
                for t in self.ledger.all_tickets()
            ],
            "events": [e.to_dict() for e in self.events],
            "host_balances": self.host.snapshot(),
        }

    @staticmethod
    def from_dict(data: Dict[str, Any], host: Optional[InMemoryHost] = None) -> "Lottery":
        if host is None:
            host = InMemoryHost(balances=data.get("host_balances", {}))
        lottery = Lottery(
            admin=data["admin"],
            beneficiary=data["beneficiary"],
            schedule=data["schedule"],
            host=host,
        )
        lottery.state = LotteryState[data["state"]]
        lottery.cycle = int(data.get("cycle", 1))
        lottery.pool = FundPool(int(data["total_fund"]))
        deadline = data.get("draw_deadline")
        lottery.draw_deadline = None if deadline is None else int(deadline)
        results = data.get("draw_results")
        lottery.draw_results = None if results is None else tuple(int(r) for r in results)
        for t in data.get("tickets", []):
            lottery.ledger.record(
                Ticket(parse_identity(t["buyer"]), int(t["betting_number"]), int(t["stake"]))
            )
        lottery.events = EventLog([LotteryWinning.from_dict(e) for e in data.get("events", [])])
        return lottery

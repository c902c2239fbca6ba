from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class LotteryWinning:
    sequence: int
    winner: str
    total_winning: int
    tier: Optional[int] = None
    betting_number: Optional[int] = None
    cycle: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "LotteryWinning":
        return LotteryWinning(
            sequence=int(d["sequence"]),
            winner=d["winner"],
            total_winning=int(d["total_winning"]),
            tier=None if d.get("tier") is None else int(d["tier"]),
            betting_number=None if d.get("betting_number") is None else int(d["betting_number"]),
            cycle=int(d.get("cycle", 1)),
        )


Subscriber = Callable[[LotteryWinning], None]


class _Subscription:
    __slots__ = ("callback", "next_sequence")

    def __init__(self, callback: Subscriber, next_sequence: int) -> None:
        self.callback = callback
        self.next_sequence = next_sequence


class EventLog:
    """
    Append-only settlement history. Subscribers may start from any past sequence.

    Recording and delivery are separate steps: the engine records while it holds
    its own lock and publishes once that lock is released. Delivery is serialized
    by the log's own lock, so every subscriber sees each published sequence
    exactly once, in order.
    """

    def __init__(self, history: Optional[List[LotteryWinning]] = None) -> None:
        self._events: List[LotteryWinning] = list(history or [])
        self._subscribers: List[_Subscription] = []
        # Events below this sequence belong to committed calls
        self._published = len(self._events)
        self._delivery = threading.RLock()

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self):
        return iter(self._events)

    def record(
        self,
        winner: str,
        total_winning: int,
        tier: Optional[int] = None,
        betting_number: Optional[int] = None,
        cycle: int = 1,
    ) -> LotteryWinning:
        event = LotteryWinning(len(self._events), winner, total_winning, tier, betting_number, cycle)
        self._events.append(event)
        log.info("LotteryWinning #%d: %s won %d", event.sequence, winner, total_winning)
        return event

    def publish(self, events: Iterable[LotteryWinning]) -> None:
        upto = max((e.sequence + 1 for e in events), default=0)
        with self._delivery:
            self._published = max(self._published, upto)
            for sub in list(self._subscribers):
                self._catch_up(sub)

    def emit(
        self,
        winner: str,
        total_winning: int,
        tier: Optional[int] = None,
        betting_number: Optional[int] = None,
        cycle: int = 1,
    ) -> LotteryWinning:
        event = self.record(winner, total_winning, tier, betting_number, cycle)
        self.publish([event])
        return event

    def since(self, from_sequence: int = 0) -> List[LotteryWinning]:
        return self._events[max(from_sequence, 0):]

    def subscribe(self, callback: Subscriber, from_sequence: int = 0) -> Callable[[], None]:
        """Replays history from `from_sequence`, then delivers new events. Returns an unsubscribe."""
        sub = _Subscription(callback, max(from_sequence, 0))
        with self._delivery:
            self._catch_up(sub)
            self._subscribers.append(sub)
            # Replay callbacks may have published more on this thread
            self._catch_up(sub)

        def unsubscribe() -> None:
            with self._delivery:
                if sub in self._subscribers:
                    self._subscribers.remove(sub)

        return unsubscribe

    def _catch_up(self, sub: _Subscription) -> None:
        while sub.next_sequence < self._published:
            event = self._events[sub.next_sequence]
            sub.next_sequence += 1
            # Settlement is already committed; a broken listener must not undo it
            try:
                sub.callback(event)
            except Exception:
                log.exception("Subscriber failed on event #%d", event.sequence)

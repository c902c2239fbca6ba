from __future__ import annotations

import logging
import time
from collections import defaultdict
from typing import Callable, Dict, Optional

import base58

from .errors import InvalidIdentity
from .project_constants import IDENTITY_BYTES

log = logging.getLogger(__name__)


def parse_identity(value: str) -> str:
    """
    Normalizes an account identity.
    Identity = base58(32 raw public key bytes). Anything else is rejected.
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidIdentity(repr(value))

    text = value.strip()
    try:
        raw = base58.b58decode(text)
    except ValueError:
        raise InvalidIdentity(text)

    if len(raw) != IDENTITY_BYTES:
        raise InvalidIdentity(f"{text} decodes to {len(raw)} bytes")
    return base58.b58encode(raw).decode("ascii")


def system_clock() -> int:
    return int(time.time())


class InMemoryHost:
    """
    Execution environment seen by the engine: who holds what outside the pool,
    how value leaves the pool, and what time it is.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], int]] = None,
        balances: Optional[Dict[str, int]] = None,
    ) -> None:
        self.clock = clock or system_clock
        self.balances: Dict[str, int] = defaultdict(int)
        for addr, amount in (balances or {}).items():
            self.balances[parse_identity(addr)] = int(amount)

    def now(self) -> int:
        return int(self.clock())

    def transfer(self, to: str, amount: int) -> None:
        self.balances[to] += amount
        log.debug("Transferred %d to %s", amount, to)

    def balance_of(self, addr: str) -> int:
        return self.balances.get(parse_identity(addr), 0)

    def snapshot(self) -> Dict[str, int]:
        # Deterministic ordering so stored state diffs cleanly
        return {addr: bal for addr, bal in sorted(self.balances.items()) if bal}

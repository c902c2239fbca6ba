from __future__ import annotations

import base58
import pytest

from lottery_settlement.accounts import InMemoryHost
from lottery_settlement.engine import Lottery
from lottery_settlement.project_constants import DEFAULT_PRIZE_SCHEDULE


def make_address(n: int) -> str:
    return base58.b58encode(bytes([n]) * 32).decode("ascii")


ADMIN = make_address(1)
BENEFICIARY = make_address(2)
BUYER = make_address(3)
OTHER_BUYER = make_address(4)


class FakeClock:
    def __init__(self, now: int = 1_700_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def host(clock: FakeClock) -> InMemoryHost:
    return InMemoryHost(clock=clock)


@pytest.fixture
def lottery(host: InMemoryHost) -> Lottery:
    return Lottery(ADMIN, BENEFICIARY, DEFAULT_PRIZE_SCHEDULE, host=host)


def losing_results(avoid: int = 9999) -> list:
    # 23 distinct numbers, none equal to `avoid`
    return [n for n in range(1000, 1024) if n != avoid][:23]

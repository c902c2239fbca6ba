import base58
import pytest

from lottery_settlement.accounts import InMemoryHost, parse_identity
from lottery_settlement.errors import InvalidIdentity

from conftest import BUYER


def test_parse_identity_accepts_32_byte_base58():
    assert parse_identity(f"  {BUYER} ") == BUYER
    assert parse_identity("11111111111111111111111111111111") == "11111111111111111111111111111111"


@pytest.mark.parametrize(
    "value",
    ["", "   ", "0OIl", base58.b58encode(b"short").decode(), None, 123],
)
def test_parse_identity_rejects_garbage(value):
    with pytest.raises(InvalidIdentity):
        parse_identity(value)


def test_host_transfer_and_snapshot():
    host = InMemoryHost(clock=lambda: 42, balances={BUYER: 5})
    host.transfer(BUYER, 10)
    assert host.balance_of(BUYER) == 15
    assert host.now() == 42
    assert host.snapshot() == {BUYER: 15}

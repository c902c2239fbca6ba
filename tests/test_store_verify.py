import json

import pytest

from lottery_settlement.accounts import InMemoryHost
from lottery_settlement.store import load_lottery, save_lottery
from lottery_settlement.verify import verify_settlement, verify_state_file

from conftest import ADMIN, BUYER, OTHER_BUYER, losing_results


@pytest.fixture
def drawn(lottery):
    lottery.deposit(10_000)
    lottery.buy_ticket(9999, 100, BUYER)
    lottery.buy_ticket(9999, 5, OTHER_BUYER)
    lottery.buy_ticket(12, 3, BUYER)
    results = losing_results()
    results[0] = 9999
    results[14] = 12
    lottery.finish_result_drawing(results, sender=ADMIN)
    return lottery


def test_save_and_load(tmp_path, drawn):
    path = str(tmp_path / "state.json")
    save_lottery(drawn, path)
    loaded = load_lottery(path)
    assert loaded.to_dict() == drawn.to_dict()


def test_load_with_host_keeps_clock_and_balances(tmp_path, drawn):
    path = str(tmp_path / "state.json")
    save_lottery(drawn, path)
    host = InMemoryHost(clock=lambda: 5)
    loaded = load_lottery(path, host=host)
    assert loaded.host is host
    assert host.now() == 5
    assert host.balance_of(BUYER) == 2000 + 6


def test_load_missing_file(tmp_path):
    with pytest.raises(RuntimeError, match="Run `init` first"):
        load_lottery(str(tmp_path / "nope.json"))


def test_load_rejects_unknown_version(tmp_path):
    path = tmp_path / "state.json"
    path.write_text(json.dumps({"version": 99, "lottery": {}}))
    with pytest.raises(RuntimeError, match="Unsupported state version"):
        load_lottery(str(path))


def test_verify_recomputes_payouts(tmp_path, drawn):
    path = str(tmp_path / "state.json")
    save_lottery(drawn, path)
    result = verify_state_file(path)
    assert result["ok"] is True
    assert result["winning_tickets"] == 3
    assert result["total_paid"] == 2000 + 100 + 6
    assert result["winners"] == sorted({BUYER, OTHER_BUYER})


def test_verify_catches_tampered_amount(drawn):
    state = drawn.to_dict()
    state["events"][0]["total_winning"] = 999999
    with pytest.raises(RuntimeError, match="Payout #0 mismatch"):
        verify_settlement(state)


def test_verify_catches_missing_payout(drawn):
    state = drawn.to_dict()
    state["events"].pop()
    with pytest.raises(RuntimeError, match="Payout count mismatch"):
        verify_settlement(state)


def test_verify_ignores_direct_prizes_and_old_cycles(drawn):
    drawn.distribute_prize(1, 1, BUYER, sender=ADMIN)
    assert verify_settlement(drawn.to_dict())["winning_tickets"] == 3

    drawn.reset(sender=ADMIN)
    drawn.finish_result_drawing(losing_results(), sender=ADMIN)
    assert verify_settlement(drawn.to_dict())["winning_tickets"] == 0


def test_verify_needs_a_draw(lottery):
    with pytest.raises(RuntimeError, match="No draw result"):
        verify_settlement(lottery.to_dict())


def test_load_with_host_normalizes_stored_addresses(tmp_path, drawn):
    path = tmp_path / "state.json"
    save_lottery(drawn, str(path))
    data = json.loads(path.read_text())
    balances = data["lottery"]["host_balances"]
    balances[f" {BUYER} "] = balances.pop(BUYER)
    path.write_text(json.dumps(data))

    host = InMemoryHost(clock=lambda: 5)
    load_lottery(str(path), host=host)

    assert host.balance_of(BUYER) == 2000 + 6
    assert f" {BUYER} " not in host.balances

import pytest

from lottery_settlement.draw import PrizeSchedule, plan_payouts, tier_name, total_owed, validate_results
from lottery_settlement.errors import (
    InvalidResultLength,
    InvalidSchedule,
    InvalidScheduleLength,
    NumberOutOfRange,
)
from lottery_settlement.project_constants import DEFAULT_PRIZE_SCHEDULE
from lottery_settlement.tickets import Ticket

from conftest import BUYER, OTHER_BUYER, losing_results


def test_schedule_requires_23_multipliers():
    with pytest.raises(InvalidScheduleLength):
        PrizeSchedule([20, 10, 5])
    with pytest.raises(InvalidScheduleLength):
        PrizeSchedule(DEFAULT_PRIZE_SCHEDULE + [1])


@pytest.mark.parametrize("bad", [0, -3, True, 2.5])
def test_schedule_requires_positive_ints(bad):
    values = list(DEFAULT_PRIZE_SCHEDULE)
    values[7] = bad
    with pytest.raises(InvalidSchedule):
        PrizeSchedule(values)


def test_schedule_is_immutable():
    schedule = PrizeSchedule(DEFAULT_PRIZE_SCHEDULE)
    with pytest.raises(AttributeError):
        schedule._multipliers = (1,) * 23
    with pytest.raises(TypeError):
        schedule[0] = 99
    assert schedule[0] == 20
    assert schedule[12] == 3
    assert schedule[22] == 2


def test_tier_names():
    assert tier_name(0) == "first"
    assert tier_name(2) == "third"
    assert tier_name(3) == "special-1"
    assert tier_name(12) == "special-10"
    assert tier_name(13) == "consolation-1"
    assert tier_name(22) == "consolation-10"
    with pytest.raises(IndexError):
        tier_name(23)


@pytest.mark.parametrize("length", [0, 20, 22, 24])
def test_result_length_must_be_23(length):
    with pytest.raises(InvalidResultLength):
        validate_results([1] * length)


def test_results_out_of_range_name_position():
    results = losing_results()
    results[5] = 10000
    with pytest.raises(NumberOutOfRange) as exc:
        validate_results(results)
    assert exc.value.position == 5
    assert "Number must be between 0 and 9999" in str(exc.value)


def test_negative_result_rejected():
    results = losing_results()
    results[0] = -1
    with pytest.raises(NumberOutOfRange):
        validate_results(results)


def test_bounds_are_inclusive():
    results = losing_results()
    results[0] = 0
    results[22] = 9999
    assert validate_results(results)[22] == 9999


def _lookup(tickets):
    def tickets_for(n):
        return [t for t in tickets if t.betting_number == n]
    return tickets_for


def test_plan_pays_by_tier_then_purchase_order():
    tickets = [Ticket(BUYER, 9999, 100), Ticket(OTHER_BUYER, 9999, 10), Ticket(BUYER, 42, 1)]
    results = losing_results()
    results[0] = 9999
    results[15] = 42

    payouts = plan_payouts(PrizeSchedule(DEFAULT_PRIZE_SCHEDULE), results, _lookup(tickets))

    assert [(p.tier, p.winner, p.amount) for p in payouts] == [
        (0, BUYER, 2000),
        (0, OTHER_BUYER, 200),
        (15, BUYER, 2),
    ]
    assert total_owed(payouts) == 2202


def test_repeated_number_pays_every_position():
    tickets = [Ticket(BUYER, 7, 10)]
    results = [7] * 23
    payouts = plan_payouts(PrizeSchedule(DEFAULT_PRIZE_SCHEDULE), results, _lookup(tickets))
    assert len(payouts) == 23
    assert total_owed(payouts) == 10 * sum(DEFAULT_PRIZE_SCHEDULE)


def test_no_matching_tickets_pays_nothing():
    payouts = plan_payouts(PrizeSchedule(DEFAULT_PRIZE_SCHEDULE), losing_results(), _lookup([Ticket(BUYER, 9999, 1)]))
    assert payouts == []

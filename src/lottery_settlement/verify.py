from __future__ import annotations

import json
from typing import Any, Dict, List

from .draw import PrizeSchedule, plan_payouts, total_owed
from .tickets import Ticket


def verify_settlement(state: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recomputes the current cycle's draw from the stored tickets, schedule and
    results, and checks that the recorded settlement events match it exactly.
    """
    lottery = state.get("lottery", state)
    results = lottery.get("draw_results")
    if results is None:
        raise RuntimeError("No draw result recorded for this cycle; nothing to verify.")

    schedule = PrizeSchedule(lottery["schedule"])

    by_number: Dict[int, List[Ticket]] = {}
    for t in lottery.get("tickets", []):
        ticket = Ticket(t["buyer"], int(t["betting_number"]), int(t["stake"]))
        by_number.setdefault(ticket.betting_number, []).append(ticket)

    payouts = plan_payouts(schedule, results, lambda n: by_number.get(n, []))

    cycle = int(lottery.get("cycle", 1))
    # Draw payouts carry a tier; distribute_prize payouts do not
    recorded = [
        e
        for e in lottery.get("events", [])
        if e.get("tier") is not None and int(e.get("cycle", 1)) == cycle
    ]
    if len(recorded) != len(payouts):
        raise RuntimeError(
            f"Payout count mismatch: recorded={len(recorded)} recomputed={len(payouts)}"
        )

    for i, (p, e) in enumerate(zip(payouts, recorded)):
        expected = (p.winner, p.amount, p.tier, p.betting_number)
        got = (e["winner"], int(e["total_winning"]), int(e["tier"]), int(e["betting_number"]))
        if expected != got:
            raise RuntimeError(f"Payout #{i} mismatch: recorded={got} recomputed={expected}")

    return {
        "ok": True,
        "results": list(results),
        "winning_tickets": len(payouts),
        "total_paid": total_owed(payouts),
        "winners": sorted({p.winner for p in payouts}),
    }


def verify_state_file(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return verify_settlement(json.load(f))

from __future__ import annotations

import argparse
import json
import logging
import os
from typing import List, Optional

from .accounts import InMemoryHost
from .config import Settings
from .draw import tier_name, total_owed
from .engine import Lottery
from .errors import SettlementError
from .project_constants import DEFAULT_PRIZE_SCHEDULE, UNIT_DECIMALS
from .rpc import RpcClock
from .store import load_lottery, save_lottery
from .verify import verify_state_file


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def to_coins(raw_amount: int) -> str:
    whole, frac = divmod(raw_amount, 10**UNIT_DECIMALS)
    frac_text = str(frac).rjust(UNIT_DECIMALS, "0").rstrip("0")
    return f"{whole}.{frac_text}" if frac_text else str(whole)


def parse_int_list(text: str) -> List[int]:
    return [int(part) for part in text.replace(",", " ").split()]


def read_numbers(text: str, what: str) -> List[int]:
    try:
        return parse_int_list(text)
    except ValueError as e:
        raise SystemExit(f"Invalid {what}: {e}")


def _settings(args: argparse.Namespace) -> Settings:
    return Settings.from_env(state_file_override=args.state, rpc_url_override=args.rpc_url)


def _open(args: argparse.Namespace) -> Lottery:
    settings = _settings(args)
    return load_lottery(settings.state_file)


def _commit(args: argparse.Namespace, lottery: Lottery) -> None:
    save_lottery(lottery, _settings(args).state_file)


def cmd_init(args: argparse.Namespace) -> int:
    settings = _settings(args)
    log = logging.getLogger("init")
    if os.path.exists(settings.state_file) and not args.force:
        raise SystemExit(f"{settings.state_file} already exists. Use --force to overwrite.")

    schedule = read_numbers(args.schedule, "--schedule") if args.schedule else DEFAULT_PRIZE_SCHEDULE
    lottery = Lottery(admin=args.admin, beneficiary=args.beneficiary, schedule=schedule)
    save_lottery(lottery, settings.state_file)

    log.info("Administrator : %s", lottery.admin)
    log.info("Beneficiary   : %s", lottery.beneficiary)
    log.info("Prize schedule: %s", lottery.schedule.as_list())
    print(f"🎟  Lottery initialized in {settings.state_file}")
    return 0


def cmd_deposit(args: argparse.Namespace) -> int:
    lottery = _open(args)
    balance = lottery.deposit(args.amount)
    _commit(args, lottery)
    print(f"Pool balance  : {to_coins(balance)}")
    return 0


def cmd_buy(args: argparse.Namespace) -> int:
    lottery = _open(args)
    ticket = lottery.buy_ticket(args.number, args.stake, args.buyer)
    _commit(args, lottery)
    print(f"Ticket        : {ticket.betting_number:04d}")
    print(f"Buyer         : {ticket.buyer}")
    print(f"Stake         : {to_coins(ticket.stake)}")
    return 0


def cmd_tickets(args: argparse.Namespace) -> int:
    lottery = _open(args)
    tickets = lottery.tickets_for(args.number)
    print(f"Tickets for {args.number:04d}: {len(tickets)}")
    for i, t in enumerate(tickets):
        print(f"  #{i:<3} {t.buyer}  stake={to_coins(t.stake)}")
    return 0


def cmd_deadline(args: argparse.Namespace) -> int:
    lottery = _open(args)
    lottery.set_draw_deadline(args.at, sender=args.sender)
    _commit(args, lottery)
    print(f"Draw deadline : {args.at}")
    return 0


def cmd_complete(args: argparse.Namespace) -> int:
    lottery = _open(args)
    lottery.set_completed_state(sender=args.sender)
    _commit(args, lottery)
    print(f"State         : {lottery.state.name}")
    return 0


def cmd_withdraw(args: argparse.Namespace) -> int:
    lottery = _open(args)
    balance = lottery.withdraw(args.amount, sender=args.sender, to=args.to)
    _commit(args, lottery)
    print(f"Pool balance  : {to_coins(balance)}")
    return 0


def cmd_draw(args: argparse.Namespace) -> int:
    settings = _settings(args)
    log = logging.getLogger("draw")

    if args.results_file:
        with open(args.results_file, "r", encoding="utf-8") as f:
            raw = f.read()
        if raw.lstrip().startswith("["):
            try:
                results = json.loads(raw)
            except ValueError as e:
                raise SystemExit(f"Invalid results file {args.results_file}: {e}")
        else:
            results = read_numbers(raw, "results file")
    else:
        results = read_numbers(args.results, "--results")

    if args.dry_run:
        lottery = load_lottery(settings.state_file)
        payouts = lottery.preview_payouts(results)
        print("DRY RUN: nothing paid, state unchanged")
        for p in payouts:
            print(f"{tier_name(p.tier):<16} {p.betting_number:04d}  {p.winner}  +{to_coins(p.amount)}")
        print(f"Would pay      : {to_coins(total_owed(payouts))} to {len(payouts)} tickets")
        print(f"Pool balance   : {to_coins(lottery.total_fund)}")
        return 0

    clock = RpcClock(settings.rpc_url, timeout_s=args.timeout) if settings.rpc_url else None
    try:
        lottery = load_lottery(settings.state_file, host=InMemoryHost(clock=clock))
        log.info("Clock source  : %s", "rpc" if clock else "local")
        events = lottery.finish_result_drawing(results, sender=args.sender)
    finally:
        if clock:
            clock.close()
    save_lottery(lottery, settings.state_file)

    print("========================================")
    print("🎲 LOTTERY DRAW SETTLED")
    print("========================================")
    for e in events:
        print(f"{tier_name(e.tier):<16} {e.betting_number:04d}  {e.winner}  +{to_coins(e.total_winning)}")
    print("----------------------------------------")
    print(f"Winning tickets: {len(events)}")
    print(f"Total paid     : {to_coins(sum(e.total_winning for e in events))}")
    print(f"Pool balance   : {to_coins(lottery.total_fund)}")
    return 0


def cmd_distribute(args: argparse.Namespace) -> int:
    lottery = _open(args)
    event = lottery.distribute_prize(args.multiplier, args.stake, args.winner, sender=args.sender)
    _commit(args, lottery)
    print(f"Paid {to_coins(event.total_winning)} to {event.winner}")
    return 0


def cmd_reset(args: argparse.Namespace) -> int:
    lottery = _open(args)
    lottery.reset(sender=args.sender)
    _commit(args, lottery)
    print(f"Cycle         : {lottery.cycle}")
    print(f"Carried over  : {to_coins(lottery.total_fund)}")
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    lottery = _open(args)
    print(f"State         : {lottery.state.name}")
    print(f"Cycle         : {lottery.cycle}")
    print(f"Pool balance  : {to_coins(lottery.total_fund)}")
    print(f"Tickets sold  : {len(lottery.ledger)}")
    print(f"Draw deadline : {lottery.draw_deadline if lottery.draw_deadline is not None else '-'}")
    print(f"Drawn         : {'yes' if lottery.draw_results is not None else 'no'}")
    print(f"Events        : {len(lottery.events)}")
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    result = verify_state_file(_settings(args).state_file)
    print("✅ SETTLEMENT VERIFIED")
    print(f"Winning tickets: {result['winning_tickets']}")
    print(f"Total paid     : {to_coins(result['total_paid'])}")
    for w in result["winners"]:
        print(f"  {w}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="lottery-settlement",
        description="Operator tool for a 23-tier numbered lottery settlement engine.",
    )
    p.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    p.add_argument("--state", default=None, help="State file path (else use env).")
    p.add_argument("--rpc-url", default=None, help="RPC URL for chain time (else use env).")
    p.add_argument("--timeout", type=float, default=30.0, help="RPC timeout seconds.")

    sub = p.add_subparsers(dest="cmd", required=True)

    i = sub.add_parser("init", help="Create a new lottery state file.")
    i.add_argument("--admin", required=True, help="Administrator address.")
    i.add_argument("--beneficiary", required=True, help="Beneficiary address.")
    i.add_argument("--schedule", default=None, help="23 comma separated multipliers.")
    i.add_argument("--force", action="store_true", help="Overwrite an existing state file.")
    i.set_defaults(func=cmd_init)

    d = sub.add_parser("deposit", help="Top up the prize pool.")
    d.add_argument("--amount", required=True, type=int, help="Amount in base units.")
    d.set_defaults(func=cmd_deposit)

    b = sub.add_parser("buy", help="Buy a ticket for a betting number.")
    b.add_argument("--number", required=True, type=int, help="Betting number 0-9999.")
    b.add_argument("--stake", required=True, type=int, help="Stake in base units.")
    b.add_argument("--buyer", required=True, help="Buyer address.")
    b.set_defaults(func=cmd_buy)

    t = sub.add_parser("tickets", help="List tickets for a betting number.")
    t.add_argument("--number", required=True, type=int)
    t.set_defaults(func=cmd_tickets)

    dl = sub.add_parser("deadline", help="Set the earliest draw time.")
    dl.add_argument("--at", required=True, type=int, help="Unix timestamp (seconds).")
    dl.add_argument("--sender", required=True)
    dl.set_defaults(func=cmd_deadline)

    c = sub.add_parser("complete", help="Mark the lottery completed.")
    c.add_argument("--sender", required=True)
    c.set_defaults(func=cmd_complete)

    w = sub.add_parser("withdraw", help="Withdraw from the pool after completion.")
    w.add_argument("--amount", required=True, type=int)
    w.add_argument("--sender", required=True)
    w.add_argument("--to", default=None, help="Recipient (default: beneficiary).")
    w.set_defaults(func=cmd_withdraw)

    dr = sub.add_parser("draw", help="Settle the draw against 23 winning numbers.")
    src = dr.add_mutually_exclusive_group(required=True)
    src.add_argument("--results", help="23 comma separated winning numbers, first tier first.")
    src.add_argument("--results-file", help="File with a JSON array or whitespace separated numbers.")
    dr.add_argument("--sender", required=True)
    dr.add_argument("--dry-run", action="store_true", help="Show what the draw would pay without paying.")
    dr.set_defaults(func=cmd_draw)

    ds = sub.add_parser("distribute", help="Pay a single prize directly.")
    ds.add_argument("--multiplier", required=True, type=int)
    ds.add_argument("--stake", required=True, type=int)
    ds.add_argument("--winner", required=True)
    ds.add_argument("--sender", required=True)
    ds.set_defaults(func=cmd_distribute)

    r = sub.add_parser("reset", help="Start a new draw cycle.")
    r.add_argument("--sender", required=True)
    r.set_defaults(func=cmd_reset)

    s = sub.add_parser("status", help="Show the lottery state.")
    s.set_defaults(func=cmd_status)

    v = sub.add_parser("verify", help="Recompute the current draw and check its payouts.")
    v.set_defaults(func=cmd_verify)

    return p


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    try:
        code = args.func(args)
    except SettlementError as e:
        raise SystemExit(f"Rejected: {e}")
    raise SystemExit(code)

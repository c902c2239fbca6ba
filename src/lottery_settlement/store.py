from __future__ import annotations

import json
import logging
import os
from typing import Optional

from .accounts import InMemoryHost, parse_identity
from .engine import Lottery

log = logging.getLogger(__name__)

STATE_VERSION = 1


def save_lottery(lottery: Lottery, path: str) -> None:
    data = {"version": STATE_VERSION, "lottery": lottery.to_dict()}
    tmp = f"{path}.tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    # Readers never see a half-written state file
    os.replace(tmp, path)
    log.debug("Saved state to %s", path)


def load_lottery(path: str, host: Optional[InMemoryHost] = None) -> Lottery:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise RuntimeError(f"No lottery state at {path}. Run `init` first.")
    except json.JSONDecodeError as e:
        raise RuntimeError(f"State file {path} is not valid JSON: {e}")

    if data.get("version") != STATE_VERSION:
        raise RuntimeError(f"Unsupported state version: {data.get('version')!r}")

    lottery = Lottery.from_dict(data["lottery"], host=host)
    if host is not None:
        # A caller supplied host keeps its clock; balances come from the file.
        for addr, amount in data["lottery"].get("host_balances", {}).items():
            host.balances[parse_identity(addr)] = int(amount)
    return lottery

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_STATE_FILE = "lottery_state.json"


@dataclass(frozen=True)
class Settings:
    state_file: str
    rpc_url: Optional[str] = None

    @staticmethod
    def from_env(
        state_file_override: str | None = None,
        rpc_url_override: str | None = None,
    ) -> "Settings":
        load_dotenv()

        state_file = state_file_override or os.getenv("LOTTERY_STATE_FILE", "").strip()

        # No RPC url means deadlines are judged by local time.
        rpc_url = rpc_url_override or os.getenv("LOTTERY_RPC_URL", "").strip() or None

        return Settings(state_file=state_file or DEFAULT_STATE_FILE, rpc_url=rpc_url)

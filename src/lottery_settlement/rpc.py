from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

log = logging.getLogger(__name__)


class RpcClock:
    """
    Chain time over JSON-RPC: the block time of the latest finalized slot.
    Used as the host clock so the draw deadline is judged by the chain, not by
    whoever runs the operator tooling.
    """

    def __init__(
        self,
        rpc_url: str,
        timeout_s: float = 30.0,
        commitment: str = "finalized",
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.commitment = commitment
        self.client = httpx.Client(timeout=timeout_s, transport=transport)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "RpcClock":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def __call__(self) -> int:
        slot = self.current_slot()
        ts = self.block_time(slot)
        log.debug("Chain clock: slot %d at %d", slot, ts)
        return ts

    def current_slot(self) -> int:
        data = self._call("getSlot", [{"commitment": self.commitment}])
        return int(data["result"])

    def block_time(self, slot: int) -> int:
        data = self._call("getBlockTime", [slot])
        if data.get("result") is None:
            raise RuntimeError(f"Block time not available for slot {slot}")
        return int(data["result"])

    def _call(self, method: str, params: list) -> Dict[str, Any]:
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}
        resp = self.client.post(self.rpc_url, json=payload)
        resp.raise_for_status()
        data = resp.json()
        if "error" in data:
            raise RuntimeError(f"RPC error from {method}: {data['error']}")
        return data

from __future__ import annotations

import base64
from typing import Any, Dict, Optional

import httpx

from .codec import decode_pot
from .store import Pot


class RpcClient:
    def __init__(
        self,
        rpc_url: str,
        timeout_s: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.client = httpx.Client(timeout=timeout_s, transport=transport)

    def close(self) -> None:
        self.client.close()

    def _post(self, method: str, params: list) -> Dict[str, Any]:
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}
        resp = self.client.post(self.rpc_url, json=payload)
        resp.raise_for_status()
        data = resp.json()
        if "error" in data:
            raise RuntimeError(f"RPC error: {data['error']}")
        return data

    def get_account_data(self, address: str, commitment: str = "confirmed") -> Optional[bytes]:
        """Raw account data, or None if the account does not exist."""
        data = self._post(
            "getAccountInfo",
            [address, {"encoding": "base64", "commitment": commitment}],
        )
        value = data.get("result", {}).get("value")
        if value is None:
            return None
        # value['data'] is [base64_str, "base64"]
        return base64.b64decode(value["data"][0])

    def get_balance(self, address: str, commitment: str = "confirmed") -> int:
        data = self._post("getBalance", [address, {"commitment": commitment}])
        return int(data["result"]["value"])

    def get_minimum_balance_for_rent_exemption(self, space: int) -> int:
        data = self._post("getMinimumBalanceForRentExemption", [space])
        return int(data["result"])

    def fetch_pot(self, address: str) -> Pot:
        raw = self.get_account_data(address)
        if raw is None:
            raise RuntimeError(f"Pot account {address} not found (not initialized?)")
        return decode_pot(raw, address)

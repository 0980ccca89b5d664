import base64
import json

import httpx
import pytest

from solana_jackpot.codec import encode_pot
from solana_jackpot.rpc import RpcClient
from solana_jackpot.store import Pot, RoundState

from conftest import make_key

POT = make_key("pot")


def _client(handler):
    return RpcClient("https://rpc.test", transport=httpx.MockTransport(handler))


def _rpc_handler(responses):
    calls = []

    def handler(request):
        body = json.loads(request.content)
        calls.append(body)
        result = responses[body["method"]]
        if isinstance(result, dict) and "error" in result:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, **result})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": result})

    return handler, calls


class TestRpcClient:

    def test_fetch_pot(self):
        pot = Pot(
            address=POT,
            bump=250,
            authority=make_key("authority"),
            round_state=RoundState.ACTIVE,
            last_transition_time=1_700_000_000,
        )
        data = base64.b64encode(encode_pot(pot) + b"\x00" * 64).decode()
        handler, calls = _rpc_handler(
            {"getAccountInfo": {"context": {"slot": 1}, "value": {"data": [data, "base64"]}}}
        )
        rpc = _client(handler)
        try:
            assert rpc.fetch_pot(POT) == pot
        finally:
            rpc.close()
        assert calls[0]["params"][0] == POT
        assert calls[0]["params"][1]["encoding"] == "base64"

    def test_missing_account(self):
        handler, _ = _rpc_handler({"getAccountInfo": {"context": {"slot": 1}, "value": None}})
        rpc = _client(handler)
        assert rpc.get_account_data(POT) is None
        with pytest.raises(RuntimeError, match="not found"):
            rpc.fetch_pot(POT)

    def test_balance_and_rent(self):
        handler, calls = _rpc_handler(
            {
                "getBalance": {"context": {"slot": 1}, "value": 123},
                "getMinimumBalanceForRentExemption": 72_161_280,
            }
        )
        rpc = _client(handler)
        assert rpc.get_balance(POT) == 123
        assert rpc.get_minimum_balance_for_rent_exemption(10240) == 72_161_280
        assert calls[1]["params"] == [10240]

    def test_rpc_error(self):
        handler, _ = _rpc_handler({"getBalance": {"error": {"code": -32602, "message": "bad"}}})
        with pytest.raises(RuntimeError, match="RPC error"):
            _client(handler).get_balance(POT)

    def test_http_error(self):
        rpc = _client(lambda request: httpx.Response(503))
        with pytest.raises(httpx.HTTPStatusError):
            rpc.get_balance(POT)

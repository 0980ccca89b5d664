import pytest

from solana_jackpot.config import Settings
from solana_jackpot.ledger import rent_exempt_minimum
from solana_jackpot.project_constants import PROGRAM_ID

from conftest import make_key

ENV_VARS = (
    "BUYBACK_ADDRESS",
    "FEE_ADDRESS",
    "JACKPOT_PROGRAM_ID",
    "RPC_URL",
    "ACTIVE_DURATION",
    "COOLDOWN_DURATION",
    "MIN_DEPOSIT_LAMPORTS",
    "POT_ACCOUNT_SPACE",
    "RESERVE_SAFETY_MARGIN_LAMPORTS",
    "RESET_REQUIRES_AUTHORITY",
)


@pytest.fixture
def env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("solana_jackpot.config.load_dotenv", lambda: False)
    monkeypatch.setenv("BUYBACK_ADDRESS", make_key("buyback"))
    monkeypatch.setenv("FEE_ADDRESS", make_key("fee"))
    return monkeypatch


class TestFromEnv:

    def test_defaults(self, env):
        settings = Settings.from_env()
        assert settings.buyback_address == make_key("buyback")
        assert settings.program_id == PROGRAM_ID
        assert settings.active_duration == 120
        assert settings.cooldown_duration == 360
        assert settings.min_deposit == 50_000_000
        assert settings.rpc_url is None
        assert settings.reset_requires_authority is False

    def test_overrides(self, env):
        env.setenv("ACTIVE_DURATION", "30")
        env.setenv("RESET_REQUIRES_AUTHORITY", "true")
        env.setenv("RPC_URL", "https://rpc.example")
        settings = Settings.from_env(rpc_url_override="https://override.example")
        assert settings.active_duration == 30
        assert settings.reset_requires_authority is True
        assert settings.rpc_url == "https://override.example"

    def test_missing_fee_address(self, env):
        env.delenv("FEE_ADDRESS")
        with pytest.raises(RuntimeError, match="FEE_ADDRESS"):
            Settings.from_env()

    def test_malformed_integer(self, env):
        env.setenv("COOLDOWN_DURATION", "soon")
        with pytest.raises(RuntimeError, match="COOLDOWN_DURATION"):
            Settings.from_env()

    def test_malformed_address(self, env):
        env.setenv("BUYBACK_ADDRESS", "not-a-key")
        with pytest.raises(RuntimeError, match="buyback_address"):
            Settings.from_env()


class TestSettings:

    def test_shares_over_100_percent_rejected(self):
        with pytest.raises(RuntimeError, match="per-mille"):
            Settings(
                buyback_address=make_key("buyback"),
                fee_address=make_key("fee"),
                winner_permille=980,
            )

    def test_reserve_floor(self):
        settings = Settings(
            buyback_address=make_key("buyback"),
            fee_address=make_key("fee"),
            pot_account_space=10240,
            reserve_margin=1_000,
        )
        assert settings.rent_minimum == rent_exempt_minimum(10240) == 72_161_280
        assert settings.reserve_floor == 72_162_280

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

from .keys import find_program_address, is_valid_pubkey
from .ledger import rent_exempt_minimum
from .project_constants import (
    ACTIVE_DURATION,
    BUYBACK_PERMILLE,
    CLOSER_PERMILLE,
    COOLDOWN_DURATION,
    FEE_PERMILLE,
    MIN_DEPOSIT_LAMPORTS,
    PERMILLE_DENOM,
    POT_ACCOUNT_SPACE,
    POT_SEED,
    PROGRAM_ID,
    RESERVE_SAFETY_MARGIN_LAMPORTS,
    WINNER_PERMILLE,
)


@dataclass(frozen=True)
class Settings:
    buyback_address: str
    fee_address: str
    program_id: str = PROGRAM_ID
    rpc_url: Optional[str] = None
    active_duration: int = ACTIVE_DURATION
    cooldown_duration: int = COOLDOWN_DURATION
    min_deposit: int = MIN_DEPOSIT_LAMPORTS
    pot_account_space: int = POT_ACCOUNT_SPACE
    reserve_margin: int = RESERVE_SAFETY_MARGIN_LAMPORTS
    winner_permille: int = WINNER_PERMILLE
    buyback_permille: int = BUYBACK_PERMILLE
    fee_permille: int = FEE_PERMILLE
    closer_permille: int = CLOSER_PERMILLE
    reset_requires_authority: bool = False

    def __post_init__(self) -> None:
        for name in ("buyback_address", "fee_address", "program_id"):
            if not is_valid_pubkey(getattr(self, name)):
                raise RuntimeError(f"{name} is not a valid public key: {getattr(self, name)!r}")
        shares = (
            self.winner_permille,
            self.buyback_permille,
            self.fee_permille,
            self.closer_permille,
        )
        if any(s < 0 for s in shares):
            raise RuntimeError(f"Payout shares must be non-negative: {shares}")
        if sum(shares) > PERMILLE_DENOM:
            raise RuntimeError(
                f"Payout shares sum to {sum(shares)} per-mille, more than {PERMILLE_DENOM}"
            )
        for name in ("active_duration", "cooldown_duration", "min_deposit", "reserve_margin"):
            if getattr(self, name) < 0:
                raise RuntimeError(f"{name} must be non-negative")

    @property
    def pot_seed(self) -> Tuple[str, int]:
        """Pot address and bump derived from the program id."""
        return find_program_address([POT_SEED], self.program_id)

    @property
    def rent_minimum(self) -> int:
        return rent_exempt_minimum(self.pot_account_space)

    @property
    def reserve_floor(self) -> int:
        return self.rent_minimum + self.reserve_margin

    @staticmethod
    def from_env(rpc_url_override: str | None = None) -> "Settings":
        load_dotenv()

        buyback = _require_env("BUYBACK_ADDRESS")
        fee = _require_env("FEE_ADDRESS")

        return Settings(
            buyback_address=buyback,
            fee_address=fee,
            program_id=os.getenv("JACKPOT_PROGRAM_ID", "").strip() or PROGRAM_ID,
            rpc_url=rpc_url_override or os.getenv("RPC_URL", "").strip() or None,
            active_duration=_env_int("ACTIVE_DURATION", ACTIVE_DURATION),
            cooldown_duration=_env_int("COOLDOWN_DURATION", COOLDOWN_DURATION),
            min_deposit=_env_int("MIN_DEPOSIT_LAMPORTS", MIN_DEPOSIT_LAMPORTS),
            pot_account_space=_env_int("POT_ACCOUNT_SPACE", POT_ACCOUNT_SPACE),
            reserve_margin=_env_int(
                "RESERVE_SAFETY_MARGIN_LAMPORTS", RESERVE_SAFETY_MARGIN_LAMPORTS
            ),
            reset_requires_authority=os.getenv("RESET_REQUIRES_AUTHORITY", "").strip().lower()
            in ("1", "true", "yes"),
        )


def _require_env(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise RuntimeError(f"{name} is not set. Put it in .env or export it.")
    return value


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")

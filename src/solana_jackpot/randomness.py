"""
Seed derivation and winner selection for a closed round.

The seed is sha256(pot address || close time i64 LE || total u64 LE || bump).
Every input is public before the closing call lands, so whoever submits
`end_round` can predict the outcome and pick a favourable moment. The draw is
reproducible by anyone, not unpredictable. Production use should source
randomness from an external verifiable-randomness provider instead.
"""

from __future__ import annotations

import hashlib
import struct
from typing import List, Optional, Tuple

from .errors import ErrorCode, require
from .keys import parse_pubkey
from .store import DepositRecord


def build_seed(pot_address: str, timestamp: int, total_amount: int, bump: int) -> bytes:
    return b"".join(
        [
            parse_pubkey(pot_address),
            struct.pack("<q", timestamp),
            struct.pack("<Q", total_amount),
            bytes([bump]),
        ]
    )


def derive_randomness(pot_address: str, timestamp: int, total_amount: int, bump: int) -> bytes:
    return hashlib.sha256(build_seed(pot_address, timestamp, total_amount, bump)).digest()


def winner_index(digest: bytes, entrants: int) -> int:
    require(entrants > 0, ErrorCode.NO_DEPOSITS)
    return digest[0] % entrants


def select_winner(deposits: List[DepositRecord], digest: bytes) -> Tuple[int, DepositRecord]:
    idx = winner_index(digest, len(deposits))
    return idx, deposits[idx]


def draw(
    pot_address: str,
    bump: int,
    timestamp: int,
    total_amount: int,
    deposits: List[DepositRecord],
) -> Tuple[bytes, Optional[str]]:
    """Digest for the round and the winning depositor, if the round had any."""
    digest = derive_randomness(pot_address, timestamp, total_amount, bump)
    if not deposits or total_amount == 0:
        return digest, None
    _, record = select_winner(deposits, digest)
    return digest, record.depositor

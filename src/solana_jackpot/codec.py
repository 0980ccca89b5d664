"""
Pot account layout.

This is the layout of the revised program, which records the selected winner
next to the randomness. The first deployed version of the program stored only
the randomness followed by the round closer, with no winner field; accounts
written by that version do not decode here.
"""

from __future__ import annotations

import hashlib
import struct
from typing import List, Optional, Tuple

import base58

from .keys import parse_pubkey
from .store import DepositRecord, Pot, RoundState

POT_DISCRIMINATOR = hashlib.sha256(b"account:Pot").digest()[:8]

# Borsh enum tags, in declaration order of the on-chain enum
_STATE_TAGS = {RoundState.ACTIVE: 0, RoundState.COOLDOWN: 1, RoundState.INACTIVE: 2}
_TAG_STATES = {v: k for k, v in _STATE_TAGS.items()}

DEPOSIT_RECORD_SIZE = 32 + 8 + 8


def encode_pot(pot: Pot) -> bytes:
    """
    Anchor account layout:
    disc(8) | authority(32) | bump(u8) | total(u64) | deposits(u32 + n*48)
    | state(u8) | last_transition(i64) | Option<[u8;32]> x3
    """
    out = [
        POT_DISCRIMINATOR,
        parse_pubkey(pot.authority),
        struct.pack("<BQI", pot.bump, pot.total_amount, len(pot.deposits)),
    ]
    for d in pot.deposits:
        out.append(parse_pubkey(d.depositor))
        out.append(struct.pack("<Qq", d.amount, d.timestamp))
    out.append(struct.pack("<Bq", _STATE_TAGS[pot.round_state], pot.last_transition_time))
    out.append(_encode_option(pot.random_seed_result))
    out.append(_encode_option(parse_pubkey(pot.selected_winner) if pot.selected_winner else None))
    out.append(_encode_option(parse_pubkey(pot.round_closer) if pot.round_closer else None))
    return b"".join(out)


def decode_pot(data: bytes, address: str) -> Pot:
    if len(data) < 8 or data[:8] != POT_DISCRIMINATOR:
        raise ValueError("Account data is not a Pot (discriminator mismatch)")
    reader = _Reader(data, 8)

    authority = _b58(reader.take(32))
    bump, total_amount, count = reader.unpack("<BQI")
    deposits: List[DepositRecord] = []
    for _ in range(count):
        depositor = _b58(reader.take(32))
        amount, timestamp = reader.unpack("<Qq")
        deposits.append(DepositRecord(depositor, amount, timestamp))

    tag, last_transition = reader.unpack("<Bq")
    if tag not in _TAG_STATES:
        raise ValueError(f"Unknown round state tag {tag}")

    randomness = reader.option()
    winner = reader.option()
    closer = reader.option()

    return Pot(
        address=address,
        bump=bump,
        authority=authority,
        round_state=_TAG_STATES[tag],
        last_transition_time=last_transition,
        total_amount=total_amount,
        deposits=deposits,
        random_seed_result=randomness,
        selected_winner=_b58(winner) if winner else None,
        round_closer=_b58(closer) if closer else None,
    )


def _encode_option(value: Optional[bytes]) -> bytes:
    if value is None:
        return b"\x00"
    return b"\x01" + value


class _Reader:
    def __init__(self, data: bytes, offset: int = 0) -> None:
        self.data = data
        self.offset = offset

    def take(self, n: int) -> bytes:
        end = self.offset + n
        if end > len(self.data):
            raise ValueError(f"Pot account data truncated at offset {self.offset}")
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def unpack(self, fmt: str) -> Tuple:
        return struct.unpack(fmt, self.take(struct.calcsize(fmt)))

    def option(self, size: int = 32) -> Optional[bytes]:
        (tag,) = self.unpack("<B")
        if tag == 0:
            return None
        if tag != 1:
            raise ValueError(f"Invalid option tag {tag}")
        return self.take(size)


def _b58(raw: bytes) -> str:
    return base58.b58encode(raw).decode("ascii")

"""
Shared fixtures: a pot on a manual clock, funded depositors, fixed recipients.
"""

import hashlib

import base58
import pytest

from solana_jackpot.config import Settings
from solana_jackpot.ledger import Ledger, ManualClock
from solana_jackpot.program import JackpotProgram

T0 = 1_700_000_000
SOL = 10**9


def make_key(label: str) -> str:
    return base58.b58encode(hashlib.sha256(label.encode()).digest()).decode("ascii")


@pytest.fixture
def authority():
    return make_key("authority")


@pytest.fixture
def alice():
    return make_key("alice")


@pytest.fixture
def bob():
    return make_key("bob")


@pytest.fixture
def closer():
    return make_key("closer")


@pytest.fixture
def settings():
    return Settings(buyback_address=make_key("buyback"), fee_address=make_key("fee"))


@pytest.fixture
def clock():
    return ManualClock(T0)


@pytest.fixture
def ledger(authority, alice, bob, closer):
    led = Ledger()
    led.fund(authority, 10 * SOL)
    for who in (alice, bob, closer):
        led.fund(who, 5 * SOL)
    return led


@pytest.fixture
def program(settings, ledger, clock, authority):
    """Initialized pot, Inactive, initialized at T0."""
    prog = JackpotProgram(settings, ledger, clock)
    prog.initialize(authority)
    return prog


@pytest.fixture
def active(program, clock, settings, authority):
    """Pot with a round opened at T0 + cooldown; returns (program, start time)."""
    clock.advance(settings.cooldown_duration)
    program.start_round(authority)
    return program, clock.now()

"""
End-to-end rounds through the public operations.
"""

import pytest

from solana_jackpot.errors import ErrorCode, JackpotError
from solana_jackpot.program import JackpotProgram
from solana_jackpot.randomness import derive_randomness
from solana_jackpot.store import RoundState

from conftest import SOL, T0


# =============================================================================
# Full round
# =============================================================================

class TestFullRound:

    def test_two_depositors_round(self, active, clock, ledger, settings, alice, bob, closer):
        program, start = active
        rent = settings.rent_minimum

        clock.set(start + 10)
        program.deposit(alice, 50_000_000)
        program.deposit(bob, 100_000_000)
        assert program.pot.total_amount == 150_000_000
        assert program.pot_balance() == rent + 150_000_000

        clock.set(start + 60)
        with pytest.raises(JackpotError) as exc:
            program.end_round(closer)
        assert exc.value.code is ErrorCode.COOLDOWN_ACTIVE
        assert program.pot.round_state is RoundState.ACTIVE

        clock.set(start + 121)
        program.end_round(closer)
        pot = program.pot
        assert pot.round_state is RoundState.COOLDOWN
        digest = derive_randomness(pot.address, start + 121, 150_000_000, pot.bump)
        assert pot.random_seed_result == digest
        winner = [alice, bob][digest[0] % 2]
        assert pot.selected_winner == winner
        assert pot.round_closer == closer

        before = {who: ledger.balance(who) for who in (winner, closer)}
        clock.set(start + 122)
        split = program.distribute_rewards(
            winner=winner,
            buyback=settings.buyback_address,
            fee=settings.fee_address,
            closer=closer,
        )

        distributable = 150_000_000 - settings.reserve_floor
        assert split.distributable == distributable
        assert split.winner == distributable * 969 // 1000
        assert ledger.balance(winner) == before[winner] + split.winner
        assert ledger.balance(closer) == before[closer] + split.closer
        assert ledger.balance(settings.buyback_address) == split.buyback
        assert ledger.balance(settings.fee_address) == split.fee
        assert program.pot_balance() == rent + 150_000_000 - split.paid

        pot = program.pot
        assert pot.round_state is RoundState.INACTIVE
        assert pot.deposits == []
        assert pot.total_amount == 0
        assert pot.random_seed_result is None
        assert pot.selected_winner is None
        assert pot.round_closer is None
        assert pot.last_transition_time == start + 122

    def test_empty_round_resets_without_transfers(self, active, clock, ledger, settings, closer):
        program, start = active
        clock.set(start + 121)
        program.end_round(closer)
        assert program.pot.selected_winner is None
        assert program.pot.random_seed_result is not None

        journal = len(ledger.journal)
        result = program.distribute_rewards(
            winner=closer,
            buyback=settings.buyback_address,
            fee=settings.fee_address,
            closer=closer,
        )
        assert result is None
        assert len(ledger.journal) == journal
        assert program.pot.round_state is RoundState.INACTIVE

    def test_next_round_waits_for_cooldown(self, active, clock, settings, authority, closer):
        program, start = active
        clock.set(start + 121)
        program.end_round(closer)
        program.reset_if_no_winner(closer)

        clock.advance(settings.cooldown_duration - 1)
        with pytest.raises(JackpotError) as exc:
            program.start_round(authority)
        assert exc.value.code is ErrorCode.COOLDOWN_ACTIVE

        clock.advance(1)
        program.start_round(authority)
        assert program.pot.round_state is RoundState.ACTIVE

    def test_remainder_carries_into_next_round(self, active, clock, ledger, settings, authority, alice, bob, closer):
        program, start = active
        program.deposit(alice, 1 * SOL)
        program.deposit(bob, 1 * SOL + 7)
        clock.set(start + settings.active_duration)
        program.end_round(closer)
        pot = program.pot
        split = program.distribute_rewards(
            pot.selected_winner, settings.buyback_address, settings.fee_address, closer
        )
        total = 2 * SOL + 7
        assert split.remainder >= 0
        assert total - split.paid == settings.reserve_floor + split.remainder
        assert program.pot_balance() == settings.rent_minimum + total - split.paid


# =============================================================================
# Initialization
# =============================================================================

class TestInitialize:

    def test_initial_state(self, program, settings, authority, ledger):
        pot = program.pot
        assert pot.round_state is RoundState.INACTIVE
        assert pot.authority == authority
        assert pot.last_transition_time == T0
        assert (pot.address, pot.bump) == settings.pot_seed
        assert ledger.balance(pot.address) == settings.rent_minimum

    def test_initialize_twice_fails(self, program, authority):
        with pytest.raises(JackpotError) as exc:
            program.initialize(authority)
        assert exc.value.code is ErrorCode.ALREADY_INITIALIZED

    def test_operations_before_initialize(self, settings, ledger, clock, alice):
        program = JackpotProgram(settings, ledger, clock)
        with pytest.raises(JackpotError) as exc:
            program.deposit(alice, 50_000_000)
        assert exc.value.code is ErrorCode.NOT_INITIALIZED

from __future__ import annotations

import logging
import threading
import time
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List

log = logging.getLogger(__name__)

# Rent parameters of the original platform
RENT_LAMPORTS_PER_BYTE_YEAR = 3480
RENT_EXEMPTION_YEARS = 2
ACCOUNT_STORAGE_OVERHEAD = 128


def rent_exempt_minimum(space: int) -> int:
    """Balance an account of `space` bytes must hold to keep existing."""
    return (space + ACCOUNT_STORAGE_OVERHEAD) * RENT_LAMPORTS_PER_BYTE_YEAR * RENT_EXEMPTION_YEARS


class SystemClock:
    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: int = 0) -> None:
        self._now = int(start)

    def now(self) -> int:
        return self._now

    def set(self, timestamp: int) -> None:
        self._now = int(timestamp)

    def advance(self, seconds: int) -> int:
        self._now += int(seconds)
        return self._now


class TransferError(RuntimeError):
    pass


@dataclass(frozen=True)
class Transfer:
    source: str
    destination: str
    amount: int


class Ledger:
    """
    In-memory balance book standing in for the chain's system transfer.

    A transfer moves value atomically and is only accepted when signed by the
    owner of the source account. Every mutation takes `lock`; the pot store
    holds the same lock for the length of a transaction.
    """

    def __init__(self) -> None:
        self._balances: Dict[str, int] = defaultdict(int)
        self.journal: List[Transfer] = []
        self.lock = threading.RLock()

    def fund(self, account: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("Cannot fund a negative amount")
        with self.lock:
            self._balances[account] += amount

    def balance(self, account: str) -> int:
        return self._balances.get(account, 0)

    def transfer(self, source: str, destination: str, amount: int, signer: str) -> Transfer:
        if signer != source:
            raise TransferError(f"Transfer from {source} not signed by its owner (signer={signer})")
        if source == destination:
            raise TransferError(f"Transfer from {source} to itself")
        if not isinstance(amount, int) or amount < 0:
            raise TransferError(f"Invalid transfer amount: {amount!r}")
        with self.lock:
            available = self.balance(source)
            if available < amount:
                raise TransferError(
                    f"Insufficient funds in {source}: balance={available} requested={amount}"
                )
            self._balances[source] -= amount
            self._balances[destination] += amount
            record = Transfer(source, destination, amount)
            self.journal.append(record)
        log.debug("Transfer %d lamports %s -> %s", amount, source, destination)
        return record

    def snapshot(self) -> int:
        return len(self.journal)

    def restore(self, snap: int) -> None:
        """Undo the transfers journaled since `snap`, newest first."""
        with self.lock:
            for record in reversed(self.journal[snap:]):
                self._balances[record.destination] -= record.amount
                self._balances[record.source] += record.amount
            del self.journal[snap:]

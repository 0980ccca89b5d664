from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict

from .config import Settings
from .project_constants import PERMILLE_DENOM
from .randomness import derive_randomness, select_winner
from .rewards import compute_split, distributable_amount
from .store import DepositRecord, Pot, RoundState


def build_round_audit(pot: Pot, settings: Settings) -> Dict[str, Any]:
    """Snapshot of a closed round with everything needed to redo the draw."""
    if pot.round_state is not RoundState.COOLDOWN or pot.random_seed_result is None:
        raise RuntimeError(f"Round is not closed (state={pot.round_state.value})")

    audit: Dict[str, Any] = {
        "metadata": {
            "tool": "solana-jackpot",
            "version": "1.0.0",
            "generated_at_utc": datetime.now(timezone.utc).isoformat(),
            "program_id": settings.program_id,
            "pot_address": pot.address,
            "bump": pot.bump,
            "closed_at": pot.last_transition_time,
            "total_amount": pot.total_amount,
            "seed_hash_hex": pot.random_seed_result.hex(),
            "reserve_floor": settings.reserve_floor,
            "shares_permille": {
                "winner": settings.winner_permille,
                "buyback": settings.buyback_permille,
                "fee": settings.fee_permille,
                "closer": settings.closer_permille,
            },
        },
        "winner": pot.selected_winner,
        "closer": pot.round_closer,
        # Arrival order is the draw order; keep it.
        "all_entrants": [
            {"depositor": d.depositor, "amount": d.amount, "timestamp": d.timestamp}
            for d in pot.deposits
        ],
    }

    if pot.deposits:
        idx, _ = select_winner(pot.deposits, pot.random_seed_result)
        audit["metadata"]["winner_index"] = idx
        if pot.total_amount >= settings.reserve_floor:
            split = compute_split(distributable_amount(pot.total_amount, settings), settings)
            audit["payouts"] = {
                "distributable": split.distributable,
                "winner": split.winner,
                "buyback": split.buyback,
                "fee": split.fee,
                "closer": split.closer,
                "remainder": split.remainder,
            }
    return audit


def verify_audit(audit_path: str) -> Dict[str, Any]:
    with open(audit_path, "r", encoding="utf-8") as f:
        audit = json.load(f)

    meta = audit["metadata"]
    entrants = [
        DepositRecord(e["depositor"], int(e["amount"]), int(e["timestamp"]))
        for e in audit["all_entrants"]
    ]

    total = sum(e.amount for e in entrants)
    if total != int(meta["total_amount"]):
        raise RuntimeError(
            f"Total mismatch: audit={meta['total_amount']} recomputed={total}"
        )

    digest = derive_randomness(meta["pot_address"], int(meta["closed_at"]), total, int(meta["bump"]))
    if digest.hex() != meta["seed_hash_hex"]:
        raise RuntimeError(
            f"Seed hash mismatch: audit={meta['seed_hash_hex']} recomputed={digest.hex()}"
        )

    winner = None
    winner_index = None
    if entrants:
        winner_index, record = select_winner(entrants, digest)
        winner = record.depositor
    if winner != audit["winner"]:
        raise RuntimeError(f"Winner mismatch: audit={audit['winner']} recomputed={winner}")

    payouts = audit.get("payouts")
    if payouts is not None:
        shares = meta["shares_permille"]
        distributable = total - int(meta["reserve_floor"])
        expected = {
            name: distributable * int(shares[name]) // PERMILLE_DENOM
            for name in ("winner", "buyback", "fee", "closer")
        }
        for name, amount in expected.items():
            if int(payouts[name]) != amount:
                raise RuntimeError(
                    f"{name} payout mismatch: audit={payouts[name]} recomputed={amount}"
                )

    return {
        "ok": True,
        "seed_hash_hex": digest.hex(),
        "winner": winner,
        "winner_index": winner_index,
        "entrants": len(entrants),
        "total_amount": total,
    }

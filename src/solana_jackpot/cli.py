from __future__ import annotations

import argparse
import hashlib
import json
import logging
from decimal import Decimal
from typing import List, Tuple

from .config import Settings
from .errors import JackpotError
from .keeper import Keeper, KeeperAction
from .keys import find_program_address, is_valid_pubkey, pubkey_to_str
from .ledger import Ledger, ManualClock, SystemClock
from .program import JackpotProgram
from .project_constants import LAMPORTS_PER_SOL, POT_SEED, PROGRAM_ID
from .randomness import derive_randomness, select_winner
from .rpc import RpcClient
from .store import RoundState
from .verify import build_round_audit, verify_audit


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def to_sol(lamports: int) -> str:
    return f"{Decimal(lamports) / LAMPORTS_PER_SOL:.9f}".rstrip("0").rstrip(".")


def to_lamports(sol: str) -> int:
    return int(Decimal(sol) * LAMPORTS_PER_SOL)


def demo_pubkey(label: str) -> str:
    """Stable placeholder identity for a label; real keys pass through."""
    if is_valid_pubkey(label):
        return label
    return pubkey_to_str(hashlib.sha256(label.encode("utf-8")).digest())


def parse_deposit(text: str) -> Tuple[str, int]:
    try:
        who, sol = text.rsplit(":", 1)
        return demo_pubkey(who), to_lamports(sol)
    except Exception:
        raise argparse.ArgumentTypeError(f"Deposit must look like name:sol, got {text!r}")


def simulation_settings() -> Settings:
    try:
        return Settings.from_env()
    except RuntimeError as e:
        logging.getLogger("simulate").warning("%s; using demo addresses", e)
        return Settings(buyback_address=demo_pubkey("buyback"), fee_address=demo_pubkey("fee"))


def cmd_simulate(args: argparse.Namespace) -> int:
    log = logging.getLogger("simulate")
    settings = simulation_settings()
    deposits: List[Tuple[str, int]] = args.deposit or []

    clock = ManualClock(args.start if args.start is not None else SystemClock().now())
    ledger = Ledger()
    authority = demo_pubkey(args.authority)
    closer = demo_pubkey(args.closer) if args.closer else authority
    ledger.fund(authority, settings.rent_minimum)
    for who, amount in deposits:
        ledger.fund(who, amount)

    program = JackpotProgram(settings, ledger, clock)
    program.initialize(authority)
    keeper = Keeper(program, authority)

    clock.advance(settings.cooldown_duration)
    keeper.step()
    clock.advance(args.deposit_delay)
    for who, amount in deposits:
        program.deposit(who, amount)

    clock.advance(settings.active_duration)
    program.end_round(closer)
    audit = build_round_audit(program.pot, settings)
    try:
        action = keeper.step()
    except JackpotError as e:
        log.error("Payout rejected: %s", e)
        action = KeeperAction("rejected", e)

    log.info("Keeper action     : %s", action.name)
    log.info("Pot balance after : %d", program.pot_balance())

    with open(args.out, "w", encoding="utf-8") as f:
        json.dump(audit, f, indent=2)

    meta = audit["metadata"]
    print("========================================")
    print("🎰 JACKPOT ROUND SIMULATION")
    print("========================================")
    print(f"Pot           : {meta['pot_address']} (bump {meta['bump']})")
    print(f"Entrants      : {len(audit['all_entrants'])}")
    print(f"Total         : {to_sol(meta['total_amount'])} SOL")
    print(f"Seed SHA-256  : {meta['seed_hash_hex']}")
    print("----------------------------------------")
    if action.name == "rejected":
        print(f"❌ Payout rejected: {action.result}")
        print("Round stays in cooldown; an admin withdraw can clear it.")
    elif audit["winner"] and action.result is not None:
        split = action.result
        print("🏆 WINNER")
        print(f"Address       : {audit['winner']}")
        print(f"Prize         : {to_sol(split.winner)} SOL")
        print(f"Buyback       : {to_sol(split.buyback)} SOL")
        print(f"Fee           : {to_sol(split.fee)} SOL")
        print(f"Closer bonus  : {to_sol(split.closer)} SOL")
    else:
        print("No winner this round; pot reset without payouts.")
    print("----------------------------------------")
    print(f"🧾 Wrote audit: {args.out}")
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    result = verify_audit(args.audit)
    print("✅ AUDIT VERIFIED")
    print(f"Winner        : {result['winner'] or '-'}")
    print(f"Winner index  : {result['winner_index']}")
    print(f"Entrants      : {result['entrants']}")
    print(f"Total         : {to_sol(result['total_amount'])} SOL")
    print(f"Seed SHA-256  : {result['seed_hash_hex']}")
    return 0


def cmd_derive(args: argparse.Namespace) -> int:
    address, bump = find_program_address([POT_SEED], args.program_id)
    print(f"Program ID    : {args.program_id}")
    print(f"Pot PDA       : {address}")
    print(f"Bump          : {bump}")
    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    settings = Settings.from_env(rpc_url_override=args.rpc_url)
    if not settings.rpc_url:
        raise SystemExit("Missing RPC_URL. Put it in .env, export it or pass --rpc-url.")
    log = logging.getLogger("inspect")
    address, _ = settings.pot_seed

    rpc = RpcClient(settings.rpc_url, timeout_s=args.timeout)
    try:
        pot = rpc.fetch_pot(address)
        balance = rpc.get_balance(address)
    finally:
        rpc.close()

    log.debug("Fetched pot %s", address)
    print(f"Pot           : {address}")
    print(f"Authority     : {pot.authority}")
    print(f"State         : {pot.round_state.value}")
    print(f"Since         : {pot.last_transition_time}")
    print(f"Balance       : {to_sol(balance)} SOL")
    print(f"Deposits      : {len(pot.deposits)} totalling {to_sol(pot.total_amount)} SOL")

    if pot.round_state is RoundState.COOLDOWN and pot.random_seed_result is not None:
        digest = derive_randomness(address, pot.last_transition_time, pot.total_amount, pot.bump)
        print(f"Seed SHA-256  : {pot.random_seed_result.hex()}")
        print(f"Reproducible  : {'yes' if digest == pot.random_seed_result else 'NO'}")
        if pot.deposits:
            idx, record = select_winner(pot.deposits, pot.random_seed_result)
            print(f"Winner        : {record.depositor} (entry {idx})")
            if record.depositor != pot.selected_winner:
                print(f"⚠️  Stored winner differs: {pot.selected_winner}")
        print(f"Closer        : {pot.round_closer}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="solana-jackpot",
        description="Round-based pooled-deposit jackpot: simulate, audit and inspect.",
    )
    p.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    p.add_argument("--rpc-url", default=None, help="Override RPC URL (else use env).")
    p.add_argument("--timeout", type=float, default=60.0, help="RPC timeout seconds.")

    sub = p.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser("simulate", help="Play one round in memory and write an audit JSON.")
    s.add_argument(
        "--deposit",
        action="append",
        type=parse_deposit,
        help="Deposit as name:sol (e.g. alice:0.05). Repeatable.",
    )
    s.add_argument("--authority", default="authority", help="Pot authority label or key.")
    s.add_argument("--closer", default=None, help="Who closes the round (default authority).")
    s.add_argument("--start", type=int, default=None, help="Unix time of initialization.")
    s.add_argument(
        "--deposit-delay", type=int, default=10, help="Seconds after start when deposits land."
    )
    s.add_argument("--out", default="audit.json", help="Audit output JSON path.")
    s.set_defaults(func=cmd_simulate)

    v = sub.add_parser("verify", help="Verify an existing audit.json deterministically.")
    v.add_argument("--audit", required=True, help="Path to audit.json.")
    v.set_defaults(func=cmd_verify)

    d = sub.add_parser("derive", help="Print the pot address and bump for a program id.")
    d.add_argument("--program-id", default=PROGRAM_ID, help="Program id (base58).")
    d.set_defaults(func=cmd_derive)

    i = sub.add_parser("inspect", help="Fetch the on-chain pot and show its round.")
    i.set_defaults(func=cmd_inspect)

    return p


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    setup_logging(args.verbose)
    raise SystemExit(args.func(args))

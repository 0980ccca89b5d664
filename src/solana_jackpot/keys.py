from __future__ import annotations

from typing import Iterable, List, Tuple

from solders.pubkey import Pubkey

PUBKEY_LENGTH = 32
MAX_SEED_LENGTH = 32
MAX_SEEDS = 16


def to_pubkey(text: str) -> Pubkey:
    try:
        return Pubkey.from_string(text.strip())
    except Exception as e:
        raise ValueError(f"Invalid base58 public key {text!r}: {e}")


def parse_pubkey(text: str) -> bytes:
    """Decode a base58 public key, insisting on exactly 32 bytes."""
    return bytes(to_pubkey(text))


def pubkey_to_str(raw: bytes) -> str:
    if len(raw) != PUBKEY_LENGTH:
        raise ValueError(f"Public key must be {PUBKEY_LENGTH} bytes, got {len(raw)}")
    return str(Pubkey.from_bytes(raw))


def is_valid_pubkey(text: str) -> bool:
    try:
        to_pubkey(text)
    except ValueError:
        return False
    return True


def is_on_curve(raw: bytes) -> bool:
    """True if the 32 bytes decompress to an ed25519 point."""
    return Pubkey.from_bytes(raw).is_on_curve()


def _check_seeds(seeds: Iterable[bytes], limit: int = MAX_SEEDS) -> List[bytes]:
    seeds = [bytes(s) for s in seeds]
    if len(seeds) > limit:
        raise ValueError(f"More than {limit} seeds")
    if any(len(s) > MAX_SEED_LENGTH for s in seeds):
        raise ValueError(f"Seed longer than {MAX_SEED_LENGTH} bytes")
    return seeds


def create_program_address(seeds: Iterable[bytes], program_id: str) -> str:
    seeds = _check_seeds(seeds)
    pid = to_pubkey(program_id)
    try:
        address = Pubkey.create_program_address(seeds, pid)
    except Exception as e:
        raise ValueError(f"Invalid program address seeds: {e}")
    return str(address)


def find_program_address(seeds: Iterable[bytes], program_id: str) -> Tuple[str, int]:
    """First off-curve address searching bumps 255..0."""
    # one seed slot is taken by the bump
    seeds = _check_seeds(seeds, MAX_SEEDS - 1)
    address, bump = Pubkey.find_program_address(seeds, to_pubkey(program_id))
    return str(address), bump

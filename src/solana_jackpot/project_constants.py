"""
Project-wide default parameters for the jackpot pot.

These values define the public rules of each round.
Changing them changes payouts and timing and MUST be publicly announced.
"""

# Program id the pot account is derived from (MAINNET deployment)
PROGRAM_ID = "HtbKartrbcGdW3wfhV2WsZVE4ybHhkKqWUr7V6PwEgfZ"

# Seed of the singleton pot account
POT_SEED = b"pot"

LAMPORTS_PER_SOL = 10**9

# Round timing (seconds)
ACTIVE_DURATION = 120
COOLDOWN_DURATION = 360

# Minimum deposit (raw units)
MIN_DEPOSIT_LAMPORTS = 50_000_000  # 0.05 SOL

# Allocated size of the pot account; drives its rent-exempt floor
POT_ACCOUNT_SPACE = 10240

# Kept on top of the rent-exempt floor at every payout
RESERVE_SAFETY_MARGIN_LAMPORTS = 5_000_000

# Payout split, per-mille of the distributable amount
WINNER_PERMILLE = 969
BUYBACK_PERMILLE = 25
FEE_PERMILLE = 5
CLOSER_PERMILLE = 1
PERMILLE_DENOM = 1000

"""
Immutable rules of the lottery.

These values define the public terms of every draw cycle.
Changing them changes who wins what and MUST be publicly announced.
"""

# Betting numbers are four digits, 0000-9999 inclusive
MIN_BETTING_NUMBER = 0
MAX_BETTING_NUMBER = 9999

# first, second, third + ten special + ten consolation
TIER_COUNT = 23
SPECIAL_TIERS = range(3, 13)
CONSOLATION_TIERS = range(13, 23)

# Payout multipliers, position-for-position with the draw result
DEFAULT_PRIZE_SCHEDULE = [20, 10, 5] + [3] * 10 + [2] * 10

# Amounts are integers in base units (18 decimals, like wei)
UNIT_DECIMALS = 18
ONE_COIN = 10**UNIT_DECIMALS

# Account identities are base58 encoded 32-byte public keys
IDENTITY_BYTES = 32

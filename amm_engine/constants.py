"""Protocol constants for the trade-preview engine.

Centralizes fee precision and the parameters the pool contracts hard-code.
"""

# Fees are expressed in basis points out of FEE_PRECISION
FEE_PRECISION = 10_000

# Slippage tolerances use the same basis-point scale as fees
MAX_SLIPPAGE_BPS = FEE_PRECISION

# Liquidity tokens locked in the contract forever on the first deposit
MIN_LOCKED_LIQUIDITY = 1_000

# Stableswap Newton-Raphson iteration bound (matches the deployed contract)
STABLESWAP_MAX_ITERATIONS = 255

# Ann = A * ANN_MULTIPLIER. Current contracts use n^n = 4 for two assets;
# the legacy contract form used A * n = 2. With the default, amplifier 100 on
# reserves 2000/1500 swaps 1000 for 992; the legacy form (or amplifier 50)
# gives 984.
STABLESWAP_ANN_MULTIPLIER = 4
LEGACY_STABLESWAP_ANN_MULTIPLIER = 2

# Price estimation for stableswap pools simulates a small swap
PRICE_PROBE_AMOUNT = 10**6
PRICE_PROBE_RETRIES = 5

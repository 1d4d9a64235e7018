"""Test helpers module for shared test utilities.

- factories: pool snapshot factory functions and the assets they use
"""

from tests.helpers.factories import (
    PRIMARY,
    SECONDARY,
    STABLE_SECONDARY,
    make_constant_product_pool,
    make_stableswap_pool,
)

__all__ = [
    # Assets
    "PRIMARY",
    "SECONDARY",
    "STABLE_SECONDARY",
    # Factories
    "make_constant_product_pool",
    "make_stableswap_pool",
]

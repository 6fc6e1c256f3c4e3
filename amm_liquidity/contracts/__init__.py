"""Contract wrappers for ERC20, Uniswap V2 Router, Factory and Pair interactions"""

from .erc20 import ERC20
from .factory import Factory
from .pair import Pair
from .router import Router, classify_revert

__all__ = ["ERC20", "Factory", "Pair", "Router", "classify_revert"]

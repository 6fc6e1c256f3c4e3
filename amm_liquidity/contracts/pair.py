"""Uniswap V2 Pair contract wrapper"""

from web3.logs import DISCARD

from .erc20 import ERC20
from ..core.config import Config


class Pair(ERC20):
    """
    Wrapper for a Uniswap V2 Pair.

    The pair is itself the ERC20 liquidity token, so balance/approve come
    from ERC20; this adds reserves, token ordering and Mint/Burn decoding.
    """

    ABI_NAME = "uniswap_v2_pair"

    def __init__(self, manager, address, maxFeePerGas=None, maxPriorityFeePerGas=None):
        super().__init__(manager, address, maxFeePerGas=maxFeePerGas,
                         maxPriorityFeePerGas=maxPriorityFeePerGas)
        self._tokens = None

    def __repr__(self):
        return f"Pair({self.address})"

    @property
    def tokens(self):
        """(token0, token1) - immutable for a deployed pair, so cached"""
        if self._tokens is None:
            self._tokens = (
                self.manager.checksum(self.contract.functions.token0().call()),
                self.manager.checksum(self.contract.functions.token1().call()),
            )
        return self._tokens

    @property
    def token0(self):
        return self.tokens[0]

    @property
    def token1(self):
        return self.tokens[1]

    def total_supply(self):
        return self.contract.functions.totalSupply().call()

    def get_reserves(self):
        """Returns (reserve0, reserve1, blockTimestampLast)"""
        return tuple(self.contract.functions.getReserves().call())

    def order(self, token_a, amount0, amount1):
        """
        Map token0/token1 amounts onto (token_a, other) order.

        Raises:
            ValueError: If token_a is not one of the pair's tokens
        """
        token_a = self.manager.checksum(token_a)
        if token_a == self.token0:
            return amount0, amount1
        if token_a == self.token1:
            return amount1, amount0
        raise ValueError(f"{token_a} is not a token of pair {self.address}")

    def reserves_for(self, token_a):
        """Reserves as (reserve of token_a, reserve of the other token)"""
        reserve0, reserve1, _ = self.get_reserves()
        return self.order(token_a, reserve0, reserve1)

    def _own_events(self, event, receipt):
        logs = event().process_receipt(receipt, errors=DISCARD)
        return [log for log in logs if log["address"] == self.address]

    def minted(self, receipt):
        """Decode the Mint event: (amount0, amount1), or None if absent"""
        events = self._own_events(self.contract.events.Mint, receipt)
        if not events:
            return None
        args = events[-1]["args"]
        return args["amount0"], args["amount1"]

    def burned(self, receipt):
        """Decode the Burn event: (amount0, amount1), or None if absent"""
        events = self._own_events(self.contract.events.Burn, receipt)
        if not events:
            return None
        args = events[-1]["args"]
        return args["amount0"], args["amount1"]

    def liquidity_minted(self, receipt, to):
        """Liquidity tokens minted to `to` in this receipt"""
        to = self.manager.checksum(to)
        total = 0
        for log in self._own_events(self.contract.events.Transfer, receipt):
            args = log["args"]
            if args["from"] == Config.ZERO_ADDRESS and args["to"] == to:
                total += args["value"]
        return total

"""Uniswap V2 Router02 contract wrapper"""

from web3 import Web3

from ..core.config import Config
from ..core.exceptions import TransactionRevertedError
from ..utils.gas import GasManager
from ..utils.transactions import TransactionBuilder


# Revert string fragment -> which bound it reports. "a"/"b" are the router's
# tokenA/tokenB legs; ETH variants call the same internals with WETH as B.
REVERT_BOUNDS = (
    ("INSUFFICIENT_A_AMOUNT", "a"),
    ("INSUFFICIENT_B_AMOUNT", "b"),
    ("EXPIRED", "deadline"),
    ("INSUFFICIENT_LIQUIDITY_MINTED", "liquidity"),
    ("INSUFFICIENT_LIQUIDITY_BURNED", "liquidity"),
    ("TRANSFER_FROM_FAILED", "allowance"),
    ("transferFrom failed", "allowance"),
    ("ds-math-sub-underflow", "balance"),
)


def classify_revert(reason):
    """Return the bound key for a router revert reason, or None if unknown"""
    if not reason:
        return None
    for fragment, bound in REVERT_BOUNDS:
        if fragment in reason:
            return bound
    return None


class Router:
    """Wrapper for UniswapV2Router02 liquidity entry points"""

    def __init__(self, manager, address=None, maxFeePerGas=None, maxPriorityFeePerGas=None):
        """
        Args:
            manager: Web3Manager instance (must have signer for writes)
            address: Router address (None = configured address for the chain)
            maxFeePerGas: Maximum fee per gas in Gwei
            maxPriorityFeePerGas: Priority fee in Gwei
        """
        self.manager = manager
        self.config = Config()
        address = address or self.config.router_address(manager.chain_id)
        self.address = manager.checksum(address)
        self.contract = manager.get_contract(self.address, "uniswap_v2_router")
        self._weth = None

        self.gas_manager = GasManager(manager, maxFeePerGas=maxFeePerGas, maxPriorityFeePerGas=maxPriorityFeePerGas)
        self.tx_builder = TransactionBuilder(manager, self.gas_manager)

    @property
    def weth(self):
        """Wrapped native token used by the ETH entry points"""
        if self._weth is None:
            self._weth = self.manager.checksum(self.contract.functions.WETH().call())
        return self._weth

    def _send(self, contract_func, operation_type, value=0):
        receipt = self.tx_builder.build_and_send(
            contract_func,
            operation_type=operation_type,
            value=value,
        )
        if receipt.status != 1:
            raise TransactionRevertedError(
                f"{operation_type} reverted: {Web3.to_hex(receipt.transactionHash)}",
                tx_hash=Web3.to_hex(receipt.transactionHash),
            )
        return receipt

    def add_liquidity(self, token_a, token_b, amount_a_desired, amount_b_desired,
                      amount_a_min, amount_b_min, to, deadline):
        """Call addLiquidity. Returns the mined receipt."""
        contract_func = self.contract.functions.addLiquidity(
            self.manager.checksum(token_a),
            self.manager.checksum(token_b),
            amount_a_desired,
            amount_b_desired,
            amount_a_min,
            amount_b_min,
            self.manager.checksum(to),
            deadline,
        )
        return self._send(contract_func, "addLiquidity")

    def add_liquidity_eth(self, token, amount_token_desired, amount_token_min,
                          amount_eth_min, to, deadline, value):
        """Call addLiquidityETH with `value` wei attached. Returns the mined receipt."""
        contract_func = self.contract.functions.addLiquidityETH(
            self.manager.checksum(token),
            amount_token_desired,
            amount_token_min,
            amount_eth_min,
            self.manager.checksum(to),
            deadline,
        )
        return self._send(contract_func, "addLiquidityETH", value=value)

    def remove_liquidity(self, token_a, token_b, liquidity, amount_a_min,
                         amount_b_min, to, deadline):
        """Call removeLiquidity. Returns the mined receipt."""
        contract_func = self.contract.functions.removeLiquidity(
            self.manager.checksum(token_a),
            self.manager.checksum(token_b),
            liquidity,
            amount_a_min,
            amount_b_min,
            self.manager.checksum(to),
            deadline,
        )
        return self._send(contract_func, "removeLiquidity")

    def remove_liquidity_eth(self, token, liquidity, amount_token_min,
                             amount_eth_min, to, deadline):
        """Call removeLiquidityETH. Returns the mined receipt."""
        contract_func = self.contract.functions.removeLiquidityETH(
            self.manager.checksum(token),
            liquidity,
            amount_token_min,
            amount_eth_min,
            self.manager.checksum(to),
            deadline,
        )
        return self._send(contract_func, "removeLiquidityETH")

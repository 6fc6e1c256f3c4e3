"""ERC20 token contract wrapper"""

import logging
from decimal import Decimal

from web3 import Web3

from ..core.exceptions import ApprovalFailedError, TransactionRevertedError
from ..utils.gas import GasManager
from ..utils.transactions import TransactionBuilder

logger = logging.getLogger(__name__)


class ERC20:
    """Wrapper for ERC20 token interactions"""

    ABI_NAME = "erc20"

    def __init__(self, manager, address, maxFeePerGas=None, maxPriorityFeePerGas=None):
        """
        Args:
            manager: Web3Manager instance
            address: Token contract address
            maxFeePerGas: Maximum fee per gas in Gwei (None = use config/no limit)
            maxPriorityFeePerGas: Priority fee in Gwei (None = use config)
        """
        self.manager = manager
        self.address = manager.checksum(address)
        self.contract = manager.get_contract(self.address, self.ABI_NAME)
        self._info = None

        self.gas_manager = GasManager(manager, maxFeePerGas=maxFeePerGas, maxPriorityFeePerGas=maxPriorityFeePerGas)
        self.tx_builder = TransactionBuilder(manager, self.gas_manager)

    @property
    def info(self):
        """Get token info (cached)"""
        if self._info is None:
            self._info = {
                "address": self.address,
                "symbol": self._read_text("symbol", "UNKNOWN"),
                "decimals": self.contract.functions.decimals().call(),
            }
        return self._info

    def _read_text(self, fn_name, default):
        """Read a string getter, handling tokens that return bytes32 (MKR, SAI)"""
        try:
            raw = getattr(self.contract.functions, fn_name)().call()
        except Exception:
            return default
        if isinstance(raw, bytes):
            return raw.rstrip(b"\x00").decode("utf-8", errors="replace")
        return str(raw)

    @property
    def symbol(self):
        return self.info["symbol"]

    @property
    def decimals(self):
        return self.info["decimals"]

    def balance_of(self, address=None):
        """Get token balance in base units"""
        addr = address or self.manager.address
        return self.contract.functions.balanceOf(addr).call()

    def allowance(self, spender, owner=None):
        """Get allowance for spender"""
        owner_addr = owner or self.manager.address
        return self.contract.functions.allowance(owner_addr, spender).call()

    def to_wei(self, amount):
        """Convert a human amount (str, int or Decimal) to base units, rounding down"""
        return int(Decimal(str(amount)).scaleb(self.decimals))

    def approve(self, spender, amount_wei):
        """
        Approve spender to spend tokens.

        Returns:
            Transaction receipt, or None if the allowance already covers amount_wei

        Raises:
            ApprovalFailedError: If the approval reverts or is mined with status 0
        """
        current_allowance = self.allowance(spender)
        if current_allowance >= amount_wei:
            logger.debug("Allowance of %s for %s already %d >= %d",
                         self.address, spender, current_allowance, amount_wei)
            return None

        contract_func = self.contract.functions.approve(spender, amount_wei)
        try:
            receipt = self.tx_builder.build_and_send(
                contract_func,
                operation_type="approve"
            )
        except TransactionRevertedError as e:
            raise ApprovalFailedError(
                f"Approval of {amount_wei} {self.address} to {spender} failed",
                reason=e.reason,
            ) from e

        if receipt.status != 1:
            raise ApprovalFailedError(
                f"Approval failed: {Web3.to_hex(receipt.transactionHash)}",
                tx_hash=Web3.to_hex(receipt.transactionHash),
            )

        return receipt

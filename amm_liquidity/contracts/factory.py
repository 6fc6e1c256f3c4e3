"""Uniswap V2 Factory contract wrapper"""

import logging

from web3 import Web3
from web3.logs import DISCARD

from ..core.config import Config
from ..core.exceptions import TransactionRevertedError
from ..utils.gas import GasManager
from ..utils.transactions import TransactionBuilder

logger = logging.getLogger(__name__)


class Factory:
    """Wrapper for UniswapV2Factory interactions"""

    def __init__(self, manager, address=None, maxFeePerGas=None, maxPriorityFeePerGas=None):
        """
        Args:
            manager: Web3Manager instance
            address: Factory address (None = configured address for the chain)
            maxFeePerGas: Maximum fee per gas in Gwei
            maxPriorityFeePerGas: Priority fee in Gwei
        """
        self.manager = manager
        self.config = Config()
        address = address or self.config.factory_address(manager.chain_id)
        self.address = manager.checksum(address)
        self.contract = manager.get_contract(self.address, "uniswap_v2_factory")

        self.gas_manager = GasManager(manager, maxFeePerGas=maxFeePerGas, maxPriorityFeePerGas=maxPriorityFeePerGas)
        self.tx_builder = TransactionBuilder(manager, self.gas_manager)

    def get_pair(self, token_a, token_b):
        """
        Look up the pair address for two tokens (order-independent).

        Returns:
            Checksummed pair address, or None if no pair exists
        """
        pair = self.contract.functions.getPair(
            self.manager.checksum(token_a), self.manager.checksum(token_b)
        ).call()
        if int(pair, 16) == 0:
            return None
        return self.manager.checksum(pair)

    def create_pair(self, token_a, token_b):
        """
        Deploy a new pair.

        Returns:
            Dict with receipt and pair address

        Raises:
            TransactionRevertedError: If the pair exists already or creation reverts
        """
        contract_func = self.contract.functions.createPair(
            self.manager.checksum(token_a), self.manager.checksum(token_b)
        )
        receipt = self.tx_builder.build_and_send(contract_func, operation_type="createPair")

        if receipt.status != 1:
            raise TransactionRevertedError(
                f"createPair failed: {Web3.to_hex(receipt.transactionHash)}",
                tx_hash=Web3.to_hex(receipt.transactionHash),
            )

        events = self.contract.events.PairCreated().process_receipt(receipt, errors=DISCARD)
        pair = events[0]["args"]["pair"] if events else self.get_pair(token_a, token_b)
        logger.info("Created pair %s for %s/%s", pair, token_a, token_b)

        return {"receipt": receipt, "pair": pair}

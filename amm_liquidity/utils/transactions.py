"""Transaction utilities with EIP-1559 support"""

import logging

from web3 import Web3
from web3.exceptions import ContractLogicError

from .gas import GasManager
from ..core.exceptions import TransactionRevertedError

logger = logging.getLogger(__name__)


def revert_reason(exc):
    """Extract the bare revert string from a web3 ContractLogicError"""
    message = getattr(exc, "message", None) or str(exc)
    prefix = "execution reverted: "
    if message.startswith(prefix):
        return message[len(prefix):]
    return message


class TransactionBuilder:
    """Build and send EIP-1559 transactions with unified gas management"""

    def __init__(self, manager, gas_manager=None):
        """
        Args:
            manager: Web3Manager instance
            gas_manager: GasManager instance (created if None, loads from gas_config.json)
        """
        self.manager = manager
        self.gas_manager = gas_manager or GasManager(manager)

    def build(self, contract_func, operation_type=None, gas_buffer=1.2, value=0):
        """
        Build an EIP-1559 transaction for a contract function.

        Args:
            contract_func: Contract function to call
            operation_type: Type of operation for gas limit lookup
            gas_buffer: Multiplier for gas limit (default 1.2 = +20%)
            value: ETH value to send in wei (default 0)

        Returns:
            Transaction dictionary ready for signing

        Raises:
            GasPriceTooHighError: If base fee exceeds maxFeePerGas
            ContractLogicError: If the call reverts in simulation
        """
        gas_params = self.gas_manager.getGasParams(operation_type, gas_buffer=1.0)

        estimated_gas = self.gas_manager.estimateGas(
            contract_func, self.manager.address, operation_type, value=value
        )
        gas_limit = int(estimated_gas * gas_buffer)

        tx = {
            "from": self.manager.address,
            "nonce": self.manager.get_nonce(),
            "gas": gas_limit,
            "maxFeePerGas": gas_params["maxFeePerGas"],
            "maxPriorityFeePerGas": gas_params["maxPriorityFeePerGas"],
            "chainId": self.manager.chain_id,
            "type": 2,  # EIP-1559 transaction type
        }

        if value > 0:
            tx["value"] = value

        return contract_func.build_transaction(tx)

    def build_and_send(self, contract_func, operation_type=None, gas_buffer=1.2,
                       value=0, wait=True):
        """
        Build, sign, and send an EIP-1559 transaction.

        Returns:
            Transaction receipt if wait=True, else tx_hash

        Raises:
            TransactionRevertedError: If the call reverts in simulation
            GasPriceTooHighError: If base fee exceeds maxFeePerGas
        """
        try:
            tx = self.build(contract_func, operation_type, gas_buffer, value)
        except ContractLogicError as e:
            reason = revert_reason(e)
            raise TransactionRevertedError(
                f"{operation_type or 'transaction'} reverted in simulation: {reason}",
                reason=reason,
            ) from e

        signed = self.manager.account.sign_transaction(tx)
        tx_hash = self.manager.w3.eth.send_raw_transaction(signed.raw_transaction)
        logger.info("Sent %s tx %s", operation_type or "transaction", Web3.to_hex(tx_hash))

        if not wait:
            return tx_hash

        receipt = self.manager.w3.eth.wait_for_transaction_receipt(tx_hash)
        logger.debug("Mined %s in block %s (status %s)",
                     Web3.to_hex(tx_hash), receipt.blockNumber, receipt.status)
        return receipt

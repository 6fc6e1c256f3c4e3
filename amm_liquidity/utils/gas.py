"""EIP-1559 Gas management with user-configurable limits"""

import json
import logging
from pathlib import Path

from web3.exceptions import ContractLogicError

from ..core.exceptions import AMMError

logger = logging.getLogger(__name__)


class GasPriceTooHighError(AMMError):
    """Raised when current gas price exceeds the user-specified maximum"""
    pass


class GasConfig:
    """Load and manage gas configuration from JSON file"""

    DEFAULT_GAS_LIMITS = {
        "approve": 65000,
        "createPair": 2500000,
        "addLiquidity": 250000,
        "addLiquidityETH": 250000,
        "removeLiquidity": 200000,
        "removeLiquidityETH": 250000,
        "default": 500000,
    }

    def __init__(self, config_path=None):
        """
        Load gas configuration from JSON file.

        Args:
            config_path: Path to gas_config.json (searches default locations if None)
        """
        self._config = self._load_config(config_path)

    def _load_config(self, config_path=None):
        """Load config from file or return defaults"""
        search_paths = [
            config_path,
            Path.cwd() / "gas_config.json",
            Path.home() / ".amm-liquidity" / "gas_config.json",
        ]

        for path in search_paths:
            if path and Path(path).exists():
                with open(path) as f:
                    return json.load(f)

        return {
            "maxFeePerGas": None,
            "maxPriorityFeePerGas": 1.5,
            "gasLimit": self.DEFAULT_GAS_LIMITS.copy(),
        }

    @property
    def maxFeePerGas(self):
        """Max fee per gas in Gwei (None = no limit)"""
        return self._config.get("maxFeePerGas")

    @property
    def maxPriorityFeePerGas(self):
        """Priority fee (tip) in Gwei"""
        return self._config.get("maxPriorityFeePerGas", 1.5)

    def getGasLimit(self, operation_type):
        """
        Get gas limit for operation type.

        Args:
            operation_type: Router/token method name (e.g., "addLiquidityETH", "approve")

        Returns:
            Gas limit in units
        """
        gas_limits = self._config.get("gasLimit", self.DEFAULT_GAS_LIMITS)
        return gas_limits.get(operation_type, gas_limits.get("default", 500000))


class GasManager:
    """
    EIP-1559 compliant gas management.

    Supports:
    - maxFeePerGas: Maximum total fee per gas unit (base + priority)
    - maxPriorityFeePerGas: Tip to validators for faster inclusion
    - gasLimit: Maximum gas units per transaction type
    """

    def __init__(self, manager, maxFeePerGas=None, maxPriorityFeePerGas=None, config=None):
        """
        Args:
            manager: Web3Manager instance
            maxFeePerGas: Max fee per gas in Gwei (overrides config)
            maxPriorityFeePerGas: Priority fee in Gwei (overrides config)
            config: GasConfig instance (created if None)
        """
        self.manager = manager
        self.config = config or GasConfig()

        # CLI overrides take precedence over config file
        self._maxFeePerGas = maxFeePerGas
        self._maxPriorityFeePerGas = maxPriorityFeePerGas

    @property
    def maxFeePerGas(self):
        """Get maxFeePerGas in Gwei (CLI override > config > None)"""
        if self._maxFeePerGas is not None:
            return self._maxFeePerGas
        return self.config.maxFeePerGas

    @property
    def maxPriorityFeePerGas(self):
        """Get maxPriorityFeePerGas in Gwei (CLI override > config)"""
        if self._maxPriorityFeePerGas is not None:
            return self._maxPriorityFeePerGas
        return self.config.maxPriorityFeePerGas

    def getGasLimit(self, operation_type=None):
        return self.config.getGasLimit(operation_type or "default")

    def getBaseFee(self):
        """Current base fee in Wei from the latest block"""
        latest_block = self.manager.w3.eth.get_block("latest")
        return latest_block.get("baseFeePerGas", 0)

    def getGasParams(self, operation_type=None, gas_buffer=1.2):
        """
        Get EIP-1559 gas parameters for a transaction.

        Args:
            operation_type: Transaction type for gas limit lookup
            gas_buffer: Multiplier for gas limit (default 1.2 = +20%)

        Returns:
            Dict with maxFeePerGas, maxPriorityFeePerGas, gas (all in Wei)

        Raises:
            GasPriceTooHighError: If base fee exceeds maxFeePerGas
        """
        base_fee = self.getBaseFee()

        priority_fee_gwei = self.maxPriorityFeePerGas or 1.5
        priority_fee_wei = int(priority_fee_gwei * 1e9)

        if self.maxFeePerGas is not None:
            max_fee_wei = int(self.maxFeePerGas * 1e9)

            # maxFeePerGas below the base fee can never be included
            if max_fee_wei < base_fee:
                raise GasPriceTooHighError(
                    f"Current base fee ({base_fee / 1e9:.2f} Gwei) exceeds your "
                    f"maxFeePerGas ({self.maxFeePerGas} Gwei). Transaction cannot be included."
                )
        else:
            max_fee_wei = int((base_fee + priority_fee_wei) * 1.2)

        gas_limit = int(self.getGasLimit(operation_type) * gas_buffer)

        return {
            "maxFeePerGas": max_fee_wei,
            "maxPriorityFeePerGas": priority_fee_wei,
            "gas": gas_limit,
        }

    def estimateGas(self, contract_func, from_address, operation_type=None, value=0):
        """
        Estimate gas for a contract function call.

        Falls back to the configured limit when the node cannot estimate.
        A contract revert during estimation is re-raised.

        Raises:
            ContractLogicError: If the call reverts in simulation
        """
        fallback = self.getGasLimit(operation_type)
        params = {"from": from_address}
        if value > 0:
            params["value"] = value

        try:
            return contract_func.estimate_gas(params)
        except ContractLogicError:
            raise
        except Exception as e:
            logger.debug("Gas estimation failed for %s, using fallback %d: %s",
                         operation_type, fallback, e)
            return fallback

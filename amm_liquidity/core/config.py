"""Configuration loading and management"""

import os
import json
from pathlib import Path
from .exceptions import ConfigError


class Config:
    """Centralized configuration manager for ABIs, addresses and tokens"""

    _instance = None
    _tokens = None
    _abis = None
    _addresses = None

    # Package files (not user-configurable)
    PACKAGE_ABIS = Path(__file__).parent.parent / "abis.json"
    PACKAGE_ADDRESSES = Path(__file__).parent.parent / "addresses.json"

    ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

    # Router deadline window when the caller does not pass one (10 minutes)
    DEFAULT_DEADLINE_SECONDS = 600

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if Config._abis is None:
            self._load()

    def _find_config_dir(self):
        """Find user config directory (optional)"""
        env_path = os.getenv("AMM_CONFIG_DIR")
        if env_path:
            path = Path(env_path)
            if path.exists():
                return path

        locations = [
            Path.cwd() / "config",
            Path.home() / ".amm-liquidity" / "config",
        ]

        for path in locations:
            if path.exists():
                return path

        return None

    def _load(self):
        """Load package ABIs and addresses, plus user tokens if present"""
        for path in (self.PACKAGE_ABIS, self.PACKAGE_ADDRESSES):
            if not path.exists():
                raise ConfigError(f"Package data not found: {path}")

        with open(self.PACKAGE_ABIS) as f:
            Config._abis = json.load(f)
        with open(self.PACKAGE_ADDRESSES) as f:
            Config._addresses = json.load(f)

        Config._tokens = {}
        config_dir = self._find_config_dir()
        if config_dir is not None:
            tokens_path = config_dir / "tokens.json"
            if tokens_path.exists():
                with open(tokens_path) as f:
                    Config._tokens = {k.upper(): v for k, v in json.load(f).items()}

    @classmethod
    def reset(cls):
        """Drop cached configuration so the next instance reloads from disk"""
        cls._instance = None
        cls._tokens = None
        cls._abis = None
        cls._addresses = None

    @property
    def common_tokens(self):
        """Common token symbol -> address mapping"""
        return Config._tokens or {}

    def get_abi(self, name):
        """Get ABI by name"""
        if name in Config._abis:
            return Config._abis[name]
        raise ConfigError(f"ABI not found: {name}")

    def _chain_addresses(self, chain_id):
        return Config._addresses.get(str(chain_id), {})

    def router_address(self, chain_id):
        """Router address: ROUTER_ADDRESS env var, else packaged per-chain address"""
        address = os.getenv("ROUTER_ADDRESS") or self._chain_addresses(chain_id).get("router")
        if not address:
            raise ConfigError(f"Router address not configured for chain {chain_id}")
        return address

    def factory_address(self, chain_id):
        """Factory address: FACTORY_ADDRESS env var, else packaged per-chain address"""
        address = os.getenv("FACTORY_ADDRESS") or self._chain_addresses(chain_id).get("factory")
        if not address:
            raise ConfigError(f"Factory address not configured for chain {chain_id}")
        return address

    def get_token_address(self, symbol_or_address):
        """Resolve token symbol to address, or validate address"""
        token = symbol_or_address.upper()

        if token in self.common_tokens:
            return self.common_tokens[token]

        if symbol_or_address.startswith("0x") and len(symbol_or_address) == 42:
            return symbol_or_address

        raise ConfigError(f"Unknown token: {symbol_or_address}")

"""Tests for packaged configuration"""

import json

import pytest

from amm_liquidity.core.config import Config
from amm_liquidity.core.exceptions import ConfigError


@pytest.fixture
def config(monkeypatch, tmp_path):
    monkeypatch.setenv("AMM_CONFIG_DIR", str(tmp_path))
    monkeypatch.delenv("ROUTER_ADDRESS", raising=False)
    monkeypatch.delenv("FACTORY_ADDRESS", raising=False)
    (tmp_path / "tokens.json").write_text(json.dumps({"usdc": "0x" + "11" * 20}))
    Config.reset()
    yield Config()
    Config.reset()


class TestConfig:

    def test_singleton(self, config):
        assert Config() is config

    @pytest.mark.parametrize("name", ["erc20", "uniswap_v2_pair", "uniswap_v2_factory", "uniswap_v2_router"])
    def test_abis_packaged(self, config, name):
        assert isinstance(config.get_abi(name), list)

    def test_unknown_abi(self, config):
        with pytest.raises(ConfigError):
            config.get_abi("uniswap_v3_pool")

    def test_mainnet_addresses(self, config):
        assert config.router_address(1).lower() == "0x7a250d5630b4cf539739df2c5dacb4c659f2488d"
        assert config.factory_address(1).lower() == "0x5c69bee701ef814a2b6a3edd4b1652cb9cc5aa6f"

    def test_env_override(self, config, monkeypatch):
        monkeypatch.setenv("ROUTER_ADDRESS", "0x" + "44" * 20)
        assert config.router_address(1) == "0x" + "44" * 20

    def test_unknown_chain(self, config):
        with pytest.raises(ConfigError):
            config.factory_address(999999)

    def test_token_symbols_case_insensitive(self, config):
        assert config.get_token_address("USDC") == "0x" + "11" * 20

    def test_address_passthrough(self, config):
        address = "0x" + "ab" * 20
        assert config.get_token_address(address) == address

    def test_unknown_symbol(self, config):
        with pytest.raises(ConfigError):
            config.get_token_address("NOPE")

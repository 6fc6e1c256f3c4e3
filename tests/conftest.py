"""In-memory stand-ins for the web3 manager and contract wrappers"""

from types import SimpleNamespace

import pytest
from hexbytes import HexBytes
from web3 import Web3

from amm_liquidity.core.exceptions import ApprovalFailedError
from amm_liquidity.operations.liquidity import LiquidityOrchestrator

SENDER = Web3.to_checksum_address("0x" + "aa" * 20)
OTHER = Web3.to_checksum_address("0x" + "bb" * 20)
USDC = Web3.to_checksum_address("0x" + "11" * 20)
DAI = Web3.to_checksum_address("0x" + "22" * 20)
WETH = Web3.to_checksum_address("0x" + "33" * 20)
ROUTER = Web3.to_checksum_address("0x" + "44" * 20)
USDC_DAI = Web3.to_checksum_address("0x" + "55" * 20)
USDC_WETH = Web3.to_checksum_address("0x" + "66" * 20)

BLOCK_TIME = 1_700_000_000


def receipt(n=1, status=1):
    return SimpleNamespace(status=status, transactionHash=HexBytes(bytes([n]) * 32), blockNumber=100 + n)


class FakeManager:
    def __init__(self, native_balance=10 ** 20):
        self.address = SENDER
        self.native_balance = native_balance
        self.reads = []

    def checksum(self, address):
        return Web3.to_checksum_address(address)

    def get_block_timestamp(self):
        self.reads.append("timestamp")
        return BLOCK_TIME

    def get_block_number(self):
        self.reads.append("block_number")
        return 123

    def get_balance(self, address=None):
        self.reads.append("native_balance")
        return self.native_balance


class FakeChain:
    """Shared state behind the fake contracts"""

    def __init__(self):
        self.balances = {}
        self.approvals = []
        self.failing_approvals = set()
        self.pairs = {
            frozenset((USDC, DAI)): USDC_DAI,
            frozenset((USDC, WETH)): USDC_WETH,
        }
        self.router_calls = []
        self.router_error = None
        self.minted = (0, 0)
        self.burned = (0, 0)
        self.liquidity_minted = 0
        self.reserves = {USDC_DAI: (1_000_000, 2_000_000), USDC_WETH: (5_000_000, 10 ** 18)}
        self.total_supply = {USDC_DAI: 1_000_000, USDC_WETH: 10 ** 18}

    def set_balance(self, token, owner, *amounts):
        """Several amounts are returned by successive reads, the last one sticks"""
        self.balances[(token, owner)] = list(amounts)

    def balance_of(self, token, owner):
        amounts = self.balances.get((token, owner), [0])
        if len(amounts) > 1:
            return amounts.pop(0)
        return amounts[0]

    def token_cls(self, manager, address, **kwargs):
        return FakeToken(self, manager, address)

    def pair_cls(self, manager, address, **kwargs):
        return FakePair(self, manager, address)


class FakeToken:
    def __init__(self, chain, manager, address):
        self.chain = chain
        self.manager = manager
        self.address = manager.checksum(address)

    def balance_of(self, address=None):
        return self.chain.balance_of(self.address, address or self.manager.address)

    def approve(self, spender, amount_wei):
        self.chain.approvals.append((self.address, spender, amount_wei))
        if self.address in self.chain.failing_approvals:
            raise ApprovalFailedError("Approval failed: 0xdead", tx_hash="0xdead")
        return receipt(len(self.chain.approvals))


class FakePair(FakeToken):
    @property
    def token0(self):
        return min(self._tokens(), key=lambda a: int(a, 16))

    @property
    def token1(self):
        return max(self._tokens(), key=lambda a: int(a, 16))

    def _tokens(self):
        for tokens, address in self.chain.pairs.items():
            if address == self.address:
                return tuple(tokens)
        raise AssertionError(f"unknown pair {self.address}")

    def order(self, token_a, amount0, amount1):
        if self.manager.checksum(token_a) == self.token0:
            return amount0, amount1
        return amount1, amount0

    def reserves_for(self, token_a):
        return self.order(token_a, *self.chain.reserves[self.address])

    def total_supply(self):
        return self.chain.total_supply[self.address]

    def minted(self, receipt):
        return self.chain.minted

    def burned(self, receipt):
        return self.chain.burned

    def liquidity_minted(self, receipt, to):
        return self.chain.liquidity_minted


class FakeFactory:
    def __init__(self, chain):
        self.chain = chain
        self.created = []

    def get_pair(self, token_a, token_b):
        return self.chain.pairs.get(frozenset((token_a, token_b)))

    def create_pair(self, token_a, token_b):
        pair = Web3.to_checksum_address("0x" + "77" * 20)
        self.chain.pairs[frozenset((token_a, token_b))] = pair
        self.created.append((token_a, token_b))
        return {"receipt": receipt(9), "pair": pair}


class FakeRouter:
    def __init__(self, chain):
        self.chain = chain
        self.address = ROUTER
        self.weth = WETH

    def _call(self, name, *args, **kwargs):
        self.chain.router_calls.append((name, args, kwargs))
        if self.chain.router_error is not None:
            raise self.chain.router_error
        return receipt(50 + len(self.chain.router_calls))

    def add_liquidity(self, *args):
        return self._call("addLiquidity", *args)

    def add_liquidity_eth(self, *args, value):
        return self._call("addLiquidityETH", *args, value=value)

    def remove_liquidity(self, *args):
        return self._call("removeLiquidity", *args)

    def remove_liquidity_eth(self, *args):
        return self._call("removeLiquidityETH", *args)


@pytest.fixture
def chain():
    return FakeChain()


@pytest.fixture
def manager():
    return FakeManager()


@pytest.fixture
def factory(chain):
    return FakeFactory(chain)


@pytest.fixture
def make_orchestrator(chain, manager, factory):
    def _make(**kwargs):
        return LiquidityOrchestrator(
            manager=manager,
            router=FakeRouter(chain),
            factory=factory,
            token_cls=chain.token_cls,
            pair_cls=chain.pair_cls,
            **kwargs,
        )
    return _make


@pytest.fixture
def orchestrator(make_orchestrator):
    return make_orchestrator()

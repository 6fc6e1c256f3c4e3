"""Liquidity orchestration against a Uniswap V2 Router/Factory/Pair"""

import logging
from fractions import Fraction

from web3 import Web3

from ..core.connection import Web3Manager
from ..core.config import Config
from ..core.exceptions import (
    ClampInvalidatesMinimumError,
    InsufficientBalanceError,
    PairNotFoundError,
    PoolError,
    TransactionError,
)
from ..contracts.erc20 import ERC20
from ..contracts.factory import Factory
from ..contracts.pair import Pair
from ..contracts.router import Router, classify_revert
from .flow import FlowState, LiquidityFlow
from .quotes import QuoteCalculator, validate_tolerance
from .requests import (
    BalanceSnapshot,
    LiquidityRequest,
    NativeLiquidityRequest,
    WithdrawalRequest,
)

logger = logging.getLogger(__name__)

# Router revert bound key -> (leg, router parameter name), per entry point
ADD_LEGS = {"a": ("token", "amountAMin"), "b": ("counterparty", "amountBMin")}
ADD_NATIVE_LEGS = {"a": ("token", "amountTokenMin"), "b": ("native", "amountETHMin")}
REMOVE_LEGS = ADD_LEGS
REMOVE_NATIVE_LEGS = ADD_NATIVE_LEGS

CLAMP_POLICIES = ("rescale", "abort")


class LiquidityOrchestrator:
    """
    Approve / add / remove liquidity on a Uniswap V2 style pool.

    Every call is a fresh sequence of reads, computed bounds and writes;
    nothing is cached between calls except immutable contract metadata.
    Failed transactions are never retried.
    """

    def __init__(
        self,
        manager=None,
        router=None,
        factory=None,
        calculator=None,
        clamp_policy="rescale",
        recheck_balance=True,
        maxFeePerGas=None,
        maxPriorityFeePerGas=None,
        token_cls=ERC20,
        pair_cls=Pair,
    ):
        """
        Args:
            manager: Web3Manager instance (created with signer if None)
            router: Router wrapper (configured address for the chain if None)
            factory: Factory wrapper (configured address for the chain if None)
            calculator: QuoteCalculator (default 0.5% tolerance if None)
            clamp_policy: "rescale" to scale caller minimums down with a clamped
                withdrawal, "abort" to raise ClampInvalidatesMinimumError instead
            recheck_balance: Re-read the LP balance right before the burn call
            maxFeePerGas: Maximum fee per gas in Gwei (None = use config/no limit)
            maxPriorityFeePerGas: Priority fee in Gwei (None = use config)
            token_cls: Class used to wrap ERC20 tokens
            pair_cls: Class used to wrap pairs
        """
        if clamp_policy not in CLAMP_POLICIES:
            raise ValueError(f"clamp_policy must be one of {CLAMP_POLICIES}, got {clamp_policy!r}")

        self.manager = manager or Web3Manager(require_signer=True)
        self.config = Config()
        self.maxFeePerGas = maxFeePerGas
        self.maxPriorityFeePerGas = maxPriorityFeePerGas
        self.router = router or Router(self.manager, maxFeePerGas=maxFeePerGas,
                                       maxPriorityFeePerGas=maxPriorityFeePerGas)
        self.factory = factory or Factory(self.manager, maxFeePerGas=maxFeePerGas,
                                          maxPriorityFeePerGas=maxPriorityFeePerGas)
        self.calculator = calculator or QuoteCalculator()
        self.clamp_policy = clamp_policy
        self.recheck_balance = recheck_balance
        self.token_cls = token_cls
        self.pair_cls = pair_cls

    # ── Resolution helpers ───────────────────────────────────────────────

    def _address(self, symbol_or_address):
        """Token symbol or address -> checksummed address; ETH maps to the router's WETH"""
        if symbol_or_address.upper() == "ETH":
            return self.router.weth
        return self.manager.checksum(self.config.get_token_address(symbol_or_address))

    def _token(self, address):
        return self.token_cls(self.manager, address, maxFeePerGas=self.maxFeePerGas,
                              maxPriorityFeePerGas=self.maxPriorityFeePerGas)

    def _recipient(self, recipient):
        return self.manager.checksum(recipient or self.manager.address)

    def _deadline(self, deadline):
        if deadline is not None:
            return deadline
        return self.manager.get_block_timestamp() + self.config.DEFAULT_DEADLINE_SECONDS

    def resolve_pair(self, token_a, token_b):
        """
        Look up the pair for two tokens.

        Returns:
            Pair wrapper, or None when the factory has no pool for the tokens
        """
        token_a = self._address(token_a)
        token_b = self._address(token_b)
        address = self.factory.get_pair(token_a, token_b)
        if address is None:
            logger.debug("No pair for %s/%s", token_a, token_b)
            return None
        return self.pair_cls(self.manager, address, maxFeePerGas=self.maxFeePerGas,
                             maxPriorityFeePerGas=self.maxPriorityFeePerGas)

    def require_pair(self, token_a, token_b):
        """Like resolve_pair, but raises PairNotFoundError when no pool exists"""
        pair = self.resolve_pair(token_a, token_b)
        if pair is None:
            raise PairNotFoundError(token_a, token_b)
        return pair

    def create_pair(self, token_a, token_b):
        """
        Explicitly create the pool for two tokens. The add flows never do this.

        Raises:
            PoolError: If the pair already exists
        """
        token_a = self._address(token_a)
        token_b = self._address(token_b)
        existing = self.factory.get_pair(token_a, token_b)
        if existing is not None:
            raise PoolError(f"Pair already exists for {token_a}/{token_b}: {existing}")
        return self.factory.create_pair(token_a, token_b)

    # ── Step helpers ─────────────────────────────────────────────────────

    def _check_balance(self, token, amount, leg):
        balance = token.balance_of(self.manager.address)
        if balance < amount:
            raise InsufficientBalanceError(
                f"Insufficient {leg} balance for {token.address}: have {balance}, need {amount}"
            )

    def _approve(self, token, amount, leg, approvals):
        try:
            receipt = token.approve(self.router.address, amount)
        except TransactionError as e:
            e.leg = e.leg or leg
            raise
        approvals.append({
            "leg": leg,
            "token": token.address,
            "amount": amount,
            "tx_hash": Web3.to_hex(receipt.transactionHash) if receipt is not None else None,
        })

    def _submit(self, flow, legs, send):
        """Run the router call in the Submitted state, labelling reverts with leg/bound"""
        with flow.stage(FlowState.SUBMITTED):
            try:
                return send()
            except TransactionError as e:
                bound = classify_revert(e.reason)
                if bound in legs:
                    e.leg, e.bound = legs[bound]
                elif bound is not None:
                    e.bound = bound
                raise

    def _snapshot(self, pair, owner):
        snapshot = BalanceSnapshot(
            pair=pair.address,
            owner=owner,
            balance=pair.balance_of(owner),
            block_number=self.manager.get_block_number(),
        )
        logger.debug("LP balance of %s in %s: %d (block %s)",
                     owner, pair.address, snapshot.balance, snapshot.block_number)
        return snapshot

    def _clamp(self, requested, available, minimums):
        """
        Clamp a withdrawal against `available` and reconcile the minimums.

        Returns:
            (liquidity to burn, minimums valid for that amount)
        """
        if available == 0:
            raise InsufficientBalanceError("No liquidity-token balance to withdraw")

        clamped = self.calculator.safe_withdrawal_amount(requested, available)
        if clamped == 0:
            raise InsufficientBalanceError(
                f"Liquidity balance {available} too small to withdraw from"
            )
        if clamped == requested:
            return clamped, minimums

        logger.warning("Requested %d liquidity but only %d held; withdrawing %d",
                       requested, available, clamped)
        if self.clamp_policy == "abort" and any(minimums):
            raise ClampInvalidatesMinimumError(requested, clamped, minimums)
        rescaled = tuple(
            self.calculator.rescale_minimum(m, requested, clamped) for m in minimums
        )
        return clamped, rescaled

    def _result(self, flow, pair, receipt, approvals, **fields):
        result = {
            "flow": flow.name,
            "state": flow.state.value,
            "history": [state.value for state in flow.history],
            "pair": pair.address,
            "tx_hash": Web3.to_hex(receipt.transactionHash),
            "block": receipt.blockNumber,
            "receipt": receipt,
            "approvals": approvals,
        }
        result.update(fields)
        return result

    # ── Add flows ────────────────────────────────────────────────────────

    def add_liquidity(self, token_a, token_b, amount_a_desired, amount_b_desired,
                      tolerance=None, recipient=None, deadline=None):
        """
        Add liquidity to an existing token/token pair.

        Args:
            token_a: Token symbol or address ("token" leg)
            token_b: Token symbol or address ("counterparty" leg)
            amount_a_desired: Desired token_a amount in base units
            amount_b_desired: Desired token_b amount in base units
            tolerance: Slippage tolerance in [0, 1) (None = calculator default)
            recipient: Receiver of the LP tokens (default: sender)
            deadline: Unix timestamp (default: latest block + 10 minutes)

        Returns:
            Dict with amount_a, amount_b, liquidity, minimums, approvals, receipt

        Raises:
            InvalidToleranceError: Before any network call
            PairNotFoundError: Before any approval
            InsufficientBalanceError: Before any approval
            ApprovalFailedError: step "Approving"
            TransactionRevertedError: step "Submitted"
        """
        tolerance = validate_tolerance(self.calculator.tolerance if tolerance is None else tolerance)
        request = LiquidityRequest(
            token_a=self._address(token_a),
            token_b=self._address(token_b),
            amount_a_desired=amount_a_desired,
            amount_b_desired=amount_b_desired,
            tolerance=tolerance,
            recipient=self._recipient(recipient),
            deadline=self._deadline(deadline),
        )
        flow = LiquidityFlow("addLiquidity")

        pair = self.require_pair(request.token_a, request.token_b)
        first = self._token(request.token_a)
        second = self._token(request.token_b)
        self._check_balance(first, request.amount_a_desired, "token")
        self._check_balance(second, request.amount_b_desired, "counterparty")

        amount_a_min, amount_b_min = self.calculator.minimums(
            request.amount_a_desired, request.amount_b_desired, tolerance=request.tolerance
        )

        approvals = []
        with flow.stage(FlowState.APPROVING):
            self._approve(first, request.amount_a_desired, "token", approvals)
            self._approve(second, request.amount_b_desired, "counterparty", approvals)

        receipt = self._submit(flow, ADD_LEGS, lambda: self.router.add_liquidity(
            request.token_a,
            request.token_b,
            request.amount_a_desired,
            request.amount_b_desired,
            amount_a_min,
            amount_b_min,
            request.recipient,
            request.deadline,
        ))
        flow.confirm()

        amount_a, amount_b = pair.order(request.token_a, *(pair.minted(receipt) or (None, None)))
        liquidity = pair.liquidity_minted(receipt, request.recipient)
        logger.info("Added %s/%s to %s, minted %d liquidity", amount_a, amount_b, pair.address, liquidity)

        return self._result(
            flow, pair, receipt, approvals,
            token_a=request.token_a,
            token_b=request.token_b,
            amount_a=amount_a,
            amount_b=amount_b,
            liquidity=liquidity,
            minimums={"amountAMin": amount_a_min, "amountBMin": amount_b_min},
            deadline=request.deadline,
        )

    def add_liquidity_native(self, token, amount_token_desired, amount_native_desired,
                             min_native_amount, tolerance=None, recipient=None, deadline=None):
        """
        Add liquidity to an existing token/native pair.

        Only the token leg gets a computed minimum; the native leg is bounded
        by the attached value and the caller's min_native_amount.

        Args:
            token: Token symbol or address
            amount_token_desired: Desired token amount in base units
            amount_native_desired: Native amount (wei) attached as value
            min_native_amount: Native floor in wei
            tolerance: Slippage tolerance for the token leg
            recipient: Receiver of the LP tokens (default: sender)
            deadline: Unix timestamp (default: latest block + 10 minutes)

        Returns:
            Dict with amount_token, amount_native, liquidity, minimums, approvals, receipt
        """
        tolerance = validate_tolerance(self.calculator.tolerance if tolerance is None else tolerance)
        request = NativeLiquidityRequest(
            token=self._address(token),
            amount_token_desired=amount_token_desired,
            amount_native_desired=amount_native_desired,
            tolerance=tolerance,
            min_native_amount=min_native_amount,
            recipient=self._recipient(recipient),
            deadline=self._deadline(deadline),
        )
        flow = LiquidityFlow("addLiquidityETH")

        weth = self.router.weth
        pair = self.require_pair(request.token, weth)
        erc20 = self._token(request.token)
        self._check_balance(erc20, request.amount_token_desired, "token")
        native_balance = self.manager.get_balance(self.manager.address)
        if native_balance < request.amount_native_desired:
            raise InsufficientBalanceError(
                f"Insufficient native balance: have {native_balance}, "
                f"need {request.amount_native_desired}"
            )

        amount_token_min = self.calculator.minimum_amount(
            request.amount_token_desired, request.tolerance
        )

        approvals = []
        with flow.stage(FlowState.APPROVING):
            self._approve(erc20, request.amount_token_desired, "token", approvals)

        receipt = self._submit(flow, ADD_NATIVE_LEGS, lambda: self.router.add_liquidity_eth(
            request.token,
            request.amount_token_desired,
            amount_token_min,
            request.min_native_amount,
            request.recipient,
            request.deadline,
            value=request.amount_native_desired,
        ))
        flow.confirm()

        amount_token, amount_native = pair.order(request.token, *(pair.minted(receipt) or (None, None)))
        liquidity = pair.liquidity_minted(receipt, request.recipient)
        logger.info("Added %s token + %s native to %s, minted %d liquidity",
                    amount_token, amount_native, pair.address, liquidity)

        return self._result(
            flow, pair, receipt, approvals,
            token=request.token,
            amount_token=amount_token,
            amount_native=amount_native,
            liquidity=liquidity,
            minimums={"amountTokenMin": amount_token_min, "amountETHMin": request.min_native_amount},
            deadline=request.deadline,
        )

    # ── Remove flows ─────────────────────────────────────────────────────

    def _remove(self, flow, request, legs, send):
        """
        Shared removal sequence: snapshot, clamp, approve LP, re-check, burn.

        `send(liquidity, min_a, min_b)` performs the router call.
        """
        pair = self.require_pair(request.token_a, request.token_b)
        owner = self.manager.address

        snapshot = self._snapshot(pair, owner)
        liquidity, minimums = self._clamp(
            request.liquidity_desired, snapshot.balance, (request.min_a, request.min_b)
        )

        approvals = []
        with flow.stage(FlowState.APPROVING):
            self._approve(pair, liquidity, "liquidity", approvals)
            if self.recheck_balance:
                current = pair.balance_of(owner)
                if current < liquidity:
                    liquidity, minimums = self._clamp(liquidity, current, minimums)

        receipt = self._submit(flow, legs, lambda: send(liquidity, *minimums))
        flow.confirm()

        amount_a, amount_b = pair.order(request.token_a, *(pair.burned(receipt) or (None, None)))
        logger.info("Removed %d liquidity from %s for %s/%s",
                    liquidity, pair.address, amount_a, amount_b)

        fields = {
            "amount_a": amount_a,
            "amount_b": amount_b,
            "liquidity": liquidity,
            "liquidity_requested": request.liquidity_desired,
            "clamped": liquidity != request.liquidity_desired,
            "snapshot": snapshot.model_dump(),
            "minimums": minimums,
            "deadline": request.deadline,
        }
        return pair, receipt, approvals, fields

    def remove_liquidity(self, token_a, token_b, liquidity_desired, min_a=0, min_b=0,
                         recipient=None, deadline=None):
        """
        Remove liquidity from a token/token pair.

        The burn amount is clamped against the sender's live LP balance: the
        full request when covered, otherwise half the balance.

        Args:
            token_a: Token symbol or address ("token" leg)
            token_b: Token symbol or address ("counterparty" leg)
            liquidity_desired: LP tokens to burn
            min_a: Minimum token_a out
            min_b: Minimum token_b out
            recipient: Receiver of the underlying tokens (default: sender)
            deadline: Unix timestamp (default: latest block + 10 minutes)

        Returns:
            Dict with amount_a, amount_b, liquidity, clamped, snapshot, minimums, receipt

        Raises:
            PairNotFoundError: No pool for the tokens
            InsufficientBalanceError: Zero LP balance
            ClampInvalidatesMinimumError: Clamped under clamp_policy="abort"
            ApprovalFailedError: step "Approving"
            TransactionRevertedError: step "Submitted"
        """
        request = WithdrawalRequest(
            token_a=self._address(token_a),
            token_b=self._address(token_b),
            liquidity_desired=liquidity_desired,
            min_a=min_a,
            min_b=min_b,
            recipient=self._recipient(recipient),
            deadline=self._deadline(deadline),
        )
        flow = LiquidityFlow("removeLiquidity")

        def send(liquidity, amount_a_min, amount_b_min):
            return self.router.remove_liquidity(
                request.token_a, request.token_b, liquidity,
                amount_a_min, amount_b_min, request.recipient, request.deadline,
            )

        pair, receipt, approvals, fields = self._remove(flow, request, REMOVE_LEGS, send)
        fields["minimums"] = dict(zip(("amountAMin", "amountBMin"), fields["minimums"]))
        return self._result(flow, pair, receipt, approvals,
                            token_a=request.token_a, token_b=request.token_b, **fields)

    def remove_liquidity_native(self, token, liquidity_desired, min_token=0, min_native=0,
                                recipient=None, deadline=None):
        """
        Remove liquidity from a token/native pair, receiving native currency.

        Same clamping and approval sequence as remove_liquidity.

        Returns:
            Dict with amount_token, amount_native, liquidity, clamped, snapshot, minimums, receipt
        """
        request = WithdrawalRequest(
            token_a=self._address(token),
            token_b=self.router.weth,
            liquidity_desired=liquidity_desired,
            min_a=min_token,
            min_b=min_native,
            recipient=self._recipient(recipient),
            deadline=self._deadline(deadline),
        )
        flow = LiquidityFlow("removeLiquidityETH")

        def send(liquidity, amount_token_min, amount_native_min):
            return self.router.remove_liquidity_eth(
                request.token_a, liquidity, amount_token_min, amount_native_min,
                request.recipient, request.deadline,
            )

        pair, receipt, approvals, fields = self._remove(flow, request, REMOVE_NATIVE_LEGS, send)
        fields["amount_token"] = fields.pop("amount_a")
        fields["amount_native"] = fields.pop("amount_b")
        fields["minimums"] = dict(zip(("amountTokenMin", "amountETHMin"), fields["minimums"]))
        return self._result(flow, pair, receipt, approvals, token=request.token_a, **fields)

    # ── Read-only ────────────────────────────────────────────────────────

    def quote_removal(self, token_a, token_b, liquidity=None, tolerance=None, owner=None):
        """
        Estimate what burning `liquidity` would return, and minimums for it.

        Pro-rata share of current reserves; valid only at read time.

        Args:
            token_a: Token symbol or address
            token_b: Token symbol or address
            liquidity: LP amount (None = owner's whole balance)
            tolerance: Slippage tolerance for the minimums
            owner: Address whose balance to read (default: sender)

        Returns:
            Dict with balance, liquidity, share of supply, expected amounts and minimums
        """
        tolerance = validate_tolerance(self.calculator.tolerance if tolerance is None else tolerance)
        token_a = self._address(token_a)
        token_b = self._address(token_b)
        pair = self.require_pair(token_a, token_b)
        owner = self.manager.checksum(owner or self.manager.address)

        balance = pair.balance_of(owner)
        if liquidity is None:
            liquidity = balance
        reserve_a, reserve_b = pair.reserves_for(token_a)
        total_supply = pair.total_supply()

        amount_a, amount_b = self.calculator.expected_withdrawal(
            liquidity, reserve_a, reserve_b, total_supply
        )
        min_a, min_b = self.calculator.minimums(amount_a, amount_b, tolerance=tolerance)

        return {
            "pair": pair.address,
            "owner": owner,
            "token_a": token_a,
            "token_b": token_b,
            "balance": balance,
            "liquidity": liquidity,
            "total_supply": total_supply,
            "share": str(Fraction(liquidity, total_supply)) if total_supply else "0",
            "reserves": {"a": reserve_a, "b": reserve_b},
            "expected": {"a": amount_a, "b": amount_b},
            "minimums": {"a": min_a, "b": min_b},
            "tolerance": str(tolerance),
        }

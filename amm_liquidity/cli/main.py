"""Main CLI entry point"""

import sys
import json
import logging
import argparse
from decimal import Decimal, InvalidOperation
from pathlib import Path

from web3 import Web3

from ..core.connection import Web3Manager
from ..core.exceptions import AMMError, TransactionError
from ..contracts.erc20 import ERC20
from ..operations.liquidity import LiquidityOrchestrator
from ..operations.quotes import minimum_amount, safe_withdrawal_amount, validate_tolerance


def get_results_dir():
    """Get results directory, create if needed"""
    results_dir = Path.cwd() / "results"
    results_dir.mkdir(exist_ok=True)
    return results_dir


def save_result(filename, data):
    """Save result to JSON file in results directory"""
    filepath = get_results_dir() / filename
    with open(filepath, "w") as f:
        json.dump(data, f, indent=2, default=str)
    return filepath


def decimal_arg(value):
    """argparse type: exact decimal amount (never float)"""
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"invalid amount: {value!r}")
    if not amount.is_finite() or amount < 0:
        raise argparse.ArgumentTypeError(f"amount must be a non-negative number: {value!r}")
    return amount


def build_orchestrator(args, require_signer=True):
    manager = Web3Manager(require_signer=require_signer)
    return LiquidityOrchestrator(
        manager=manager,
        clamp_policy="abort" if getattr(args, "abort_on_clamp", False) else "rescale",
        maxFeePerGas=args.max_fee,
        maxPriorityFeePerGas=args.priority_fee,
    )


def deadline_from(orchestrator, args):
    if args.deadline is None:
        return None
    return orchestrator.manager.get_block_timestamp() + args.deadline


def base_units(orchestrator, token, amount):
    """Human amount -> base units using the token's decimals"""
    address = orchestrator._address(token)
    return ERC20(orchestrator.manager, address).to_wei(amount)


def ether_units(amount):
    return int(Web3.to_wei(amount, "ether"))


def summarize(result):
    """Drop the raw receipt so the result is JSON-friendly"""
    return {k: v for k, v in result.items() if k != "receipt"}


def print_result(title, result, filename):
    print("=" * 60)
    print(title)
    print("=" * 60)
    data = summarize(result)
    print(json.dumps(data, indent=2, default=str))
    filepath = save_result(filename, data)
    print(f"\nSaved to {filepath}", file=sys.stderr)


def cmd_quote_min(args):
    """Minimum amount for a desired amount and tolerance (no network)"""
    tolerance = validate_tolerance(args.tolerance)
    print(f"Desired:   {args.amount}")
    print(f"Tolerance: {tolerance} ({float(tolerance) * 100:.4g}%)")
    print(f"Minimum:   {minimum_amount(args.amount, tolerance)}")
    if args.available is not None:
        print(f"Withdraw:  {safe_withdrawal_amount(args.amount, args.available)} "
              f"(available {args.available})")


def cmd_pair(args):
    """Look up the pair for two tokens"""
    orchestrator = build_orchestrator(args, require_signer=False)
    pair = orchestrator.resolve_pair(args.token_a, args.token_b)
    if pair is None:
        print(f"No pair exists for {args.token_a}/{args.token_b}")
        sys.exit(1)
    reserve0, reserve1, _ = pair.get_reserves()
    print(f"Pair:     {pair.address}")
    print(f"token0:   {pair.token0}  reserve {reserve0}")
    print(f"token1:   {pair.token1}  reserve {reserve1}")
    print(f"LP supply {pair.total_supply()}")


def cmd_position(args):
    """LP balance and what withdrawing it would return"""
    orchestrator = build_orchestrator(args, require_signer=False)
    liquidity = ether_units(args.liquidity) if args.liquidity is not None else None
    result = orchestrator.quote_removal(
        args.token_a, args.token_b,
        liquidity=liquidity,
        tolerance=args.tolerance,
        owner=args.owner,
    )
    print_result(f"POSITION {args.token_a}/{args.token_b}", result,
                 f"position_{result['pair'][:10]}.json")


def cmd_create_pair(args):
    """Create the pool for two tokens"""
    orchestrator = build_orchestrator(args)
    result = orchestrator.create_pair(args.token_a, args.token_b)
    print(f"Created pair {result['pair']}")
    print(f"Tx: {Web3.to_hex(result['receipt'].transactionHash)}")


def cmd_add(args):
    """Add token/token liquidity"""
    validate_tolerance(args.tolerance)
    orchestrator = build_orchestrator(args)
    print(f"Adding liquidity: {args.amount_a} {args.token_a} + {args.amount_b} {args.token_b}")

    result = orchestrator.add_liquidity(
        args.token_a,
        args.token_b,
        base_units(orchestrator, args.token_a, args.amount_a),
        base_units(orchestrator, args.token_b, args.amount_b),
        tolerance=args.tolerance,
        recipient=args.recipient,
        deadline=deadline_from(orchestrator, args),
    )
    print_result(f"ADDED LIQUIDITY ({result['liquidity']} LP)", result,
                 f"add_liquidity_{result['tx_hash'][:10]}.json")


def cmd_add_eth(args):
    """Add token/native liquidity"""
    validate_tolerance(args.tolerance)
    orchestrator = build_orchestrator(args)
    print(f"Adding liquidity: {args.amount_token} {args.token} + {args.amount_eth} ETH")

    result = orchestrator.add_liquidity_native(
        args.token,
        base_units(orchestrator, args.token, args.amount_token),
        ether_units(args.amount_eth),
        ether_units(args.min_eth),
        tolerance=args.tolerance,
        recipient=args.recipient,
        deadline=deadline_from(orchestrator, args),
    )
    print_result(f"ADDED LIQUIDITY ETH ({result['liquidity']} LP)", result,
                 f"add_liquidity_eth_{result['tx_hash'][:10]}.json")


def cmd_remove(args):
    """Remove token/token liquidity"""
    orchestrator = build_orchestrator(args)
    print(f"Removing {args.liquidity} LP from {args.token_a}/{args.token_b}")

    result = orchestrator.remove_liquidity(
        args.token_a,
        args.token_b,
        ether_units(args.liquidity),
        min_a=base_units(orchestrator, args.token_a, args.min_a),
        min_b=base_units(orchestrator, args.token_b, args.min_b),
        recipient=args.recipient,
        deadline=deadline_from(orchestrator, args),
    )
    if result["clamped"]:
        print(f"WARNING: balance below request, withdrew {result['liquidity']} instead")
    print_result("REMOVED LIQUIDITY", result, f"remove_liquidity_{result['tx_hash'][:10]}.json")


def cmd_remove_eth(args):
    """Remove token/native liquidity"""
    orchestrator = build_orchestrator(args)
    print(f"Removing {args.liquidity} LP from {args.token}/ETH")

    result = orchestrator.remove_liquidity_native(
        args.token,
        ether_units(args.liquidity),
        min_token=base_units(orchestrator, args.token, args.min_token),
        min_native=ether_units(args.min_eth),
        recipient=args.recipient,
        deadline=deadline_from(orchestrator, args),
    )
    if result["clamped"]:
        print(f"WARNING: balance below request, withdrew {result['liquidity']} instead")
    print_result("REMOVED LIQUIDITY ETH", result,
                 f"remove_liquidity_eth_{result['tx_hash'][:10]}.json")


def add_tx_options(parser, tolerance=False):
    parser.add_argument("--recipient", help="Receiver (default: wallet address)")
    parser.add_argument("--deadline", type=int, help="Seconds from latest block (default: 600)")
    if tolerance:
        parser.add_argument("--tolerance", default="0.005",
                            help="Slippage tolerance as a fraction or percent (default: 0.005)")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="amm-liquidity",
        description="Add and remove liquidity on Uniswap V2 style pools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""examples:
  amm-liquidity quote-min 100000000 0.2                    # Minimum for 20% tolerance
  amm-liquidity pair USDC DAI                              # Look up a pair
  amm-liquidity add USDC DAI 100 100 --tolerance 0.5%      # Add token/token liquidity
  amm-liquidity add-eth USDC 100 0.05 --min-eth 0.01       # Add token/ETH liquidity
  amm-liquidity remove-eth USDC 1                          # Burn 1 LP token for USDC + ETH

configuration:
  RPC_URL                         Set in .env file
  PUBLIC_KEY, PRIVATE_KEY         Set in wallet.env
  ROUTER_ADDRESS, FACTORY_ADDRESS Override packaged addresses
  tokens                          config/tokens.json
  gas                             gas_config.json
""",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--max-fee", type=float, help="maxFeePerGas in Gwei")
    parser.add_argument("--priority-fee", type=float, help="maxPriorityFeePerGas in Gwei")
    subparsers = parser.add_subparsers(dest="command", help="Command")

    quote_parser = subparsers.add_parser("quote-min", help="Minimum amount for a tolerance")
    quote_parser.add_argument("amount", type=int, help="Desired amount in base units")
    quote_parser.add_argument("tolerance", help="Tolerance, e.g. 0.2 or 20%%")
    quote_parser.add_argument("--available", type=int, help="Available balance to clamp against")
    quote_parser.set_defaults(func=cmd_quote_min)

    pair_parser = subparsers.add_parser("pair", help="Look up a pair")
    pair_parser.add_argument("token_a", help="Token symbol or address")
    pair_parser.add_argument("token_b", help="Token symbol or address")
    pair_parser.set_defaults(func=cmd_pair)

    position_parser = subparsers.add_parser("position", help="LP balance and withdrawal estimate")
    position_parser.add_argument("token_a", help="Token symbol or address")
    position_parser.add_argument("token_b", help="Token symbol or address")
    position_parser.add_argument("--liquidity", type=decimal_arg, help="LP amount (default: whole balance)")
    position_parser.add_argument("--owner", help="Address to query (default: wallet.env)")
    position_parser.add_argument("--tolerance", default="0.005", help="Tolerance for minimums")
    position_parser.set_defaults(func=cmd_position)

    create_parser = subparsers.add_parser("create-pair", help="Create a pool for two tokens")
    create_parser.add_argument("token_a", help="Token symbol or address")
    create_parser.add_argument("token_b", help="Token symbol or address")
    create_parser.set_defaults(func=cmd_create_pair)

    add_parser = subparsers.add_parser("add", help="Add token/token liquidity")
    add_parser.add_argument("token_a", help="Token symbol or address")
    add_parser.add_argument("token_b", help="Token symbol or address")
    add_parser.add_argument("amount_a", type=decimal_arg, help="Amount of token_a")
    add_parser.add_argument("amount_b", type=decimal_arg, help="Amount of token_b")
    add_tx_options(add_parser, tolerance=True)
    add_parser.set_defaults(func=cmd_add)

    add_eth_parser = subparsers.add_parser("add-eth", help="Add token/ETH liquidity")
    add_eth_parser.add_argument("token", help="Token symbol or address")
    add_eth_parser.add_argument("amount_token", type=decimal_arg, help="Amount of token")
    add_eth_parser.add_argument("amount_eth", type=decimal_arg, help="ETH to attach")
    add_eth_parser.add_argument("--min-eth", type=decimal_arg, default=Decimal(0), help="Minimum ETH deposited")
    add_tx_options(add_eth_parser, tolerance=True)
    add_eth_parser.set_defaults(func=cmd_add_eth)

    remove_parser = subparsers.add_parser("remove", help="Remove token/token liquidity")
    remove_parser.add_argument("token_a", help="Token symbol or address")
    remove_parser.add_argument("token_b", help="Token symbol or address")
    remove_parser.add_argument("liquidity", type=decimal_arg, help="LP tokens to burn")
    remove_parser.add_argument("--min-a", type=decimal_arg, default=Decimal(0), help="Minimum token_a out")
    remove_parser.add_argument("--min-b", type=decimal_arg, default=Decimal(0), help="Minimum token_b out")
    remove_parser.add_argument("--abort-on-clamp", action="store_true",
                               help="Abort instead of rescaling minimums when the balance is short")
    add_tx_options(remove_parser)
    remove_parser.set_defaults(func=cmd_remove)

    remove_eth_parser = subparsers.add_parser("remove-eth", help="Remove token/ETH liquidity")
    remove_eth_parser.add_argument("token", help="Token symbol or address")
    remove_eth_parser.add_argument("liquidity", type=decimal_arg, help="LP tokens to burn")
    remove_eth_parser.add_argument("--min-token", type=decimal_arg, default=Decimal(0), help="Minimum token out")
    remove_eth_parser.add_argument("--min-eth", type=decimal_arg, default=Decimal(0), help="Minimum ETH out")
    remove_eth_parser.add_argument("--abort-on-clamp", action="store_true",
                                   help="Abort instead of rescaling minimums when the balance is short")
    add_tx_options(remove_eth_parser)
    remove_eth_parser.set_defaults(func=cmd_remove_eth)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except KeyboardInterrupt:
        print("\nCancelled.")
        sys.exit(1)
    except TransactionError as e:
        print(f"Transaction failed at {e.step or 'unknown step'}: {e}")
        sys.exit(1)
    except AMMError as e:
        print(f"Error: {e}")
        sys.exit(1)
    except Exception as e:
        logging.getLogger(__name__).debug("Unhandled error", exc_info=True)
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

"""Command-line interface for prime_cache."""

from __future__ import annotations

import argparse
import logging
import sys
from itertools import islice

from prime_cache.core.sieve import PrimeSieve


def setup_console_logger(verbose: bool = False) -> logging.Logger:
    """Set up the package logger to write to the console."""
    logger = logging.getLogger("prime_cache")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False

    # Clear any existing handlers
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter('%(message)s'))
    logger.addHandler(console_handler)

    return logger


def cmd_is_prime(args: argparse.Namespace) -> int:
    """Report primality of each number."""
    sieve = PrimeSieve()
    if args.bound is not None:
        sieve.extend_to(args.bound)

    for n in args.numbers:
        if n < 0:
            raise ValueError(f"n must be >= 0, got {n}")
        verdict = "is prime" if sieve.is_prime(n) else "is not prime"
        print(f"{n} {verdict}")

    return 0


def cmd_first(args: argparse.Namespace) -> int:
    """Print the first K primes."""
    if args.count < 0:
        raise ValueError(f"count must be >= 0, got {args.count}")

    with PrimeSieve().into_iter() as primes:
        for p in islice(primes, args.count):
            print(p)

    return 0


def cmd_upto(args: argparse.Namespace) -> int:
    """Print all primes up to and including N."""
    sieve = PrimeSieve()
    for p in sieve.primes_up_to(args.limit).tolist():
        print(p)

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="prime-cache",
        description="Incremental prime sieve queries",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log sieve growth")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    is_prime_parser = subparsers.add_parser("is-prime", help="Check numbers for primality")
    is_prime_parser.add_argument("numbers", type=int, nargs="+", help="Numbers to check")
    is_prime_parser.add_argument("--bound", type=int, default=None, help="Grow the sieve to this bound first")

    first_parser = subparsers.add_parser("first", help="Print the first K primes")
    first_parser.add_argument("count", type=int, help="Number of primes")

    upto_parser = subparsers.add_parser("upto", help="Print all primes <= N")
    upto_parser.add_argument("limit", type=int, help="Upper bound (inclusive)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    setup_console_logger(args.verbose)

    commands = {
        "is-prime": cmd_is_prime,
        "first": cmd_first,
        "upto": cmd_upto,
    }

    try:
        return commands[args.command](args)
    except (ValueError, OverflowError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())

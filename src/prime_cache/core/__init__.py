"""Core sieve engine and prime iterators."""

from prime_cache.core.sieve import MAX_VALUE, PrimeSieve, SieveBorrowedError
from prime_cache.core.iterators import PrimeIterator

__all__ = [
    "MAX_VALUE",
    "PrimeSieve",
    "SieveBorrowedError",
    "PrimeIterator",
]

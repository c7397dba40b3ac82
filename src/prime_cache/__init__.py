"""prime_cache - incremental, cached prime generation with a growable sieve."""

__version__ = "0.1.0"

from prime_cache.core.sieve import MAX_VALUE, PrimeSieve, SieveBorrowedError
from prime_cache.core.iterators import PrimeIterator

__all__ = [
    "MAX_VALUE",
    "PrimeSieve",
    "SieveBorrowedError",
    "PrimeIterator",
]

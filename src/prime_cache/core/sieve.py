"""Incremental prime sieve with cached state.

The sieve of Eratosthenes is kept as a growable NumPy boolean mask where
``composite[i]`` is True when i is known not to be prime. The mask length is
always a power of two; growing it doubles (or more) the covered range and
only sieves the newly added segment, reusing every prime found so far.
"""

from __future__ import annotations

import logging
import weakref
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from prime_cache.core.iterators import PrimeIterator

logger = logging.getLogger(__name__)

MAX_VALUE = int(np.iinfo(np.uint64).max)


class SieveBorrowedError(RuntimeError):
    """Raised when a sieve is grown while a borrowing iterator holds it."""


def _check_value(n, name: str = "n") -> int:
    """Validate an index into the sieve domain and return it as a Python int.

    Raises:
        TypeError: If n is not an integer.
        ValueError: If n is negative.
        OverflowError: If n exceeds MAX_VALUE.
    """
    if isinstance(n, (bool, np.bool_)) or not isinstance(n, (int, np.integer)):
        raise TypeError(f"{name} must be an integer, got {type(n).__name__}")
    n = int(n)
    if n < 0:
        raise ValueError(f"{name} must be >= 0, got {n}")
    if n > MAX_VALUE:
        raise OverflowError(f"{name} must be <= {MAX_VALUE}, got {n}")
    return n


def _readonly(array: np.ndarray) -> np.ndarray:
    """Return a view of array that rejects writes."""
    view = array.view()
    view.flags.writeable = False
    return view


def _strike_known_primes(composite: np.ndarray, primes: np.ndarray, old_len: int) -> None:
    """Mark multiples of already known primes inside composite[old_len:]."""
    for p in map(int, primes):
        start = (old_len + p - 1) // p * p
        composite[start::p] = True


def _strike_new_primes(composite: np.ndarray, old_len: int) -> np.ndarray:
    """Sieve composite[old_len:] with the primes it contains.

    Every multiple of a smaller prime must already be struck, so each new
    prime only needs marking from its square onwards.

    Returns:
        Array of primes found in the new segment, in increasing order.
    """
    new_len = len(composite)
    for i in range(old_len, int(np.sqrt(new_len - 1)) + 1):
        if not composite[i]:
            composite[i * i::i] = True

    return np.flatnonzero(~composite[old_len:]).astype(np.int64) + old_len


class PrimeSieve:
    """Growable sieve of Eratosthenes with a cached list of primes.

    A fresh sieve covers 0..3. Growth is explicit (extend_to, extend_by_count)
    or implicit through the helpers that need a larger range (nth_prime,
    primes_up_to, iteration). Primality queries never grow the sieve.

    Attributes:
        sieve: Read-only boolean mask, True where the index is not prime.
        primes: Read-only array of every prime below len(sieve).
    """

    def __init__(self):
        self._composite = np.array([True, True, False, False], dtype=bool)
        self._primes = np.zeros(4, dtype=np.int64)
        self._primes[:2] = (2, 3)
        self._count = 2
        self._borrow: weakref.ref | None = None

    @classmethod
    def up_to(cls, n: int) -> PrimeSieve:
        """Create a sieve already grown to cover n."""
        sieve = cls()
        sieve.extend_to(n)
        return sieve

    @property
    def sieve(self) -> np.ndarray:
        return _readonly(self._composite)

    @property
    def primes(self) -> np.ndarray:
        return _readonly(self._primes[:self._count])

    def __len__(self) -> int:
        return len(self._composite)

    def __contains__(self, n) -> bool:
        return self.is_prime(n)

    def __iter__(self):
        return self.iter()

    def __repr__(self) -> str:
        return f"PrimeSieve(length={len(self._composite)}, primes={self._count})"

    def copy(self) -> PrimeSieve:
        """Return an independent sieve with the same state."""
        clone = PrimeSieve()
        clone._composite = self._composite.copy()
        clone._primes = self._primes[:self._count].copy()
        clone._count = self._count
        return clone

    def iter(self) -> PrimeIterator:
        """Iterate primes in order, growing this sieve as needed.

        The iterator borrows the sieve exclusively until it is closed or
        garbage collected.
        """
        from prime_cache.core.iterators import PrimeIterator

        return PrimeIterator.borrowing(self)

    def into_iter(self) -> PrimeIterator:
        """Iterate primes in order over a private copy of this sieve."""
        from prime_cache.core.iterators import PrimeIterator

        return PrimeIterator.owning(self)

    def extend_to(self, n: int) -> None:
        """Grow the sieve so that it covers index n.

        The new length is the smallest power of two greater than n. Does
        nothing if n is already covered.

        Args:
            n: Index that must be resolved after the call.

        Raises:
            SieveBorrowedError: If a borrowing iterator is live.
        """
        n = _check_value(n)
        self._check_not_borrowed()
        self._grow_to(n)

    def extend_by_count(self, amount: int) -> None:
        """Grow the sieve until at least amount + 1 primes are known.

        Raises:
            SieveBorrowedError: If a borrowing iterator is live.
        """
        amount = _check_value(amount, "amount")
        self._check_not_borrowed()
        self._grow_by_count(amount)

    def is_prime(self, n: int) -> bool:
        """Check if n is prime without growing the sieve.

        Numbers inside the sieve are answered by lookup. Larger numbers are
        trial divided by the known primes, then by 6k +/- 1 candidates past
        the last known prime.

        Args:
            n: Number to check. Anything below 2 is not prime.

        Returns:
            True if n is prime, False otherwise.
        """
        if isinstance(n, (bool, np.bool_)) or not isinstance(n, (int, np.integer)):
            raise TypeError(f"n must be an integer, got {type(n).__name__}")
        n = int(n)
        if n < 2:
            return False
        if n > MAX_VALUE:
            raise OverflowError(f"n must be <= {MAX_VALUE}, got {n}")

        if n < len(self._composite):
            return not self._composite[n]

        if n % 2 == 0 or n % 3 == 0:
            return False

        for p in map(int, self._primes[:self._count]):
            if p * p > n:
                return True
            if n % p == 0:
                return False

        last = int(self._primes[self._count - 1])
        if last % 6 == 1:
            candidate = last - 1
        elif last % 6 == 5:
            candidate = last + 1
        else:
            candidate = 6

        while (candidate - 1) * (candidate - 1) <= n:
            if n % (candidate - 1) == 0 or n % (candidate + 1) == 0:
                return False
            candidate += 6

        return True

    def nth_prime(self, k: int) -> int:
        """Return the kth prime number (1-indexed), growing as needed.

        Raises:
            ValueError: If k is less than 1.
        """
        k = _check_value(k, "k")
        if k < 1:
            raise ValueError(f"k must be >= 1, got {k}")

        self.extend_by_count(k - 1)
        return int(self._primes[k - 1])

    def primes_up_to(self, n: int) -> np.ndarray:
        """Return all primes <= n as a read-only array, growing as needed."""
        n = _check_value(n)
        self.extend_to(n)
        stop = int(np.searchsorted(self._primes[:self._count], n, side="right"))
        return _readonly(self._primes[:stop])

    def count_primes(self, n: int) -> int:
        """Count primes <= n, growing as needed."""
        return len(self.primes_up_to(n))

    def is_prime_array(self, numbers) -> np.ndarray:
        """Check primality for an array of non-negative integers.

        Grows the sieve to cover max(numbers) and answers by lookup.

        Returns:
            Boolean array where True indicates prime.
        """
        numbers = np.asarray(numbers)
        if numbers.size == 0:
            return np.array([], dtype=bool)
        if not np.issubdtype(numbers.dtype, np.integer):
            raise TypeError(f"numbers must be integers, got dtype {numbers.dtype}")
        if numbers.min() < 0:
            raise ValueError(f"numbers must be >= 0, got {numbers.min()}")

        self.extend_to(int(numbers.max()))
        return ~self._composite[numbers]

    def _grow_to(self, n: int) -> None:
        old_len = len(self._composite)
        if old_len > n:
            return

        new_len = 1 << n.bit_length()
        composite = np.concatenate([self._composite, np.zeros(new_len - old_len, dtype=bool)])

        _strike_known_primes(composite, self._primes[:self._count], old_len)
        found = _strike_new_primes(composite, old_len)

        self._composite = composite
        self._append_primes(found)

        logger.debug(f"Sieve grown {old_len} -> {new_len}, {len(found)} new primes ({self._count} total)")

    def _grow_by_count(self, amount: int) -> None:
        while self._count <= amount:
            self._grow_to(len(self._composite))

    def _append_primes(self, found: np.ndarray) -> None:
        needed = self._count + len(found)
        if needed > len(self._primes):
            buffer = np.zeros(max(needed, 2 * len(self._primes)), dtype=np.int64)
            buffer[:self._count] = self._primes[:self._count]
            self._primes = buffer

        self._primes[self._count:needed] = found
        self._count = needed

    def _acquire(self, iterator) -> None:
        self._check_not_borrowed()
        self._borrow = weakref.ref(iterator)

    def _release(self, iterator) -> None:
        if self._borrow is not None and self._borrow() is iterator:
            self._borrow = None

    def _check_not_borrowed(self) -> None:
        if self._borrow is not None and self._borrow() is not None:
            raise SieveBorrowedError(
                "Sieve is borrowed by a live PrimeIterator; close it before growing the sieve"
            )

"""Lazy prime iteration over a PrimeSieve."""

from __future__ import annotations

from prime_cache.core.sieve import PrimeSieve


class PrimeIterator:
    """Infinite iterator yielding primes in increasing order.

    Each step grows the underlying sieve just enough for the next prime to
    exist. The iterator either owns a private sieve or borrows one
    exclusively: while a borrowing iterator is open, growing the borrowed
    sieve from anywhere else raises SieveBorrowedError.

    An open iterator never runs out. Once closed it raises StopIteration
    and no longer touches the sieve.

    Attributes:
        engine: The sieve being grown.
        owned: True if the iterator owns the sieve.
        index: Number of primes yielded so far.
    """

    def __init__(self, engine: PrimeSieve, owned: bool):
        self.engine = engine
        self.owned = owned
        self.index = 0
        self._closed = False

        if owned:
            engine._check_not_borrowed()
        else:
            engine._acquire(self)

    @classmethod
    def owning(cls, engine: PrimeSieve | None = None) -> PrimeIterator:
        """Create an iterator over a private sieve.

        Args:
            engine: Sieve whose state seeds the iterator. It is copied, so
                iterating never grows it. A new sieve is used by default.
        """
        return cls(engine.copy() if engine is not None else PrimeSieve(), owned=True)

    @classmethod
    def borrowing(cls, engine: PrimeSieve) -> PrimeIterator:
        """Create an iterator holding an exclusive borrow of engine."""
        return cls(engine, owned=False)

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> PrimeIterator:
        return self

    def __next__(self) -> int:
        if self._closed:
            raise StopIteration

        self.index += 1
        self.engine._grow_by_count(self.index)
        return int(self.engine.primes[self.index - 1])

    def close(self) -> None:
        """Stop iterating and release the borrow, if any."""
        if self._closed:
            return
        self._closed = True
        if not self.owned:
            self.engine._release(self)

    def __enter__(self) -> PrimeIterator:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        mode = "owning" if self.owned else "borrowing"
        return f"PrimeIterator({mode}, index={self.index}, closed={self._closed})"

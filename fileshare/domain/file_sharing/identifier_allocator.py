"""
Identifier Allocator

Mints the short public identifiers used in share links.
"""

import logging
import secrets
import string
import threading
import time
from typing import Callable, Optional, Set

logger = logging.getLogger(__name__)

IDENTIFIER_ALPHABET = string.ascii_letters


class IdentifierAllocator:
    """
    Domain service minting short random identifiers.

    Identifiers are drawn from case-sensitive ASCII letters with a length
    picked uniformly in [min_length, max_length] on every attempt. Returned
    identifiers are remembered in a process-local set and never handed out
    twice by the same allocator. The set does not survive restarts and is not
    shared between processes; callers that need more pass an ``in_use``
    predicate (for example, membership in the identifiers currently on disk).

    After ``max_attempts`` collisions the last candidate gets a suffix made of
    the last four digits of the millisecond clock and is returned without
    another check, so allocation always terminates.
    """

    def __init__(self, min_length: int = 5, max_length: int = 12,
                 max_attempts: int = 1000):
        """
        Initialize IdentifierAllocator.

        Args:
            min_length: Shortest identifier length
            max_length: Longest identifier length
            max_attempts: Collision retries before the time-suffix fallback

        Raises:
            ValueError: If the configuration is inconsistent
        """
        if min_length < 1:
            raise ValueError("min_length must be at least 1")
        if max_length < min_length:
            raise ValueError("max_length must not be smaller than min_length")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.min_length = min_length
        self.max_length = max_length
        self.max_attempts = max_attempts
        self._used: Set[str] = set()
        self._lock = threading.Lock()

    def allocate(self, in_use: Optional[Callable[[str], bool]] = None) -> str:
        """
        Mint a new identifier.

        Args:
            in_use: Optional extra check; candidates for which it returns
                True are rejected like process-local collisions

        Returns:
            Identifier string
        """
        with self._lock:
            candidate = self._generate()
            attempts = 1
            while self._is_taken(candidate, in_use):
                if attempts >= self.max_attempts:
                    candidate += str(int(time.time() * 1000))[-4:]
                    logger.warning(
                        f"Identifier space congested after {attempts} attempts, "
                        f"falling back to time suffix"
                    )
                    break
                candidate = self._generate()
                attempts += 1

            self._used.add(candidate)
            return candidate

    def is_allocated(self, identifier: str) -> bool:
        """Check whether this allocator already handed out an identifier."""
        with self._lock:
            return identifier in self._used

    def release(self, identifier: str) -> None:
        """Forget an identifier whose upload never became a live object."""
        with self._lock:
            self._used.discard(identifier)

    def _is_taken(self, candidate: str, in_use: Optional[Callable[[str], bool]]) -> bool:
        if candidate in self._used:
            return True
        return bool(in_use and in_use(candidate))

    def _generate(self) -> str:
        length = self.min_length + secrets.randbelow(self.max_length - self.min_length + 1)
        return "".join(secrets.choice(IDENTIFIER_ALPHABET) for _ in range(length))

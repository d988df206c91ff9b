"""Adaptive password hashing on a bounded worker pool."""
import logging
from concurrent.futures import ThreadPoolExecutor

import bcrypt

logger = logging.getLogger(__name__)

# bcrypt only reads the first 72 bytes of a password.
_BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def _hash(password: str, rounds: int) -> str:
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def _verify(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed; treating as mismatch")
        return False


class PasswordHasher:
    """Hash and verify passwords without tying up request threads.

    bcrypt is deliberately slow, so every call is handed to a small
    dedicated pool. At most ``max_workers`` hashes run at once, which
    leaves the rest of the process free for session lookups.
    """

    def __init__(self, rounds: int = 10, max_workers: int = 4) -> None:
        self.rounds = rounds
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="bcrypt")

    def hash(self, password: str) -> str:
        """Hash a password."""
        return self._executor.submit(_hash, password, self.rounds).result()

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against its hash."""
        return self._executor.submit(_verify, password, password_hash).result()

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)

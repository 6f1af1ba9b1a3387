"""bcrypt password hashing. Runs in a worker thread so the event loop is not blocked."""

import asyncio

import bcrypt

BCRYPT_ROUNDS = 12

# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


def _hash(password: str, rounds: int) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=rounds)).decode()


def _verify(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        # Malformed stored hash or over-long password
        return False


async def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    return await asyncio.to_thread(_hash, password, rounds)


async def verify_password(password: str, password_hash: str) -> bool:
    return await asyncio.to_thread(_verify, password, password_hash)


_dummy_hash: str | None = None


async def dummy_hash() -> str:
    """A throwaway hash at full cost, so unknown-user logins spend the same bcrypt time."""
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = await hash_password("unused-login-placeholder")
    return _dummy_hash

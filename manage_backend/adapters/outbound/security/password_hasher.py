# manage_backend/adapters/outbound/security/password_hasher.py

from typing import List

from passlib.context import CryptContext

from manage_backend.application.ports.outbound import IPasswordHasher


class PasslibPasswordHasher(IPasswordHasher):
    """
    Password KDF backed by passlib.
    """

    def __init__(self, schemes: List[str]):
        self.crypt_context = CryptContext(schemes=schemes, deprecated="auto")

    async def hash_password(self, password: str) -> str:
        """Return the hash of a plain text password."""
        return self.crypt_context.hash(password)

    async def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify if the plain text password matches the stored hash."""
        if not hashed_password:
            return False
        return self.crypt_context.verify(plain_password, hashed_password)

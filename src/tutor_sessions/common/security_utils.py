'''
Password hashing for profile logins. Kept out of the services package so
models, services and scripts can all import it without circular imports.
'''
import hashlib
from typing import Optional

from passlib.context import CryptContext


class HashedPassword:
    # Hashes under a deprecated scheme (or older bcrypt rounds) are upgraded on the next login.
    pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

    @classmethod
    def verify(cls, plain_password: str, hashed_password: str) -> bool:
        return cls.pwd_context.verify(plain_password, hashed_password)

    @classmethod
    def verify_and_update(cls, plain_password: str, hashed_password: str) -> tuple[bool, Optional[str]]:
        """
        Returns (valid, replacement_hash). The replacement is None unless the
        password is valid and the stored hash is due for an upgrade.
        """
        return cls.pwd_context.verify_and_update(plain_password, hashed_password)

    @classmethod
    def get_hash(cls, password: str) -> str:
        return cls.pwd_context.hash(password)

    @staticmethod
    def fingerprint(hashed_password: str) -> str:
        """Short tag of a stored hash; a reset token carries it, so changing the password voids the token."""
        return hashlib.sha256(hashed_password.encode()).hexdigest()[:16]

"""Primitives de sécurité : hashing des mots de passe et tokens JWT."""

from .hashing import hash_password, verify_password
from .jwt import create_access_token, verify_token

__all__ = [
    "hash_password",
    "verify_password",
    "create_access_token",
    "verify_token",
]

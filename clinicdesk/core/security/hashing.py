"""Hashing des mots de passe des cliniques (bcrypt, one-way)."""

import bcrypt

# Coût computationnel (plus = plus sécurisé mais plus lent)
BCRYPT_ROUNDS = 12

# bcrypt ignore (ou refuse) tout ce qui dépasse 72 octets
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """
    Hash un mot de passe avec bcrypt.

    Args:
        password: Mot de passe en clair

    Returns:
        Hash bcrypt du mot de passe
    """
    password_bytes = password.encode('utf-8')
    if len(password_bytes) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Mot de passe trop long (max {MAX_PASSWORD_BYTES} octets)")
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password_bytes, salt).decode('utf-8')


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """
    Vérifie qu'un mot de passe correspond à son hash.

    Un hash absent ou illisible ne correspond à rien.
    """
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode('utf-8'),
            hashed_password.encode('utf-8'),
        )
    except ValueError:
        return False

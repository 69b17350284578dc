from passlib.hash import pbkdf2_sha256


class PasswordHasher:
    """Salted, iterated PBKDF2-SHA256 password hashing."""

    def __init__(self, rounds=None):
        self._hasher = pbkdf2_sha256.using(rounds=rounds) if rounds else pbkdf2_sha256

    def hash(self, password: str) -> str:
        return self._hasher.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        if not password_hash:
            return False
        try:
            return self._hasher.verify(password, password_hash)
        except ValueError:
            # malformed or foreign hash format
            return False

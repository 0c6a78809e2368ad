from passlib.context import CryptContext

# bcrypt only reads this many bytes of the secret
MAX_PASSWORD_BYTES = 72


def password_too_long(plaintext: str) -> bool:
    return len(plaintext.encode("utf-8")) > MAX_PASSWORD_BYTES


class PasswordHasher:
    """One-way salted hashing for local account passwords."""

    def __init__(self):
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__truncate_error=True)

    def hash(self, plaintext: str) -> str:
        if password_too_long(plaintext):
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return self._context.hash(plaintext)

    def verify(self, plaintext: str, hashed: str | None) -> bool:
        # OAuth-only accounts carry no hash; treat as a mismatch.
        if not hashed or plaintext is None:
            return False
        if password_too_long(plaintext):
            return False
        try:
            return self._context.verify(plaintext, hashed)
        except ValueError:
            return False


password_hasher = PasswordHasher()

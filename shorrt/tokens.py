import random
import string

ALPHABET = string.ascii_letters + string.digits
TOKEN_LENGTH = 6


class TokenGenerator:
    """Random fixed-length tokens. Uniqueness is left to the store."""

    def __init__(self, rng: random.Random | None = None, length: int = TOKEN_LENGTH):
        # Seeded once from OS entropy, shared for the life of the app
        self.rng = rng or random.Random()
        self.length = length

    def generate(self) -> str:
        return "".join(self.rng.choice(ALPHABET) for _ in range(self.length))

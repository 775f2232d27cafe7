import numpy as np

class DRNG:
    """Deterministic Random Number Generator wrapper."""

    def __init__(self, seed: int):
        self.g = np.random.Generator(np.random.PCG64(seed))

    def index(self, n: int) -> int:
        """Return a random index in [0, n)."""
        return int(self.g.integers(0, n))

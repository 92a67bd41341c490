"""
Deterministic seeded shuffle using a Mersenne Twister PRNG.

The seed value is hashed with SHA-256 and the first four digest bytes seed
an MT19937 generator. Two generator variants are kept:

- SECURE: the reference MT19937 with unbiased ranged draws
- LEGACY: the historical variant whose twist reads the low bit of the
  wrong state word and whose ranged draws scale a 31-bit output. It is
  known to be broken and is only kept to reproduce old permutations.

The generator is not cryptographically secure; the output is only as
secret as the seed.
"""

import enum
import hashlib
import struct
from typing import List, Sequence, TypeVar, Union

T = TypeVar('T')

STATE_SIZE = 624
SHIFT_SIZE = 397
MATRIX_A = 0x9908B0DF
UINT32_MAX = 0xFFFFFFFF
LEGACY_RAND_MAX = 0x7FFFFFFF


class GeneratorVariant(enum.Enum):
    """Selects the bit-generation algorithm used by ``shuffle``."""
    SECURE = "secure"
    LEGACY = "legacy"


class MersenneTwister:
    """
    MT19937 pseudo-random number generator.

    Produces the same 32-bit sequence as the reference implementation
    seeded with ``init_genrand``.
    """

    def __init__(self, seed: int):
        self._state = [0] * STATE_SIZE
        self._index = STATE_SIZE
        self.seed(seed)

    def seed(self, seed: int) -> None:
        """Reset the generator state from a 32-bit seed."""
        state = self._state
        state[0] = seed & UINT32_MAX
        for i in range(1, STATE_SIZE):
            prev = state[i - 1]
            state[i] = (1812433253 * (prev ^ (prev >> 30)) + i) & UINT32_MAX
        self._reload()

    def _twist(self, m: int, u: int, v: int) -> int:
        mixed = (u & 0x80000000) | (v & 0x7FFFFFFF)
        return m ^ (mixed >> 1) ^ (MATRIX_A if v & 1 else 0)

    def _reload(self) -> None:
        state = self._state
        for i in range(STATE_SIZE):
            following = state[(i + 1) % STATE_SIZE]
            state[i] = self._twist(state[(i + SHIFT_SIZE) % STATE_SIZE],
                                   state[i], following)
        self._index = 0

    def next_uint32(self) -> int:
        """Generate next 32-bit unsigned integer."""
        if self._index >= STATE_SIZE:
            self._reload()

        y = self._state[self._index]
        self._index += 1

        y ^= y >> 11
        y ^= (y << 7) & 0x9D2C5680
        y ^= (y << 15) & 0xEFC60000
        return y ^ (y >> 18)

    def next_int(self, low: int, high: int) -> int:
        """
        Draw an integer in the inclusive range [low, high].

        Uses rejection sampling so every value is equally likely.
        """
        if high < low:
            raise ValueError("high must be greater than or equal to low")

        span = high - low
        result = self.next_uint32()

        if span == UINT32_MAX:
            return low + result

        span += 1

        # Powers of two need no rejection
        if span & (span - 1) == 0:
            return low + (result & (span - 1))

        limit = UINT32_MAX - (UINT32_MAX % span) - 1
        while result > limit:
            result = self.next_uint32()

        return low + result % span


class LegacyMersenneTwister(MersenneTwister):
    """
    The historical, incorrect MT19937 variant.

    The twist takes its low bit from the current word instead of the next
    one, and ranged draws scale a 31-bit value through a float. Kept
    bit-for-bit so that permutations made with it can be reproduced.
    """

    def _twist(self, m: int, u: int, v: int) -> int:
        mixed = (u & 0x80000000) | (v & 0x7FFFFFFF)
        return m ^ (mixed >> 1) ^ (MATRIX_A if u & 1 else 0)

    def next_int(self, low: int, high: int) -> int:
        if high < low:
            raise ValueError("high must be greater than or equal to low")

        n = self.next_uint32() >> 1
        return low + int((high - low + 1.0) * (n / (LEGACY_RAND_MAX + 1.0)))


def create_generator(seed: int, variant: GeneratorVariant = GeneratorVariant.SECURE) -> MersenneTwister:
    """
    Create a generator for the given variant.

    Args:
        seed: 32-bit seed
        variant: Which bit-generation algorithm to use

    Returns:
        A seeded generator
    """
    if variant is GeneratorVariant.LEGACY:
        return LegacyMersenneTwister(seed)
    return MersenneTwister(seed)


def seed_from_value(seed: Union[bytes, str]) -> int:
    """
    Reduce an arbitrary seed value to a 32-bit generator seed.

    Args:
        seed: Seed bytes; text is UTF-8 encoded

    Returns:
        First four bytes of SHA-256(seed) as a little-endian integer
    """
    if isinstance(seed, str):
        seed = seed.encode('utf-8')

    digest = hashlib.sha256(seed).digest()
    return struct.unpack('<I', digest[:4])[0]


def shuffle(items: Sequence[T], seed: Union[bytes, str], secure: bool = True) -> List[T]:
    """
    Deterministic seeded shuffle. Does not modify ``items``.

    Every position ``a`` in order is swapped with a drawn position ``b``
    anywhere in the sequence.

    Args:
        items: Values to permute; positions and keys are not preserved
        seed: Seed value; the same seed always yields the same order
        secure: Use the reference generator. Pass False to reproduce
            permutations made with the legacy generator.

    Returns:
        New list holding the permuted values
    """
    result = list(items)
    count = len(result)
    if count == 0:
        return result

    variant = GeneratorVariant.SECURE if secure else GeneratorVariant.LEGACY
    generator = create_generator(seed_from_value(seed), variant)

    for a in range(count):
        b = generator.next_int(0, count - 1)
        result[a], result[b] = result[b], result[a]

    return result

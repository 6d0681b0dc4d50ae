"""Core Key Generation Utility, mainly focusing on the generation of random primes and key pairs built from them.

This module is responsible for testing and generating primes at two scales: a "toy" scale using exhaustive trial
division on hand-traceable numbers, and a "real" scale using Miller-Rabin on numbers large enough for a realistic
key. Both feed the same key pair derivation, which picks the public exponent against the Carmichael function and
inverts it for the private exponent.

All randomness comes from an injectable `rng` (anything offering `getrandbits` and `randrange`), defaulting to the
system's secure source. Pass a seeded `random.Random` for reproducible results.

Typical usage example:

    p = generate_prime(1024)
    kp = generate_key_pair(2048)
    toy = generate_key_pair(scale=TOY, rng=random.Random(7))
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import math
import random
import secrets
from typing import Literal, NamedTuple, overload

from rsaprimer import arith
from rsaprimer.rsa import KeyPair
from rsaprimer.rsa import RSAPrivKey
from rsaprimer.rsa import RSAPubKey

logger = logging.getLogger(__name__)

_SMALL_PRIMES: list[int] = []
_SMALL_PRIMES_CAP: int = 0
_SYSTEM_RANDOM = secrets.SystemRandom()
_ATTEMPTS_PER_BIT: int = 10
_MINIMUM_ATTEMPTS: int = 100

MAX_EXHAUSTIVE_BITS: int = arith.NATIVE_WIDTH - 2

PRIME_CONFIDENCE: int = 25
DEFAULT_PUBLIC_EXPONENT: int = 65537


class Scale(NamedTuple):
    """Preset of prime size and arithmetic for a demonstration scale.

    Attributes:
        name: Name of the scale.
        prime_bits: Bit length of each generated prime.
        confidence: Miller-Rabin rounds, ignored if `exhaustive`.
        exhaustive: Whether to use deterministic trial division instead of Miller-Rabin.
        width: Emulated native integer width, None for arbitrary precision.
    """
    name: str
    prime_bits: int
    confidence: int
    exhaustive: bool
    width: int | None


TOY = Scale("toy", 12, PRIME_CONFIDENCE, True, arith.NATIVE_WIDTH)
REAL = Scale("real", 1024, PRIME_CONFIDENCE, False, None)
SCALES: dict[str, Scale] = {s.name: s for s in (TOY, REAL)}


def _sieve(n: int = 10000) -> list[int]:
    """Sieve of Eratosthenes over the odd numbers up to `n`.

    Feeds the cheap pre-filter of the real scale; the toy scale never needs it.

    Args:
        n: Inclusive upper bound. Defaults to 10000. Must be >= 0.

    Returns:
        All primes up to `n`, ascending.
    """
    if n < 2:
        return []
    # Slot i stands for the odd number 2*i + 3.
    odd = bytearray([1]) * ((n - 1) // 2)
    for i in range((math.isqrt(n) - 1) // 2):
        if odd[i]:
            step = 2 * i + 3
            start = (step * step - 3) // 2
            odd[start::step] = bytes(len(range(start, len(odd), step)))
    return [2] + [2 * i + 3 for i, flag in enumerate(odd) if flag]


def get_pre_primes(n: int = 10000, change: bool = False) -> list[int]:
    """Cached small primes for pre-filtering real-scale candidates.

    The sieve is only rerun when a bound beyond the cached one is asked for, when `change` forces it, or when
    nothing is cached yet.

    Args:
        n: Inclusive upper bound. Defaults to 10000. Must be >= 0.
        change: Recompute even if the cache already covers `n`. Defaults to False.

    Returns:
        Ascending primes covering at least `n`, exactly `n` if `change` is set.

    Raises:
        ValueError: If `n` is negative.
    """
    if n < 0:
        raise ValueError("n must be >= 0")
    global _SMALL_PRIMES
    global _SMALL_PRIMES_CAP
    if change or not _SMALL_PRIMES or n > _SMALL_PRIMES_CAP:
        _SMALL_PRIMES = _sieve(n)
        _SMALL_PRIMES_CAP = n
    return _SMALL_PRIMES


def is_prime(candidate: int) -> bool:
    """Deterministic primality test by trial division.

    The toy scale's tester: 2 is handled on its own, then only odd divisors up to the root are tried. Runs in
    O(sqrt(n)), so it is limited to candidates of at most `MAX_EXHAUSTIVE_BITS` bits by its callers.

    Args:
        candidate: The number to check.

    Returns:
        True if `candidate` is prime, False otherwise.
    """
    if candidate < 2:
        return False
    if candidate % 2 == 0:
        return candidate == 2
    return all(candidate % divisor for divisor in range(3, math.isqrt(candidate) + 1, 2))


def _small_factor_free(candidate: int, n: int = 10000) -> bool:
    """Whether no cached small prime below the root of `candidate` divides it.

    A composite real-scale candidate almost always has a small factor, so this rules out most draws before any
    modular exponentiation is spent on them.
    """
    if candidate < 2:
        return False
    for prime in get_pre_primes(n):
        if prime * prime > candidate:
            break
        if candidate % prime == 0:
            return False
    return True


def _miller_rabin(candidate: int, rounds: int, rng: random.Random = _SYSTEM_RANDOM) -> bool:
    """Miller-Rabin test of an odd candidate with random witnesses.

    Writes candidate - 1 = d * 2**s and looks for a witness whose powers skip -1 before reaching 1.

    Args:
        candidate: Odd integer to be tested.
        rounds: Number of witnesses to try.
        rng: Source for the witnesses.

    Returns:
        False if a witness proves `candidate` composite, True otherwise.
    """
    if candidate <= 3:
        return candidate in (2, 3)
    minus_one = candidate - 1
    s = (minus_one & -minus_one).bit_length() - 1
    d = minus_one >> s
    for _ in range(rounds):
        x = pow(rng.randrange(2, minus_one), d, candidate)
        if x in (1, minus_one):
            continue
        for _ in range(s - 1):
            x = pow(x, 2, candidate)
            if x == minus_one:
                break
        else:
            return False
    return True


def is_probably_prime(candidate: int,
                      confidence: int | None = None,
                      rng: random.Random | None = None,
                      n: int = 10000) -> bool:
    """Performs a composite primality test: limited trial division, then Miller-Rabin.

    A False result is always correct. A True result is wrong with probability at most 4**-confidence.

    Args:
        candidate: The candidate prime to test. Must be non-negative.
        confidence: Number of Miller-Rabin rounds to perform.
            If not provided uses the defaults of FIPS 186-5 Appendix C.1 for the candidate's size.
        rng: Source for the witnesses. Defaults to the system's secure source.
        n: The bound of the small primes used for trial division. Defaults to 10000.

    Returns:
        True if `candidate` is probably prime, False otherwise.

    Raises:
        ValueError: If `confidence` is not positive.
    """
    if confidence is not None and confidence < 1:
        raise ValueError("Confidence must be at least 1.")
    if candidate < 2:
        return False
    if candidate in (2, 3):
        return True
    if candidate % 2 == 0:
        return False
    if not _small_factor_free(candidate, n):
        return False
    if confidence is None:
        if candidate.bit_length() <= 512:
            confidence = 40
        elif candidate.bit_length() <= 1024:
            confidence = 56
        elif candidate.bit_length() <= 1536:
            confidence = 64
        elif candidate.bit_length() <= 2048:
            confidence = 70
        else:
            confidence = 74
    return _miller_rabin(candidate, confidence, rng or _SYSTEM_RANDOM)


def generate_prime_candidate(bits: int, rng: random.Random | None = None) -> int:
    """Draw a random odd number of exactly `bits` bits."""
    rng = rng or _SYSTEM_RANDOM
    return rng.getrandbits(bits) | 1 | (1 << (bits - 1))


def _attempt_cap(bits: int) -> int:
    return max(_ATTEMPTS_PER_BIT * bits, _MINIMUM_ATTEMPTS)


def generate_prime(bits: int,
                   rng: random.Random | None = None,
                   confidence: int = PRIME_CONFIDENCE,
                   exhaustive: bool = False) -> int:
    """Generate a prime of exactly `bits` bits.

    Draws odd candidates with the top bit set until one passes the primality test. By the prime number theorem
    around `bits * ln(2) / 2` draws are expected, so the loop is capped well beyond that.

    Args:
        bits: Bit length of the prime. Must be >= 2.
        rng: Random source. Defaults to the system's secure source.
        confidence: Miller-Rabin rounds per candidate. Defaults to 25.
        exhaustive: Use deterministic trial division instead of Miller-Rabin. Limited to `MAX_EXHAUSTIVE_BITS`.

    Returns:
        A (probable) prime.

    Raises:
        ValueError: If `bits` is below 2, or too large for an exhaustive search.
        RuntimeError: If no prime was found within the attempt cap.
    """
    if bits < 2:
        raise ValueError("Bit length must be at least 2.")
    if exhaustive and bits > MAX_EXHAUSTIVE_BITS:
        raise ValueError(f"Trial division is limited to {MAX_EXHAUSTIVE_BITS}-bit primes, use Miller-Rabin instead.")
    rng = rng or _SYSTEM_RANDOM
    cap = _attempt_cap(bits)
    for attempt in range(1, cap + 1):
        candidate = generate_prime_candidate(bits, rng)
        if exhaustive:
            found = is_prime(candidate)
        else:
            found = is_probably_prime(candidate, confidence, rng)
        if found:
            logger.debug("Found %d-bit prime after %d candidates.", bits, attempt)
            return candidate
    raise RuntimeError(f"Drew an improbable {cap} candidates with no prime found. Check the random number generator.")


def generate_primes(bits: int,
                    rng: random.Random | None = None,
                    confidence: int = PRIME_CONFIDENCE,
                    exhaustive: bool = False) -> tuple[int, int]:
    """Generate two distinct primes of `bits` bits each.

    Args:
        bits: Bit length of each prime. Must be >= 3.
        rng: Random source. Defaults to the system's secure source.
        confidence: Miller-Rabin rounds per candidate.
        exhaustive: Use deterministic trial division instead of Miller-Rabin.

    Returns:
        Pair of distinct primes.

    Raises:
        ValueError: If `bits` is too small for two distinct primes to exist.
        RuntimeError: If no distinct second prime was found.
    """
    if bits < 3:
        raise ValueError("Bit length must be at least 3 for two distinct primes to exist.")
    p = generate_prime(bits, rng, confidence, exhaustive)
    for _ in range(_attempt_cap(bits)):
        q = generate_prime(bits, rng, confidence, exhaustive)
        if q != p:
            return p, q
        logger.debug("Drew the same %d-bit prime twice, redrawing.", bits)
    raise RuntimeError("Could not draw two distinct primes. Check the random number generator.")


def key_pair_from_primes(p: int, q: int, pub: int = DEFAULT_PUBLIC_EXPONENT, width: int | None = None) -> KeyPair:
    """Derive an RSA key pair from two primes.

    The public exponent is the first odd number from `pub` upwards that is coprime with the Carmichael function of
    the modulus. The private exponent is its inverse modulo the same.

    Args:
        p: The first prime.
        q: The second prime, distinct from `p`.
        pub: The starting public exponent. Defaults (and recommended) to 65537. Must be odd and >= 3.
        width: Emulated native integer width, if any.

    Returns:
        The key pair.

    Raises:
        ValueError: If `pub` is invalid, the primes are equal, or no public exponent exists at or below the
            Carmichael function.
        OverflowError: If the modulus does not fit `width`.
    """
    if p == q:
        raise ValueError("Primes must be distinct.")
    if pub < 3 or pub % 2 == 0:
        raise ValueError("Public exponent must be odd and at least 3.")
    n = arith.check_width(p * q, width)
    lambda_n = arith.carmichael(p, q)
    e = pub
    while e <= lambda_n and not arith.is_coprime(e, lambda_n):
        e += 2
    if e > lambda_n:
        raise ValueError(f"No public exponent from {pub} up to λ(n)={lambda_n} exists. Use larger primes.")
    d = arith.modular_inverse(e, lambda_n)
    logger.debug("Derived key pair with public exponent %d for a %d-bit modulus.", e, n.bit_length())
    return KeyPair(RSAPubKey(n, e), RSAPrivKey(n, d))


@overload
def generate_key_pair(size: int | None = None,
                      pub: int = DEFAULT_PUBLIC_EXPONENT,
                      scale: Scale = REAL,
                      rng: random.Random | None = None,
                      expose_primes: Literal[False] = False) -> KeyPair:
    ...


@overload
def generate_key_pair(size: int | None = None,
                      pub: int = DEFAULT_PUBLIC_EXPONENT,
                      scale: Scale = REAL,
                      rng: random.Random | None = None,
                      expose_primes: Literal[True] = False) -> tuple[KeyPair, tuple[int, int]]:
    ...


def generate_key_pair(size: int | None = None,
                      pub: int = DEFAULT_PUBLIC_EXPONENT,
                      scale: Scale = REAL,
                      rng: random.Random | None = None,
                      expose_primes: bool = False) -> KeyPair | tuple[KeyPair, tuple[int, int]]:
    """Generates an RSA key pair.

    Fully generates a valid RSA key pair, drawing fresh primes of half the key size each. Prime pairs that leave
    no room for a public exponent are discarded and redrawn.

    Args:
        size: The modulus size in bits. Must be even and >= 6. Defaults to twice the scale's prime size.
        pub: The starting public exponent. Defaults (and recommended) to 65537.
        scale: The scale preset deciding tester and width. Defaults to REAL.
        rng: Random source. Defaults to the system's secure source.
        expose_primes: Whether to return the primes as well. Defaults to False.

    Returns:
        The key pair, or if exposed a tuple of the key pair and (p, q).

    Raises:
        ValueError: If `size` or `pub` do not meet requirements.
        RuntimeError: If no usable prime pair could be drawn.
    """
    if size is None:
        size = 2 * scale.prime_bits
    if size < 6:
        raise ValueError("Size must be at least 6.")
    if size % 2 != 0:
        raise ValueError("Size must be an even number.")
    if pub < 3 or pub % 2 == 0:
        raise ValueError("Public exponent must be odd and at least 3.")
    cap = _attempt_cap(size)
    for _ in range(cap):
        p, q = generate_primes(size // 2, rng, scale.confidence, scale.exhaustive)
        if arith.carmichael(p, q) <= pub:
            logger.info("Primes %d and %d leave no room for public exponent %d, redrawing.", p, q, pub)
            continue
        try:
            kp = key_pair_from_primes(p, q, pub, scale.width)
        except ValueError:
            logger.info("No public exponent from %d fits primes %d and %d, redrawing.", pub, p, q)
            continue
        if expose_primes:
            return kp, (p, q)
        return kp
    raise RuntimeError(f"No usable {size}-bit key found in {cap} prime pairs. Try a larger size or smaller exponent.")

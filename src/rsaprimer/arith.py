"""Modular arithmetic toolkit used by key generation and the RSA primitive.

Provides the Extended Euclidean Algorithm and everything built on top of it (coprimality, modular inverse, LCM and
the Carmichael function), as well as square-and-multiply modular exponentiation. All functions operate on Python
integers; where the toy scale wants to emulate a fixed-width native integer a `width` can be passed and any value
that would not fit raises an `OverflowError` instead of silently wrapping.

Typical usage example:

    g, x, y = extended_gcd(240, 46)
    d = modular_inverse(17, carmichael(61, 53))
    c = modular_exponentiation(65, 17, 3233)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from typing import NamedTuple

NATIVE_WIDTH: int = 64


class ExtendedGcdResult(NamedTuple):
    """Greatest common divisor together with the Bezout coefficients, such that p*x + q*y = gcd."""
    gcd: int
    x: int
    y: int


def check_width(value: int, width: int | None) -> int:
    """Ensure `value` fits a signed integer of `width` bits.

    Args:
        value: The value to check.
        width: Width of the emulated native integer in bits. None means arbitrary precision.

    Returns:
        The value, unchanged.

    Raises:
        OverflowError: If the value does not fit.
    """
    if width is not None and not -(1 << (width - 1)) <= value < (1 << (width - 1)):
        raise OverflowError(f"Value of {value.bit_length()} bits overflows a {width}-bit signed integer.")
    return value


def extended_gcd(p: int, q: int) -> ExtendedGcdResult:
    """Implements the Extended Euclidean Algorithm.

    Iterative version, such that p*x + q*y = gcd(p, q). At least one of the inputs should be positive, the sign of
    the result is not defined otherwise.

    Args:
        p: The first integer.
        q: The second integer.

    Returns:
        Greatest common divisor of two integers, as well as the Bezout coefficients.
    """
    old_r, r = p, q
    old_s, s, old_t, t = 1, 0, 0, 1
    while r != 0:
        quot = old_r // r
        old_r, r = r, old_r - quot * r
        old_s, s = s, old_s - quot * s
        old_t, t = t, old_t - quot * t
    return ExtendedGcdResult(old_r, old_s, old_t)


def is_coprime(p: int, q: int) -> bool:
    """Check whether `p` and `q` share no factor other than 1."""
    return abs(extended_gcd(p, q).gcd) == 1


def modular_inverse(a: int, m: int) -> int:
    """Find the modular inverse of `a` modulo `m`.

    Args:
        a: The number to invert.
        m: The modulus. Must be positive.

    Returns:
        The inverse in range [0, m).

    Raises:
        ValueError: If `m` is not positive or `a` is not coprime with `m`.
    """
    if m < 1:
        raise ValueError("Modulus must be positive.")
    gcd, x, _ = extended_gcd(a % m, m)
    if gcd != 1:
        raise ValueError(f"{a} has no inverse modulo {m} (gcd is {gcd}).")
    return x % m


def lcm(p: int, q: int) -> int:
    """Least common multiple of two integers, zero if either of them is zero."""
    if p == 0 or q == 0:
        return 0
    return abs(p * q) // abs(extended_gcd(p, q).gcd)


def carmichael(p: int, q: int) -> int:
    """Carmichael function of n = p*q for distinct primes p and q.

        λ(n) = λ(pq) = lcm(p - 1, q - 1)
    """
    return lcm(p - 1, q - 1)


def modular_exponentiation(base: int, exponent: int, modulus: int, width: int | None = None) -> int:
    """Computes base**exponent mod modulus with square-and-multiply.

    Walks the bits of the exponent from least to most significant, multiplying the accumulator by the current
    power of the base whenever the bit is set.

    Args:
        base: The base. May be any integer, reduced modulo `modulus` first.
        exponent: The exponent. Must be non-negative.
        modulus: The modulus. Must be positive.
        width: Width in bits of the emulated native integer, if any. Defaults to arbitrary precision.

    Returns:
        The result in range [0, modulus).

    Raises:
        ValueError: If the exponent is negative or the modulus not positive.
        OverflowError: If an intermediate product does not fit `width`.
    """
    if modulus < 1:
        raise ValueError("Modulus must be positive.")
    if exponent < 0:
        raise ValueError("Exponent must be non-negative.")
    if modulus == 1:
        return 0
    result = 1
    base %= modulus
    while exponent > 0:
        if exponent & 1:
            result = check_width(result * base, width) % modulus
        exponent >>= 1
        base = check_width(base * base, width) % modulus
    return result

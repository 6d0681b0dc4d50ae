"""Textbook RSA primitives in an Academic Sense.

Provides prime testing and generation, the modular arithmetic behind RSA (Extended Euclidean Algorithm, modular
inverse, Carmichael function, modular exponentiation), key pair derivation and textbook encryption/decryption.
Works at a hand-traceable "toy" scale as well as a realistic "real" scale.

Typical usage example:

    kp = generate_key_pair(2048)
    c = encrypt(kp.pub, 65)
    m = decrypt(kp.priv, c)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from rsaprimer.arith import carmichael
from rsaprimer.arith import extended_gcd
from rsaprimer.arith import lcm
from rsaprimer.arith import modular_exponentiation
from rsaprimer.arith import modular_inverse
from rsaprimer.keygen import generate_key_pair
from rsaprimer.keygen import generate_prime
from rsaprimer.keygen import generate_primes
from rsaprimer.keygen import is_prime
from rsaprimer.keygen import is_probably_prime
from rsaprimer.keygen import key_pair_from_primes
from rsaprimer.keygen import REAL
from rsaprimer.keygen import TOY
from rsaprimer.rsa import decrypt
from rsaprimer.rsa import encrypt
from rsaprimer.rsa import KeyPair
from rsaprimer.rsa import RSAPrivKey
from rsaprimer.rsa import RSAPubKey

__version__ = "0.1.0"
__all__ = [
    "KeyPair",
    "RSAPrivKey",
    "RSAPubKey",
    "encrypt",
    "decrypt",
    "extended_gcd",
    "modular_inverse",
    "modular_exponentiation",
    "lcm",
    "carmichael",
    "is_prime",
    "is_probably_prime",
    "generate_prime",
    "generate_primes",
    "key_pair_from_primes",
    "generate_key_pair",
    "TOY",
    "REAL",
]

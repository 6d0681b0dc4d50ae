"""Provides the core RSA primitive for encryption and decryption, along with the key types it operates on.

Facilitates "textbook" RSA only: a message is an integer in range [0, modulus) and is transformed by a single
modular exponentiation, without any padding. Keys are immutable values, a key pair ties a public and a private key
sharing one modulus together.

Typical usage example:

    kp = keygen.generate_key_pair(2048)
    c = encrypt(kp.pub, 65)
    m = decrypt(kp.priv, c)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import dataclasses

from rsaprimer import arith


@dataclasses.dataclass(frozen=True)
class RSAKey:
    """The overall RSA key class implementation.

    Holds the components strictly mandatory in both a public and a private key.

    Attributes:
        modulus: The modulus of the keypair.
        exponent: The exponent of the key, whether private or public.
    """
    modulus: int
    exponent: int

    def c_rsa(self, value: int, width: int | None = None) -> int:
        """Performs core RSA operation. (Encrypt/Decrypt).

        Args:
            value: The integer to transform.
            width: Emulated native integer width, if any.

        Returns:
            value**exponent mod modulus.

        Raises:
            ValueError: If the value is out of range for the current key.
        """
        if not 0 <= value < self.modulus:
            raise ValueError("Message representative must be in range [0, mod-1]")
        return arith.modular_exponentiation(value, self.exponent, self.modulus, width)


@dataclasses.dataclass(frozen=True)
class RSAPubKey(RSAKey):
    """Public half of a key pair, the exponent being the public exponent e."""

    def encrypt(self, message: int, width: int | None = None) -> int:
        """Use the public key to encrypt the message."""
        return self.c_rsa(message, width)


@dataclasses.dataclass(frozen=True)
class RSAPrivKey(RSAKey):
    """Private half of a key pair, the exponent being the private exponent d."""

    def decrypt(self, ciphertext: int, width: int | None = None) -> int:
        """Use the private key to decrypt the ciphertext."""
        return self.c_rsa(ciphertext, width)


@dataclasses.dataclass(frozen=True)
class KeyPair:
    """A public and private key sharing the same modulus.

    Attributes:
        pub: The public key.
        priv: The private key.
    """
    pub: RSAPubKey
    priv: RSAPrivKey

    def __post_init__(self) -> None:
        if self.pub.modulus != self.priv.modulus:
            raise ValueError("Public and private key must share the same modulus.")

    @property
    def modulus(self) -> int:
        return self.pub.modulus


def encrypt(public_key: RSAPubKey, message: int, width: int | None = None) -> int:
    """Encrypt `message` with `public_key`. The message must be in range [0, modulus)."""
    return public_key.encrypt(message, width)


def decrypt(private_key: RSAPrivKey, ciphertext: int, width: int | None = None) -> int:
    """Decrypt `ciphertext` with `private_key`. The ciphertext must be in range [0, modulus)."""
    return private_key.decrypt(ciphertext, width)

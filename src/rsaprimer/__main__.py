"""The Command Line Interface for the utility, walking through the RSA pipeline on the console.

Generates primes and key pairs at either demonstration scale and runs textbook encryption and decryption on
integer messages, printing every intermediate value along the way.

Typical usage example:

    rsaprimer demo --scale toy
    OR
    python -m rsaprimer prime --bits 512
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import argparse
import logging
import random
import sys
import typing

import rsaprimer
from rsaprimer import keygen


class HelpData(typing.NamedTuple):
    description: str
    format: typing.Type = str
    choices: list[str] | None = None
    default: typing.Any = None


help_dict: dict[str, HelpData] = {
    "demo":
        HelpData("Generate a key pair and run a message through it, printing every step."),
    "prime":
        HelpData("Prime generation utility."),
    "keygen":
        HelpData("Key generation utility."),
    "encrypt":
        HelpData("Encryption utility."),
    "decrypt":
        HelpData("Decryption utility."),
    "scale":
        HelpData(
            description="Demonstration scale. Toy uses 12-bit primes, real 1024-bit primes.",
            choices=list(keygen.SCALES),
            default="real",
        ),
    "size":
        HelpData(description="Modulus size in bits. Defaults to twice the scale's prime size.", format=int),
    "bits":
        HelpData(description="Prime size in bits.", format=int, default=1024),
    "confidence":
        HelpData(description="Miller-Rabin rounds per candidate.", format=int, default=keygen.PRIME_CONFIDENCE),
    "pub_exponent":
        HelpData(description="Starting public exponent.", format=int, default=keygen.DEFAULT_PUBLIC_EXPONENT),
    "modulus":
        HelpData(description="Key modulus.", format=int),
    "exponent":
        HelpData(description="Key exponent.", format=int),
    "message":
        HelpData(description="Integer message, must be smaller than the modulus.", format=int, default=65),
    "seed":
        HelpData(description="Seed for a reproducible (and insecure!) random source.", format=int),
}

scalep = argparse.ArgumentParser(add_help=False)
scalep.add_argument("--scale",
                    "-s",
                    choices=help_dict["scale"].choices,
                    default=help_dict["scale"].default,
                    help=help_dict["scale"].description)
keyp = argparse.ArgumentParser(add_help=False)
keyp.add_argument("--modulus", "-n", required=True, type=help_dict["modulus"].format,
                  help=help_dict["modulus"].description)
keyp.add_argument("--exponent", "-e", required=True, type=help_dict["exponent"].format,
                  help=help_dict["exponent"].description)
keyp.add_argument("--message", "-m", required=True, type=help_dict["message"].format,
                  help=help_dict["message"].description)
corep = argparse.ArgumentParser(prog="rsaprimer")
corep.add_argument("--version", "-v", action="version", version=f"%(prog)s {rsaprimer.__version__}")
corep.add_argument("--verbose", "-V", action="store_true", help="Enable debug logging")
corep.add_argument("--seed", type=help_dict["seed"].format, help=help_dict["seed"].description)
commands = corep.add_subparsers(dest="subcommand", title="Subcommands", required=True)

demo = commands.add_parser("demo", parents=[scalep], help=help_dict["demo"].description)
demo.add_argument("--message",
                  "-m",
                  type=help_dict["message"].format,
                  default=help_dict["message"].default,
                  help=help_dict["message"].description)

prime = commands.add_parser("prime", help=help_dict["prime"].description)
prime.add_argument("--bits",
                   "-b",
                   type=help_dict["bits"].format,
                   default=help_dict["bits"].default,
                   help=help_dict["bits"].description)
prime.add_argument("--confidence",
                   "-c",
                   type=help_dict["confidence"].format,
                   default=help_dict["confidence"].default,
                   help=help_dict["confidence"].description)
prime.add_argument("--exhaustive", "-x", action="store_true", help="Use trial division instead of Miller-Rabin")

keygenp = commands.add_parser("keygen", parents=[scalep], help=help_dict["keygen"].description)
keygenp.add_argument("--size", type=help_dict["size"].format, help=help_dict["size"].description)
keygenp.add_argument("--pub-exponent",
                     type=help_dict["pub_exponent"].format,
                     default=help_dict["pub_exponent"].default,
                     help=help_dict["pub_exponent"].description)

encrypt = commands.add_parser("encrypt", parents=[keyp], help=help_dict["encrypt"].description)
decrypt = commands.add_parser("decrypt", parents=[keyp], help=help_dict["decrypt"].description)


def show_key(label: str, key: rsaprimer.RSAPubKey | rsaprimer.RSAPrivKey) -> None:
    print(f"{label} key: ({key.modulus}, {key.exponent})")


def run(args: argparse.Namespace) -> None:
    """Execute the parsed subcommand."""
    rng = random.Random(args.seed) if args.seed is not None else None
    match args.subcommand:
        case "demo":
            scale = keygen.SCALES[args.scale]
            kp, (p, q) = keygen.generate_key_pair(scale=scale, rng=rng, expose_primes=True)
            print(f"[SECRET] p = {p}")
            print(f"[SECRET] q = {q}")
            print(f"[PUBLIC] n = p * q = {kp.modulus}")
            show_key("Public", kp.pub)
            show_key("Private", kp.priv)
            ciphertext = kp.pub.encrypt(args.message, scale.width)
            print(f"Plaintext: {args.message}")
            print(f"Ciphertext: {ciphertext}")
            print(f"Decrypted: {kp.priv.decrypt(ciphertext, scale.width)}")
        case "prime":
            print(keygen.generate_prime(args.bits, rng, args.confidence, args.exhaustive))
        case "keygen":
            scale = keygen.SCALES[args.scale]
            kp = keygen.generate_key_pair(args.size, args.pub_exponent, scale, rng)
            show_key("Public", kp.pub)
            show_key("Private", kp.priv)
        case "encrypt":
            print(rsaprimer.encrypt(rsaprimer.RSAPubKey(args.modulus, args.exponent), args.message))
        case "decrypt":
            print(rsaprimer.decrypt(rsaprimer.RSAPrivKey(args.modulus, args.exponent), args.message))


def main(argv: list[str] | None = None) -> int:
    """Core Command Line Interface."""
    args = corep.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        run(args)
    except (ValueError, OverflowError, RuntimeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""The Command Line Interface for the engine, including Interactive elements.

A hybrid CLI/ICLI (Command Line Interface/Interactive Command Line Interface) that generates the INTERACTIVE part
on-the-fly based on the missing components of the CLI interaction, including the option that none are included.

Typical usage example:

    rsaengine
    OR
    python -m rsaengine keygen -P key.pem -p key.pub --keysize 2048
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import argparse
import base64
import binascii
import hashlib
import json
import logging
import pathlib
import sys
import typing

import rsaengine
from rsaengine import encoding
from rsaengine import padding
from rsaengine.material import FIELDS

logger = logging.getLogger(__name__)


class HelpData(typing.NamedTuple):
    description: str
    format: typing.Type = str
    choices: list[str] | None = None
    default: typing.Any = None
    advanced: bool = False


help_dict: dict[str, HelpData] = {
    "subcommand":
        HelpData(
            description="The available subcommands in the RSA engine.",
            choices=["keygen", "encrypt", "decrypt", "sign", "verify", "complete", "check"],
        ),
    "keygen":
        HelpData("Key generation utility."),
    "encrypt":
        HelpData("Encryption utility."),
    "decrypt":
        HelpData("Decryption utility."),
    "sign":
        HelpData("Signing utility."),
    "verify":
        HelpData("Signature verification utility."),
    "complete":
        HelpData("Derives missing private key components."),
    "check":
        HelpData("Private key consistency check."),
    "public_key":
        HelpData(
            description="Location of the public key file.",
            format=pathlib.Path,
        ),
    "private_key":
        HelpData(
            description="Location of the private key file.",
            format=pathlib.Path,
        ),
    "components":
        HelpData(
            description="Location of a JSON file mapping component names (n, e, d, p, q, dp, dq, qinv) to hex.",
            format=pathlib.Path,
        ),
    "message":
        HelpData(
            description="Message or path to file containing payload. If Path start with `P:`",
            format=str,
        ),
    "encoding":
        HelpData(description="Payload encoding.", choices=["utf-8", "utf-16", "ascii"], advanced=True, default="utf-8"),
    "scheme":
        HelpData(description="Encryption padding scheme.", choices=["oaep", "pkcs1v1.5"], advanced=True, default="oaep"),
    "keysize":
        HelpData(
            description="Key size (in bits).",
            choices=["1024", "2048", "3072", "4096"],
            default="2048",
        ),
    "pub_exponent":
        HelpData(
            description="Exponent for the public key.",
            format=int,
            advanced=True,
            default=65537,
        ),
    "digest":
        HelpData(description="Digest algorithm to hash the message with before signing.",
                 choices=list(padding.DIGEST_OID),
                 advanced=True,
                 default="sha256"),
    "signature":
        HelpData(
            description="The base64 signature to validate against the payload and public key.",
            format=str,
        ),
    "overwrite":
        HelpData(
            description="Overwrite specified destination files if they exist?",
            choices=["Y", "N"],
            default="N",
        )
}

needs = {
    "keygen": ("public_key", "private_key", "keysize", "pub_exponent"),
    "encrypt": ("public_key", "message", "scheme", "encoding"),
    "decrypt": ("private_key", "message", "scheme", "encoding"),
    "sign": ("private_key", "message", "digest"),
    "verify": ("public_key", "message", "signature", "digest"),
    "complete": ("components",),
    "check": ("private_key",),
}

pubkey = argparse.ArgumentParser(add_help=False)
pubkey.add_argument("--public_key", "-p", type=help_dict["public_key"].format, help=help_dict["public_key"].description)
privkey = argparse.ArgumentParser(add_help=False)
privkey.add_argument("--private_key",
                     "-P",
                     type=help_dict["private_key"].format,
                     help=help_dict["private_key"].description)
payloads = argparse.ArgumentParser(add_help=False)
payloads.add_argument("--message", type=help_dict["message"].format, help=help_dict["message"].description)
encp = argparse.ArgumentParser(add_help=False)
encp.add_argument("--encoding", "-e", choices=help_dict["encoding"].choices, help=help_dict["encoding"].description)
schemep = argparse.ArgumentParser(add_help=False)
schemep.add_argument("--scheme", "-s", choices=help_dict["scheme"].choices, help=help_dict["scheme"].description)
digestp = argparse.ArgumentParser(add_help=False)
digestp.add_argument("--digest", "-d", choices=help_dict["digest"].choices, help=help_dict["digest"].description)
corep = argparse.ArgumentParser(prog="rsaengine")
corep.add_argument("--version", "-v", action="version", version=f"%(prog)s {rsaengine.__version__}")
corep.add_argument("--non-interactive", "-n", action="store_true", help="Enable non-interactive mode")
corep.add_argument("--advanced", "-a", action="store_true", help="Enable advanced mode, for interactive mode")
corep.add_argument("--verbose", "-V", action="store_true", help="Log debug output to stderr")
commands = corep.add_subparsers(dest="subcommand", title="Subcommands")

keygen = commands.add_parser("keygen", parents=[privkey, pubkey], help=help_dict["keygen"].description)
keygen.add_argument("--keysize", choices=help_dict["keysize"].choices, help=help_dict["keysize"].description)
keygen.add_argument("--pub-exponent", type=help_dict["pub_exponent"].format, help=help_dict["pub_exponent"].description)
keygen.add_argument("--overwrite", "-o", action="store_const", const="Y", help=help_dict["overwrite"].description)

encrypt = commands.add_parser("encrypt", parents=[pubkey, payloads, schemep, encp], help=help_dict["encrypt"].description)
decrypt = commands.add_parser("decrypt", parents=[privkey, payloads, schemep, encp], help=help_dict["decrypt"].description)

sign = commands.add_parser("sign", parents=[privkey, payloads, digestp], help=help_dict["sign"].description)
verify = commands.add_parser("verify", parents=[pubkey, payloads, digestp], help=help_dict["verify"].description)
verify.add_argument("--signature", "-S", type=help_dict["signature"].format, help=help_dict["signature"].description)

complete = commands.add_parser("complete", help=help_dict["complete"].description)
complete.add_argument("--components",
                      "-c",
                      type=help_dict["components"].format,
                      help=help_dict["components"].description)
check = commands.add_parser("check", parents=[privkey], help=help_dict["check"].description)


def checkmodes(arg: str, mode: tuple[bool, bool]):
    helper_data = help_dict[arg]
    if (mode[0] or (helper_data.advanced and not mode[1])) and helper_data.default:
        return helper_data.default
    if mode[0]:
        raise IOError(f"Argument {arg} is missing and non-interactive mode is active.")
    return helper_data


def choice_handler(arg: str, mode: tuple[bool, bool], prntr: typing.Callable = print):
    helper_data = checkmodes(arg, mode)
    if not isinstance(helper_data, HelpData):
        return helper_data
    prntr(f"Please specify the {arg}!")
    prntr("Description: " + helper_data.description)
    choices = helper_data.choices
    vald = set(choices)
    for choice in choices:
        defstring = " (Default)" if choice == helper_data.default else ""
        if help_dict.get(choice, None):
            prntr(f"{choice} - {help_dict[choice].description}" + defstring)
        else:
            prntr(f"{choice}" + defstring)
    if helper_data.default is not None:
        prntr("To accept default just click enter. Otherwise specify value.")
    while True:
        ch = input(f"{arg}: ")
        if ch in vald:
            return ch
        if not ch and helper_data.default is not None:
            return helper_data.default
        prntr("Please select an option from the list.")


def input_handler(arg: str, mode: tuple[bool, bool], prntr: typing.Callable = print):
    helper_data = checkmodes(arg, mode)
    if not isinstance(helper_data, HelpData):
        return helper_data
    prntr(f"Please specify the {arg}!")
    prntr("Description: " + helper_data.description)
    if helper_data.default is not None:
        prntr(f"Default value: {helper_data.default}")
        prntr("To accept default just click enter. Otherwise specify value.")
    cls = helper_data.format
    while True:
        ch = input(f"{arg}: ")
        if not ch and helper_data.default is not None:
            return helper_data.default
        if ch == "":
            prntr("Please provide a value.")
            continue
        try:
            return cls(ch)
        except ValueError:
            prntr(f"We could not convert your value to {cls.__name__}.")


def check_message(mess: str, enc) -> str:
    """Parse message for path-notice."""
    if mess.startswith("P:"):
        mess = mess[2:]
        with open(mess, "r", encoding=enc) as f:
            mess = f.read()
    return mess


def hash_message(digest: str, message: bytes) -> bytes:
    """Hashes the payload, the engine only ever signs digests."""
    try:
        return hashlib.new(digest, message).digest()
    except ValueError as exc:
        raise rsaengine.UnsupportedAlgorithm(f"Digest {digest} is not available in this Python build.") from exc


def load_components(file: pathlib.Path) -> rsaengine.KeyMaterial:
    """Reads hex encoded key components from a JSON object."""
    with open(file, "r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, dict) or set(raw) - set(FIELDS):
        raise rsaengine.MalformedEncoding(f"Components file must be an object with keys from {', '.join(FIELDS)}.")
    try:
        return rsaengine.KeyMaterial(**{name: bytes.fromhex(value) for name, value in raw.items()})
    except (TypeError, ValueError) as exc:
        raise rsaengine.MalformedEncoding("Components must be hex strings.") from exc


def dump_components(key: rsaengine.KeyMaterial) -> str:
    return json.dumps({name: getattr(key, name).hex() for name in key.present()}, indent=2)


def run(args: argparse.Namespace, pspr: typing.Callable, pstatus: tuple[bool, bool]) -> int:
    """Executes the fully specified subcommand, returning the exit status."""
    match args.subcommand:
        case "keygen":
            if args.private_key.exists() or args.public_key.exists():
                rs = getattr(args, "overwrite", None)
                if rs is None:
                    rs = choice_handler("overwrite", pstatus, pspr)
                if rs == "N":
                    print("Destination private or public key already exists!")
                    return 1
            priv = rsaengine.generate(int(args.keysize), args.pub_exponent)
            encoding.write_pem(args.private_key, "PKCS1_PRIV", rsaengine.export_private(priv))
            encoding.write_pem(args.public_key, "PKCS1_PUB", rsaengine.export_public(priv))
            pspr("\nKey pair generated!")
        case "encrypt":
            args.message = check_message(args.message, args.encoding)
            pub = rsaengine.import_public(encoding.read_pem(args.public_key, "PKCS1_PUB"))
            ciph = rsaengine.encrypt(args.scheme, args.message.encode(args.encoding), pub)
            pspr("Ciphertext:")
            print(base64.b64encode(ciph).decode("ascii"))
        case "decrypt":
            args.message = check_message(args.message, "ascii")
            priv = rsaengine.import_private(encoding.read_pem(args.private_key, "PKCS1_PRIV"))
            try:
                ciph = base64.b64decode(args.message, validate=True)
            except binascii.Error as exc:
                raise rsaengine.MalformedEncoding("Ciphertext is not valid base64.") from exc
            clear = rsaengine.decrypt(args.scheme, ciph, priv).decode(args.encoding)
            pspr("Cleartext:")
            print(clear)
        case "sign":
            args.message = check_message(args.message, "utf-8")
            priv = rsaengine.import_private(encoding.read_pem(args.private_key, "PKCS1_PRIV"))
            signature = rsaengine.sign(args.digest, hash_message(args.digest, args.message.encode("utf-8")), priv)
            pspr("Signature:")
            print(base64.b64encode(signature).decode("ascii"))
        case "verify":
            args.message = check_message(args.message, "utf-8")
            pub = rsaengine.import_public(encoding.read_pem(args.public_key, "PKCS1_PUB"))
            try:
                signature = base64.b64decode(args.signature, validate=True)
            except binascii.Error:
                signature = b""
            digest = hash_message(args.digest, args.message.encode("utf-8"))
            if rsaengine.verify(args.digest, digest, signature, pub):
                pspr("Signature Verified!")
            else:
                print("Signature Verification Failed!")
                return 1
        case "complete":
            partial = load_components(args.components)
            has_update, delta = rsaengine.complete(partial)
            if not has_update:
                pspr("Key is already complete.")
            print(dump_components(partial.merge(delta)))
        case "check":
            priv = rsaengine.import_private(encoding.read_pem(args.private_key, "PKCS1_PRIV"))
            if rsaengine.check_private(priv):
                pspr("Private key is consistent!")
            else:
                print("Private key check failed!")
                return 1
    return 0


def main():
    """Core Hybrid CLI/ICLI (Command Line Interface/Interactive Command Line Interface)"""
    args = corep.parse_args()
    pstatus = (args.non_interactive, args.advanced)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    def pspr(text: str):
        """Print only if not in non-interactive mode."""
        if not pstatus[0]:
            print(text)

    pspr("Welcome to the RSA engine!\n")
    if not args.subcommand:
        args.subcommand = choice_handler("subcommand", pstatus)
    for reqs in needs[args.subcommand]:
        if getattr(args, reqs, None) is None:
            if help_dict[reqs].choices is not None:
                res = choice_handler(reqs, pstatus)
            else:
                res = input_handler(reqs, pstatus)
            setattr(args, reqs, res)
        else:
            pspr(f"{reqs}: {getattr(args, reqs)}")
    pspr("\nInput Complete! Executing...")
    try:
        status = run(args, pspr, pstatus)
    except (rsaengine.RSAEngineError, ValueError) as exc:
        logger.debug("Subcommand %s failed", args.subcommand, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    if status:
        sys.exit(status)
    pspr("Thank you for using the RSA engine!")
    pspr("Goodbye!")


if __name__ == "__main__":
    main()

"""Identifier validation and generation."""

import secrets

import base58

from edv.errors import EDVError, ErrorKind

ID_BYTE_LENGTH = 16

_BASE58_CHARACTERS = frozenset(base58.BITCOIN_ALPHABET.decode("ascii"))


def check_base58_encoded_128_bit_value(value: str) -> None:
    """Raise unless value is base58 text decoding to exactly 16 bytes.

    Raises NOT_BASE58_ENCODED when value holds a character outside the base58
    alphabet (whitespace included) or decodes to no bytes, and
    NOT_128_BIT_VALUE when the decoded length is not 16.

    Decoding yields bytes, not bits, so this cannot tell whether the encoded
    value was exactly 128 bits long: a 121 to 127 bit value that still fills
    16 bytes is accepted.
    """
    # b58decode strips trailing whitespace, so check the characters first
    if not _BASE58_CHARACTERS.issuperset(value):
        raise EDVError(ErrorKind.NOT_BASE58_ENCODED, details={"id": value})

    try:
        decoded = base58.b58decode(value)
    except ValueError:
        raise EDVError(ErrorKind.NOT_BASE58_ENCODED, details={"id": value}) from None

    if len(decoded) == 0:
        raise EDVError(ErrorKind.NOT_BASE58_ENCODED, details={"id": value})

    if len(decoded) != ID_BYTE_LENGTH:
        raise EDVError(ErrorKind.NOT_128_BIT_VALUE, details={"id": value})


def generate_vault_id() -> str:
    """New vault id: base58 of 16 random bytes."""
    return base58.b58encode(secrets.token_bytes(ID_BYTE_LENGTH)).decode("ascii")

"""
Digest algorithms for the Hash Ripper.

Each algorithm is identified by a stable numeric id and resolves to a plain
function, so a session looks the function up once and then calls it for every
candidate word.
"""

import base64
import hashlib
import hmac
from enum import IntEnum
from typing import Callable, Dict, List, Tuple, Union

from Crypto.Hash import MD2, MD4, RIPEMD160

from hash_ripper.utils.exceptions import UnsupportedAlgorithmError


class HashAlgorithm(IntEnum):
    """Unkeyed digest algorithms"""
    MD5 = 1
    BASE64 = 2
    SHA256 = 3
    MD4 = 4
    SHA1 = 5
    MD2 = 9
    RIPEMD160 = 10
    BLAKE2B = 11
    BLAKE2S = 12


class KeyedAlgorithm(IntEnum):
    """Digest algorithms taking a key as well as the word"""
    HMAC_MD5 = 30
    HMAC_SHA1 = 31
    HMAC_SHA256 = 32


HASH_ALGORITHMS: Tuple[HashAlgorithm, ...] = tuple(HashAlgorithm)

HashFunction = Callable[[bytes], str]
KeyedFunction = Callable[[bytes, bytes], str]
AnyAlgorithm = Union[HashAlgorithm, KeyedAlgorithm]


def _hashlib_digest(name: str) -> HashFunction:
    def encode(data: bytes) -> str:
        return hashlib.new(name, data).hexdigest()
    return encode


def _pycryptodome_digest(module) -> HashFunction:
    def encode(data: bytes) -> str:
        return module.new(data).hexdigest()
    return encode


def _base64_encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _hmac_digest(name: str) -> KeyedFunction:
    def encode(key: bytes, data: bytes) -> str:
        return hmac.new(key, data, name).hexdigest()
    return encode


_HASH_FUNCTIONS: Dict[HashAlgorithm, HashFunction] = {
    HashAlgorithm.MD5: _hashlib_digest("md5"),
    HashAlgorithm.BASE64: _base64_encode,
    HashAlgorithm.SHA256: _hashlib_digest("sha256"),
    HashAlgorithm.MD4: _pycryptodome_digest(MD4),
    HashAlgorithm.SHA1: _hashlib_digest("sha1"),
    HashAlgorithm.MD2: _pycryptodome_digest(MD2),
    HashAlgorithm.RIPEMD160: _pycryptodome_digest(RIPEMD160),
    HashAlgorithm.BLAKE2B: _hashlib_digest("blake2b"),
    HashAlgorithm.BLAKE2S: _hashlib_digest("blake2s"),
}

_KEYED_FUNCTIONS: Dict[KeyedAlgorithm, KeyedFunction] = {
    KeyedAlgorithm.HMAC_MD5: _hmac_digest("md5"),
    KeyedAlgorithm.HMAC_SHA1: _hmac_digest("sha1"),
    KeyedAlgorithm.HMAC_SHA256: _hmac_digest("sha256"),
}

# Algorithms whose output must be compared exactly; hex digests are not
_CASE_SENSITIVE = {HashAlgorithm.BASE64}


def resolve(algorithm: Union[HashAlgorithm, int]) -> HashFunction:
    """Get the digest function for a hash algorithm

    Raises:
        UnsupportedAlgorithmError: If the id is not a known hash algorithm
    """
    try:
        return _HASH_FUNCTIONS[HashAlgorithm(algorithm)]
    except (ValueError, KeyError):
        raise UnsupportedAlgorithmError(f"Unsupported hash algorithm: {algorithm!r}")


def resolve_keyed(algorithm: Union[KeyedAlgorithm, int]) -> KeyedFunction:
    """Get the digest function for a keyed algorithm

    Raises:
        UnsupportedAlgorithmError: If the id is not a known keyed algorithm
    """
    try:
        return _KEYED_FUNCTIONS[KeyedAlgorithm(algorithm)]
    except (ValueError, KeyError):
        raise UnsupportedAlgorithmError(f"Unsupported keyed algorithm: {algorithm!r}")


def is_case_sensitive(algorithm: AnyAlgorithm) -> bool:
    """Whether targets for this algorithm must be matched exactly"""
    return algorithm in _CASE_SENSITIVE


def algorithm_name(algorithm: AnyAlgorithm) -> str:
    """Display name, e.g. 'sha256' or 'hmac-sha1'"""
    return algorithm.name.lower().replace("_", "-")


def parse_algorithm(value: Union[str, int, AnyAlgorithm]) -> AnyAlgorithm:
    """Turn an id or a name into an algorithm

    Accepts enum members, integer ids, numeric strings and names in any case,
    with or without dashes or underscores ('sha-256', 'HMAC_SHA1', 'md5').

    Raises:
        UnsupportedAlgorithmError: If nothing matches
    """
    if isinstance(value, (HashAlgorithm, KeyedAlgorithm)):
        return value

    if isinstance(value, int) or str(value).strip().isdigit():
        number = int(value)
        for family in (HashAlgorithm, KeyedAlgorithm):
            try:
                return family(number)
            except ValueError:
                continue
        raise UnsupportedAlgorithmError(f"Unsupported algorithm id: {number}")

    key = str(value).strip().upper().replace("-", "").replace("_", "")
    for family in (HashAlgorithm, KeyedAlgorithm):
        for member in family:
            if member.name.replace("_", "") == key:
                return member

    raise UnsupportedAlgorithmError(f"Unsupported algorithm: {value!r}")


def encode_all(word: str) -> List[Tuple[HashAlgorithm, str]]:
    """Digest a word with every hash algorithm, in catalog order"""
    if not word:
        return []

    data = word.encode("utf-8")
    return [(algorithm, _HASH_FUNCTIONS[algorithm](data)) for algorithm in HASH_ALGORITHMS]

"""
Algorithm-parameter records.

One immutable value type per algorithm family. Each record carries a
``FIELDS`` schema consumed by :mod:`keyspec.core.codec`; field numbers
match the Tink key-format protos so encodings interoperate.

Sizes are in bytes and are not range-checked here. Plausibility of a
size is decided by whichever key manager consumes the descriptor.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import ClassVar

from cryptography.hazmat.primitives import hashes

from .codec import UINT32
from .errors import UnknownHashError


class OutputPrefixType(enum.IntEnum):
    """Whether ciphertexts produced by a key carry a key-identifying prefix."""

    UNKNOWN_PREFIX = 0
    TINK = 1      # 5-byte prefix: version byte + 4-byte key id
    LEGACY = 2
    RAW = 3       # no prefix
    CRUNCHY = 4


class HashType(enum.IntEnum):
    UNKNOWN_HASH = 0
    SHA1 = 1
    SHA384 = 2
    SHA256 = 3
    SHA512 = 4
    SHA224 = 5

    def algorithm(self) -> hashes.HashAlgorithm:
        """Return a ``cryptography`` hash instance for this hash type."""
        try:
            return _HASH_ALGORITHMS[self]()
        except KeyError:
            raise UnknownHashError(f"{self.name} has no hash algorithm") from None


_HASH_ALGORITHMS: dict[HashType, type[hashes.HashAlgorithm]] = {
    HashType.SHA1: hashes.SHA1,
    HashType.SHA224: hashes.SHA224,
    HashType.SHA256: hashes.SHA256,
    HashType.SHA384: hashes.SHA384,
    HashType.SHA512: hashes.SHA512,
}


@dataclass(frozen=True)
class AesCtrParams:
    iv_size: int

    FIELDS: ClassVar = ((1, "iv_size", UINT32),)


@dataclass(frozen=True)
class AesCtrKeyFormat:
    """AES block-cipher key format: key size plus CTR-mode IV size."""

    key_size: int
    params: AesCtrParams

    FIELDS: ClassVar = (
        (1, "params", AesCtrParams),
        (2, "key_size", UINT32),
    )


@dataclass(frozen=True)
class HmacParams:
    hash: HashType
    tag_size: int

    FIELDS: ClassVar = (
        (1, "hash", HashType),
        (2, "tag_size", UINT32),
    )


@dataclass(frozen=True)
class HmacKeyFormat:
    """HMAC key format: key size, truncated tag size and hash function."""

    key_size: int
    params: HmacParams
    version: int = 0

    FIELDS: ClassVar = (
        (1, "params", HmacParams),
        (2, "key_size", UINT32),
        (3, "version", UINT32),
    )


@dataclass(frozen=True)
class AesCtrHmacAeadKeyFormat:
    """Encrypt-then-MAC composition of AES-CTR and HMAC."""

    aes_ctr_key_format: AesCtrKeyFormat
    hmac_key_format: HmacKeyFormat

    FIELDS: ClassVar = (
        (1, "aes_ctr_key_format", AesCtrKeyFormat),
        (2, "hmac_key_format", HmacKeyFormat),
    )


@dataclass(frozen=True)
class AesGcmKeyFormat:
    """AES-GCM key format. Nonce and tag sizes are fixed by the algorithm."""

    key_size: int
    version: int = 0

    FIELDS: ClassVar = (
        (2, "key_size", UINT32),
        (3, "version", UINT32),
    )

"""
Key descriptors ("key templates") and the builders that produce them.

A KeyTemplate names an algorithm by type URL, says how ciphertexts are
prefixed, and carries the encoded key-format record for that algorithm.
It never holds key material.

Descriptor wire layout (same codec as the key formats)::

  field 1  type_url             string
  field 2  value                bytes  (encoded key format)
  field 3  output_prefix_type   enum
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, ClassVar

from . import codec
from .errors import UnknownKeyTypeError
from .params import (
    AesCtrHmacAeadKeyFormat,
    AesCtrKeyFormat,
    AesCtrParams,
    AesGcmKeyFormat,
    HashType,
    HmacKeyFormat,
    HmacParams,
    OutputPrefixType,
)

logger = logging.getLogger(__name__)

AES_CTR_HMAC_AEAD_TYPE_URL = "type.googleapis.com/google.crypto.tink.AesCtrHmacAeadKey"
AES_GCM_TYPE_URL = "type.googleapis.com/google.crypto.tink.AesGcmKey"

KEY_FORMATS: dict[str, type] = {
    AES_CTR_HMAC_AEAD_TYPE_URL: AesCtrHmacAeadKeyFormat,
    AES_GCM_TYPE_URL: AesGcmKeyFormat,
}


@dataclass(frozen=True)
class KeyTemplate:
    """Immutable key descriptor handed to a key-generation subsystem."""

    type_url: str
    output_prefix_type: OutputPrefixType
    value: bytes

    FIELDS: ClassVar = (
        (1, "type_url", codec.STRING),
        (2, "value", codec.BYTES),
        (3, "output_prefix_type", OutputPrefixType),
    )

    def serialize(self) -> bytes:
        return codec.encode(self)

    @classmethod
    def deserialize(cls, data: bytes) -> KeyTemplate:
        return codec.decode(data, cls)

    def describe(self) -> dict[str, Any]:
        """Human-readable summary with the key format decoded."""
        prefix = self.output_prefix_type
        return {
            "type_url": self.type_url,
            "output_prefix_type": getattr(prefix, "name", prefix),
            "key_format": asdict(parse_key_format(self)),
        }


def parse_key_format(template: KeyTemplate) -> Any:
    """Decode ``template.value`` with the schema registered for its type URL."""
    try:
        key_format_cls = KEY_FORMATS[template.type_url]
    except KeyError:
        raise UnknownKeyTypeError(
            f"No key format registered for type URL {template.type_url!r}"
        ) from None
    return codec.decode(template.value, key_format_cls)


def new_aes_ctr_hmac_sha256_key_template(
    aes_key_size: int,
    iv_size: int,
    hmac_key_size: int,
    tag_size: int,
) -> KeyTemplate:
    """Build an AES-CTR + HMAC-SHA256 AEAD descriptor.

    The hash is always SHA256 and the output prefix is always TINK.
    Sizes are encoded as given; codec errors propagate to the caller.
    """
    aes_ctr_key_format = AesCtrKeyFormat(
        key_size=aes_key_size,
        params=AesCtrParams(iv_size=iv_size),
    )
    hmac_key_format = HmacKeyFormat(
        key_size=hmac_key_size,
        params=HmacParams(hash=HashType.SHA256, tag_size=tag_size),
    )
    key_format = AesCtrHmacAeadKeyFormat(
        aes_ctr_key_format=aes_ctr_key_format,
        hmac_key_format=hmac_key_format,
    )

    template = KeyTemplate(
        type_url=AES_CTR_HMAC_AEAD_TYPE_URL,
        output_prefix_type=OutputPrefixType.TINK,
        value=codec.encode(key_format),
    )
    logger.debug(
        "Built AES-CTR-HMAC template (aes=%d, iv=%d, hmac=%d, tag=%d)",
        aes_key_size, iv_size, hmac_key_size, tag_size,
    )
    return template


def new_aes_gcm_key_template(
    key_size: int,
    output_prefix_type: OutputPrefixType,
) -> KeyTemplate:
    """Build an AES-GCM descriptor with the given output prefix."""
    key_format = AesGcmKeyFormat(key_size=key_size)

    template = KeyTemplate(
        type_url=AES_GCM_TYPE_URL,
        output_prefix_type=output_prefix_type,
        value=codec.encode(key_format),
    )
    logger.debug(
        "Built AES-GCM template (key=%d, prefix=%s)",
        key_size, getattr(output_prefix_type, "name", output_prefix_type),
    )
    return template

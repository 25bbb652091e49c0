"""
Pre-generated key templates for AEAD keys.

These are the vetted parameter combinations; most callers should pick one
of them instead of calling the builders in :mod:`keyspec.core.descriptor`
with custom sizes. Every function returns a fresh, value-equal template
on each call.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from .descriptor import (
    KeyTemplate,
    new_aes_ctr_hmac_sha256_key_template,
    new_aes_gcm_key_template,
)
from .errors import UnknownTemplateError
from .params import OutputPrefixType

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "AES128_GCM"


def aes128_ctr_hmac_sha256() -> KeyTemplate:
    """
    AesCtrHmacAeadKey template:
      AES key size: 16 bytes
      AES IV size: 16 bytes
      HMAC key size: 32 bytes
      HMAC tag size: 16 bytes
      HMAC hash function: SHA256
      OutputPrefixType: TINK
    """
    return new_aes_ctr_hmac_sha256_key_template(
        aes_key_size=16,
        iv_size=16,
        hmac_key_size=32,
        tag_size=16,
    )


def aes256_ctr_hmac_sha256() -> KeyTemplate:
    """
    AesCtrHmacAeadKey template:
      AES key size: 32 bytes
      AES IV size: 16 bytes
      HMAC key size: 32 bytes
      HMAC tag size: 32 bytes
      HMAC hash function: SHA256
      OutputPrefixType: TINK
    """
    return new_aes_ctr_hmac_sha256_key_template(
        aes_key_size=32,
        iv_size=16,
        hmac_key_size=32,
        tag_size=32,
    )


def aes128_gcm() -> KeyTemplate:
    """
    AesGcmKey template:
      key size: 16 bytes
      OutputPrefixType: TINK
    """
    return new_aes_gcm_key_template(key_size=16, output_prefix_type=OutputPrefixType.TINK)


def aes256_gcm() -> KeyTemplate:
    """
    AesGcmKey template:
      key size: 32 bytes
      OutputPrefixType: TINK
    """
    return new_aes_gcm_key_template(key_size=32, output_prefix_type=OutputPrefixType.TINK)


def aes256_gcm_no_prefix() -> KeyTemplate:
    """
    AesGcmKey template:
      key size: 32 bytes
      OutputPrefixType: RAW
    """
    return new_aes_gcm_key_template(key_size=32, output_prefix_type=OutputPrefixType.RAW)


TEMPLATE_CHOICES: dict[str, Callable[[], KeyTemplate]] = {
    "AES128_CTR_HMAC_SHA256": aes128_ctr_hmac_sha256,
    "AES256_CTR_HMAC_SHA256": aes256_ctr_hmac_sha256,
    "AES128_GCM": aes128_gcm,
    "AES256_GCM": aes256_gcm,
    "AES256_GCM_RAW": aes256_gcm_no_prefix,
}


def get_template(name: str) -> KeyTemplate:
    """Look up a catalog entry by name (case-insensitive) and build it."""
    try:
        factory = TEMPLATE_CHOICES[name.upper()]
    except KeyError:
        raise UnknownTemplateError(
            f"Unknown key template {name!r} "
            f"(available: {', '.join(TEMPLATE_CHOICES)})"
        ) from None
    logger.debug("Serving key template %s", name.upper())
    return factory()


def default_template(settings: dict[str, Any] | None = None) -> KeyTemplate:
    """Template named by the ``default_template`` preference, else AES128_GCM."""
    if settings is None:
        from .config import load_config
        settings = load_config()
    return get_template(settings.get("default_template", DEFAULT_TEMPLATE))

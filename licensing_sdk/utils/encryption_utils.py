"""
Authenticated symmetric encryption for injectable payloads.

Wire format shared with the licensing service: base64 of a JSON envelope

    {"iv": <base64 16 bytes>, "value": <base64 AES-256-CBC ciphertext>, "mac": <hex>}

The cipher key is SHA-256(secret); the MAC key is SHA-256("mac:" + secret) and
the MAC is HMAC-SHA256 over the base64 iv and value strings. All functions are
pure and safe to call from several threads.
"""

import base64
import binascii
import hashlib
import hmac
import json
import os
from typing import Dict, Optional, Union

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ..exceptions import (
    DecryptionFailedError,
    InvalidConfigValueError,
    MalformedPayloadError,
    SignatureMismatchError,
)

IV_SIZE = 16
_BLOCK_BITS = algorithms.AES.block_size
_MAC_KEY_PREFIX = b"mac:"

Blob = Union[str, bytes]


def derive_encryption_key(secret: str) -> bytes:
    """Normalize the project secret to a 32 byte AES key."""
    return hashlib.sha256(_secret_bytes(secret)).digest()


def derive_mac_key(secret: str) -> bytes:
    """Derive the HMAC key, distinct from the cipher key."""
    return hashlib.sha256(_MAC_KEY_PREFIX + _secret_bytes(secret)).digest()


def _secret_bytes(secret: str) -> bytes:
    if not secret:
        raise InvalidConfigValueError(
            "A secret is required to encrypt or decrypt injectables", field="secret"
        )
    return secret.encode("utf-8") if isinstance(secret, str) else secret


def _compute_mac(iv_b64: str, value_b64: str, secret: str) -> str:
    message = (iv_b64 + value_b64).encode("ascii")
    return hmac.new(derive_mac_key(secret), message, hashlib.sha256).hexdigest()


def _parse_envelope(blob: Blob) -> Dict[str, str]:
    """Decode the outer base64 and JSON layers into the envelope fields."""
    if isinstance(blob, str):
        blob = blob.strip().encode("ascii", errors="replace")
    if not blob:
        raise MalformedPayloadError("Encrypted payload is empty")

    try:
        envelope = json.loads(base64.b64decode(blob, validate=True))
    except (binascii.Error, ValueError) as e:
        raise MalformedPayloadError("Encrypted payload is not a base64 JSON envelope", cause=e)

    if not isinstance(envelope, dict):
        raise MalformedPayloadError("Encrypted payload envelope must be an object")

    for field in ("iv", "value"):
        if not isinstance(envelope.get(field), str) or not envelope[field]:
            raise MalformedPayloadError(f"Encrypted payload is missing '{field}'", field=field)

    # MAC input and comparison are defined over ASCII only
    for field in ("iv", "value", "mac"):
        value = envelope.get(field)
        if isinstance(value, str) and not value.isascii():
            raise MalformedPayloadError(
                f"Field '{field}' contains non-ASCII characters", field=field
            )

    return envelope


def _b64_field(envelope: Dict[str, str], field: str) -> bytes:
    try:
        return base64.b64decode(envelope[field], validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedPayloadError(f"Field '{field}' is not valid base64", field=field, cause=e)


def _decrypt_envelope(envelope: Dict[str, str], secret: str) -> bytes:
    iv = _b64_field(envelope, "iv")
    if len(iv) != IV_SIZE:
        raise MalformedPayloadError(
            f"IV must be {IV_SIZE} bytes, got {len(iv)}", field="iv"
        )
    ciphertext = _b64_field(envelope, "value")
    key = derive_encryption_key(secret)

    if len(ciphertext) % (_BLOCK_BITS // 8):
        raise DecryptionFailedError("Ciphertext length is not a multiple of the block size")

    try:
        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(_BLOCK_BITS).unpadder()
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as e:
        raise DecryptionFailedError("Invalid padding, the secret is probably wrong", cause=e)


def decrypt(blob: Blob, secret: str) -> bytes:
    """
    Decrypt a payload without checking its MAC.

    Only cipher-level integrity (padding) is enforced.

    Raises:
        MalformedPayloadError: If the envelope cannot be decoded
        DecryptionFailedError: If the cipher rejects the payload
    """
    return _decrypt_envelope(_parse_envelope(blob), secret)


def verify_and_decrypt(blob: Blob, secret: str, verify: bool = True) -> bytes:
    """
    Decrypt a payload, checking its MAC first when verify is set.

    On MAC mismatch no decryption is attempted.

    Args:
        blob: Envelope as produced by encrypt()
        secret: Project secret
        verify: Whether to check the MAC

    Returns:
        Plaintext bytes

    Raises:
        SignatureMismatchError: If verify is set and the MAC does not match
        MalformedPayloadError: If the envelope cannot be decoded or lacks a MAC
        DecryptionFailedError: If the cipher rejects the payload
    """
    envelope = _parse_envelope(blob)

    if verify:
        mac = envelope.get("mac")
        if not isinstance(mac, str) or not mac:
            raise MalformedPayloadError("Encrypted payload is missing 'mac'", field="mac")
        expected = _compute_mac(envelope["iv"], envelope["value"], secret)
        if not hmac.compare_digest(expected, mac.lower()):
            raise SignatureMismatchError()

    return _decrypt_envelope(envelope, secret)


def encrypt(plaintext: Union[str, bytes], secret: str, iv: Optional[bytes] = None) -> str:
    """
    Encrypt a payload into the wire format.

    Args:
        plaintext: Text (UTF-8 encoded) or bytes
        secret: Project secret
        iv: Fixed IV, for reproducible fixtures only

    Returns:
        Base64 envelope string
    """
    if isinstance(plaintext, str):
        plaintext = plaintext.encode("utf-8")
    iv = iv or os.urandom(IV_SIZE)

    padder = padding.PKCS7(_BLOCK_BITS).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = Cipher(algorithms.AES(derive_encryption_key(secret)), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()

    iv_b64 = base64.b64encode(iv).decode("ascii")
    value_b64 = base64.b64encode(ciphertext).decode("ascii")
    envelope = {"iv": iv_b64, "value": value_b64, "mac": _compute_mac(iv_b64, value_b64, secret)}
    return base64.b64encode(json.dumps(envelope).encode("utf-8")).decode("ascii")

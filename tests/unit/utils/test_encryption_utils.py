"""
Unit tests for the payload encryption utilities.

Covers the envelope wire format, MAC verification and the mapping of every
failure onto SignatureMismatchError, MalformedPayloadError or
DecryptionFailedError.
"""

import base64
import json

import pytest

from licensing_sdk.exceptions import (
    DecryptionFailedError,
    ErrorCode,
    InvalidConfigValueError,
    MalformedPayloadError,
    SignatureMismatchError,
)
from licensing_sdk.utils.encryption_utils import (
    IV_SIZE,
    decrypt,
    derive_encryption_key,
    derive_mac_key,
    encrypt,
    verify_and_decrypt,
)


def _envelope(blob: str) -> dict:
    return json.loads(base64.b64decode(blob))


def _blob(envelope: dict) -> str:
    return base64.b64encode(json.dumps(envelope).encode("utf-8")).decode("ascii")


class TestKeyDerivation:
    """Test key derivation from the project secret."""

    def test_keys_are_32_bytes(self, secret):
        """Both keys are SHA-256 sized."""
        assert len(derive_encryption_key(secret)) == 32
        assert len(derive_mac_key(secret)) == 32

    def test_mac_key_differs_from_cipher_key(self, secret):
        """The MAC key is domain-separated from the cipher key."""
        assert derive_encryption_key(secret) != derive_mac_key(secret)

    def test_empty_secret_rejected(self):
        """An empty secret is a configuration error."""
        with pytest.raises(InvalidConfigValueError) as exc_info:
            derive_encryption_key("")

        assert exc_info.value.context["field"] == "secret"


class TestEncrypt:
    """Test encrypt()."""

    def test_envelope_fields(self, secret):
        """The envelope carries iv, value and a hex MAC."""
        envelope = _envelope(encrypt("hello", secret))

        assert set(envelope) == {"iv", "value", "mac"}
        assert len(base64.b64decode(envelope["iv"])) == IV_SIZE
        assert len(envelope["mac"]) == 64
        int(envelope["mac"], 16)

    def test_random_iv_per_call(self, secret):
        """Two encryptions of the same text differ."""
        assert encrypt("same", secret) != encrypt("same", secret)

    def test_fixed_iv_is_reproducible(self, secret):
        """A fixed IV gives a stable envelope, for fixtures."""
        iv = bytes(range(16))
        assert encrypt("same", secret, iv=iv) == encrypt("same", secret, iv=iv)


class TestVerifyAndDecrypt:
    """Test verify_and_decrypt()."""

    def test_round_trip_text(self, secret):
        """Decrypting an encrypted payload returns the original bytes."""
        blob = encrypt("export const tier = 'pro';", secret)

        assert verify_and_decrypt(blob, secret) == b"export const tier = 'pro';"

    def test_round_trip_binary(self, secret):
        """Binary content survives untouched."""
        payload = bytes(range(256)) * 3
        blob = encrypt(payload, secret)

        assert verify_and_decrypt(blob, secret) == payload

    def test_round_trip_empty_plaintext(self, secret):
        """An empty payload pads to one block and decrypts to empty."""
        assert verify_and_decrypt(encrypt(b"", secret), secret) == b""

    def test_accepts_bytes_blob(self, secret):
        """The blob may be passed as bytes."""
        blob = encrypt("text", secret).encode("ascii")

        assert verify_and_decrypt(blob, secret) == b"text"

    def test_tampered_value_fails_signature(self, secret):
        """Changing the ciphertext breaks the MAC."""
        envelope = _envelope(encrypt("sensitive", secret))
        ciphertext = bytearray(base64.b64decode(envelope["value"]))
        ciphertext[0] ^= 0x01
        envelope["value"] = base64.b64encode(bytes(ciphertext)).decode("ascii")

        with pytest.raises(SignatureMismatchError) as exc_info:
            verify_and_decrypt(_blob(envelope), secret)

        assert exc_info.value.error_code == ErrorCode.SIGNATURE_MISMATCH

    def test_tampered_iv_fails_signature(self, secret):
        """Changing the IV breaks the MAC."""
        envelope = _envelope(encrypt("sensitive", secret))
        envelope["iv"] = base64.b64encode(b"\x00" * IV_SIZE).decode("ascii")

        with pytest.raises(SignatureMismatchError):
            verify_and_decrypt(_blob(envelope), secret)

    def test_wrong_secret_fails_signature(self, secret):
        """A different secret derives a different MAC key."""
        blob = encrypt("sensitive", secret)

        with pytest.raises(SignatureMismatchError):
            verify_and_decrypt(blob, "another-secret")

    def test_mac_compared_case_insensitively(self, secret):
        """Upper-case hex MACs are accepted."""
        envelope = _envelope(encrypt("text", secret))
        envelope["mac"] = envelope["mac"].upper()

        assert verify_and_decrypt(_blob(envelope), secret) == b"text"

    def test_missing_mac_when_verifying(self, secret):
        """Verification requires a MAC."""
        envelope = _envelope(encrypt("text", secret))
        del envelope["mac"]

        with pytest.raises(MalformedPayloadError) as exc_info:
            verify_and_decrypt(_blob(envelope), secret)

        assert exc_info.value.context["field"] == "mac"

    def test_verify_disabled_skips_mac(self, secret):
        """With verify off, a bogus MAC is ignored."""
        envelope = _envelope(encrypt("text", secret))
        envelope["mac"] = "00" * 32

        assert verify_and_decrypt(_blob(envelope), secret, verify=False) == b"text"

    def test_verify_disabled_without_mac(self, secret):
        """With verify off, the MAC may be absent."""
        envelope = _envelope(encrypt("text", secret))
        del envelope["mac"]

        assert verify_and_decrypt(_blob(envelope), secret, verify=False) == b"text"

    def test_missing_secret(self, secret):
        """No secret means no decryption."""
        with pytest.raises(InvalidConfigValueError):
            verify_and_decrypt(encrypt("text", secret), None)


class TestMalformedPayloads:
    """Test payloads that cannot be decoded."""

    @pytest.mark.parametrize("blob", ["", "   ", "not base64!!", "w6k="])
    def test_outer_layer_rejected(self, secret, blob):
        """Empty, non-base64 or non-JSON blobs are malformed."""
        with pytest.raises(MalformedPayloadError):
            verify_and_decrypt(blob, secret)

    def test_envelope_must_be_object(self, secret):
        """A JSON list is not an envelope."""
        blob = base64.b64encode(b"[1, 2]").decode("ascii")

        with pytest.raises(MalformedPayloadError):
            decrypt(blob, secret)

    @pytest.mark.parametrize("field", ["iv", "value"])
    def test_missing_field(self, secret, field):
        """iv and value are mandatory."""
        envelope = _envelope(encrypt("text", secret))
        del envelope[field]

        with pytest.raises(MalformedPayloadError) as exc_info:
            decrypt(_blob(envelope), secret)

        assert exc_info.value.context["field"] == field

    def test_iv_wrong_length(self, secret):
        """The IV must be exactly one block."""
        envelope = _envelope(encrypt("text", secret))
        envelope["iv"] = base64.b64encode(b"short").decode("ascii")

        with pytest.raises(MalformedPayloadError) as exc_info:
            decrypt(_blob(envelope), secret)

        assert exc_info.value.context["field"] == "iv"

    @pytest.mark.parametrize("field", ["iv", "value", "mac"])
    def test_non_ascii_field(self, secret, field):
        """Fields that survive JSON but are not ASCII are malformed, not crashes."""
        envelope = _envelope(encrypt("text", secret))
        envelope[field] = "é" + envelope[field]

        with pytest.raises(MalformedPayloadError) as exc_info:
            verify_and_decrypt(_blob(envelope), secret)

        assert exc_info.value.context["field"] == field

    def test_non_ascii_mac_of_full_length(self, secret):
        envelope = _envelope(encrypt("text", secret))
        envelope["mac"] = "é" * 64

        with pytest.raises(MalformedPayloadError):
            verify_and_decrypt(_blob(envelope), secret)

    def test_field_not_base64(self, secret):
        """Inner fields must be base64."""
        envelope = _envelope(encrypt("text", secret))
        envelope["value"] = "%%%"

        with pytest.raises(MalformedPayloadError):
            decrypt(_blob(envelope), secret)


class TestDecrypt:
    """Test decrypt() without MAC checks."""

    def test_round_trip(self, secret):
        assert decrypt(encrypt("plain", secret), secret) == b"plain"

    def test_truncated_ciphertext(self, secret):
        """Ciphertext that is not a whole number of blocks cannot decrypt."""
        envelope = _envelope(encrypt("some longer plaintext", secret))
        ciphertext = base64.b64decode(envelope["value"])
        envelope["value"] = base64.b64encode(ciphertext[:-3]).decode("ascii")

        with pytest.raises(DecryptionFailedError) as exc_info:
            decrypt(_blob(envelope), secret)

        assert exc_info.value.error_code == ErrorCode.DECRYPTION_FAILED

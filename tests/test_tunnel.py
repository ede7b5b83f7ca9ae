"""Tests for the tunnel envelope entry points."""

import base64
import logging
import secrets

import pytest

from krishnacrypt.cbc import encode_envelope, encrypt_message
from krishnacrypt.config import CipherConfig
from krishnacrypt.errors import (
    DecryptionError,
    EntropyError,
    InvalidLength,
    InvalidPlaintext,
    MalformedEncoding,
)
from krishnacrypt.identifiers import tunnel_id
from krishnacrypt.kdf import derive_key
from krishnacrypt.randomness import RandomSource
from krishnacrypt.tunnel import TunnelMetadata, TunnelResult, tunnel_decrypt, tunnel_encrypt

MESSAGE = "Hello, this is a test message for KrishnaCrypt!"
USER_A = "user123"
USER_B = "user456"


class TestTunnelRoundTrip:
    """Round trips through tunnel_encrypt / tunnel_decrypt."""

    def test_basic_scenario(self) -> None:
        enc = tunnel_encrypt(MESSAGE, USER_A, USER_B)
        assert enc.success
        dec = tunnel_decrypt(enc.ciphertext, USER_A, USER_B)
        assert dec.success
        assert dec.plaintext == MESSAGE

    def test_reversed_identifiers_decrypt(self) -> None:
        enc = tunnel_encrypt(MESSAGE, USER_A, USER_B)
        assert tunnel_decrypt(enc.ciphertext, USER_B, USER_A).plaintext == MESSAGE

    @pytest.mark.parametrize("message", ["", "a", "x" * 16, "नमस्ते 🌏 héllo", "line\nbreak\ttab"])
    def test_various_messages(self, message: str) -> None:
        enc = tunnel_encrypt(message, USER_A, USER_B)
        assert tunnel_decrypt(enc.ciphertext, USER_A, USER_B).plaintext == message

    def test_ciphertext_is_base64_envelope(self) -> None:
        enc = tunnel_encrypt(MESSAGE, USER_A, USER_B)
        raw = base64.b64decode(enc.ciphertext, validate=True)
        assert len(raw) == 16 + 16 * 3  # 47 bytes of UTF-8 -> 3 blocks
        assert enc.plaintext is None

    def test_seeded_rng_is_reproducible(self) -> None:
        a = tunnel_encrypt(MESSAGE, USER_A, USER_B, rng=RandomSource(seed=11))
        b = tunnel_encrypt(MESSAGE, USER_A, USER_B, rng=RandomSource(seed=11))
        assert a.ciphertext == b.ciphertext

    def test_wrong_pair_does_not_recover_message(self) -> None:
        enc = tunnel_encrypt(MESSAGE, USER_A, USER_B)
        dec = tunnel_decrypt(enc.ciphertext, USER_A, "user789")
        assert not dec.success or dec.plaintext != MESSAGE

    def test_custom_config(self) -> None:
        config = CipherConfig(salt="another-deployment", rounds=5)
        enc = tunnel_encrypt(MESSAGE, USER_A, USER_B, config)
        assert enc.metadata.rounds == 5
        assert tunnel_decrypt(enc.ciphertext, USER_A, USER_B, config).plaintext == MESSAGE

        dec = tunnel_decrypt(enc.ciphertext, USER_A, USER_B)
        assert not dec.success or dec.plaintext != MESSAGE


class TestTunnelMetadata:
    """Tests for the metadata attached to tunnel results."""

    def test_encrypt_metadata_fields(self) -> None:
        meta = tunnel_encrypt(MESSAGE, USER_A, USER_B).metadata
        assert meta.algorithm == "KrishnaCrypt-Custom-CBC"
        assert meta.key_size == 128
        assert meta.block_size == 128
        assert meta.rounds == 3
        assert meta.elapsed_ms >= 0
        assert meta.tunnel_id == tunnel_id(USER_A, USER_B)
        assert meta.timestamp.endswith("Z")
        assert meta.operation == "encrypt"
        assert meta.encryption_version == "1.0"

    def test_decrypt_metadata_fields(self) -> None:
        enc = tunnel_encrypt(MESSAGE, USER_A, USER_B)
        meta = tunnel_decrypt(enc.ciphertext, USER_B, USER_A).metadata
        assert meta.operation == "decrypt"
        assert meta.tunnel_id == enc.metadata.tunnel_id

    def test_to_dict_keys(self) -> None:
        enc = tunnel_encrypt(MESSAGE, USER_A, USER_B)
        record = enc.metadata.to_dict()
        assert record["keySize"] == 128
        assert record["blockSize"] == 128
        assert record["tunnelId"] == tunnel_id(USER_A, USER_B)
        assert "encryptionTime" in record
        assert "decryptionTime" not in record

        dec = tunnel_decrypt(enc.ciphertext, USER_A, USER_B)
        assert "decryptionTime" in dec.metadata.to_dict()

    def test_metadata_not_embedded_in_ciphertext(self) -> None:
        enc = tunnel_encrypt("", USER_A, USER_B)
        assert len(base64.b64decode(enc.ciphertext)) == 32

    def test_result_to_dict(self) -> None:
        enc = tunnel_encrypt(MESSAGE, USER_A, USER_B)
        record = enc.to_dict()
        assert record["success"] is True
        assert record["encrypted"] == enc.ciphertext
        assert "error" not in record

    def test_metadata_operation_is_required(self) -> None:
        with pytest.raises(TypeError, match="operation"):
            TunnelMetadata(  # type: ignore[call-arg]
                algorithm="KrishnaCrypt-Custom-CBC",
                key_size=128,
                block_size=128,
                rounds=3,
                elapsed_ms=0.0,
                tunnel_id=tunnel_id(USER_A, USER_B),
                timestamp="2024-01-01T00:00:00.000Z",
            )


class TestTunnelRejection:
    """Malformed or corrupted input is reported, never raised."""

    def test_invalid_encoding(self) -> None:
        result = tunnel_decrypt("this is not base64!", USER_A, USER_B)
        assert not result.success
        assert isinstance(result.error, MalformedEncoding)
        assert result.error_kind == "malformed_encoding"
        assert result.message == "Failed to decrypt message"
        assert result.plaintext is None
        assert result.metadata is None

    def test_decoded_length_17(self) -> None:
        encoded = base64.b64encode(bytes(17)).decode()
        result = tunnel_decrypt(encoded, USER_A, USER_B)
        assert not result.success
        assert isinstance(result.error, InvalidLength)

    def test_invalid_utf8_plaintext(self) -> None:
        key = derive_key(USER_A, USER_B)
        encoded = encode_envelope(encrypt_message(b"\xff\xfe\xfd", key))
        result = tunnel_decrypt(encoded, USER_A, USER_B)
        assert not result.success
        assert isinstance(result.error, InvalidPlaintext)

    def test_unwrap_raises_stored_error(self) -> None:
        result = tunnel_decrypt("@@@@", USER_A, USER_B)
        with pytest.raises(DecryptionError):
            result.unwrap()

    def test_unwrap_returns_self_on_success(self) -> None:
        enc = tunnel_encrypt(MESSAGE, USER_A, USER_B)
        assert enc.unwrap() is enc

    def test_failure_to_dict_is_generic(self) -> None:
        result = tunnel_decrypt(base64.b64encode(bytes(17)).decode(), USER_A, USER_B)
        record = result.to_dict()
        assert record["success"] is False
        assert record["message"] == "Failed to decrypt message"
        assert record["error"] == "invalid_length"
        assert "17" not in record["message"]

    def test_entropy_failure(self, monkeypatch) -> None:
        def broken(count):
            raise OSError("entropy pool unavailable")

        monkeypatch.setattr(secrets, "token_bytes", broken)
        result = tunnel_encrypt(MESSAGE, USER_A, USER_B)
        assert not result.success
        assert isinstance(result.error, EntropyError)
        assert result.message == "Failed to encrypt message"
        assert result.ciphertext is None

    def test_rejection_is_logged_by_kind_only(self, caplog) -> None:
        caplog.set_level(logging.WARNING, logger="krishnacrypt.tunnel")
        tunnel_decrypt("***", USER_A, USER_B)
        assert "malformed_encoding" in caplog.text
        assert USER_A not in caplog.text

    def test_result_defaults(self) -> None:
        result = TunnelResult(success=True)
        assert result.error_kind == ""
        assert result.to_dict() == {"success": True}


# Ciphertexts produced by the deployed JavaScript service for user123/user456.
KNOWN_ANSWERS = [
    ("8X5f1JFCS/daMUKyqcVjsWp7ld2I1lw9ilJcxJeGcms=", ""),
    ("4AhAbs5rChVk73O5x52KyCUyeUJ7oK2jFqyRGPNdvJ8DeU+MMMedMLCa4nV3MyBd", "x" * 16),
    (
        "i0VSj3qp6Z7oZ8bROGeRge4sfA5LEHxp41QRRdtEZDzfY13TgnDYFeBwglktetIh"
        "6tM8fzsgOES5TUx42p7g+Q==",
        MESSAGE,
    ),
]


class TestKnownAnswers:
    """Ciphertexts from the deployed service decrypt to their plaintexts."""

    @pytest.mark.parametrize("ciphertext,plaintext", KNOWN_ANSWERS)
    def test_decrypts_known_ciphertext(self, ciphertext: str, plaintext: str) -> None:
        dec = tunnel_decrypt(ciphertext, USER_A, USER_B)
        assert dec.success, dec.error
        assert dec.plaintext == plaintext

    @pytest.mark.parametrize("ciphertext,plaintext", KNOWN_ANSWERS)
    def test_reversed_identifiers(self, ciphertext: str, plaintext: str) -> None:
        assert tunnel_decrypt(ciphertext, USER_B, USER_A).plaintext == plaintext

    @pytest.mark.parametrize("ciphertext,plaintext", KNOWN_ANSWERS)
    def test_envelope_length(self, ciphertext: str, plaintext: str) -> None:
        blocks = len(plaintext) // 16 + 1
        assert len(base64.b64decode(ciphertext)) == 16 * (blocks + 1)

    def test_wrong_pair_rejects_or_differs(self) -> None:
        ciphertext, plaintext = KNOWN_ANSWERS[2]
        dec = tunnel_decrypt(ciphertext, USER_A, "user789")
        assert not dec.success or dec.plaintext != plaintext


class TestUnpairedSurrogates:
    """Text with unpaired surrogates is encoded with U+FFFD in their place."""

    @pytest.mark.parametrize(
        "message,expected",
        [("\ud800", "\ufffd"), ("a\udcffb", "a\ufffdb"), ("\ud83dx", "\ufffdx")],
    )
    def test_message_round_trips_as_replacement(self, message: str, expected: str) -> None:
        enc = tunnel_encrypt(message, USER_A, USER_B)
        assert enc.success
        dec = tunnel_decrypt(enc.ciphertext, USER_A, USER_B)
        assert dec.plaintext == expected

    def test_surrogate_pair_is_one_character(self) -> None:
        enc = tunnel_encrypt("\ud83d\ude00", USER_A, USER_B)
        assert tunnel_decrypt(enc.ciphertext, USER_A, USER_B).plaintext == "\U0001f600"

    def test_identifier_with_surrogate(self) -> None:
        enc = tunnel_encrypt(MESSAGE, "user\udcff", USER_B)
        assert enc.success
        assert enc.metadata.tunnel_id == tunnel_id("user\ufffd", USER_B)
        dec = tunnel_decrypt(enc.ciphertext, "user\ufffd", USER_B)
        assert dec.plaintext == MESSAGE

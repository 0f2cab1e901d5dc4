"""
Unit tests for the client CipherEngine and key export/import.
"""

import base64
import json

import pytest
from hypothesis import given, strategies as st

from sealdrop.client.cipher import KEY_SIZE, NONCE_SIZE, TAG_SIZE, CipherEngine, KeyHandle
from sealdrop.client.keys import decode_nonce, encode_nonce, export_key, import_key
from sealdrop.client.passwords import MIN_LENGTH, generate_share_password
from sealdrop.domain.errors import IntegrityError, KeyFormatError


@pytest.fixture
def engine():
    return CipherEngine()


class TestCipherEngine:
    def test_output_shape(self, engine):
        result = engine.encrypt(b"hello world")

        assert len(result.nonce) == NONCE_SIZE
        assert len(result.key.key_bytes()) == KEY_SIZE
        assert len(result.ciphertext) == len(b"hello world") + TAG_SIZE
        assert b"hello world" not in result.ciphertext

    def test_empty_plaintext(self, engine):
        result = engine.encrypt(b"")
        assert engine.decrypt(result.ciphertext, result.key, result.nonce) == b""

    def test_fresh_key_and_nonce_per_call(self, engine):
        first, second = engine.encrypt(b"same"), engine.encrypt(b"same")

        assert first.nonce != second.nonce
        assert first.key != second.key
        assert first.ciphertext != second.ciphertext

    def test_tampered_ciphertext(self, engine):
        result = engine.encrypt(b"payload")
        tampered = bytes([result.ciphertext[0] ^ 0x01]) + result.ciphertext[1:]

        with pytest.raises(IntegrityError):
            engine.decrypt(tampered, result.key, result.nonce)

    def test_wrong_key(self, engine):
        result = engine.encrypt(b"payload")
        with pytest.raises(IntegrityError):
            engine.decrypt(result.ciphertext, KeyHandle.generate(), result.nonce)

    def test_wrong_nonce(self, engine):
        result = engine.encrypt(b"payload")
        other_nonce = bytes(b ^ 0xFF for b in result.nonce)
        with pytest.raises(IntegrityError):
            engine.decrypt(result.ciphertext, result.key, other_nonce)

    @pytest.mark.parametrize("nonce", [b"", b"\x00" * 11, b"\x00" * 16])
    def test_bad_nonce_length(self, engine, nonce):
        result = engine.encrypt(b"payload")
        with pytest.raises(IntegrityError):
            engine.decrypt(result.ciphertext, result.key, nonce)

    def test_truncated_ciphertext(self, engine):
        result = engine.encrypt(b"payload")
        with pytest.raises(IntegrityError):
            engine.decrypt(result.ciphertext[:TAG_SIZE - 1], result.key, result.nonce)

    @given(plaintext=st.binary(max_size=4096))
    def test_round_trip(self, plaintext):
        engine = CipherEngine()
        result = engine.encrypt(plaintext)
        assert engine.decrypt(result.ciphertext, result.key, result.nonce) == plaintext


class TestKeyHandle:
    def test_rejects_wrong_size(self):
        with pytest.raises(KeyFormatError):
            KeyHandle(b"\x00" * 16)

    def test_destroy_zeroes_and_blocks_use(self):
        key = KeyHandle.generate()
        key.destroy()

        assert key.is_destroyed
        assert key._material == bytearray(KEY_SIZE)
        with pytest.raises(KeyFormatError):
            key.key_bytes()

    def test_context_manager_destroys(self):
        with KeyHandle.generate() as key:
            assert not key.is_destroyed
        assert key.is_destroyed

    def test_repr_hides_material(self):
        key = KeyHandle(b"\x41" * KEY_SIZE)
        assert "AAAA" not in repr(key)
        assert "256-bit" in repr(key)


class TestKeyExport:
    def test_jwk_shape(self):
        jwk = json.loads(export_key(KeyHandle(b"\x00" * KEY_SIZE)))

        assert jwk["kty"] == "oct"
        assert jwk["alg"] == "A256GCM"
        assert jwk["k"] == "A" * 43
        assert "=" not in jwk["k"]

    def test_round_trip_decrypts(self, engine):
        result = engine.encrypt(b"shared secret")
        imported = import_key(export_key(result.key))

        assert imported == result.key
        assert engine.decrypt(result.ciphertext, imported, result.nonce) == b"shared secret"

    @pytest.mark.parametrize(
        "blob",
        [
            "not json",
            "[1, 2]",
            json.dumps({"kty": "RSA", "alg": "A256GCM", "k": "A" * 43}),
            json.dumps({"kty": "oct", "alg": "A128GCM", "k": "A" * 22}),
            json.dumps({"kty": "oct", "alg": "A256GCM", "k": "not+base64url/"}),
            json.dumps({"kty": "oct", "alg": "A256GCM", "k": "A" * 22}),
            json.dumps({"kty": "oct", "alg": "A256GCM"}),
            None,
        ],
    )
    def test_import_rejects(self, blob):
        with pytest.raises(KeyFormatError):
            import_key(blob)


class TestNonceEncoding:
    def test_round_trip(self):
        nonce = bytes(range(NONCE_SIZE))
        assert decode_nonce(encode_nonce(nonce)) == nonce

    @pytest.mark.parametrize(
        "value",
        ["***", base64.b64encode(b"\x00" * 8).decode(), base64.b64encode(b"\x00" * 16).decode()],
    )
    def test_rejects(self, value):
        with pytest.raises(KeyFormatError):
            decode_nonce(value)


class TestSharePasswords:
    def test_contains_every_class(self):
        for _ in range(50):
            password = generate_share_password()
            assert len(password) == 16
            assert any(c.islower() for c in password)
            assert any(c.isupper() for c in password)
            assert any(c.isdigit() for c in password)
            assert any(not c.isalnum() for c in password)

    def test_minimum_length(self):
        assert len(generate_share_password(MIN_LENGTH)) == MIN_LENGTH
        with pytest.raises(ValueError):
            generate_share_password(MIN_LENGTH - 1)

    def test_passwords_differ(self):
        assert len({generate_share_password() for _ in range(20)}) == 20

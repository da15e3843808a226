import base64
import hashlib
import json

import pytest

from justone.controllers.responses_controller import serialize_answers
from justone.core.crypto import (
    NONCE_SIZE,
    DecryptionError,
    ResponseCipher,
    content_hash,
    derive_key,
)


@pytest.fixture
def cipher() -> ResponseCipher:
    return ResponseCipher("unit-test-secret")


def test_decrypt_returns_original_text(cipher):
    plaintext = json.dumps({"q1": "yes", "q2": ["a", "b"], "note": "héllo"})
    assert cipher.decrypt(cipher.encrypt(plaintext)) == plaintext


def test_blob_is_nonce_then_ciphertext_with_tag(cipher):
    plaintext = "abc"
    raw = base64.b64decode(cipher.encrypt(plaintext))
    # 12-byte nonce + ciphertext (same length as plaintext) + 16-byte GCM tag
    assert len(raw) == NONCE_SIZE + len(plaintext) + 16


def test_same_plaintext_encrypts_differently_each_time(cipher):
    a = cipher.encrypt("same")
    b = cipher.encrypt("same")
    assert a != b
    assert base64.b64decode(a)[:NONCE_SIZE] != base64.b64decode(b)[:NONCE_SIZE]


def test_tampered_ciphertext_is_rejected(cipher):
    raw = bytearray(base64.b64decode(cipher.encrypt("do not touch")))
    raw[-1] ^= 0x01
    with pytest.raises(DecryptionError):
        cipher.decrypt(base64.b64encode(bytes(raw)).decode())


def test_other_secret_cannot_decrypt(cipher):
    blob = cipher.encrypt("secret answers")
    with pytest.raises(DecryptionError):
        ResponseCipher("another-secret").decrypt(blob)


@pytest.mark.parametrize("blob", ["not base64 at all!!", base64.b64encode(b"short").decode()])
def test_malformed_blob_is_rejected(cipher, blob):
    with pytest.raises(DecryptionError):
        cipher.decrypt(blob)


def test_derived_key_is_deterministic_and_cached():
    derive_key.cache_clear()
    k1 = derive_key("rotating-secret", "justone-salt-v1")
    k2 = derive_key("rotating-secret", "justone-salt-v1")
    assert k1 == k2
    assert len(k1) == 32
    assert derive_key.cache_info().hits >= 1

    # a rotated secret is a different cache entry and a different key
    assert derive_key("rotated-secret", "justone-salt-v1") != k1


def test_content_hash_is_sha256_of_serialized_answers():
    answers = {"b": 2, "a": "ü"}
    serialized = serialize_answers(answers)
    assert serialized == '{"b":2,"a":"ü"}'
    assert content_hash(serialized) == hashlib.sha256(serialized.encode("utf-8")).hexdigest()


@pytest.mark.parametrize("answers", [{"q": float("nan")}, {"q": float("inf")}])
def test_serialize_answers_rejects_non_finite_numbers(answers):
    with pytest.raises(ValueError):
        serialize_answers(answers)


def test_serialize_answers_rejects_lone_surrogates():
    with pytest.raises(UnicodeEncodeError):
        serialize_answers({"q": "\ud800"})

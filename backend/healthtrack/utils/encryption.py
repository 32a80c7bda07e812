"""
Field-level encryption for profile PHI (name, email, medications).
AES-256-GCM; each value is stored as base64(nonce || ciphertext).
"""
import os
import base64
import hashlib
import hmac
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

NONCE_SIZE = 12


def _load_key() -> bytes:
    key_b64 = os.getenv('PHI_ENCRYPTION_KEY')
    if not key_b64:
        raise ValueError("PHI_ENCRYPTION_KEY environment variable not set")
    key = base64.b64decode(key_b64)
    if len(key) != 32:
        raise ValueError("PHI_ENCRYPTION_KEY must be 32 bytes (256 bits)")
    return key


class FieldCipher:
    """Encrypts and decrypts single text fields."""

    def __init__(self, key: bytes):
        self._aesgcm = AESGCM(key)

    def encrypt(self, plaintext: str) -> str:
        if not plaintext:
            return plaintext
        nonce = os.urandom(NONCE_SIZE)
        ciphertext = self._aesgcm.encrypt(nonce, plaintext.encode('utf-8'), None)
        return base64.b64encode(nonce + ciphertext).decode('utf-8')

    def decrypt(self, encrypted_b64: str) -> str:
        if not encrypted_b64:
            return encrypted_b64
        raw = base64.b64decode(encrypted_b64)
        plaintext = self._aesgcm.decrypt(raw[:NONCE_SIZE], raw[NONCE_SIZE:], None)
        return plaintext.decode('utf-8')


_cipher = None


def get_cipher() -> FieldCipher:
    """Lazily build the process-wide cipher from PHI_ENCRYPTION_KEY."""
    global _cipher
    if _cipher is None:
        _cipher = FieldCipher(_load_key())
    return _cipher


def encrypt_phi(value: str) -> str:
    return get_cipher().encrypt(value)


def decrypt_phi(value: str) -> str:
    return get_cipher().decrypt(value)


def hash_email(email: str) -> str:
    """HMAC-SHA256 of the normalized email, keyed with the PHI key, for lookups."""
    return hmac.new(_load_key(), email.strip().lower().encode('utf-8'), hashlib.sha256).hexdigest()

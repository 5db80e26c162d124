"""AES-256-CBC encryption compatible with ``openssl enc -aes-256-cbc`` (MD5 key derivation)."""

from __future__ import annotations

import base64
import binascii
import hashlib
import os

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

_BLOCK_SIZE = 16
_KEY_SIZE = 32
# OpenSSL output starts with this marker followed by 8 bytes of salt.
_SALT_HEADER = b"Salted__"


class OpenSSLError(ValueError):
    """Raised when data cannot be decrypted as OpenSSL AES-256-CBC output."""


def extract_key_and_iv(password: bytes, salt: bytes) -> tuple[bytes, bytes]:
    """Derive a 32-byte key and a 16-byte IV the way OpenSSL's EVP_BytesToKey does with MD5."""
    blocks: list[bytes] = []
    previous = b""
    for _ in range(3):
        previous = hashlib.md5(previous + password + salt).digest()
        blocks.append(previous)
    derived = b"".join(blocks)
    return derived[:_KEY_SIZE], derived[_KEY_SIZE:]


def _pkcs7_pad(data: bytes) -> bytes:
    # Data that already fills whole blocks is left as it is.
    remainder = len(data) % _BLOCK_SIZE
    if remainder == 0:
        return data
    pad_len = _BLOCK_SIZE - remainder
    return data + bytes([pad_len]) * pad_len


def _pkcs7_unpad(data: bytes) -> bytes:
    if len(data) % _BLOCK_SIZE != 0 or not data:
        raise OpenSSLError(f"invalid data len {len(data)}")
    pad_len = data[-1]
    if pad_len > _BLOCK_SIZE or pad_len == 0:
        raise OpenSSLError("invalid padding")
    if data[-pad_len:] != bytes([pad_len]) * pad_len:
        raise OpenSSLError("invalid padding")
    return data[:-pad_len]


def _cipher(key: bytes, iv: bytes) -> Cipher:
    return Cipher(algorithms.AES(key), modes.CBC(iv))


def encrypt(passphrase: bytes, plaintext: bytes) -> bytes:
    """Encrypt *plaintext* with a random salt, returning the OpenSSL ``Salted__`` format."""
    salt = os.urandom(8)
    padded = _pkcs7_pad(_SALT_HEADER + salt + plaintext)
    key, iv = extract_key_and_iv(passphrase, salt)
    encryptor = _cipher(key, iv).encryptor()
    body = encryptor.update(padded[_BLOCK_SIZE:]) + encryptor.finalize()
    return padded[:_BLOCK_SIZE] + body


def decrypt(passphrase: bytes, encrypted: bytes) -> bytes:
    """Decrypt data in the OpenSSL ``Salted__`` AES-256-CBC format."""
    if len(encrypted) < _BLOCK_SIZE:
        raise OpenSSLError("Cipher data Length less than aes block size")
    header = encrypted[:_BLOCK_SIZE]
    if header[:8] != _SALT_HEADER:
        raise OpenSSLError(
            "Does not appear to have been encrypted with OpenSSL, salt header missing."
        )
    key, iv = extract_key_and_iv(passphrase, header[8:])
    if len(encrypted) % _BLOCK_SIZE != 0:
        raise OpenSSLError(
            f"bad blocksize({len(encrypted)}), aes.BlockSize = {_BLOCK_SIZE}"
        )
    decryptor = _cipher(key, iv).decryptor()
    body = decryptor.update(encrypted[_BLOCK_SIZE:]) + decryptor.finalize()
    return _pkcs7_unpad(body)


def encrypt_base64(passphrase: bytes, plaintext: bytes) -> bytes:
    """Encrypt *plaintext* and return the result base64 encoded."""
    return base64.b64encode(encrypt(passphrase, plaintext))


def decrypt_base64(passphrase: bytes, encrypted_base64: bytes) -> bytes:
    """Decrypt base64 encoded OpenSSL AES-256-CBC data; line breaks are ignored."""
    cleaned = bytes(encrypted_base64).replace(b"\r", b"").replace(b"\n", b"")
    try:
        encrypted = base64.b64decode(cleaned, validate=True)
    except binascii.Error as exc:
        raise OpenSSLError(f"illegal base64 data: {exc}") from exc
    return decrypt(passphrase, encrypted)


def encrypt_string(passphrase: str, plaintext: str) -> str:
    """Encrypt the text *plaintext* and return base64 text."""
    return encrypt_base64(passphrase.encode(), plaintext.encode()).decode("ascii")


def decrypt_string(passphrase: str, encrypted_base64: str) -> str:
    """Decrypt base64 text produced by encrypt_string or ``openssl enc -a``."""
    return decrypt_base64(passphrase.encode(), encrypted_base64.encode()).decode()
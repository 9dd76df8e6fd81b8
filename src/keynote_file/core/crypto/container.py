"""Whole-file AES-256-CBC container for encrypted KeyNote files.

Layout on disk::

    #!GFKNE <major>.<minor>\\n   tag line, read by the sniffer
    [IV: 16 bytes][ciphertext]   no length prefix, no authentication tag

The key is PBKDF2-HMAC-SHA256 over the passphrase with the format's fixed
salt, so the same passphrase always yields the same key.
"""

from Crypto.Cipher import AES
from Crypto.Hash import SHA256
from Crypto.Protocol.KDF import PBKDF2
from Crypto.Random import get_random_bytes
from Crypto.Util.Padding import pad, unpad
from loguru import logger

from keynote_file.config import (
    CIPHER_NAME,
    KDF_ITERATIONS,
    KDF_SALT,
    KEY_SIZE,
    SNIFF_WINDOW,
)
from keynote_file.core.format.markers import (
    HEADER_PREFIX,
    TAG_ENCRYPTED,
    TAG_PLAIN,
    TAG_PLAIN_LEGACY,
)
from keynote_file.errors import DecryptionFailedError, PassphraseRequiredError
from keynote_file.models.note import FileVersion

IV_SIZE = AES.block_size


def derive_key(passphrase: str) -> bytes:
    """Derive the 32-byte AES key for a passphrase."""
    return PBKDF2(
        passphrase.encode("utf-8"),
        KDF_SALT,
        dkLen=KEY_SIZE,
        count=KDF_ITERATIONS,
        hmac_hash_module=SHA256,
    )


def _require(passphrase: str | None) -> str:
    if not passphrase:
        msg = "Passphrase required for encrypted file"
        raise PassphraseRequiredError(msg)
    return passphrase


def encrypt_payload(plaintext: bytes, passphrase: str | None, *, iv: bytes | None = None) -> bytes:
    """Encrypt plaintext and return IV + ciphertext.

    A fresh random IV is generated unless one is given.
    """
    key = derive_key(_require(passphrase))
    iv = iv if iv is not None else get_random_bytes(IV_SIZE)
    if len(iv) != IV_SIZE:
        msg = f"IV must be {IV_SIZE} bytes, got {len(iv)}"
        raise ValueError(msg)
    cipher = AES.new(key, AES.MODE_CBC, iv)
    return iv + cipher.encrypt(pad(plaintext, AES.block_size))


def decrypt_payload(data: bytes, passphrase: str | None) -> bytes:
    """Decrypt IV + ciphertext.

    Raises:
        PassphraseRequiredError: If passphrase is empty or None.
        DecryptionFailedError: On truncated data or bad padding (usually a wrong passphrase).
    """
    key = derive_key(_require(passphrase))
    ciphertext = data[IV_SIZE:]
    if len(data) < IV_SIZE or not ciphertext or len(ciphertext) % AES.block_size:
        msg = f"Decryption failed: encrypted payload is truncated ({len(data)} bytes)"
        raise DecryptionFailedError(msg, {"size": len(data)})

    cipher = AES.new(key, AES.MODE_CBC, data[:IV_SIZE])
    try:
        return unpad(cipher.decrypt(ciphertext), AES.block_size)
    except ValueError as e:
        msg = "Decryption failed: wrong passphrase or corrupted file"
        raise DecryptionFailedError(msg) from e


def encrypted_header(version: FileVersion) -> bytes:
    return f"{HEADER_PREFIX}{TAG_ENCRYPTED.decode('ascii')} {version}\n".encode("ascii")


def seal(plaintext: bytes, passphrase: str | None, version: FileVersion) -> bytes:
    """Build a complete encrypted file from a serialized plain KeyNote stream."""
    return encrypted_header(version) + encrypt_payload(plaintext, passphrase)


def unseal(data: bytes, passphrase: str | None) -> bytes:
    """Return the plain KeyNote stream inside a complete encrypted file.

    The decrypted stream must itself start with a plain KeyNote tag; anything
    else means the passphrase was wrong even if the padding happened to check out.
    """
    newline = data.find(b"\n")
    if newline < 0:
        msg = "Decryption failed: missing encrypted file header line"
        raise DecryptionFailedError(msg)
    plaintext = decrypt_payload(data[newline + 1 :], passphrase)

    head = plaintext[:SNIFF_WINDOW]
    if TAG_PLAIN not in head and TAG_PLAIN_LEGACY not in head:
        msg = "Decryption failed: wrong passphrase or corrupted file"
        raise DecryptionFailedError(msg)
    logger.debug("Decrypted {} bytes with {}", len(plaintext), CIPHER_NAME)
    return plaintext

"""
Token encryption service for Spotify refresh tokens at rest.

AES-256 in CTR mode with a random 16-byte IV per value. Ciphertexts are
stored as ``<ivHex>:<ciphertextHex>``. Values without a ``:`` predate
encryption and are returned unchanged by decrypt_token.
"""

import logging
import os
from typing import Optional

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

logger = logging.getLogger(__name__)

KEY_LENGTH = 32  # AES-256
IV_LENGTH = 16


class TokenEncryptionError(Exception):
    """Raised when token encryption or decryption fails."""

    pass


class TokenService:
    """Service for encrypting and decrypting Spotify refresh tokens."""

    _key: Optional[bytes] = None

    @classmethod
    def initialize(cls, encryption_key: str) -> None:
        """
        Install the symmetric key. Called once in create_app.

        Args:
            encryption_key: Exactly 32 bytes once UTF-8 encoded.

        Raises:
            TokenEncryptionError: If the key is missing or the wrong size.
        """
        if not encryption_key:
            raise TokenEncryptionError(
                "ENCRYPTION_KEY is required for token encryption"
            )

        key = encryption_key.encode("utf-8")
        if len(key) != KEY_LENGTH:
            raise TokenEncryptionError(
                f"ENCRYPTION_KEY must be exactly {KEY_LENGTH} bytes, "
                f"got {len(key)}"
            )
        cls._key = key
        logger.info("TokenService initialized successfully")

    @classmethod
    def _cipher(cls, iv: bytes) -> Cipher:
        if cls._key is None:
            raise TokenEncryptionError(
                "TokenService not initialized. Call initialize() first."
            )
        return Cipher(algorithms.AES(cls._key), modes.CTR(iv))

    @classmethod
    def encrypt_token(cls, plaintext_token: str) -> str:
        """
        Encrypt a refresh token for database storage.

        Returns:
            ``<ivHex>:<ciphertextHex>``

        Raises:
            TokenEncryptionError: If not initialized or the token is empty.
        """
        if not plaintext_token:
            raise TokenEncryptionError("Cannot encrypt empty token")

        iv = os.urandom(IV_LENGTH)
        encryptor = cls._cipher(iv).encryptor()
        ciphertext = (
            encryptor.update(plaintext_token.encode("utf-8"))
            + encryptor.finalize()
        )
        return f"{iv.hex()}:{ciphertext.hex()}"

    @classmethod
    def decrypt_token(cls, stored_token: str) -> str:
        """
        Decrypt a refresh token retrieved from the database.

        Raises:
            TokenEncryptionError: If the value is malformed.
        """
        if not stored_token:
            raise TokenEncryptionError("Cannot decrypt empty token")

        if ":" not in stored_token:
            # Legacy plaintext value
            return stored_token

        iv_hex, _, ciphertext_hex = stored_token.partition(":")
        try:
            iv = bytes.fromhex(iv_hex)
            ciphertext = bytes.fromhex(ciphertext_hex)
        except ValueError:
            logger.error("Token decryption failed: value is not hex encoded")
            raise TokenEncryptionError("Decryption failed: malformed token")
        if len(iv) != IV_LENGTH:
            raise TokenEncryptionError("Decryption failed: bad IV length")

        decryptor = cls._cipher(iv).decryptor()
        plaintext = decryptor.update(ciphertext) + decryptor.finalize()
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError:
            logger.error(
                "Token decryption failed: wrong key or corrupted value"
            )
            raise TokenEncryptionError(
                "Decryption failed: token is corrupted "
                "or ENCRYPTION_KEY changed"
            )

    @classmethod
    def is_initialized(cls) -> bool:
        """Check if the TokenService has been initialized."""
        return cls._key is not None

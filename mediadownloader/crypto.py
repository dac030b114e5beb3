"""Symmetric encryption of exported data with a key kept on disk."""

from __future__ import annotations

import os
import secrets
import struct
import sys
from pathlib import Path

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from mediadownloader.constants import (
    CRYPTO_KEY_NAME,
    DEFAULT_APPLICATION,
    DEFAULT_ORGANIZATION,
)

KEY_BYTES = 32
NONCE_BYTES = 12
TAG_BYTES = 16

_NULL_LENGTH = 0xFFFFFFFF
_LENGTH = struct.Struct(">I")


class CryptoError(Exception):
    """Raised when the key cannot be set up or data cannot be encrypted or decrypted."""


def default_data_dir() -> Path:
    """Per-user directory where the application keeps its data."""
    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))
    return base / DEFAULT_ORGANIZATION / DEFAULT_APPLICATION


def _read_byte_array(data: bytes, offset: int) -> tuple[bytes, int]:
    """Read one length-prefixed byte array; a short read yields empty bytes."""
    header = data[offset : offset + _LENGTH.size]
    if len(header) < _LENGTH.size:
        return b"", len(data)
    (length,) = _LENGTH.unpack(header)
    offset += _LENGTH.size
    if length == _NULL_LENGTH:
        return b"", offset
    chunk = data[offset : offset + length]
    if len(chunk) < length:
        return b"", len(data)
    return chunk, offset + length


def _write_byte_array(value: bytes) -> bytes:
    return _LENGTH.pack(len(value)) + value


class CryptoManager:
    """AES-256-GCM with a key and nonce stored in the data directory."""

    def __init__(self, directory: "str | os.PathLike[str] | None" = None) -> None:
        self.directory = Path(directory) if directory is not None else default_data_dir()
        self.key_path = self.directory / CRYPTO_KEY_NAME
        self._key = b""
        self._nonce = b""
        self._ready = False

    @property
    def ready(self) -> bool:
        return self._ready

    def init(self) -> None:
        """Load the key file, or create and save a fresh key if it is missing or invalid."""
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError:
            pass
        if not self._load_key():
            self._key = secrets.token_bytes(KEY_BYTES)
            self._nonce = secrets.token_bytes(NONCE_BYTES)
            try:
                self.key_path.write_bytes(
                    _write_byte_array(self._key) + _write_byte_array(self._nonce)
                )
            except OSError as exc:
                raise CryptoError(f"cannot save key to {self.key_path}") from exc
        self._ready = True

    def _load_key(self) -> bool:
        try:
            data = self.key_path.read_bytes()
        except OSError:
            return False
        self._key, offset = _read_byte_array(data, 0)
        self._nonce, _ = _read_byte_array(data, offset)
        return len(self._key) == KEY_BYTES and len(self._nonce) == NONCE_BYTES

    def _cipher(self) -> AESGCM:
        if not self._ready:
            raise CryptoError("crypto manager is not initialised")
        return AESGCM(self._key)

    def encrypt(self, plain: bytes) -> bytes:
        """Encrypt plain; the result is the ciphertext followed by the tag."""
        return self._cipher().encrypt(self._nonce, bytes(plain), None)

    def decrypt(self, cipher: bytes) -> bytes:
        """Decrypt and authenticate data produced by encrypt."""
        aes = self._cipher()
        try:
            return aes.decrypt(self._nonce, bytes(cipher), None)
        except (InvalidTag, ValueError) as exc:
            raise CryptoError("decryption failed") from exc
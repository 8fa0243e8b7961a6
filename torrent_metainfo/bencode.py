"""Generic bencode tree access using bencodepy."""

import logging
from typing import Any

import bencodepy

logger = logging.getLogger(__name__)

TEXT_ENCODING = "utf-8"


class BencodeError(Exception):
    pass


class TorrentDecodeError(BencodeError):
    """The input is not a well-formed bencoded dictionary."""


class TorrentShapeError(BencodeError, ValueError):
    """A required key is missing or a key holds a value of the wrong type."""

    def __init__(self, key: str, message: str):
        super().__init__(f"{key}: {message}")
        self.key = key


class MissingInfoDictError(BencodeError):
    pass


def parse(raw: bytes) -> dict:
    """Decode raw bytes into the top-level dictionary."""
    try:
        root = bencodepy.decode(raw)
    except Exception as e:
        raise TorrentDecodeError(f"Failed to decode torrent: {e}") from e
    if not isinstance(root, dict):
        raise TorrentDecodeError("Torrent root must be a dict")
    return root


def serialize(value: Any) -> bytes:
    return bencodepy.encode(value)


def _kind(value: Any) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, (bytes, bytearray)):
        return "byte string"
    if isinstance(value, list):
        return "list"
    if isinstance(value, dict):
        return "dict"
    return type(value).__name__


def to_text(value: bytes, key: str) -> str:
    try:
        return bytes(value).decode(TEXT_ENCODING)
    except UnicodeDecodeError:
        logger.warning("Key %r is not valid %s, replacing undecodable bytes", key, TEXT_ENCODING)
        return bytes(value).decode(TEXT_ENCODING, errors="replace")


def _lookup(dct: dict, key: str, prefix: str) -> tuple[Any, str]:
    path = f"{prefix}.{key}" if prefix else key
    return dct.get(key.encode("ascii")), path


def expect_int(dct: dict, key: str, prefix: str = "", *, required: bool = True, unsigned: bool = False) -> int | None:
    v, path = _lookup(dct, key, prefix)
    if v is None:
        if required:
            raise TorrentShapeError(path, "missing required integer")
        return None
    if not isinstance(v, int) or isinstance(v, bool):
        raise TorrentShapeError(path, f"expected integer, got {_kind(v)}")
    if unsigned and v < 0:
        raise TorrentShapeError(path, f"expected non-negative integer, got {v}")
    return v


def expect_bytes(dct: dict, key: str, prefix: str = "", *, required: bool = True) -> bytes | None:
    v, path = _lookup(dct, key, prefix)
    if v is None:
        if required:
            raise TorrentShapeError(path, "missing required byte string")
        return None
    if not isinstance(v, (bytes, bytearray)):
        raise TorrentShapeError(path, f"expected byte string, got {_kind(v)}")
    return bytes(v)


def expect_str(dct: dict, key: str, prefix: str = "", *, required: bool = True) -> str | None:
    v = expect_bytes(dct, key, prefix, required=required)
    if v is None:
        return None
    return to_text(v, f"{prefix}.{key}" if prefix else key)


def expect_list(dct: dict, key: str, prefix: str = "", *, required: bool = True) -> list | None:
    v, path = _lookup(dct, key, prefix)
    if v is None:
        if required:
            raise TorrentShapeError(path, "missing required list")
        return None
    if not isinstance(v, list):
        raise TorrentShapeError(path, f"expected list, got {_kind(v)}")
    return v


def expect_dict(dct: dict, key: str, prefix: str = "", *, required: bool = True) -> dict | None:
    v, path = _lookup(dct, key, prefix)
    if v is None:
        if required:
            raise TorrentShapeError(path, "missing required dict")
        return None
    if not isinstance(v, dict):
        raise TorrentShapeError(path, f"expected dict, got {_kind(v)}")
    return v


def as_text_item(item: Any, path: str) -> str:
    """Narrow a list element to text."""
    if not isinstance(item, (bytes, bytearray)):
        raise TorrentShapeError(path, f"expected byte string, got {_kind(item)}")
    return to_text(item, path)

"""Typed .torrent metainfo: decoding, encoding and info-hash derivation."""

import hashlib
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, BinaryIO

from torrent_metainfo.bencode import (
    TEXT_ENCODING,
    MissingInfoDictError,
    TorrentShapeError,
    as_text_item,
    expect_bytes,
    expect_dict,
    expect_int,
    expect_list,
    expect_str,
    parse,
    serialize,
)
from torrent_metainfo.paths import PATH_SEPARATOR, flatten_path, partition_path
from torrent_metainfo.pieces import decode_pieces, encode_pieces

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class File:
    length: int
    path: str  # relative, '/'-separated


@dataclass
class TorrentFile:
    name: str = ""
    announce_url: str = ""
    announce_list: list[str] = field(default_factory=list)
    piece_length: int = 0
    pieces: list[bytes] = field(default_factory=list)  # SHA-1 hashes (20 bytes each)
    files: list[File] = field(default_factory=list)
    private: bool = False
    comment: str = ""
    created_by: str = ""
    creation_date: datetime | None = None  # None means unset
    encoding: str = ""

    # info dict exactly as decoded, used for the info-hash
    _info: dict | None = field(default=None, init=False, repr=False, compare=False)

    @property
    def is_single_file(self) -> bool:
        """True when the content is one file directly under the root."""
        return len(self.files) == 1 and PATH_SEPARATOR not in self.files[0].path

    @property
    def num_pieces(self) -> int:
        return len(self.pieces)

    def total_size(self) -> int:
        """Sum of all file lengths in bytes."""
        return sum(f.length for f in self.files)

    def encode(self) -> bytes:
        return encode_torrent_file(self)

    def info_hash(self, *, rebuild: bool = False) -> bytes:
        """Return the SHA-1 digest of the bencoded info dictionary.

        The digest is taken over the info dictionary retained from decoding, so
        it matches what any other client derives from the same file. A torrent
        built in code has no such dictionary: pass ``rebuild=True`` to hash the
        one the encoder would produce, otherwise MissingInfoDictError is raised.
        """
        if self._info is not None:
            info = self._info
        elif rebuild:
            info = build_info_dict(self)
        else:
            raise MissingInfoDictError("Torrent was not decoded from bytes; no info dict to hash (use rebuild=True)")
        return hashlib.sha1(serialize(info)).digest()  # nosec B324

    def info_hash_hex(self, *, rebuild: bool = False) -> str:
        return self.info_hash(rebuild=rebuild).hex()


def total_size(torrent: TorrentFile) -> int:
    return torrent.total_size()


def info_hash(torrent: TorrentFile, *, rebuild: bool = False) -> bytes:
    return torrent.info_hash(rebuild=rebuild)


def _decode_announce_list(items: list) -> list[str]:
    """Flatten announce-list entries; BEP 12 tiers are lists of URLs."""
    urls: list[str] = []
    for i, item in enumerate(items):
        if isinstance(item, list):
            urls.extend(as_text_item(url, f"announce-list[{i}][{j}]") for j, url in enumerate(item))
        else:
            urls.append(as_text_item(item, f"announce-list[{i}]"))
    return urls


def _decode_files(entries: list) -> list[File]:
    files: list[File] = []
    for i, fe in enumerate(entries):
        prefix = f"info.files[{i}]"
        if not isinstance(fe, dict):
            raise TorrentShapeError(prefix, "expected dict")
        length = expect_int(fe, "length", prefix, unsigned=True)
        parts = expect_list(fe, "path", prefix)
        segments = [as_text_item(part, f"{prefix}.path[{j}]") for j, part in enumerate(parts)]
        files.append(File(length=length, path=flatten_path(segments)))
    return files


def _decode_creation_date(root: dict) -> datetime | None:
    ts = expect_int(root, "creation date", required=False)
    if ts is None:
        return None
    try:
        return datetime.fromtimestamp(ts, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise TorrentShapeError("creation date", f"timestamp {ts} out of range") from e


def decode_torrent_file(data: bytes | bytearray | BinaryIO) -> TorrentFile:
    """Decode .torrent bytes, or a binary stream, into a TorrentFile.

    Raises TorrentDecodeError for malformed bencode and TorrentShapeError when a
    required key is missing or any known key has an unexpected type.
    """
    raw = data.read() if hasattr(data, "read") else bytes(data)
    root = parse(raw)

    announce_url = expect_str(root, "announce")
    info = expect_dict(root, "info")

    torrent = TorrentFile(
        announce_url=announce_url,
        piece_length=expect_int(info, "piece length", "info", unsigned=True),
        pieces=decode_pieces(expect_bytes(info, "pieces", "info")),
        name=expect_str(info, "name", "info", required=False) or "",
        private=expect_int(info, "private", "info", required=False) == 1,
        comment=expect_str(root, "comment", required=False) or "",
        created_by=expect_str(root, "created by", required=False) or "",
        creation_date=_decode_creation_date(root),
        encoding=expect_str(root, "encoding", required=False) or "",
    )

    announce_list = expect_list(root, "announce-list", required=False)
    if announce_list is not None:
        torrent.announce_list = _decode_announce_list(announce_list)

    entries = expect_list(info, "files", "info", required=False)
    if entries is not None:
        torrent.files = _decode_files(entries)
    else:
        length = expect_int(info, "length", "info", unsigned=True)
        torrent.files = [File(length=length, path=torrent.name)]

    torrent._info = info
    logger.debug(
        "Decoded torrent %r: %d file(s), %d piece(s) of %d bytes",
        torrent.name,
        len(torrent.files),
        torrent.num_pieces,
        torrent.piece_length,
    )
    return torrent


def _text(value: str) -> bytes:
    return value.encode(TEXT_ENCODING)


def build_info_dict(torrent: TorrentFile) -> dict[bytes, Any]:
    """Build the info dictionary for a torrent from its typed fields."""
    info: dict[bytes, Any] = {
        b"piece length": torrent.piece_length,
        b"pieces": encode_pieces(torrent.pieces),
    }
    if torrent.private:
        info[b"private"] = 1
    if torrent.name:
        info[b"name"] = _text(torrent.name)

    if torrent.is_single_file:
        info[b"name"] = _text(torrent.files[0].path)
        info[b"length"] = torrent.files[0].length
    else:
        info[b"files"] = [{b"length": f.length, b"path": [_text(p) for p in partition_path(f.path)]} for f in torrent.files]
    return info


def encode_torrent_file(torrent: TorrentFile) -> bytes:
    """Serialize a TorrentFile to bencoded .torrent bytes."""
    root: dict[bytes, Any] = {b"announce": _text(torrent.announce_url)}
    if torrent.announce_list:
        root[b"announce-list"] = [_text(url) for url in torrent.announce_list]
    if torrent.creation_date is not None:
        ts = int(torrent.creation_date.timestamp())
        if ts > 0:
            root[b"creation date"] = ts
    if torrent.created_by:
        root[b"created by"] = _text(torrent.created_by)
    if torrent.comment:
        root[b"comment"] = _text(torrent.comment)
    if torrent.encoding:
        root[b"encoding"] = _text(torrent.encoding)
    root[b"info"] = build_info_dict(torrent)

    raw = serialize(root)
    logger.debug("Encoded torrent %r: %d bytes", torrent.name, len(raw))
    return raw

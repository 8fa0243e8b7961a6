"""Conversion between the concatenated `pieces` blob and per-piece SHA-1 hashes."""

from collections.abc import Iterable

from torrent_metainfo.bencode import TorrentShapeError

# SHA-1 digest size
PIECE_SIZE = 20


class PieceLengthError(TorrentShapeError):
    pass


def decode_pieces(blob: bytes, key: str = "info.pieces") -> list[bytes]:
    """Split a pieces blob into 20-byte hashes, preserving order."""
    if len(blob) % PIECE_SIZE != 0:
        raise PieceLengthError(key, f"length {len(blob)} is not a multiple of {PIECE_SIZE}")
    return [bytes(blob[i : i + PIECE_SIZE]) for i in range(0, len(blob), PIECE_SIZE)]


def encode_pieces(pieces: Iterable[bytes]) -> bytes:
    """Concatenate piece hashes back into a single blob."""
    out = bytearray()
    for i, piece in enumerate(pieces):
        if len(piece) != PIECE_SIZE:
            raise PieceLengthError(f"pieces[{i}]", f"expected {PIECE_SIZE} bytes, got {len(piece)}")
        out += piece
    return bytes(out)

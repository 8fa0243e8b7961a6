"""Relative file paths as strings ("dir/file.txt") and as wire segment lists."""

from collections.abc import Iterable

from torrent_metainfo.bencode import TEXT_ENCODING

PATH_SEPARATOR = "/"


def flatten_path(segments: Iterable[str | bytes]) -> str:
    """Join path segments with '/' and drop any trailing separator."""
    parts = [s.decode(TEXT_ENCODING, errors="replace") if isinstance(s, (bytes, bytearray)) else s for s in segments]
    return PATH_SEPARATOR.join(parts).rstrip(PATH_SEPARATOR)


def partition_path(path: str) -> list[str]:
    # Empty segments from leading, trailing or doubled separators are kept
    return path.split(PATH_SEPARATOR)

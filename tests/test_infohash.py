"""Test info-hash derivation."""

import hashlib

import bencodepy
import pytest

from torrent_metainfo.bencode import MissingInfoDictError
from torrent_metainfo.torrentfile import File, TorrentFile, decode_torrent_file, info_hash, total_size

INFO = {
    b"name": b"test.txt",
    b"piece length": 16384,
    b"pieces": b"a" * 20,
    b"length": 1024,
}


def _raw(top: dict | None = None) -> bytes:
    return bencodepy.encode({b"announce": b"http://tracker.example/announce", b"info": INFO, **(top or {})})


def test_info_hash_is_sha1_of_info_dict():
    """Test the hash is SHA-1 over the bencoded info dict."""
    t = decode_torrent_file(_raw())
    expected = hashlib.sha1(bencodepy.encode(INFO)).digest()
    assert t.info_hash() == expected
    assert len(t.info_hash()) == 20
    assert info_hash(t) == expected
    assert t.info_hash_hex() == expected.hex()


def test_info_hash_stable_across_decodes():
    """Test decoding the same bytes twice gives the same hash."""
    raw = _raw()
    assert decode_torrent_file(raw).info_hash() == decode_torrent_file(raw).info_hash()


def test_info_hash_ignores_top_level_metadata():
    """Test streams differing only outside info hash the same."""
    a = decode_torrent_file(_raw({b"comment": b"first"}))
    b = decode_torrent_file(_raw({b"comment": b"second", b"created by": b"other"}))
    assert a.info_hash() == b.info_hash()


def test_info_hash_uses_retained_dict_not_fields():
    """Test unknown info keys are kept and field edits do not change the hash."""
    info = {**INFO, b"source": b"tracker-x"}
    raw = bencodepy.encode({b"announce": b"http://t/a", b"info": info})
    t = decode_torrent_file(raw)
    expected = hashlib.sha1(bencodepy.encode(info)).digest()

    t.name = "renamed"
    t.private = True
    assert t.info_hash() == expected
    assert t.info_hash(rebuild=True) == expected


def test_info_hash_without_source_document():
    """Test a torrent built in code refuses to hash unless asked to rebuild."""
    t = TorrentFile(announce_url="http://t/a", piece_length=16384, pieces=[b"a" * 20], files=[File(length=1024, path="test.txt")])
    with pytest.raises(MissingInfoDictError):
        t.info_hash()


def test_info_hash_rebuild_matches_encoded():
    """Test a rebuilt hash equals the hash of the same torrent after encode and decode."""
    t = TorrentFile(announce_url="http://t/a", piece_length=16384, pieces=[b"a" * 20], files=[File(length=1024, path="test.txt")])
    assert t.info_hash(rebuild=True) == decode_torrent_file(t.encode()).info_hash()
    assert t.info_hash(rebuild=True) == hashlib.sha1(bencodepy.encode(INFO)).digest()


def test_total_size():
    """Test total size sums every file length."""
    t = TorrentFile(files=[File(length=10, path="a"), File(length=32, path="b/c")])
    assert total_size(t) == 42
    assert TorrentFile().total_size() == 0

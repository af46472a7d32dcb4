import logging

import pytest

lt = pytest.importorskip("libtorrent")

from btcore.bencode import Decoder, Dictionary, Integer, List, Text, decode  # noqa: E402
from .utils import bencode, create_payload, create_torrent_file  # noqa: E402

logging.basicConfig(format="%(levelname)s:%(name)s:%(message)s", level=logging.DEBUG)
logger = logging.getLogger()

TRACKER_URL = "http://localhost:8080/announce"


@pytest.fixture
def workspace(tmp_path):
    """Temporary workspace to write files to, removed by pytest"""

    logger.debug(f"Test Workspace: {tmp_path}")

    return str(tmp_path)


class TestReferenceEncoding:
    """Decode what libtorrent encodes."""

    @pytest.mark.parametrize(
        "obj,expected",
        [
            (b"spam", Text("spam")),
            (31337, Integer(31337)),
            (-(2**40), Integer(-(2**40))),
            ([b"spam", b"eggs"], List([Text("spam"), Text("eggs")])),
            (
                {b"cow": b"moo", b"spam": b"eggs"},
                Dictionary({"cow": Text("moo"), "spam": Text("eggs")}),
            ),
        ],
    )
    def test_decode_reference_encoding(self, obj, expected):
        assert decode(bencode(obj)) == expected

    def test_decode_nested_reference_encoding(self):
        obj = {
            b"files": [
                {b"length": 12345, b"path": [b"dir", b"file.txt"]},
                {b"length": 67890, b"path": [b"another.txt"]},
            ],
            b"name": b"test torrent",
            b"piece length": 262144,
            b"pieces": b"\x00\xff" * 10,
        }
        value = decode(bencode(obj))

        assert value["files"][0] == Dictionary(
            {"length": Integer(12345), "path": List([Text("dir"), Text("file.txt")])}
        )
        assert value["piece length"] == Integer(262144)
        assert value["pieces"].raw == b"\x00\xff" * 10


class TestTorrentFile:
    """Decode a metainfo file generated by libtorrent."""

    def test_decode_torrent_file(self, workspace):
        payload_file = create_payload(workspace, 64 * 2**10)
        torrent_file = create_torrent_file(payload_file, TRACKER_URL, workspace)

        metainfo = Decoder.from_file(torrent_file).decode()
        info = metainfo["info"]
        reference = lt.torrent_info(torrent_file)

        assert metainfo["announce"] == Text(TRACKER_URL)
        assert metainfo["created by"] == Text("test-setup")
        assert info["name"] == Text("payload.dat")
        assert info["length"] == Integer(64 * 2**10)
        assert info["piece length"] == Integer(reference.piece_length())
        assert len(info["pieces"].raw) == 20 * reference.num_pieces()

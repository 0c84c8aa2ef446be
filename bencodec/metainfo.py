"""
Module for handling .torrent files and their metadata.
"""
import os
import hashlib
import logging
from dataclasses import dataclass
from typing import List, Optional

from .decoder import Decoder, decode
from .encoder import encode
from .mapping import bkey, from_value
from .value import Value

logger = logging.getLogger(__name__)

# Length of one SHA-1 piece hash
PIECE_HASH_LENGTH = 20


@dataclass
class FileInfo:
    """Represents a file within a multi-file torrent."""
    length: int
    path: List[str]
    md5sum: Optional[str] = None


@dataclass
class TorrentInfo:
    """Represents the 'info' dictionary in a .torrent file."""
    name: str
    piece_length: int = bkey('piece length')
    pieces: bytes  # Concatenated 20-byte SHA-1 hashes
    private: Optional[bool] = None
    files: Optional[List[FileInfo]] = None  # For multi-file torrents
    length: Optional[int] = None  # For single-file torrents
    md5sum: Optional[str] = None  # For single-file torrents

    def piece_hashes(self) -> List[bytes]:
        """Split the 'pieces' string into its 20-byte SHA-1 hashes."""
        if len(self.pieces) % PIECE_HASH_LENGTH != 0:
            raise ValueError("Invalid piece hash length")
        return [self.pieces[i:i + PIECE_HASH_LENGTH]
                for i in range(0, len(self.pieces), PIECE_HASH_LENGTH)]


@dataclass
class Metainfo:
    """Represents the top-level dictionary of a .torrent file."""
    info: TorrentInfo
    announce: Optional[str] = None
    announce_list: Optional[List[List[str]]] = bkey('announce-list', default=None)
    creation_date: Optional[int] = bkey('creation date', default=None)
    comment: Optional[str] = None
    created_by: Optional[str] = bkey('created by', default=None)
    encoding: Optional[str] = None


class Torrent:
    """Represents a .torrent file and its metadata."""

    def __init__(self, torrent_path: Optional[str] = None, data: Optional[bytes] = None):
        """
        Initialize a Torrent object from a .torrent file or its contents.

        Args:
            torrent_path: Path to the .torrent file
            data: Raw .torrent contents, used instead of reading a file
        """
        self.torrent_path = os.path.abspath(torrent_path) if torrent_path else None

        if data is None:
            if self.torrent_path is None:
                raise ValueError("Either torrent_path or data is required")
            data = self._read_torrent_file()

        self._load(data)
        logger.info(f"Loaded torrent {self.info.name} ({self.info_hash.hex()})")

    @classmethod
    def from_bytes(cls, data: bytes) -> 'Torrent':
        """Create a Torrent from the raw contents of a .torrent file."""
        return cls(data=data)

    def _read_torrent_file(self) -> bytes:
        if not os.path.exists(self.torrent_path):
            raise FileNotFoundError(f"Torrent file not found: {self.torrent_path}")

        with open(self.torrent_path, 'rb') as f:
            return f.read()

    def _load(self, data: bytes) -> None:
        """Decode the file and map it onto the metainfo records."""
        self.raw: Value = decode(data)
        self.metainfo: Metainfo = from_value(self.raw, Metainfo)

        # The hash covers the info dictionary exactly as stored in the file,
        # including keys the records above do not model
        start, end = Decoder(data).value_span('info')
        self.info_hash: bytes = hashlib.sha1(data[start:end]).digest()

    @property
    def info(self) -> TorrentInfo:
        return self.metainfo.info

    @property
    def name(self) -> str:
        return self.metainfo.info.name

    def get_trackers(self) -> List[str]:
        """Returns a list of all tracker URLs."""
        if self.metainfo.announce_list:
            return [url for tier in self.metainfo.announce_list for url in tier]
        if self.metainfo.announce:
            return [self.metainfo.announce]
        return []

    def get_total_size(self) -> int:
        """Get the total size of all files in the torrent in bytes."""
        if self.info.files:
            return sum(f.length for f in self.info.files)
        return self.info.length or 0

    def get_file_list(self) -> List[str]:
        """Get a list of all files in the torrent."""
        if self.info.files:
            return [os.path.join(*f.path) for f in self.info.files]
        return [self.info.name]

    def to_bytes(self) -> bytes:
        """Encode the torrent back to bencode, keeping unmodelled keys."""
        return encode(self.raw)

    def __str__(self) -> str:
        """String representation of the torrent."""
        return (f"Torrent: {self.info.name}\n"
                f"Size: {self.get_total_size() / (1024*1024):.2f} MB\n"
                f"Files: {len(self.get_file_list())}\n"
                f"Pieces: {len(self.info.piece_hashes())} "
                f"(Length: {self.info.piece_length})\n"
                f"Info Hash: {self.info_hash.hex()}")


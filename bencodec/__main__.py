"""
Main entry point for the bencode inspector.

Usage:
    python -m bencodec show FILE    print the decoded value
    python -m bencodec info FILE    print a torrent summary and its info-hash
    python -m bencodec check FILE   report whether FILE is canonical bencode
"""
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

from . import config
from .decoder import decode
from .encoder import encode
from .errors import BencodeError, UnsortedKeys
from .metainfo import Torrent

logger = logging.getLogger(__name__)

USAGE = "usage: python -m bencodec {show,info,check} FILE"


def error_quit(error: str) -> int:
    """Write an error to stderr and return the failure status."""
    sys.stderr.write("Error: " + error + "\n")
    return 1


def _read(path: str) -> bytes:
    with open(path, 'rb') as f:
        return f.read()


def show(path: str) -> int:
    print(decode(_read(path)))
    return 0


def info(path: str) -> int:
    torrent = Torrent(path)
    print(torrent)
    trackers = torrent.get_trackers()
    if trackers:
        print("Trackers:")
        for url in trackers:
            print(f"  {url}")
    return 0


def check(path: str) -> int:
    data = _read(path)
    try:
        value = decode(data, strict=True)
    except UnsortedKeys as e:
        print(f"{path}: not canonical - {e}")
        return 1
    if encode(value) != data:
        print(f"{path}: not canonical")
        return 1
    print(f"{path}: canonical")
    return 0


COMMANDS = {
    'show': show,
    'info': info,
    'check': check,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 2 or args[0] not in COMMANDS:
        sys.stderr.write(USAGE + "\n")
        return 2

    # Load environment variables from .env file
    load_dotenv()
    config.load()
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

    command, path = args
    logger.debug(f"Running {command} on {path}")
    try:
        return COMMANDS[command](path)
    except OSError as e:
        return error_quit(f"Could not open {path} - {e}")
    except BencodeError as e:
        return error_quit(f"Could not decode {path} - {e}")
    except ValueError as e:
        return error_quit(f"Invalid torrent {path} - {e}")


if __name__ == '__main__':
    sys.exit(main())

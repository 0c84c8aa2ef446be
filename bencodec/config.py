"""
Configuration settings for the bencode codec.
Reads configuration from the environment with fallback to defaults.

Importing the library only consults the process environment. The command
line entry point also loads a ``.env`` file and then calls :func:`load`.
"""
import os


def load() -> None:
    """(Re)read every setting from the environment."""
    global STRICT_KEY_ORDER, MAX_DEPTH, DEBUG, LOG_LEVEL

    # ===== Decoder Settings =====
    # Reject dictionaries whose keys are not already in canonical order
    STRICT_KEY_ORDER = os.getenv('BENCODE_STRICT', 'False').lower() in ('true', '1', 't')
    # Maximum number of nested lists/dictionaries accepted on decode
    MAX_DEPTH = int(os.getenv('BENCODE_MAX_DEPTH', '256'))

    # ===== Application Settings =====
    DEBUG = os.getenv('DEBUG', 'False').lower() in ('true', '1', 't')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO' if not DEBUG else 'DEBUG')


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

load()

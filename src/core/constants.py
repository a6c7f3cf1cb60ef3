"""Core constants used across unpacker modules.

This module centralizes bundle format and layout constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_INPUT_DIR = Path("bundles")
DEFAULT_OUTPUT_DIR = Path("output")
DEFAULT_GATEWAY_URL = "https://arweave.net"
DEFAULT_FETCH_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_WORKERS = 4
DEFAULT_DATA_APP_PATTERN = "^ArDrive"
HOUSEKEEPING_ENTRIES = (".gitkeep",)
BUNDLE_ID_PATTERN = r"^[A-Za-z0-9_-]{43}$"
TAGS_FILE_SUFFIX = ".TAGS.json"
PARTIAL_DOWNLOAD_SUFFIX = ".part"
METADATA_TAG_NAME = "ArFS"
APP_NAME_TAG_NAME = "App-Name"
CIPHER_TAG_NAME = "Cipher"
CIPHER_IV_TAG_NAME = "Cipher-IV"
DATA_TX_ID_FIELD = "dataTxId"
BUNDLE_COUNT_BYTES = 32
BUNDLE_ENTRY_SIZE_BYTES = 32
BUNDLE_ENTRY_ID_BYTES = 32
SIGNATURE_TYPE_BYTES = 2
TARGET_BYTES = 32
ANCHOR_BYTES = 32
TAG_COUNT_BYTES = 8
TAG_LENGTH_BYTES = 8
MAX_TAG_COUNT = 128
MAX_TAG_NAME_BYTES = 1024
MAX_TAG_VALUE_BYTES = 3072
READ_CHUNK_BYTES = 1024 * 1024

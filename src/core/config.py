"""Runtime configuration model for the bundle unpacker.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
import re
from pathlib import Path

from core.constants import (
    DEFAULT_DATA_APP_PATTERN,
    DEFAULT_FETCH_TIMEOUT_SECONDS,
    DEFAULT_GATEWAY_URL,
    DEFAULT_INPUT_DIR,
    DEFAULT_MAX_WORKERS,
    DEFAULT_OUTPUT_DIR,
)
from core.errors import UnpackConfigError

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass(frozen=True)
class UnpackConfig:
    """Validated runtime configuration.

    Attributes:
        input_dir: Directory holding bundle files to unpack.
        output_dir: Root directory for per-bundle output folders.
        gateway_url: Base URL used to fetch bundles by id.
        fetch_timeout_seconds: HTTP timeout for gateway fetches.
        max_workers: Number of bundles unpacked in parallel.
        verify_signatures: Whether bundle items are signature-checked.
        data_app_pattern: Regex matched against App-Name to detect data items.
        s3_region: Optional default AWS region for output export.
        s3_profile: Optional AWS profile for boto3 session initialization.
    """

    input_dir: Path
    output_dir: Path
    gateway_url: str
    fetch_timeout_seconds: float
    max_workers: int
    verify_signatures: bool
    data_app_pattern: str
    s3_region: str | None
    s3_profile: str | None

    @classmethod
    def from_env(cls) -> "UnpackConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            UnpackConfigError: If environment values are invalid.
        """
        input_dir_value = os.getenv("UNPACK_INPUT_DIR", str(DEFAULT_INPUT_DIR))
        output_dir_value = os.getenv("UNPACK_OUTPUT_DIR", str(DEFAULT_OUTPUT_DIR))
        gateway_url = os.getenv("UNPACK_GATEWAY_URL", DEFAULT_GATEWAY_URL).rstrip("/")
        fetch_timeout = _parse_fetch_timeout(
            os.getenv("UNPACK_FETCH_TIMEOUT", str(DEFAULT_FETCH_TIMEOUT_SECONDS))
        )
        max_workers = _parse_max_workers(os.getenv("UNPACK_MAX_WORKERS", str(DEFAULT_MAX_WORKERS)))
        verify_signatures = _parse_bool(
            "UNPACK_VERIFY_SIGNATURES", os.getenv("UNPACK_VERIFY_SIGNATURES", "true")
        )
        data_app_pattern = _parse_pattern(
            os.getenv("UNPACK_DATA_APP_PATTERN", DEFAULT_DATA_APP_PATTERN)
        )
        return cls(
            input_dir=Path(input_dir_value).expanduser().resolve(),
            output_dir=Path(output_dir_value).expanduser().resolve(),
            gateway_url=gateway_url,
            fetch_timeout_seconds=fetch_timeout,
            max_workers=max_workers,
            verify_signatures=verify_signatures,
            data_app_pattern=data_app_pattern,
            s3_region=os.getenv("UNPACK_S3_REGION"),
            s3_profile=os.getenv("UNPACK_S3_PROFILE"),
        )


def _parse_fetch_timeout(raw_value: str) -> float:
    """Parse the gateway fetch timeout value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Positive timeout in seconds.

    Raises:
        UnpackConfigError: If value is not a positive number.
    """
    try:
        timeout = float(raw_value)
    except ValueError as error:
        raise UnpackConfigError(
            "Invalid UNPACK_FETCH_TIMEOUT value: "
            f"expected number, got '{raw_value}'. "
            "Set UNPACK_FETCH_TIMEOUT to a positive number of seconds."
        ) from error
    if timeout <= 0:
        raise UnpackConfigError(
            f"Invalid UNPACK_FETCH_TIMEOUT value: expected > 0, got {timeout}. "
            "Set UNPACK_FETCH_TIMEOUT to a positive number of seconds."
        )
    return timeout


def _parse_max_workers(raw_value: str) -> int:
    """Parse the parallel bundle worker count.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Worker count of at least one.

    Raises:
        UnpackConfigError: If value is not a positive integer.
    """
    try:
        workers = int(raw_value)
    except ValueError as error:
        raise UnpackConfigError(
            "Invalid UNPACK_MAX_WORKERS value: "
            f"expected integer, got '{raw_value}'. "
            "Set UNPACK_MAX_WORKERS to a numeric value."
        ) from error
    if workers < 1:
        raise UnpackConfigError(
            f"Invalid UNPACK_MAX_WORKERS value: expected >= 1, got {workers}. "
            "Set UNPACK_MAX_WORKERS to at least 1."
        )
    return workers


def _parse_bool(variable_name: str, raw_value: str) -> bool:
    """Parse a boolean flag from environment text."""
    normalized = raw_value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise UnpackConfigError(
        f"Invalid {variable_name} value: expected true/false, got '{raw_value}'. "
        f"Set {variable_name} to one of {_TRUE_VALUES + _FALSE_VALUES}."
    )


def _parse_pattern(raw_value: str) -> str:
    """Validate the data item App-Name regex."""
    try:
        re.compile(raw_value)
    except re.error as error:
        raise UnpackConfigError(
            f"Invalid UNPACK_DATA_APP_PATTERN value '{raw_value}': {error}. "
            "Set UNPACK_DATA_APP_PATTERN to a valid regular expression."
        ) from error
    return raw_value

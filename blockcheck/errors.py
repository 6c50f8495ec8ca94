"""
errors.py - Error taxonomy for blockcheck

Every error raised by the pipeline aborts the run and is reported once by
``check.main()``, which turns it into the process exit code below.
"""
from __future__ import annotations

from adblock import DeserializationError

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_NOT_FOUND = 3
EXIT_NETWORK = 4
EXIT_FILESYSTEM = 5
EXIT_DESERIALIZATION = 6


class CheckError(Exception):
    """Base class for failures raised by blockcheck itself."""
    exit_code = EXIT_FAILURE


class UsageError(CheckError):
    """Required command-line inputs are missing."""
    exit_code = EXIT_USAGE


class NotFoundError(CheckError):
    """A catalog identifier did not resolve to any known list."""
    exit_code = EXIT_NOT_FOUND


class NetworkError(CheckError):
    """A list download failed or returned a non-success status."""
    exit_code = EXIT_NETWORK


class FilesystemError(CheckError):
    """A local file could not be read or written."""
    exit_code = EXIT_FILESYSTEM


def exit_code_for(error: BaseException) -> int:
    """Map an error raised during a run to the process exit code."""
    if isinstance(error, CheckError):
        return error.exit_code
    # Raised by the matching engine for malformed snapshots
    if isinstance(error, DeserializationError):
        return EXIT_DESERIALIZATION
    return EXIT_FAILURE


__all__ = [
    "CheckError",
    "DeserializationError",
    "FilesystemError",
    "NetworkError",
    "NotFoundError",
    "UsageError",
    "exit_code_for",
]

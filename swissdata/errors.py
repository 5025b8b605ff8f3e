from __future__ import annotations

from pathlib import Path


class DownloadError(RuntimeError):
    """Raised when a remote resource cannot be fetched (network or HTTP status)."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Download failed: url={url} reason={reason}")


class CacheError(RuntimeError):
    """Raised when the on-disk cache cannot be created, written or read."""

    def __init__(self, path: str | Path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cache failure: path={self.path} reason={reason}")


class ArchiveError(RuntimeError):
    """Raised when a dataset archive cannot be opened or read."""

    def __init__(self, path: str | Path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Archive invalid: path={self.path} reason={reason}")


class MissingMemberError(ArchiveError):
    """Raised when the archive has no member for a required entity-type code."""

    def __init__(self, code: str, path: str | Path = "<archive>"):
        self.code = code
        super().__init__(path, f"missing dataset member for code {code!r}")


class RowDecodeError(ValueError):
    """A single row could not be decoded into a record.

    Reported as part of the decoded sequence, never raised by the decoder
    itself; callers decide whether to raise it.
    """

    def __init__(self, line: int, reason: str, field: str | None = None):
        self.line = line
        self.reason = reason
        self.field = field
        where = f"line {line}" if field is None else f"line {line}, field {field!r}"
        super().__init__(f"Row decode failed at {where}: {reason}")

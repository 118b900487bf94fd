"""Path guarding and read-modify-write locking.

exclusive_lock() takes an advisory flock on a ``<path>.lock`` marker next
to the output file so that concurrent invocations against the same file
serialise instead of losing updates. It is best-effort: processes that do
not take the lock are not excluded, and on platforms without flock (Windows)
the body simply runs unlocked.
"""

import contextlib
import os
import sys
from collections.abc import Callable, Generator
from typing import TypeVar

from icecream import ic

from k8s_secret_manifest.exceptions import LockAcquisitionError, PathEscapeError

if sys.platform != "win32":
    import fcntl

T = TypeVar("T")

LOCK_SUFFIX = ".lock"


def safe_path(flag: str, path: str) -> str:
    """Reject a path whose '..' segments lead outside the current directory.

    The check is lexical; the target does not need to exist.

    Args:
        flag: The option the path came from, used in the error message.
        path: The user-supplied path.

    Returns:
        The path unchanged, or normalised if it contained '..' segments.

    Raises:
        PathEscapeError: If the path resolves outside the current directory.

    """
    if not path or ".." not in path.replace("\\", "/").split("/"):
        return path

    cwd = os.getcwd()
    resolved = os.path.normpath(os.path.join(cwd, path))
    if os.path.commonpath([cwd, resolved]) != cwd:
        raise PathEscapeError(f"{flag}: path {path!r} escapes current directory")
    return os.path.normpath(path)


@contextlib.contextmanager
def exclusive_lock(path: str) -> Generator[None, None, None]:
    """Hold an exclusive advisory lock for path while the block runs.

    An empty path means stdout and takes no lock. Acquisition blocks
    without a timeout. The marker file is removed on exit whether the
    block succeeded or not.

    Args:
        path: The output file being read, modified and rewritten.

    Raises:
        LockAcquisitionError: If the marker cannot be opened or locked.

    """
    if not path or sys.platform == "win32":
        yield
        return

    lock_path = path + LOCK_SUFFIX
    try:
        fd = os.open(lock_path, os.O_CREAT | os.O_RDWR, 0o600)
    except OSError as err:
        raise LockAcquisitionError(f"open lock file {lock_path!r}: {err.strerror}") from err

    try:
        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
        except OSError as err:
            raise LockAcquisitionError(f"acquire lock on {lock_path!r}: {err.strerror}") from err
        ic(lock_path)
        yield
    finally:
        with contextlib.suppress(OSError):
            fcntl.flock(fd, fcntl.LOCK_UN)
        os.close(fd)
        with contextlib.suppress(FileNotFoundError):
            os.unlink(lock_path)


def with_exclusive_access(path: str, fn: Callable[[], T]) -> T:
    """Run fn while holding the exclusive lock for path and return its result."""
    with exclusive_lock(path):
        return fn()

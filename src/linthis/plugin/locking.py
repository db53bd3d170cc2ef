"""Advisory file locks for the plugin cache.

Purpose: two linthis processes must never run git against the same cache
entry at the same time. The lock is advisory (flock / msvcrt) and is released
when the guard leaves its ``with`` block, including on exceptions.

Shared locks let many per-plugin writers coexist while excluding a
whole-cache operation such as ``clean --all``. msvcrt has no shared mode, so
on Windows a shared lock is taken exclusively.
"""

from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Any, List, Optional

import structlog

from .errors import LockError

log = structlog.get_logger(__name__)

POLL_INTERVAL = 0.1


def _try_lock(handle: Any, blocking: bool, shared: bool = False) -> bool:
    if os.name == "nt":
        import msvcrt

        mode = msvcrt.LK_LOCK if blocking else msvcrt.LK_NBLCK  # type: ignore[attr-defined]
        try:
            handle.seek(0)
            msvcrt.locking(handle.fileno(), mode, 1)  # type: ignore[attr-defined]
        except OSError:
            if blocking:
                raise
            return False
        return True
    import fcntl

    flags = fcntl.LOCK_SH if shared else fcntl.LOCK_EX
    if not blocking:
        flags |= fcntl.LOCK_NB
    try:
        fcntl.flock(handle.fileno(), flags)
    except BlockingIOError:
        return False
    return True


def _unlock(handle: Any) -> None:
    if os.name == "nt":
        import msvcrt

        try:
            handle.seek(0)
            msvcrt.locking(handle.fileno(), msvcrt.LK_UNLCK, 1)  # type: ignore[attr-defined]
        except OSError:
            return
        return
    import fcntl

    try:
        fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
    except OSError:
        return


class CacheLock:
    """RAII-style guard around one lock file.

    Usage:
        with CacheLock(root / ".linthis-cache.lock"):
            ...  # mutate the cache
    """

    def __init__(self, path: Path, timeout: Optional[float] = None, shared: bool = False):
        self.path = Path(path)
        self.timeout = timeout
        self.shared = shared
        self._handle: Any = None

    @property
    def held(self) -> bool:
        return self._handle is not None

    def acquire(self) -> "CacheLock":
        if self._handle is not None:
            raise LockError(f"Lock already held: {self.path}")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            handle = self.path.open("a+", encoding="utf-8")
        except OSError as e:
            raise LockError(f"Failed to open cache lock {self.path}: {e}") from e

        try:
            self._wait_for(handle)
        except BaseException:
            handle.close()
            raise

        self._handle = handle
        if not self.shared:
            try:
                handle.seek(0)
                handle.truncate()
                handle.write(f"pid={os.getpid()}\n")
                handle.flush()
            except OSError:
                # The lock itself is held; the pid line is informational.
                pass
        log.debug("cache_lock_acquired", path=str(self.path), shared=self.shared)
        return self

    def _wait_for(self, handle: Any) -> None:
        try:
            if self.timeout is None:
                _try_lock(handle, blocking=True, shared=self.shared)
                return
            deadline = time.monotonic() + self.timeout
            while not _try_lock(handle, blocking=False, shared=self.shared):
                if time.monotonic() >= deadline:
                    raise LockError(
                        f"Timed out after {self.timeout}s waiting for cache lock {self.path}"
                    )
                time.sleep(POLL_INTERVAL)
        except OSError as e:
            raise LockError(f"Failed to acquire cache lock {self.path}: {e}") from e

    def release(self) -> None:
        if self._handle is None:
            return
        handle, self._handle = self._handle, None
        _unlock(handle)
        handle.close()
        log.debug("cache_lock_released", path=str(self.path))

    def __enter__(self) -> "CacheLock":
        if self._handle is None:
            self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


class LockChain:
    """Several locks taken in order and released in reverse."""

    def __init__(self, locks: List[CacheLock]):
        self.locks = list(locks)

    @property
    def held(self) -> bool:
        return bool(self.locks) and all(lock.held for lock in self.locks)

    def acquire(self) -> "LockChain":
        taken: List[CacheLock] = []
        try:
            for lock in self.locks:
                taken.append(lock.acquire())
        except BaseException:
            for lock in reversed(taken):
                lock.release()
            raise
        return self

    def release(self) -> None:
        for lock in reversed(self.locks):
            lock.release()

    def __enter__(self) -> "LockChain":
        if not self.held:
            self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

"""
Authentication for the Home Assistant API client.

Holds the long-lived access token behind a readers-writer lock. The same
lock is used by the request executor to order requests (see
``executor.RequestExecutor``).
"""

import logging
import re
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from .exceptions import HAAuthenticationError


logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r'^[A-Za-z0-9_.-]+$')
MIN_TOKEN_LENGTH = 32


class ReadWriteLock:
    """
    Readers-writer lock: many concurrent readers, one writer, and the writer
    excludes all readers.

    Writers are preferred: once a writer is waiting, threads that do not
    already hold the read side queue behind it. A thread that holds the read
    side may take it again, and the thread holding the write side may also
    take the read side and re-acquire the write side. A reader must not try
    to upgrade to writer.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._read_holds: Dict[int, int] = {}
        self._writer: Optional[int] = None
        self._write_depth = 0
        self._waiting_writers = 0

    def acquire_read(self):
        me = threading.get_ident()
        with self._cond:
            if self._writer != me and not self._read_holds.get(me):
                while self._writer is not None or self._waiting_writers > 0:
                    self._cond.wait()
            self._readers += 1
            self._read_holds[me] = self._read_holds.get(me, 0) + 1

    def release_read(self):
        me = threading.get_ident()
        with self._cond:
            if not self._read_holds.get(me):
                raise RuntimeError("release_read() called without a held read lock")
            self._read_holds[me] -= 1
            if not self._read_holds[me]:
                del self._read_holds[me]
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self):
        me = threading.get_ident()
        with self._cond:
            if self._writer == me:
                self._write_depth += 1
                return
            self._waiting_writers += 1
            try:
                while self._writer is not None or self._readers > 0:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = me
            self._write_depth = 1

    def release_write(self):
        with self._cond:
            if self._writer != threading.get_ident():
                raise RuntimeError("release_write() called by a thread not holding the write lock")
            self._write_depth -= 1
            if self._write_depth == 0:
                self._writer = None
                self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


def validate_token(token: Optional[str]) -> None:
    """
    Check that a token looks like a Home Assistant long-lived access token.

    Raises:
        HAAuthenticationError: If the token is None, blank, shorter than
            MIN_TOKEN_LENGTH or contains characters outside [A-Za-z0-9_.-]
    """
    if token is None:
        raise HAAuthenticationError("Access token cannot be null")

    if not isinstance(token, str):
        raise HAAuthenticationError("Access token must be a string")

    if not token.strip():
        raise HAAuthenticationError("Access token cannot be empty")

    if len(token) < MIN_TOKEN_LENGTH:
        raise HAAuthenticationError(
            f"Access token must be at least {MIN_TOKEN_LENGTH} characters"
        )

    if not TOKEN_PATTERN.match(token):
        raise HAAuthenticationError(
            "Access token contains invalid characters. Only alphanumeric characters, dots, "
            "underscores, and hyphens are allowed."
        )


class TokenStore:
    """
    Thread-safe holder for one bearer token.

    ``get`` takes the read side of the lock, ``set`` the write side, so a
    replacement never interleaves with a reader.
    """

    def __init__(self, token: str, lock: Optional[ReadWriteLock] = None):
        self.lock = lock or ReadWriteLock()
        self._token: Optional[str] = None
        self.set(token)

    def get(self) -> str:
        with self.lock.read_locked():
            return self._token

    def set(self, token: str) -> None:
        validate_token(token)
        with self.lock.write_locked():
            self._token = token
        logger.debug("Access token updated")

    def auth_header(self) -> Dict[str, str]:
        """Authorization header for the current token"""
        return {"Authorization": f"Bearer {self.get()}"}

    def __repr__(self):
        return f"{self.__class__.__name__}(token=<redacted>)"

"""
Refresh token registries.

A registry is the authoritative set of refresh tokens that are currently
accepted: presence means valid, absence means revoked or never issued.
The login flow adds tokens; the refresh flow only looks them up and evicts
them.

Two backends:
- InMemoryRefreshTokenRegistry: single-process, lock-guarded set.
- DatabaseRefreshTokenRegistry: shared through the SQL database, for
  deployments running several worker processes.
"""
from __future__ import annotations

import hashlib
import logging
import threading

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.refresh_token import RefreshToken
from utils.exceptions import StorageError

logger = logging.getLogger(__name__)


class RefreshTokenRegistry:
    """Set-like contract shared by all backends."""

    def contains(self, token: str) -> bool:
        raise NotImplementedError

    def add(self, token: str) -> None:
        raise NotImplementedError

    def remove(self, token: str) -> None:
        """Remove `token`; removing an absent token is a no-op."""
        raise NotImplementedError

    def __contains__(self, token) -> bool:
        return isinstance(token, str) and self.contains(token)


class InMemoryRefreshTokenRegistry(RefreshTokenRegistry):
    def __init__(self, tokens=()):
        self._lock = threading.Lock()
        self._tokens = set(tokens)

    def contains(self, token: str) -> bool:
        with self._lock:
            return token in self._tokens

    def add(self, token: str) -> None:
        with self._lock:
            self._tokens.add(token)

    def remove(self, token: str) -> None:
        with self._lock:
            self._tokens.discard(token)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)


def token_digest(token: str) -> str:
    # lone surrogates are valid JSON strings
    return hashlib.sha256(token.encode("utf-8", "surrogatepass")).hexdigest()


class DatabaseRefreshTokenRegistry(RefreshTokenRegistry):
    """
    Registry stored in the refresh_tokens table of a DBStorage.
    Only SHA-256 digests are persisted. remove() is a single DELETE statement,
    so concurrent evictions of the same token are atomic and idempotent.
    """

    def __init__(self, storage):
        self._storage = storage

    def _session(self):
        return self._storage.get_session()

    def contains(self, token: str) -> bool:
        session = self._session()
        try:
            return session.get(RefreshToken, token_digest(token)) is not None
        except SQLAlchemyError as exc:
            session.rollback()
            raise StorageError(str(exc)) from exc

    def add(self, token: str) -> None:
        session = self._session()
        try:
            session.merge(RefreshToken(token_hash=token_digest(token)))
            session.commit()
        except IntegrityError:
            # already registered
            session.rollback()
        except SQLAlchemyError as exc:
            session.rollback()
            raise StorageError(str(exc)) from exc

    def remove(self, token: str) -> None:
        session = self._session()
        try:
            session.execute(delete(RefreshToken).where(RefreshToken.token_hash == token_digest(token)))
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise StorageError(str(exc)) from exc
        # the row may still sit in the identity map from an earlier lookup
        session.expire_all()

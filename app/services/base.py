"""
Shared plumbing for the service layer.

Services own their transactions: a mutating operation runs inside
``self.transaction()`` which commits once on success and rolls back on any
failure, translating store errors into the application's error taxonomy.
"""
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    AppException,
    AuthenticationError,
    ConstraintViolationError,
    StoreUnavailableError,
)
from app.schemas.auth import Actor


class BaseService:
    def __init__(self, db: Session):
        self.db = db
        self._logger = logging.getLogger(self.__class__.__module__)

    def log_info(self, message: str, **extra):
        self._logger.info(message, extra=extra or None)

    def log_warning(self, message: str, **extra):
        self._logger.warning(message, extra=extra or None)

    @staticmethod
    def require_actor(actor: Optional[Actor]) -> Actor:
        if actor is None:
            raise AuthenticationError()
        return actor

    @staticmethod
    def clamp_page(page: int, page_size: int, max_page_size: int) -> tuple[int, int]:
        return max(page, 1), min(max(page_size, 1), max_page_size)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Unit of work: everything inside commits together or not at all.
        """
        try:
            yield self.db
            self.db.commit()
        except AppException:
            self.db.rollback()
            raise
        except IntegrityError as exc:
            self.db.rollback()
            self._logger.warning(f"Constraint violation: {exc.orig}")
            raise ConstraintViolationError(details={"cause": str(exc.orig)}) from exc
        except OperationalError as exc:
            self.db.rollback()
            self._logger.error(f"Store unavailable: {exc}", exc_info=True)
            raise StoreUnavailableError(details={"cause": str(exc.orig)}) from exc
        except DBAPIError as exc:
            self.db.rollback()
            if exc.connection_invalidated:
                raise StoreUnavailableError(details={"cause": str(exc.orig)}) from exc
            raise
        except Exception:
            self.db.rollback()
            raise

    @contextmanager
    def reading(self) -> Iterator[Session]:
        """Read-only access with the same error translation as writes."""
        try:
            yield self.db
        except OperationalError as exc:
            self.db.rollback()
            self._logger.error(f"Store unavailable: {exc}", exc_info=True)
            raise StoreUnavailableError(details={"cause": str(exc.orig)}) from exc

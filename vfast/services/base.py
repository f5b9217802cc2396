"""
Base service class providing common functionality for all services.
"""

from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vfast.config.settings import Settings, get_settings
from vfast.core.events import BookingEvent, EventBus, event_bus
from vfast.core.exceptions import BaseAppException, DuplicateEntryError
from vfast.core.logging import get_logger


class BaseService:
    """
    Base service with common behaviors:
    - Shared logger, settings and db session
    - Transaction management with rollback on any failure
    - Events queued during a transaction and published after commit
    """

    def __init__(
        self,
        db_session: Session,
        *,
        settings: Optional[Settings] = None,
        bus: Optional[EventBus] = None,
    ):
        self.db: Session = db_session
        self.settings: Settings = settings or get_settings()
        self.bus: EventBus = bus or event_bus
        self._pending_events: List[BookingEvent] = []
        self._logger = get_logger(self.__class__.__name__)

    # -------------------------------------------------------------------------
    # Transaction Management
    # -------------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Context manager for database transactions with automatic rollback.

        Example:
            with self.transaction():
                booking.status = ...
                # commit on success, rollback on exception
        """
        try:
            yield self.db
            self._commit()
        except BaseAppException as e:
            self._rollback()
            self._logger.warning(f"Operation refused: {e}", extra={"error_code": e.error_code.value})
            raise
        except Exception as e:
            self._rollback()
            self._logger.error(f"Transaction failed: {e}", exc_info=True)
            raise
        self._flush_events()

    @contextmanager
    def unique_insert(self, message: str, field: Optional[str] = None) -> Iterator[None]:
        """
        Report a unique-constraint violation as ``DuplicateEntryError``.

        Covers the insert that races past a lookup done before the
        transaction started. Use inside ``transaction()`` so the failed
        flush is rolled back.
        """
        try:
            yield
        except IntegrityError as e:
            self._logger.warning(f"Integrity error on insert: {e.orig}")
            raise DuplicateEntryError(message, field=field) from e

    def _commit(self) -> None:
        try:
            self.db.commit()
            self._logger.debug("Transaction committed successfully")
        except Exception as e:
            self._logger.error(f"Commit failed: {e}", exc_info=True)
            self._rollback()
            raise

    def _rollback(self) -> None:
        """Rollback the current transaction, discarding queued events."""
        self._pending_events.clear()
        try:
            self.db.rollback()
            self._logger.debug("Transaction rolled back")
        except Exception as e:
            # Rollback errors must not mask the original error
            self._logger.warning(f"Rollback failed: {e}")

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def _emit(self, event_type: str, booking_id: int, **data) -> None:
        self._pending_events.append(BookingEvent(event_type, booking_id, data))

    def _flush_events(self) -> None:
        events, self._pending_events = self._pending_events, []
        for event in events:
            self.bus.publish(event)

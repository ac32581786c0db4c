"""Shared plumbing for the reducer-driven state stores."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from PySide6.QtCore import QObject, Signal

from core.errors import ChatDeskError, PersistenceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SetLoading:
    value: bool


@dataclass(frozen=True)
class SetError:
    error: Exception


@dataclass(frozen=True)
class ClearError:
    pass


class StateStore(QObject):
    """
    Single-writer store: every change goes through ``dispatch``.

    An action is applied synchronously by the pure reducer, so no two actions
    interleave mid-application even when several coroutines are in flight.

    Signals:
        state_changed(object): Emitted with the new state after every action
        error_occurred(str): Emitted when an error is recorded
    """

    state_changed = Signal(object)
    error_occurred = Signal(str)

    def __init__(
        self,
        initial_state: Any,
        reducer: Callable[[Any, Any], Any],
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._state = initial_state
        self._reducer = reducer

    @property
    def state(self) -> Any:
        return self._state

    def dispatch(self, action: Any) -> Any:
        self._state = self._reducer(self._state, action)
        logger.debug("%s applied %s", type(self).__name__, type(action).__name__)
        self.state_changed.emit(self._state)
        if isinstance(action, SetError):
            self.error_occurred.emit(str(action.error))
        return self._state

    def set_error(self, error: Exception) -> None:
        self.dispatch(SetError(error))

    def clear_error(self) -> None:
        self.dispatch(ClearError())

    def _persistence_failed(self, error: Exception, action: str) -> None:
        """Record a failed store call. Optimistic state is left as is."""
        logger.exception("Could not %s", action)
        if not isinstance(error, ChatDeskError):
            error = PersistenceError(f"Could not {action}: {error}")
        self.dispatch(SetError(error))

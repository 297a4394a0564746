"""Application state container.

This is the only component allowed to replace the current snapshot.  It
owns no global state: build one at startup, hand it to collaborators,
and close it at shutdown.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from types import TracebackType
from typing import Any

from flashcore._constants import MAX_CASCADE_DEPTH
from flashcore.config import StoreConfig
from flashcore.exceptions import PersistenceError, StoreError
from flashcore.models import DEFAULT_STATE, ApplicationState
from flashcore.persistence import JsonFileStorage, SettingsPersistence
from flashcore.state.actions import Action, ActionType
from flashcore.state.constraints import DEFAULT_CONSTRAINTS, DriveConstraints
from flashcore.state.reducer import reduce

_logger = logging.getLogger(__name__)

Listener = Callable[[ApplicationState], None]


def _as_action(action: Action | Mapping[str, Any] | str) -> Action:
    if isinstance(action, Action):
        return action
    if isinstance(action, Mapping):
        return Action.from_dict(action)
    return Action(type=action)


class StateStore:
    """Holds the current :class:`ApplicationState` and applies actions to it.

    Dispatches are synchronous and must be serialized by the caller.  A
    dispatch either commits a complete new snapshot or raises and leaves
    the previous one current.
    """

    def __init__(
        self,
        initial: ApplicationState | None = None,
        *,
        constraints: DriveConstraints = DEFAULT_CONSTRAINTS,
        persistence: SettingsPersistence | None = None,
        max_cascade_depth: int = MAX_CASCADE_DEPTH,
    ) -> None:
        self._constraints = constraints
        self._persistence = persistence
        self._max_cascade_depth = max_cascade_depth
        self._listeners: list[Listener] = []
        self._dispatching = False
        self._closed = False

        state = initial if initial is not None else DEFAULT_STATE
        if persistence is not None:
            state = persistence.load(state)
        self._state = state

    @classmethod
    def from_config(
        cls,
        config: StoreConfig,
        *,
        constraints: DriveConstraints = DEFAULT_CONSTRAINTS,
    ) -> StateStore:
        """Build a store, wiring JSON-file persistence when the config asks for it."""
        persistence: SettingsPersistence | None = None
        if config.persists and config.settings_path is not None:
            persistence = SettingsPersistence(JsonFileStorage(config.settings_path), key=config.persisted_key)
        return cls(
            constraints=constraints,
            persistence=persistence,
            max_cascade_depth=config.max_cascade_depth,
        )

    @property
    def closed(self) -> bool:
        return self._closed

    def get_state(self) -> ApplicationState:
        return self._state

    def dispatch(self, action: Action | Mapping[str, Any] | ActionType | str) -> None:
        """Apply *action* and notify subscribers if the snapshot changed."""
        if self._closed:
            raise StoreError("Cannot dispatch on a closed store")
        if self._dispatching:
            raise StoreError("Dispatch already in progress; dispatches must be serialized")

        message = _as_action(action)
        previous = self._state

        self._dispatching = True
        try:
            next_state = reduce(
                previous,
                message,
                constraints=self._constraints,
                max_depth=self._max_cascade_depth,
            )
            self._state = next_state
        finally:
            self._dispatching = False

        if next_state is previous:
            _logger.debug("Dispatched %s (no change)", message.describe())
            return

        _logger.debug("Dispatched %s", message.describe())
        if self._persistence is not None:
            try:
                self._persistence.save(next_state)
            except PersistenceError:
                _logger.warning("Settings not persisted after %s", message.type, exc_info=True)
        self._notify(next_state)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* for new snapshots; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, state: ApplicationState) -> None:
        # Iterate over a copy: listeners may unsubscribe while being notified.
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                _logger.debug("State listener %r failed", listener, exc_info=True)

    def flush(self) -> None:
        """Write the current settings to persistence, if configured."""
        if self._persistence is not None:
            self._persistence.save(self._state)

    def close(self) -> None:
        """Flush settings and drop all subscribers.  Idempotent."""
        if self._closed:
            return
        self.flush()
        self._listeners.clear()
        self._closed = True

    def __enter__(self) -> StateStore:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

"""Shared, copy-on-write view configuration of one details screen."""

from __future__ import annotations

import threading
from typing import Callable, Optional

from listdetail.domain.models import Setup, ViewMode
from listdetail.gui.viewmodels.signal import Connection, Signal


class SetupObserver:
    """Forwards distinct setups to a handler until cancelled."""

    def __init__(self, handler: Callable[[Setup], None], seen: Optional[Setup]) -> None:
        self._handler = handler
        self._last = seen
        self._active = True
        self._connection: Optional[Connection] = None

    def _on_changed(self, setup: Setup) -> None:
        if not self._active or setup == self._last:
            return
        self._last = setup
        self._handler(setup)

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        if self._connection is not None:
            self._connection.disconnect()


class SetupState:
    """Holds the current :class:`Setup` and notifies on every distinct replacement.

    Readers always get an immutable snapshot; writers swap the whole value.
    Notifications are delivered while the state lock is held so observers see
    replacements in the order they were made. ``about_to_change(old, new)``
    fires before the new value becomes visible through :meth:`current`,
    ``changed(new)`` right after.
    """

    def __init__(self, initial: Optional[Setup] = None) -> None:
        self._current = initial if initial is not None else Setup()
        self._lock = threading.RLock()
        self.about_to_change = Signal("setup_about_to_change")
        self.changed = Signal("setup_changed")

    def current(self) -> Setup:
        return self._current

    def replace(self, setup: Setup) -> bool:
        """Adopt *setup*; returns ``False`` when it equals the current one."""
        with self._lock:
            if setup == self._current:
                return False
            self.about_to_change.emit(self._current, setup)
            self._current = setup
            self.changed.emit(setup)
            return True

    def replace_mode(self, mode: ViewMode) -> bool:
        """Copy the current setup with only its mode overwritten."""
        with self._lock:
            return self.replace(self._current.with_mode(mode))

    def observe_changes(
        self,
        handler: Callable[[Setup], None],
        *,
        seen: Optional[Setup] = None,
    ) -> SetupObserver:
        """Call *handler* with the current setup now, then with each distinct change.

        Passing *seen* suppresses the initial delivery when the current setup
        equals it.
        """
        with self._lock:
            observer = SetupObserver(handler, seen)
            observer._connection = self.changed.connect(observer._on_changed)
            observer._on_changed(self._current)
        return observer

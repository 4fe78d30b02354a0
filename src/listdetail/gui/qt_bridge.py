"""Qt adapters for the pure-Python list details ViewModel.

``QtDispatcher`` delivers snapshots on the Qt main thread; ``QtViewStateAdapter``
re-emits them as a Qt signal so widgets can bind with ordinary slots.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, Qt, Signal, Slot

from listdetail.gui.viewmodels.list_details_viewmodel import ListDetailsViewModel
from listdetail.gui.viewmodels.signal import Connection
from listdetail.gui.viewmodels.view_state import ViewState

_logger = logging.getLogger(__name__)


class QtDispatcher(QObject):
    """Queue callables onto the thread this object lives in.

    Create it on the GUI thread; ``post`` may then be called from any thread.
    """

    _posted = Signal(object)

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._posted.connect(self._run, Qt.ConnectionType.QueuedConnection)

    def post(self, fn: Callable[[], None]) -> None:
        self._posted.emit(fn)

    @Slot(object)
    def _run(self, fn: Callable[[], None]) -> None:
        try:
            fn()
        except Exception as exc:
            _logger.error("Dispatched callable %r failed: %s", fn, exc)


class QtViewStateAdapter(QObject):
    """Forward ``ListDetailsViewModel`` snapshots as ``stateChanged(object)``."""

    stateChanged = Signal(object)

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._connection: Optional[Connection] = None

    def bind(self, viewmodel: ListDetailsViewModel) -> None:
        self.unbind()
        self._connection = viewmodel.state_changed.connect(self._forward)
        if viewmodel.state.value is not None:
            self._forward(viewmodel.state.value)

    def unbind(self) -> None:
        if self._connection is not None:
            self._connection.disconnect()
            self._connection = None

    def _forward(self, state: ViewState) -> None:
        self.stateChanged.emit(state)

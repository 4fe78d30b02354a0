from .signal import Connection, ObservableProperty, Signal
from .base import BaseViewModel

__all__ = [
    "BaseViewModel",
    "Connection",
    "ObservableProperty",
    "Signal",
]

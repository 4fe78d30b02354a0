from .details_navigator import SignalDetailsNavigator

__all__ = ["SignalDetailsNavigator"]

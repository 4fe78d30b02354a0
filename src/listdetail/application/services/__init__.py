from .pagination import PaginationDriver, is_last_page, next_page_number
from .reaction_tracker import PendingReactions, ReactionToggleTracker
from .retry import CancellationToken, CancelledError, RetryPolicy

__all__ = [
    "CancellationToken",
    "CancelledError",
    "PaginationDriver",
    "PendingReactions",
    "ReactionToggleTracker",
    "RetryPolicy",
    "is_last_page",
    "next_page_number",
]

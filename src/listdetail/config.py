"""Default configuration values for listdetail."""

from __future__ import annotations

from typing import Final

# Page size requested from the remote source for both refresh and load-more.
# Completion is inferred from a short page, so the server must honour it.
DEFAULT_PAGE_SIZE: Final[int] = 10

# A failed refresh is re-attempted after this fixed delay, indefinitely.
REFRESH_RETRY_INTERVAL_SEC: Final[float] = 5.0

# Fetching the list entity for the screen header retries on a short interval.
LIST_FETCH_RETRY_INTERVAL_SEC: Final[float] = 0.5

# Upvoting is a reaction toggle with a fixed alias.
UPVOTE_ALIAS: Final[str] = "thumbsup"

DEFAULT_SORT_OPTION: Final[str] = ""

# ``Info`` snapshot codes.
INFO_REPORTED: Final[str] = "reported"

# Worker counts for the background executors owned by one screen.
PAGINATION_WORKERS: Final[int] = 1
REACTION_WORKERS: Final[int] = 4
ACTION_WORKERS: Final[int] = 2

# Cache file name used when an item's large image is stashed before editing.
EDIT_ITEM_IMAGE_CACHE_NAME: Final[str] = "list_item"

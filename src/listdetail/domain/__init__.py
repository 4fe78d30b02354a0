from .models import Item, ItemImages, ListEntity, Page, Setup, ViewMode

__all__ = [
    "Item",
    "ItemImages",
    "ListEntity",
    "Page",
    "Setup",
    "ViewMode",
]

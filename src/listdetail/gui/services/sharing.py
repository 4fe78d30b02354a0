"""Plain-text renderings of lists and items for the system share sheet."""

from __future__ import annotations

from listdetail.domain.models import Item, ListEntity


def list_to_content(list_entity: ListEntity) -> str:
    lines = [list_entity.title or list_entity.id]
    if list_entity.description:
        lines.append(list_entity.description)
    if list_entity.share_url:
        lines.append(list_entity.share_url)
    return "\n".join(lines)


def item_to_content(item: Item) -> str:
    lines = []
    if item.position:
        lines.append(f"#{item.position} {item.title}".rstrip())
    else:
        lines.append(item.title or item.id)
    if item.description:
        lines.append(item.description)
    return "\n".join(lines)

from fakes import make_item
from listdetail.domain.models import ListEntity
from listdetail.gui.services.sharing import item_to_content, list_to_content


def test_list_content_includes_description_and_url():
    entity = ListEntity(
        id="l1",
        title="Best films",
        description="Ranked by votes",
        share_url="https://example.org/l/l1",
    )

    assert list_to_content(entity) == "Best films\nRanked by votes\nhttps://example.org/l/l1"


def test_list_content_falls_back_to_id():
    assert list_to_content(ListEntity(id="l1")) == "l1"


def test_item_content_with_position():
    item = make_item("i1", title="Alien", description="1979", position=3)
    assert item_to_content(item) == "#3 Alien\n1979"


def test_item_content_without_position():
    assert item_to_content(make_item("i1", title="")) == "i1"

import pytest

from spotlight_data_client.client import DataClient
from spotlight_data_client.documents import SolrDocument, solr_field_for_tagger

pytestmark = pytest.mark.asyncio


async def test_identity_contract(data_client: DataClient):
    doc = await data_client.get_document("abc123")

    assert doc.to_key() == ["abc123"]
    assert doc.persisted is True
    assert doc.destroyed is False
    assert doc.new_record is False
    assert doc == SolrDocument("abc123", {}, data_client.services)
    assert doc["full_title_tesim"] == ["L'AMERIQUE"]
    assert doc.get("missing_field") is None


async def test_field_name_for_exhibit(exhibits):
    first, second = exhibits
    assert solr_field_for_tagger(first) == "exhibit_1_tags_ssim"
    assert solr_field_for_tagger(second) == "exhibit_2_tags_ssim"


async def test_sidecar_is_memoized_per_exhibit(data_client: DataClient, exhibits):
    first, second = exhibits
    doc = await data_client.get_document("abc123")

    assert await doc.sidecar(first) is await doc.sidecar(first)
    assert await doc.sidecar(first) is not await doc.sidecar(second)
    assert (await doc.sidecar(first)).id is None


async def test_document_id_wins_over_sidecar_id(data_client: DataClient, exhibits):
    first, _ = exhibits
    doc = await data_client.get_document("abc123")
    await data_client.sidecars.update(await doc.sidecar(first), {"id": "forged", "note": "x"})

    projection = await doc.to_solr()

    assert projection["id"] == "abc123"
    assert projection["note"] == "x"


async def test_every_exhibit_field_is_present_without_tags(data_client: DataClient, exhibits):
    doc = await data_client.get_document("dq287tq6352")

    projection = await doc.to_solr()

    assert projection == {
        "id": "dq287tq6352",
        "exhibit_1_tags_ssim": None,
        "exhibit_2_tags_ssim": None,
    }


async def test_projection_without_exhibits(data_client: DataClient):
    doc = await data_client.get_document("dq287tq6352")
    assert await doc.to_solr() == {"id": "dq287tq6352"}


async def test_projection_scenario(data_client: DataClient, exhibits, index):
    first, second = exhibits
    doc = await data_client.get_document("abc123")

    await doc.update(first, {"sidecar": {"featured": True}, "exhibit_tag_list": "map"})
    await doc.update(second, {"exhibit_tag_list": ["rare"]})

    assert await doc.to_solr() == {
        "id": "abc123",
        "featured": True,
        "exhibit_1_tags_ssim": ["map"],
        "exhibit_2_tags_ssim": ["rare"],
    }
    # tag() сохраняет документ, значит проекция уже опубликована
    assert index.docs["abc123"]["exhibit_2_tags_ssim"] == ["rare"]


async def test_removing_last_tag_clears_field(data_client: DataClient, exhibits, index):
    first, second = exhibits
    doc = await data_client.get_document("abc123")
    await doc.update(first, {"exhibit_tag_list": "map"})
    await doc.update(second, {"exhibit_tag_list": "rare"})

    await doc.update(second, {"exhibit_tag_list": ""})

    projection = await doc.to_solr()
    assert projection["exhibit_2_tags_ssim"] is None
    assert projection["exhibit_1_tags_ssim"] == ["map"]
    assert index.docs["abc123"]["exhibit_2_tags_ssim"] is None


async def test_tag_values_keep_insertion_order(data_client: DataClient, exhibits):
    first, _ = exhibits
    doc = await data_client.get_document("abc123")

    await doc.update(first, {"exhibit_tag_list": "zebra, apple, mango"})
    await doc.update(first, {"exhibit_tag_list": "zebra, apple, mango, kiwi"})

    assert (await doc.to_solr())["exhibit_1_tags_ssim"] == ["zebra", "apple", "mango", "kiwi"]


async def test_update_routes_reserved_keys_and_ignores_the_rest(data_client: DataClient, exhibits):
    first, _ = exhibits
    doc = await data_client.get_document("abc123")

    await doc.update(first, {"sidecar": {"note": "x"}, "exhibit_tag_list": "a, b", "unused_field": "z"})

    sidecar = await data_client.sidecars.find("abc123", first.id)
    assert sidecar.data == {"note": "x"}
    assert await data_client.exhibit_tags(first.id, "abc123") == ["a", "b"]
    assert "unused_field" not in await doc.to_solr()


async def test_update_with_symbol_like_keys(data_client: DataClient, exhibits):
    first, _ = exhibits
    doc = await data_client.get_document("abc123")

    await doc.update(first, {"sidecar": {1: "one"}})

    assert (await doc.sidecar(first)).data == {"1": "one"}


async def test_save_is_idempotent(data_client: DataClient, exhibits, index):
    first, _ = exhibits
    doc = await data_client.get_document("abc123")
    await doc.update(first, {"sidecar": {"featured": True}, "exhibit_tag_list": "map"})
    index.writes.clear()

    await doc.save()
    await doc.save()

    assert len(index.writes) == 2
    assert index.writes[0] == index.writes[1]


async def test_reindex_of_vanished_document_is_swallowed(data_client: DataClient, exhibits, index):
    doc = await data_client.get_document("abc123")
    del index.docs["abc123"]

    await doc.reindex()

    assert index.writes == []


async def test_class_level_reindex_of_unknown_id(data_client: DataClient, exhibits, index):
    assert await data_client.reindex("does-not-exist") is False
    assert index.writes == []


async def test_class_level_reindex_publishes_projection(data_client: DataClient, exhibits, index):
    assert await data_client.reindex("dq287tq6352") is True
    assert index.writes == [
        ("dq287tq6352", {"id": "dq287tq6352", "exhibit_1_tags_ssim": None, "exhibit_2_tags_ssim": None}),
    ]


async def test_exhibit_tag_list_reads_pending_then_stored(data_client: DataClient, exhibits):
    first, _ = exhibits
    doc = await data_client.get_document("abc123")
    await doc.update(first, {"exhibit_tag_list": "map"})

    assert await doc.exhibit_tag_list(first) == ["map"]
    doc.set_owner_tag_list(first, "tags", ["globe"])
    assert await doc.exhibit_tag_list(first) == ["globe"]


async def test_after_save_is_a_noop():
    calls = []

    assert SolrDocument.after_save(lambda doc: calls.append(doc)) is None
    assert calls == []

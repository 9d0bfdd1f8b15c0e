"""ExtractionEngine 테스트 (매칭 / 조기 종료 / 상태)"""

import pytest

from food_catalog.engine.extraction import (
    ExtractionEngine,
    ExtractionPolicy,
    matches_brand,
    matches_restaurant,
)
from food_catalog.engine.result import ExtractionStatus
from food_catalog.schemas.catalog_schema import EntityKind, RawResult
from tests.fixtures.search_payloads import food, search_response


def raw(name: str, brand: str = "") -> RawResult:
    return RawResult(food_id="1", food_name=name, brand_name=brand)


class TestMatchers:
    def test_brand_exact_case_insensitive(self):
        assert matches_brand("Kraft", raw("x", "KRAFT"))

    def test_brand_containment_within_five_chars(self):
        assert matches_brand("Kraft", raw("x", "Kraft Inc."))
        assert not matches_brand("Kraft", raw("x", "Kraft Heinz Company"))
        assert not matches_brand("Kraft", raw("Kraft Singles", ""))

    def test_restaurant_rules(self):
        assert matches_restaurant("Pizza Hut", raw("x", "pizza hut"))
        assert matches_restaurant("Pizza Hut", raw("x", "Pizza Hut Express"))
        assert matches_restaurant("Pizza Hut Express", raw("x", "Pizza Hut"))
        assert matches_restaurant("Pizza Hut", raw("Pizza Hut Pepperoni Pan", ""))
        assert not matches_restaurant("Pizza Hut", raw("Pepperoni Pizza", ""))
        assert not matches_restaurant("Pizza Hut", raw("Pepperoni Pizza", "Domino's"))


def full_page(term: str, page: int, ids: tuple[int, int], brand: str, total: int = 1000):
    return search_response(
        [food(ids[0], f"{term} item {ids[0]}", brand=brand), food(ids[1], f"{term} item {ids[1]}", brand=brand)],
        total=total,
        page=page,
    )


@pytest.mark.asyncio
async def test_brand_extraction_collects_matches_only(fake_transport, search_client):
    fake_transport.pages[("Kraft", 0)] = search_response(
        [food(1, "Mac & Cheese", brand="Kraft"), food(2, "Cheese", brand="Tillamook")], total=3
    )
    fake_transport.pages[("Kraft", 1)] = search_response([food(3, "Singles", brand="Kraft Inc")], total=3, page=1)

    outcome = await ExtractionEngine(search_client).extract("Kraft", EntityKind.BRAND)

    assert outcome.status == ExtractionStatus.EXTRACTED
    assert outcome.key == "kraft"
    assert outcome.item_count == 2
    assert outcome.pages_extracted == 2
    assert outcome.total_search_results == 3
    assert [i.food_id for i in outcome.entity.items] == ["1", "3"]


@pytest.mark.asyncio
async def test_early_stop_at_first_non_empty_page_plus_patience(fake_transport, search_client):
    # 0페이지만 매칭, 전체 결과 수는 훨씬 많음
    fake_transport.pages[("Kraft", 0)] = full_page("Kraft", 0, (1, 2), "Kraft")
    for page in range(1, 40):
        fake_transport.pages[("Kraft", page)] = full_page("Kraft", page, (page * 2 + 1, page * 2 + 2), "Other")

    engine = ExtractionEngine(search_client, ExtractionPolicy(brand_max_pages=40, patience=5))
    outcome = await engine.extract("Kraft", EntityKind.BRAND)

    requested = [int(c["page_number"]) for c in fake_transport.search_calls("Kraft")]
    first_non_empty_page = 0
    assert max(requested) <= first_non_empty_page + 5
    assert outcome.item_count == 2
    assert outcome.status == ExtractionStatus.EXTRACTED


@pytest.mark.asyncio
async def test_match_resets_patience_counter(fake_transport, search_client):
    fake_transport.pages[("Kraft", 0)] = full_page("Kraft", 0, (1, 2), "Kraft")
    fake_transport.pages[("Kraft", 1)] = full_page("Kraft", 1, (3, 4), "Kraft")
    for page in range(2, 40):
        fake_transport.pages[("Kraft", page)] = full_page("Kraft", page, (page * 2 + 1, page * 2 + 2), "Other")

    outcome = await ExtractionEngine(search_client, ExtractionPolicy(brand_max_pages=40, patience=5)).extract(
        "Kraft", EntityKind.BRAND
    )

    # 마지막 매칭 페이지(1) 이후 5페이지 연속 0건 → 6페이지에서 종료
    assert max(int(c["page_number"]) for c in fake_transport.search_calls("Kraft")) == 6
    assert outcome.item_count == 4


@pytest.mark.asyncio
async def test_early_stop_when_first_pages_never_match(fake_transport, search_client):
    for page in range(20):
        fake_transport.pages[("Kraft", page)] = full_page("Kraft", page, (page * 2 + 1, page * 2 + 2), "Other")

    outcome = await ExtractionEngine(search_client).extract("Kraft", EntityKind.BRAND)

    assert len(fake_transport.search_calls("Kraft")) == 5
    assert outcome.status == ExtractionStatus.NO_MATCHES
    assert outcome.entity is None


@pytest.mark.asyncio
async def test_max_pages_cap(fake_transport, search_client):
    for page in range(20):
        fake_transport.pages[("Kraft", page)] = full_page("Kraft", page, (page * 2 + 1, page * 2 + 2), "Kraft")

    outcome = await ExtractionEngine(search_client).extract("Kraft", EntityKind.BRAND, max_pages=3)

    assert outcome.pages_extracted == 3
    assert outcome.item_count == 6


@pytest.mark.asyncio
async def test_duplicate_ids_across_pages_kept_once(fake_transport, search_client):
    fake_transport.pages[("Kraft", 0)] = full_page("Kraft", 0, (1, 2), "Kraft", total=4)
    fake_transport.pages[("Kraft", 1)] = full_page("Kraft", 1, (2, 3), "Kraft", total=4)

    outcome = await ExtractionEngine(search_client).extract("Kraft", EntityKind.BRAND)

    assert [i.food_id for i in outcome.entity.items] == ["1", "2", "3"]


@pytest.mark.asyncio
async def test_category_walks_first_page_only_unfiltered(fake_transport, search_client):
    fake_transport.pages[("cheddar", 0)] = full_page("cheddar", 0, (1, 2), "Anything")
    fake_transport.pages[("cheddar", 1)] = full_page("cheddar", 1, (3, 4), "Anything")

    outcome = await ExtractionEngine(search_client).extract("cheddar", EntityKind.CATEGORY, max_pages=10)

    assert len(fake_transport.search_calls("cheddar")) == 1
    assert outcome.item_count == 2
    assert outcome.entity.kind == EntityKind.CATEGORY


@pytest.mark.asyncio
async def test_inconclusive_when_remote_unreachable(fake_transport, search_client):
    fake_transport.failures.add(("Kraft", 0))

    outcome = await ExtractionEngine(search_client).extract("Kraft", EntityKind.BRAND)

    assert outcome.status == ExtractionStatus.INCONCLUSIVE
    assert outcome.entity is None


@pytest.mark.asyncio
async def test_no_results_is_no_matches(search_client):
    outcome = await ExtractionEngine(search_client).extract("Nonexistent", EntityKind.RESTAURANT)
    assert outcome.status == ExtractionStatus.NO_MATCHES
    assert outcome.pages_extracted == 0


@pytest.mark.asyncio
async def test_budget_exhausted_before_first_page(fake_transport, search_factory):
    search = search_factory(fake_transport, ceiling=10, safety_margin=9)
    await search.client.send("foods.search.v3", {})  # issued=1 → exhausted

    outcome = await ExtractionEngine(search).extract("Kraft", EntityKind.BRAND)

    assert outcome.status == ExtractionStatus.BUDGET_EXHAUSTED
    assert fake_transport.search_calls("Kraft") == []


@pytest.mark.asyncio
async def test_failed_page_after_matches_is_partial(fake_transport, search_client):
    fake_transport.pages[("Kraft", 0)] = full_page("Kraft", 0, (1, 2), "Kraft", total=40)
    fake_transport.failures.add(("Kraft", 1))

    outcome = await ExtractionEngine(search_client).extract("Kraft", EntityKind.BRAND)

    assert outcome.status == ExtractionStatus.PARTIAL
    assert outcome.item_count == 2
    assert outcome.pages_extracted == 1
    assert outcome.entity.complete is False


@pytest.mark.asyncio
async def test_budget_cut_after_matches_is_partial(fake_transport, search_factory):
    for page in range(3):
        fake_transport.pages[("Kraft", page)] = full_page("Kraft", page, (page * 2 + 1, page * 2 + 2), "Kraft")
    search = search_factory(fake_transport, ceiling=2, safety_margin=0)

    outcome = await ExtractionEngine(search).extract("Kraft", EntityKind.BRAND)

    assert outcome.status == ExtractionStatus.PARTIAL
    assert outcome.pages_extracted == 2
    assert outcome.entity.complete is False
    assert len(fake_transport.search_calls("Kraft")) == 2


@pytest.mark.asyncio
async def test_finished_extraction_is_complete(fake_transport, search_client):
    fake_transport.pages[("Kraft", 0)] = search_response([food(1, "Singles", brand="Kraft")], total=1)
    outcome = await ExtractionEngine(search_client).extract("Kraft", EntityKind.BRAND)
    assert outcome.entity.complete is True


@pytest.mark.asyncio
async def test_empty_key_skipped_without_requests(fake_transport, search_client):
    outcome = await ExtractionEngine(search_client).extract("!!!", EntityKind.BRAND)
    assert outcome.status == ExtractionStatus.NO_MATCHES
    assert fake_transport.calls == []


def test_policy_validation_and_lookup():
    policy = ExtractionPolicy(brand_max_pages=7, restaurant_max_pages=9, patience=2)
    assert policy.max_pages_for(EntityKind.BRAND) == 7
    assert policy.max_pages_for(EntityKind.RESTAURANT) == 9
    assert policy.max_pages_for(EntityKind.CATEGORY) == 1
    with pytest.raises(ValueError):
        ExtractionPolicy(patience=0)

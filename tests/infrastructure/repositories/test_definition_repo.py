"""Tests for criteria queries executed against a real SQLite store."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
from sqlalchemy import select, text
from sqlalchemy.exc import OperationalError

from defquery.domain.errors import AmbiguousResultError
from defquery.infrastructure.database.schema import message_subscriptions
from defquery.infrastructure.store import Store

Deployer = Callable[..., Any]


def _ids(definitions: object) -> list[str]:
    return [d.id for d in definitions]  # type: ignore[attr-defined]


class TestFilters:
    @pytest.mark.parametrize(
        ("setter", "value", "expected"),
        [
            ("key", "one", 2),
            ("key", "two", 1),
            ("key", "three", 0),
            ("deployment_id", "DEP-0001", 2),
            ("deployment_id", "DEP-0002", 1),
            ("name", "One", 2),
            ("name_like", "%w%", 1),
            ("key_like", "%o%", 3),
            ("category", "Examples", 2),
            ("category_like", "%Example%", 3),
            ("category_like", "%amples2", 1),
            ("category_not_equals", "Examples", 1),
            ("version", 1, 2),
            ("version", 2, 1),
            ("version", 3, 0),
            ("version_greater_than", 1, 1),
            ("version_greater_than_or_equals", 1, 3),
            ("version_lower_than", 2, 2),
            ("version_lower_than_or_equals", 2, 3),
        ],
    )
    def test_single_filter_counts(
        self, seeded_store: Store, setter: str, value: object, expected: int
    ) -> None:
        query = getattr(seeded_store.create_definition_query(), setter)(value)
        assert query.count() == expected
        assert len(query.list()) == expected

    def test_no_filters_returns_everything(self, seeded_store: Store) -> None:
        assert seeded_store.create_definition_query().count() == 3

    def test_filters_combine_with_and(self, seeded_store: Store) -> None:
        q = seeded_store.create_definition_query().key("one").version(1)
        result = q.single_result()
        assert result is not None
        assert result.id == "one:1:DEP-0001"
        assert result.name == "One"
        assert result.category == "Examples"
        assert result.deployment_id == "DEP-0001"

    def test_like_ignore_case(self, seeded_store: Store) -> None:
        q = seeded_store.create_definition_query()
        assert q.key_like_ignore_case("ON%").count() == 2
        assert seeded_store.create_definition_query().name_like_ignore_case("t%").count() == 1

    def test_like_underscore_matches_one_character(self, seeded_store: Store) -> None:
        assert seeded_store.create_definition_query().key_like("o_e").count() == 2
        assert seeded_store.create_definition_query().key_like("o_").count() == 0

    def test_like_escape_makes_wildcard_literal(self, store: Store, deploy: Deployer) -> None:
        deploy({"key": "a%b"}, {"key": "axb"})
        assert store.create_definition_query().key_like("a%b").count() == 2
        matched = store.create_definition_query().key_like("a\\%b").list()
        assert [d.key for d in matched] == ["a%b"]

    def test_definition_ids(self, seeded_store: Store) -> None:
        all_ids = {d.id for d in seeded_store.create_definition_query().list()}
        q = seeded_store.create_definition_query().definition_ids(all_ids)
        assert q.count() == 3
        subset = seeded_store.create_definition_query().definition_ids({"two:1:DEP-0001"})
        assert _ids(subset.list()) == ["two:1:DEP-0001"]

    def test_empty_definition_ids_matches_nothing(self, seeded_store: Store) -> None:
        q = seeded_store.create_definition_query().definition_ids(set())
        assert q.count() == 0
        assert q.list() == []

    def test_deployment_ids(self, seeded_store: Store) -> None:
        q = seeded_store.create_definition_query().deployment_ids(["DEP-0002", "DEP-9999"])
        assert _ids(q.list()) == ["one:2:DEP-0002"]

    def test_null_category_excluded_by_not_equals(self, store: Store, deploy: Deployer) -> None:
        deploy({"key": "named", "category": "A"}, {"key": "bare"})
        matched = store.create_definition_query().category_not_equals("B").list()
        assert [d.key for d in matched] == ["named"]


class TestLatestVersion:
    def test_latest_per_key(self, seeded_store: Store) -> None:
        q = seeded_store.create_definition_query().latest_version()
        assert q.count() == 2
        assert _ids(q.list()) == ["one:2:DEP-0002", "two:1:DEP-0001"]

    def test_latest_with_key(self, seeded_store: Store) -> None:
        result = seeded_store.create_definition_query().key("one").latest_version().single_result()
        assert result is not None
        assert result.version == 2

    def test_superseded_version_is_not_latest(self, seeded_store: Store) -> None:
        q = seeded_store.create_definition_query().key("one").version(1).latest_version()
        assert q.list() == []
        assert q.count() == 0
        assert q.single_result() is None

    def test_version_filter_applies_to_latest_rows(self, seeded_store: Store) -> None:
        q = seeded_store.create_definition_query().version(2).latest_version()
        assert _ids(q.list()) == ["one:2:DEP-0002"]

    def test_version_range_with_latest(self, seeded_store: Store) -> None:
        q = seeded_store.create_definition_query().version_lower_than(2).latest_version()
        assert _ids(q.list()) == ["two:1:DEP-0001"]

    def test_latest_is_max_among_all_versions_of_key(self, seeded_store: Store) -> None:
        q = seeded_store.create_definition_query().key("one").latest_version()
        assert all(d.version == 2 for d in q.list())
        assert q.count() == 1

    def test_latest_applied_before_paging(self, seeded_store: Store) -> None:
        q = seeded_store.create_definition_query().latest_version().order_by_key().asc()
        assert _ids(q.list_page(1, 5)) == ["two:1:DEP-0001"]

    def test_latest_by_deployment(self, seeded_store: Store) -> None:
        q = seeded_store.create_definition_query().deployment_id("DEP-0001").latest_version()
        assert sorted(d.key for d in q.list()) == ["one", "two"]


class TestSortingAndPaging:
    def test_default_order_is_id(self, seeded_store: Store) -> None:
        assert _ids(seeded_store.create_definition_query().list()) == [
            "one:1:DEP-0001",
            "one:2:DEP-0002",
            "two:1:DEP-0001",
        ]

    def test_multi_key_sort(self, seeded_store: Store) -> None:
        q = seeded_store.create_definition_query().order_by_key().asc().order_by_version().desc()
        assert [(d.key, d.version) for d in q.list()] == [("one", 2), ("one", 1), ("two", 1)]

    def test_descending_deployment(self, seeded_store: Store) -> None:
        q = seeded_store.create_definition_query().order_by_deployment_id().desc()
        assert q.list()[0].deployment_id == "DEP-0002"

    def test_ties_broken_by_id(self, seeded_store: Store) -> None:
        q = seeded_store.create_definition_query().order_by_category().asc()
        assert _ids(q.list()) == ["one:1:DEP-0001", "one:2:DEP-0002", "two:1:DEP-0001"]

    def test_list_page(self, seeded_store: Store) -> None:
        q = seeded_store.create_definition_query().order_by_definition_id().asc()
        assert _ids(q.list_page(0, 2)) == ["one:1:DEP-0001", "one:2:DEP-0002"]
        q2 = seeded_store.create_definition_query().order_by_definition_id().asc()
        assert _ids(q2.list_page(2, 2)) == ["two:1:DEP-0001"]

    def test_page_past_end_is_empty(self, seeded_store: Store) -> None:
        assert seeded_store.create_definition_query().list_page(10, 5) == []

    def test_zero_max_results_is_empty(self, seeded_store: Store) -> None:
        assert seeded_store.create_definition_query().list_page(0, 0) == []

    def test_count_ignores_paging(self, seeded_store: Store) -> None:
        q = seeded_store.create_definition_query().page(1, 1)
        assert len(q.list()) == 1
        assert q.count() == 3

    def test_repeated_execution_is_stable(self, seeded_store: Store) -> None:
        q = seeded_store.create_definition_query().key("one").order_by_version().asc()
        assert _ids(q.list()) == _ids(q.list())


class TestSingleResult:
    def test_none_when_no_match(self, seeded_store: Store) -> None:
        assert seeded_store.create_definition_query().key("missing").single_result() is None

    def test_one_match(self, seeded_store: Store) -> None:
        result = seeded_store.create_definition_query().key("two").single_result()
        assert result is not None
        assert result.id == "two:1:DEP-0001"

    def test_ambiguous(self, seeded_store: Store) -> None:
        with pytest.raises(AmbiguousResultError):
            seeded_store.create_definition_query().key("one").single_result()

    def test_ignores_paging(self, seeded_store: Store) -> None:
        q = seeded_store.create_definition_query().key("one").page(0, 1)
        with pytest.raises(AmbiguousResultError):
            q.single_result()


class TestMessageSubscriptions:
    def test_filter_by_subscription(self, store: Store, deploy: Deployer) -> None:
        deploy(
            {"key": "order", "message_subscriptions": ["order-placed"]},
            {"key": "refund", "message_subscriptions": ["refund-requested", "order-placed"]},
            {"key": "audit"},
        )
        q = store.create_definition_query().message_event_subscription_name("order-placed")
        assert sorted(d.key for d in q.list()) == ["order", "refund"]
        q2 = store.create_definition_query().message_event_subscription_name("refund-requested")
        assert q2.count() == 1
        q3 = store.create_definition_query().message_event_subscription_name("nothing")
        assert q3.count() == 0

    def test_subscription_names(self, store: Store, deploy: Deployer) -> None:
        _, created = deploy({"key": "order", "message_subscriptions": ["b", "a", "b"]})
        assert store.definitions.subscription_names(created[0].id) == ["a", "b"]

    def test_subscription_combined_with_latest(self, store: Store, deploy: Deployer) -> None:
        deploy({"key": "order", "message_subscriptions": ["order-placed"]})
        deploy({"key": "order"})
        q = store.create_definition_query().message_event_subscription_name("order-placed")
        result = q.latest_version().single_result()
        assert result is not None
        assert result.version == 1


class TestDeploymentCascade:
    def test_deleting_deployment_removes_its_definitions(self, seeded_store: Store) -> None:
        assert seeded_store.deployments.delete("DEP-0002")
        q = seeded_store.create_definition_query().key("one").latest_version()
        result = q.single_result()
        assert result is not None
        assert result.id == "one:1:DEP-0001"
        assert seeded_store.create_definition_query().count() == 2

    def test_cascade_reaches_subscriptions(self, store: Store, deploy: Deployer) -> None:
        deployment, _ = deploy({"key": "order", "message_subscriptions": ["order-placed"]})
        store.deployments.delete(deployment.id)
        with store.engine.connect() as conn:
            assert conn.execute(select(message_subscriptions)).fetchall() == []


class TestGet:
    def test_get_by_id(self, seeded_store: Store) -> None:
        definition = seeded_store.definitions.get("two:1:DEP-0001")
        assert definition is not None
        assert definition.key == "two"

    def test_get_missing(self, seeded_store: Store) -> None:
        assert seeded_store.definitions.get("nope") is None


class TestStoreErrors:
    def test_store_failure_propagates(self, seeded_store: Store) -> None:
        with seeded_store.engine.begin() as conn:
            conn.execute(text("DROP TABLE message_subscriptions"))
        q = seeded_store.create_definition_query().message_event_subscription_name("x")
        with pytest.raises(OperationalError):
            q.list()

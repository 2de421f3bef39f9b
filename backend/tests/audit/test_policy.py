"""Tests for app.audit.policy."""

import pytest

from app.audit.policy import BubblingPolicy, kind_of
from app.models.commerce import Order, OrderItem, Product


class TestKindOf:
    def test_class_and_instance(self) -> None:
        assert kind_of(Order) == "Order"
        assert kind_of(Order(customer_name="x")) == "Order"

    def test_string_passes_through(self) -> None:
        assert kind_of("Order") == "Order"

    def test_audit_kind_override(self) -> None:
        class Special:
            __audit_kind__ = "Order"

        assert kind_of(Special) == "Order"
        assert kind_of(Special()) == "Order"


class TestBubblingPolicy:
    def test_unknown_pair_is_false(self) -> None:
        policy = BubblingPolicy()
        assert policy.allows("OrderItem", "Order") is False

    def test_register_with_classes(self) -> None:
        policy = BubblingPolicy()
        policy.register(OrderItem, Order)

        assert policy.allows("OrderItem", "Order")
        assert not policy.allows("Order", "OrderItem")
        assert not policy.allows("Product", "OrderItem")

    def test_register_is_idempotent(self) -> None:
        policy = BubblingPolicy()
        policy.register(OrderItem, Order)
        policy.register("OrderItem", "Order")

        assert len(policy) == 1
        assert policy.rules == frozenset({("OrderItem", "Order")})

    def test_rules_is_a_copy(self) -> None:
        policy = BubblingPolicy()
        policy.register(Product, OrderItem)
        rules = policy.rules
        policy.register(OrderItem, Order)

        assert rules == frozenset({("Product", "OrderItem")})

    def test_repr(self) -> None:
        policy = BubblingPolicy.from_rules(["OrderItem:Order"])
        assert repr(policy) == "<BubblingPolicy(OrderItem->Order)>"


class TestFromRules:
    @pytest.mark.parametrize(
        "rule",
        [
            "OrderItem:Order",
            "OrderItem->Order",
            " OrderItem -> Order ",
            "OrderItem : Order",
        ],
    )
    def test_accepted_formats(self, rule: str) -> None:
        policy = BubblingPolicy.from_rules([rule])
        assert policy.rules == frozenset({("OrderItem", "Order")})

    def test_multiple_rules(self) -> None:
        policy = BubblingPolicy.from_rules(["OrderItem:Order", "Order:Customer"])
        assert policy.allows("Order", "Customer")
        assert len(policy) == 2

    def test_empty(self) -> None:
        assert len(BubblingPolicy.from_rules([])) == 0

    @pytest.mark.parametrize("rule", ["OrderItem", "OrderItem:", ":Order", "A:B:C"])
    def test_malformed_rule_raises(self, rule: str) -> None:
        with pytest.raises(ValueError, match="Invalid bubbling rule"):
            BubblingPolicy.from_rules([rule])

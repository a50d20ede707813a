"""Unit tests for business id generation."""

import pytest

from src.fm_common.id_generator import (
    BusinessIdGenerator,
    new_dispute_id,
    new_order_id,
    new_withdrawal_id,
)


def test_prefix_and_width() -> None:
    order_id = new_order_id()
    prefix, digits = order_id.split("-")
    assert prefix == "ORD"
    assert len(digits) == 19 and digits.isdigit()
    assert new_withdrawal_id().startswith("WDR-")
    assert new_dispute_id().startswith("DSP-")


def test_ids_sort_in_creation_order() -> None:
    gen = BusinessIdGenerator(worker_id=3)
    ids = [gen.next_id("ORD") for _ in range(2000)]
    assert ids == sorted(ids)
    assert len(set(ids)) == len(ids)


def test_worker_id_range() -> None:
    with pytest.raises(ValueError):
        BusinessIdGenerator(worker_id=1024)

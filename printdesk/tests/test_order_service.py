"""Unit tests for OrderService over an in-memory key-value store and a failing store."""
from __future__ import annotations

import asyncio
import json
import re
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

from printdesk.core.exceptions import PersistenceError
from printdesk.services import OrderService
from printdesk.stores import JsonFileOrderStore, KeyValueOrderStore
from printdesk.stores.types import OrderDraft


def _run(coro):
    return asyncio.run(coro)


def _draft(order_id: str = "O1", order_date: str = "2024-01-01", **kwargs) -> OrderDraft:
    data = {
        "orderId": order_id,
        "fullName": "Jane",
        "phoneNumber": "555-0100",
        "orderDate": order_date,
        "status": "pending",
        "files": [],
    }
    data.update(kwargs)
    return OrderDraft.model_validate(data)


class _Clock:
    def __init__(self) -> None:
        self.tick = 0

    def __call__(self) -> str:
        self.tick += 1
        return f"2024-06-01T00:00:{self.tick:02d}.000Z"


def _service(**kwargs) -> OrderService:
    clock = _Clock()
    return OrderService(KeyValueOrderStore(clock=clock), clock=clock, **kwargs)


def _failing_store() -> MagicMock:
    store = MagicMock()
    store.backend = "file"
    err = PersistenceError("disk full")
    for name in ("add", "list_orders", "get_order", "update_status", "delete_all", "count_by_status", "replace_all"):
        setattr(store, name, AsyncMock(side_effect=err))
    return store


class TestCreateOrder(unittest.TestCase):
    def test_create_stamps_id_and_timestamps(self):
        svc = _service()
        order = _run(svc.create_order(_draft()))

        self.assertRegex(order.id, r"^order_\d{13}_[0-9a-z]{9}$")
        self.assertEqual(order.created_at, "2024-06-01T00:00:01.000Z")
        self.assertEqual(order.created_at, order.updated_at)

    def test_round_trip_equals_draft_plus_stamps(self):
        svc = _service(id_factory=lambda: "order_fixed")
        draft = _draft(printType="color", copies=2, totalCost=4.5)
        created = _run(svc.create_order(draft))

        fetched = _run(svc.get_order("O1"))
        self.assertEqual(fetched, created)
        self.assertEqual(fetched.model_dump(exclude={"id", "created_at", "updated_at"}), draft.model_dump())
        self.assertEqual(fetched.id, "order_fixed")

    def test_default_status_is_pending(self):
        svc = _service()
        draft = OrderDraft(order_id="O2", full_name="Al", phone_number="1", order_date="2024-01-01")
        self.assertEqual(_run(svc.create_order(draft)).status, "pending")

    def test_generated_ids_are_unique(self):
        svc = _service()
        ids = {_run(svc.create_order(_draft(f"O{i}"))).id for i in range(20)}
        self.assertEqual(len(ids), 20)


class TestExampleScenario(unittest.TestCase):
    def test_create_get_update(self):
        svc = _service()
        _run(svc.create_order(_draft("O1", "2024-01-01")))

        order = _run(svc.get_order("O1"))
        self.assertEqual(order.status, "pending")
        self.assertEqual(order.full_name, "Jane")

        _run(svc.update_status("O1", "printing"))
        after = _run(svc.get_order("O1"))
        self.assertEqual(after.status, "printing")
        self.assertNotEqual(after.updated_at, order.updated_at)
        self.assertEqual(after.created_at, order.created_at)


class TestQueries(unittest.TestCase):
    def test_list_sorted_and_counts(self):
        svc = _service()
        _run(svc.create_order(_draft("A", "2024-01-01", status="a")))
        _run(svc.create_order(_draft("B", "2024-03-01", status="a")))
        _run(svc.create_order(_draft("C", "2024-02-01", status="b")))

        self.assertEqual([o.order_id for o in _run(svc.list_orders())], ["B", "C", "A"])
        self.assertEqual(_run(svc.count_by_status()), {"a": 2, "b": 1})

    def test_update_missing_returns_none(self):
        svc = _service()
        self.assertIsNone(_run(svc.update_status("ghost", "done")))

    def test_delete_all_then_create(self):
        svc = _service()
        _run(svc.create_order(_draft("A")))
        self.assertTrue(_run(svc.delete_all_orders()))
        self.assertEqual(_run(svc.list_orders()), [])
        self.assertIsNotNone(_run(svc.create_order(_draft("B"))))
        self.assertEqual(len(_run(svc.list_orders())), 1)


class TestExportImport(unittest.TestCase):
    def test_export_then_import_restores_orders(self):
        svc = _service()
        _run(svc.create_order(_draft("A", "2024-01-01")))
        _run(svc.create_order(_draft("B", "2024-01-02", specialInstructions="duplex")))
        exported = _run(svc.export_orders())
        before = _run(svc.list_orders())

        self.assertEqual([o["orderId"] for o in json.loads(exported)], ["B", "A"])

        _run(svc.delete_all_orders())
        self.assertEqual(_run(svc.import_orders(exported)), 2)
        self.assertEqual(_run(svc.list_orders()), before)

    def test_invalid_import_leaves_store_untouched(self):
        messages = []
        svc = _service(notify=messages.append)
        _run(svc.create_order(_draft("A")))

        self.assertIsNone(_run(svc.import_orders("{not json")))
        self.assertIsNone(_run(svc.import_orders(json.dumps([{"orderId": "x"}]))))
        self.assertIsNone(_run(svc.import_orders(json.dumps({"orderId": "x"}))))

        self.assertEqual([o.order_id for o in _run(svc.list_orders())], ["A"])
        self.assertEqual(messages, ["Invalid orders file"] * 3)


class TestFailuresAreContained(unittest.TestCase):
    def setUp(self) -> None:
        self.messages = []
        self.svc = OrderService(_failing_store(), notify=self.messages.append)

    def test_create_returns_none(self):
        self.assertIsNone(_run(self.svc.create_order(_draft())))
        self.assertEqual(self.messages, ["Failed to save order"])

    def test_reads_return_empty_results(self):
        self.assertEqual(_run(self.svc.list_orders()), [])
        self.assertIsNone(_run(self.svc.get_order("O1")))
        self.assertEqual(_run(self.svc.count_by_status()), {})
        self.assertEqual(len(self.messages), 3)

    def test_writes_return_failure_values(self):
        self.assertIsNone(_run(self.svc.update_status("O1", "done")))
        self.assertFalse(_run(self.svc.delete_all_orders()))
        self.assertIsNone(_run(self.svc.import_orders("[]")))
        self.assertEqual(
            self.messages,
            ["Failed to update order status", "Failed to delete orders", "Failed to import orders"],
        )

    def test_parse_and_replace_fail_separately(self):
        self.assertIsNone(self.svc.parse_orders("{not json"))
        orders = self.svc.parse_orders("[]")
        self.assertEqual(orders, [])
        self.assertIsNone(_run(self.svc.replace_orders(orders)))
        self.assertEqual(self.messages, ["Invalid orders file", "Failed to import orders"])

    def test_without_notifier_failures_are_only_logged(self):
        svc = OrderService(_failing_store())
        with self.assertLogs("printdesk.services.order_service", level="ERROR") as logs:
            self.assertEqual(_run(svc.list_orders()), [])
        self.assertTrue(any(re.search("Failed to load orders", line) for line in logs.output))


class TestUnreadableOrdersFile(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = Path(tempfile.mkdtemp())
        path = self.tmp / "orders.json"
        path.write_bytes(b'[{"orderId": "\xff\xfe"}]')
        self.messages = []
        self.svc = OrderService(JsonFileOrderStore(path), notify=self.messages.append)

    def tearDown(self) -> None:
        shutil.rmtree(self.tmp, ignore_errors=True)

    def test_reads_degrade_to_empty_results(self):
        self.assertEqual(_run(self.svc.list_orders()), [])
        self.assertIsNone(_run(self.svc.get_order("O1")))
        self.assertEqual(_run(self.svc.count_by_status()), {})
        self.assertIsNone(_run(self.svc.create_order(_draft())))
        self.assertEqual(self.messages[0], "Failed to load orders")


if __name__ == "__main__":
    unittest.main()

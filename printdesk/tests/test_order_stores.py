"""Contract tests run against every order backend, plus backend-specific behaviour.

Run:
  python -m pytest printdesk/tests/test_order_stores.py -v
"""
from __future__ import annotations

import asyncio
import json
import os
import shutil
import tempfile
import threading
import unittest
from pathlib import Path
from unittest.mock import patch

from printdesk.config import DatabaseConfig, StorageConfig
from printdesk.core.exceptions import ConfigurationError, PersistenceError
from printdesk.infra.database import build_engine
from printdesk.stores import (
    DatabaseOrderStore,
    JsonFileOrderStore,
    KeyValueOrderStore,
    OrderStoreRegistry,
    build_order_store,
)
from printdesk.stores.types import FileReference, Order


def _run(coro):
    return asyncio.run(coro)


class _Clock:
    """Strictly increasing timestamps so updated_at changes are observable."""

    def __init__(self) -> None:
        self.tick = 0

    def __call__(self) -> str:
        self.tick += 1
        return f"2024-06-01T00:00:{self.tick:02d}.000Z"


def _order(order_id: str, order_date: str, status: str = "pending", **kwargs) -> Order:
    defaults = {
        "id": f"order_1700000000000_{order_id.lower()}",
        "order_id": order_id,
        "full_name": "Jane",
        "phone_number": "555-0100",
        "order_date": order_date,
        "status": status,
        "created_at": "2024-05-01T00:00:00.000Z",
        "updated_at": "2024-05-01T00:00:00.000Z",
    }
    defaults.update(kwargs)
    return Order(**defaults)


class OrderStoreContract:
    """Mixed into one TestCase per backend."""

    def make_store(self):
        raise NotImplementedError

    def setUp(self) -> None:
        self.tmp = Path(tempfile.mkdtemp())
        self.clock = _Clock()
        self.store = self.make_store()
        _run(self.store.initialize())

    def tearDown(self) -> None:
        _run(self.store.close())
        shutil.rmtree(self.tmp, ignore_errors=True)

    def _add(self, *orders: Order) -> None:
        for o in orders:
            _run(self.store.add(o))

    def test_empty_store_lists_nothing(self):
        self.assertEqual(_run(self.store.list_orders()), [])
        self.assertEqual(_run(self.store.count_by_status()), {})

    def test_add_then_get_round_trip(self):
        order = _order(
            "O1",
            "2024-01-01",
            print_type="bw",
            copies=3,
            paper_size="A4",
            total_cost=12.5,
            files=[FileReference(name="a.pdf", size=1024, type="application/pdf", path="/uploads/1_a.pdf")],
        )
        self._add(order)
        self.assertEqual(_run(self.store.get_order("O1")), order)

    def test_get_missing_returns_none(self):
        self._add(_order("O1", "2024-01-01"))
        self.assertIsNone(_run(self.store.get_order("nope")))

    def test_list_sorted_by_order_date_desc(self):
        self._add(
            _order("A", "2024-01-01"),
            _order("C", "2024-03-01T10:00:00.000Z"),
            _order("B", "2024-02-15T08:30:00+02:00"),
        )
        ids = [o.order_id for o in _run(self.store.list_orders())]
        self.assertEqual(ids, ["C", "B", "A"])

    def test_equal_dates_keep_insertion_order(self):
        self._add(
            _order("first", "2024-01-01"),
            _order("newer", "2024-02-01"),
            _order("second", "2024-01-01"),
            _order("third", "2024-01-01"),
        )
        ids = [o.order_id for o in _run(self.store.list_orders())]
        self.assertEqual(ids, ["newer", "first", "second", "third"])

    def test_unparseable_dates_sort_last(self):
        self._add(_order("bad", "not a date"), _order("good", "2020-01-01"))
        ids = [o.order_id for o in _run(self.store.list_orders())]
        self.assertEqual(ids, ["good", "bad"])

    def test_list_is_idempotent(self):
        self._add(_order("A", "2024-01-01"), _order("B", "2024-01-02"))
        self.assertEqual(_run(self.store.list_orders()), _run(self.store.list_orders()))

    def test_update_status_changes_only_status_and_updated_at(self):
        original = _order("O1", "2024-01-01", copies=2)
        self._add(original)

        updated = _run(self.store.update_status("O1", "done"))

        self.assertEqual(updated.status, "done")
        self.assertNotEqual(updated.updated_at, original.updated_at)
        stored = _run(self.store.get_order("O1"))
        self.assertEqual(stored, updated)
        unchanged = stored.model_dump(exclude={"status", "updated_at"})
        self.assertEqual(unchanged, original.model_dump(exclude={"status", "updated_at"}))

    def test_update_missing_order_returns_none_and_mutates_nothing(self):
        self._add(_order("O1", "2024-01-01"))
        before = _run(self.store.list_orders())

        self.assertIsNone(_run(self.store.update_status("missing", "done")))
        self.assertEqual(_run(self.store.list_orders()), before)

    def test_delete_all_then_add(self):
        self._add(_order("A", "2024-01-01"), _order("B", "2024-01-02"))
        _run(self.store.delete_all())
        self.assertEqual(_run(self.store.list_orders()), [])

        self._add(_order("C", "2024-01-03"))
        self.assertEqual([o.order_id for o in _run(self.store.list_orders())], ["C"])

    def test_count_by_status(self):
        self._add(
            _order("1", "2024-01-01", status="a"),
            _order("2", "2024-01-02", status="a"),
            _order("3", "2024-01-03", status="b"),
        )
        self.assertEqual(_run(self.store.count_by_status()), {"a": 2, "b": 1})

    def test_count_reflects_status_update(self):
        self._add(_order("1", "2024-01-01"), _order("2", "2024-01-02"))
        _run(self.store.update_status("1", "completed"))
        self.assertEqual(_run(self.store.count_by_status()), {"pending": 1, "completed": 1})

    def test_replace_all(self):
        self._add(_order("old", "2024-01-01"))
        _run(self.store.replace_all([_order("X", "2024-01-05"), _order("Y", "2024-01-06")]))
        ids = [o.order_id for o in _run(self.store.list_orders())]
        self.assertEqual(ids, ["Y", "X"])


class TestJsonFileOrderStore(OrderStoreContract, unittest.TestCase):
    def make_store(self):
        return JsonFileOrderStore(self.tmp / "data" / "orders.json", clock=self.clock)

    def test_initialize_creates_empty_array_file(self):
        path = self.tmp / "data" / "orders.json"
        self.assertTrue(path.exists())
        self.assertEqual(json.loads(path.read_text()), [])

    def test_file_is_pretty_printed_camel_case_array(self):
        self._add(_order("O1", "2024-01-01", special_instructions="staple"))
        text = (self.tmp / "data" / "orders.json").read_text()
        self.assertIn('\n  {\n    "orderId": "O1"', text)
        data = json.loads(text)
        self.assertEqual(data[0]["specialInstructions"], "staple")
        self.assertNotIn("totalCost", data[0])

    def test_duplicate_order_id_is_not_rejected(self):
        self._add(_order("dup", "2024-01-01"), _order("dup", "2024-01-02", id="order_2_dup"))
        self.assertEqual(len(_run(self.store.list_orders())), 2)

    def test_corrupt_file_raises_persistence_error(self):
        (self.tmp / "data" / "orders.json").write_text("{not json")
        with self.assertRaises(PersistenceError):
            _run(self.store.list_orders())

    def test_invalid_utf8_raises_persistence_error(self):
        (self.tmp / "data" / "orders.json").write_bytes(b'[{"orderId": "\xff\xfe"}]')
        with self.assertRaises(PersistenceError):
            _run(self.store.list_orders())
        with self.assertRaises(PersistenceError):
            _run(self.store.add(_order("O1", "2024-01-01")))

    def test_file_io_runs_off_the_event_loop_thread(self):
        threads = []
        read_raw = self.store._read_raw

        def _recording_read():
            threads.append(threading.get_ident())
            return read_raw()

        with patch.object(self.store, "_read_raw", _recording_read):
            _run(self.store.list_orders())
        self.assertEqual(len(threads), 1)
        self.assertNotEqual(threads[0], threading.get_ident())

    def test_failed_write_leaves_previous_file(self):
        self._add(_order("keep", "2024-01-01"))
        path = self.tmp / "data" / "orders.json"
        before = path.read_text()

        with patch("printdesk.stores.json_file.os.replace", side_effect=OSError("disk full")):
            with self.assertRaises(PersistenceError):
                _run(self.store.add(_order("lost", "2024-01-02")))

        self.assertEqual(path.read_text(), before)
        self.assertEqual(list(path.parent.glob("*.tmp")), [])


class TestKeyValueOrderStore(OrderStoreContract, unittest.TestCase):
    def make_store(self):
        self.storage: dict = {}
        return KeyValueOrderStore(self.storage, clock=self.clock)

    def test_collection_lives_under_single_key(self):
        self._add(_order("O1", "2024-01-01"))
        self.assertEqual(list(self.storage), ["xeroxOrders"])
        self.assertEqual(json.loads(self.storage["xeroxOrders"])[0]["orderId"], "O1")

    def test_delete_all_removes_key(self):
        self._add(_order("O1", "2024-01-01"))
        _run(self.store.delete_all())
        self.assertNotIn("xeroxOrders", self.storage)

    def test_stores_do_not_share_separate_mappings(self):
        other = KeyValueOrderStore({})
        self._add(_order("O1", "2024-01-01"))
        self.assertEqual(_run(other.list_orders()), [])

    def test_shelf_survives_reopen(self):
        filename = str(self.tmp / "kv")
        first = KeyValueOrderStore.open_shelf(filename)
        _run(first.add(_order("O1", "2024-01-01")))
        _run(first.close())

        second = KeyValueOrderStore.open_shelf(filename)
        try:
            self.assertEqual(_run(second.get_order("O1")).order_id, "O1")
        finally:
            _run(second.close())


class TestDatabaseOrderStore(OrderStoreContract, unittest.TestCase):
    def make_store(self):
        config = DatabaseConfig(url=f"sqlite+aiosqlite:///{self.tmp / 'orders.db'}")
        return DatabaseOrderStore(build_engine(config), clock=self.clock)

    def test_duplicate_order_id_raises_persistence_error(self):
        self._add(_order("dup", "2024-01-01"))
        with self.assertRaises(PersistenceError):
            _run(self.store.add(_order("dup", "2024-01-02", id="order_2_dup")))
        self.assertEqual(len(_run(self.store.list_orders())), 1)

    def test_initialize_is_repeatable(self):
        self._add(_order("O1", "2024-01-01"))
        _run(self.store.initialize())
        self.assertIsNotNone(_run(self.store.get_order("O1")))


class TestRegistry(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = Path(tempfile.mkdtemp())

    def tearDown(self) -> None:
        shutil.rmtree(self.tmp, ignore_errors=True)

    def test_builds_configured_backend(self):
        store = build_order_store(StorageConfig(data_dir=str(self.tmp), orders_file="o.json"))
        self.assertIsInstance(store, JsonFileOrderStore)
        self.assertEqual(store.path, self.tmp / "o.json")

        store = build_order_store(StorageConfig(backend="keyvalue", kv_storage_key="k"))
        self.assertIsInstance(store, KeyValueOrderStore)
        self.assertEqual(store.key, "k")

    @patch.dict(os.environ, {"DATABASE_URL": "mysql://h/db"})
    def test_bad_database_env_is_configuration_error(self):
        with self.assertRaises(ConfigurationError):
            build_order_store(StorageConfig(backend="database"))

    def test_custom_backend(self):
        registry = OrderStoreRegistry()
        registry.register("memory", lambda cfg: KeyValueOrderStore())
        self.assertEqual(registry.names, ["memory"])
        with self.assertRaises(KeyError):
            registry.build(StorageConfig())


if __name__ == "__main__":
    unittest.main()

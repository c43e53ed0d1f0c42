#!/usr/bin/env python3
"""
printdesk admin CLI – review orders and uploaded files from a terminal.

Usage:
  python -m printdesk.scripts.admin_cli

Uses the same env as the API: ORDER_BACKEND, DATA_DIR, UPLOADS_DIR,
DATABASE_URL (database backend), KV_STORAGE_FILE (keyvalue backend).
"""
from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Awaitable, Callable, Dict, List

from printdesk.config import load_storage_config
from printdesk.core.exceptions import ProjectError
from printdesk.core.logger import configure, get_logger
from printdesk.services import FileService, OrderService
from printdesk.stores import LIMITATION_NOTE, build_order_store

# Swappable for tests
_input_fn = input
_print_fn = print
_default_input_fn = input
_default_print_fn = print


def _set_io(input_fn=None, print_fn=None) -> None:
    """Inject I/O for tests. None = keep current."""
    global _input_fn, _print_fn
    if input_fn is not None:
        _input_fn = input_fn
    if print_fn is not None:
        _print_fn = print_fn


def _reset_io() -> None:
    global _input_fn, _print_fn
    _input_fn = _default_input_fn
    _print_fn = _default_print_fn


def _input(prompt: str, default: str = "") -> str:
    s = _input_fn(prompt).strip()
    return s if s else default


def _out(msg: str = "") -> None:
    _print_fn(msg)


def _confirm(prompt: str) -> bool:
    return _input(f"{prompt} Type 'yes' to confirm: ").lower() == "yes"


MENU_WIDTH = 44


def _show_menu(title: str, items: List[str]) -> str:
    top = "╭" + "─" * (MENU_WIDTH - 2) + "╮"
    bot = "╰" + "─" * (MENU_WIDTH - 2) + "╯"
    sep = "├" + "─" * (MENU_WIDTH - 2) + "┤"
    _out()
    _out(top)
    _out("│ " + title.center(MENU_WIDTH - 4) + " │")
    _out(sep)
    for item in items:
        _out("│ " + item.ljust(MENU_WIDTH - 4) + " │")
    _out(bot)
    return _input_fn("  Choice: ").strip()


def _format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


# ─── Orders ───────────────────────────────────────────────────────

async def list_orders(orders: OrderService, files: FileService) -> None:
    items = await orders.list_orders()
    if not items:
        _out("  No orders.")
        return
    for o in items:
        _out(
            f"  {o.order_id:<16} {o.order_date:<26} {o.status:<12} "
            f"{o.full_name} ({o.phone_number}) files={len(o.files)}"
        )
    _out(f"  {len(items)} order(s).")


async def show_counts(orders: OrderService, files: FileService) -> None:
    counts = await orders.count_by_status()
    if not counts:
        _out("  No orders.")
        return
    for status, count in sorted(counts.items()):
        _out(f"  {status:<14} {count}")


async def update_status(orders: OrderService, files: FileService) -> None:
    order_id = _input("  Order ID: ")
    if not order_id:
        _out("  Order ID required.")
        return
    status = _input("  New status [processing]: ", "processing")
    updated = await orders.update_status(order_id, status)
    if updated is None:
        _out(f"  Order {order_id} not found.")
        return
    _out(f"  ✓ {updated.order_id} → {updated.status} ({updated.updated_at})")


async def export_orders(orders: OrderService, files: FileService) -> None:
    target = Path(_input("  Export file [orders-export.json]: ", "orders-export.json"))
    target.write_text(await orders.export_orders(), encoding="utf-8")
    _out(f"  ✓ Exported → {target}")


async def import_orders(orders: OrderService, files: FileService) -> None:
    source = Path(_input("  Import file: "))
    if not source.is_file():
        _out(f"  File not found: {source}")
        return
    if not _confirm("  This replaces every stored order."):
        _out("  Cancelled.")
        return
    count = await orders.import_orders(source.read_text(encoding="utf-8"))
    if count is None:
        _out("  Import failed.")
        return
    _out(f"  ✓ Imported {count} order(s).")


async def delete_orders(orders: OrderService, files: FileService) -> None:
    if not _confirm("  Delete ALL orders? This cannot be undone."):
        _out("  Cancelled.")
        return
    if await orders.delete_all_orders():
        _out("  ✓ All orders deleted.")
    else:
        _out("  Delete failed.")


# ─── Files ────────────────────────────────────────────────────────

async def list_files(orders: OrderService, files: FileService) -> None:
    items = files.list_files()
    if not items:
        _out("  No uploaded files.")
        return
    for f in items:
        _out(f"  {f.name:<40} {_format_size(f.size):>10}  {f.type}")
    _out(f"  {len(items)} file(s).")


async def delete_files(orders: OrderService, files: FileService) -> None:
    if not _confirm("  Delete ALL uploaded files? This cannot be undone."):
        _out("  Cancelled.")
        return
    removed = files.delete_all_files()
    _out(f"  ✓ {removed} file(s) deleted.")


Handler = Callable[[OrderService, FileService], Awaitable[None]]

MAIN_ITEMS = [
    "1) List orders",
    "2) Order counts by status",
    "3) Update order status",
    "4) Export orders",
    "5) Import orders",
    "6) List uploaded files",
    "7) Delete all orders",
    "8) Delete all files",
    "0) Exit",
]

MAIN_HANDLERS: Dict[str, Handler] = {
    "1": list_orders,
    "2": show_counts,
    "3": update_status,
    "4": export_orders,
    "5": import_orders,
    "6": list_files,
    "7": delete_orders,
    "8": delete_files,
}


async def run_menu(orders: OrderService, files: FileService) -> None:
    while True:
        choice = _show_menu("printdesk admin", MAIN_ITEMS)
        if choice == "0":
            break
        handler = MAIN_HANDLERS.get(choice)
        if handler is None:
            _out("  Invalid choice.")
            continue
        try:
            await handler(orders, files)
        except (ProjectError, OSError) as e:
            _out(f"  Error: {e}")


async def main() -> None:
    configure()
    log = get_logger(__name__)
    try:
        config = load_storage_config()
    except ValueError as e:
        _out(f"Config error: {e}")
        sys.exit(1)

    store = build_order_store(config)
    try:
        await store.initialize()
    except ProjectError as e:
        _out(f"Could not open the {config.backend} order backend: {e}")
        sys.exit(1)

    orders = OrderService(store, notify=lambda msg: _out(f"  ! {msg}"))
    files = FileService(config.uploads_path, max_bytes=config.max_upload_bytes)
    log.info("Admin CLI started with %s backend", store.backend)

    _out(f"  ▸ printdesk admin: {store.backend} backend, uploads in {config.uploads_path}")
    if store.backend == "keyvalue":
        _out(f"  ▸ {LIMITATION_NOTE}")
    try:
        await run_menu(orders, files)
    finally:
        await store.close()
    _out("\nBye.")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()

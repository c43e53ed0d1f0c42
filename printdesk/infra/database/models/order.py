"""Order ORM model."""
from __future__ import annotations

from typing import Optional

from sqlalchemy import Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from printdesk.infra.database.models.base import Base, JSONVariant


class OrderRecord(Base):
    """One print order. Column names match the snake_case attributes of ``Order``."""

    __tablename__ = "orders"

    # Surrogate key; ascending pk is insertion order
    pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    order_id: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)

    full_name: Mapped[str] = mapped_column(Text, nullable=False)
    phone_number: Mapped[str] = mapped_column(Text, nullable=False)

    # Print options
    print_type: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    binding_color_type: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    copies: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    paper_size: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    print_side: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    selected_pages: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    color_pages: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    bw_pages: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    special_instructions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # [{name, size, type, path?}, ...]
    files: Mapped[list] = mapped_column(JSONVariant, nullable=False, default=list)

    order_date: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="pending", index=True)
    total_cost: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # ISO-8601 strings stamped by the service, not the database
    created_at: Mapped[str] = mapped_column(String(32), nullable=False)
    updated_at: Mapped[str] = mapped_column(String(32), nullable=False)

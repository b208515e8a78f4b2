"""
Catalog Module - Models
========================
Product with soft-delete lifecycle (Active / Deleted-at).
"""

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Union

from sqlalchemy import (
    Column, Integer, String, Text, Numeric, DateTime, CheckConstraint,
)
from sqlalchemy.sql import func
from config.database import Base


class ProductStatus(str, enum.Enum):
    ACTIVE = "active"
    DELETED = "deleted"


@dataclass(frozen=True)
class Active:
    status = ProductStatus.ACTIVE


@dataclass(frozen=True)
class Deleted:
    at: datetime
    status = ProductStatus.DELETED


Lifecycle = Union[Active, Deleted]


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_product_price"),
        CheckConstraint("stock >= 0", name="ck_product_stock"),
    )

    @property
    def lifecycle(self) -> Lifecycle:
        """Tagged soft-delete state: Active() or Deleted(at=...)."""
        if self.deleted_at is None:
            return Active()
        return Deleted(at=self.deleted_at)

    @property
    def status(self) -> ProductStatus:
        return self.lifecycle.status

    @property
    def is_deleted(self) -> bool:
        return self.status == ProductStatus.DELETED

    @property
    def available_stock(self) -> int:
        """Stock a shopper can actually buy. Deleted products have none."""
        if self.is_deleted:
            return 0
        return self.stock or 0

    @property
    def status_label(self) -> str:
        return {ProductStatus.ACTIVE: "Active", ProductStatus.DELETED: "Deleted"}[self.status]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description or "",
            "price": float(self.price),
            "stock": self.stock,
        }

    def to_admin_dict(self) -> dict:
        data = self.to_dict()
        data["status"] = self.status.value
        data["deleted_at"] = self.deleted_at.isoformat() if self.deleted_at else None
        return data

    def __repr__(self):
        return f"<Product {self.name} ({self.status.value})>"

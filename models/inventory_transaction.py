"""
InventoryTransaction model - append-only record of stock adjustments.

Each row snapshots the product's stock before and after the change, so the
rows for one product form a chain: every previous_stock equals the new_stock
of the row before it. Records are never updated or deleted; the mapper
listeners below abort any flush that tries.
"""
import enum

from sqlalchemy import (
     CheckConstraint,
     Column,
     DateTime,
     Enum,
     ForeignKey,
     Integer,
     String,
     Text,
     event,
)
from sqlalchemy.orm import relationship
from .base import Base, utcnow


class TransactionType(str, enum.Enum):
     """Direction of a stock adjustment."""
     ADD = "add"
     REMOVE = "remove"


class LedgerImmutableError(Exception):
     """Raised when code tries to modify or delete a committed transaction."""


class InventoryTransaction(Base):
     """
     Immutable stock-adjustment entry. Created only by the stock ledger,
     in the same database transaction that updates products.stock.
     """
     __tablename__ = "inventory_transactions"
     __table_args__ = (
          CheckConstraint("quantity > 0", name="ck_inventory_transactions_quantity_positive"),
          CheckConstraint("previous_stock >= 0", name="ck_inventory_transactions_previous_stock"),
          CheckConstraint("new_stock >= 0", name="ck_inventory_transactions_new_stock"),
          CheckConstraint(
               "(type = 'add' AND new_stock = previous_stock + quantity) OR "
               "(type = 'remove' AND new_stock = previous_stock - quantity)",
               name="ck_inventory_transactions_stock_arithmetic",
          ),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     product_id = Column(
          Integer,
          ForeignKey("products.id", ondelete="RESTRICT"),  # Keep history when a product is retired
          nullable=False,
          index=True
     )
     product_name = Column(String(255), nullable=False)  # Snapshot at commit time
     type = Column(
          Enum(
               TransactionType,
               name="inventory_transaction_type",
               create_constraint=True,
               values_callable=lambda members: [m.value for m in members],
          ),
          nullable=False,
          index=True
     )
     quantity = Column(Integer, nullable=False)
     previous_stock = Column(Integer, nullable=False)
     new_stock = Column(Integer, nullable=False)
     reason = Column(String(255), nullable=False)
     notes = Column(Text, nullable=True)
     performed_by = Column(String(100), nullable=True)  # External principal id, not a FK
     created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

     # Relationships
     product = relationship("Product", viewonly=True)

     def __repr__(self):
          return (
               f"<InventoryTransaction(id={self.id}, product_id={self.product_id}, "
               f"type='{self.type.value}', {self.previous_stock}->{self.new_stock})>"
          )

     @property
     def stock_delta(self) -> int:
          """Signed change this transaction applied to the product's stock."""
          return self.new_stock - self.previous_stock


@event.listens_for(InventoryTransaction, "before_update")
def _reject_update(mapper, connection, target):
     raise LedgerImmutableError(
          f"Inventory transaction {target.id} is immutable and cannot be updated"
     )


@event.listens_for(InventoryTransaction, "before_delete")
def _reject_delete(mapper, connection, target):
     raise LedgerImmutableError(
          f"Inventory transaction {target.id} is immutable and cannot be deleted"
     )

from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from .base import Base, utcnow


class Product(Base):
     """
     Product model - the stock-on-hand record the inventory ledger writes to.

     Products are created elsewhere; the ledger only reads and updates
     `stock`. `version` is bumped by the ORM on every update so a writer
     holding a stale row fails instead of overwriting a newer stock value.
     """
     __tablename__ = "products"
     __table_args__ = (
          CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     name = Column(String(255), nullable=False)
     stock = Column(Integer, nullable=False, default=0)
     version = Column(Integer, nullable=False)

     # Timestamps
     created_at = Column(DateTime, default=utcnow, nullable=False)
     updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

     # Relationships
     transactions = relationship(
          "InventoryTransaction",
          viewonly=True,
          order_by="InventoryTransaction.id.desc()",
     )

     __mapper_args__ = {"version_id_col": version}

     def __repr__(self):
          return f"<Product(id={self.id}, name='{self.name}', stock={self.stock})>"

"""Pluggy hook specifications for inventory notifications."""
import pluggy

PROJECT_NAME = "inventory"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class InventoryHookSpec:
     """Outbound events emitted by the stock ledger."""

     @hookspec
     def stock_changed(
          self,
          product_id: int,
          product_name: str,
          transaction_id: int,
          type: str,
          quantity: int,
          previous_stock: int,
          new_stock: int,
          created_at: str,
     ) -> None:
          """Called after a stock adjustment has been committed."""

"""Inventory ledger: the only writer of ``Product.stock_quantity``."""

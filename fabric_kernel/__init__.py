"""
Fabric Kernel

Shared foundation for the fabric trading core:
- Typed, immutable records for fabrics, rolls, purchases, orders, expenses
- A single normalization step for loosely typed document records
- Structured JSON logging and a typed exception hierarchy
- SQLAlchemy engine/base used by the record store
"""

__version__ = "0.1.0"

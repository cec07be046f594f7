"""
Poultry Inventory Engine

Builds the catalogue of sellable products for a poultry farm:
1. Reads active laying, growing and fattening batches plus daily egg production
2. Prices whole batches, single birds, eggs and egg cases
3. Caches each category independently with its own TTL
4. Invalidates only the categories a change actually touches
"""

__version__ = "0.1.0"

"""Storefront catalog API.

Category, subcategory and product catalog with per-user wishlists.
"""

__version__ = "0.1.0"

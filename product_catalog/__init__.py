"""Product catalog service for the grocery storefront"""

__version__ = "1.0.0"

"""
SplitBasket shared grocery ledger.

The package tracks grocery items bought by a group of members, links each item to the
purchase that paid for it, and derives who owes whom under an equal-split rule.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"

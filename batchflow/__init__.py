"""BatchFlow: batch ledger and purchase-order lifecycle engine."""

__version__ = "1.0.0"

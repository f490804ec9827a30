"""UDI Inventory: scan-driven medical supply counting with expiration tracking."""

__version__ = "0.1.0"

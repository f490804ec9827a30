"""HTTP API and scan parsing for UDI Inventory."""

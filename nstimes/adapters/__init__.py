"""Adapters layer - Concrete implementations of ports.

This module contains implementations of the port interfaces,
connecting the application to external systems like:
- Station data (static table, NS station search)
- The NS travel information API (trips, prices)
- Price caching (file-backed, null)
"""

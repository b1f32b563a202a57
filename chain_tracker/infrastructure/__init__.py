"""Infrastructure layer providing reusable components.

This module contains shared infrastructure components used across the chain tracker:
- HTTP client with retry logic, shared by every chain and the price feed
"""

from chain_tracker.infrastructure.http_client import HttpClient, JsonValue

__all__ = ["HttpClient", "JsonValue"]

"""Infrastructure layer components.

This module provides infrastructure components: the data store client,
the shared HTTP client and the LLM client.
"""

from curator.infrastructure.datastore import DataStore
from curator.infrastructure.http_client import HTTPClient
from curator.infrastructure.llm import LLMClient

__all__ = ["DataStore", "HTTPClient", "LLMClient"]

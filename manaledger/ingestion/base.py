"""Abstract source interface for ingestion."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List

import httpx


class BaseSource(ABC):
    """A provider dataset downloaded in one piece."""

    name: str

    @abstractmethod
    async def fetch(self, client: httpx.AsyncClient) -> List[Dict[str, Any]]:
        """Fetch the provider's raw records."""

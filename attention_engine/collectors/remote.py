"""
HTTP collector.

Pulls draft attention items from an external service that speaks the item
schema. The service is called as ``GET <url>?user_id=...&window_start=...``
and must answer with a JSON list of items.
"""

from datetime import datetime
from typing import Dict, List, Optional

import httpx

from attention_engine.collectors.base import Collector
from attention_engine.engine.errors import UpstreamError
from attention_engine.engine.models import AttentionItem


class HttpCollector(Collector):
    def __init__(
        self,
        name: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.name = name
        self.url = url
        self.headers = headers or {}
        self.timeout = timeout
        self.transport = transport

    async def collect(self, user_id: str, window_start: datetime) -> List[AttentionItem]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(
                    self.url,
                    headers=self.headers,
                    params={"user_id": user_id, "window_start": window_start.isoformat()}
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise UpstreamError(
                    f"{self.name} returned {e.response.status_code}: {e.response.text}"
                )
            except httpx.RequestError as e:
                raise UpstreamError(f"Failed to connect to {self.name}: {str(e)}")

            data = response.json()

        if not isinstance(data, list):
            raise UpstreamError(f"{self.name} returned {type(data).__name__}, expected a list")

        return [AttentionItem.model_validate(item) for item in data]

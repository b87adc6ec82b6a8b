"""
Net — тонкая обёртка над httpx.AsyncClient

Сетевые сбои (connect/read/timeout) превращаются в TransportError;
HTTP статусы обрабатывает вызывающий компонент, т.к. каждый из них
маппит non-2xx в свою ошибку.
"""

import json
from typing import Any

import httpx

from ilp_sender.errors import TransportError


async def send_request(client: httpx.AsyncClient, method: str, url: str, **kwargs: Any) -> httpx.Response:
    """
    Выполнение запроса.

    Raises:
        TransportError: сетевой сбой или некорректный URL
    """
    try:
        return await client.request(method, url, **kwargs)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise TransportError(f"{method} {url} failed: {e}") from e


def response_body(response: httpx.Response) -> Any:
    """JSON тело ответа, либо текст если тело не JSON."""
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text

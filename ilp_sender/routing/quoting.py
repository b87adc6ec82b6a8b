"""
Quoting — запрос котировки у коннектора и сравнение котировок

get_quote_from_connector никогда не поднимает исключение: любой сбой
(сеть, non-2xx, тело не по контракту) означает "нет котировки от этого
коннектора" и возвращается как None.

cheaper_quote — comparator по умолчанию (для reduce):
1. меньший source_amount выигрывает
2. при равном source_amount выигрывает больший destination_amount
3. полная ничья → первый (first-seen), выбор стабилен
"""

import logging
from typing import Callable

import httpx
import jsonschema
from pydantic import ValidationError as PydanticValidationError

from ilp_sender.core.contracts import validate_quote
from ilp_sender.core.domain.payment import PathQuery
from ilp_sender.core.domain.quote import Quote
from ilp_sender.core.net import response_body, send_request
from ilp_sender.errors import TransportError

logger = logging.getLogger(__name__)


QuoteComparator = Callable[[Quote, Quote], Quote]


def cheaper_quote(first: Quote, second: Quote) -> Quote:
    """Более дешёвая из двух котировок (при ничьей first)."""
    if second.source_amount < first.source_amount:
        return second
    if second.source_amount == first.source_amount and second.destination_amount > first.destination_amount:
        return second
    return first


async def get_quote_from_connector(
    client: httpx.AsyncClient, connector: str, query: PathQuery
) -> Quote | None:
    """
    GET <connector>/quote.

    Args:
        client: HTTP клиент
        connector: URI коннектора
        query: параметры пути

    Returns:
        Quote или None, если коннектор не дал пригодной котировки
    """
    url = f"{connector.rstrip('/')}/quote"
    try:
        response = await send_request(client, "GET", url, params=query.to_query_params())
    except TransportError as e:
        logger.warning(f"Quote request failed: connector={connector}, error={e}")
        return None

    if not response.is_success:
        logger.warning(f"No quote: connector={connector}, HTTP {response.status_code}")
        return None

    body = response_body(response)
    try:
        validate_quote(body)
        return Quote.model_validate(
            {
                **body,
                "connector": connector,
                "source_account": query.source_account,
                "destination_account": query.destination_account,
            }
        )
    except (jsonschema.ValidationError, PydanticValidationError) as e:
        logger.warning(f"Malformed quote: connector={connector}, error={e}")
        return None

"""
Public entry points: send_payment, execute_payment, find_path.

Все функции принимают либо готовые модели (PathQuery / PaymentParams), либо
плоский mapping параметров. Разбор и валидация выполняются до создания
HTTP клиента и любых сетевых вызовов.

Если client не передан, на время вызова создаётся собственный
httpx.AsyncClient.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Mapping

import httpx

from ilp_sender.config import SenderConfig
from ilp_sender.core.domain.payment import PathQuery, PaymentParams
from ilp_sender.core.domain.quote import Quote
from ilp_sender.core.domain.transfer import Transfer
from ilp_sender.errors import VALIDATION_STAGE, ValidationError
from ilp_sender.executor.payment_executor import Clock, PaymentExecutor
from ilp_sender.ledger.gateway import TlsClientFactory
from ilp_sender.routing.quoting import QuoteComparator


AMOUNT_KEYS = ("source_amount", "destination_amount")


def _as_path_query(params: PathQuery | Mapping[str, Any]) -> PathQuery:
    if isinstance(params, PathQuery):
        return params
    return PathQuery.from_params(params)


def _as_payment_params(params: PaymentParams | Mapping[str, Any]) -> PaymentParams:
    if isinstance(params, PaymentParams):
        return params
    return PaymentParams.from_params(params)


@asynccontextmanager
async def _client_scope(
    client: httpx.AsyncClient | None, config: SenderConfig
) -> AsyncIterator[httpx.AsyncClient]:
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(timeout=config.http_timeout_sec) as owned:
        yield owned


async def find_path(
    params: PathQuery | Mapping[str, Any],
    *,
    client: httpx.AsyncClient | None = None,
    config: SenderConfig | None = None,
    comparator: QuoteComparator | None = None,
) -> Quote | None:
    """
    Поиск самого дешёвого пути.

    Args:
        params: source_account, destination_account и ровно одно из
            source_amount / destination_amount

    Returns:
        Quote или None, если ни один коннектор не дал котировку
    """
    query = _as_path_query(params)
    config = config or SenderConfig()
    async with _client_scope(client, config) as http:
        executor = PaymentExecutor.create(http, config, comparator=comparator)
        return await executor.find_path(query)


async def execute_payment(
    quote: Quote | Mapping[str, Any],
    params: PaymentParams | Mapping[str, Any],
    *,
    client: httpx.AsyncClient | None = None,
    config: SenderConfig | None = None,
    tls_client_factory: TlsClientFactory | None = None,
    clock: Clock | None = None,
) -> Transfer:
    """Исполнение платежа по готовой котировке."""
    payment = _as_payment_params(params)
    config = config or SenderConfig()
    async with _client_scope(client, config) as http:
        executor = PaymentExecutor.create(
            http, config, tls_client_factory=tls_client_factory, clock=clock
        )
        return await executor.execute_payment(quote, payment)


async def send_payment(
    params: PaymentParams | Mapping[str, Any],
    query: PathQuery | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    config: SenderConfig | None = None,
    comparator: QuoteComparator | None = None,
    tls_client_factory: TlsClientFactory | None = None,
    clock: Clock | None = None,
) -> Transfer | None:
    """
    Поиск пути и исполнение платежа.

    Args:
        params: PaymentParams (тогда query обязателен) или плоский mapping
            со всеми параметрами, включая source_amount / destination_amount
        query: PathQuery, если params передан моделью

    Returns:
        Transfer со state от ledger, или None если пути нет

    Raises:
        ValidationError: некорректные параметры (до любого сетевого вызова)
    """
    if isinstance(params, PaymentParams):
        if query is None:
            raise ValidationError(
                "query is required when params is a PaymentParams model", stage=VALIDATION_STAGE
            )
        payment = params
    else:
        flat = dict(params)
        path_params = {
            "source_account": flat.get("source_account"),
            "destination_account": flat.get("destination_account"),
        }
        for key in AMOUNT_KEYS:
            path_params[key] = flat.pop(key, None)
        query = query or PathQuery.from_params(path_params)
        payment = PaymentParams.from_params(flat)

    config = config or SenderConfig()
    async with _client_scope(client, config) as http:
        executor = PaymentExecutor.create(
            http,
            config,
            comparator=comparator,
            tls_client_factory=tls_client_factory,
            clock=clock,
        )
        return await executor.send_payment(query, payment)

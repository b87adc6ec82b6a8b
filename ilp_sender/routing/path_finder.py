"""PathFinder — поиск самого дешёвого пути через коннекторы source ledger.

Шаги:
1. source account → source ledger (ResolutionError если не разрешается)
2. source ledger → список коннекторов (ResolutionError если недоступен)
3. котировки от всех коннекторов параллельно; сбои отдельных коннекторов изолированы
4. 0 котировок → None ("нет пути", не ошибка); иначе reduce comparator-ом

Side effects: только read-only сетевые запросы.
"""

import asyncio
import logging
from functools import reduce

import httpx

from ilp_sender.core.domain.payment import PathQuery
from ilp_sender.core.domain.quote import Quote
from ilp_sender.ledger.gateway import LedgerGateway
from ilp_sender.routing.quoting import QuoteComparator, cheaper_quote, get_quote_from_connector

logger = logging.getLogger(__name__)


class PathFinder:
    """Поиск пути и выбор котировки."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        gateway: LedgerGateway,
        comparator: QuoteComparator | None = None,
    ):
        """
        Args:
            client: HTTP клиент для запросов котировок
            gateway: LedgerGateway для разрешения аккаунта и списка коннекторов
            comparator: функция выбора более дешёвой котировки (default: cheaper_quote)
        """
        self._client = client
        self._gateway = gateway
        self._comparator = comparator or cheaper_quote

    async def find_path(self, query: PathQuery) -> Quote | None:
        """
        Поиск пути.

        Returns:
            Самая дешёвая Quote или None, если ни один коннектор не дал котировку

        Raises:
            ResolutionError: source account или список коннекторов не разрешаются
            TransportError: сетевой сбой при разрешении source account
        """
        source_ledger = await self._gateway.get_account_ledger(query.source_account)
        connectors = await self._gateway.get_ledger_connectors(source_ledger)

        # Порядок результатов gather совпадает с порядком коннекторов,
        # поэтому tie-break first-seen детерминирован
        results = await asyncio.gather(
            *(
                get_quote_from_connector(self._client, item.connector, query)
                for item in connectors
            )
        )
        quotes = [quote for quote in results if quote is not None]

        if not quotes:
            logger.info(
                f"No path: source_ledger={source_ledger}, connectors={len(connectors)}, quotes=0"
            )
            return None

        best = reduce(self._comparator, quotes)
        logger.info(
            f"Path found: connector={best.connector}, source_amount={best.source_amount}, "
            f"destination_amount={best.destination_amount}, quotes={len(quotes)}/{len(connectors)}"
        )
        return best

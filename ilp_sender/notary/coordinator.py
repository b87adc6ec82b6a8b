"""NotaryCoordinator — регистрация case у нотариуса (только atomic mode).

Case создаётся до derivation conditions: в atomic mode conditions привязаны
к case id. Сбой регистрации фатален, fallback в universal mode нет.
"""

import logging
from datetime import datetime
from typing import Any, Callable
from uuid import uuid4

import httpx
import jsonschema

from ilp_sender.core.contracts import validate_case
from ilp_sender.core.domain.case import Case
from ilp_sender.core.net import send_request
from ilp_sender.errors import NotarizationError, TransportError

logger = logging.getLogger(__name__)


class NotaryCoordinator:
    """Регистрация multi-party case у нотариуса."""

    def __init__(self, client: httpx.AsyncClient, case_id_factory: Callable[[], str] | None = None):
        """
        Args:
            client: HTTP клиент
            case_id_factory: генератор case id (default: uuid4)
        """
        self._client = client
        self._case_id_factory = case_id_factory or (lambda: str(uuid4()))

    async def setup_case(
        self,
        notary: str,
        receipt_condition: Any,
        transfers: list[dict[str, Any]],
        expires_at: datetime,
        case_id: str | None = None,
    ) -> str:
        """
        POST <notary>/cases.

        Args:
            notary: URI нотариуса
            receipt_condition: condition подтверждения получения
            transfers: payloads [source, destination]
            expires_at: deadline case
            case_id: заранее выбранный id (иначе генерируется)

        Returns:
            case id

        Raises:
            NotarizationError: non-2xx, сетевой сбой или некорректный case
        """
        case = Case(
            id=case_id or self._case_id_factory(),
            notary=notary,
            receipt_condition=receipt_condition,
            transfers=transfers,
            expires_at=expires_at,
        )
        body = case.to_wire()
        try:
            validate_case(body)
        except jsonschema.ValidationError as e:
            raise NotarizationError(f"Invalid case {case.uri}: {e.message}")

        url = f"{notary.rstrip('/')}/cases"
        try:
            response = await send_request(self._client, "POST", url, json=body)
        except TransportError as e:
            raise NotarizationError(f"Unable to reach notary {notary}: {e}") from e

        if not response.is_success:
            raise NotarizationError(
                f"Notary {notary} rejected case {case.id} (HTTP {response.status_code})"
            )

        logger.info(f"Case registered: case={case.uri}, expires_at={expires_at.isoformat()}")
        return case.id

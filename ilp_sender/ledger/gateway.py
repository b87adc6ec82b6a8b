"""LedgerGateway — разрешение аккаунтов и отправка transfer на ledger.

Операции:
- resolve_account: GET <account> → Account (ResolutionError на non-2xx)
- get_ledger_connectors: GET <ledger>/connectors (ResolutionError если недоступно)
- submit_transfer: PUT <transfer id> ровно один раз, без ретраев

Аутентификация submission: ровно один вариант:
- BasicCredentials: basic-auth на общем клиенте
- CertCredentials: отдельный TLS клиент с client certificate
Custom CA (опционально) тоже требует отдельного TLS клиента.
"""

import logging
import ssl
from typing import Callable

import httpx
import jsonschema

from ilp_sender.core.contracts import (
    validate_account,
    validate_connectors,
    validate_transfer,
    validate_transfer_state,
)
from ilp_sender.core.domain.account import Account, LedgerConnector
from ilp_sender.core.domain.payment import BasicCredentials, CertCredentials
from ilp_sender.core.domain.transfer import Transfer
from ilp_sender.core.net import response_body, send_request
from ilp_sender.errors import (
    AssemblyError,
    ResolutionError,
    SubmissionError,
    TransportError,
    ValidationError,
)

logger = logging.getLogger(__name__)


TlsClientFactory = Callable[[CertCredentials | None, str | None], httpx.AsyncClient]


def build_tls_client(
    credentials: CertCredentials | None, ca: str | None, timeout: float = 10.0
) -> httpx.AsyncClient:
    """TLS клиент с client certificate и/или custom CA.

    Raises:
        OSError / ssl.SSLError: файлы ключа, сертификата или CA не читаются
    """
    context = ssl.create_default_context(cafile=ca)
    if credentials is not None:
        context.load_cert_chain(certfile=credentials.cert, keyfile=credentials.key)
    return httpx.AsyncClient(verify=context, timeout=timeout)


class LedgerGateway:
    """Доступ к ledger: аккаунты, коннекторы, submission."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        tls_client_factory: TlsClientFactory | None = None,
        timeout: float = 10.0,
    ):
        """
        Args:
            client: общий HTTP клиент (владеет вызывающий код)
            tls_client_factory: фабрика TLS клиентов для cert-auth / custom CA
            timeout: таймаут для TLS клиентов по умолчанию
        """
        self._client = client
        self._tls_client_factory = tls_client_factory or (
            lambda credentials, ca: build_tls_client(credentials, ca, timeout)
        )

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    async def resolve_account(self, account: str) -> Account:
        """
        GET <account>.

        Raises:
            ResolutionError: non-200 или тело без name/ledger
            TransportError: сетевой сбой
        """
        response = await send_request(self._client, "GET", account)
        if response.status_code != 200:
            raise ResolutionError(
                f"Unable to identify ledger from account: {account} (HTTP {response.status_code})"
            )

        body = response_body(response)
        try:
            validate_account(body)
        except jsonschema.ValidationError as e:
            raise ResolutionError(f"Unable to identify ledger from account: {account}: {e.message}")

        return Account.model_validate(body)

    async def get_account_ledger(self, account: str) -> str:
        return (await self.resolve_account(account)).ledger

    async def get_ledger_connectors(self, ledger: str) -> list[LedgerConnector]:
        """
        GET <ledger>/connectors.

        Raises:
            ResolutionError: ledger недоступен, non-2xx или некорректный список
        """
        url = f"{ledger.rstrip('/')}/connectors"
        try:
            response = await send_request(self._client, "GET", url)
        except TransportError as e:
            raise ResolutionError(f"Unable to list connectors of ledger {ledger}: {e}") from e

        if not response.is_success:
            raise ResolutionError(
                f"Unable to list connectors of ledger {ledger} (HTTP {response.status_code})"
            )

        body = response_body(response)
        try:
            validate_connectors(body)
        except jsonschema.ValidationError as e:
            raise ResolutionError(f"Invalid connector list from ledger {ledger}: {e.message}")

        return [LedgerConnector.model_validate(item) for item in body]

    # -------------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------------

    async def submit_transfer(
        self,
        transfer: Transfer,
        credentials: BasicCredentials | CertCredentials,
        ca: str | None = None,
    ) -> str:
        """
        PUT <transfer.id> с полностью собранным transfer.

        Args:
            transfer: transfer с execution_condition и expires_at
            credentials: basic (username обязателен) или client certificate
            ca: путь к custom CA (опционально)

        Returns:
            state transfer, сообщённый ledger

        Raises:
            AssemblyError: transfer не готов к отправке
            ValidationError: неполные credentials или нечитаемые TLS файлы
            SubmissionError: non-2xx от ledger
            TransportError: сетевой сбой
        """
        body = transfer.to_wire()
        try:
            validate_transfer(body)
        except jsonschema.ValidationError as e:
            raise AssemblyError(f"Transfer {transfer.id} is not ready for submission: {e.message}")

        auth = None
        if isinstance(credentials, BasicCredentials):
            if not credentials.username:
                raise ValidationError("Basic credentials require a username")
            auth = httpx.BasicAuth(credentials.username, credentials.password)

        cert = credentials if isinstance(credentials, CertCredentials) else None
        if cert is None and ca is None:
            response = await send_request(self._client, "PUT", transfer.id, json=body, auth=auth)
        else:
            try:
                tls_client = self._tls_client_factory(cert, ca)
            except OSError as e:
                raise ValidationError(f"Unable to load TLS credentials: {e}") from e
            async with tls_client:
                response = await send_request(tls_client, "PUT", transfer.id, json=body, auth=auth)

        response_data = response_body(response)
        if not response.is_success:
            raise SubmissionError(
                f"Ledger rejected transfer {transfer.id} (HTTP {response.status_code})",
                status_code=response.status_code,
                body=response_data,
            )

        try:
            validate_transfer_state(response_data)
        except jsonschema.ValidationError as e:
            raise SubmissionError(
                f"Ledger returned no transfer state for {transfer.id}: {e.message}",
                status_code=response.status_code,
                body=response_data,
            )

        logger.info(f"Transfer submitted: id={transfer.id}, state={response_data['state']}")
        return response_data["state"]

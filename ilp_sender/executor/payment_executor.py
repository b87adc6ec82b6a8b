"""PaymentExecutor — оркестрация end-to-end исполнения платежа.

Порядок стадий:
1. QUOTING: PathFinder (только send_payment); нет пути → None
2. ASSEMBLING: transfers по котировке, memo, expiry
3. CASED (atomic): регистрация case у нотариуса
4. CONDITIONING: caller-supplied или derived conditions
5. SUBMITTING: разрешение source account, отправка первого transfer
6. SUBMITTED: transfer со state от ledger

Валидация параметров (atomic без notary_public_key, отсутствие
receipt_condition) выполняется при разборе PaymentParams, т.е. до любого
сетевого вызова.

Любая ошибка прерывает платёж и пробрасывается без изменений; к исключению
добавляется stage. Ретраев и компенсаций нет: уже созданное внешнее
состояние (например, case у нотариуса) остаётся вызывающему коду.
"""

import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable

import httpx

from ilp_sender.assembly.transfers import TransferAssembler, get_destination_transfer
from ilp_sender.config import SenderConfig
from ilp_sender.core.crypto.conditions import (
    derive_cancellation_condition,
    derive_execution_condition,
)
from ilp_sender.core.domain.payment import AtomicMode, BasicCredentials, PathQuery, PaymentParams
from ilp_sender.core.domain.quote import Quote
from ilp_sender.core.domain.transfer import Transfer
from ilp_sender.errors import PaymentError
from ilp_sender.executor.state_machine import PaymentStage, PaymentState
from ilp_sender.ledger.gateway import LedgerGateway, TlsClientFactory
from ilp_sender.notary.coordinator import NotaryCoordinator
from ilp_sender.routing.path_finder import PathFinder
from ilp_sender.routing.quoting import QuoteComparator

logger = logging.getLogger(__name__)


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PaymentExecutor:
    """Оркестратор: PathFinder → Assembler → Notary → Conditions → Gateway."""

    def __init__(
        self,
        path_finder: PathFinder,
        assembler: TransferAssembler,
        notary: NotaryCoordinator,
        gateway: LedgerGateway,
        clock: Clock | None = None,
    ):
        self.path_finder = path_finder
        self.assembler = assembler
        self.notary = notary
        self.gateway = gateway
        self._clock = clock or utc_now

    @classmethod
    def create(
        cls,
        client: httpx.AsyncClient,
        config: SenderConfig | None = None,
        comparator: QuoteComparator | None = None,
        tls_client_factory: TlsClientFactory | None = None,
        clock: Clock | None = None,
    ) -> "PaymentExecutor":
        """Сборка executor со всеми компонентами на одном HTTP клиенте."""
        config = config or SenderConfig()
        gateway = LedgerGateway(
            client, tls_client_factory=tls_client_factory, timeout=config.http_timeout_sec
        )
        return cls(
            path_finder=PathFinder(client, gateway, comparator=comparator),
            assembler=TransferAssembler(config.assembler),
            notary=NotaryCoordinator(client),
            gateway=gateway,
            clock=clock,
        )

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    async def find_path(self, query: PathQuery) -> Quote | None:
        return await self.path_finder.find_path(query)

    async def send_payment(self, query: PathQuery, params: PaymentParams) -> Transfer | None:
        """
        Поиск пути и исполнение.

        Returns:
            Transfer со state от ledger, или None если пути нет
        """
        state = PaymentState(stage=PaymentStage.QUOTING, params=params)
        try:
            quote = await self.path_finder.find_path(query)
        except PaymentError as e:
            self._fail(state, e)
            raise

        if quote is None:
            logger.info(
                f"Payment not executable: no path from {query.source_account} "
                f"to {query.destination_account}"
            )
            return None

        return await self._run(state.update(quote=quote))

    async def execute_payment(self, quote: Quote, params: PaymentParams) -> Transfer:
        """Исполнение по готовой котировке."""
        return await self._run(PaymentState(stage=PaymentStage.QUOTING, params=params, quote=quote))

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    async def _run(self, state: PaymentState) -> Transfer:
        stages: list[tuple[PaymentStage, Callable[[PaymentState], Awaitable[PaymentState]]]] = [
            (PaymentStage.ASSEMBLING, self._assemble),
        ]
        if state.params.is_atomic:
            stages.append((PaymentStage.CASED, self._setup_case))
        stages.append((PaymentStage.CONDITIONING, self._setup_conditions))
        stages.append((PaymentStage.SUBMITTING, self._submit))

        for stage, handler in stages:
            state = state.advance(stage)
            try:
                state = await handler(state)
            except PaymentError as e:
                self._fail(state, e)
                raise

        state = state.advance(PaymentStage.SUBMITTED)
        logger.info(f"Payment submitted: transfer={state.transfer.id}, state={state.transfer.state}")
        return state.transfer

    async def _assemble(self, state: PaymentState) -> PaymentState:
        params = state.params
        transfer = self.assembler.setup_transfers(state.quote, params.additional_info)
        transfer = self.assembler.attach_memos(
            transfer, source_memo=params.source_memo, destination_memo=params.destination_memo
        )
        transfer = self.assembler.setup_expiry(transfer, self._clock())
        return state.update(transfer=transfer)

    async def _setup_case(self, state: PaymentState) -> PaymentState:
        coordination = state.params.coordination
        transfer = state.transfer
        case_id = await self.notary.setup_case(
            notary=coordination.notary,
            receipt_condition=state.params.receipt_condition,
            transfers=[transfer.to_wire(), get_destination_transfer(transfer)],
            expires_at=transfer.expires_at,
            case_id=coordination.case_id,
        )
        return state.update(case_id=case_id)

    async def _setup_conditions(self, state: PaymentState) -> PaymentState:
        params = state.params
        coordination = params.coordination
        condition_params = {
            "receipt_condition": params.receipt_condition,
            "case_id": state.case_id,
            "notary": coordination.notary if isinstance(coordination, AtomicMode) else None,
            "notary_public_key": (
                coordination.notary_public_key if isinstance(coordination, AtomicMode) else None
            ),
        }

        # Переданные вызывающим кодом conditions авторитетны
        execution_condition = params.execution_condition or derive_execution_condition(
            **condition_params
        )
        cancellation_condition = None
        if params.is_atomic:
            cancellation_condition = params.cancellation_condition or derive_cancellation_condition(
                **condition_params
            )

        transfer = self.assembler.setup_conditions(
            state.transfer,
            is_atomic=params.is_atomic,
            execution_condition=execution_condition,
            cancellation_condition=cancellation_condition,
            case_id=state.case_id,
        )
        return state.update(transfer=transfer)

    async def _submit(self, state: PaymentState) -> PaymentState:
        params = state.params
        account = await self.gateway.resolve_account(params.source_account)

        credentials = params.credentials
        if isinstance(credentials, BasicCredentials) and not credentials.username:
            credentials = credentials.model_copy(update={"username": account.name})

        ledger_state = await self.gateway.submit_transfer(state.transfer, credentials, ca=params.ca)
        return state.update(transfer=state.transfer.model_copy(update={"state": ledger_state}))

    def _fail(self, state: PaymentState, error: PaymentError) -> PaymentState:
        if error.stage is None:
            error.stage = state.stage.value
        failed = state.fail(f"{type(error).__name__}: {error}")
        logger.error(f"Payment failed: stage={failed.failed_stage.value}, reason={failed.failure_reason}")
        return failed

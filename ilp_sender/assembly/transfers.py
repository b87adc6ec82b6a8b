"""
TransferAssembler — сборка цепочки условных transfers по котировке

Source transfer (на source ledger):
- debit:  source_account → source_amount
- credit: connector → source_amount, memo = {"destination_transfer": <payload>}

Destination transfer (на destination ledger): plain JSON payload в memo
- debit:  destination_connector_account → destination_amount
- credit: destination_account → destination_amount

Политика expiry:
- deadline transfer = now + expiry_duration
- если transfer зависит от downstream transfer, его deadline не раньше
  downstream deadline + min_message_window
- итоговый deadline строго позже now

Универсальный режим никогда не несёт cancellation_condition: его наличие служит
сигналом downstream ledger об atomic mode.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Mapping
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from ilp_sender.config import AssemblerConfig
from ilp_sender.core.domain.condition import parse_condition
from ilp_sender.core.domain.quote import Quote
from ilp_sender.core.domain.transfer import (
    DESTINATION_TRANSFER_MEMO_KEY,
    Credit,
    Debit,
    Transfer,
)
from ilp_sender.errors import AssemblyError

logger = logging.getLogger(__name__)


def new_transfer_id(ledger: str) -> str:
    """URI нового transfer на ledger."""
    return f"{ledger.rstrip('/')}/transfers/{uuid4()}"


def get_destination_transfer(transfer: Transfer) -> dict[str, Any]:
    """
    Payload destination transfer из memo первого credit.

    Raises:
        AssemblyError: memo не содержит destination transfer
    """
    memo = transfer.credits[0].memo or {}
    destination = memo.get(DESTINATION_TRANSFER_MEMO_KEY)
    if not isinstance(destination, dict):
        raise AssemblyError(f"Transfer {transfer.id} has no destination transfer in its credit memo")
    return destination


def _parse_transfer(payload: Mapping[str, Any]) -> Transfer:
    try:
        return Transfer.model_validate(payload)
    except PydanticValidationError as e:
        raise AssemblyError(f"Malformed transfer payload: {e}") from e


def _replace_destination(transfer: Transfer, destination: Transfer) -> Transfer:
    first_credit = transfer.credits[0]
    memo = dict(first_credit.memo or {})
    memo[DESTINATION_TRANSFER_MEMO_KEY] = destination.to_payload()
    credits = [first_credit.model_copy(update={"memo": memo}), *transfer.credits[1:]]
    return transfer.model_copy(update={"credits": credits})


class TransferAssembler:
    """Сборка transfers, memo, expiry и conditions."""

    def __init__(
        self,
        config: AssemblerConfig | None = None,
        id_factory: Callable[[str], str] | None = None,
    ):
        """
        Args:
            config: конфигурация (min_message_window_sec)
            id_factory: генератор URI transfer по URI ledger (default: uuid4)
        """
        self.config = config or AssemblerConfig()
        self._id_factory = id_factory or new_transfer_id

    # -------------------------------------------------------------------------
    # Assembly
    # -------------------------------------------------------------------------

    def setup_transfers(
        self, quote: Quote | Mapping[str, Any], additional_info: dict[str, Any] | None = None
    ) -> Transfer:
        """
        Source transfer с вложенным destination transfer.

        Raises:
            AssemblyError: quote без обязательных сумм/аккаунтов
        """
        if not isinstance(quote, Quote):
            try:
                quote = Quote.model_validate(quote)
            except PydanticValidationError as e:
                raise AssemblyError(f"Malformed quote: {e}") from e

        destination = Transfer(
            id=self._id_factory(quote.destination_ledger),
            ledger=quote.destination_ledger,
            debits=[Debit(account=quote.destination_connector_account, amount=quote.destination_amount)],
            credits=[Credit(account=quote.destination_account, amount=quote.destination_amount)],
            expiry_duration=quote.destination_expiry_duration,
        )

        source = Transfer(
            id=self._id_factory(quote.source_ledger),
            ledger=quote.source_ledger,
            debits=[Debit(account=quote.source_account, amount=quote.source_amount)],
            credits=[
                Credit(
                    account=quote.connector,
                    amount=quote.source_amount,
                    memo={DESTINATION_TRANSFER_MEMO_KEY: destination.to_payload()},
                )
            ],
            expiry_duration=quote.source_expiry_duration,
            additional_info=additional_info,
        )

        logger.debug(f"Transfers assembled: source={source.id}, destination={destination.id}")
        return source

    def attach_memos(
        self,
        transfer: Transfer,
        source_memo: dict[str, Any] | None = None,
        destination_memo: dict[str, Any] | None = None,
    ) -> Transfer:
        """Memo отправителя (первый debit) и получателя (первый credit destination transfer)."""
        if destination_memo:
            destination = _parse_transfer(get_destination_transfer(transfer))
            first_credit = destination.credits[0].model_copy(update={"memo": destination_memo})
            destination = destination.model_copy(
                update={"credits": [first_credit, *destination.credits[1:]]}
            )
            transfer = _replace_destination(transfer, destination)

        if source_memo:
            first_debit = transfer.debits[0].model_copy(update={"memo": source_memo})
            transfer = transfer.model_copy(update={"debits": [first_debit, *transfer.debits[1:]]})

        return transfer

    # -------------------------------------------------------------------------
    # Expiry
    # -------------------------------------------------------------------------

    def transfer_expires_at(self, now: datetime, transfer: Transfer | Mapping[str, Any]) -> datetime:
        """
        Абсолютный deadline transfer.

        Args:
            now: текущее время (timezone-aware)
            transfer: Transfer или его payload

        Returns:
            max(now + expiry_duration, downstream_deadline + min_message_window)

        Raises:
            AssemblyError: нет expiry_duration/expires_at, deadline вне диапазона datetime
                или не в будущем
        """
        if not isinstance(transfer, Transfer):
            transfer = _parse_transfer(transfer)

        try:
            if transfer.expiry_duration is not None:
                expires_at = now + timedelta(seconds=float(transfer.expiry_duration))
            elif transfer.expires_at is not None:
                expires_at = transfer.expires_at
            else:
                raise AssemblyError(
                    f"Transfer {transfer.id} has neither expiry_duration nor expires_at"
                )

            memo = transfer.credits[0].memo or {}
            downstream = memo.get(DESTINATION_TRANSFER_MEMO_KEY)
            if isinstance(downstream, dict):
                downstream_expires_at = self.transfer_expires_at(now, downstream)
                margin = timedelta(seconds=self.config.min_message_window_sec)
                expires_at = max(expires_at, downstream_expires_at + margin)
        except OverflowError as e:
            raise AssemblyError(f"Transfer {transfer.id} expiry is out of range: {e}") from e

        if expires_at <= now:
            raise AssemblyError(f"Transfer {transfer.id} would expire at {expires_at}, not after {now}")
        return expires_at

    def setup_expiry(self, transfer: Transfer, now: datetime) -> Transfer:
        """expires_at для source transfer и вложенного destination transfer."""
        destination = _parse_transfer(get_destination_transfer(transfer))
        destination = destination.model_copy(
            update={
                "expires_at": self.transfer_expires_at(now, destination),
                "expiry_duration": None,
            }
        )
        expires_at = self.transfer_expires_at(now, transfer)
        transfer = _replace_destination(transfer, destination)
        return transfer.model_copy(update={"expires_at": expires_at, "expiry_duration": None})

    # -------------------------------------------------------------------------
    # Conditions
    # -------------------------------------------------------------------------

    def setup_conditions(
        self,
        transfer: Transfer,
        is_atomic: bool,
        execution_condition: Any,
        cancellation_condition: Any = None,
        case_id: str | None = None,
    ) -> Transfer:
        """
        Conditions (и в atomic mode case id) для source и destination transfer.

        Raises:
            AssemblyError: нет execution condition; в atomic mode нет cancellation/case
        """
        if not execution_condition:
            raise AssemblyError("execution_condition is required")

        update: dict[str, Any] = {"execution_condition": parse_condition(execution_condition)}
        if is_atomic:
            if not cancellation_condition or not case_id:
                raise AssemblyError("Atomic mode requires cancellation_condition and case_id")
            update["cancellation_condition"] = parse_condition(cancellation_condition)
            update["case_id"] = case_id
        else:
            update["cancellation_condition"] = None
            update["case_id"] = None

        destination = _parse_transfer(get_destination_transfer(transfer)).model_copy(update=update)
        transfer = _replace_destination(transfer, destination)
        return transfer.model_copy(update=update)

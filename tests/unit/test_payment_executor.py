"""
Тесты PaymentExecutor и public API (send_payment / execute_payment / find_path)

Проверяет end-to-end поток на фейковой сети:
1. Universal mode: transfer с execution condition, без cancellation
2. Atomic mode: case до derivation conditions, case id в transfer
3. Сбой нотариуса прерывает платёж до submission
4. ValidationError до любого сетевого вызова
5. Пометку исключений стадией
"""

import base64
import json
import uuid
from decimal import Decimal

import httpx
import pytest

from ilp_sender import (
    AssemblerConfig,
    AssemblyError,
    NotarizationError,
    ResolutionError,
    SenderConfig,
    SubmissionError,
    ValidationError,
    execute_payment,
    find_path,
    send_payment,
)
from ilp_sender.assembly import get_destination_transfer
from ilp_sender.core.crypto import derive_execution_condition
from ilp_sender.core.domain import PathQuery, PaymentParams, condition_to_json
from ilp_sender.executor import PaymentExecutor
from tests.fakes import (
    CONNECTOR,
    DESTINATION_ACCOUNT,
    NOTARY,
    NOW,
    SOURCE_ACCOUNT,
    SOURCE_LEDGER,
    quote_data,
)


CASES_URL = f"{NOTARY}/cases"


def clock():
    return NOW


@pytest.fixture
def payment_params(receipt_condition) -> dict:
    return {
        "source_account": SOURCE_ACCOUNT,
        "destination_account": DESTINATION_ACCOUNT,
        "source_password": "secret",
        "receipt_condition": condition_to_json(receipt_condition),
    }


@pytest.fixture
def atomic_params(payment_params, notary_public_key) -> dict:
    return {**payment_params, "notary": NOTARY, "notary_public_key": notary_public_key}


# =============================================================================
# UNIVERSAL MODE
# =============================================================================


class TestUniversalPayment:
    """Исполнение без нотариуса."""

    @pytest.mark.asyncio
    async def test_execute_payment(self, ledger_network, payment_params, receipt_condition):
        """Quote → transfer, submission с basic-auth, state от ledger."""
        transfer = await execute_payment(
            quote_data(), payment_params, client=ledger_network.client(), clock=clock
        )

        assert transfer.state == "prepared"
        assert transfer.id.startswith(f"{SOURCE_LEDGER}/transfers/")
        assert [(d.account, d.amount) for d in transfer.debits] == [(SOURCE_ACCOUNT, Decimal("10"))]
        assert len(transfer.credits) == 1
        assert transfer.credits[0].account == CONNECTOR
        assert transfer.execution_condition == receipt_condition
        assert transfer.cancellation_condition is None
        assert transfer.case_id is None

        destination = get_destination_transfer(transfer)
        assert destination["credits"][0]["account"] == DESTINATION_ACCOUNT
        assert destination["execution_condition"]["digest"] == receipt_condition.digest

        assert ledger_network.calls("POST") == []
        (put,) = ledger_network.calls("PUT")
        assert str(put.url) == transfer.id
        expected = base64.b64encode(b"alice:secret").decode("ascii")
        assert put.headers["Authorization"] == f"Basic {expected}"

    @pytest.mark.asyncio
    async def test_small_amounts_submitted_fixed_point(self, ledger_network, payment_params):
        transfer = await execute_payment(
            quote_data(source_amount="0.0000001", destination_amount="0.00000005"),
            payment_params,
            client=ledger_network.client(),
            clock=clock,
        )

        body = json.loads(ledger_network.calls("PUT")[0].content)
        assert body["debits"][0]["amount"] == "0.0000001"
        assert body["credits"][0]["amount"] == "0.0000001"
        destination = body["credits"][0]["memo"]["destination_transfer"]
        assert destination["credits"][0]["amount"] == "0.00000005"
        assert transfer.debits[0].amount == Decimal("0.0000001")

    @pytest.mark.asyncio
    async def test_explicit_username_used(self, ledger_network, payment_params):
        await execute_payment(
            quote_data(),
            {**payment_params, "source_username": "alice-admin"},
            client=ledger_network.client(),
            clock=clock,
        )

        (put,) = ledger_network.calls("PUT")
        expected = base64.b64encode(b"alice-admin:secret").decode("ascii")
        assert put.headers["Authorization"] == f"Basic {expected}"

    @pytest.mark.asyncio
    async def test_memos_and_additional_info_submitted(self, ledger_network, payment_params):
        transfer = await execute_payment(
            quote_data(),
            {
                **payment_params,
                "source_memo": {"note": "rent"},
                "destination_memo": {"invoice": 7},
                "additional_info": {"cases": "none"},
            },
            client=ledger_network.client(),
            clock=clock,
        )

        body = json.loads(ledger_network.calls("PUT")[0].content)
        assert body["debits"][0]["memo"] == {"note": "rent"}
        assert body["credits"][0]["memo"]["destination_transfer"]["credits"][0]["memo"] == {"invoice": 7}
        assert body["additional_info"] == {"cases": "none"}
        assert transfer.additional_info == {"cases": "none"}

    @pytest.mark.asyncio
    async def test_caller_supplied_execution_condition(self, ledger_network, payment_params):
        custom = {"type": "preimage-sha256", "digest": "ab" * 32}

        transfer = await execute_payment(
            quote_data(),
            {**payment_params, "execution_condition": custom},
            client=ledger_network.client(),
            clock=clock,
        )

        assert condition_to_json(transfer.execution_condition) == custom

    @pytest.mark.asyncio
    async def test_send_payment_flat_params(self, ledger_network, payment_params):
        transfer = await send_payment(
            {**payment_params, "source_amount": "10"}, client=ledger_network.client(), clock=clock
        )

        assert transfer.state == "prepared"
        quote_request = ledger_network.calls("GET", f"{CONNECTOR}/quote")[0]
        assert quote_request.url.params["source_amount"] == "10"

    @pytest.mark.asyncio
    async def test_send_payment_models(self, ledger_network, payment_params):
        query = PathQuery.from_params(
            {"source_account": SOURCE_ACCOUNT, "destination_account": DESTINATION_ACCOUNT, "destination_amount": "9"}
        )
        params = PaymentParams.from_params(payment_params)

        transfer = await send_payment(params, query, client=ledger_network.client(), clock=clock)

        assert transfer.state == "prepared"

    @pytest.mark.asyncio
    async def test_send_payment_without_path(self, network, payment_params):
        network.add("GET", SOURCE_ACCOUNT, json={"id": SOURCE_ACCOUNT, "name": "alice", "ledger": SOURCE_LEDGER})
        network.add("GET", f"{SOURCE_LEDGER}/connectors", json=[{"connector": CONNECTOR}])

        result = await send_payment(
            {**payment_params, "source_amount": "10"}, client=network.client(), clock=clock
        )

        assert result is None
        assert network.calls("PUT") == []

    @pytest.mark.asyncio
    async def test_find_path(self, ledger_network):
        quote = await find_path(
            {"source_account": SOURCE_ACCOUNT, "destination_account": DESTINATION_ACCOUNT, "source_amount": "10"},
            client=ledger_network.client(),
        )

        assert quote.connector == CONNECTOR
        assert quote.source_amount == Decimal("10")
        assert ledger_network.calls("PUT") == []


# =============================================================================
# ATOMIC MODE
# =============================================================================


class TestAtomicPayment:
    """Исполнение через нотариуса."""

    @pytest.mark.asyncio
    async def test_case_created_before_conditions(self, ledger_network, atomic_params, notary_public_key):
        """Case с generated UUID, conditions привязаны к нему."""
        ledger_network.add("POST", CASES_URL, status=201, json={"state": "proposed"})

        transfer = await execute_payment(
            quote_data(), atomic_params, client=ledger_network.client(), clock=clock
        )

        assert str(uuid.UUID(transfer.case_id)) == transfer.case_id
        assert transfer.cancellation_condition is not None
        assert transfer.cancellation_condition != transfer.execution_condition
        assert transfer.execution_condition == derive_execution_condition(
            atomic_params["receipt_condition"],
            case_id=transfer.case_id,
            notary=NOTARY,
            notary_public_key=notary_public_key,
        )

        destination = get_destination_transfer(transfer)
        assert destination["case_id"] == transfer.case_id
        assert "cancellation_condition" in destination

        methods = [request.method for request in ledger_network.requests]
        assert methods.index("POST") < methods.index("PUT")
        case_body = json.loads(ledger_network.calls("POST", CASES_URL)[0].content)
        assert case_body["id"] == f"{NOTARY}/cases/{transfer.case_id}"
        assert case_body["notification_targets"][0] == f"{transfer.id}/fulfillment"

    @pytest.mark.asyncio
    async def test_caller_supplied_case_id(self, ledger_network, atomic_params):
        ledger_network.add("POST", CASES_URL, status=201, json={})

        transfer = await execute_payment(
            quote_data(),
            {**atomic_params, "case_id": "case-42"},
            client=ledger_network.client(),
            clock=clock,
        )

        assert transfer.case_id == "case-42"

    @pytest.mark.asyncio
    async def test_notary_failure_stops_payment(self, ledger_network, atomic_params):
        ledger_network.add("POST", CASES_URL, status=500, json={"id": "InternalError"})

        with pytest.raises(NotarizationError) as exc_info:
            await execute_payment(quote_data(), atomic_params, client=ledger_network.client(), clock=clock)

        assert exc_info.value.stage == "CASED"
        assert ledger_network.calls("PUT") == []
        assert ledger_network.calls("GET", SOURCE_ACCOUNT) == []


# =============================================================================
# VALIDATION / FAILURES
# =============================================================================


class TestPaymentFailures:
    """Ошибки валидации и стадий."""

    @pytest.mark.asyncio
    async def test_atomic_without_public_key_before_network(self, network, payment_params):
        with pytest.raises(ValidationError):
            await send_payment(
                {**payment_params, "notary": NOTARY, "source_amount": "10"},
                client=network.client(),
            )
        assert network.requests == []

    @pytest.mark.asyncio
    async def test_missing_receipt_condition_before_network(self, network, payment_params):
        del payment_params["receipt_condition"]
        with pytest.raises(ValidationError):
            await execute_payment(quote_data(), payment_params, client=network.client())
        assert network.requests == []

    @pytest.mark.asyncio
    async def test_missing_amount_before_network(self, network, payment_params):
        with pytest.raises(ValidationError):
            await send_payment(payment_params, client=network.client())
        assert network.requests == []

    @pytest.mark.asyncio
    async def test_model_params_require_query(self, network, payment_params):
        with pytest.raises(ValidationError):
            await send_payment(PaymentParams.from_params(payment_params), client=network.client())

    @pytest.mark.asyncio
    async def test_malformed_quote(self, ledger_network, payment_params):
        quote = quote_data()
        del quote["destination_amount"]

        with pytest.raises(AssemblyError) as exc_info:
            await execute_payment(quote, payment_params, client=ledger_network.client(), clock=clock)

        assert exc_info.value.stage == "ASSEMBLING"
        assert ledger_network.requests == []

    @pytest.mark.asyncio
    async def test_out_of_range_expiry(self, ledger_network, payment_params):
        with pytest.raises(AssemblyError) as exc_info:
            await execute_payment(
                quote_data(source_expiry_duration="100000000000000"),
                payment_params,
                client=ledger_network.client(),
                clock=clock,
            )

        assert exc_info.value.stage == "ASSEMBLING"
        assert ledger_network.calls("PUT") == []

    @pytest.mark.asyncio
    async def test_parse_errors_tagged_with_validation_stage(self, network, payment_params):
        with pytest.raises(ValidationError) as exc_info:
            await send_payment(payment_params, client=network.client())
        assert exc_info.value.stage == "VALIDATING"

        with pytest.raises(ValidationError) as exc_info:
            await send_payment(PaymentParams.from_params(payment_params), client=network.client())
        assert exc_info.value.stage == "VALIDATING"

    @pytest.mark.asyncio
    async def test_ledger_rejection_tagged_with_stage(self, network, payment_params):
        network.add("GET", SOURCE_ACCOUNT, json={"id": SOURCE_ACCOUNT, "name": "alice", "ledger": SOURCE_LEDGER})
        network.add_prefix(
            "PUT",
            f"{SOURCE_LEDGER}/transfers/",
            lambda request: httpx.Response(422, json={"id": "InsufficientFundsError"}),
        )

        with pytest.raises(SubmissionError) as exc_info:
            await execute_payment(quote_data(), payment_params, client=network.client(), clock=clock)

        assert exc_info.value.stage == "SUBMITTING"
        assert exc_info.value.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_source_account_during_quoting(self, network, payment_params):
        with pytest.raises(ResolutionError) as exc_info:
            await send_payment({**payment_params, "source_amount": "10"}, client=network.client())

        assert exc_info.value.stage == "QUOTING"


# =============================================================================
# EXECUTOR WIRING
# =============================================================================


@pytest.mark.asyncio
async def test_executor_uses_configured_message_window(ledger_network, payment_params):
    config = SenderConfig(assembler=AssemblerConfig(min_message_window_sec=30.0))
    executor = PaymentExecutor.create(ledger_network.client(), config, clock=clock)

    transfer = await executor.execute_payment(quote_data(), PaymentParams.from_params(payment_params))

    # destination 5s + window 30s > source 10s
    assert (transfer.expires_at - NOW).total_seconds() == 35

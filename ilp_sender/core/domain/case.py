"""Case — запись нотариуса, связывающая receipt condition с набором transfers."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from .condition import Condition


def case_uri(notary: str, case_id: str) -> str:
    """URI case у нотариуса."""
    return f"{notary.rstrip('/')}/cases/{case_id}"


class Case(BaseModel):
    """Case нотариуса (immutable после создания)."""

    id: str = Field(..., min_length=1)
    notary: str = Field(..., min_length=1)
    receipt_condition: Condition
    transfers: list[dict[str, Any]] = Field(..., min_length=2, max_length=2)
    expires_at: datetime

    model_config = {"frozen": True}

    @property
    def uri(self) -> str:
        return case_uri(self.notary, self.id)

    def to_wire(self) -> dict[str, Any]:
        """Тело запроса создания case."""
        payload = self.model_dump(mode="json", exclude_none=True)
        return {
            "id": self.uri,
            "state": "proposed",
            "execution_condition": payload["receipt_condition"],
            "expires_at": payload["expires_at"],
            "notaries": [{"url": self.notary}],
            "notification_targets": [
                f"{transfer['id']}/fulfillment" for transfer in self.transfers
            ],
        }

"""Tagged metadata variants attached to ledger entries

Each known context has its own schema; anything else is kept as an opaque
variant instead of an untyped dict.
"""

import json
from typing import Annotated, Any, Dict, Literal, Optional, Union
from pydantic import BaseModel, Field, TypeAdapter


class WithdrawalDetails(BaseModel):
    kind: Literal["withdrawal"] = "withdrawal"
    payment_method: str
    bank_details: Optional[Dict[str, Any]] = None
    notes: Optional[str] = None


class AddonDetails(BaseModel):
    kind: Literal["addon"] = "addon"
    addon_name: str
    quantity: Optional[int] = None
    description: Optional[str] = None


class ReversalDetails(BaseModel):
    kind: Literal["reversal"] = "reversal"
    reversal_of_transaction_id: str
    source: str
    reason: Optional[str] = None


class OpaqueDetails(BaseModel):
    kind: Literal["opaque"] = "opaque"
    data: Dict[str, Any] = Field(default_factory=dict)


TransactionMetadata = Annotated[
    Union[WithdrawalDetails, AddonDetails, ReversalDetails, OpaqueDetails],
    Field(discriminator="kind"),
]

_adapter = TypeAdapter(TransactionMetadata)


def dump_metadata(details: Optional[TransactionMetadata]) -> Optional[str]:
    if details is None:
        return None
    return details.model_dump_json()


def load_metadata(raw: Optional[str]) -> Optional[TransactionMetadata]:
    """Parse stored metadata; unknown kinds come back as OpaqueDetails"""
    if not raw:
        return None
    payload = json.loads(raw)
    if payload.get("kind") not in ("withdrawal", "addon", "reversal", "opaque"):
        return OpaqueDetails(data=payload)
    return _adapter.validate_python(payload)

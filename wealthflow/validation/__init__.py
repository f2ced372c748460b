"""Validation package."""

from wealthflow.validation.validator import (
    TransactionDraft,
    build_transaction,
    draft_from_transaction,
    field_errors,
    validate_store_payload,
)

__all__ = [
    "TransactionDraft",
    "build_transaction",
    "draft_from_transaction",
    "field_errors",
    "validate_store_payload",
]

"""
Backup Import / Export

Export wraps the store in an envelope with the export time. Import accepts
either that envelope or a bare store document, checks the minimal shape,
then migrates it to the current schema.
"""

import json
from datetime import date
from typing import Any, Optional

import structlog

from wealthflow.ids import Clock, IdGenerator, iso_timestamp, new_id, utc_now
from wealthflow.migrations import migrate
from wealthflow.models.ledger import ImportResult, Store
from wealthflow.validation import validate_store_payload


logger = structlog.get_logger(__name__)

INVALID_JSON_MESSAGE = "Import failed: invalid JSON file."
BACKUP_FILENAME_TEMPLATE = "wealthflow-backup-{day}.json"


def export_payload(store: Store, now: Clock = utc_now) -> dict[str, Any]:
    return {
        "exportedAt": iso_timestamp(now),
        "store": store.to_document(),
    }


def export_json(store: Store, now: Clock = utc_now) -> str:
    """Backup file contents, pretty-printed with 2-space indent."""
    return json.dumps(export_payload(store, now), indent=2, ensure_ascii=False)


def backup_filename(today: Optional[date] = None, now: Clock = utc_now) -> str:
    day = today or now().date()
    return BACKUP_FILENAME_TEMPLATE.format(day=day.isoformat())


def parse_backup(
    text: str,
    new_id: IdGenerator = new_id,
    now: Clock = utc_now,
) -> ImportResult:
    """
    Parse an uploaded backup into a current-schema Store.

    Returns an ImportResult carrying either the store or a user-facing
    error message. Nothing is persisted here.
    """
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        logger.info("backup_rejected", reason="invalid_json", error=str(e))
        return ImportResult(error=INVALID_JSON_MESSAGE)

    candidate = parsed
    if isinstance(parsed, dict) and parsed.get("store") is not None:
        candidate = parsed["store"]

    error = validate_store_payload(candidate)
    if error:
        logger.info("backup_rejected", reason=error)
        return ImportResult(error=error)

    store = migrate(candidate, new_id=new_id, now=now)
    logger.info("backup_parsed", transactions=len(store.transactions))
    return ImportResult(store=store)

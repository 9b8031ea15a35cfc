"""
Backup, Restore and CSV Export

A backup is the persisted JSON document itself, pretty-printed. Restoring
one replaces local data wholesale, so the file is shape-checked first.

The CSV export joins fields with bare commas and does not quote them,
so titles or names that contain commas will shift columns in the output.
"""

import json
from datetime import date
from typing import Optional, Union

from pydantic import ValidationError

from investtrack.models.portfolio import AppState, decimal_to_number
from investtrack.queries import PortfolioQueries


CSV_HEADERS = ["Date", "Type", "Amount", "Direction", "Investment", "Customer"]
CSV_FILENAME = "transactions_export.csv"
REQUIRED_COLLECTIONS = ("customers", "investments")


class BackupFormatError(Exception):
    """The file is not an InvestTrack backup."""
    pass


def backup_filename(on: Optional[date] = None) -> str:
    """Download name for a backup taken on the given day."""
    return f"InvestTrack_Backup_{(on or date.today()).isoformat()}.json"


def export_backup(state: AppState) -> str:
    """Serialize the full state as an indented JSON backup."""
    return state.to_json(indent=2)


def parse_backup(content: Union[str, bytes]) -> AppState:
    """
    Parse and validate a backup file.

    Raises:
        BackupFormatError: If the file isn't JSON, lacks the customer
            or investment collections, or holds invalid records
    """
    try:
        raw = json.loads(content)
    except (ValueError, UnicodeDecodeError) as e:
        raise BackupFormatError(f"Backup is not valid JSON: {e}") from e

    if not isinstance(raw, dict):
        raise BackupFormatError("Backup must be a JSON object")

    missing = [
        name for name in REQUIRED_COLLECTIONS if not isinstance(raw.get(name), list)
    ]
    if missing:
        raise BackupFormatError(
            f"Backup is missing required collections: {', '.join(missing)}"
        )

    try:
        return AppState.model_validate(raw)
    except ValidationError as e:
        raise BackupFormatError(
            f"Backup contains {e.error_count()} invalid entries"
        ) from e


def export_transactions_csv(state: AppState) -> str:
    """One row per payment, in stored order, under a fixed header."""
    lines = [",".join(CSV_HEADERS)]
    for row in PortfolioQueries(state).transaction_rows_in_order():
        lines.append(",".join([
            row.payment.date.isoformat(),
            row.payment.type.value,
            str(decimal_to_number(row.payment.amount)),
            row.direction.value,
            row.investment_title,
            row.customer_name,
        ]))
    return "\n".join(lines)

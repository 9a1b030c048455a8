"""JSON payload codecs for scheduled activity documents.

Decoding reads known keys only; unknown keys in stored documents are
ignored.
"""

from datetime import date, datetime
import json
from typing import Any

from fundledger.domain.exceptions import InvalidActivityError
from fundledger.domain.models import (
    Activity,
    AssetDeltas,
    AssetDetailOverride,
)
from fundledger.utils.decimal_utils import format_decimal
from fundledger.utils.instants import format_instant, parse_instant


def activity_to_payload(activity: Activity) -> dict[str, Any]:
    """Return a JSON-ready mapping for an activity."""
    return {
        "time": format_instant(activity.time),
        "type": activity.activity_type.value,
        "amount": format_decimal(activity.amount),
        "recipient": activity.recipient,
        "fund": activity.fund,
        "isDividend": activity.is_dividend,
        "parentCollection": activity.parent_collection,
    }


def activity_from_payload(payload: dict[str, Any]) -> Activity:
    """Build an activity from a stored mapping.

    Raises:
        InvalidActivityError: If required keys are missing or malformed.
    """
    if not isinstance(payload, dict):
        raise InvalidActivityError(f"Activity payload is not a mapping: {payload!r}")
    missing = [
        key
        for key in ("time", "type", "amount", "recipient", "fund")
        if payload.get(key) in (None, "")
    ]
    if missing:
        raise InvalidActivityError(
            f"Activity payload missing {', '.join(missing)}"
        )
    try:
        time = parse_instant(payload["time"])
    except ValueError as exc:
        raise InvalidActivityError(str(exc)) from exc
    return Activity(
        time=time,
        activity_type=payload["type"],
        amount=payload["amount"],
        recipient=str(payload["recipient"]),
        fund=str(payload["fund"]),
        is_dividend=bool(payload.get("isDividend", False)),
        parent_collection=payload.get("parentCollection"),
    )


def _raw_date_to_payload(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return format_instant(value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def asset_deltas_to_payload(deltas: AssetDeltas) -> dict[str, Any]:
    """Return a JSON-ready mapping for sparse asset overrides."""
    return {
        fund: {
            asset_type: {
                "amount": format_decimal(override.amount),
                "firstDepositDate": _raw_date_to_payload(
                    override.first_deposit_date
                ),
                "displayTitle": override.display_title,
                "index": override.index,
            }
            for asset_type, override in overrides.items()
        }
        for fund, overrides in deltas.items()
    }


def asset_deltas_from_payload(payload: dict[str, Any] | None) -> AssetDeltas:
    """Build sparse asset overrides from a stored mapping.

    ``firstDepositDate`` stays raw; settlement normalizes it.

    Raises:
        InvalidActivityError: If the document is not a mapping of mappings,
            or an amount or index is malformed.
    """
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise InvalidActivityError(
            f"Asset overrides are not a mapping: {payload!r}"
        )
    deltas: AssetDeltas = {}
    for fund, overrides in payload.items():
        if overrides is None:
            overrides = {}
        if not isinstance(overrides, dict):
            raise InvalidActivityError(
                f"Asset overrides for {fund} are not a mapping: {overrides!r}"
            )
        fund_overrides = {}
        for asset_type, values in overrides.items():
            if not isinstance(values, dict):
                raise InvalidActivityError(
                    f"Invalid asset override {fund}/{asset_type}: {values!r}"
                )
            index = values.get("index")
            if index is not None and (
                isinstance(index, bool) or not isinstance(index, int)
            ):
                raise InvalidActivityError(
                    f"Invalid asset override {fund}/{asset_type}: "
                    f"index {index!r}"
                )
            try:
                fund_overrides[asset_type] = AssetDetailOverride(
                    amount=values.get("amount"),
                    first_deposit_date=values.get("firstDepositDate"),
                    display_title=values.get("displayTitle"),
                    index=index,
                )
            except ValueError as exc:
                raise InvalidActivityError(
                    f"Invalid asset override {fund}/{asset_type}: {exc}"
                ) from exc
        deltas[fund] = fund_overrides
    return deltas


def dump_json(payload: dict[str, Any] | None) -> str | None:
    if payload is None:
        return None
    return json.dumps(payload, sort_keys=True)


def load_json(raw: str | None) -> dict[str, Any] | None:
    """Parse a stored JSON document.

    Raises:
        InvalidActivityError: If the text is not valid JSON.
    """
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InvalidActivityError(f"Malformed stored document: {exc}") from exc


__all__ = [
    "activity_to_payload",
    "activity_from_payload",
    "asset_deltas_to_payload",
    "asset_deltas_from_payload",
    "dump_json",
    "load_json",
]

"""Use case creating and cancelling scheduled activities."""

from datetime import datetime
import uuid

from fundledger.application.ports.ledger_store import LedgerStorePort
from fundledger.domain.constants import DEFAULT_NAMESPACE
from fundledger.domain.exceptions import InvalidActivityError
from fundledger.domain.models import (
    Activity,
    AssetDeltas,
    ScheduledActivity,
    ScheduledStatus,
)
from fundledger.infrastructure.logging.logger import get_app_logger


class ScheduleActivityUseCase:
    """Store activities whose effect is deferred to a later sweep."""

    def __init__(
        self,
        store: LedgerStorePort,
        logger=None,
        namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        """Initialize the use case.

        Args:
            store: Port providing scheduled record storage.
            logger: Optional logger compatible with logging.Logger-like API.
            namespace: Owning namespace used when callers pass none.
        """
        self._store = store
        self._logger = logger or get_app_logger()
        self._namespace = namespace

    def schedule(
        self,
        account_id: str,
        activity: Activity,
        asset_deltas: AssetDeltas | None = None,
        scheduled_time: datetime | None = None,
        namespace: str | None = None,
    ) -> str:
        """Create a ``pending`` scheduled record.

        Args:
            account_id: Account the activity will be appended to.
            activity: Activity payload to settle later.
            asset_deltas: Optional snapshot overrides applied on settlement.
            scheduled_time: When the record becomes due; defaults to the
                activity time.
            namespace: Owning namespace; defaults to the configured one.

        Returns:
            str: Identifier of the new record.

        Raises:
            InvalidActivityError: If the account id is blank or the
                activity is missing.
        """
        if not account_id or not account_id.strip():
            raise InvalidActivityError("Scheduled activity needs an account id")
        if activity is None:
            raise InvalidActivityError("Scheduled activity needs an activity")
        record = ScheduledActivity(
            id=uuid.uuid4().hex,
            account_id=account_id,
            activity=activity,
            scheduled_time=scheduled_time or activity.time,
            owner_namespace=namespace or self._namespace,
            status=ScheduledStatus.PENDING,
            asset_deltas=asset_deltas or None,
        )
        scheduled_id = self._store.add_scheduled_activity(record)
        self._logger.info(
            f"Scheduled {activity.activity_type.value} of {activity.amount} "
            f"for account {account_id} at {record.scheduled_time.isoformat()}"
        )
        return scheduled_id

    def cancel(self, scheduled_id: str) -> bool:
        """Delete a scheduled record whatever its state.

        Returns:
            bool: True when a record was deleted.
        """
        deleted = self._store.delete_scheduled_activity(scheduled_id)
        if deleted:
            self._logger.info(f"Deleted scheduled activity {scheduled_id}")
        else:
            self._logger.warning(
                f"Scheduled activity {scheduled_id} not found for deletion"
            )
        return deleted

    def list_scheduled(
        self,
        account_id: str | None = None,
    ) -> list[ScheduledActivity]:
        """Return scheduled records, optionally for a single account."""
        return self._store.list_scheduled_activities(account_id)


__all__ = ["ScheduleActivityUseCase"]

"""
Dayboard Day Service

Resolves (user, date) pairs to exactly one day record and applies edits.

Resolution never fails from the caller's point of view: a missing day is
created, a racing creation is re-read, and an unreachable store yields a
transient day that lives only in this process.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .dates import validate_date
from .errors import BackendUnavailable, Conflict, InvalidArgument, NotFound
from .health import HealthMonitor, get_health_monitor
from .stores import (
    DAY_PATCH_FIELDS,
    DayRecord,
    DayStore,
    MemoryChildStore,
    is_transient_id,
    is_valid_record_id,
    new_transient_id,
    touch,
)

logger = logging.getLogger(__name__)


class TransientDayCache:
    """
    Days handed out while the store is unreachable, keyed by (user_id, date).

    Repeated resolutions during one outage return the same transient day,
    and edits made to it are kept until the store answers for that day again.
    """

    def __init__(self):
        self._by_key: Dict[Tuple[str, str], DayRecord] = {}
        self._by_id: Dict[str, Tuple[str, str]] = {}

    def __len__(self) -> int:
        return len(self._by_key)

    def get_or_create(self, user_id: str, date: str) -> DayRecord:
        key = (user_id, date)
        record = self._by_key.get(key)
        if record is None:
            now = datetime.utcnow()
            record = DayRecord(
                id=new_transient_id(),
                user_id=user_id,
                date=date,
                daily_note="",
                summary="",
                created_at=now,
                updated_at=now
            )
            self._by_key[key] = record
            self._by_id[record.id] = key
        return record

    def get(self, day_id: str) -> Optional[DayRecord]:
        key = self._by_id.get(day_id)
        return self._by_key.get(key) if key else None

    def update(self, day_id: str, patch: Dict[str, Any]) -> DayRecord:
        record = self.get(day_id)
        if record is None:
            raise NotFound(f"Transient day {day_id} is unknown")
        for name in DAY_PATCH_FIELDS:
            if name in patch:
                setattr(record, name, patch[name])
        record.updated_at = touch(record.updated_at)
        return record

    def discard(self, user_id: str, date: str) -> Optional[DayRecord]:
        record = self._by_key.pop((user_id, date), None)
        if record is not None:
            self._by_id.pop(record.id, None)
        return record

    def clear(self) -> None:
        self._by_key.clear()
        self._by_id.clear()


def clean_patch(patch: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Keep only the editable day fields that were actually supplied."""
    return {k: v for k, v in (patch or {}).items() if k in DAY_PATCH_FIELDS}


class DayService:
    """Get-or-create, edit, list and delete days for a user."""

    def __init__(
        self,
        store: DayStore,
        transient: TransientDayCache,
        monitor: Optional[HealthMonitor] = None,
        transient_children: Sequence[MemoryChildStore] = ()
    ):
        self.store = store
        self.transient = transient
        self.monitor = monitor or get_health_monitor()
        self.transient_children = list(transient_children)

    def _degrade(self, user_id: str, date: str, error: Exception) -> DayRecord:
        logger.warning("Store unavailable while resolving %s for %s: %s", date, user_id, error)
        self.monitor.record_error("store", str(error), {"date": date, "user_id": user_id})
        return self.transient.get_or_create(user_id, date)

    def _forget_transient(self, user_id: str, date: str) -> None:
        """Drop the transient day for (user_id, date) and its in-memory children."""
        record = self.transient.discard(user_id, date)
        if record is None:
            return
        dropped = sum(store.drop_day(record.id) for store in self.transient_children)
        if record.daily_note or record.summary or dropped:
            logger.warning(
                "Store is back; dropping transient day %s for %s (%s) with %d offline item(s)",
                date, user_id, record.id, dropped
            )

    # === Resolution ===

    def resolve_day(self, date: str, user_id: str) -> DayRecord:
        """
        Return the one day for (user_id, date), creating it if needed.

        Raises:
            InvalidArgument: If date is not a valid YYYY-MM-DD day. Checked
                before the store is contacted.
        """
        validate_date(date)
        try:
            existing = self.store.find(user_id, date)
            if existing is not None:
                self._forget_transient(user_id, date)
                return existing

            try:
                created = self.store.insert(user_id, date, daily_note="", summary="")
                logger.info("Created day %s for %s (%s)", date, user_id, created.id)
                self._forget_transient(user_id, date)
                return created
            except Conflict:
                logger.info("Day %s for %s created concurrently, re-reading", date, user_id)
                winner = self.store.find(user_id, date)
                if winner is not None:
                    self._forget_transient(user_id, date)
                    return winner
                raise BackendUnavailable(f"Day {date} vanished after a conflicting insert")
        except BackendUnavailable as e:
            return self._degrade(user_id, date, e)

    def get_day(self, date: str, user_id: str) -> Optional[DayRecord]:
        """Plain lookup. None when absent; a transient day when the store is down."""
        validate_date(date)
        try:
            found = self.store.find(user_id, date)
        except BackendUnavailable as e:
            return self._degrade(user_id, date, e)
        self._forget_transient(user_id, date)
        return found

    def get_by_id(self, day_id: str, user_id: Optional[str] = None) -> DayRecord:
        """
        Fetch a day by id. With user_id, days of other users are reported
        as missing.
        """
        if not is_valid_record_id(day_id):
            raise InvalidArgument(f"Invalid day id: {day_id!r}")
        if is_transient_id(day_id):
            record = self.transient.get(day_id)
        else:
            record = self.store.get(day_id)
        if record is None or (user_id is not None and record.user_id != user_id):
            raise NotFound(f"Day {day_id} not found")
        return record

    def owns(self, day_id: str, user_id: str) -> bool:
        try:
            self.get_by_id(day_id, user_id)
        except (InvalidArgument, NotFound):
            return False
        return True

    # === Mutation ===

    def update_day(
        self,
        day_id: str,
        patch: Optional[Dict[str, Any]],
        user_id: Optional[str] = None
    ) -> DayRecord:
        """
        Merge daily_note/summary into an existing day.

        Transient days are edited in the transient cache only.

        Raises:
            InvalidArgument: If day_id is malformed.
            NotFound: If the day no longer exists or belongs to another user.
            BackendUnavailable: If the store cannot be reached.
        """
        if not is_valid_record_id(day_id):
            raise InvalidArgument(f"Invalid day id: {day_id!r}")
        changes = clean_patch(patch)
        if user_id is not None:
            self.get_by_id(day_id, user_id)
        if is_transient_id(day_id):
            return self.transient.update(day_id, changes)
        return self.store.update(day_id, changes)

    def upsert_day(self, date: str, user_id: str, patch: Optional[Dict[str, Any]] = None) -> DayRecord:
        """Resolve-or-create the day, then apply any supplied fields."""
        day = self.resolve_day(date, user_id)
        changes = clean_patch(patch)
        if not changes:
            return day
        return self.update_day(day.id, changes)

    # === Listing / Deletion ===

    def list_days(self, user_id: str, start_date: str, end_date: str) -> List[DayRecord]:
        validate_date(start_date)
        validate_date(end_date)
        if end_date < start_date:
            raise InvalidArgument(f"End date {end_date} is before start date {start_date}")
        return self.store.list_range(user_id, start_date, end_date)

    def delete_day(self, date: str, user_id: str) -> bool:
        """
        Delete the caller's day for date. False if there was none.

        A transient day is only dropped once the store has answered, so a
        failed delete leaves offline edits in place.
        """
        validate_date(date)
        deleted = self.store.delete(user_id, date)
        self._forget_transient(user_id, date)
        if deleted:
            logger.info("Deleted day %s for %s", date, user_id)
        return deleted

import json
import logging
import os
import tempfile
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, model_validator

from models.models import InstanceState, YearMonth
from providers.state_provider import PersistenceUnavailableError, StateProvider

logger = logging.getLogger(__name__)


class InMemoryStateProvider(StateProvider):
    """
    Implementation of StateProvider that keeps entries in process memory.

    Nothing survives a restart; used when no state file is configured and
    in tests.
    """

    def __init__(self):
        self.entries: Dict[int, InstanceState] = {}

    def get(self, instance_id: int) -> Optional[InstanceState]:
        return self.entries.get(instance_id)

    def put(self, state: InstanceState) -> None:
        self.entries[state.instance_id] = state

    def delete(self, instance_id: int) -> None:
        self.entries.pop(instance_id, None)

    def states(self) -> List[InstanceState]:
        return [state for _, state in sorted(self.entries.items())]


class StoredInstanceRecord(BaseModel):
    """
    One entry of the state file.

    Records normally carry ``year`` and ``month``. Older files stored an
    epoch-millisecond ``timestamp_ms`` instead; those are read as the month
    of that instant in local time and rewritten as year/month on the next save.
    """

    instance_id: int
    year: Optional[int] = None
    month: Optional[int] = None
    timestamp_ms: Optional[int] = None
    selected_date: Optional[date] = None

    @model_validator(mode="after")
    def _has_month_or_timestamp(self) -> "StoredInstanceRecord":
        if (self.year is None or self.month is None) and self.timestamp_ms is None:
            raise ValueError("record needs either year and month or timestamp_ms")
        return self

    def to_state(self) -> InstanceState:
        if self.year is not None and self.month is not None:
            year_month = YearMonth(year=self.year, month=self.month)
        else:
            year_month = YearMonth.from_date(datetime.fromtimestamp(self.timestamp_ms / 1000))
        return InstanceState(
            instance_id=self.instance_id, year_month=year_month, selected_date=self.selected_date
        )

    @classmethod
    def from_state(cls, state: InstanceState) -> "StoredInstanceRecord":
        return cls(
            instance_id=state.instance_id,
            year=state.year_month.year,
            month=state.year_month.month,
            selected_date=state.selected_date,
        )


class JsonFileStateProvider(StateProvider):
    """
    Implementation of StateProvider backed by a JSON file.

    The file is read once, on first access, and every put/delete rewrites it
    atomically before returning. File layout::

        {"version": 1, "instances": [
            {"instance_id": 7, "year": 2024, "month": 5, "selected_date": "2024-05-17"}
        ]}

    ``selected_date`` is left out while no day has been tapped.
    """

    FILE_VERSION = 1

    def __init__(self, file_path: Path):
        self.file_path = Path(file_path)
        self._entries: Optional[Dict[int, InstanceState]] = None
        self._lock = threading.Lock()

    def get(self, instance_id: int) -> Optional[InstanceState]:
        with self._lock:
            return self._loaded().get(instance_id)

    def put(self, state: InstanceState) -> None:
        with self._lock:
            entries = dict(self._loaded())
            entries[state.instance_id] = state
            self._save(entries)
            self._entries = entries

    def delete(self, instance_id: int) -> None:
        with self._lock:
            current = self._loaded()
            if instance_id not in current:
                return
            entries = {key: value for key, value in current.items() if key != instance_id}
            self._save(entries)
            self._entries = entries

    def states(self) -> List[InstanceState]:
        with self._lock:
            return [state for _, state in sorted(self._loaded().items())]

    def _loaded(self) -> Dict[int, InstanceState]:
        if self._entries is None:
            self._entries = self._load()
        return self._entries

    def _load(self) -> Dict[int, InstanceState]:
        if not self.file_path.exists():
            return {}

        try:
            raw = self.file_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise PersistenceUnavailableError(f"Cannot read {self.file_path}: {exc}") from exc

        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("State file %s is not valid JSON, starting empty", self.file_path)
            return {}

        if not isinstance(decoded, dict) or not isinstance(decoded.get("instances"), list):
            logger.warning("State file %s has an unexpected layout, starting empty", self.file_path)
            return {}

        entries: Dict[int, InstanceState] = {}
        for item in decoded["instances"]:
            try:
                record = StoredInstanceRecord.model_validate(item)
                entries[record.instance_id] = record.to_state()
            except (ValueError, OverflowError, OSError) as exc:
                logger.warning("Skipping invalid state record %r: %s", item, exc)
        logger.debug("Loaded %d calendar state(s) from %s", len(entries), self.file_path)
        return entries

    def _save(self, entries: Dict[int, InstanceState]) -> None:
        payload: Dict[str, Any] = {
            "version": self.FILE_VERSION,
            "instances": [
                StoredInstanceRecord.from_state(state).model_dump(mode="json", exclude_none=True)
                for _, state in sorted(entries.items())
            ],
        }

        tmp_name: Optional[str] = None
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.file_path.stem}-", suffix=".json", dir=str(self.file_path.parent)
            )
            with os.fdopen(fd, "w", encoding="utf-8") as file:
                json.dump(payload, file, indent=2)
                file.write("\n")
                file.flush()
                os.fsync(file.fileno())
            os.replace(tmp_name, self.file_path)
        except OSError as exc:
            raise PersistenceUnavailableError(f"Cannot write {self.file_path}: {exc}") from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.remove(tmp_name)

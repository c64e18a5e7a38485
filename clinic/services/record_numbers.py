from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from ..core.exceptions import StorageError
from ..models.counter import Counter

logger = logging.getLogger(__name__)

# kind -> (prefix, counter name)
RECORD_KINDS = {
    "patient": ("PAT", "patient_counter"),
    "appointment": ("APT", "appointment_counter"),
}

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

def format_record_number(prefix: str, value: int) -> str:
    """PREFIX-NNN, zero padded to at least three digits."""
    return f"{prefix}-{value:03d}"

class RecordNumberAllocator:
    """Hands out sequential record numbers from the ``counters`` table.

    The increment runs inside the caller's transaction, so the number and
    the entity that carries it are committed (or rolled back) together.
    Concurrent callers serialize on the counter row: the UPDATE takes a row
    lock that is held until the surrounding transaction ends.
    """

    def __init__(self, db: Session):
        self.db = db

    def allocate(self, kind: str) -> str:
        if kind not in RECORD_KINDS:
            raise ValueError(f"Unknown record kind: {kind}")
        prefix, counter_name = RECORD_KINDS[kind]

        try:
            self._ensure_counter(counter_name)
            self.db.execute(
                update(Counter)
                .where(Counter.name == counter_name)
                .values(value=Counter.value + 1)
                .execution_options(synchronize_session=False)
            )
            value = self.db.execute(
                select(Counter.value).where(Counter.name == counter_name)
            ).scalar_one()
        except SQLAlchemyError as exc:
            logger.error(f"Record number allocation failed for {kind}: {exc}")
            raise StorageError("Could not allocate record number") from exc

        record_number = format_record_number(prefix, value)
        logger.debug(f"Allocated {record_number}")
        return record_number

    def _ensure_counter(self, counter_name: str) -> None:
        """Create the counter row at zero unless it already exists."""
        insert = _UPSERT_DIALECTS.get(self.db.get_bind().dialect.name)
        if insert is not None:
            self.db.execute(
                insert(Counter)
                .values(name=counter_name, value=0)
                .on_conflict_do_nothing(index_elements=["name"])
            )
            return

        exists = self.db.execute(
            select(Counter.id).where(Counter.name == counter_name)
        ).first()
        if not exists:
            self.db.add(Counter(name=counter_name, value=0))
            self.db.flush()

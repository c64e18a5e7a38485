from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from clinic.core.database import Base
from clinic.models.counter import Counter
from clinic.services.record_numbers import RecordNumberAllocator, format_record_number

@pytest.mark.parametrize("value, expected", [
    (1, "PAT-001"),
    (42, "PAT-042"),
    (999, "PAT-999"),
    (1000, "PAT-1000"),
    (12345, "PAT-12345"),
])
def test_format_pads_to_three_digits_without_truncating(value, expected):
    assert format_record_number("PAT", value) == expected

class TestRecordNumberAllocator:

    def test_sequential_per_kind(self, db_session):
        allocator = RecordNumberAllocator(db_session)

        assert allocator.allocate("patient") == "PAT-001"
        assert allocator.allocate("patient") == "PAT-002"
        assert allocator.allocate("appointment") == "APT-001"
        assert allocator.allocate("patient") == "PAT-003"
        db_session.commit()

        counters = {c.name: c.value for c in db_session.query(Counter).all()}
        assert counters == {"patient_counter": 3, "appointment_counter": 1}

    def test_counter_created_lazily(self, db_session):
        assert db_session.query(Counter).count() == 0

        RecordNumberAllocator(db_session).allocate("appointment")
        db_session.commit()

        assert db_session.query(Counter).one().name == "appointment_counter"

    def test_rolled_back_allocation_is_not_consumed(self, db_session):
        allocator = RecordNumberAllocator(db_session)
        allocator.allocate("patient")
        db_session.commit()

        assert allocator.allocate("patient") == "PAT-002"
        db_session.rollback()

        assert allocator.allocate("patient") == "PAT-002"

    def test_unknown_kind(self, db_session):
        with pytest.raises(ValueError):
            RecordNumberAllocator(db_session).allocate("invoice")

def test_concurrent_allocations_are_unique(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'counters.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def allocate_one(_):
        db = Session()
        try:
            record_number = RecordNumberAllocator(db).allocate("patient")
            db.commit()
            return record_number
        finally:
            db.close()

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(allocate_one, range(40)))

    values = sorted(int(number.split("-")[1]) for number in results)
    assert values == list(range(1, 41))
    engine.dispose()

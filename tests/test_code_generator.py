import threading
from decimal import Decimal

import pytest
from sqlalchemy import create_engine, event, select
from sqlalchemy.orm import sessionmaker

from app.core.errors import InvalidArgumentError
from app.db.base import Base
from app.db.unit_of_work import transaction
from app.models.inventory import CodeSequence, InventoryItem, utcnow
from app.services.code_generator import find_last_code, format_code, generate_next_code, parse_code_number
from app.services.inventory_service import receive_stock


def _raw_item(item_code: str, *, design: str = "Gulnar", location: str = "001") -> InventoryItem:
    now = utcnow()
    return InventoryItem(
        item_code=item_code,
        collection_name="Sajna Lawn",
        design_name=design,
        color="Red",
        size="M",
        location_code=location,
        quantity=0,
        in_house_stock=0,
        out_source_stock=0,
        quantity_sold=0,
        vendor_name="Al-Karam Mills",
        cost_price=Decimal("0.00"),
        selling_price=Decimal("0.00"),
        received_date=now,
        received_by="seed",
        last_updated=now,
        is_active=True,
    )


def _receive(db, design: str):
    return receive_stock(
        db,
        collection_name="Parwaz",
        design_name=design,
        color="Blue",
        size="L",
        location_code="001",
        in_house_stock=1,
        vendor_name="Gul Ahmed",
        received_by="Ayesha",
    ).item


def test_format_and_parse_code():
    assert format_code("ITM", 1) == "ITM-0001"
    assert format_code("SALE", 42) == "SALE-0042"
    assert format_code("ITM", 12345) == "ITM-12345"
    assert parse_code_number("ITM-0042") == 42
    assert parse_code_number("garbage") == 0


def test_first_code_for_empty_prefix(db_session):
    with transaction(db_session):
        code = generate_next_code(db_session, "ITM")
    assert code == "ITM-0001"


def test_codes_increase_by_one_per_call(db_session):
    with transaction(db_session):
        codes = [generate_next_code(db_session, "ART") for _ in range(5)]
    assert codes == ["ART-0001", "ART-0002", "ART-0003", "ART-0004", "ART-0005"]
    assert len(set(codes)) == len(codes)


def test_prefixes_have_independent_counters(db_session):
    with transaction(db_session):
        assert generate_next_code(db_session, "MAT") == "MAT-0001"
        assert generate_next_code(db_session, "emp") == "EMP-0001"
        assert generate_next_code(db_session, "MAT") == "MAT-0002"


def test_counter_seeds_from_greatest_existing_code(test_context):
    _, session_local = test_context
    seed = session_local()
    seed.add_all([_raw_item("ITM-0007", design="A"), _raw_item("ITM-0041", design="B"), _raw_item("ITM-0012", design="C")])
    seed.commit()
    seed.close()

    db = session_local()
    try:
        with transaction(db):
            assert generate_next_code(db, "ITM") == "ITM-0042"
    finally:
        db.close()


def test_length_ordering_keeps_five_digit_codes_last(test_context):
    _, session_local = test_context
    seed = session_local()
    seed.add_all([_raw_item("ITM-9999", design="A"), _raw_item("ITM-10000", design="B")])
    seed.commit()
    seed.close()

    db = session_local()
    try:
        assert find_last_code(db, "ITM") == "ITM-10000"
        with transaction(db):
            assert generate_next_code(db, "ITM") == "ITM-10001"
    finally:
        db.close()


def test_unknown_prefix_is_rejected(db_session):
    with pytest.raises(InvalidArgumentError):
        generate_next_code(db_session, "XYZ")


def test_rolled_back_operation_does_not_consume_code(db_session):
    with pytest.raises(RuntimeError):
        with transaction(db_session):
            assert generate_next_code(db_session, "PRD") == "PRD-0001"
            raise RuntimeError("abort")

    with transaction(db_session):
        assert generate_next_code(db_session, "PRD") == "PRD-0001"


def test_codes_inserted_behind_counter_are_skipped(test_context):
    _, session_local = test_context
    db = session_local()
    try:
        assert _receive(db, "First").item_code == "ITM-0001"

        other = session_local()
        other.add(_raw_item("ITM-0002", design="Imported"))
        other.commit()
        other.close()

        assert _receive(db, "Second").item_code == "ITM-0003"
        counter = db.execute(select(CodeSequence).where(CodeSequence.prefix == "ITM")).scalar_one()
        assert counter.last_value == 3
    finally:
        db.close()


def test_concurrent_generation_yields_distinct_sequential_codes(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'codes.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, _connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    Base.metadata.create_all(bind=engine)
    session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    codes: list[str] = []
    errors: list[BaseException] = []
    lock = threading.Lock()

    def worker():
        db = session_local()
        try:
            with transaction(db):
                code = generate_next_code(db, "SALE")
            with lock:
                codes.append(code)
        except BaseException as exc:  # surfaced through the assertion below
            with lock:
                errors.append(exc)
        finally:
            db.close()

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    engine.dispose()
    assert errors == []
    assert sorted(codes) == [format_code("SALE", n) for n in range(1, 9)]

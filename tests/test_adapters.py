"""Remote collection tests against a throwaway SQLite database."""

import pytest
from sqlalchemy import select

from api.database import build_engine, build_sessionmaker
from api.models import SupplierRecord
from conftest import make_evaluation, make_non_conformity, make_supplier
from persistence.adapters import EvaluationCollection, NonConformityCollection, SupplierCollection
from persistence.errors import RemoteNotFoundError, RemoteReadError, RemoteWriteError, ValidationError


@pytest.fixture
def suppliers(session_factory):
    return SupplierCollection(session_factory)


async def test_create_assigns_id_and_timestamps(suppliers):
    created = await suppliers.create(make_supplier())
    assert created.id
    assert created.created_at is not None
    assert created.updated_at is not None
    assert created.name == "Acme"


async def test_list_all_and_get_by_id(suppliers):
    a = await suppliers.create(make_supplier(name="A"))
    b = await suppliers.create(make_supplier(name="B"))
    listed = await suppliers.list_all()
    assert {s.id for s in listed} == {a.id, b.id}
    fetched = await suppliers.get_by_id(b.id)
    assert fetched.name == "B"


async def test_list_by_field(suppliers):
    await suppliers.create(make_supplier(name="A", category="packaging"))
    await suppliers.create(make_supplier(name="B", category="logistics"))
    await suppliers.create(make_supplier(name="C", category="packaging", status="blocked"))
    packaging = await suppliers.list_by_category("packaging")
    assert sorted(s.name for s in packaging) == ["A", "C"]
    blocked = await suppliers.list_by_status("blocked")
    assert [s.name for s in blocked] == ["C"]


async def test_list_by_unmapped_field_raises_validation_error(suppliers):
    with pytest.raises(ValidationError):
        await suppliers.list_by_field("metrics", "x")


async def test_update_returns_post_update_record(suppliers):
    created = await suppliers.create(make_supplier())
    updated = await suppliers.update(created.id, {"status": "inactive"})
    assert updated.id == created.id
    assert updated.status == "inactive"
    assert updated.name == created.name


async def test_update_keeps_stored_sparse_value_when_cleared(suppliers):
    created = await suppliers.create(make_supplier(whatsapp="5511988887777"))
    updated = await suppliers.update(created.id, created.model_copy(update={"whatsapp": None}))
    assert updated.whatsapp == "5511988887777"


async def test_sparse_fields_not_written_when_empty(suppliers, session_factory):
    created = await suppliers.create(make_supplier(address=""))
    async with session_factory() as db:
        record = (await db.execute(select(SupplierRecord).where(SupplierRecord.id == created.id))).scalar_one()
    assert record.address is None
    assert record.custom_fields is None
    assert created.custom_fields == {}


async def test_missing_id_raises_not_found(suppliers):
    with pytest.raises(RemoteNotFoundError) as exc_info:
        await suppliers.get_by_id("nope")
    assert exc_info.value.entity_id == "nope"
    with pytest.raises(RemoteNotFoundError):
        await suppliers.update("nope", {"status": "inactive"})
    with pytest.raises(RemoteNotFoundError):
        await suppliers.delete("nope")


async def test_delete_removes_record(suppliers):
    created = await suppliers.create(make_supplier())
    await suppliers.delete(created.id)
    assert await suppliers.list_all() == []


async def test_delete_supplier_cascades(suppliers, session_factory):
    evaluations = EvaluationCollection(session_factory)
    non_conformities = NonConformityCollection(session_factory)
    supplier = await suppliers.create(make_supplier())
    await evaluations.create(make_evaluation(supplier.id))
    await non_conformities.create(make_non_conformity(supplier.id))

    await suppliers.delete(supplier.id)

    assert await evaluations.list_all() == []
    assert await non_conformities.list_all() == []


async def test_foreign_key_violation_raises_write_error(session_factory):
    evaluations = EvaluationCollection(session_factory)
    with pytest.raises(RemoteWriteError):
        await evaluations.create(make_evaluation("missing-supplier"))


async def test_evaluation_roundtrip_keeps_derived_fields(suppliers, session_factory):
    evaluations = EvaluationCollection(session_factory)
    supplier = await suppliers.create(make_supplier())
    created = await evaluations.create(make_evaluation(supplier.id, scores=(1, 2, 1, 2)))
    assert created.ratings.overall == pytest.approx(1.5)
    assert created.type == "negative"
    by_supplier = await evaluations.list_by_supplier(supplier.id)
    assert [e.id for e in by_supplier] == [created.id]
    assert [e.id for e in await evaluations.list_by_type("negative")] == [created.id]


async def test_non_conformity_queries(suppliers, session_factory):
    non_conformities = NonConformityCollection(session_factory)
    supplier = await suppliers.create(make_supplier())
    low = await non_conformities.create(make_non_conformity(supplier.id, severity="low"))
    await non_conformities.create(make_non_conformity(supplier.id, severity="critical"))
    assert [nc.id for nc in await non_conformities.list_by_severity("low")] == [low.id]
    assert len(await non_conformities.list_by_status("open")) == 2
    assert len(await non_conformities.list_by_supplier(supplier.id)) == 2


async def test_read_failure_raises_read_error(tmp_path):
    # Database file without the schema
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
    try:
        collection = SupplierCollection(build_sessionmaker(engine))
        with pytest.raises(RemoteReadError):
            await collection.list_all()
        with pytest.raises(RemoteReadError):
            await collection.get_by_id("any")
    finally:
        await engine.dispose()


async def test_optional_fields_come_back_defaulted(suppliers):
    created = await suppliers.create(make_supplier())
    fetched = await suppliers.get_by_id(created.id)
    assert fetched.whatsapp is None
    assert fetched.address is None
    assert fetched.last_evaluation is None
    assert fetched.custom_fields == {}
    assert fetched.status == "active"
    assert fetched.average_rating == 0.0

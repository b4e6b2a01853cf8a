import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import ProgrammingError

from conftest import count_rows, stale_table_exists
from models.catalogs import DatasetCatalog, PlanogramCatalog
from models.families import DATASET, ORDER_LEDGER, PLANOGRAM, USER_COPY
from services import provisioning
from services.errors import ProvisioningFailed
from services.provisioning import ProvisionOutcome, ensure_table, table_exists


def test_ensure_table_creates_once_and_records_catalog(db):
    first = ensure_table(db, DATASET, "baseDeDatos_abc", key="abc")
    db.commit()
    second = ensure_table(db, DATASET, "baseDeDatos_abc", key="abc")
    db.commit()

    assert first is ProvisionOutcome.CREATED
    assert second is ProvisionOutcome.ALREADY_EXISTS
    entries = db.query(DatasetCatalog.nombre_base_datos).all()
    assert entries == [("abc",)]


def test_ensure_table_uses_family_schema(db):
    ensure_table(db, PLANOGRAM, "planograma_norte", key="norte")
    db.commit()

    columns = {c["name"] for c in inspect(db.connection()).get_columns("planograma_norte")}
    assert {"id", "frente", "frentes_totales", "degradado", "espacio"} <= columns
    assert db.query(PlanogramCatalog.nombre_planograma).all() == [("norte",)]


def test_catalog_entry_is_not_duplicated(db):
    ensure_table(db, DATASET, "baseDeDatos_abc", key="abc")
    db.commit()
    db.add(DatasetCatalog(nombre_base_datos="other"))
    db.commit()

    ensure_table(db, DATASET, "baseDeDatos_other", key="other")
    db.commit()

    assert count_rows(db, "bases_datos") == 2


def test_family_without_catalog_only_creates_table(db):
    outcome = ensure_table(db, ORDER_LEDGER, "ordenes")
    db.commit()

    assert outcome is ProvisionOutcome.CREATED
    assert table_exists(db, "ordenes")
    assert not table_exists(db, "bases_datos")


def test_rollback_discards_table_and_catalog_entry(db):
    ensure_table(db, DATASET, "baseDeDatos_tmp", key="tmp")
    db.rollback()

    assert not table_exists(db, "baseDeDatos_tmp")
    assert not table_exists(db, "bases_datos")


def test_family_without_schema_fails(db):
    with pytest.raises(ProvisioningFailed) as excinfo:
        ensure_table(db, USER_COPY, "ana_abc")

    assert excinfo.value.table_name == "ana_abc"
    assert excinfo.value.cause is not None


def test_concurrent_create_is_treated_as_existing(db, monkeypatch):
    ensure_table(db, DATASET, "baseDeDatos_abc", key="abc")
    db.commit()
    stale_table_exists(monkeypatch, provisioning, "baseDeDatos_abc")

    outcome = ensure_table(db, DATASET, "baseDeDatos_abc", key="abc")
    db.commit()

    assert outcome is ProvisionOutcome.ALREADY_EXISTS
    assert db.query(DatasetCatalog.nombre_base_datos).all() == [("abc",)]


def test_failed_create_of_absent_table_still_raises(db, monkeypatch):
    def broken_create(table):
        raise ProgrammingError("CREATE TABLE", {}, Exception("permission denied"))

    monkeypatch.setattr(provisioning, "CreateTable", broken_create)

    with pytest.raises(ProvisioningFailed):
        ensure_table(db, DATASET, "baseDeDatos_abc", key="abc")

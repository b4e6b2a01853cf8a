import pytest

from models.catalogs import DatasetCatalog
from models.families import DATASET, PLANOGRAM
from services.errors import RequestRejected, TableNotFound
from services.ingestion import provision_and_ingest
from services.table_repository import (
    MutationOutcome,
    delete_row,
    list_catalog,
    list_user_links,
    read_rows,
    update_row,
)

DATASET_GRID = [
    ["marca", "rank", "vol_ytd"],
    ["Coca", "1", 10.0],
    ["Sprite", "2", 7.5],
]

PLANOGRAM_GRID = [
    ["frente", "frentes_totales", "degradado"],
    [1, 12, 0.5],
    [2, 8, 0.25],
]


def test_list_catalog_skips_sentinel_row(db):
    provision_and_ingest(db, DATASET, "abc", DATASET_GRID)
    db.add(DatasetCatalog(nombre_base_datos="created"))
    db.commit()

    assert list_catalog(db, DATASET) == [{"nombre_base_datos": "abc"}]
    assert list_catalog(db, PLANOGRAM) == []


def test_read_rows_and_projection(db):
    provision_and_ingest(db, PLANOGRAM, "norte", PLANOGRAM_GRID)

    rows = read_rows(db, "planograma_norte")
    assert len(rows) == 2
    assert {"id", "frente", "espacio"} <= set(rows[0])

    assert read_rows(db, "planograma_norte", ["frentes_totales"]) == [
        {"frentes_totales": 12.0},
        {"frentes_totales": 8.0},
    ]


def test_read_rows_missing_table(db):
    with pytest.raises(TableNotFound):
        read_rows(db, "baseDeDatos_missing")


def test_update_row_by_natural_key(db):
    provision_and_ingest(db, DATASET, "abc", DATASET_GRID)

    outcome = update_row(db, "baseDeDatos_abc", "rank", "2", {"marca": "Sprite Zero", "vol_ytd": 8.0})

    assert outcome is MutationOutcome.APPLIED
    rows = {r["rank"]: r for r in read_rows(db, "baseDeDatos_abc")}
    assert rows["2"]["marca"] == "Sprite Zero"
    assert rows["2"]["vol_ytd"] == 8.0
    assert rows["1"]["marca"] == "Coca"


def test_update_row_outcomes(db):
    provision_and_ingest(db, DATASET, "abc", DATASET_GRID)

    assert update_row(db, "baseDeDatos_abc", "rank", "99", {"marca": "x"}) is MutationOutcome.NOT_FOUND
    with pytest.raises(RequestRejected):
        update_row(db, "baseDeDatos_abc", "rank", "1", {})
    with pytest.raises(RequestRejected):
        update_row(db, "baseDeDatos_abc", "rank", "", {"marca": "x"})
    with pytest.raises(TableNotFound):
        update_row(db, "baseDeDatos_nope", "rank", "1", {"marca": "x"})


def test_delete_row_by_planogram_front(db):
    provision_and_ingest(db, PLANOGRAM, "norte", PLANOGRAM_GRID)

    assert delete_row(db, "planograma_norte", "frente", 1) is MutationOutcome.APPLIED
    assert delete_row(db, "planograma_norte", "frente", 1) is MutationOutcome.NOT_FOUND
    assert [r["frente"] for r in read_rows(db, "planograma_norte")] == [2.0]


def test_list_user_links_requires_link_table(db):
    with pytest.raises(TableNotFound):
        list_user_links(db, "ana")

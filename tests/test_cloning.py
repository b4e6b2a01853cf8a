import pytest
from sqlalchemy import Column, MetaData, String, Table, inspect, insert

from conftest import count_rows, stale_table_exists
from models.families import DATASET
from services import cloning
from services.cloning import CloneOutcome, clone_into, link_dataset_to_user, refresh_inventory
from services.errors import CloneFailed, InvalidIdentifier
from services.ingestion import provision_and_ingest
from services.provisioning import table_exists
from services.table_repository import list_user_links

GRID = [
    ["marca", "rank", "vol_ytd"],
    ["Coca", "1", 10.0],
    ["Sprite", "2", 7.5],
    ["Fanta", "3", 4.0],
]


def _columns(db, table_name):
    names = [c["name"] for c in inspect(db.connection()).get_columns(table_name)]
    db.commit()
    return names


def test_link_clones_dataset_into_user_copy(db):
    provision_and_ingest(db, DATASET, "abc", GRID)

    outcome = link_dataset_to_user(db, "ana", "abc")

    assert outcome is CloneOutcome.CLONED
    assert count_rows(db, "ana_abc") == 3
    assert _columns(db, "ana_abc") == _columns(db, "baseDeDatos_abc")
    links = list_user_links(db, "ana")
    assert [(link["database"], link["planograma"]) for link in links] == [("abc", "abc")]


def test_second_link_does_not_resync_copy(db):
    provision_and_ingest(db, DATASET, "abc", GRID)
    link_dataset_to_user(db, "ana", "abc")

    provision_and_ingest(db, DATASET, "abc", GRID + [["Delaware", "4", 1.0]])
    outcome = link_dataset_to_user(db, "ana", "abc")

    assert outcome is CloneOutcome.ALREADY_LINKED
    assert count_rows(db, "baseDeDatos_abc") == 4
    assert count_rows(db, "ana_abc") == 3
    assert len(list_user_links(db, "ana")) == 1


def test_each_user_gets_an_independent_copy(db):
    provision_and_ingest(db, DATASET, "abc", GRID)

    link_dataset_to_user(db, "ana", "abc")
    link_dataset_to_user(db, "luis", "abc")

    assert count_rows(db, "ana_abc") == 3
    assert count_rows(db, "luis_abc") == 3
    assert len(list_user_links(db, "luis")) == 1


def test_missing_source_fails_without_side_effects(db):
    with pytest.raises(CloneFailed) as excinfo:
        link_dataset_to_user(db, "ana", "nope")

    assert excinfo.value.source_table == "baseDeDatos_nope"
    assert not table_exists(db, "ana_nope")
    assert not table_exists(db, "ana_database")


def test_link_rejects_unsafe_username(db):
    with pytest.raises(InvalidIdentifier):
        link_dataset_to_user(db, "ana; drop", "abc")


def test_clone_into_is_skipped_for_existing_destination(db):
    provision_and_ingest(db, DATASET, "abc", GRID)
    assert clone_into(db, "baseDeDatos_abc", "copy_abc") is CloneOutcome.CLONED
    db.commit()

    assert clone_into(db, "baseDeDatos_abc", "copy_abc") is CloneOutcome.ALREADY_LINKED
    db.commit()
    assert count_rows(db, "copy_abc") == 3


def _seed_live_table(db, rows):
    live = DATASET.build_table("data")
    live.create(bind=db.connection(), checkfirst=True)
    db.execute(live.delete())
    db.execute(insert(live), rows)
    db.commit()


def test_refresh_inventory_snapshots_live_table(db):
    _seed_live_table(db, [{"marca": "Coca", "rank": "1"}, {"marca": "Sprite", "rank": "2"}])

    rows = refresh_inventory(db, "ana")
    assert [r["marca"] for r in rows] == ["Coca", "Sprite"]

    _seed_live_table(db, [{"marca": "Fanta", "rank": "9"}])
    rows = refresh_inventory(db, "ana")
    assert [r["marca"] for r in rows] == ["Fanta"]
    assert count_rows(db, "inventory_ana") == 1


def test_refresh_inventory_requires_live_table(db):
    with pytest.raises(CloneFailed):
        refresh_inventory(db, "ana")


def test_racing_link_reports_existing_copy(db, monkeypatch):
    provision_and_ingest(db, DATASET, "abc", GRID)
    link_dataset_to_user(db, "ana", "abc")
    stale_table_exists(monkeypatch, cloning, "ana_abc")

    outcome = link_dataset_to_user(db, "ana", "abc")

    assert outcome is CloneOutcome.ALREADY_LINKED
    assert count_rows(db, "ana_abc") == 3
    assert len(list_user_links(db, "ana")) == 1


def test_racing_clone_does_not_duplicate_rows_without_key(db, monkeypatch):
    plain = Table("plain", MetaData(), Column("marca", String(255)))
    plain.create(bind=db.connection())
    db.execute(insert(plain), [{"marca": "Coca"}, {"marca": "Sprite"}])
    db.commit()
    assert clone_into(db, "plain", "copy_plain") is CloneOutcome.CLONED
    db.commit()
    stale_table_exists(monkeypatch, cloning, "copy_plain")

    assert clone_into(db, "plain", "copy_plain") is CloneOutcome.ALREADY_LINKED
    db.commit()
    assert count_rows(db, "copy_plain") == 2

from services import pos_repository
from services.provisioning import ProvisionOutcome
from services.table_repository import MutationOutcome


def test_first_insert_provisions_fixed_table(db):
    assert pos_repository.add_category(db, "Bebidas") is ProvisionOutcome.CREATED
    assert pos_repository.add_category(db, "Postres") is ProvisionOutcome.ALREADY_EXISTS


def test_active_products_by_category(db):
    pos_repository.add_product(db, nombre="Agua", precio=15, categoria="Bebidas", estado="activo")
    pos_repository.add_product(db, nombre="Soda", precio=20, categoria="Bebidas", estado="inactivo")
    pos_repository.add_product(db, nombre="Flan", precio=35, categoria="Postres", estado="activo")

    products = pos_repository.list_active_products(db, "Bebidas")

    assert [p["nombre"] for p in products] == ["Agua"]


def test_listing_before_provisioning_is_empty(db):
    assert pos_repository.list_mesas(db) == []
    assert pos_repository.list_payments(db) == []
    assert pos_repository.list_active_products(db, "Bebidas") == []


def test_update_mesa(db):
    assert pos_repository.update_mesa(db, 1, 4, "ocupada") is MutationOutcome.NOT_FOUND

    pos_repository.add_mesa(db, 4, "libre")
    mesa_id = pos_repository.list_mesas(db)[0]["id"]

    assert pos_repository.update_mesa(db, mesa_id, 4, "ocupada") is MutationOutcome.APPLIED
    assert pos_repository.list_mesas(db)[0]["estado"] == "ocupada"
    assert pos_repository.update_mesa(db, mesa_id + 1, 4, "libre") is MutationOutcome.NOT_FOUND


def test_record_payment(db):
    pos_repository.record_payment(
        db,
        metodoPago="efectivo",
        totalVenta=100,
        descuentoTotal=0,
        propina=10,
        montoPagado=120,
        cambioDevuelto=10,
    )

    payments = pos_repository.list_payments(db)
    assert len(payments) == 1
    assert payments[0]["metodoPago"] == "efectivo"

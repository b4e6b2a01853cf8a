# models/families.py

from dataclasses import dataclass
from typing import Callable

from sqlalchemy import Column, Float, Integer, MetaData, String, Table

from models.catalogs import DatasetCatalog, PlanogramCatalog


@dataclass(frozen=True)
class TableFamily:
    """
    A category of dynamically created tables sharing one fixed schema
    and one naming template: [prefix_]key[_key...][_suffix].
    """

    name: str
    prefix: str | None = None
    suffix: str | None = None
    arity: int = 1
    columns: Callable[[], list[Column]] | None = None
    catalog: type | None = None
    catalog_column: str | None = None

    def build_table(self, table_name: str, metadata: MetaData | None = None) -> Table:
        if self.columns is None:
            raise ValueError(f"Family '{self.name}' has no fixed schema")
        return Table(table_name, metadata or MetaData(), *self.columns())


def _id() -> Column:
    return Column("id", Integer, primary_key=True, autoincrement=True)


def dataset_columns() -> list[Column]:
    text_cols = (
        "marca",
        "rank",
        "presentacion",
        "distribucion_tiendas",
        "frentes",
    )
    return [
        _id(),
        *[Column(name, String(255)) for name in text_cols],
        Column("vol_ytd", Float),
        Column("ccc", String(255)),
        Column("peakday_units", Float),
        Column("facings_minimos_pd", Float),
        Column("ros", Float),
        Column("avail3m", Float),
        Column("avail_plaza_oxxo", Float),
        Column("volume_mix", String(255)),
        Column("industry_packtype", String(255)),
        Column("percent_availab", Float),
        Column("mix_ros", Float),
        Column("atw", Float),
        Column("ajustes_frentes_minimos", Float),
    ]


PLANOGRAM_FLOAT_COLUMNS = (
    "frente",
    "datos_planograma",
    "frentes_totales",
    "parrillas",
    "planograma",
    "skus",
    "volumen",
    "parrillas_admin",
    "degradado",
    "espacio",
)


def planogram_columns() -> list[Column]:
    return [_id(), *[Column(name, Float) for name in PLANOGRAM_FLOAT_COLUMNS]]


def tenant_link_columns() -> list[Column]:
    return [
        _id(),
        Column("database", String(255), nullable=False),
        Column("planograma", String(255), nullable=False),
    ]


def _order_line_columns() -> list[Column]:
    return [
        Column("producto", String(255), nullable=False),
        Column("cantidad", Integer, nullable=False),
        Column("precioUnitario", Integer, nullable=False),
        Column("entregado", String(255), nullable=False),
        Column("pagado", String(255), nullable=False),
    ]


def order_ledger_columns() -> list[Column]:
    return [_id(), Column("mesa", Integer, nullable=False), *_order_line_columns()]


def order_mirror_columns() -> list[Column]:
    return [_id(), *_order_line_columns()]


def category_columns() -> list[Column]:
    return [_id(), Column("categoria", String(255), nullable=False)]


def product_columns() -> list[Column]:
    return [
        _id(),
        Column("nombre", String(255), nullable=False),
        Column("precio", Integer, nullable=False),
        Column("categoria", String(255), nullable=False),
        Column("estado", String(255), nullable=False),
    ]


def mesa_columns() -> list[Column]:
    return [
        _id(),
        Column("mesa", Integer, nullable=False),
        Column("estado", String(255), nullable=False),
    ]


def payment_columns() -> list[Column]:
    return [
        _id(),
        Column("metodoPago", String(255), nullable=False),
        Column("totalVenta", Integer, nullable=False),
        Column("descuentoTotal", Integer, nullable=False),
        Column("propina", Integer, nullable=False),
        Column("montoPagado", Integer, nullable=False),
        Column("cambioDevuelto", Integer, nullable=False),
    ]


DATASET = TableFamily(
    name="dataset",
    prefix="baseDeDatos",
    columns=dataset_columns,
    catalog=DatasetCatalog,
    catalog_column="nombre_base_datos",
)
PLANOGRAM = TableFamily(
    name="planogram",
    prefix="planograma",
    columns=planogram_columns,
    catalog=PlanogramCatalog,
    catalog_column="nombre_planograma",
)
USER_COPY = TableFamily(name="user-dataset-copy", arity=2)
TENANT_LINK = TableFamily(name="tenant-link", suffix="database", columns=tenant_link_columns)
INVENTORY = TableFamily(name="inventory", prefix="inventory")
ORDER_LEDGER = TableFamily(name="order-ledger", prefix="ordenes", arity=0, columns=order_ledger_columns)
ORDER_MIRROR = TableFamily(name="order-mirror", prefix="orden", columns=order_mirror_columns)

CATEGORIES = TableFamily(name="categories", prefix="categorias", arity=0, columns=category_columns)
PRODUCTS = TableFamily(name="products", prefix="productos", arity=0, columns=product_columns)
MESAS = TableFamily(name="mesas", prefix="mesas", arity=0, columns=mesa_columns)
PAYMENTS = TableFamily(name="payments", prefix="ventasHoy", arity=0, columns=payment_columns)

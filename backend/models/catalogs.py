from sqlalchemy import Column, Integer, String, UniqueConstraint

from db.base import Base


class DatasetCatalog(Base):
    __tablename__ = "bases_datos"

    id = Column(Integer, primary_key=True, index=True)
    nombre_base_datos = Column(String(255), nullable=False)

    __table_args__ = (
        UniqueConstraint("nombre_base_datos", name="uq_bases_datos_nombre"),
    )


class PlanogramCatalog(Base):
    __tablename__ = "bases_planograma"

    id = Column(Integer, primary_key=True, index=True)
    nombre_planograma = Column(String(255), nullable=False)

    __table_args__ = (
        UniqueConstraint("nombre_planograma", name="uq_bases_planograma_nombre"),
    )

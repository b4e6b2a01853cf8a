from typing import List

from pydantic import BaseModel, Field


class OrderItem(BaseModel):
    mesa: int
    producto: str = Field(..., min_length=1)
    cantidad: int
    precioUnitario: int
    entregado: str
    pagado: str


class OrderBatchRequest(BaseModel):
    ordenes: List[OrderItem]


class OrderLine(BaseModel):
    producto: str = Field(..., min_length=1)
    cantidad: int
    precioUnitario: int
    entregado: str
    pagado: str


class OrderQuantityUpdate(BaseModel):
    producto: str = Field(..., min_length=1)
    cantidad: int


class UserDatabaseLink(BaseModel):
    username: str
    baseDeDatos: str


class CategoryCreate(BaseModel):
    nombreCategoria: str = Field(..., min_length=1)


class ProductCreate(BaseModel):
    nombre: str = Field(..., min_length=1)
    precio: int
    categoria: str
    estado: str


class MesaPayload(BaseModel):
    mesa: int
    estado: str


class PaymentCreate(BaseModel):
    metodoPago: str
    totalVenta: int
    descuentoTotal: int
    propina: int
    montoPagado: int
    cambioDevuelto: int

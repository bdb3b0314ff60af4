"""Builders for fleet resources used across tests."""

from datetime import date

from models.driver import Driver
from models.service import Service
from models.tractor import Tractor
from models.trailer import Trailer

GAS = Service(id=1, nombre="Gas Licuado")
FUEL = Service(id=2, nombre="Combustible Liquido")


def make_driver(**overrides) -> Driver:
    data = {
        "id": 1,
        "nombre": "Juan",
        "apellido": "Pérez",
        "dni": "25678901",
        "fecha_vencimiento_licencia": date(2025, 6, 1),
    }
    data.update(overrides)
    return Driver(**data)


def make_tractor(**overrides) -> Tractor:
    data = {
        "id": 2,
        "marca": "Scania",
        "modelo": "R450",
        "dominio": "AB539RO",
        "vencimiento_rto": date(2025, 6, 1),
        "tipo_servicio": "Gas Licuado",
    }
    data.update(overrides)
    return Tractor(**data)


def make_trailer(**overrides) -> Trailer:
    data = {
        "id": 3,
        "nombre": "Cisterna 1",
        "dominio": "AC123BD",
        "tipo_servicio": "Gas Licuado",
        "vencimiento_mangueras": date(2025, 6, 1),
        "vencimiento_prueba_hidraulica": date(2025, 6, 1),
        "vencimiento_valvula_flujo": date(2025, 6, 1),
    }
    data.update(overrides)
    return Trailer(**data)

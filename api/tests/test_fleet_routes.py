"""
Unit tests for driver, tractor, trailer, service and user routes.

Repositories are replaced with mocks; no database is needed.
"""

import pytest
from unittest.mock import Mock, patch
from fastapi.testclient import TestClient
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from main import app


client = TestClient(app)
headers = {"X-API-Key": "test-api-key"}


@pytest.fixture
def mock_repo():
    return Mock()


class TestDriverRoutes:
    """Test suite for driver routes."""

    @pytest.fixture(autouse=True)
    def patched(self, mock_repo):
        with patch('routes.driver_routes.repo', mock_repo):
            yield

    def test_create_driver(self, mock_repo):
        mock_repo.find_by_dni.return_value = None
        mock_repo.find_by_email.return_value = None
        mock_repo.create.return_value = {"id": 1, "nombre": "Juan"}

        response = client.post("/drivers/", json={
            "nombre": "Juan", "apellido": "Pérez", "dni": "25678901",
            "email": "juan.perez@example.com", "fecha_vencimiento_licencia": "2026-05-15"
        }, headers=headers)

        assert response.status_code == 201
        assert response.json()["id"] == 1

    def test_duplicate_dni(self, mock_repo):
        mock_repo.find_by_dni.return_value = {"id": 4}

        response = client.post("/drivers/", json={
            "nombre": "Juan", "apellido": "Pérez", "dni": "25678901"
        }, headers=headers)

        assert response.status_code == 409
        mock_repo.create.assert_not_called()

    def test_list_annotates_license(self, mock_repo):
        mock_repo.get_all.return_value = [{
            "id": 1, "nombre": "Juan", "apellido": "Pérez", "dni": "25678901",
            "fecha_vencimiento_licencia": "2024-01-05", "estado": "en uso"
        }]

        response = client.get("/drivers/", params={"reference_date": "2024-01-10"}, headers=headers)

        assert response.status_code == 200
        documento = response.json()[0]["documentos"][0]
        assert documento["days"] == -5
        assert documento["status"] == "expired"
        assert documento["badge"] == "Vencido"

    def test_empty_update(self, mock_repo):
        mock_repo.get_by_id.return_value = {"id": 1}
        response = client.patch("/drivers/1", json={}, headers=headers)
        assert response.status_code == 400

    def test_update_license_expiry(self, mock_repo):
        mock_repo.get_by_id.return_value = {"id": 1}
        mock_repo.update.return_value = {"id": 1, "fecha_vencimiento_licencia": "2026-01-01"}

        response = client.patch("/drivers/1/expiries", json={"fecha_vencimiento_licencia": "2026-01-01T00:00:00"},
                                headers=headers)

        assert response.status_code == 200
        assert mock_repo.update.call_args[0][1] == {"fecha_vencimiento_licencia": date_value("2026-01-01")}

    def test_delete_missing_driver(self, mock_repo):
        mock_repo.delete.return_value = False
        response = client.delete("/drivers/9", headers=headers)
        assert response.status_code == 404


def date_value(text):
    from datetime import date
    return date.fromisoformat(text)


class TestTractorRoutes:
    """Test suite for tractor routes."""

    @pytest.fixture(autouse=True)
    def patched(self, mock_repo):
        with patch('routes.tractor_routes.repo', mock_repo):
            yield

    def test_plate_check_normalizes(self, mock_repo):
        mock_repo.find_by_plate.return_value = {"id": 2, "marca": "Scania", "modelo": "R450"}

        response = client.get("/tractors/plate-check", params={"dominio": "ab 539-ro"}, headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["exists"] is True
        assert data["dominio"] == "AB539RO"
        assert "Scania R450" in data["info"]
        mock_repo.find_by_plate.assert_called_once_with("AB539RO", None)

    def test_plate_check_excludes_edited_tractor(self, mock_repo):
        mock_repo.find_by_plate.return_value = None

        response = client.get("/tractors/plate-check", params={"dominio": "AB539RO", "exclude_id": 2},
                              headers=headers)

        assert response.json() == {"exists": False, "dominio": "AB539RO"}
        mock_repo.find_by_plate.assert_called_once_with("AB539RO", 2)

    def test_duplicate_plate_on_create(self, mock_repo):
        mock_repo.find_by_plate.return_value = {"id": 2, "marca": "Scania", "modelo": "R450"}

        response = client.post("/tractors/", json={
            "marca": "Iveco", "modelo": "Stralis", "dominio": "ab539ro"
        }, headers=headers)

        assert response.status_code == 409
        mock_repo.create.assert_not_called()

    def test_update_state_accepts_legacy_label(self, mock_repo):
        mock_repo.get_by_id.return_value = {"id": 2}
        mock_repo.update.return_value = {"id": 2, "estado": "en reparacion"}

        response = client.patch("/tractors/2", json={"estado": "En Reparación"}, headers=headers)

        assert response.status_code == 200
        assert mock_repo.update.call_args[0][1]["estado"] == "en reparacion"


class TestTrailerRoutes:
    """Test suite for trailer routes."""

    @pytest.fixture(autouse=True)
    def patched(self, mock_repo):
        with patch('routes.trailer_routes.repo', mock_repo):
            yield

    def test_service_change_clears_other_documents(self, mock_repo):
        mock_repo.get_by_id.return_value = {
            "id": 3, "nombre": "Cisterna 1", "dominio": "AC123BD",
            "tipo_servicio": "Combustible Liquido",
            "vencimiento_rto": "2025-01-01",
            "vencimiento_espesores": "2025-02-01",
        }
        mock_repo.update.return_value = {"id": 3}

        response = client.patch("/trailers/3", json={
            "tipo_servicio": "Gas Licuado",
            "vencimiento_mangueras": "2025-03-01"
        }, headers=headers)

        assert response.status_code == 200
        update = mock_repo.update.call_args[0][1]
        assert update["tipo_servicio"] == "Gas Licuado"
        assert update["vencimiento_rto"] is None
        assert update["vencimiento_espesores"] is None
        assert update["vencimiento_mangueras"] == date_value("2025-03-01")

    def test_update_without_service_change_keeps_documents(self, mock_repo):
        mock_repo.get_by_id.return_value = {"id": 3, "nombre": "Cisterna 1", "dominio": "AC123BD"}
        mock_repo.update.return_value = {"id": 3}

        response = client.patch("/trailers/3", json={"nombre": "Cisterna 2"}, headers=headers)

        assert response.status_code == 200
        assert mock_repo.update.call_args[0][1] == {"nombre": "Cisterna 2"}

    def test_list_shows_service_documents(self, mock_repo):
        mock_repo.get_all.return_value = [{
            "id": 3, "nombre": "Cisterna 1", "dominio": "AC123BD", "tipo_servicio": "gas licuado"
        }]

        response = client.get("/trailers/", headers=headers)

        kinds = [d["kind"] for d in response.json()[0]["documentos"]]
        assert kinds == ["mangueras", "prueba_hidraulica", "valvula_flujo"]


class TestServiceRoutes:
    """Test suite for service routes."""

    @pytest.fixture(autouse=True)
    def patched(self, mock_repo):
        with patch('routes.service_routes.repo', mock_repo):
            yield

    def test_duplicate_name(self, mock_repo):
        mock_repo.find_by_name.return_value = {"id": 1, "nombre": "Gas Licuado"}
        response = client.post("/services/", json={"nombre": "gas licuado"}, headers=headers)
        assert response.status_code == 409

    def test_get_service_with_documents(self, mock_repo):
        mock_repo.get_by_id.return_value = {"id": 1, "nombre": "Gas Licuado"}

        response = client.get("/services/1", headers=headers)

        labels = [d["label"] for d in response.json()["documentos_requeridos"]]
        assert labels == ["Mangueras", "Prueba Hidráulica", "Válvula de Flujo"]


class TestUserRoutes:
    """Test suite for user routes."""

    @pytest.fixture(autouse=True)
    def patched(self, mock_repo):
        with patch('routes.user_routes.repo', mock_repo):
            yield

    def test_create_user_lowercases_username(self, mock_repo):
        mock_repo.find_by_username.return_value = None
        mock_repo.create.side_effect = lambda user: {"id": 1, **user.model_dump(exclude={"id"})}

        response = client.post("/users/", json={"usuario": " Ana@RutaControl.com ", "rol_id": 4}, headers=headers)

        assert response.status_code == 201
        data = response.json()
        assert data["usuario"] == "ana@rutacontrol.com"
        assert data["rol"] == "Logístico"
        assert "edit_vencimientos" in data["permisos"]

    def test_duplicate_user(self, mock_repo):
        mock_repo.find_by_username.return_value = {"id": 2}
        response = client.post("/users/", json={"usuario": "ana@rutacontrol.com", "rol_id": 4}, headers=headers)
        assert response.status_code == 409


class TestRoleEnforcement:
    """Routes reject roles without the needed permission when enforcement is on."""

    def test_chofer_cannot_create_tractors(self, mock_repo):
        with patch('utils.permissions.settings.enforce_roles', True), \
             patch('routes.tractor_routes.repo', mock_repo):
            response = client.post("/tractors/", json={
                "marca": "Iveco", "modelo": "Stralis", "dominio": "AA123BB"
            }, headers={**headers, "X-Role-Id": "2"})

        assert response.status_code == 403
        mock_repo.create.assert_not_called()

    def test_logistico_can_edit_expiries(self, mock_repo):
        mock_repo.get_by_id.return_value = {"id": 2}
        mock_repo.update.return_value = {"id": 2}
        with patch('utils.permissions.settings.enforce_roles', True), \
             patch('routes.tractor_routes.repo', mock_repo):
            response = client.patch("/tractors/2/expiries", json={"vencimiento_rto": "2026-01-01"},
                                    headers={**headers, "X-Role-Id": "4"})

        assert response.status_code == 200


class TestAppEndpoints:
    """Test suite for the unauthenticated app endpoints."""

    def test_health(self):
        with patch('main.db.verify_connectivity', return_value=False):
            response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["database"] == "unhealthy"

    def test_root(self):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["documentation"] == "/docs"

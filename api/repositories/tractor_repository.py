from typing import Dict, Optional

from repositories.node_repository import NodeRepository


class TractorRepository(NodeRepository):
    """Repository for Tractor entity operations"""

    label = "Tractor"
    order_by = "n.dominio"
    filterable = ("estado", "tipo_servicio")

    def find_by_plate(self, dominio: str, exclude_id: Optional[int] = None) -> Optional[Dict]:
        return self.find_by_property("dominio", dominio, exclude_id)

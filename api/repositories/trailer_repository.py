from typing import Dict, Optional

from repositories.node_repository import NodeRepository


class TrailerRepository(NodeRepository):
    """Repository for Trailer (semirremolque) entity operations"""

    label = "Trailer"
    order_by = "n.dominio"
    filterable = ("estado", "tipo_servicio")

    def find_by_plate(self, dominio: str, exclude_id: Optional[int] = None) -> Optional[Dict]:
        return self.find_by_property("dominio", dominio, exclude_id)

from typing import Dict, Optional

from repositories.node_repository import NodeRepository


class ServiceRepository(NodeRepository):
    """Repository for Service entity operations"""

    label = "Service"
    order_by = "n.nombre"

    def find_by_name(self, nombre: str, exclude_id: Optional[int] = None) -> Optional[Dict]:
        """Case-insensitive lookup by service name"""
        query = """
        MATCH (n:Service)
        WHERE toLower(n.nombre) = toLower($nombre)
          AND ($exclude_id IS NULL OR n.id <> $exclude_id)
        RETURN n
        LIMIT 1
        """
        result = self.execute_query(query, {"nombre": nombre.strip(), "exclude_id": exclude_id})
        return result[0]['n'] if result else None

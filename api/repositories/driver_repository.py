from typing import Dict, List, Optional

from repositories.node_repository import NodeRepository


class DriverRepository(NodeRepository):
    """Repository for Driver entity operations"""

    label = "Driver"
    order_by = "n.apellido, n.nombre"
    filterable = ("estado", "activo")

    def find_by_dni(self, dni: str, exclude_id: Optional[int] = None) -> Optional[Dict]:
        return self.find_by_property("dni", dni, exclude_id)

    def find_by_email(self, email: str, exclude_id: Optional[int] = None) -> Optional[Dict]:
        return self.find_by_property("email", email, exclude_id)

    def get_active(self) -> List[Dict]:
        """Active drivers, as offered in trip selectors"""
        query = """
        MATCH (n:Driver)
        WHERE n.activo = true
        RETURN n
        ORDER BY n.apellido, n.nombre
        """
        result = self.execute_query(query)
        return [record['n'] for record in result]

from typing import Dict, Optional

from repositories.node_repository import NodeRepository
from utils.normalizers import normalize_email


class UserRepository(NodeRepository):
    """Repository for User entity operations"""

    label = "User"
    order_by = "n.usuario"
    filterable = ("rol_id", "activo")

    def find_by_username(self, usuario: str, exclude_id: Optional[int] = None) -> Optional[Dict]:
        return self.find_by_property("usuario", normalize_email(usuario), exclude_id)

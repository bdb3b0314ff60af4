from typing import Dict, List, Optional
from datetime import datetime, timezone

from pydantic import BaseModel

from database import BaseRepository


class NodeRepository(BaseRepository):
    """CRUD for fleet entities stored as single nodes with integer ids.

    Subclasses set ``label`` and ``order_by``; the label is interpolated into
    Cypher and must never come from user input.
    """

    label: str = ""
    order_by: str = "n.id"

    # filter name -> property compared with equality
    filterable: tuple = ()

    def create(self, entity: BaseModel) -> Dict:
        """Create a node with a freshly allocated id"""
        params = self.serialize(entity.model_dump(exclude={"id"}))
        params["id"] = self.next_id(self.label)
        params["created_at"] = datetime.now(timezone.utc).isoformat()

        query = f"""
        CREATE (n:{self.label})
        SET n = $props
        RETURN n
        """
        result = self.execute_query(query, {"props": params})
        return result[0]['n'] if result else None

    def get_by_id(self, entity_id: int) -> Optional[Dict]:
        query = f"""
        MATCH (n:{self.label} {{id: $id}})
        RETURN n
        """
        result = self.execute_query(query, {"id": entity_id})
        return result[0]['n'] if result else None

    def get_all(self, skip: int = 0, limit: int = 100, filters: Dict = None) -> List[Dict]:
        """Get all nodes with pagination and equality filters"""
        where_clauses = []
        params = {"skip": skip, "limit": limit}

        if filters:
            for key in self.filterable:
                if filters.get(key) is not None:
                    where_clauses.append(f"n.{key} = ${key}")
                    value = filters[key]
                    params[key] = value.value if hasattr(value, 'value') else value

        where_clause = f"WHERE {' AND '.join(where_clauses)}" if where_clauses else ""

        query = f"""
        MATCH (n:{self.label})
        {where_clause}
        RETURN n
        ORDER BY {self.order_by}
        SKIP $skip
        LIMIT $limit
        """

        result = self.execute_query(query, params)
        return [record['n'] for record in result]

    def update(self, entity_id: int, updates: Dict) -> Optional[Dict]:
        """Update node properties; None values clear the property"""
        set_clauses = []
        params = {"id": entity_id}

        for key, value in self.serialize(updates).items():
            set_clauses.append(f"n.{key} = ${key}")
            params[key] = value

        # Always update updated_at
        set_clauses.append("n.updated_at = $updated_at")
        params['updated_at'] = datetime.now(timezone.utc).isoformat()

        query = f"""
        MATCH (n:{self.label} {{id: $id}})
        SET {", ".join(set_clauses)}
        RETURN n
        """

        result = self.execute_query(query, params)
        return result[0]['n'] if result else None

    def delete(self, entity_id: int) -> bool:
        """Delete a node and its relationships"""
        query = f"""
        MATCH (n:{self.label} {{id: $id}})
        DETACH DELETE n
        RETURN count(n) as deleted
        """
        result = self.execute_query(query, {"id": entity_id})
        return result[0]['deleted'] > 0 if result else False

    def exists(self, entity_id: int) -> bool:
        query = f"""
        MATCH (n:{self.label} {{id: $id}})
        RETURN count(n) > 0 as exists
        """
        result = self.execute_query(query, {"id": entity_id})
        return result[0]['exists'] if result else False

    def find_by_property(self, key: str, value, exclude_id: Optional[int] = None) -> Optional[Dict]:
        """Find the first node whose property equals value, optionally skipping one id"""
        query = f"""
        MATCH (n:{self.label})
        WHERE n.{key} = $value AND ($exclude_id IS NULL OR n.id <> $exclude_id)
        RETURN n
        LIMIT 1
        """
        result = self.execute_query(query, {"value": value, "exclude_id": exclude_id})
        return result[0]['n'] if result else None

    def set_state(self, ids: List[int], estado: str) -> int:
        """Set the physical state of several nodes at once"""
        query = f"""
        MATCH (n:{self.label})
        WHERE n.id IN $ids
        SET n.estado = $estado, n.updated_at = $updated_at
        RETURN count(n) as updated
        """
        params = {
            "ids": list(ids),
            "estado": estado,
            "updated_at": datetime.now(timezone.utc).isoformat()
        }
        result = self.execute_query(query, params)
        return result[0]['updated'] if result else 0

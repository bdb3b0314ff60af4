from typing import Dict, List, Optional
from datetime import datetime, timezone

from repositories.node_repository import NodeRepository


class TripRepository(NodeRepository):
    """Repository for Trip entity operations.

    A trip owns its destinations through HAS_DESTINATION and its stops
    through HAS_STOP. Implements the persistence side of trip submission.
    """

    label = "Trip"
    order_by = "n.fecha_salida DESC, n.id DESC"
    filterable = ("estado", "chofer_id", "tractor_id", "semirremolque_id", "servicio_id")

    def _with_destinations(self, record: Dict) -> Dict:
        trip = dict(record['t'])
        trip['destinos'] = sorted(record.get('destinos') or [], key=lambda d: d.get('orden') or 0)
        return trip

    def get_by_id(self, trip_id: int) -> Optional[Dict]:
        """Get a trip with its destinations ordered by ``orden``"""
        query = """
        MATCH (t:Trip {id: $id})
        OPTIONAL MATCH (t)-[:HAS_DESTINATION]->(d:Destination)
        RETURN t, collect(d) as destinos
        """
        result = self.execute_query(query, {"id": trip_id})
        return self._with_destinations(result[0]) if result else None

    def get_all(self, skip: int = 0, limit: int = 100, filters: Dict = None) -> List[Dict]:
        """Get trips with their destinations, newest departure first"""
        where_clauses = []
        params = {"skip": skip, "limit": limit}

        if filters:
            for key in self.filterable:
                if filters.get(key) is not None:
                    where_clauses.append(f"t.{key} = ${key}")
                    value = filters[key]
                    params[key] = value.value if hasattr(value, 'value') else value

        where_clause = f"WHERE {' AND '.join(where_clauses)}" if where_clauses else ""

        query = f"""
        MATCH (t:Trip)
        {where_clause}
        WITH t
        ORDER BY t.fecha_salida DESC, t.id DESC
        SKIP $skip
        LIMIT $limit
        OPTIONAL MATCH (t)-[:HAS_DESTINATION]->(d:Destination)
        RETURN t, collect(d) as destinos
        ORDER BY t.fecha_salida DESC, t.id DESC
        """
        result = self.execute_query(query, params)
        return [self._with_destinations(record) for record in result]

    def create_trip(self, payload: Dict) -> Dict:
        """Create a programmed trip and its destinations in one transaction"""
        trip_id = self.next_id(self.label)
        props = {k: v for k, v in payload.items() if k != 'destinos'}
        props.update({
            "id": trip_id,
            "estado": "programado",
            "created_at": datetime.now(timezone.utc).isoformat()
        })

        queries = [("CREATE (t:Trip) SET t = $props", {"props": props})]
        for destination in payload.get('destinos', []):
            queries.append(self._create_destination_query(trip_id, destination))

        self.transaction_write(queries)
        return self.get_by_id(trip_id)

    def update_trip(self, trip_id: int, payload: Dict) -> Optional[Dict]:
        """Update trip fields and reconcile its destinations.

        Destinations keep their id when the payload carries it, so arrival
        stops that point at them stay valid; the rest are recreated.
        """
        if not self.exists(trip_id):
            return None

        props = {k: v for k, v in payload.items() if k != 'destinos'}
        props['updated_at'] = datetime.now(timezone.utc).isoformat()
        destinations = payload.get('destinos', [])
        keep = [d['id'] for d in destinations if d.get('id')]

        queries = [
            ("MATCH (t:Trip {id: $id}) SET t += $props", {"id": trip_id, "props": props}),
            (
                """
                MATCH (t:Trip {id: $id})-[:HAS_DESTINATION]->(d:Destination)
                WHERE NOT d.id IN $keep
                DETACH DELETE d
                """,
                {"id": trip_id, "keep": keep}
            ),
        ]
        for destination in destinations:
            if destination.get('id'):
                queries.append((
                    """
                    MATCH (t:Trip {id: $trip_id})-[:HAS_DESTINATION]->(d:Destination {id: $id})
                    SET d.ubicacion = $ubicacion, d.orden = $orden
                    """,
                    {
                        "trip_id": trip_id,
                        "id": destination['id'],
                        "ubicacion": destination['ubicacion'],
                        "orden": destination['orden']
                    }
                ))
            else:
                queries.append(self._create_destination_query(trip_id, destination))

        self.transaction_write(queries)
        return self.get_by_id(trip_id)

    def _create_destination_query(self, trip_id: int, destination: Dict) -> tuple:
        query = """
        MATCH (t:Trip {id: $trip_id})
        CREATE (t)-[:HAS_DESTINATION]->(d:Destination {
            id: $id,
            viaje_id: $trip_id,
            ubicacion: $ubicacion,
            orden: $orden
        })
        """
        return query, {
            "trip_id": trip_id,
            "id": self.next_id("Destination"),
            "ubicacion": destination['ubicacion'],
            "orden": destination['orden']
        }

    def delete(self, trip_id: int) -> bool:
        """Delete a trip together with its destinations and stops"""
        query = """
        MATCH (t:Trip {id: $id})
        OPTIONAL MATCH (t)-[:HAS_DESTINATION|HAS_STOP]->(child)
        DETACH DELETE child, t
        RETURN count(DISTINCT t) as deleted
        """
        result = self.execute_query(query, {"id": trip_id})
        return result[0]['deleted'] > 0 if result else False

    def set_trip_state(self, trip_id: int, estado: str) -> Optional[Dict]:
        query = """
        MATCH (t:Trip {id: $id})
        SET t.estado = $estado, t.updated_at = $updated_at
        RETURN t
        """
        params = {
            "id": trip_id,
            "estado": estado,
            "updated_at": datetime.now(timezone.utc).isoformat()
        }
        result = self.execute_query(query, params)
        return result[0]['t'] if result else None

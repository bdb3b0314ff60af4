from typing import Dict, List, Optional
from datetime import datetime, timezone

from database import BaseRepository
from models.stop import Stop


class StopRepository(BaseRepository):
    """Repository for Stop (parada) entity operations"""

    def create(self, stop: Stop) -> Optional[Dict]:
        """Record a stop and link it to its trip"""
        query = """
        MATCH (t:Trip {id: $viaje_id})
        CREATE (t)-[:HAS_STOP]->(s:Stop {
            id: $id,
            viaje_id: $viaje_id,
            odometro: $odometro,
            ubicacion: $ubicacion,
            tipo: $tipo,
            destino_id: $destino_id,
            fecha_hora: $fecha_hora
        })
        RETURN s
        """
        params = self.serialize(stop.model_dump())
        params['id'] = self.next_id("Stop")
        if not params.get('fecha_hora'):
            params['fecha_hora'] = datetime.now(timezone.utc).isoformat()

        result = self.execute_query(query, params)
        return result[0]['s'] if result else None

    def get_by_trip(self, viaje_id: int) -> List[Dict]:
        """All stops of a trip in the order they were recorded"""
        query = """
        MATCH (t:Trip {id: $viaje_id})-[:HAS_STOP]->(s:Stop)
        RETURN s
        ORDER BY s.fecha_hora, s.id
        """
        result = self.execute_query(query, {"viaje_id": viaje_id})
        return [record['s'] for record in result]

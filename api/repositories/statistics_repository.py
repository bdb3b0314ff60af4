from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

from database import BaseRepository


# Kilometres of a trip: spread of the odometer readings of its stops
TRIP_KM = """
OPTIONAL MATCH (t)-[:HAS_STOP]->(s:Stop)
WITH t, CASE WHEN count(s) > 1 THEN max(s.odometro) - min(s.odometro) ELSE 0 END as km
"""


class StatisticsRepository(BaseRepository):
    """Aggregated fleet statistics for the dashboard"""

    def _trip_filter(self, filters: Optional[Dict]) -> Tuple[str, Dict]:
        where_clauses = []
        params = {}
        filters = filters or {}

        for key in ("chofer_id", "tractor_id", "semirremolque_id", "servicio_id", "alcance"):
            if filters.get(key) is not None:
                where_clauses.append(f"t.{key} = ${key}")
                params[key] = filters[key]

        fecha_inicio: Optional[date] = filters.get("fecha_inicio")
        if fecha_inicio:
            where_clauses.append("t.fecha_salida >= $fecha_inicio")
            params["fecha_inicio"] = fecha_inicio.isoformat()

        fecha_fin: Optional[date] = filters.get("fecha_fin")
        if fecha_fin:
            # fecha_salida holds datetimes; compare against the next day to include the whole end date
            where_clauses.append("t.fecha_salida < $fecha_fin")
            params["fecha_fin"] = (fecha_fin + timedelta(days=1)).isoformat()

        where_clause = f"WHERE {' AND '.join(where_clauses)}" if where_clauses else ""
        return where_clause, params

    def get_general(self, filters: Dict = None) -> Dict:
        """Trip counts per state, kilometres and fleet availability"""
        where_clause, params = self._trip_filter(filters)
        query = f"""
        MATCH (t:Trip)
        {where_clause}
        {TRIP_KM}
        RETURN
            count(t) as total_viajes,
            count(CASE WHEN t.estado = 'programado' THEN 1 END) as viajes_programados,
            count(CASE WHEN t.estado = 'en curso' THEN 1 END) as viajes_en_curso,
            count(CASE WHEN t.estado = 'finalizado' THEN 1 END) as viajes_finalizados,
            coalesce(sum(km), 0) as total_km_recorridos
        """
        result = self.execute_query(query, params)
        general = result[0] if result else {
            "total_viajes": 0,
            "viajes_programados": 0,
            "viajes_en_curso": 0,
            "viajes_finalizados": 0,
            "total_km_recorridos": 0,
        }

        finalized = general.get("viajes_finalizados") or 0
        general["promedio_km_por_viaje"] = (
            round(general["total_km_recorridos"] / finalized, 2) if finalized else 0
        )

        fleet_query = """
        OPTIONAL MATCH (d:Driver) WHERE d.activo = true
        WITH count(d) as total_choferes_activos
        OPTIONAL MATCH (tr:Tractor) WHERE tr.estado = 'disponible'
        RETURN total_choferes_activos, count(tr) as total_tractores_disponibles
        """
        fleet = self.execute_query(fleet_query)
        if fleet:
            general.update(fleet[0])
        return general

    def get_km_per_tractor(self, filters: Dict = None) -> List[Dict]:
        where_clause, params = self._trip_filter(filters)
        query = f"""
        MATCH (t:Trip)
        {where_clause}
        {TRIP_KM}
        MATCH (tr:Tractor {{id: t.tractor_id}})
        RETURN
            tr.id as tractor_id,
            tr.marca as tractor_marca,
            tr.modelo as tractor_modelo,
            tr.dominio as tractor_dominio,
            sum(km) as total_km,
            count(t) as cantidad_viajes
        ORDER BY total_km DESC
        """
        return self.execute_query(query, params)

    def get_trips_per_driver(self, filters: Dict = None) -> List[Dict]:
        where_clause, params = self._trip_filter(filters)
        query = f"""
        MATCH (t:Trip)
        {where_clause}
        {TRIP_KM}
        MATCH (d:Driver {{id: t.chofer_id}})
        RETURN
            d.id as chofer_id,
            d.nombre as chofer_nombre,
            d.apellido as chofer_apellido,
            count(t) as total_viajes,
            count(CASE WHEN t.estado = 'finalizado' THEN 1 END) as viajes_finalizados,
            count(CASE WHEN t.estado = 'en curso' THEN 1 END) as viajes_en_curso,
            sum(km) as total_km
        ORDER BY total_viajes DESC
        """
        return self.execute_query(query, params)

    def get_trips_per_service(self, filters: Dict = None) -> List[Dict]:
        where_clause, params = self._trip_filter(filters)
        query = f"""
        MATCH (t:Trip)
        {where_clause}
        MATCH (sv:Service {{id: t.servicio_id}})
        RETURN
            sv.id as servicio_id,
            sv.nombre as servicio_nombre,
            count(t) as total_viajes,
            count(CASE WHEN t.estado = 'programado' THEN 1 END) as viajes_programados,
            count(CASE WHEN t.estado = 'en curso' THEN 1 END) as viajes_en_curso,
            count(CASE WHEN t.estado = 'finalizado' THEN 1 END) as viajes_finalizados
        ORDER BY total_viajes DESC
        """
        return self.execute_query(query, params)

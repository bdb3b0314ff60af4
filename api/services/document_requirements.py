"""
Document Requirement Table.

Maps a service type to the ordered document kinds a trailer must present for
it, plus the base documents every driver and tractor carries. The table is
configuration data loaded from JSON; changing which documents apply to a
service means editing the file and calling ``reload_requirement_table``.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from config import settings
from models.resource import ResourceKind

logger = logging.getLogger(__name__)


def _service_key(service_type: Optional[str]) -> str:
    return " ".join(service_type.strip().lower().split()) if service_type else ""


class DocumentRequirementTable(BaseModel):
    """Static requirement table, validated on load.

    Every kind referenced by ``base`` or ``services`` must have a label.
    """

    labels: Dict[str, str] = Field(..., description="Document kind -> display label")
    base: Dict[ResourceKind, List[str]] = Field(
        default_factory=dict,
        description="Documents required for a resource kind regardless of service"
    )
    services: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Lower-cased service type -> ordered document kinds"
    )

    @field_validator("services")
    @classmethod
    def lower_service_keys(cls, v: Dict[str, List[str]]) -> Dict[str, List[str]]:
        return {_service_key(name): kinds for name, kinds in v.items()}

    @model_validator(mode="after")
    def check_labels(self):
        referenced = [k for kinds in self.base.values() for k in kinds]
        referenced += [k for kinds in self.services.values() for k in kinds]
        missing = sorted({k for k in referenced if k not in self.labels})
        if missing:
            raise ValueError(f"Document kinds without label: {', '.join(missing)}")
        return self

    @classmethod
    def from_file(cls, path) -> "DocumentRequirementTable":
        """Load and validate a table from a JSON file"""
        with open(Path(path), encoding="utf-8") as f:
            return cls.model_validate(json.load(f))

    def required_documents(self, service_type: Optional[str]) -> List[str]:
        """Ordered document kinds required by a service; unknown or absent -> []"""
        return list(self.services.get(_service_key(service_type), []))

    def documents_for(self, kind: ResourceKind, service_type: Optional[str] = None) -> List[str]:
        """Documents checked for a resource: base kinds, then service kinds for trailers"""
        kinds = list(self.base.get(kind, []))
        if kind == ResourceKind.TRAILER:
            kinds += self.required_documents(service_type)
        return list(dict.fromkeys(kinds))

    def label(self, kind: str) -> str:
        return self.labels.get(kind, kind)

    def known_services(self) -> List[str]:
        return list(self.services)


_table: Optional[DocumentRequirementTable] = None


def get_requirement_table() -> DocumentRequirementTable:
    """Return the loaded table, loading it on first use"""
    global _table
    if _table is None:
        _table = DocumentRequirementTable.from_file(settings.document_requirements_path)
        logger.info(
            f"Loaded document requirements for {len(_table.services)} services "
            f"from {settings.document_requirements_path}"
        )
    return _table


def reload_requirement_table(path: Optional[str] = None) -> DocumentRequirementTable:
    """Re-read the table from disk, replacing the cached copy.

    The previous table stays in place if the file is invalid.

    Args:
        path: Optional file to load instead of the configured one

    Returns:
        The newly loaded table
    """
    global _table
    source = path or settings.document_requirements_path
    table = DocumentRequirementTable.from_file(source)
    _table = table
    logger.info(f"Reloaded document requirements from {source}")
    return table


def required_documents(service_type: Optional[str]) -> List[str]:
    return get_requirement_table().required_documents(service_type)


def documents_for(kind: ResourceKind, service_type: Optional[str] = None) -> List[str]:
    return get_requirement_table().documents_for(kind, service_type)


def label(kind: str) -> str:
    return get_requirement_table().label(kind)


def retain_documents_for_service(documents: Dict[str, object], service_type: Optional[str]) -> Dict[str, object]:
    """
    Keep only the trailer documents allowed for a new service type.

    Builds a new mapping; the input is not modified. Kinds outside the
    service's requirements map to None so callers can clear them.

    Args:
        documents: Document kind -> expiry value
        service_type: The service type being switched to

    Returns:
        Document kind -> expiry, with disallowed kinds set to None
    """
    allowed = set(documents_for(ResourceKind.TRAILER, service_type))
    return {kind: (value if kind in allowed else None) for kind, value in documents.items()}

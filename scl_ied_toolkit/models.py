"""
Shared data models, enumerations, and exceptions for the SCL IED toolkit.

Provides:
- ``TemplateKind``, a ``str``-based enum naming the four template
  definitions found in ``DataTypeTemplates``.  Members compare equal to
  the element names (``TemplateKind.DO_TYPE == "DOType"``).
- Dataclasses for structured returns (IEDInfo, TemplateClosure,
  ExtractionReport).
- ``IncompleteDocumentError`` raised when a document lacks a section
  needed for extraction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

# ---------------------------------------------------------------------------
# Module logger
# ---------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# ===================================================================
# Enumerations
# ===================================================================

class TemplateKind(str, Enum):
    """Template definition kinds inside ``DataTypeTemplates``."""
    LNODE_TYPE = "LNodeType"
    DO_TYPE = "DOType"
    DA_TYPE = "DAType"
    ENUM_TYPE = "EnumType"


_FIELD_BY_KIND = {
    TemplateKind.LNODE_TYPE: "lnode_types",
    TemplateKind.DO_TYPE: "do_types",
    TemplateKind.DA_TYPE: "da_types",
    TemplateKind.ENUM_TYPE: "enum_types",
}


# ===================================================================
# Exceptions
# ===================================================================

class IncompleteDocumentError(ValueError):
    """The SCL document lacks a section required for extraction.

    Attributes:
        section: Local name of the missing section (e.g. ``'Communication'``).
        ied_name: Name of the IED being extracted, if known.
    """

    def __init__(self, section: str, ied_name: Optional[str] = None) -> None:
        self.section = section
        self.ied_name = ied_name
        message = f"SCL document is incomplete: no <{section}> section"
        if ied_name:
            message += f" (while extracting IED '{ied_name}')"
        super().__init__(message)


# ===================================================================
# Dataclasses - structured returns
# ===================================================================

@dataclass
class IEDInfo:
    """Metadata for a single IED.  Returned by IED listing operations."""
    name: str
    manufacturer: str
    type: str = ""
    desc: str = ""
    config_version: str = ""

    def to_dict(self) -> dict:
        """Serialize to a plain dict (for JSON compatibility)."""
        d: dict[str, Any] = {
            "name": self.name,
            "manufacturer": self.manufacturer,
        }
        if self.type:
            d["type"] = self.type
        if self.desc:
            d["desc"] = self.desc
        if self.config_version:
            d["config_version"] = self.config_version
        return d


@dataclass
class TemplateClosure:
    """Template identifiers transitively reachable from an IED.

    Identifiers are kept per kind, in discovery order.  References that
    did not resolve to any template are recorded in ``unresolved`` as
    ``(kind, id)`` pairs.
    """
    lnode_types: list[str] = field(default_factory=list)
    do_types: list[str] = field(default_factory=list)
    da_types: list[str] = field(default_factory=list)
    enum_types: list[str] = field(default_factory=list)
    unresolved: list[tuple[str, str]] = field(default_factory=list)
    _members: set = field(default_factory=set, repr=False, compare=False)

    def ids(self, kind: TemplateKind) -> list[str]:
        """Return the identifiers collected for *kind*."""
        return getattr(self, _FIELD_BY_KIND[TemplateKind(kind)])

    def add(self, kind: TemplateKind, template_id: str) -> bool:
        """Record *template_id* under *kind*.  Returns False if already present."""
        key = (TemplateKind(kind), template_id)
        if key in self._members:
            return False
        self._members.add(key)
        self.ids(kind).append(template_id)
        return True

    def __contains__(self, key) -> bool:
        kind, template_id = key
        try:
            return (TemplateKind(kind), template_id) in self._members
        except ValueError:
            return False

    def __len__(self) -> int:
        return len(self._members)

    def to_dict(self) -> dict:
        return {
            "lnode_types": list(self.lnode_types),
            "do_types": list(self.do_types),
            "da_types": list(self.da_types),
            "enum_types": list(self.enum_types),
            "unresolved": [
                {"kind": str(TemplateKind(k).value), "id": i}
                for k, i in self.unresolved
            ],
        }


@dataclass
class ExtractionReport:
    """Dry-run summary of what extracting an IED would keep."""
    ied_name: str
    manufacturer: str
    subnetworks: list[str] = field(default_factory=list)
    connected_aps: list[str] = field(default_factory=list)
    closure: TemplateClosure = field(default_factory=TemplateClosure)

    def to_dict(self) -> dict:
        return {
            "ied_name": self.ied_name,
            "manufacturer": self.manufacturer,
            "subnetworks": list(self.subnetworks),
            "connected_aps": list(self.connected_aps),
            "templates": self.closure.to_dict(),
        }

"""
Typed child selection and sub-accessor classes for SCL documents.

The module-level functions select children of SCL elements by role
(``subnetworks``, ``connected_aps``, ``logical_nodes`` ...) so that the
topology filter and the template closure never embed path expressions.
They take any element, including detached copies, and resolve names in
that element's own namespace.

The accessor classes hold a back-reference to the owning
``SCLDocument`` and group its query API::

    doc = SCLDocument("station.scd")
    doc.ieds.list_all()
    doc.communication.list_subnetworks()
    doc.templates.list_ids("DOType")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterator, Optional

from lxml import etree

from .models import IEDInfo, TemplateKind
from .schema import (
    LOGICAL_NODE_TAGS,
    PREFERRED_MANUFACTURER,
    TEMPLATE_TAGS,
    UNDEFINED_MANUFACTURER,
)
from .utils import local_name, sibling_tag

if TYPE_CHECKING:
    from .document import SCLDocument


# ===================================================================
# Typed child selection
# ===================================================================

def children_named(parent: etree._Element, name: str) -> list:
    """Return direct children of *parent* whose local name is *name*."""
    return parent.findall(sibling_tag(parent, name))


def find_section(root: etree._Element, name: str) -> Optional[etree._Element]:
    """Return the first top-level section *name* under the SCL root."""
    return root.find(sibling_tag(root, name))


def ied_elements(root: etree._Element) -> list:
    """Return all top-level IED elements."""
    return children_named(root, 'IED')


def logical_nodes(ied: etree._Element) -> Iterator[etree._Element]:
    """Yield every LN0 and LN element below *ied*, in document order."""
    tags = [sibling_tag(ied, name) for name in LOGICAL_NODE_TAGS]
    return ied.iter(*tags)


def subnetworks(communication: etree._Element) -> list:
    """Return the SubNetwork children of a Communication element."""
    return children_named(communication, 'SubNetwork')


def connected_aps(subnetwork: etree._Element) -> list:
    """Return the ConnectedAP children of a SubNetwork element."""
    return children_named(subnetwork, 'ConnectedAP')


def connected_aps_not_for(communication: etree._Element, ied_name: str) -> list:
    """Return every ConnectedAP whose ``iedName`` is not *ied_name*."""
    return [
        cap
        for subnet in subnetworks(communication)
        for cap in connected_aps(subnet)
        if cap.get('iedName') != ied_name
    ]


def empty_subnetworks(communication: etree._Element) -> list:
    """Return SubNetwork children that hold no ConnectedAP."""
    return [
        subnet for subnet in subnetworks(communication)
        if not connected_aps(subnet)
    ]


def template_kind(element: etree._Element) -> Optional[TemplateKind]:
    """Return the TemplateKind of a DataTypeTemplates child, or None."""
    name = local_name(element)
    if name in TEMPLATE_TAGS:
        return TemplateKind(name)
    return None


def template_children(templates: etree._Element) -> list:
    """Return ``(kind, element)`` pairs for every template definition."""
    result = []
    for child in templates:
        kind = template_kind(child)
        if kind is not None:
            result.append((kind, child))
    return result


def manufacturer_of(ied: etree._Element) -> str:
    """Return the IED's manufacturer, or ``'Undefined'``."""
    return ied.get('manufacturer') or UNDEFINED_MANUFACTURER


def _preferred_first(manufacturers: list) -> list:
    """Stable-sort manufacturers so the preferred vendor comes first."""
    prefix = PREFERRED_MANUFACTURER.lower()
    return sorted(
        manufacturers,
        key=lambda m: 0 if m.lower().startswith(prefix) else 1,
    )


# ===================================================================
# IED Accessor
# ===================================================================

class IEDAccessor:
    """IED listing, lookup, and manufacturer grouping."""

    __slots__ = ("_doc",)

    def __init__(self, document: SCLDocument) -> None:
        self._doc = document

    def elements(self) -> list:
        """Return all IED elements in document order."""
        return ied_elements(self._doc.root)

    def names(self) -> list[str]:
        return [ied.get('name', '') for ied in self.elements()]

    def get_element(self, ied_name: str) -> etree._Element:
        """Return the IED element named *ied_name*.

        Raises:
            KeyError: If no IED has that name.
        """
        for ied in self.elements():
            if ied.get('name') == ied_name:
                return ied
        raise KeyError(f"IED '{ied_name}' not found.")

    def list_all(self) -> list[dict]:
        """Return IED info dicts for every IED in the document."""
        return [self._info(ied).to_dict() for ied in self.elements()]

    def group_by_manufacturer(self) -> dict[str, list[str]]:
        """Group IED names by manufacturer.

        Manufacturers appear in order of first occurrence, except that
        names starting with the preferred vendor are moved to the front.
        IEDs keep document order within their group.
        """
        groups: dict[str, list[str]] = {}
        for ied in self.elements():
            groups.setdefault(manufacturer_of(ied), []).append(
                ied.get('name', '')
            )
        return {m: groups[m] for m in _preferred_first(list(groups))}

    @staticmethod
    def _info(ied: etree._Element) -> IEDInfo:
        return IEDInfo(
            name=ied.get('name', ''),
            manufacturer=manufacturer_of(ied),
            type=ied.get('type', ''),
            desc=ied.get('desc', ''),
            config_version=ied.get('configVersion', ''),
        )


# ===================================================================
# Communication Accessor
# ===================================================================

class CommunicationAccessor:
    """SubNetwork and ConnectedAP queries."""

    __slots__ = ("_doc",)

    def __init__(self, document: SCLDocument) -> None:
        self._doc = document

    def list_subnetworks(self) -> list[dict]:
        """Return one dict per SubNetwork with its connected IEDs."""
        comm = self._doc.communication_element
        if comm is None:
            return []
        result = []
        for subnet in subnetworks(comm):
            result.append({
                'name': subnet.get('name', ''),
                'type': subnet.get('type', ''),
                'connected_aps': [
                    {
                        'ied_name': cap.get('iedName', ''),
                        'ap_name': cap.get('apName', ''),
                    }
                    for cap in connected_aps(subnet)
                ],
            })
        return result

    def subnetworks_for(self, ied_name: str) -> list[str]:
        """Return names of SubNetworks with at least one AP for *ied_name*."""
        return [
            s['name'] for s in self.list_subnetworks()
            if any(c['ied_name'] == ied_name for c in s['connected_aps'])
        ]


# ===================================================================
# Template Accessor
# ===================================================================

class TemplateAccessor:
    """Template pool listing and lookup."""

    __slots__ = ("_doc",)

    def __init__(self, document: SCLDocument) -> None:
        self._doc = document

    def list_ids(self, kind: str) -> list[str]:
        """Return ids of every template of *kind*, in document order."""
        kind = TemplateKind(kind)
        templates = self._doc.data_type_templates_element
        if templates is None:
            return []
        return [
            el.get('id', '') for k, el in template_children(templates)
            if k == kind
        ]

    def get_element(self, kind: str, template_id: str) -> etree._Element:
        """Return the first template of *kind* with *template_id*.

        Raises:
            KeyError: If no such template exists.
        """
        kind = TemplateKind(kind)
        templates = self._doc.data_type_templates_element
        if templates is not None:
            for k, el in template_children(templates):
                if k == kind and el.get('id') == template_id:
                    return el
        raise KeyError(f"{kind.value} '{template_id}' not found.")

    def counts(self) -> dict[str, int]:
        """Return the number of templates per kind."""
        result = {kind.value: 0 for kind in TemplateKind}
        templates = self._doc.data_type_templates_element
        if templates is not None:
            for kind, _ in template_children(templates):
                result[kind.value] += 1
        return result

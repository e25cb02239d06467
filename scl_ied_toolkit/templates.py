"""
DataTypeTemplates closure for single-IED extraction.

An IED depends on templates through a chain of ``type`` references::

    LN0/LN @lnType  -> LNodeType
    LNodeType/DO    -> DOType
    DOType/SDO      -> DOType          (nested, arbitrary depth)
    DOType/DA       -> DAType | EnumType
    DAType/BDA      -> DAType | EnumType (nested, arbitrary depth)

:func:`collect_template_closure` walks that graph breadth-first with an
explicit worklist until no new (kind, id) pair turns up, so nesting of
any depth and reference cycles are both handled.  Identity is always the
(kind, id) pair: an ``LNodeType`` and a ``DOType`` may share an id.

References that resolve to nothing (e.g. basic types, or templates the
document simply does not define) are recorded and skipped.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Dict, List, Optional, Tuple

from lxml import etree

from .accessors import children_named, logical_nodes, template_children
from .models import IncompleteDocumentError, TemplateClosure, TemplateKind
from .schema import BTYPE_ENUM, BTYPE_STRUCT
from .utils import deep_copy

logger = logging.getLogger(__name__)

TemplateKey = Tuple[TemplateKind, str]


# ---------------------------------------------------------------------------
# Index
# ---------------------------------------------------------------------------

def build_template_index(
    templates: etree._Element,
) -> Dict[TemplateKey, etree._Element]:
    """Map every ``(kind, id)`` in *templates* to its definition element.

    If a (kind, id) pair is defined more than once, the first definition
    wins and a warning is logged.
    """
    index: Dict[TemplateKey, etree._Element] = {}
    for kind, element in template_children(templates):
        key = (kind, element.get('id', ''))
        if key in index:
            logger.warning(
                "Duplicate %s id '%s' in DataTypeTemplates; "
                "using the first definition",
                kind.value, key[1],
            )
            continue
        index[key] = element
    return index


# ---------------------------------------------------------------------------
# Reference extraction
# ---------------------------------------------------------------------------

def _attribute_reference(
    attribute: etree._Element,
    index: Dict[TemplateKey, etree._Element],
) -> Optional[TemplateKey]:
    """Return the template a DA/BDA points at, or None for basic types."""
    type_id = attribute.get('type')
    if not type_id:
        return None
    b_type = attribute.get('bType')
    if b_type == BTYPE_ENUM:
        return (TemplateKind.ENUM_TYPE, type_id)
    if b_type == BTYPE_STRUCT:
        return (TemplateKind.DA_TYPE, type_id)
    if b_type:
        return None
    # No bType: take whichever kind the pool actually defines.
    for kind in (TemplateKind.DA_TYPE, TemplateKind.ENUM_TYPE):
        if (kind, type_id) in index:
            return (kind, type_id)
    return (TemplateKind.DA_TYPE, type_id)


def template_references(
    element: etree._Element,
    kind: TemplateKind,
    index: Dict[TemplateKey, etree._Element],
) -> List[TemplateKey]:
    """Return the ``(kind, id)`` pairs directly referenced by a template."""
    refs: List[TemplateKey] = []
    if kind == TemplateKind.LNODE_TYPE:
        for do in children_named(element, 'DO'):
            if do.get('type'):
                refs.append((TemplateKind.DO_TYPE, do.get('type')))
    elif kind == TemplateKind.DO_TYPE:
        for sdo in children_named(element, 'SDO'):
            if sdo.get('type'):
                refs.append((TemplateKind.DO_TYPE, sdo.get('type')))
        for da in children_named(element, 'DA'):
            ref = _attribute_reference(da, index)
            if ref is not None:
                refs.append(ref)
    elif kind == TemplateKind.DA_TYPE:
        for bda in children_named(element, 'BDA'):
            ref = _attribute_reference(bda, index)
            if ref is not None:
                refs.append(ref)
    return refs


# ---------------------------------------------------------------------------
# Closure
# ---------------------------------------------------------------------------

def collect_template_closure(
    templates: etree._Element,
    ied: etree._Element,
) -> TemplateClosure:
    """Compute every template *ied* transitively depends on.

    Args:
        templates: The DataTypeTemplates element to resolve against.
        ied: The IED whose LN0/LN ``lnType`` attributes seed the walk.

    Returns:
        A :class:`TemplateClosure` with ids grouped by kind in discovery
        order, plus any references that did not resolve.
    """
    index = build_template_index(templates)

    queue: deque = deque()
    for ln in logical_nodes(ied):
        ln_type = ln.get('lnType')
        if ln_type:
            queue.append((TemplateKind.LNODE_TYPE, ln_type))

    closure = TemplateClosure()
    visited: set = set()
    while queue:
        key = queue.popleft()
        if key in visited:
            continue
        visited.add(key)

        element = index.get(key)
        if element is None:
            closure.unresolved.append(key)
            logger.debug("Unresolved %s reference '%s'", key[0].value, key[1])
            continue

        closure.add(*key)
        for ref in template_references(element, key[0], index):
            if ref not in visited:
                queue.append(ref)

    logger.debug(
        "Template closure for IED '%s': %d template(s), %d unresolved",
        ied.get('name', ''), len(closure), len(closure.unresolved),
    )
    return closure


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

def filter_templates(
    templates: etree._Element,
    closure: TemplateClosure,
) -> etree._Element:
    """Remove every template not in *closure* from a detached copy.

    Operates **in place**.  Later duplicates of a kept (kind, id) pair are
    removed as well.  Non-template children are left untouched.

    Returns:
        The same *templates* element.
    """
    kept: set = set()
    stale = []
    for kind, element in template_children(templates):
        key = (kind, element.get('id', ''))
        if key in closure and key not in kept:
            kept.add(key)
        else:
            stale.append(element)

    for element in stale:
        templates.remove(element)
    return templates


def extract_templates(document, ied: etree._Element) -> etree._Element:
    """Return a copy of DataTypeTemplates holding only what *ied* needs.

    Args:
        document: The source :class:`SCLDocument`.
        ied: An IED element belonging to *document*.

    Raises:
        IncompleteDocumentError: If *document* has no DataTypeTemplates.
    """
    source = document.data_type_templates_element
    if source is None:
        raise IncompleteDocumentError('DataTypeTemplates', ied.get('name'))
    closure = collect_template_closure(source, ied)
    return filter_templates(deep_copy(source), closure)

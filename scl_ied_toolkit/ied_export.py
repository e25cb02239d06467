"""
Single-IED export operations for SCL files.

Extracts one IED from a loaded SCD into a standalone CID document that
contains exactly three sections, in this order:

  - ``Communication``      -- only the SubNetworks / ConnectedAPs of the IED
  - ``IED``                -- a deep copy of the IED itself
  - ``DataTypeTemplates``  -- only the templates the IED transitively uses

The source document is never modified, so several IEDs can be extracted
from the same loaded SCD one after another.
"""

from __future__ import annotations

import logging
import os
from typing import Callable, Optional, Union

from lxml import etree

from .accessors import connected_aps, manufacturer_of, subnetworks
from .document import SCLDocument
from .models import ExtractionReport, IncompleteDocumentError
from .schema import (
    CID_EXTENSION,
    DEFAULT_INDENT,
    ROOT_ATTRIBUTES_TO_COPY,
    SCL_ROOT,
)
from .templates import collect_template_closure, extract_templates
from .topology import extract_communication
from .utils import deep_copy, local_name, namespace_of, qualify

logger = logging.getLogger(__name__)

DocumentFactory = Callable[[etree._Element], etree._Element]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def build_scl_shell(source_root: etree._Element) -> etree._Element:
    """Build an empty ``SCL`` root matching *source_root*'s vocabulary.

    The new root uses the same namespace and namespace map as the source,
    and carries over its ``version``/``revision``/``release`` attributes.
    """
    ns = namespace_of(source_root)
    root = etree.Element(qualify(ns, SCL_ROOT), nsmap=source_root.nsmap)
    for attr in ROOT_ATTRIBUTES_TO_COPY:
        value = source_root.get(attr)
        if value is not None:
            root.set(attr, value)
    return root


def _resolve_ied(
    document: SCLDocument,
    ied: Union[str, etree._Element],
) -> etree._Element:
    """Return the IED element for a name or pass an element through."""
    if isinstance(ied, str):
        return document.get_ied_element(ied)
    if local_name(ied) != 'IED':
        raise ValueError(f"Expected an IED element, got '{local_name(ied)}'")
    if ied.getroottree().getroot() is not document.root:
        raise ValueError(
            f"IED '{ied.get('name', '')}' does not belong to this document"
        )
    return ied


def _require_sections(document: SCLDocument, ied_name: str) -> None:
    """Fail before any copying if a required section is missing."""
    if document.communication_element is None:
        raise IncompleteDocumentError('Communication', ied_name)
    if document.data_type_templates_element is None:
        raise IncompleteDocumentError('DataTypeTemplates', ied_name)


def generate_cid_filename(ied_name: str, output_dir: str = "") -> str:
    """Return the path ``{output_dir}/{ied_name}.cid``.

    If *output_dir* is empty, the path is resolved against the current
    directory.
    """
    filename = f"{ied_name}{CID_EXTENSION}"
    if output_dir:
        return os.path.join(output_dir, filename)
    return os.path.abspath(filename)


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

def extract_ied(
    document: SCLDocument,
    ied: Union[str, etree._Element],
    document_factory: Optional[DocumentFactory] = None,
) -> SCLDocument:
    """Extract *ied* and everything it depends on into a new document.

    Args:
        document: The loaded source document.  It is left untouched.
        ied: The IED name, or an IED element from *document*.
        document_factory: Builds the empty result root from the source
            root.  Defaults to :func:`build_scl_shell`.

    Returns:
        A new :class:`SCLDocument` holding Communication, IED and
        DataTypeTemplates, in that order.

    Raises:
        KeyError: If no IED with the given name exists.
        ValueError: If *ied* is an element other than ``IED``, or an
            IED element from another document.
        IncompleteDocumentError: If Communication or DataTypeTemplates
            is missing from *document*.
    """
    ied_el = _resolve_ied(document, ied)
    ied_name = ied_el.get('name', '')
    _require_sections(document, ied_name)

    factory = document_factory or build_scl_shell
    root = factory(document.root)

    root.append(extract_communication(document, ied_el))
    root.append(deep_copy(ied_el))
    root.append(extract_templates(document, ied_el))
    etree.cleanup_namespaces(root)

    logger.info("Extracted IED '%s'", ied_name)
    return SCLDocument.from_element(root)


def extract_ied_string(
    document: SCLDocument,
    ied: Union[str, etree._Element],
    indent: str = DEFAULT_INDENT,
) -> str:
    """Extract *ied* and return the formatted CID text."""
    return extract_ied(document, ied).to_string(indent=indent)


def export_ied(
    document: SCLDocument,
    ied_name: str,
    file_path: str = "",
    output_dir: str = "",
) -> str:
    """Extract an IED into a standalone ``.cid`` file.

    Args:
        document: The loaded source document.
        ied_name: Name of the IED to export.
        file_path: Output file path.  If empty, uses ``{ied_name}.cid``
            inside *output_dir*.
        output_dir: Directory for the auto-generated file name.

    Returns:
        The absolute path of the saved file.
    """
    cid = extract_ied(document, ied_name)
    if not file_path:
        file_path = generate_cid_filename(ied_name, output_dir)
    abs_path = os.path.abspath(file_path)
    cid.write(abs_path)
    return abs_path


def describe_extraction(
    document: SCLDocument,
    ied: Union[str, etree._Element],
) -> ExtractionReport:
    """Report what :func:`extract_ied` would keep, without building it."""
    ied_el = _resolve_ied(document, ied)
    ied_name = ied_el.get('name', '')
    _require_sections(document, ied_name)

    report = ExtractionReport(
        ied_name=ied_name,
        manufacturer=manufacturer_of(ied_el),
    )
    for subnet in subnetworks(document.communication_element):
        own = [c for c in connected_aps(subnet) if c.get('iedName') == ied_name]
        if own:
            report.subnetworks.append(subnet.get('name', ''))
            report.connected_aps.extend(
                f"{subnet.get('name', '')}/{c.get('apName', '')}" for c in own
            )
    report.closure = collect_template_closure(
        document.data_type_templates_element, ied_el
    )
    return report

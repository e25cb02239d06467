"""
Utility functions for SCL file manipulation.

Provides namespace-aware name helpers, parsing, serialisation, and deep
copy helpers for working with IEC 61850 SCL (SCD/ICD/CID) files using
lxml.

SCL documents are almost always written in the
``http://www.iec.ch/61850/2003/SCL`` default namespace, but hand-edited
or legacy files occasionally omit it.  Every helper here therefore works
off the namespace of the element it is handed instead of assuming one.
"""

import copy
from typing import Optional

from lxml import etree

from .schema import DEFAULT_INDENT, SCL_ROOT


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# UTF-8 BOM bytes.  Some engineering tools prepend this to exported SCL.
_UTF8_BOM = b"\xef\xbb\xbf"


# ---------------------------------------------------------------------------
# Name helpers
# ---------------------------------------------------------------------------

def namespace_of(element: etree._Element) -> Optional[str]:
    """Return the namespace URI of *element*'s tag, or ``None``."""
    tag = element.tag
    if not isinstance(tag, str):
        return None
    return etree.QName(tag).namespace


def local_name(element: etree._Element) -> str:
    """Return the tag of *element* without its namespace.

    Comments and processing instructions return an empty string.
    """
    tag = element.tag
    if not isinstance(tag, str):
        return ''
    return etree.QName(tag).localname


def qualify(namespace: Optional[str], name: str) -> str:
    """Build a Clark-notation tag (``{ns}name``) or a bare name."""
    if namespace:
        return f'{{{namespace}}}{name}'
    return name


def sibling_tag(element: etree._Element, name: str) -> str:
    """Qualify *name* in the same namespace as *element*."""
    return qualify(namespace_of(element), name)


# ---------------------------------------------------------------------------
# Copying
# ---------------------------------------------------------------------------

def deep_copy(element: etree._Element) -> etree._Element:
    """Create an independent deep copy of an lxml element.

    The returned element (and all its descendants) are fully detached from
    the original tree and can be modified without affecting the source.
    Namespace declarations in scope on *element* are carried onto the copy.
    """
    clone = copy.deepcopy(element)
    clone.tail = None
    return clone


# ---------------------------------------------------------------------------
# Parsing and serialisation
# ---------------------------------------------------------------------------

def parse_scl(raw: bytes) -> etree._Element:
    """Parse raw SCL bytes and return the root element.

    Strips a leading UTF-8 BOM and drops whitespace-only text so that
    :func:`indent_xml` can re-indent the tree cleanly later.

    Raises:
        etree.XMLSyntaxError: If the bytes are not well-formed XML.
        ValueError: If the root element is not ``SCL``.
    """
    if raw.startswith(_UTF8_BOM):
        raw = raw[len(_UTF8_BOM):]

    parser = etree.XMLParser(
        remove_blank_text=True,
        recover=False,
    )
    root = etree.fromstring(raw, parser=parser)

    if local_name(root) != SCL_ROOT:
        raise ValueError(
            f"Expected root element '{SCL_ROOT}', got '{local_name(root)}'"
        )
    return root


def indent_xml(root: etree._Element, space: str = DEFAULT_INDENT) -> None:
    """Re-indent an entire XML tree for human-readable formatting.

    Uses ``lxml.etree.indent``.  Modifies the tree **in place**.
    """
    etree.indent(root, space=space)


def element_to_string(
    element: etree._Element,
    *,
    xml_declaration: bool = True,
    pretty_print: bool = True,
) -> str:
    """Serialize an lxml element to a UTF-8 XML string.

    lxml refuses ``xml_declaration`` together with ``encoding="unicode"``,
    so the declaration is prepended by hand.
    """
    body = etree.tostring(
        element,
        encoding='unicode',
        pretty_print=pretty_print,
    )
    if xml_declaration:
        return '<?xml version="1.0" encoding="UTF-8"?>\n' + body
    return body

"""
SCL Document Model - Main entry point for SCL file manipulation.

Loads an SCL file (SCD, ICD, CID ...) into memory, provides navigation
and query operations, and writes back SCL files.

Sub-accessors organise the query API into logical groups:

    document.ieds           -- IED listing, lookup, manufacturer grouping
    document.communication  -- SubNetwork / ConnectedAP queries
    document.templates      -- DataTypeTemplates listing and lookup
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from lxml import etree

from .accessors import find_section
from .schema import DEFAULT_INDENT, SCL_ROOT
from .utils import (
    element_to_string,
    indent_xml,
    local_name,
    namespace_of,
    parse_scl,
)

logger = logging.getLogger(__name__)


class SCLDocument:
    """In-memory representation of a complete SCL document.

    Parses an SCL file into an lxml tree and provides accessors for the
    sections the IED extractor works with: IEDs, Communication, and
    DataTypeTemplates.

    Sub-accessors:
        ieds           -- IEDAccessor
        communication  -- CommunicationAccessor
        templates      -- TemplateAccessor
    """

    def __init__(self, file_path: Optional[str] = None):
        """Load an SCL file or create an empty document model.

        Args:
            file_path: Path to an SCL file.  If None, creates an empty
                       model (useful for testing).

        Raises:
            FileNotFoundError: If *file_path* does not exist.
            ValueError: If the file is not an SCL document.
        """
        self._file_path: Optional[str] = None
        self._root: Optional[etree._Element] = None
        self._init_accessors()

        if file_path is not None:
            self.load(file_path)

    def _init_accessors(self) -> None:
        """Create sub-accessor instances (called by __init__ and from_element)."""
        from .accessors import (
            CommunicationAccessor,
            IEDAccessor,
            TemplateAccessor,
        )
        self.ieds = IEDAccessor(self)
        self.communication = CommunicationAccessor(self)
        self.templates = TemplateAccessor(self)

    @classmethod
    def from_element(cls, root: etree._Element) -> 'SCLDocument':
        """Wrap a pre-built in-memory ``SCL`` tree.

        Used by the IED extractor to hand back the newly assembled
        document.  The tree is not copied.

        Raises:
            ValueError: If *root* is not an ``SCL`` element.
        """
        if local_name(root) != SCL_ROOT:
            raise ValueError(
                f"Expected '{SCL_ROOT}' root, got '{local_name(root)}'"
            )
        instance = cls.__new__(cls)
        instance._file_path = None
        instance._root = root
        instance._init_accessors()
        return instance

    @classmethod
    def from_string(cls, text) -> 'SCLDocument':
        """Parse SCL text (``str`` or ``bytes``) into a document."""
        if isinstance(text, str):
            text = text.encode('utf-8')
        return cls.from_element(parse_scl(text))

    # ------------------------------------------------------------------
    # File I/O
    # ------------------------------------------------------------------

    def load(self, file_path: str) -> None:
        """Load an SCL file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the root element is not ``SCL``.
            etree.XMLSyntaxError: If the XML is malformed.
        """
        if not os.path.isfile(file_path):
            raise FileNotFoundError(f"SCL file not found: {file_path}")

        self._file_path = os.path.abspath(file_path)
        logger.info("Loading SCL file: %s", self._file_path)

        with open(file_path, 'rb') as fh:
            raw = fh.read()
        self._root = parse_scl(raw)

        logger.info(
            "Loaded SCL document with %d IED(s)",
            len(self.ieds.elements()),
        )

    def to_string(self, indent: str = DEFAULT_INDENT) -> str:
        """Serialize the document as indented text with an XML declaration.

        Re-indents the tree in place before serializing.
        """
        self._ensure_loaded()
        indent_xml(self._root, space=indent)
        return element_to_string(self._root)

    def write(self, file_path: str, indent: str = DEFAULT_INDENT) -> None:
        """Write the document to *file_path* as UTF-8."""
        xml_string = self.to_string(indent=indent)
        with open(file_path, 'w', encoding='utf-8', newline='\n') as fh:
            fh.write(xml_string)
        logger.info("Saved SCL document to: %s", file_path)

    # ------------------------------------------------------------------
    # Public accessors for XML tree
    # ------------------------------------------------------------------

    @property
    def root(self) -> etree._Element:
        """Return the root ``SCL`` element."""
        self._ensure_loaded()
        return self._root

    @property
    def file_path(self) -> Optional[str]:
        return self._file_path

    @property
    def namespace(self) -> Optional[str]:
        """Return the namespace URI of the root element, or None."""
        return namespace_of(self.root)

    @property
    def header_element(self) -> Optional[etree._Element]:
        return find_section(self.root, 'Header')

    @property
    def communication_element(self) -> Optional[etree._Element]:
        """Return the Communication section, or None."""
        return find_section(self.root, 'Communication')

    @property
    def data_type_templates_element(self) -> Optional[etree._Element]:
        """Return the DataTypeTemplates section, or None."""
        return find_section(self.root, 'DataTypeTemplates')

    # ------------------------------------------------------------------
    # Convenience queries
    # ------------------------------------------------------------------

    def list_ieds(self) -> list:
        """Return info dicts for every IED."""
        return self.ieds.list_all()

    def get_ied_element(self, ied_name: str) -> etree._Element:
        """Return the IED element named *ied_name* (raises KeyError)."""
        return self.ieds.get_element(ied_name)

    def group_ieds_by_manufacturer(self) -> dict:
        """Return an ordered ``{manufacturer: [ied names]}`` mapping."""
        return self.ieds.group_by_manufacturer()

    def get_summary(self) -> dict:
        """Return a high-level summary of the document."""
        self._ensure_loaded()
        header = self.header_element
        return {
            'header_id': header.get('id', '') if header is not None else '',
            'version': self._root.get('version', ''),
            'revision': self._root.get('revision', ''),
            'ied_count': len(self.ieds.elements()),
            'ied_names': self.ieds.names(),
            'subnetwork_names': [
                s['name'] for s in self.communication.list_subnetworks()
            ],
            'has_communication': self.communication_element is not None,
            'has_data_type_templates': (
                self.data_type_templates_element is not None
            ),
            'template_counts': self.templates.counts(),
        }

    # ------------------------------------------------------------------
    # Internal Helpers
    # ------------------------------------------------------------------

    def _ensure_loaded(self) -> None:
        """Raise RuntimeError if no document has been loaded."""
        if self._root is None:
            raise RuntimeError(
                "No SCL document loaded. Call load() or pass a file_path "
                "to the constructor."
            )

    # ------------------------------------------------------------------
    # Dunder Methods
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        if self._file_path:
            return (
                f"SCLDocument(file='{os.path.basename(self._file_path)}', "
                f"ieds={len(self.ieds.elements())})"
            )
        if self._root is None:
            return "SCLDocument(empty)"
        return f"SCLDocument(in-memory, ieds={len(self.ieds.elements())})"

"""
SCL IED Toolkit - extract single IEDs from IEC 61850 SCL documents.

Takes a System Configuration Description (SCD) that describes many IEDs,
a shared communication topology, and a shared pool of data type
templates, and produces a standalone CID document for one IED holding
only what that IED depends on.

Usage:
    from scl_ied_toolkit import SCLDocument

    # Load a substation configuration
    doc = SCLDocument('path/to/station.scd')

    # Pick an IED
    groups = doc.group_ieds_by_manufacturer()
    ieds = doc.list_ieds()

    # Extract it
    from scl_ied_toolkit import ied_export
    cid = ied_export.extract_ied(doc, 'IED1')
    text = cid.to_string()
    path = ied_export.export_ied(doc, 'IED1', output_dir='out')

    # Check an extracted document for dangling references
    from scl_ied_toolkit import validator
    result = validator.validate_document(cid)
    if not result.is_valid:
        print(result)
"""

__version__ = '0.1.0'


def __getattr__(name):
    """Lazy import to keep ``import scl_ied_toolkit`` cheap."""
    if name == 'SCLDocument':
        from .document import SCLDocument
        return SCLDocument
    if name == 'IncompleteDocumentError':
        from .models import IncompleteDocumentError
        return IncompleteDocumentError
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'SCLDocument',
    'IncompleteDocumentError',
]

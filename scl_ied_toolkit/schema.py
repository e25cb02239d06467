"""
SCL Schema Constants.

Defines the namespace, element names, template kinds, and export
conventions used when extracting a single IED from an IEC 61850
System Configuration Description (SCD) file.
"""

# Default namespace of IEC 61850-6 SCL documents.
SCL_NS = 'http://www.iec.ch/61850/2003/SCL'

# Root element local name.
SCL_ROOT = 'SCL'

# Root attributes carried over from the source document onto an
# extracted CID document.
ROOT_ATTRIBUTES_TO_COPY = ('version', 'revision', 'release')

# Logical node element names inside an IED (LLN0 and ordinary LNs).
LOGICAL_NODE_TAGS = ('LN0', 'LN')

# Template definitions inside DataTypeTemplates, in schema order.
TEMPLATE_TAGS = ('LNodeType', 'DOType', 'DAType', 'EnumType')

# bType values that make a DA/BDA ``type`` attribute point at a template.
BTYPE_STRUCT = 'Struct'
BTYPE_ENUM = 'Enum'

# Manufacturer shown for IEDs without a ``manufacturer`` attribute.
UNDEFINED_MANUFACTURER = 'Undefined'

# Manufacturer whose IEDs are listed before all others.
PREFERRED_MANUFACTURER = 'Meinberg'

# File extension of a configured IED description.
CID_EXTENSION = '.cid'

# One indentation level in written files.
DEFAULT_INDENT = '  '

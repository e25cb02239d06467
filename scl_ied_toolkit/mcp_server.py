"""
MCP Server for the SCL IED Toolkit.

Exposes SCL inspection and single-IED extraction tools via the Model
Context Protocol, so that an MCP-compatible client can load an SCD file,
pick an IED (grouped by manufacturer), and write a standalone CID file
for it.

Usage:
    python -m scl_ied_toolkit.mcp_server
    # or
    scl-ied-mcp-server
"""

from __future__ import annotations

import json
import logging
import os
import sys
from typing import Optional
from urllib.parse import urlparse
from urllib.request import url2pathname

from mcp.server.fastmcp import FastMCP

# ---------------------------------------------------------------------------
# Toolkit imports
# ---------------------------------------------------------------------------
from .document import SCLDocument
from . import ied_export as _ied_export
from . import validator as _validator

# ---------------------------------------------------------------------------
# Logging (stderr only -- stdout is reserved for MCP protocol)
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    stream=sys.stderr,
)
log = logging.getLogger("scl-mcp")

# ---------------------------------------------------------------------------
# MCP Server
# ---------------------------------------------------------------------------
mcp = FastMCP(
    "SCL IED Toolkit",
    instructions=(
        "Tools for inspecting IEC 61850 SCL (SCD) files and extracting a "
        "single IED into a standalone CID file that carries only the "
        "communication settings and data type templates it depends on.\n\n"
        "Always call load_scd first before using any other tool.  Use "
        "list_ieds to pick an IED, then extract_ied to write its CID file."
    ),
)

# ---------------------------------------------------------------------------
# Server state
# ---------------------------------------------------------------------------
_document: Optional[SCLDocument] = None
_document_path: Optional[str] = None


def _require_document() -> SCLDocument:
    """Return the loaded document or raise an error."""
    if _document is None:
        raise RuntimeError(
            "No SCL document loaded. Call load_scd first."
        )
    return _document


def _normalize_path(raw_path: str) -> str:
    """Turn a client-supplied path or ``file://`` URI into an absolute path."""
    path = raw_path.strip().strip("\"'")
    parsed = urlparse(path)
    if parsed.scheme == "file":
        path = url2pathname(parsed.path)
    return os.path.abspath(os.path.expanduser(path))


# ===================================================================
# 1. Document Management
# ===================================================================

@mcp.tool()
def load_scd(file_path: str) -> str:
    """Load an SCL file (SCD/ICD/CID) into memory.

    This must be called before any other tool.  The document stays in
    memory until a different file is loaded or the server is restarted.

    Args:
        file_path: Absolute path to the SCL file.
    """
    global _document, _document_path
    try:
        resolved = _normalize_path(file_path)
        log.info("Resolved path: %s -> %s", file_path, resolved)
        _document = SCLDocument(resolved)
        _document_path = resolved
        summary = _document.get_summary()
        lines = [
            f"Loaded: {os.path.basename(resolved)}",
            f"IEDs: {summary['ied_count']}, "
            f"SubNetworks: {len(summary['subnetwork_names'])}",
        ]
        missing = [
            name for name, present in (
                ('Communication', summary['has_communication']),
                ('DataTypeTemplates', summary['has_data_type_templates']),
            ) if not present
        ]
        if missing:
            lines.append(
                f"Warning: missing section(s) {', '.join(missing)}; "
                f"IED extraction will fail."
            )
        return '\n'.join(lines)
    except Exception as e:
        _document = None
        _document_path = None
        return f"Error loading SCL file: {e}"


@mcp.tool()
def get_document_summary() -> str:
    """Get a summary of the loaded document (IEDs, subnetworks, templates)."""
    doc = _require_document()
    return json.dumps(doc.get_summary(), indent=2)


# ===================================================================
# 2. Query Tools
# ===================================================================

@mcp.tool()
def list_ieds(manufacturer: str = "") -> str:
    """List IEDs grouped by manufacturer.

    Meinberg devices are listed first; other manufacturers follow in the
    order they first appear in the file.

    Args:
        manufacturer: Optional manufacturer name to restrict the listing
                      (case-insensitive).
    """
    doc = _require_document()
    groups = doc.group_ieds_by_manufacturer()
    if manufacturer:
        groups = {
            m: names for m, names in groups.items()
            if m.lower() == manufacturer.lower()
        }
    return json.dumps({"manufacturers": groups}, indent=2)


@mcp.tool()
def get_ied_dependencies(ied_name: str) -> str:
    """Show what extracting an IED would keep, without writing anything.

    Returns the SubNetworks and ConnectedAPs attached to the IED and the
    data type templates it transitively references, grouped by kind.

    Args:
        ied_name: Name of the IED.
    """
    doc = _require_document()
    try:
        report = _ied_export.describe_extraction(doc, ied_name)
        return json.dumps(report.to_dict(), indent=2)
    except KeyError as e:
        return f"Error: {e.args[0] if e.args else e}"
    except Exception as e:
        return f"Error resolving dependencies: {e}"


# ===================================================================
# 3. Extraction
# ===================================================================

@mcp.tool()
def extract_ied(ied_name: str, file_path: str = "", output_dir: str = "") -> str:
    """Extract an IED into a standalone CID file.

    The CID file holds the IED, only its part of the Communication
    section, and only the data type templates it depends on.

    Args:
        ied_name: Name of the IED to extract.
        file_path: Destination path.  If empty, writes ``{ied_name}.cid``.
        output_dir: Directory for the auto-generated file name.  If empty,
                    uses the directory of the loaded SCD file.
    """
    doc = _require_document()
    try:
        if not output_dir and _document_path:
            output_dir = os.path.dirname(_document_path)
        dest = _normalize_path(file_path) if file_path else ""
        path = _ied_export.export_ied(
            doc, ied_name, file_path=dest, output_dir=output_dir,
        )
        log.info("Exported IED %s to: %s", ied_name, path)
        return f"IED '{ied_name}' exported to: {path}"
    except KeyError as e:
        return f"Error: {e.args[0] if e.args else e}"
    except Exception as e:
        return f"Error extracting IED: {e}"


@mcp.tool()
def validate_document() -> str:
    """Check the loaded document for missing sections and dangling references."""
    doc = _require_document()
    result = _validator.validate_document(doc)
    return str(result)


def main():
    """Run the MCP server on stdio transport."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()

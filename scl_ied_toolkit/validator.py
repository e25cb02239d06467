"""
Referential integrity checks for SCL documents.

Checks that an SCL document is self-sufficient: the sections the IED
extractor needs are present, every template reference reachable from an
IED resolves inside the document, and every ConnectedAP names an IED the
document defines.  Run on an extracted CID document it confirms that the
extraction did not leave a dangling reference behind.

This is *not* schema validation; element content and attribute formats
are not checked.

Error severity:
    - **errors**: The document cannot be used for extraction (missing
      Communication or DataTypeTemplates).
    - **warnings**: Dangling references and duplicate template ids.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .accessors import (
    connected_aps,
    ied_elements,
    subnetworks,
    template_children,
)
from .templates import collect_template_closure


# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------

@dataclass
class ValidationResult:
    """Errors and warnings collected by one or more checks.

    Errors mean the document cannot be used for extraction; warnings
    flag references that extraction will skip.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def __iadd__(self, other: ValidationResult) -> ValidationResult:
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        return self

    def to_dict(self) -> dict:
        return {
            'is_valid': self.is_valid,
            'errors': list(self.errors),
            'warnings': list(self.warnings),
        }

    def __str__(self) -> str:
        if not self.errors and not self.warnings:
            return "Validation passed: no errors or warnings."
        lines: list[str] = []
        for title, messages in (('ERRORS', self.errors),
                                ('WARNINGS', self.warnings)):
            if messages:
                lines.append(f"=== {title} ({len(messages)}) ===")
                lines.extend(
                    f"  {i}. {msg}" for i, msg in enumerate(messages, 1)
                )
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Individual checks
# ---------------------------------------------------------------------------

def check_sections(document) -> ValidationResult:
    """Check that Communication and DataTypeTemplates are present."""
    result = ValidationResult()
    if document.communication_element is None:
        result.errors.append("Document has no <Communication> section.")
    if document.data_type_templates_element is None:
        result.errors.append("Document has no <DataTypeTemplates> section.")
    return result


def check_template_references(document) -> ValidationResult:
    """Warn about template references that do not resolve, per IED."""
    result = ValidationResult()
    templates = document.data_type_templates_element
    if templates is None:
        return result

    for ied in ied_elements(document.root):
        closure = collect_template_closure(templates, ied)
        for kind, template_id in closure.unresolved:
            result.warnings.append(
                f"IED '{ied.get('name', '')}': {kind.value} "
                f"'{template_id}' is referenced but not defined."
            )
    return result


def check_duplicate_templates(document) -> ValidationResult:
    """Warn about templates of the same kind sharing an id."""
    result = ValidationResult()
    templates = document.data_type_templates_element
    if templates is None:
        return result

    seen: set = set()
    reported: set = set()
    for kind, element in template_children(templates):
        key = (kind, element.get('id', ''))
        if key in seen and key not in reported:
            reported.add(key)
            result.warnings.append(
                f"Duplicate {kind.value} id '{key[1]}'; "
                f"only the first definition is used."
            )
        seen.add(key)
    return result


def check_connected_aps(document) -> ValidationResult:
    """Warn about ConnectedAPs naming an IED the document does not define."""
    result = ValidationResult()
    comm = document.communication_element
    if comm is None:
        return result

    known = {ied.get('name') for ied in ied_elements(document.root)}
    for subnet in subnetworks(comm):
        for cap in connected_aps(subnet):
            ied_name = cap.get('iedName', '')
            if ied_name not in known:
                result.warnings.append(
                    f"SubNetwork '{subnet.get('name', '')}': ConnectedAP "
                    f"'{cap.get('apName', '')}' references unknown IED "
                    f"'{ied_name}'."
                )
    return result


# ---------------------------------------------------------------------------
# Top-level entry point
# ---------------------------------------------------------------------------

CHECKS = (
    check_sections,
    check_template_references,
    check_duplicate_templates,
    check_connected_aps,
)


def validate_document(document) -> ValidationResult:
    """Run every check and return the aggregated result."""
    result = ValidationResult()
    for check in CHECKS:
        result += check(document)
    return result

"""Tests for the validator module."""

from scl_ied_toolkit import validator
from scl_ied_toolkit.document import SCLDocument

from conftest import SCL_NS


class TestValidateDocument:
    def test_sample_document(self, doc):
        result = validator.validate_document(doc)
        assert result.is_valid
        assert result.warnings == [
            "IED 'Dev1': LNodeType 'Missing_LN' is referenced but not defined."
        ]

    def test_missing_sections(self):
        doc = SCLDocument.from_string(f'<SCL xmlns="{SCL_NS}"><IED name="A"/></SCL>')
        result = validator.validate_document(doc)
        assert not result.is_valid
        assert len(result.errors) == 2
        assert "ERRORS (2)" in str(result)

    def test_dangling_struct_reference(self):
        doc = SCLDocument.from_string(
            f'<SCL xmlns="{SCL_NS}"><Communication/>'
            '<IED name="A"><LN0 lnType="L"/></IED>'
            '<DataTypeTemplates>'
            '<LNodeType id="L"><DO name="Mod" type="D"/></LNodeType>'
            '<DOType id="D"><DA name="o" bType="Struct" type="Gone"/></DOType>'
            '</DataTypeTemplates></SCL>'
        )
        result = validator.check_template_references(doc)
        assert result.warnings == [
            "IED 'A': DAType 'Gone' is referenced but not defined."
        ]

    def test_duplicate_templates(self):
        doc = SCLDocument.from_string(
            f'<SCL xmlns="{SCL_NS}"><DataTypeTemplates>'
            '<DOType id="D"/><DOType id="D"/><DOType id="D"/><EnumType id="D"/>'
            '</DataTypeTemplates></SCL>'
        )
        result = validator.check_duplicate_templates(doc)
        assert result.warnings == [
            "Duplicate DOType id 'D'; only the first definition is used."
        ]

    def test_unknown_connected_ap(self, doc):
        doc.root.remove(doc.get_ied_element("Dev2"))
        result = validator.check_connected_aps(doc)
        assert len(result.warnings) == 2
        assert all("unknown IED 'Dev2'" in w for w in result.warnings)

    def test_str_when_clean(self):
        result = validator.ValidationResult()
        assert str(result) == "Validation passed: no errors or warnings."
        assert result.to_dict() == {"is_valid": True, "errors": [], "warnings": []}

    def test_results_accumulate(self):
        result = validator.ValidationResult(errors=["e1"])
        result += validator.ValidationResult(errors=["e2"], warnings=["w1"])
        assert not result.is_valid
        assert str(result).splitlines() == [
            "=== ERRORS (2) ===",
            "  1. e1",
            "  2. e2",
            "=== WARNINGS (1) ===",
            "  1. w1",
        ]

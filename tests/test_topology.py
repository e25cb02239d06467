"""Tests for the topology module (Communication slicing)."""

import pytest
from lxml import etree

from scl_ied_toolkit import topology
from scl_ied_toolkit.document import SCLDocument
from scl_ied_toolkit.models import IncompleteDocumentError
from scl_ied_toolkit.utils import local_name

from conftest import SAMPLE_SCD


def _layout(comm):
    """Return ``[(subnet name, [(iedName, apName), ...]), ...]``."""
    result = []
    for subnet in comm:
        if local_name(subnet) != "SubNetwork":
            continue
        caps = [
            (c.get("iedName"), c.get("apName"))
            for c in subnet if local_name(c) == "ConnectedAP"
        ]
        result.append((subnet.get("name"), caps))
    return result


class TestExtractCommunication:
    def test_single_device_per_subnetwork(self, doc):
        comm = topology.extract_communication(doc, doc.get_ied_element("Dev1"))
        assert _layout(comm) == [("StationBus", [("Dev1", "S1")])]

    def test_keeps_subnetwork_with_remaining_endpoint(self, doc):
        comm = topology.extract_communication(doc, doc.get_ied_element("Dev2"))
        assert _layout(comm) == [
            ("StationBus", [("Dev2", "S1")]),
            ("ProcessBus", [("Dev2", "P1")]),
        ]

    def test_device_without_endpoints_drops_every_subnetwork(self, doc):
        comm = topology.extract_communication(doc, doc.get_ied_element("Dev3"))
        assert local_name(comm) == "Communication"
        assert _layout(comm) == []

    def test_keeps_non_endpoint_children(self, doc):
        comm = topology.extract_communication(doc, doc.get_ied_element("Dev1"))
        subnet = comm[0]
        assert [local_name(c) for c in subnet] == ["BitRate", "ConnectedAP"]
        address = subnet[1][0]
        assert local_name(address) == "Address"
        assert address[0].text == "10.0.0.1"

    def test_result_is_detached_copy(self, doc):
        comm = topology.extract_communication(doc, doc.get_ied_element("Dev1"))
        assert comm.getparent() is None
        assert comm is not doc.communication_element

    def test_source_untouched(self, doc):
        before = etree.tostring(doc.communication_element)
        for name in ("Dev1", "Dev2", "Dev3"):
            topology.extract_communication(doc, doc.get_ied_element(name))
        assert etree.tostring(doc.communication_element) == before

    def test_missing_communication_raises(self, doc):
        doc.root.remove(doc.communication_element)
        with pytest.raises(IncompleteDocumentError) as excinfo:
            topology.extract_communication(doc, doc.get_ied_element("Dev1"))
        assert excinfo.value.section == "Communication"
        assert excinfo.value.ied_name == "Dev1"
        assert "incomplete" in str(excinfo.value)


class TestFilterCommunication:
    def test_removes_preexisting_empty_subnetwork(self):
        comm = etree.fromstring(
            "<Communication>"
            "<SubNetwork name='Empty'/>"
            "<SubNetwork name='A'><ConnectedAP iedName='X' apName='S1'/></SubNetwork>"
            "</Communication>"
        )
        topology.filter_communication(comm, "X")
        assert _layout(comm) == [("A", [("X", "S1")])]

    def test_preserves_order_of_multiple_endpoints(self):
        comm = etree.fromstring(
            "<Communication>"
            "<SubNetwork name='A'>"
            "<ConnectedAP iedName='X' apName='S2'/>"
            "<ConnectedAP iedName='Y' apName='S1'/>"
            "<ConnectedAP iedName='X' apName='S1'/>"
            "</SubNetwork>"
            "<SubNetwork name='B'><ConnectedAP iedName='Y' apName='S1'/></SubNetwork>"
            "<SubNetwork name='C'><ConnectedAP iedName='X' apName='S3'/></SubNetwork>"
            "</Communication>"
        )
        topology.filter_communication(comm, "X")
        assert _layout(comm) == [
            ("A", [("X", "S2"), ("X", "S1")]),
            ("C", [("X", "S3")]),
        ]

    def test_namespace_less_document(self):
        text = SAMPLE_SCD.replace(
            'xmlns="http://www.iec.ch/61850/2003/SCL"', ""
        )
        plain = SCLDocument.from_string(text)
        comm = topology.extract_communication(plain, plain.get_ied_element("Dev2"))
        assert [name for name, _ in _layout(comm)] == ["StationBus", "ProcessBus"]

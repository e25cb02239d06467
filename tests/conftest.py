"""Shared SCL fixtures for the test suite."""

from __future__ import annotations

import pytest

from scl_ied_toolkit.document import SCLDocument
from scl_ied_toolkit.schema import SCL_NS  # noqa: F401
from scl_ied_toolkit.utils import local_name

# Three IEDs sharing one template pool:
#   Dev2 (Other)    -- StationBus + ProcessBus, LLN0_Dev2 + MMXU_Shared
#   Dev1 (Meinberg) -- StationBus only, LLN0_Dev1 + MMXU_Shared + Missing_LN
#   Dev3 (none)     -- no ConnectedAP at all, LLN0_Dev3
SAMPLE_SCD = """\
<?xml version="1.0" encoding="UTF-8"?>
<SCL xmlns="http://www.iec.ch/61850/2003/SCL"
     xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
     version="2007" revision="B" release="4">
  <Header id="Station" version="1" revision="A"/>
  <Substation name="S1"/>
  <Communication>
    <SubNetwork name="StationBus" type="8-MMS">
      <BitRate unit="b/s" multiplier="M">100</BitRate>
      <ConnectedAP iedName="Dev1" apName="S1">
        <Address><P type="IP">10.0.0.1</P></Address>
      </ConnectedAP>
      <ConnectedAP iedName="Dev2" apName="S1">
        <Address><P type="IP">10.0.0.2</P></Address>
      </ConnectedAP>
    </SubNetwork>
    <SubNetwork name="ProcessBus" type="IEC61850-9-2">
      <ConnectedAP iedName="Dev2" apName="P1"/>
    </SubNetwork>
  </Communication>
  <IED name="Dev2" manufacturer="Other" type="Relay" configVersion="1.0">
    <AccessPoint name="S1">
      <Server>
        <Authentication/>
        <LDevice inst="LD0">
          <LN0 lnClass="LLN0" inst="" lnType="LLN0_Dev2"/>
          <LN lnClass="MMXU" inst="1" lnType="MMXU_Shared"/>
        </LDevice>
      </Server>
    </AccessPoint>
  </IED>
  <IED name="Dev1" manufacturer="Meinberg" type="LANTIME">
    <AccessPoint name="S1">
      <Server>
        <Authentication/>
        <LDevice inst="LD0">
          <LN0 lnClass="LLN0" inst="" lnType="LLN0_Dev1"/>
          <LN lnClass="MMXU" inst="1" lnType="MMXU_Shared"/>
          <LN lnClass="GGIO" inst="1" lnType="Missing_LN"/>
        </LDevice>
      </Server>
    </AccessPoint>
  </IED>
  <IED name="Dev3">
    <AccessPoint name="S1">
      <Server>
        <Authentication/>
        <LDevice inst="LD0">
          <LN0 lnClass="LLN0" inst="" lnType="LLN0_Dev3"/>
        </LDevice>
      </Server>
    </AccessPoint>
  </IED>
  <DataTypeTemplates>
    <LNodeType id="LLN0_Dev1" lnClass="LLN0">
      <DO name="Mod" type="DOType_X"/>
      <DO name="Beh" type="ENS_Beh"/>
    </LNodeType>
    <LNodeType id="LLN0_Dev2" lnClass="LLN0">
      <DO name="Mod" type="DOType_Dev2Only"/>
    </LNodeType>
    <LNodeType id="LLN0_Dev3" lnClass="LLN0">
      <DO name="Beh" type="ENS_Beh"/>
    </LNodeType>
    <LNodeType id="MMXU_Shared" lnClass="MMXU">
      <DO name="TotW" type="MV_Shared"/>
    </LNodeType>
    <DOType id="DOType_X" cdc="ENC">
      <SDO name="sub" type="DOType_Y"/>
      <DA name="stVal" fc="ST" bType="Enum" type="ModKind"/>
      <DA name="q" fc="ST" bType="Quality"/>
      <DA name="origin" fc="ST" bType="Struct" type="Originator"/>
    </DOType>
    <DOType id="DOType_Y" cdc="CMV">
      <SDO name="deeper" type="DOType_Z"/>
      <DA name="mag" fc="MX" bType="Struct" type="AnalogueValue"/>
    </DOType>
    <DOType id="DOType_Z" cdc="MV">
      <DA name="t" fc="MX" bType="Timestamp"/>
      <DA name="legacy" fc="CF" type="LegacyEnum"/>
    </DOType>
    <DOType id="ENS_Beh" cdc="ENS">
      <DA name="stVal" fc="ST" bType="Enum" type="BehKind"/>
    </DOType>
    <DOType id="MV_Shared" cdc="MV">
      <DA name="mag" fc="MX" bType="Struct" type="AnalogueValue"/>
    </DOType>
    <DOType id="DOType_Dev2Only" cdc="ENC">
      <DA name="stVal" fc="ST" bType="Enum" type="Dev2Enum"/>
      <DA name="cfg" fc="CF" bType="Struct" type="Dev2Only_DA"/>
    </DOType>
    <DAType id="Originator">
      <BDA name="orCat" bType="Enum" type="OrCat"/>
      <BDA name="orIdent" bType="Octet64"/>
    </DAType>
    <DAType id="AnalogueValue">
      <BDA name="f" bType="FLOAT32"/>
      <BDA name="vec" bType="Struct" type="Vector"/>
    </DAType>
    <DAType id="Vector">
      <BDA name="mag" bType="Struct" type="AnalogueValue"/>
    </DAType>
    <DAType id="Dev2Only_DA">
      <BDA name="i" bType="INT32"/>
    </DAType>
    <EnumType id="ModKind"><EnumVal ord="1">on</EnumVal></EnumType>
    <EnumType id="OrCat"><EnumVal ord="0">not-supported</EnumVal></EnumType>
    <EnumType id="BehKind"><EnumVal ord="1">on</EnumVal></EnumType>
    <EnumType id="LegacyEnum"><EnumVal ord="0">a</EnumVal></EnumType>
    <EnumType id="Dev2Enum"><EnumVal ord="0">x</EnumVal></EnumType>
    <EnumType id="UnusedEnum"><EnumVal ord="0">y</EnumVal></EnumType>
    <EnumType id="DOType_Y"><EnumVal ord="0">same id, other kind</EnumVal></EnumType>
  </DataTypeTemplates>
</SCL>
"""


def template_ids(templates_el) -> set:
    """Return ``{(local tag, id)}`` for every child of DataTypeTemplates."""
    return {(local_name(el), el.get("id")) for el in templates_el}


@pytest.fixture
def doc() -> SCLDocument:
    return SCLDocument.from_string(SAMPLE_SCD)


@pytest.fixture
def scd_file(tmp_path):
    f = tmp_path / "station.scd"
    f.write_text(SAMPLE_SCD, encoding="utf-8")
    return f

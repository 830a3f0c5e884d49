import pytest

from iiscommons.errors import MalformedInventoryError
from iiscommons.models import PatchEvent
from iiscommons.services.inventory import parse_inventory

HEADER = '<?xml version="1.0" encoding="UTF-8"?>\n'


def _version_xml(
    install_type=True,
    variables=("is.console.port", "isf.server.host", "isf.agent.host"),
) -> str:
    values = {
        "is.console.port": "9446",
        "isf.server.host": "host1",
        "isf.agent.host": "eng1",
    }
    install = '<InstallType currentVersion="11.7" install="FULL"/>' if install_type else ""
    persisted = "".join(
        f'<PersistedVariable name="{name}" value="{values[name]}" encrypted="false"/>'
        for name in variables
    )
    return (
        HEADER
        + '<LocalInstallRegistry xmlns="http://www.ibm.com/LocalInstallRegistry">'
        + install
        + "<History>"
        + '<HistoricalEvent installType="FULL" installerId="base" eventDate="2019-01-01"/>'
        + '<HistoricalEvent installType="PATCH" installerId="servicepack_1" eventDate="2019-05-02"/>'
        + '<HistoricalEvent installType="PATCH" installerId="JR61234" eventDate="2019-06-10"/>'
        + "</History>"
        + '<Products><Product productId="InformationServer"/><Product productId="DataStage"/></Products>'
        + "<PersistedVariables>"
        + '<PersistedVariable name="unrelated" value="x"/>'
        + persisted
        + "</PersistedVariables>"
        + "</LocalInstallRegistry>"
    )


def test_parse_inventory_reads_all_fields():
    snapshot = parse_inventory(_version_xml())

    assert snapshot.current_version == "11.7"
    assert snapshot.patch_history == (
        PatchEvent("servicepack_1", "2019-05-02"),
        PatchEvent("JR61234", "2019-06-10"),
    )
    assert snapshot.installed_modules == ("InformationServer", "DataStage")
    assert snapshot.console_port == "9446"
    assert snapshot.domain_host == "host1"
    assert snapshot.engine_host == "eng1"


def test_parse_inventory_requires_install_type():
    with pytest.raises(MalformedInventoryError, match="InstallType"):
        parse_inventory(_version_xml(install_type=False))


@pytest.mark.parametrize("missing", ["is.console.port", "isf.server.host", "isf.agent.host"])
def test_parse_inventory_requires_each_persisted_variable(missing):
    present = tuple(
        name
        for name in ("is.console.port", "isf.server.host", "isf.agent.host")
        if name != missing
    )

    with pytest.raises(MalformedInventoryError, match=missing):
        parse_inventory(_version_xml(variables=present))


def test_parse_inventory_rejects_invalid_xml():
    with pytest.raises(MalformedInventoryError, match="not valid XML"):
        parse_inventory("<LocalInstallRegistry>")


def test_parse_inventory_rejects_other_documents():
    with pytest.raises(MalformedInventoryError, match="unexpected root"):
        parse_inventory("<Registry/>")

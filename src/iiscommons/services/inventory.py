"""Install registry (Version.xml) parsing for iis-commons."""

import xml.etree.ElementTree as ET
from typing import Dict, Optional

from iiscommons.errors import MalformedInventoryError
from iiscommons.errors_catalog import actionable_error
from iiscommons.models import InventorySnapshot, PatchEvent

NAMESPACES = {"installreg": "http://www.ibm.com/LocalInstallRegistry"}

CONSOLE_PORT_VARIABLE = "is.console.port"
DOMAIN_HOST_VARIABLE = "isf.server.host"
ENGINE_HOST_VARIABLE = "isf.agent.host"


def _malformed(detail: str) -> MalformedInventoryError:
    return MalformedInventoryError(actionable_error("malformed_inventory", detail=detail))


def _required_attribute(node: Optional[ET.Element], attribute: str, label: str) -> str:
    if node is None:
        raise _malformed(f"{label} not found")
    value = node.get(attribute)
    if value is None:
        raise _malformed(f"{label} has no '{attribute}' attribute")
    return value


def parse_inventory(xml_text: str) -> InventorySnapshot:
    """Parse the text of a LocalInstallRegistry document.

    Either every required value resolves or MalformedInventoryError is
    raised; no partially filled snapshot is ever returned.
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as exc:
        raise _malformed(f"document is not valid XML ({exc})") from exc

    if root.tag != f"{{{NAMESPACES['installreg']}}}LocalInstallRegistry":
        raise _malformed(f"unexpected root element {root.tag}")

    current_version = _required_attribute(
        root.find("installreg:InstallType", NAMESPACES), "currentVersion", "InstallType"
    )

    patches = tuple(
        PatchEvent(
            patch_id=event.get("installerId", ""),
            patch_date=event.get("eventDate", ""),
        )
        for event in root.findall(
            "installreg:History/installreg:HistoricalEvent[@installType='PATCH']", NAMESPACES
        )
    )

    modules = tuple(
        product.get("productId", "")
        for product in root.findall("installreg:Products/installreg:Product", NAMESPACES)
    )

    variables: Dict[str, ET.Element] = {}
    for variable in root.findall(
        "installreg:PersistedVariables/installreg:PersistedVariable", NAMESPACES
    ):
        variables.setdefault(variable.get("name", ""), variable)

    def persisted(name: str) -> str:
        return _required_attribute(variables.get(name), "value", f"PersistedVariable '{name}'")

    return InventorySnapshot(
        current_version=current_version,
        patch_history=patches,
        installed_modules=modules,
        console_port=persisted(CONSOLE_PORT_VARIABLE),
        domain_host=persisted(DOMAIN_HOST_VARIABLE),
        engine_host=persisted(ENGINE_HOST_VARIABLE),
    )

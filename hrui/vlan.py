"""802.1Q VLANs and per-port VLAN settings."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from bs4 import BeautifulSoup
from bs4.element import Tag

from .client import HRUIClient, HRUIError

log = logging.getLogger(__name__)

STATIC_VLAN_PAGE = "/vlan.cgi?page=static"
REMOVE_VLAN_PAGE = "/vlan.cgi?page=getRmvVlanEntry"
PORT_VLAN_PAGE = "/vlan.cgi?page=port_based"

UNTAGGED = "0"
TAGGED = "1"
NOT_MEMBER = "2"

ACCEPT_FRAME_TYPES = {"All": "0", "Tag-only": "1", "Untag-only": "2"}

_INTEGER = re.compile(r"[+-]?\d+")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_PORT_LABEL = re.compile(r"Port\s*([+-]?\d+)")


@dataclass
class Vlan:
    """A VLAN and the ports that belong to it."""

    vlan_id: int
    name: str = ""
    untagged_ports: list[int] = field(default_factory=list)
    tagged_ports: list[int] = field(default_factory=list)
    member_ports: list[int] = field(default_factory=list)


@dataclass
class PortVLANConfig:
    """PVID and accepted frame type of one port (1-based ``port``)."""

    port: int
    pvid: int = 0
    accept_frame_type: str = ""


def _atoi_or_zero(text: str) -> int:
    return int(text) if _INTEGER.fullmatch(text) else 0


def _cell_text(row: Tag, column: int) -> str:
    return "".join(node.get_text() for node in row.select(f"td:nth-child({column})")).strip()


def parse_port_range(text: str) -> list[int]:
    """Expand a port list such as ``1,3-5`` into ``[1, 3, 4, 5]``; ``-`` is empty."""
    if text in ("", "-"):
        return []
    ports: list[int] = []
    for part in text.split(","):
        bounds = part.split("-")
        if len(bounds) == 2:
            start, end = (_atoi_or_zero(bound) for bound in bounds)
            ports.extend(range(start, end + 1))
        elif len(bounds) == 1:
            ports.append(_atoi_or_zero(bounds[0]))
    return ports


def _autosave(client: HRUIClient) -> None:
    if client.autosave:
        client.save_configuration()


def get_all_vlans(client: HRUIClient) -> list[Vlan]:
    """Read the static VLAN table."""
    response = client.get(STATIC_VLAN_PAGE)
    soup = BeautifulSoup(response.text, "html.parser")

    vlans = []
    for row in soup.select("form[name='formVlanStatus'] table tr")[1:]:
        id_text = _cell_text(row, 1)
        if not _INTEGER.fullmatch(id_text):
            log.warning("Error parsing VLAN ID: %r", id_text)
            continue
        vlans.append(
            Vlan(
                vlan_id=int(id_text),
                name=_cell_text(row, 2),
                member_ports=parse_port_range(_cell_text(row, 3)),
                tagged_ports=parse_port_range(_cell_text(row, 4)),
                untagged_ports=parse_port_range(_cell_text(row, 5)),
            )
        )
    return vlans


def get_vlan(client: HRUIClient, vlan_id: int) -> Vlan:
    """Return the VLAN with the given id."""
    try:
        vlans = get_all_vlans(client)
    except HRUIError as exc:
        raise HRUIError(f"failed to fetch VLANs: {exc}") from exc
    for vlan in vlans:
        if vlan.vlan_id == vlan_id:
            return vlan
    raise HRUIError(f"VLAN with ID {vlan_id} not found")


def _port_membership(port: int, untagged: Iterable[int], tagged: Iterable[int]) -> str:
    if port in untagged:
        return UNTAGGED
    if port in tagged:
        return TAGGED
    return NOT_MEMBER


def create_vlan(client: HRUIClient, vlan: Vlan, total_ports: int) -> None:
    """Create or update a VLAN; ports not listed become non-members."""
    form = {"vid": str(vlan.vlan_id), "name": vlan.name}
    for port in range(1, total_ports + 1):
        form[f"vlanPort_{port - 1}"] = _port_membership(
            port, vlan.untagged_ports, vlan.tagged_ports
        )
    try:
        client.post_form(STATIC_VLAN_PAGE, form)
    except HRUIError as exc:
        raise HRUIError(f"failed to create/update VLAN: {exc}") from exc
    _autosave(client)


def delete_vlan(client: HRUIClient, vlan_id: int) -> None:
    """Remove a VLAN from the switch."""
    try:
        client.post_form(REMOVE_VLAN_PAGE, {f"remove_{vlan_id}": "on"})
    except HRUIError as exc:
        raise HRUIError(f"failed to delete VLAN: {exc}") from exc
    _autosave(client)


def _leading_int(pattern: re.Pattern[str], text: str) -> int:
    match = pattern.match(text)
    return int(match.group(1)) if match else 0


def get_all_port_vlan_configs(client: HRUIClient) -> list[PortVLANConfig]:
    """Read the PVID table of every port."""
    response = client.get(PORT_VLAN_PAGE)
    tables = BeautifulSoup(response.text, "html.parser").find_all("table")
    rows = tables[-1].find_all("tr")[1:] if tables else []

    return [
        PortVLANConfig(
            port=_leading_int(_PORT_LABEL, _cell_text(row, 1)),
            pvid=_leading_int(_LEADING_INT, _cell_text(row, 2)),
            accept_frame_type=_cell_text(row, 3),
        )
        for row in rows
    ]


def get_port_vlan_config(client: HRUIClient, port: int) -> PortVLANConfig:
    """Return the VLAN settings of one port."""
    try:
        configs = get_all_port_vlan_configs(client)
    except HRUIError as exc:
        raise HRUIError(f"failed to get all port VLAN configs: {exc}") from exc
    for config in configs:
        if config.port == port:
            return config
    raise HRUIError(f"port {port} not found in {len(configs)} ports")


def set_port_vlan_config(client: HRUIClient, config: PortVLANConfig) -> None:
    """Write the PVID and accepted frame type of one port."""
    form = {
        "ports": str(config.port - 1),
        "pvid": str(config.pvid),
        "vlan_accept_frame_type": ACCEPT_FRAME_TYPES.get(config.accept_frame_type, ""),
    }
    try:
        client.post_form(PORT_VLAN_PAGE, form)
    except HRUIError as exc:
        raise HRUIError(f"failed to set port VLAN config: {exc}") from exc
    _autosave(client)
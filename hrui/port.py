"""Physical port settings."""

from __future__ import annotations

import re
from dataclasses import dataclass

from bs4 import BeautifulSoup

from .client import HRUIClient, HRUIError

SPEED_DUPLEX = {
    0: "Auto",
    1: "10M/Half",
    2: "10M/Full",
    3: "100M/Half",
    4: "100M/Full",
    5: "1000M/Full",
    6: "2500M/Full",
    8: "10G/Full",
}

FLOW_CONTROL = {0: "Off", 1: "On"}

_LEADING_INT = re.compile(r"[+-]?\d+")


@dataclass
class Port:
    """Configuration of one switch port; ``state`` is 1 when enabled."""

    id: int = 0
    state: int = 0
    speed_duplex: str = ""
    flow_control: str = ""


def _leading_int(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group()) if match else 0


def get_all_ports(client: HRUIClient) -> list[Port]:
    """Read the settings of every port from the port status table."""
    response = client.get("/port.cgi?page=static")
    soup = BeautifulSoup(response.text, "html.parser")

    tables = soup.select("body center fieldset table")
    if len(tables) < 3:
        return []

    ports = []
    for row in tables[2].find_all("tr")[2:]:
        port = Port()
        for column, cell in enumerate(row.find_all("td")):
            text = cell.get_text().strip()
            if column == 0:
                port.id = _leading_int(text.removeprefix("Port "))
            elif column == 1:
                port.state = 1 if text == "Enable" else 0
            elif column == 2:
                port.speed_duplex = text
            elif column == 4:
                port.flow_control = text
        ports.append(port)
    return ports


def get_port(client: HRUIClient, port_id: int) -> Port:
    """Return the port with the given number."""
    for port in get_all_ports(client):
        if port.id == port_id:
            return port
    raise HRUIError(f"port with ID {port_id} not found")


def update_port_settings(client: HRUIClient, port: Port) -> None:
    """Write a port's settings, saving them when autosave is on."""
    form = {
        "cmd": "port",
        "portid": str(port.id),
        "state": str(port.state),
        "speed_duplex": port.speed_duplex,
        "flow": port.flow_control,
    }
    client.post_form("/port.cgi", form)
    if client.autosave:
        client.save_configuration()


def get_total_ports(client: HRUIClient) -> int:
    """Return the number of ports the switch reports."""
    return len(get_all_ports(client))
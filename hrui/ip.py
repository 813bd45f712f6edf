"""Management IP address settings."""

from __future__ import annotations

from dataclasses import dataclass

from bs4 import BeautifulSoup

from .client import HRUIClient

_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})


@dataclass
class IPAddressSettings:
    """Addressing of the switch's management interface."""

    dhcp_enabled: bool = False
    ip_address: str = ""
    netmask: str = ""
    gateway: str = ""


def _input_value(soup: BeautifulSoup, name: str) -> str:
    value = ""
    for node in soup.select(f"input[name={name}]"):
        value = node.get("value", "")
    return value


def get_ip_address_settings(client: HRUIClient) -> IPAddressSettings:
    """Read the current IP settings from the switch."""
    response = client.get("/ip.cgi")
    soup = BeautifulSoup(response.text, "html.parser")

    settings = IPAddressSettings()
    for option in soup.select("select[name='dhcp_state'] option"):
        if option.has_attr("selected"):
            settings.dhcp_enabled = option.get("value", "") in _TRUE_VALUES
    settings.ip_address = _input_value(soup, "ip")
    settings.netmask = _input_value(soup, "netmask")
    settings.gateway = _input_value(soup, "gateway")
    return settings


def update_ip_address_settings(client: HRUIClient, settings: IPAddressSettings) -> None:
    """Write IP settings to the switch, saving them when autosave is on."""
    form = {
        "dhcp_state": "1" if settings.dhcp_enabled else "0",
        "ip": settings.ip_address,
        "netmask": settings.netmask,
        "gateway": settings.gateway,
    }
    client.post_form("/ip.cgi", form)
    if client.autosave:
        client.save_configuration()
"""MAC address forwarding table and static MAC entries."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from bs4 import BeautifulSoup

from .client import HRUIClient, HRUIError
from .parsing import parse_int


@dataclass
class MACAddressEntry:
    """One learned or static entry of the forwarding table."""

    id: int
    mac: str
    vlan_id: int
    entry_type: str
    port: int


@dataclass
class StaticMACEntry:
    """One entry of the static MAC address table."""

    id: int = 0
    mac_address: str = ""
    vlan_id: int = 0
    port: int = 0


def get_mac_address_table(client: HRUIClient) -> list[MACAddressEntry]:
    """Read the MAC address forwarding table."""
    response = client.get("/mac.cgi?page=fwd_tbl")
    if response.status_code != 200:
        raise HRUIError(f"failed to fetch MAC address table: status {response.status_code}")

    soup = BeautifulSoup(response.text, "html.parser")
    entries = []
    for row in soup.select("table tr")[1:]:
        cells = [td.get_text().strip() for td in row.find_all("td")]
        if len(cells) < 5:
            continue
        entries.append(
            MACAddressEntry(
                id=parse_int(cells[0]),
                mac=cells[1],
                vlan_id=parse_int(cells[2]),
                entry_type=cells[3].lower(),
                port=parse_int(cells[4]),
            )
        )
    return entries


def get_static_mac_address_table(client: HRUIClient) -> list[StaticMACEntry]:
    """Read the table of configured static MAC addresses."""
    response = client.get("/mac.cgi?page=static")
    if response.status_code != 200:
        raise HRUIError(f"unexpected status code: {response.status_code}")

    soup = BeautifulSoup(response.text, "html.parser")
    entries = []
    for row in soup.select("form[action='/mac.cgi?page=staticdel'] table tr")[1:]:
        cells = [td.get_text().strip() for td in row.find_all("td")]
        if len(cells) != 5:
            continue
        entries.append(
            StaticMACEntry(
                id=parse_int(cells[0]),
                mac_address=cells[1],
                vlan_id=parse_int(cells[2]),
                port=parse_int(cells[3]),
            )
        )
    return entries


def add_static_mac_address(client: HRUIClient, mac: str, vlan_id: int, port: int) -> None:
    """Add a static MAC address bound to a VLAN and port."""
    form = {"mac": mac, "vlan": str(vlan_id), "src": str(port), "cmd": "macstatic"}
    client.post_form("/mac.cgi?page=static", form)


def delete_static_mac_addresses(client: HRUIClient, entries: Iterable[StaticMACEntry]) -> None:
    """Delete the given static MAC address entries."""
    form = [("cmd", "macstatictbl")]
    form.extend(("del", f"{entry.mac_address}_{entry.vlan_id}") for entry in entries)
    client.post_form("/mac.cgi?page=staticdel", form)
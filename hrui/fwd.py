"""Storm control settings of the forwarding engine."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Optional

import requests
from bs4 import BeautifulSoup

from .client import HRUIClient, HRUIError

STORM_CONTROL_PAGE = "/fwd.cgi?page=storm_ctrl"
INVALID_RATE_MARKER = "alert.cgi?alertmsg=Invalid Control rate !!"

_STORM_TYPE_IDS = {
    "broadcast": "3",
    "known multicast": "2",
    "unknown unicast": "0",
    "unknown multicast": "1",
}
_DEFAULT_STORM_TYPE_ID = "3"

_INTEGER = re.compile(r"[+-]?\d+")
_MAX_RATE = re.compile(r"1-(\d+).*kbps")


@dataclass
class StormControlEntry:
    """Storm control rates of one port; ``None`` means the limit is off."""

    port: int
    broadcast_rate_kbps: Optional[int] = None
    known_multicast_rate_kbps: Optional[int] = None
    unknown_unicast_rate_kbps: Optional[int] = None
    unknown_multicast_rate_kbps: Optional[int] = None


@dataclass
class StormControlConfig:
    """All rows of the storm control status table."""

    entries: list[StormControlEntry] = field(default_factory=list)


def _atoi(text: str) -> Optional[int]:
    return int(text) if _INTEGER.fullmatch(text) else None


def _post(client: HRUIClient, path: str, form: Mapping[str, str]) -> requests.Response:
    try:
        return client.session.post(client.url + path, data=dict(form), timeout=client.timeout)
    except requests.RequestException as exc:
        raise HRUIError(f"failed to submit form: {exc}") from exc


def port_label(port: int) -> str:
    """Return the switch's name for a port number, e.g. ``Port 3``."""
    return f"Port {port}"


def parse_port_label(text: str) -> int:
    """Return the port number from a label such as ``Port 3``."""
    parts = text.split(" ")
    number = _atoi(parts[1]) if len(parts) == 2 and parts[0] == "Port" else None
    if number is None:
        raise HRUIError(f"invalid port format: {text}")
    return number


def parse_rate(text: str) -> Optional[int]:
    """Return a rate in kbps, or ``None`` for ``Off`` and unreadable values."""
    if text == "Off":
        return None
    return _atoi(text)


def storm_type_to_id(storm_type: str) -> str:
    """Return the form value for a storm type name; unknown names mean broadcast."""
    return _STORM_TYPE_IDS.get(storm_type.lower(), _DEFAULT_STORM_TYPE_ID)


def get_storm_control_status(client: HRUIClient) -> StormControlConfig:
    """Read the storm control status table."""
    soup = BeautifulSoup(client.get(STORM_CONTROL_PAGE).text, "html.parser")
    tables = soup.find_all("table")
    if not tables:
        return StormControlConfig()

    entries = []
    for row in tables[-1].find_all("tr")[1:]:
        cells = [td.get_text().strip() for td in row.find_all("td")]
        if len(cells) != 5:
            continue
        try:
            port = parse_port_label(cells[0])
        except HRUIError:
            continue
        entries.append(
            StormControlEntry(
                port=port,
                broadcast_rate_kbps=parse_rate(cells[1]),
                known_multicast_rate_kbps=parse_rate(cells[2]),
                unknown_unicast_rate_kbps=parse_rate(cells[3]),
                unknown_multicast_rate_kbps=parse_rate(cells[4]),
            )
        )
    return StormControlConfig(entries)


def update_storm_control(
    client: HRUIClient,
    storm_type: str,
    ports: Iterable[int],
    state: bool,
    rate: Optional[int] = None,
) -> None:
    """Enable or disable one kind of storm control on the given ports."""
    form = {
        "storm_filter": storm_type_to_id(storm_type),
        "action": "1" if state else "0",
        "cmd": "storm",
    }
    if state and rate is not None:
        form["rate"] = str(rate)
    form["portid"] = ",".join(port_label(port) for port in ports)

    soup = BeautifulSoup(_post(client, STORM_CONTROL_PAGE, form).text, "html.parser")

    script = soup.find("script")
    if script is not None and INVALID_RATE_MARKER in script.get_text():
        raise HRUIError("invalid control rate: the rate provided is outside the allowed range")

    title = soup.find("title")
    if title is None or "Storm Control" not in title.get_text():
        raise HRUIError("unexpected response while updating storm control settings")


def get_port_max_rate(client: HRUIClient, port: int) -> int:
    """Return the highest storm control rate in kbps the port accepts."""
    label = port_label(port)
    soup = BeautifulSoup(client.get(STORM_CONTROL_PAGE).text, "html.parser")

    rate_text = ""
    for row in soup.find_all("tr"):
        if label not in row.get_text():
            continue
        for cell in row.find_all("td"):
            text = cell.get_text()
            if "(kbps)" in text:
                rate_text = text

    if not rate_text:
        raise HRUIError(f"could not find rate information for port '{label}'")

    match = _MAX_RATE.search(rate_text)
    if match is None:
        raise HRUIError(f"failed to extract rate information from text: {rate_text}")
    return int(match.group(1))
"""Spanning tree global and per-port settings."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass

import requests
from bs4 import BeautifulSoup

from .client import HRUIClient, HRUIError
from .parsing import find_header_value, parse_int, select_int_attribute, select_text

log = logging.getLogger(__name__)

STP_GLOBAL_PAGE = "/loop.cgi?page=stp_global"
STP_PORT_PAGE = "/loop.cgi?page=stp_port"
ASYNC_TIMEOUT = 2.0

_INTEGER = re.compile(r"[+-]?\d+")
_VERSION_VALUES = {"STP": "0", "RSTP": "1"}
_BOOL_NAMES = {"true": "True", "false": "False", "auto": "Auto"}


@dataclass
class STPGlobalSettings:
    """Bridge-wide spanning tree settings and the current root bridge."""

    stp_status: str = ""
    force_version: str = ""
    priority: int = 0
    max_age: int = 0
    hello_time: int = 0
    forward_delay: int = 0
    root_priority: int = 0
    root_mac: str = ""
    root_path_cost: int = 0
    root_port: str = ""
    root_max_age: int = 0
    root_hello_time: int = 0
    root_forward_delay: int = 0

    def version_value(self) -> str:
        """Return the form value for the forced version; unknown means STP."""
        return _VERSION_VALUES.get(self.force_version, "0")


@dataclass
class STPPort:
    """Spanning tree settings and state of one port (0-based ``port``)."""

    port: int
    state: str = ""
    role: str = ""
    path_cost_config: int = 0
    path_cost_actual: int = 0
    priority: int = 0
    p2p_config: str = ""
    p2p_actual: str = ""
    edge_config: str = ""
    edge_actual: str = ""


def _post(client: HRUIClient, path: str, form: Mapping[str, str]) -> requests.Response:
    try:
        return client.session.post(client.url + path, data=dict(form), timeout=client.timeout)
    except requests.RequestException as exc:
        raise HRUIError(f"failed to submit form: {exc}") from exc


def _header_int(soup: BeautifulSoup, label: str) -> int:
    text = find_header_value(soup, label)
    if not _INTEGER.fullmatch(text):
        raise HRUIError(f"invalid integer for {label}: {text!r}")
    return int(text)


def _header_seconds(soup: BeautifulSoup, label: str) -> int:
    return parse_int(find_header_value(soup, label).split()[0])


def parse_stp_int(value: str) -> int:
    """Parse a numeric STP cell; ``Auto``, ``-`` and junk read as 0."""
    value = value.strip()
    if value in ("Auto", "-"):
        return 0
    if not _INTEGER.fullmatch(value):
        log.debug("Failed to parse int: %s", value)
        return 0
    return int(value)


def normalize_bool_string(value: str) -> str:
    """Capitalise true/false/auto; anything else is returned unchanged."""
    return _BOOL_NAMES.get(value.strip().lower(), value)


def parse_port_number(text: str) -> int:
    """Turn ``Port N`` into the 0-based index N-1, or -1 when unreadable."""
    number = text.removeprefix("Port ")
    if not _INTEGER.fullmatch(number):
        log.debug("Failed to parse port number: %s", number)
        return -1
    return int(number) - 1


def _parse_global_settings(soup: BeautifulSoup) -> STPGlobalSettings:
    settings = STPGlobalSettings(
        stp_status=find_header_value(soup, "Spanning Tree Status"),
        force_version=select_text(soup, "select[name='version'] option[selected]"),
        priority=select_int_attribute(soup, "select[name='priority'] option[selected]", "value"),
        max_age=select_int_attribute(soup, "input[name='maxage']", "value"),
        hello_time=select_int_attribute(soup, "input[name='hello']", "value"),
        forward_delay=select_int_attribute(soup, "input[name='delay']", "value"),
        root_priority=_header_int(soup, "Root Priority"),
        root_mac=find_header_value(soup, "Root MAC Address"),
        root_path_cost=_header_int(soup, "Root Path Cost"),
        root_port=find_header_value(soup, "Root Port"),
        root_max_age=_header_seconds(soup, "Root Maximum Age"),
        root_hello_time=_header_seconds(soup, "Root Hello Time"),
        root_forward_delay=_header_seconds(soup, "Root Forward Delay"),
    )
    log.debug("Parsed STPGlobalSettings: %s", settings)
    return settings


def _settings_form(settings: STPGlobalSettings) -> dict[str, str]:
    return {
        "cmd": "stp",
        "version": settings.version_value(),
        "priority": str(settings.priority),
        "maxage": str(settings.max_age),
        "hello": str(settings.hello_time),
        "delay": str(settings.forward_delay),
    }


def get_stp_settings(client: HRUIClient) -> STPGlobalSettings:
    """Read the spanning tree global settings page."""
    response = client.get(STP_GLOBAL_PAGE)
    if response.status_code != 200:
        raise HRUIError(f"unexpected HTTP status code: {response.status_code}")
    return _parse_global_settings(BeautifulSoup(response.text, "html.parser"))


def update_stp_settings(client: HRUIClient, settings: STPGlobalSettings) -> None:
    """Write the spanning tree global settings."""
    response = _post(client, STP_GLOBAL_PAGE, _settings_form(settings))
    if response.status_code != 200:
        raise HRUIError(f"unexpected status code: {response.status_code}")


def update_stp_settings_async(client: HRUIClient, settings: STPGlobalSettings) -> None:
    """Send the global settings without waiting long for an answer.

    Some firmware never answers this request, so failures and timeouts are
    only logged.
    """
    try:
        response = client.session.post(
            client.url + STP_GLOBAL_PAGE,
            data=_settings_form(settings),
            timeout=ASYNC_TIMEOUT,
        )
    except requests.RequestException as exc:
        log.warning("POST request timed out or failed: %s", exc)
        return
    if response.status_code != 200:
        log.warning(
            "Received unexpected status code (%d) during UpdateSTPSettings",
            response.status_code,
        )


def get_stp_port_settings(client: HRUIClient) -> list[STPPort]:
    """Read the spanning tree settings of every port."""
    response = client.get(STP_PORT_PAGE)
    if response.status_code != 200:
        raise HRUIError(f"unexpected status code: {response.status_code}")

    tables = BeautifulSoup(response.text, "html.parser").find_all("table")
    rows = tables[-1].find_all("tr") if tables else []

    ports = []
    for index, row in enumerate(rows[2:], start=2):
        cells = [td.get_text() for td in row.find_all("td")]
        if len(cells) != 10:
            log.debug("Skipping row %d: column count = %d", index, len(cells))
            continue
        ports.append(
            STPPort(
                port=parse_port_number(cells[0]),
                state=cells[1].strip(),
                role=cells[2].strip(),
                path_cost_config=parse_stp_int(cells[3]),
                path_cost_actual=parse_stp_int(cells[4]),
                priority=parse_stp_int(cells[5]),
                p2p_config=normalize_bool_string(cells[6]),
                p2p_actual=normalize_bool_string(cells[7]),
                edge_config=normalize_bool_string(cells[8]),
                edge_actual=normalize_bool_string(cells[9]),
            )
        )

    if not ports:
        raise HRUIError("no STP ports found in settings table")
    return ports


def get_stp_port(client: HRUIClient, port_id: int) -> STPPort:
    """Return the spanning tree settings of one port (0-based id)."""
    try:
        ports = get_stp_port_settings(client)
    except HRUIError as exc:
        raise HRUIError(f"failed to fetch STP port settings: {exc}") from exc
    for port in ports:
        if port.port == port_id:
            return port
    raise HRUIError(f"port with ID {port_id} not found")


def update_stp_port_settings(
    client: HRUIClient, port_id: int, path_cost: int, priority: int, p2p: str, edge: str
) -> None:
    """Write the spanning tree settings of one port."""
    form = {
        "cmd": "stp_port",
        "portid": str(port_id),
        "cost": str(path_cost),
        "priority": str(priority),
        "p2p": p2p.lower(),
        "edge": edge.lower(),
        "submit": "+++Apply+++",
    }
    response = _post(client, STP_PORT_PAGE, form)
    if response.status_code != 200:
        raise HRUIError(
            f"failed to update STP port settings: unexpected status {response.status_code}"
        )
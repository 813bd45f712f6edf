"""Loop protection: function selection and per-port loop status."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

import requests
from bs4 import BeautifulSoup

from .client import HRUIClient, HRUIError
from .parsing import parse_int, select_int_attribute

LOOP_PAGE = "/loop.cgi"


class LoopFunction(Enum):
    """Loop protection modes offered by the switch, by their display label."""

    OFF = "Off"
    LOOP_DETECTION = "Loop Detection"
    LOOP_PREVENTION = "Loop Prevention"
    SPANNING_TREE = "Spanning Tree"

    @property
    def code(self) -> int:
        """The numeric value the switch expects in its form."""
        return list(LoopFunction).index(self)


@dataclass
class PortStatus:
    """Loop protection status of one port."""

    port: int
    enable: bool = False
    loop_state: str = ""
    loop_status: str = ""


@dataclass
class LoopProtocol:
    """Loop protection settings; the times apply to loop prevention only."""

    loop_function: str = ""
    interval_time: int = 0
    recover_time: int = 0
    port_statuses: list[PortStatus] = field(default_factory=list)


def _post(client: HRUIClient, path: str, form: Mapping[str, str]) -> requests.Response:
    try:
        return client.session.post(client.url + path, data=dict(form), timeout=client.timeout)
    except requests.RequestException as exc:
        raise HRUIError(f"failed to submit form: {exc}") from exc


def _int_attribute_or_zero(soup: BeautifulSoup, selector: str) -> int:
    try:
        return select_int_attribute(soup, selector, "value")
    except HRUIError:
        return 0


def _parse_port_statuses(soup: BeautifulSoup) -> list[PortStatus]:
    table = soup.find("table")
    if table is None:
        return []
    statuses = []
    for row in table.find_all("tr")[1:]:
        cells = [td.get_text().strip() for td in row.find_all("td")]
        if len(cells) < 3:
            continue
        loop_state = cells[1]
        statuses.append(
            PortStatus(
                port=parse_int(cells[0]),
                enable=loop_state == "Enable",
                loop_state=loop_state,
                loop_status=cells[2],
            )
        )
    return statuses


def get_loop_protocol(client: HRUIClient) -> LoopProtocol:
    """Read the loop protection settings and per-port statuses."""
    response = client.get(LOOP_PAGE)
    if response.status_code != 200:
        raise HRUIError(f"unexpected status code: {response.status_code}")

    soup = BeautifulSoup(response.text, "html.parser")
    protocol = LoopProtocol()
    for option in soup.select('select[name="func_type"] option[selected]'):
        protocol.loop_function = option.get_text().strip()

    if protocol.loop_function == LoopFunction.LOOP_PREVENTION.value:
        protocol.interval_time = _int_attribute_or_zero(soup, 'input[name="interval_time"]')
        protocol.recover_time = _int_attribute_or_zero(soup, 'input[name="recover_time"]')

    protocol.port_statuses = _parse_port_statuses(soup)
    return protocol


def update_loop_protocol(
    client: HRUIClient,
    loop_function: Union[str, LoopFunction],
    interval_time: int,
    recover_time: int,
    port_statuses: Optional[Iterable[PortStatus]] = None,
) -> None:
    """Select the loop protection mode and its timing.

    ``port_statuses`` is accepted for symmetry with :class:`LoopProtocol`;
    the switch takes per-port settings elsewhere.
    """
    if isinstance(loop_function, LoopFunction):
        function = loop_function
    else:
        try:
            function = LoopFunction(loop_function)
        except ValueError:
            raise HRUIError(f"invalid loop function type: {loop_function}") from None

    form = {
        "cmd": "loop",
        "func_type": str(function.code),
        "interval_time": str(interval_time),
        "recover_time": str(recover_time),
    }
    response = _post(client, LOOP_PAGE, form)
    if response.status_code != 200:
        raise HRUIError(f"unexpected status code: {response.status_code}")
"""Quality of service: port queues and queue weights."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

import requests
from bs4 import BeautifulSoup
from bs4.element import Tag

from .client import HRUIClient, HRUIError

PORT_PRIORITY_PAGE = "/qos.cgi?page=port_pri"
PACKET_SCHEDULING_PAGE = "/qos.cgi?page=pkt_sch"
QUEUE_WEIGHT_PAGE = "/qos.cgi?page=que_weight"

_PORT_ID = re.compile(r"Port (\d+)")
_DIGITS = re.compile(r"\d+")
_INTEGER = re.compile(r"[+-]?\d+")


@dataclass
class QoSPortQueue:
    """The queue a port's traffic is assigned to."""

    port_id: int
    queue: int


@dataclass
class QoSQueueWeight:
    """The scheduling weight of one queue, as the switch shows it."""

    queue: int
    weight: str


def _post(client: HRUIClient, path: str, form: Mapping[str, str]) -> requests.Response:
    try:
        return client.session.post(client.url + path, data=dict(form), timeout=client.timeout)
    except requests.RequestException as exc:
        raise HRUIError(f"failed to submit form: {exc}") from exc


def _last_table_rows(html: str) -> list[Tag]:
    tables = BeautifulSoup(html, "html.parser").find_all("table")
    return tables[-1].find_all("tr") if tables else []


def _cell_text(row: Tag, selector: str) -> str:
    return "".join(node.get_text() for node in row.select(selector))


def parse_port_id(text: str) -> int:
    """Return the number from text containing ``Port N``."""
    match = _PORT_ID.search(text)
    if match is None:
        raise HRUIError(f"invalid port text format: {text}")
    return int(match.group(1))


def parse_queue_id(text: str) -> int:
    """Return the first number found in the text."""
    match = _DIGITS.search(text)
    if match is None:
        raise HRUIError(f"invalid queue text format: {text}")
    return int(match.group())


def get_all_qos_port_queues(client: HRUIClient) -> list[QoSPortQueue]:
    """Read the port to queue assignment table."""
    response = client.get(PORT_PRIORITY_PAGE)
    queues = []
    for row in _last_table_rows(response.text):
        port_text = _cell_text(row, "td:first-child")
        queue_text = _cell_text(row, "td:nth-child(2)")
        if not port_text or not queue_text or port_text == "Port":
            continue
        try:
            queues.append(QoSPortQueue(parse_port_id(port_text), parse_queue_id(queue_text)))
        except HRUIError:
            continue
    return queues


def get_qos_port_queue(client: HRUIClient, port_id: int) -> QoSPortQueue:
    """Return the queue assignment of one port."""
    for port_queue in get_all_qos_port_queues(client):
        if port_queue.port_id == port_id:
            return port_queue
    raise HRUIError(f"QoS Port Queue not found for Port ID {port_id + 1}")


def update_qos_port_queue(client: HRUIClient, port_id: int, queue: int) -> None:
    """Assign a port (1-based) to a queue (1-based)."""
    form = {
        "cmd": "portprio",
        "portid": str(port_id - 1),
        "port_priority": str(queue - 1),
    }
    response = _post(client, PORT_PRIORITY_PAGE, form)
    status = response.status_code
    if status == 200:
        return
    if status == 404:
        raise HRUIError("QoS update failed: API endpoint not found")
    if status == 500:
        raise HRUIError("QoS update failed: Internal server error")
    raise HRUIError(f"error: received unexpected status code {status} from QoS update")


def _queue_number(text: str) -> Optional[int]:
    return int(text) if _INTEGER.fullmatch(text) else None


def get_all_qos_queue_weights(client: HRUIClient) -> list[QoSQueueWeight]:
    """Read the queue weight table."""
    response = client.get(PACKET_SCHEDULING_PAGE)
    weights = []
    for row in _last_table_rows(response.text):
        queue_text = _cell_text(row, "td:first-child")
        weight_text = _cell_text(row, "td:nth-child(2)")
        if not queue_text or not weight_text or queue_text == "Queue":
            continue
        queue = _queue_number(queue_text)
        if queue is None:
            continue
        weights.append(QoSQueueWeight(queue, weight_text))
    return weights


def update_qos_queue_weight(client: HRUIClient, queue: int, weight: int) -> None:
    """Set the weight of a queue (1-based)."""
    form = {"cmd": "qweight", "queueid": str(queue - 1), "weight": str(weight)}
    response = _post(client, QUEUE_WEIGHT_PAGE, form)
    if response.status_code != 200:
        raise HRUIError(
            f"unexpected status code {response.status_code} when updating QoS Queue Weight"
        )
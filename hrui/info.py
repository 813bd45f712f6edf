"""System information page."""

from __future__ import annotations

from bs4 import BeautifulSoup

from .client import HRUIClient


def get_system_info(client: HRUIClient) -> dict[str, str]:
    """Return the rows of the system information table as header -> value."""
    response = client.get("/info.cgi")
    soup = BeautifulSoup(response.text, "html.parser")
    info: dict[str, str] = {}
    for row in soup.select("table tr"):
        key = "".join(th.get_text() for th in row.find_all("th"))
        value = "".join(td.get_text() for td in row.find_all("td"))
        info[key] = value
    return info
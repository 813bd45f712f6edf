"""Helpers for pulling values out of the switch's HTML pages."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

from .client import HRUIError

_INTEGER = re.compile(r"[+-]?\d+")


def _to_int(text: str) -> int:
    stripped = text.strip()
    if not _INTEGER.fullmatch(stripped):
        raise HRUIError(f"invalid integer: {text!r}")
    return int(stripped)


def parse_int(value: str) -> int:
    """Parse a decimal integer, returning 0 when the text is not one."""
    try:
        return _to_int(value)
    except HRUIError:
        return 0


def select_text(soup: BeautifulSoup, selector: str) -> str:
    """Return the stripped text of everything matching ``selector``."""
    text = "".join(node.get_text() for node in soup.select(selector)).strip()
    if not text:
        raise HRUIError(f"missing value for selector: {selector}")
    return text


def select_int(soup: BeautifulSoup, selector: str) -> int:
    """Return the integer held in the text matching ``selector``."""
    return _to_int(select_text(soup, selector))


def select_int_attribute(soup: BeautifulSoup, selector: str, attr: str) -> int:
    """Return the integer held in ``attr`` of the first match of ``selector``."""
    node = soup.select_one(selector)
    value = node.get(attr, "") if node is not None else ""
    if isinstance(value, list):
        value = " ".join(value)
    return _to_int(value)


def find_header_value(soup: BeautifulSoup, label: str) -> str:
    """Return the text of the cell right after a header containing ``label``."""
    parts = []
    for header in soup.find_all("th"):
        if label in header.get_text():
            cell = header.find_next_sibling()
            if cell is not None and cell.name == "td":
                parts.append(cell.get_text())
    value = "".join(parts).strip()
    if not value:
        raise HRUIError(f"missing value for header: {label}")
    return value
import re
from urllib.parse import parse_qs

import pytest
import responses

from hrui.client import HRUIClient, HRUIError, new_client
from hrui.vlan import (
    PortVLANConfig,
    Vlan,
    create_vlan,
    delete_vlan,
    get_all_port_vlan_configs,
    get_all_vlans,
    get_port_vlan_config,
    get_vlan,
    parse_port_range,
    set_port_vlan_config,
)

BASE = "http://switch.example.com"
ANY_PATH = re.compile(re.escape(BASE) + r"/.*")
PASSWORD = "password"


def _vlan_table(rows):
    return f"""
<html><body><center><fieldset>
<legend>802.1Q VLAN</legend>
<form method="post" action="/vlan.cgi?page=getRmvVlanEntry" name=formVlanStatus>
 <table border="1">
  <tr>
   <th nowrap width="60">VLAN</th>
   <th nowrap>VLAN Name</th>
   <th nowrap>Member Ports</th>
   <th nowrap>Tagged Ports</th>
   <th nowrap>Untagged Ports</th>
   <th nowrap width="50">Delete</th>
  </tr>
  {rows}
 </table>
 <input type="submit" name="Delete" value="    Delete    ">
</form>
</fieldset></center></body></html>
"""


def _vlan_row(vid, name, members, tagged, untagged):
    return f"""
  <tr>
   <td width="60"><a method="post" href="/vlan.cgi?page=getVlanEntry&pickVlanId={vid}">{vid}</a></td>
   <td>{name}</td>
   <td nowrap>{members}</td>
   <td nowrap>{tagged}</td>
   <td nowrap>{untagged}</td>
   <td width="50"><input type="checkbox" name="remove_{vid}" id=vlan_0></td>
  </tr>"""


VLAN_HTML = _vlan_table(
    _vlan_row(1, "", "1-6", "-", "1-6")
    + _vlan_row(4, "vier", "6", "-", "6")
    + _vlan_row(5, "funf", "5", "-", "5")
    + _vlan_row(10, "myvlan1", "1,3-5", "1,4-5", "3")
)

PORT_VLAN_HTML = """
<html><head></head><body>
<table border="1"><tbody>
<tr><th width="90">Port</th><th width="90">PVID</th><th width="160">Accepted Frame Type</th></tr>
<tr><td align="center">Port 1</td><td align="center">1</td><td align="center">All</td></tr>
<tr><td align="center">Port 2</td><td align="center">1</td><td align="center">All</td></tr>
<tr><td align="center">Port 3</td><td align="center">1</td><td align="center">All</td></tr>
<tr><td align="center">Port 4</td><td align="center">1</td><td align="center">All</td></tr>
<tr><td align="center">Port 5</td><td align="center">1</td><td align="center">All</td></tr>
<tr><td align="center">Port 6</td><td align="center">10</td><td align="center">All</td></tr>
</tbody></table>
</body></html>
"""


@pytest.fixture
def mock():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def _serve(mock, body, status=200):
    mock.add(responses.GET, ANY_PATH, body=body, status=status)
    mock.add(responses.POST, ANY_PATH, body=body, status=status)


def _posted_form(mock, path_fragment):
    calls = [
        call
        for call in mock.calls
        if call.request.method == "POST" and path_fragment in call.request.url
    ]
    assert calls
    return parse_qs(calls[-1].request.body, keep_blank_values=True)


def test_get_vlan_existing_and_missing(mock):
    _serve(mock, VLAN_HTML)
    client = new_client(BASE, "testuser", PASSWORD, False)

    vlan = get_vlan(client, 10)
    assert vlan.vlan_id == 10
    assert vlan.name == "myvlan1"
    assert vlan.member_ports == [1, 3, 4, 5]
    assert vlan.tagged_ports == [1, 4, 5]
    assert vlan.untagged_ports == [3]

    with pytest.raises(HRUIError, match="VLAN with ID 20 not found"):
        get_vlan(client, 20)


def test_get_all_vlans(mock):
    _serve(mock, VLAN_HTML)
    client = new_client(BASE, "testuser", PASSWORD, False)

    vlans = get_all_vlans(client)

    assert len(vlans) == 4
    assert vlans == [
        Vlan(1, "", [1, 2, 3, 4, 5, 6], [], [1, 2, 3, 4, 5, 6]),
        Vlan(4, "vier", [6], [], [6]),
        Vlan(5, "funf", [5], [], [5]),
        Vlan(10, "myvlan1", untagged_ports=[3], tagged_ports=[1, 4, 5], member_ports=[1, 3, 4, 5]),
    ]


def test_get_all_vlans_skips_rows_without_numeric_id(mock):
    _serve(mock, _vlan_table(_vlan_row("abc", "bad", "1", "-", "1") + _vlan_row(7, "ok", "2", "-", "2")))
    vlans = get_all_vlans(HRUIClient(BASE))
    assert [vlan.vlan_id for vlan in vlans] == [7]


def test_create_vlan_sets_membership_for_every_port(mock):
    _serve(mock, "")
    client = new_client(BASE, "testuser", PASSWORD, False)
    vlan = Vlan(vlan_id=10, name="VLAN-Test", untagged_ports=[1, 2], tagged_ports=[3])

    result = create_vlan(client, vlan, 6)

    assert result is None
    form = _posted_form(mock, "page=static")
    assert form["vid"] == ["10"]
    assert form["name"] == ["VLAN-Test"]
    assert [form[f"vlanPort_{i}"][0] for i in range(6)] == ["0", "0", "1", "2", "2", "2"]


def test_create_vlan_failure_raises(mock):
    _serve(mock, "", status=500)
    with pytest.raises(HRUIError, match="failed to create/update VLAN"):
        create_vlan(HRUIClient(BASE), Vlan(vlan_id=3), 2)


def test_delete_vlan_posts_remove_checkbox(mock):
    _serve(mock, "")
    client = new_client(BASE, "testuser", PASSWORD, False)

    result = delete_vlan(client, 10)

    assert result is None
    assert _posted_form(mock, "getRmvVlanEntry") == {"remove_10": ["on"]}


def test_delete_vlan_with_autosave_saves_configuration(mock):
    _serve(mock, "")
    client = HRUIClient(BASE, autosave=True)

    result = delete_vlan(client, 4)

    assert result is None
    assert _posted_form(mock, "getRmvVlanEntry") == {"remove_4": ["on"]}
    assert _posted_form(mock, "/save.cgi")["cmd"] == ["save"]


def test_get_all_port_vlan_configs(mock):
    _serve(mock, PORT_VLAN_HTML)
    client = new_client(BASE, "testuser", PASSWORD, False)

    configs = get_all_port_vlan_configs(client)

    assert len(configs) == 6
    assert configs == [
        PortVLANConfig(1, 1, "All"),
        PortVLANConfig(2, 1, "All"),
        PortVLANConfig(3, 1, "All"),
        PortVLANConfig(4, 1, "All"),
        PortVLANConfig(5, 1, "All"),
        PortVLANConfig(6, 10, "All"),
    ]


def test_get_port_vlan_config_found_and_missing(mock):
    _serve(mock, PORT_VLAN_HTML)
    client = HRUIClient(BASE)

    assert get_port_vlan_config(client, 6) == PortVLANConfig(6, 10, "All")
    with pytest.raises(HRUIError, match="port 9 not found in 6 ports"):
        get_port_vlan_config(client, 9)


def test_set_port_vlan_config_form(mock):
    _serve(mock, "")
    result = set_port_vlan_config(
        HRUIClient(BASE), PortVLANConfig(port=3, pvid=20, accept_frame_type="Tag-only")
    )

    assert result is None
    form = _posted_form(mock, "port_based")
    assert form == {"ports": ["2"], "pvid": ["20"], "vlan_accept_frame_type": ["1"]}


def test_set_port_vlan_config_unknown_frame_type_sends_empty(mock):
    _serve(mock, "")
    result = set_port_vlan_config(
        HRUIClient(BASE), PortVLANConfig(port=1, pvid=1, accept_frame_type="Other")
    )
    assert result is None
    assert _posted_form(mock, "port_based")["vlan_accept_frame_type"] == [""]


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("", []),
        ("-", []),
        ("5", [5]),
        ("1-6", [1, 2, 3, 4, 5, 6]),
        ("1,3-5", [1, 3, 4, 5]),
        ("1,4-5", [1, 4, 5]),
        ("2-1", []),
        ("1-2-3", []),
    ],
)
def test_parse_port_range(text, expected):
    assert parse_port_range(text) == expected
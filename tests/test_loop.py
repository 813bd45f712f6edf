from urllib.parse import parse_qs

import pytest
import responses

from hrui.client import HRUIClient, HRUIError
from hrui.loop import (
    LoopFunction,
    LoopProtocol,
    PortStatus,
    get_loop_protocol,
    update_loop_protocol,
)

BASE = "http://switch.test"

LOOP_PREVENTION_HTML = """
<html>
    <body>
        <select name="func_type">
            <option value="0">Off</option>
            <option value="1">Loop Detection</option>
            <option value="2" selected>Loop Prevention</option>
        </select>
        <input name="interval_time" value="5" />
        <input name="recover_time" value="10" />

        <table>
            <tr>
                <th>Port</th><th>State</th><th>Status</th>
            </tr>
            <tr>
                <td>1</td><td>Disable</td><td>Forwarding</td>
            </tr>
            <tr>
                <td>2</td><td>Enable</td><td>Forwarding</td>
            </tr>
        </table>
    </body>
</html>"""

LOOP_DETECTION_HTML = LOOP_PREVENTION_HTML.replace(
    '<option value="1">Loop Detection', '<option value="1" selected>Loop Detection'
).replace('<option value="2" selected>', '<option value="2">')


@pytest.fixture
def mock():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def _client():
    return HRUIClient(BASE)


def _form(call):
    body = call.request.body
    if isinstance(body, bytes):
        body = body.decode()
    return {key: values[0] for key, values in parse_qs(body).items()}


def test_get_loop_protocol_loop_prevention(mock):
    mock.add(responses.GET, BASE + "/loop.cgi", body=LOOP_PREVENTION_HTML)

    protocol = get_loop_protocol(_client())

    assert protocol == LoopProtocol(
        loop_function="Loop Prevention",
        interval_time=5,
        recover_time=10,
        port_statuses=[
            PortStatus(port=1, enable=False, loop_state="Disable", loop_status="Forwarding"),
            PortStatus(port=2, enable=True, loop_state="Enable", loop_status="Forwarding"),
        ],
    )


def test_get_loop_protocol_other_mode_ignores_times(mock):
    mock.add(responses.GET, BASE + "/loop.cgi", body=LOOP_DETECTION_HTML)

    protocol = get_loop_protocol(_client())

    assert protocol.loop_function == "Loop Detection"
    assert protocol.interval_time == 0
    assert protocol.recover_time == 0
    assert [status.port for status in protocol.port_statuses] == [1, 2]


def test_get_loop_protocol_bad_status(mock):
    mock.add(responses.GET, BASE + "/loop.cgi", body="nope", status=500)

    with pytest.raises(HRUIError, match="unexpected status code: 500"):
        get_loop_protocol(_client())


def test_update_loop_protocol_sends_form(mock):
    mock.add(responses.POST, BASE + "/loop.cgi", body="OK")

    result = update_loop_protocol(
        _client(),
        "Loop Prevention",
        5,
        12,
        [PortStatus(port=1, enable=True), PortStatus(port=2, enable=False)],
    )

    assert result is None
    assert len(mock.calls) == 1
    assert _form(mock.calls[0]) == {
        "cmd": "loop",
        "func_type": "2",
        "interval_time": "5",
        "recover_time": "12",
    }


def test_update_loop_protocol_accepts_enum(mock):
    mock.add(responses.POST, BASE + "/loop.cgi", body="OK")

    result = update_loop_protocol(_client(), LoopFunction.SPANNING_TREE, 0, 0, [])

    assert result is None
    assert _form(mock.calls[0])["func_type"] == "3"


def test_update_loop_protocol_bad_status(mock):
    mock.add(responses.POST, BASE + "/loop.cgi", body="err", status=500)

    with pytest.raises(HRUIError, match="unexpected status code: 500"):
        update_loop_protocol(_client(), "Off", 0, 0, [])


def test_update_loop_protocol_rejects_unknown_function():
    with pytest.raises(HRUIError, match="invalid loop function type: Sometimes"):
        update_loop_protocol(_client(), "Sometimes", 0, 0, [])


@pytest.mark.parametrize(
    "label, code",
    [("Off", 0), ("Loop Detection", 1), ("Loop Prevention", 2), ("Spanning Tree", 3)],
)
def test_loop_function_codes(label, code):
    assert LoopFunction(label).code == code
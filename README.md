# hrui

A Python client for network switches managed through the HRUI web
interface. It logs in with the switch's cookie-based authentication, reads
the configuration pages and submits the same forms the web UI does.

## Installation

```
pip install hrui
```

For running the test suite:

```
pip install "hrui[test]"
pytest
```

## Connecting

`hrui.client.new_client` builds an `HRUIClient`, sets the authentication
cookie (an MD5 digest of user name and password) and checks it against the
switch's `/index.cgi`. Any failure during that check is raised as
`AuthenticationError`, a subclass of `HRUIError`. Every other operation
raises `HRUIError` when the switch cannot be reached or answers with an
unexpected status.

```python
from hrui.client import new_client

password = "password"
client = new_client("http://192.0.2.10", "admin", password, autosave=True)
```

With `autosave=True`, the functions that change IP, port and VLAN settings
also save the configuration to the switch's persistent storage;
`client.save_configuration()` does it by hand. `HRUIClient` is a context
manager, and `client.close()` releases its HTTP session.

`client.get(url)` and `client.post_form(url, form)` accept either an
absolute URL or a path starting with `/`, resolved against the switch's
base URL. `post_form` treats any status other than 200 as an error.

## What you can do

All operations are plain functions that take the client as their first
argument.

| Module        | Functions |
|---------------|-----------|
| `hrui.info`   | `get_system_info` |
| `hrui.ip`     | `get_ip_address_settings`, `update_ip_address_settings` |
| `hrui.port`   | `get_all_ports`, `get_port`, `update_port_settings`, `get_total_ports` |
| `hrui.mac`    | `get_mac_address_table`, `get_static_mac_address_table`, `add_static_mac_address`, `delete_static_mac_addresses` |
| `hrui.fwd`    | `get_storm_control_status`, `update_storm_control`, `get_port_max_rate` |
| `hrui.qos`    | `get_all_qos_port_queues`, `get_qos_port_queue`, `update_qos_port_queue`, `get_all_qos_queue_weights`, `update_qos_queue_weight` |
| `hrui.loop`   | `get_loop_protocol`, `update_loop_protocol` |
| `hrui.stp`    | `get_stp_settings`, `update_stp_settings`, `update_stp_settings_async`, `get_stp_port_settings`, `get_stp_port`, `update_stp_port_settings` |
| `hrui.vlan`   | `get_all_vlans`, `get_vlan`, `create_vlan`, `delete_vlan`, `get_all_port_vlan_configs`, `get_port_vlan_config`, `set_port_vlan_config` |

`hrui.parsing` holds the small HTML helpers the other modules share.

## Examples

Create a VLAN with untagged and tagged members:

```python
from hrui.port import get_total_ports
from hrui.vlan import Vlan, create_vlan, get_vlan

create_vlan(
    client,
    Vlan(vlan_id=10, name="servers", untagged_ports=[1, 2], tagged_ports=[3]),
    get_total_ports(client),
)
print(get_vlan(client, 10).member_ports)
```

Inspect storm control and the per-port rate limit:

```python
from hrui.fwd import get_port_max_rate, get_storm_control_status

for entry in get_storm_control_status(client).entries:
    print(entry.port, entry.broadcast_rate_kbps)

print(get_port_max_rate(client, 1))
```

Read the spanning tree state:

```python
from hrui.stp import get_stp_settings, get_stp_port_settings

settings = get_stp_settings(client)
print(settings.force_version, settings.root_mac)
for port in get_stp_port_settings(client):
    print(port.port, port.state, port.role)
```

Select a loop protection mode:

```python
from hrui.loop import LoopFunction, update_loop_protocol

update_loop_protocol(client, LoopFunction.LOOP_PREVENTION, 5, 10)
```

Look up the MAC address table:

```python
from hrui.mac import get_mac_address_table

for entry in get_mac_address_table(client):
    print(entry.mac, entry.vlan_id, entry.port, entry.entry_type)
```

## Notes on numbering

Rates in storm control entries are `None` when the limit is off or the
cell cannot be read. Ports of `hrui.port`, `hrui.vlan`, `hrui.fwd` and
`hrui.qos` are numbered as the web pages show them (from 1); the update
functions convert to the switch's zero-based form values where the forms
need them. `STPPort.port` and the `port_id` of `get_stp_port` are
zero-based.

## What this package does not do

It is a library only: it has no command-line tool and no server, and it
keeps no state of its own beyond the HTTP session. Loop protection is
configured globally; `update_loop_protocol` does not send per-port
settings.
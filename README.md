# robodrive

A small library for building and reading the binary packets exchanged with a
drive robot. Everything lives in one module, `robodrive.packet`.

There are three packet shapes:

| Shape     | Size     | Contents                                  |
|-----------|----------|-------------------------------------------|
| Response  | 6 bytes  | header + CRC                              |
| Drive     | 9 bytes  | header + direction, duration, speed + CRC |
| Telemetry | 15 bytes | header + telemetry body + CRC             |

The header holds a 16-bit little-endian packet count, a flag byte (drive,
status, sleep and ack bits, then four padding bits) and a 16-bit
little-endian length. The CRC byte is the number of set bits in every byte
that comes before it; `parity_count(data)` computes that count.

The module also defines the size constants `HEADER_SIZE`,
`RESPONSE_PACKET_SIZE`, `PACKET_SIZE` and `TELEMETRY_PACKET_SIZE`, and the
direction values `FORWARD`, `BACKWARD`, `LEFT` and `RIGHT`.

## Installing

```
pip install robodrive
```

## Building a drive command

```python
from robodrive.packet import CommandType, Packet

pkt = Packet()
pkt.pkt_count = 1
pkt.set_cmd(CommandType.DRIVE)
pkt.set_body_data("1,10,90")       # direction, duration, speed

raw = pkt.gen_packet()             # bytes, 9 long
assert pkt.length == 9
assert pkt.check_crc(raw)
```

`gen_packet()` writes the current length into the header, recomputes the CRC
(also available on its own as `calc_crc()`, which stores and returns it) and
returns the serialised bytes.

`set_cmd()` sets the flag for the given `CommandType` (`DRIVE`, `SLEEP` or
`RESPONSE`), clears the other flags, including ack, and zeroes the body. A
value that is not a `CommandType` raises `PacketError`. A sleep command has
no body and is 6 bytes long.

A new `Packet()` is an empty response: `cmd` is `CommandType.RESPONSE`,
`length` is 6, `pkt_count` is 0 and `ack` is `False`.

## Reading a received packet

```python
from robodrive.packet import Packet

pkt = Packet.from_bytes(raw)
print(pkt.pkt_count, pkt.cmd, pkt.ack)
print(pkt.body_data)               # "1,10,90" or "5,95,3,1,10,80"
```

`Packet.from_bytes` accepts only 6, 9 or 15 bytes; any other size raises
`PacketError`. When no command flag is set, `cmd` reports
`CommandType.DRIVE`.

## Telemetry

A packet whose command is `CommandType.RESPONSE` carries telemetry. Its body
text has six comma-separated fields: last packet counter, current grade, hit
count, last command, last command value and last command speed. The first
three are 16-bit values, the last three 8-bit.

```python
pkt = Packet()
pkt.set_cmd(CommandType.RESPONSE)
pkt.set_body_data("5,95,3,1,10,80")
assert pkt.length == 15
```

If every telemetry field is zero, the packet is a 6-byte response.

Body text that does not match the expected comma-separated form raises
`PacketError`. Out-of-range values are truncated to the width of their
field.

## What this package does not do

It only encodes and decodes packets. It does not open a serial port or
network connection, send or receive anything, or provide a command-line
program.

## Running the tests

```
pip install robodrive[test]
pytest
```
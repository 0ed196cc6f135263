# nmxact

Building blocks for managing devices over the newtmgr management protocol
(NMP) and CoAP: message types and their encodings, response dispatchers,
serial line framing and BLE bookkeeping helpers.

## What is inside

- `nmxact.nmxutil`
  - `errors`: `NmxError` and its subclasses `RspTimeoutError`,
    `BleSesnDisconnectError` (with `reason`), `SesnAlreadyOpenError`,
    `SesnClosedError`, `ScanTmoError`, `XportError`, `BleHostError`
    (with `status`), `AlreadyError`, `BleSecurityError`; plus
    `to_ble_host` and `to_ble_security`.
  - `util`: `next_nmp_seq` and `next_token` (8-bit counters starting at a
    random value), `seq_to_token`, `encode_cbor` / `decode_cbor` and the
    map variants (raising `ValueError` on bad data), `fragment`,
    `get_next_id`, and listener logging helpers on the `nmxact.listen`
    logger.
  - `bcast.Broadcaster`: fans a value out to every channel returned by
    `listen(depth)`.
  - `blocker.Blocker`: holds waiters between `start()` and `unblock(val)`;
    `wait()` raises `TimeoutError` or `BlockerAbortedError`.
  - `err_funnel.ErrFunnel`: collects errors for `accum_delay` seconds and
    resolves the futures from `wait()` with the most severe one.
  - `sres.SingleResource`: one owner at a time, FIFO of waiting futures.
- `nmxact.nmp`
  - `header`: `NmpOp`, `NmpErr`, `NmpGroup`, the command id constants,
    the 8-byte `NmpHdr` (`to_bytes`, `decode_nmp_hdr`), `NmpReq` /
    `NmpRsp`, `body_bytes` and `encode_nmp_plain`.
  - Request and response dataclasses in `defgroup` (echo, date-time,
    reset, mempool and task statistics), `fs`, `image`, `log` and `misc`
    (config, crash, run, shell, stat). Each request gets a fresh sequence
    number in its header.
  - `decode`: `decode_rsp_body(hdr, body)` and
    `register_response_handler(ogi, ctor)` keyed by `Ogi`.
  - `frag.Reassembler` and `dispatch.Dispatcher`, which reassembles
    fragments and hands each response to the listener for its sequence
    number.
- `nmxact.nmcoap`
  - `message`: `CoapMessage` with datagram and stream (`is_tcp`)
    encodings, `create_msg`, `parse_op`, `parse_dgram_message`,
    `pull_tcp`, `encode`, `next_message_id`, `ObserveCode`.
  - `listener`: `MsgCriteria` (token and path) with ordering and matching;
    `receiver`: `Receiver` and the stream `Reassembler`;
    `dispatch.Dispatcher`: routes messages to the most specific listener.
- `nmxact.nmserial`
  - `serial_xport`: the base64 console framing with a length prefix and
    CRC-16 (`encode_frames`, `FrameDecoder`, `crc16`) and `SerialXport`,
    which opens a port with pyserial (or a `port_factory` you pass),
    writes framed packets with `tx` and passes each received packet to the
    handler given to `start`.
  - `packet.Packet`: the receive buffer used by the decoder.
- `nmxact.nmble`
  - `listen`: `ListenerKey`, `seq_key`, `tch_key`, `Listener` and the
    two-way `ListenerMap`.
  - `master.Master`: arbitrates the connect/scan role between primary
    clients and one `Preemptable` secondary.
  - `profile`: `Profile`, `Service`, `Characteristic`, `Descriptor`,
    `ChrId` and `find_dsc_by_uuid`.
  - `receiver.Receiver`: tracks listeners a client registered with a
    transport object you supply.

## Install

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Example

```python
from nmxact.nmp.defgroup import EchoReq
from nmxact.nmp.header import encode_nmp_plain, decode_nmp_hdr
from nmxact.nmserial.serial_xport import FrameDecoder, encode_frames

req = EchoReq(payload="hello")
packet = encode_nmp_plain(req.msg())
hdr = decode_nmp_hdr(packet)
print(hdr.group, hdr.id, hdr.len)

decoder = FrameDecoder()
for frame in encode_frames(packet, 128):
    out = decoder.feed_line(frame)
print(out == packet)
```

## What it does not do

- There is no session layer: nothing opens a connection, sends a request
  and waits for its response with timeouts and retries. You combine a
  dispatcher's listeners with a transport yourself.
- There is no BLE transport or host connection; the BLE modules only
  keep track of listeners, master arbitration and a discovered profile.
- There is no command-line tool.
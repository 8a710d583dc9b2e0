# distkit

Small building blocks for distributed programs, using only the standard library.

## What is inside

- `distkit.kvstore`: `KVStore`, an in-memory store in which each key holds a
  list of byte values. It offers `put` (append a value), `get` (the values,
  oldest first, or an empty list), `delete` (drop the key) and
  `update(key, old_value, new_value)`, which removes the first `old_value`
  if present and appends `new_value`. `create_with_backdoor()` returns a store
  together with its live inner dictionary, so you can inspect what it holds.
- `distkit.squarer`: `Squarer.initialize(source)` takes a `queue.Queue` of
  integers and returns a stream. Each `get(timeout=None)` on the stream takes
  the next integer from the queue and returns its square; it raises
  `queue.Empty` on timeout and `RuntimeError` once `Squarer.close()` has been
  called. Iterating over the stream yields squares until the squarer is closed.
- `distkit.kvserver`: `KeyValueServer` is a TCP server over a `KVStore` that
  speaks a newline-terminated text protocol:

  ```
  Put:<key>:<value>
  Get:<key>
  Delete:<key>
  Update:<key>:<old>:<new>
  ```

  For a `Get`, the server sends one `<key>:<value>` line for each stored value.
  Each client has a queue of 500 outgoing messages; once it is full, further
  replies to that client are dropped, so a slow reader cannot stall the server.
  `start(port)` listens in the background (port `0` picks a free port, readable
  from the `port` property), `count_active()` and `count_dropped()` report how
  many clients are connected and how many have disconnected, and `close()`
  shuts every connection.
- `distkit.message`: `MsgType` (`JOIN`, `REQUEST`, `RESULT`) and the frozen
  `Message` dataclass, with `to_json()` / `Message.from_json(payload)` using the
  keys `Type`, `Data`, `Lower`, `Upper`, `Hash` and `Nonce`. The helpers
  `new_request`, `new_result` and `new_join` build messages.
  `hash_nonce(msg, nonce)` returns the first 8 bytes, big-endian, of the
  SHA-256 of `"<msg> <nonce>"`.
- `distkit.miner`: `mine(msg, lower, upper)` returns `(hash, nonce)` for the
  smallest hash in an inclusive range. `handle_request(message)` turns a
  request message into a result message.
- `distkit.scheduler`: `Scheduler` spreads client requests over miners in
  chunks of up to 10,000 nonces, round robin. `handle_message(conn_id, message)`
  and `handle_disconnect(conn_id)` return the messages to send as
  `(connection id, message)` pairs. Work of a miner that disconnects is handed
  to another, and each client is answered with the best result once all its
  chunks have come back.

## Running the key-value server

```
pip install .
distkit-kvserver
```

This starts the server on port 9999 (choose another with `--port`) and keeps it
running until you interrupt it.

## Using it from Python

```python
from distkit.kvstore import create_with_backdoor
from distkit.kvserver import KeyValueServer

store, contents = create_with_backdoor()
server = KeyValueServer(store)
server.start(9999)
# ... connect clients, send "Put:fruit:apple\n", "Get:fruit\n" ...
print(server.count_active(), server.count_dropped())
server.close()
```

## What it does not do

The mining pieces do no networking. There is no command that runs a mining
scheduler, a miner or a mining client over the network, and no transport for
`Message` values: `Scheduler` only decides what to send to whom, and the caller
must carry the messages between connections itself.

## Tests

```
pip install .[test]
pytest
```
"""TCP key/value server speaking a line-based Put/Get/Delete/Update protocol."""

from __future__ import annotations

import argparse
import queue
import socket
import threading
from dataclasses import dataclass, field

from distkit.kvstore import KVStore, create_with_backdoor

DEFAULT_PORT = 9999
OUTBOX_SIZE = 500
_POLL_SECONDS = 0.1
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


@dataclass(eq=False)
class _Client:
    conn: socket.socket
    outbox: queue.Queue = field(default_factory=lambda: queue.Queue(maxsize=OUTBOX_SIZE))
    stopped: threading.Event = field(default_factory=threading.Event)

    def send(self, message: bytes) -> None:
        """Queue a message; it is dropped when the outbox is full."""
        try:
            self.outbox.put_nowait(message)
        except queue.Full:
            pass

    def shutdown(self) -> None:
        self.stopped.set()
        try:
            self.conn.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self.conn.close()


class KeyValueServer:
    """Serves a shared KVStore to any number of TCP clients.

    Requests are newline-terminated lines ``Put:key:value``, ``Get:key``,
    ``Delete:key`` and ``Update:key:old:new``. A Get answers with one line
    ``key:value`` per stored value; replies to a client that does not keep up
    are dropped once ``OUTBOX_SIZE`` of them are waiting.
    """

    def __init__(self, store: KVStore) -> None:
        self._store = store
        self._lock = threading.Lock()
        self._clients: list[_Client] = []
        self._dropped = 0
        self._listener: socket.socket | None = None
        self._closed = threading.Event()

    @property
    def port(self) -> int:
        """The port the server is listening on."""
        if self._listener is None:
            raise RuntimeError("server is not started")
        return self._listener.getsockname()[1]

    def start(self, port: int) -> None:
        """Listen on ``port`` and serve clients in the background.

        Raises ``OSError`` if the port cannot be bound.
        """
        if self._listener is not None:
            raise RuntimeError("server is already started")
        listener = socket.create_server(("", port), backlog=128)
        listener.settimeout(_POLL_SECONDS)
        self._listener = listener
        threading.Thread(target=self._accept_loop, daemon=True).start()

    def count_active(self) -> int:
        """Number of clients currently connected."""
        self._require_running()
        with self._lock:
            return len(self._clients)

    def count_dropped(self) -> int:
        """Number of clients that have disconnected."""
        self._require_running()
        with self._lock:
            return self._dropped

    def close(self) -> None:
        """Stop accepting clients and close every connection."""
        if self._listener is None or self._closed.is_set():
            return
        self._closed.set()
        self._listener.close()
        with self._lock:
            clients, self._clients = self._clients, []
        for client in clients:
            client.shutdown()

    def _require_running(self) -> None:
        if self._listener is None:
            raise RuntimeError("server is not started")
        if self._closed.is_set():
            raise RuntimeError("server is closed")

    def _accept_loop(self) -> None:
        assert self._listener is not None
        while not self._closed.is_set():
            try:
                conn, _ = self._listener.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            conn.settimeout(None)
            client = _Client(conn)
            with self._lock:
                if self._closed.is_set():
                    conn.close()
                    return
                self._clients.append(client)
            threading.Thread(target=self._read_loop, args=(client,), daemon=True).start()
            threading.Thread(target=self._write_loop, args=(client,), daemon=True).start()

    def _read_loop(self, client: _Client) -> None:
        try:
            with client.conn.makefile("rb") as stream:
                for line in stream:
                    if not line.endswith(b"\n"):
                        break
                    self._handle(client, line.strip(b"\n"))
        except (OSError, ValueError):
            pass
        self._drop(client)

    def _write_loop(self, client: _Client) -> None:
        while not client.stopped.is_set():
            try:
                message = client.outbox.get(timeout=_POLL_SECONDS)
            except queue.Empty:
                continue
            try:
                client.conn.sendall(message)
            except OSError:
                return

    def _handle(self, client: _Client, request: bytes) -> None:
        match request.split(b":"):
            case [b"Put", key, value, *_]:
                with self._lock:
                    self._store.put(_decode(key), value)
            case [b"Get", key, *_]:
                with self._lock:
                    values = self._store.get(_decode(key))
                for value in values:
                    client.send(key + b":" + value + b"\n")
            case [b"Delete", key, *_]:
                with self._lock:
                    self._store.delete(_decode(key))
            case [b"Update", key, old_value, new_value, *_]:
                with self._lock:
                    self._store.update(_decode(key), old_value, new_value)

    def _drop(self, client: _Client) -> None:
        with self._lock:
            if self._closed.is_set() or client not in self._clients:
                return
            self._clients.remove(client)
            self._dropped += 1
        client.shutdown()


def _decode(key: bytes) -> str:
    return key.decode(_ENCODING, _ERRORS)


def main(argv: list[str] | None = None) -> int:
    """Run a key/value server until interrupted."""
    parser = argparse.ArgumentParser(description="Run the key/value server.")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port to listen on")
    args = parser.parse_args(argv)

    store, _ = create_with_backdoor()
    server = KeyValueServer(store)
    try:
        server.start(args.port)
    except OSError as err:
        print(f"KeyValueServer could not be started: {err}")
        return 1
    print(f"Started KeyValueServer on port {args.port}...")
    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        pass
    finally:
        server.close()
    return 0
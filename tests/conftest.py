import socket, threading, time

import pytest


class FakeInstrument:
    """Loopback TCP peer that records received lines and answers from a table."""

    def __init__(self, replies=None):
        self.replies = dict(replies or {})
        self.received = []
        self.conn = None
        self._srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._srv.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._srv.bind(("127.0.0.1", 0))
        self._srv.listen(1)
        self.host, self.port = self._srv.getsockname()
        self._connected = threading.Event()
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self):
        try:
            conn, _ = self._srv.accept()
        except OSError:
            return
        self.conn = conn
        self._connected.set()
        buf = b""
        while True:
            try:
                chunk = conn.recv(4096)
            except OSError:
                return
            if not chunk:
                return
            buf += chunk
            while b"\n" in buf:
                line, _, buf = buf.partition(b"\n")
                text = line.decode()
                self.received.append(text)
                reply = self.replies.get(text)
                if reply is not None:
                    try:
                        conn.sendall(reply)
                    except OSError:
                        return

    def wait_connected(self, timeout=2.0):
        assert self._connected.wait(timeout), "client never connected"

    def wait_received(self, n, timeout=2.0):
        deadline = time.time() + timeout
        while len(self.received) < n and time.time() < deadline:
            time.sleep(0.01)
        return list(self.received)

    def hang_up(self):
        self.wait_connected()
        self.conn.shutdown(socket.SHUT_RDWR)
        self.conn.close()

    def stop(self):
        for s in (self.conn, self._srv):
            if s is None:
                continue
            try:
                s.close()
            except OSError:
                pass


@pytest.fixture
def instrument():
    inst = FakeInstrument({
        "*IDN?": b"ACME,Model1,SN1,1.0\n",
        "MEAS:VOLT?": b"+1.234E+00\n",
        "DIAG:DEB:REG? 0x200": b"0x0000BEEF\n",
    })
    yield inst
    inst.stop()


@pytest.fixture
def free_port():
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port

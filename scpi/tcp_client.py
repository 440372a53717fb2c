import select, socket, time
from typing import List, Optional
from . import config as C

# ---------- Session ---------- #
class Session:
    """One TCP link to an instrument plus the commands entered on it.

    The session owns the socket exclusively. `history` is append-only and is
    only used for interactive recall; nothing in it is ever re-sent
    automatically.
    """

    def __init__(self, host: str, port: int, sock: socket.socket):
        self.host = host
        self.port = port
        self.sock: Optional[socket.socket] = sock
        self.history: List[str] = []

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def closed(self) -> bool:
        return self.sock is None

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc) -> None:
        close(self)

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<Session {self.address} {state}>"

# ---------- Helpers ---------- #
def is_query(command: str) -> bool:
    """True when the command's header (first word) ends with '?'.

    `*IDN?` and `DIAG:DEB:REG? 0x200` are queries; `*RST` and
    `DISP:TEXT "READY?"` are not.
    """
    words = command.split()
    return bool(words) and words[0].endswith("?")

def _enable_keepalive(sock: socket.socket) -> None:
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
    # Linux names; macOS only has TCP_KEEPALIVE for the idle time.
    opts = (("TCP_KEEPIDLE", C.KEEPALIVE_IDLE_S),
            ("TCP_KEEPALIVE", C.KEEPALIVE_IDLE_S),
            ("TCP_KEEPINTVL", C.KEEPALIVE_INTERVAL_S),
            ("TCP_KEEPCNT", C.KEEPALIVE_PROBES))
    for name, value in opts:
        opt = getattr(socket, name, None)
        if opt is None:
            continue
        try:
            sock.setsockopt(socket.IPPROTO_TCP, opt, value)
        except OSError:
            # Option exists but the stack refuses it; plain keepalive still applies.
            continue

def _require_sock(session: Session) -> socket.socket:
    if session.sock is None:
        raise OSError(f"session to {session.address} is closed")
    return session.sock

# ---------- Connection manager ---------- #
def connect(host: str, port: int,
            connect_timeout: float = C.CONNECT_TIMEOUT_S,
            keepalive: bool = True) -> Session:
    try:
        sock = socket.create_connection((host, port), timeout=connect_timeout)
    except OSError as e:
        raise ConnectionError(f"cannot connect to {host}:{port}: {e}") from e
    if keepalive:
        try:
            _enable_keepalive(sock)
        except OSError:
            sock.close()
            raise
    return Session(host, port, sock)

def send(session: Session, command: str) -> None:
    sock = _require_sock(session)
    line = command if command.endswith("\n") else command + "\n"
    sock.sendall(line.encode())

def maybe_receive(session: Session, command: str,
                  timeout: float = C.TIMEOUT_S) -> Optional[bytes]:
    """Read the reply to `command` if it is a query, else return None.

    Reads until the reply ends with the newline terminator or `timeout`
    seconds pass. Whatever arrived in the window is returned verbatim;
    nothing at all raises TimeoutError.
    """
    if not is_query(command):
        return None
    sock = _require_sock(session)
    prev = sock.gettimeout()
    deadline = time.monotonic() + timeout
    data = bytearray()
    try:
        while not data.endswith(C.TERMINATOR):
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            sock.settimeout(remaining)
            try:
                chunk = sock.recv(C.RECV_CHUNK)
            except socket.timeout:
                break
            if not chunk:
                if data:
                    break
                raise ConnectionError(f"{session.address} closed the connection")
            data += chunk
    finally:
        sock.settimeout(prev)
    if not data:
        raise TimeoutError(f"no response to {command.strip()!r} within {timeout:g}s")
    return bytes(data)

def peer_closed(session: Session) -> bool:
    """Zero-timeout check for an orderly close (or reset) from the instrument."""
    if session.sock is None:
        return True
    sock = session.sock
    try:
        readable, _, _ = select.select([sock], [], [], 0)
    except (OSError, ValueError):
        return True
    if not readable:
        return False
    # Pending bytes mean the peer is alive; an empty peek means EOF.
    prev = sock.gettimeout()
    sock.setblocking(False)
    try:
        return sock.recv(1, socket.MSG_PEEK) == b""
    except BlockingIOError:
        return False
    except OSError:
        return True
    finally:
        sock.settimeout(prev)

def close(session: Session) -> None:
    sock, session.sock = session.sock, None
    if sock is None:
        return
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError:
        pass
    try:
        sock.close()
    except OSError:
        pass

import sys
from typing import BinaryIO, List, NamedTuple, Optional
from . import config as C
from . import tcp_client as T
from . import utils as U
from .tcp_client import Session

class LineFailure(NamedTuple):
    lineno: int
    command: str
    error: Exception

class ConnectionLost(ConnectionError):
    pass

def _report(source, lineno: int, msg: str, level: str = "err") -> None:
    where = "" if source.keeps_history else f"line {lineno}: "
    U.print_err(f"[{level}] {where}{msg}")

def _write_response(out: BinaryIO, response: bytes) -> None:
    out.write(response)
    if not response.endswith(b"\n"):
        out.write(b"\n")
    out.flush()

def run(session: Session, source, out: Optional[BinaryIO] = None,
        timeout: float = C.TIMEOUT_S) -> List[LineFailure]:
    """Feed commands from `source` to the instrument until input ends.

    Per-line send/receive errors are reported and collected; the loop moves
    on to the next line. Raises ConnectionLost if the instrument hangs up.
    """
    if out is None:
        out = sys.stdout.buffer
    failures: List[LineFailure] = []

    while True:
        if T.peer_closed(session):
            raise ConnectionLost(f"{session.address} closed the connection")

        line = source.read()
        if line is None:
            break
        line = line.strip()
        if not line:
            continue
        if source.keeps_history and line.lower() in C.QUIT_WORDS:
            break

        lineno = source.lineno
        if source.keeps_history:
            session.history.append(line)
            source.remember(line)

        try:
            T.send(session, line)
        except OSError as e:
            _report(source, lineno, f"send {line!r} failed: {e}")
            failures.append(LineFailure(lineno, line, e))
            continue

        try:
            response = T.maybe_receive(session, line, timeout=timeout)
        except TimeoutError as e:
            # No reply is not fatal; the instrument may simply not answer.
            _report(source, lineno, str(e), level="warn")
            continue
        except OSError as e:
            _report(source, lineno, f"read after {line!r} failed: {e}")
            failures.append(LineFailure(lineno, line, e))
            continue

        if response is not None:
            _write_response(out, response)

    return failures

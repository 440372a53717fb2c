# --- run as package module and as a script ---
if __name__ == "__main__" and __package__ is None:
    import os, sys
    sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))
    __package__ = "scpi"
# ------------------------------------------------------------

import argparse
import sys
from typing import List, Optional

from scpi import __version__
from scpi import config as C
from scpi import session as S
from scpi import tcp_client as T
from scpi import utils as U

def positive_float(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {text!r}")
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0: {text!r}")
    return value

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="scpi",
        description="A lightweight interactive SCPI client that handles basic "
                    "commands and queries. Also accepts piped input or input "
                    "redirected from a file (one command per line).",
    )
    ap.add_argument("host", help="The host to connect to.")
    ap.add_argument("port", nargs="?", type=int, default=C.PORT,
                    help=f"The port to use (default {C.PORT}).")
    ap.add_argument("-t", "--timeout", type=positive_float, default=C.TIMEOUT_S,
                    help="Seconds to wait for a query response.")
    ap.add_argument("-c", "--command",
                    help="A command/query to run and immediately exit.")
    ap.add_argument("-f", "--file", type=argparse.FileType("r"),
                    help="Replay commands from a file, one per line.")
    ap.add_argument("--no-color", dest="color", action="store_false",
                    default=C.COLOR, help="Plain prompt.")
    ap.add_argument("--version", action="version",
                    version=f"%(prog)s {__version__}")
    return ap

def pick_source(args, history: List[str], stdin=None):
    stdin = sys.stdin if stdin is None else stdin
    if args.command is not None:
        return U.LineInput.from_text(args.command)
    if args.file is not None:
        return U.LineInput(args.file)
    if not stdin.isatty():
        return U.LineInput(stdin)
    prompt = U.color_prompt(args.host, C.PROMPT_SUFFIX, args.color)
    return U.TerminalInput(prompt, history)

def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return _main(args)
    finally:
        if args.file is not None:
            args.file.close()

def _main(args) -> int:
    interactive = args.command is None and args.file is None and sys.stdin.isatty()

    if interactive:
        print(f"[TCP] Connecting to {args.host}:{args.port} ...", file=sys.stderr)
    try:
        session = T.connect(args.host, args.port)
    except ConnectionError as e:
        U.print_err(f"[err] {e}")
        return 1

    with session:
        source = pick_source(args, session.history)
        try:
            failures = S.run(session, source, timeout=args.timeout)
        except S.ConnectionLost:
            U.print_err("\nConnection lost.")
            return 1

    if interactive:
        U.print_err("[info] Bye.")
        return 0
    if failures:
        U.print_err(f"[err] {len(failures)} line(s) failed: "
                    + ", ".join(str(f.lineno) for f in failures))
        return 1
    return 0

def run() -> None:
    try:
        code = main()
    except KeyboardInterrupt:
        print("\n[info] Session interrupted by user.", file=sys.stderr)
        code = 130
    sys.exit(code)

if __name__ == "__main__":
    run()

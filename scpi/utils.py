import sys
from typing import Iterable, List, Optional

try:
    import readline
except ImportError:  # Windows: plain input(), no recall
    readline = None

def color_prompt(host: str, suffix: str = "> ", enabled: bool = True) -> str:
    if enabled and sys.stdout.isatty():
        # \001/\002 keep readline's cursor math right around escape codes.
        return f"\001\033[32m\002{host}\001\033[0m\002{suffix}"
    return f"{host}{suffix}"

def print_err(msg: str) -> None:
    print(msg, file=sys.stderr, flush=True)

# ----- input providers -----
class TerminalInput:
    """Prompted input with line editing and up/down recall.

    Recall is seeded from, and kept in step with, the history list handed in
    by the session, so nothing is shared between sessions.
    """
    keeps_history = True

    def __init__(self, prompt: str, history: Optional[List[str]] = None):
        self.prompt = prompt
        self.lineno = 0
        if readline is not None:
            readline.set_auto_history(False)
            readline.clear_history()
            for entry in history or ():
                readline.add_history(entry)

    def read(self) -> Optional[str]:
        try:
            line = input(self.prompt)
        except (EOFError, KeyboardInterrupt):
            print()
            return None
        self.lineno += 1
        return line

    def remember(self, line: str) -> None:
        if readline is not None:
            readline.add_history(line)

class LineInput:
    """Sequential lines from a file, a redirected stream or a command string."""
    keeps_history = False

    def __init__(self, lines: Iterable[str]):
        self._lines = iter(lines)
        self.lineno = 0

    @classmethod
    def from_text(cls, text: str) -> "LineInput":
        return cls(text.splitlines())

    def read(self) -> Optional[str]:
        line = next(self._lines, None)
        if line is None:
            return None
        self.lineno += 1
        return line.rstrip("\r\n")

    def remember(self, line: str) -> None:
        pass

import os

def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip() not in ("0", "false", "False", "no", "")

# ---------- Config ----------
PORT = int(os.getenv("SCPI_PORT", "9001"))
TIMEOUT_S = float(os.getenv("SCPI_TIMEOUT_S", "5"))
CONNECT_TIMEOUT_S = float(os.getenv("SCPI_CONNECT_TIMEOUT_S", "5"))

# Socket reads
RECV_CHUNK = int(os.getenv("SCPI_RECV_CHUNK", "4096"))
TERMINATOR = b"\n"

# TCP keepalive (applied only where the platform has the option).
KEEPALIVE_IDLE_S = int(os.getenv("SCPI_KEEPALIVE_IDLE_S", "4"))
KEEPALIVE_INTERVAL_S = int(os.getenv("SCPI_KEEPALIVE_INTERVAL_S", "1"))
KEEPALIVE_PROBES = int(os.getenv("SCPI_KEEPALIVE_PROBES", "4"))

# Console
PROMPT_SUFFIX = os.getenv("SCPI_PROMPT_SUFFIX", "> ")
COLOR = _flag("SCPI_COLOR", "1")
QUIT_WORDS = ("/q", "/quit", "exit", "quit")

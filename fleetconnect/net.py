"""Local port probing helpers."""

from __future__ import annotations

import random
import socket
from collections.abc import Callable

from .errors import NoFreePortFound

EPHEMERAL_PORT_RANGE = range(32768, 61000)
MAX_PORT_ATTEMPTS = 10
PROBE_TIMEOUT = 0.1


def is_port_free(port: int, timeout: float = PROBE_TIMEOUT) -> bool:
    """Check whether nothing is listening on 127.0.0.1:*port*.

    Only a refused connection counts as free. A timeout or an accepted
    connection both mean the port is taken.
    """
    try:
        with socket.create_connection(("127.0.0.1", port), timeout=timeout):
            return False
    except ConnectionRefusedError:
        return True
    except OSError:
        return False


def find_free_port(
    rng: random.Random | None = None,
    probe: Callable[[int], bool] = is_port_free,
) -> int:
    """Pick a random ephemeral port that appears to be unused.

    This is a heuristic: another process may bind the port between the
    probe and its use.
    """
    rng = rng or random.Random()
    tried: list[int] = []
    for _ in range(MAX_PORT_ATTEMPTS):
        port = rng.choice(EPHEMERAL_PORT_RANGE)
        if probe(port):
            return port
        tried.append(port)
    raise NoFreePortFound(tried)

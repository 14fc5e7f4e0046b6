"""Remote command execution and SSH utilities."""

from .fabricssh import run_remote_command
from .ssh import (
    build_jump_args,
    build_query_args,
    exec_outbound,
    format_remote_path,
    ssh_o_options,
)

__all__ = [
    "build_jump_args",
    "build_query_args",
    "exec_outbound",
    "format_remote_path",
    "run_remote_command",
    "ssh_o_options",
]

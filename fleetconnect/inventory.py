"""Fleet inventory: node classes, machines and applications.

Node classes and their machines are listed live by running the node
listing command on the jumpbox of an (environment, hosting) pair. The
applications each node class runs come from the puppet hieradata checked
out locally. Results are memoized on the client, which lives for a
single invocation.
"""

from __future__ import annotations

import shlex
import subprocess
from collections.abc import Callable
from pathlib import Path
from typing import Any

import paramiko  # type: ignore[import-untyped]
import yaml

from .config import Config, SshConnectionOptions, SshCredentials
from .errors import InventoryUnavailable, RemoteQueryFailed
from .output import Reporter
from .remote import build_query_args, run_remote_command

RemoteRunner = Callable[
    [str, str, SshCredentials, SshConnectionOptions],
    subprocess.CompletedProcess[str],
]

GroupingInventory = dict[str, frozenset[str]]


def _split_lines(output: str) -> list[str]:
    return sorted(line.strip() for line in output.splitlines() if line.strip())


def _read_yaml(path: Path) -> Any:
    try:
        with open(path) as f:
            return yaml.safe_load(f)
    except OSError as e:
        raise InventoryUnavailable(str(path), e.strerror or str(e)) from e
    except yaml.YAMLError as e:
        raise InventoryUnavailable(str(path), "invalid YAML") from e


def parse_node_class_data(data: Any, source: str) -> GroupingInventory:
    """Convert hieradata ``node_class`` data into node class → apps."""
    if not isinstance(data, dict):
        raise InventoryUnavailable(source, "node_class is not a mapping")
    inventory: GroupingInventory = {}
    for node_class, node_data in data.items():
        apps = (node_data or {}).get("apps") or []
        if not isinstance(apps, list):
            raise InventoryUnavailable(
                source, f"apps for {node_class} is not a list"
            )
        inventory[str(node_class)] = frozenset(str(app) for app in apps)
    return inventory


class InventoryClient:
    """Query the fleet inventory, deduplicating identical queries."""

    def __init__(
        self,
        config: Config,
        credentials: SshCredentials,
        reporter: Reporter,
        runner: RemoteRunner = run_remote_command,
    ) -> None:
        self._config = config
        self._registry = config.fleet
        self._credentials = credentials
        self._reporter = reporter
        self._runner = runner
        self._query_cache: dict[tuple[str, str, str], list[str]] = {}
        self._grouping_cache: dict[tuple[str, str], GroupingInventory] = {}

    def _query(
        self, environment: str, hosting: str, command: str
    ) -> list[str]:
        key = (environment, hosting, command)
        if key in self._query_cache:
            return self._query_cache[key]

        jumpbox = self._registry.jumpbox(environment, hosting)
        opts = self._config.ssh_options
        display = shlex.join(
            build_query_args(jumpbox, command, self._credentials, opts)
        )
        self._reporter.debug(f"running command: {display}")
        try:
            result = self._runner(jumpbox, command, self._credentials, opts)
        except (paramiko.SSHException, OSError) as e:
            raise RemoteQueryFailed(
                display, self._credentials.username, str(e)
            ) from e
        if result.returncode != 0:
            detail = (result.stderr or "").strip() or None
            raise RemoteQueryFailed(
                display, self._credentials.username, detail
            )

        lines = _split_lines(result.stdout or "")
        self._query_cache[key] = lines
        return lines

    def list_groupings(self, environment: str, hosting: str) -> list[str]:
        """All node classes known in (environment, hosting), sorted."""
        self._reporter.debug(f"looking up classes in {hosting}/{environment}")
        command = f"{self._registry.node_list_command} --classes"
        classes = self._query(environment, hosting, command)
        self._reporter.debug(f"classes: {', '.join(classes)}")
        return classes

    def list_domains(
        self, environment: str, hosting: str, grouping: str
    ) -> list[str]:
        """Live machines of *grouping*, sorted lexicographically."""
        command = (
            f"{self._registry.node_list_command} -c {shlex.quote(grouping)}"
        )
        return self._query(environment, hosting, command)

    def hieradata_directory(self, hosting: str) -> Path:
        root = Path(self._config.hieradata_root).expanduser()
        subdir = self._registry.hieradata_dirs.get(hosting, "hieradata")
        return root / subdir

    def grouping_inventory(
        self, environment: str, hosting: str
    ) -> GroupingInventory:
        """Node class → applications, from the local puppet hieradata.

        The environment file wins; ``common.yaml`` is used when it does not
        define ``node_class``.
        """
        key = (environment, hosting)
        if key in self._grouping_cache:
            return self._grouping_cache[key]

        self._reporter.debug(
            f"fetching node class data for {hosting} {environment}"
        )
        directory = self.hieradata_directory(hosting)
        env_file = directory / f"{environment}.yaml"
        self._reporter.debug(f"reading {env_file}")
        data = _read_yaml(env_file)
        source = env_file
        if not isinstance(data, dict) or not data.get("node_class"):
            source = directory / "common.yaml"
            self._reporter.debug(f"reading {source}")
            data = _read_yaml(source)
        if not isinstance(data, dict):
            raise InventoryUnavailable(str(source), "not a YAML mapping")

        inventory = parse_node_class_data(data.get("node_class"), str(source))
        self._grouping_cache[key] = inventory
        return inventory

    def application_names(self, environment: str, hosting: str) -> list[str]:
        inventory = self.grouping_inventory(environment, hosting)
        return sorted({app for apps in inventory.values() for app in apps})

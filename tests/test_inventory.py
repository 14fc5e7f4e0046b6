"""Tests for fleetconnect.inventory."""

from __future__ import annotations

from pathlib import Path

import paramiko  # type: ignore[import-untyped]
import pytest

from fleetconnect.errors import InventoryUnavailable, RemoteQueryFailed
from fleetconnect.inventory import parse_node_class_data

from .conftest import STAGING_AWS_JUMPBOX, STAGING_CARRENZA_JUMPBOX


class TestParseNodeClassData:
    def test_apps_per_class(self) -> None:
        inventory = parse_node_class_data(
            {
                "backend": {"apps": ["publishing-api", "signon"]},
                "cache": None,
                "db_admin": {"apps": None},
            },
            "staging.yaml",
        )
        assert inventory == {
            "backend": frozenset({"publishing-api", "signon"}),
            "cache": frozenset(),
            "db_admin": frozenset(),
        }

    def test_not_a_mapping(self) -> None:
        with pytest.raises(InventoryUnavailable, match="not a mapping"):
            parse_node_class_data(["backend"], "staging.yaml")

    def test_apps_not_a_list(self) -> None:
        with pytest.raises(InventoryUnavailable, match="not a list"):
            parse_node_class_data(
                {"backend": {"apps": "signon"}}, "staging.yaml"
            )


class TestListGroupings:
    def test_sorted_and_stripped(self, make_ctx, fake_runner) -> None:
        fake_runner.add(
            STAGING_AWS_JUMPBOX,
            "govuk_node_list --classes",
            ["frontend", "  backend  ", "", "cache"],
        )
        ctx = make_ctx()
        assert ctx.inventory.list_groupings("staging", "aws") == [
            "backend",
            "cache",
            "frontend",
        ]

    def test_memoized(self, make_ctx, fake_runner) -> None:
        fake_runner.add(
            STAGING_AWS_JUMPBOX, "govuk_node_list --classes", ["backend"]
        )
        ctx = make_ctx()
        ctx.inventory.list_groupings("staging", "aws")
        ctx.inventory.list_groupings("staging", "aws")
        assert fake_runner.calls == [
            (STAGING_AWS_JUMPBOX, "govuk_node_list --classes")
        ]

    def test_queries_the_providers_jumpbox(
        self, make_ctx, fake_runner
    ) -> None:
        ctx = make_ctx()
        ctx.inventory.list_groupings("staging", "carrenza")
        assert fake_runner.calls == [
            (STAGING_CARRENZA_JUMPBOX, "govuk_node_list --classes")
        ]

    def test_failure_names_the_username(
        self, make_ctx, fake_runner
    ) -> None:
        fake_runner.add(
            STAGING_AWS_JUMPBOX,
            "govuk_node_list --classes",
            [],
            returncode=255,
        )
        ctx = make_ctx()
        with pytest.raises(RemoteQueryFailed) as excinfo:
            ctx.inventory.list_groupings("staging", "aws")
        assert excinfo.value.username == "alice"
        assert "alice@jumpbox.staging.govuk.digital" in excinfo.value.command
        assert "permission denied" in excinfo.value.message

    def test_connection_error(self, config, reporter) -> None:
        from fleetconnect.context import ResolutionContext

        def runner(host, command, credentials, opts):
            raise paramiko.SSHException("no route")

        ctx = ResolutionContext.create(
            config, "staging", reporter, runner=runner, environ={}
        )
        with pytest.raises(RemoteQueryFailed, match="no route"):
            ctx.inventory.list_groupings("staging", "aws")


class TestListDomains:
    def test_sorted(self, make_ctx, fake_runner) -> None:
        fake_runner.add(
            STAGING_AWS_JUMPBOX,
            "govuk_node_list -c backend",
            ["ip-10-1-2-3.eu-west-1.compute.internal", "ip-10-1-0-1.internal"],
        )
        ctx = make_ctx()
        assert ctx.inventory.list_domains("staging", "aws", "backend") == [
            "ip-10-1-0-1.internal",
            "ip-10-1-2-3.eu-west-1.compute.internal",
        ]

    def test_grouping_is_quoted(self, make_ctx, fake_runner) -> None:
        ctx = make_ctx()
        ctx.inventory.list_domains("staging", "aws", "back end")
        assert fake_runner.calls == [
            (STAGING_AWS_JUMPBOX, "govuk_node_list -c 'back end'")
        ]


class TestGroupingInventory:
    def test_environment_file(self, make_ctx) -> None:
        ctx = make_ctx()
        inventory = ctx.inventory.grouping_inventory("staging", "aws")
        assert inventory["whitehall_backend"] == frozenset({"whitehall"})
        assert inventory["backend"] == frozenset({"publishing-api", "signon"})

    def test_falls_back_to_common(self, make_ctx) -> None:
        ctx = make_ctx()
        inventory = ctx.inventory.grouping_inventory("staging", "carrenza")
        assert set(inventory) == {"backend", "draft_backend"}

    def test_missing_checkout(
        self, make_ctx, hieradata_root: Path
    ) -> None:
        ctx = make_ctx(environment="production")
        with pytest.raises(InventoryUnavailable) as excinfo:
            ctx.inventory.grouping_inventory("production", "aws")
        assert str(hieradata_root / "hieradata_aws") in excinfo.value.message

    def test_invalid_yaml(self, make_ctx, hieradata_root: Path) -> None:
        (hieradata_root / "hieradata_aws" / "staging.yaml").write_text(
            "node_class: [unclosed\n"
        )
        ctx = make_ctx()
        with pytest.raises(InventoryUnavailable, match="invalid YAML"):
            ctx.inventory.grouping_inventory("staging", "aws")

    def test_application_names(self, make_ctx) -> None:
        ctx = make_ctx()
        assert ctx.inventory.application_names("staging", "aws") == [
            "collections",
            "publishing-api",
            "signon",
            "whitehall",
        ]

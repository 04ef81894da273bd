"""Tests for spin_info.render.metadata."""

from __future__ import annotations

import pytest

from spin_info.errors import MalformedManifestError
from spin_info.models import LockedTrigger, Variable
from spin_info.render.metadata import (
    render_host_requirements,
    render_metadata,
    render_trigger,
    render_variables,
)


def test_render_metadata_identity_then_authors() -> None:
    lines = render_metadata({"name": "todo-app", "version": "1.2.0", "authors": ["A", "B"]})

    assert lines == [
        "Application: todo-app@1.2.0",
        "  Author: A",
        "  Author: B",
    ]


def test_render_metadata_includes_description_and_extra_keys_in_order() -> None:
    metadata = {
        "name": "todo-app",
        "trigger": {"type": "http", "base": "/"},
        "version": "1.2.0",
        "description": "Tracks things to do",
        "origin": "file:///work/spin.toml",
    }

    lines = render_metadata(metadata)

    assert lines == [
        "Application: todo-app@1.2.0",
        "  Description: Tracks things to do",
        '  trigger: {"type": "http", "base": "/"}',
        "  origin: file:///work/spin.toml",
    ]


def test_render_metadata_requires_version() -> None:
    with pytest.raises(MalformedManifestError) as excinfo:
        render_metadata({"name": "todo-app"})

    assert "'version'" in str(excinfo.value)


def test_render_metadata_requires_name() -> None:
    with pytest.raises(MalformedManifestError) as excinfo:
        render_metadata({"version": "1.2.0"})

    assert "'name'" in str(excinfo.value)


@pytest.mark.parametrize("authors", ["A", ["A", 3], {"A": "B"}])
def test_render_metadata_rejects_undecodable_authors(authors: object) -> None:
    with pytest.raises(MalformedManifestError):
        render_metadata({"name": "todo-app", "version": "1.2.0", "authors": authors})


def test_render_metadata_is_idempotent() -> None:
    metadata = {
        "name": "todo-app",
        "version": "1.2.0",
        "authors": ["A"],
        "labels": {"tier": "gold", "zone": "ü"},
    }

    assert render_metadata(metadata) == render_metadata(metadata)


def test_render_trigger_dumps_config_without_interpretation() -> None:
    trigger = LockedTrigger(
        id="trigger-api",
        trigger_type="http",
        trigger_config={"route": "/api/...", "component": "api"},
    )

    assert render_trigger(trigger) == (
        'Trigger: http (id: trigger-api) {"route": "/api/...", "component": "api"}'
    )


def test_render_variables_skips_empty_set() -> None:
    assert render_variables({}) == []


def test_render_variables_keeps_declaration_order_and_flags() -> None:
    variables = {
        "zeta": Variable(default="z"),
        "api_key": Variable(secret=True),
    }

    lines = render_variables(variables)

    assert lines[0] == "Variables:"
    assert lines[1].startswith("  zeta: Variable(")
    assert "default='z'" in lines[1]
    assert lines[2].startswith("  api_key: Variable(")
    assert "secret=True" in lines[2]


def test_render_host_requirements_single_line() -> None:
    assert render_host_requirements({}) == []
    assert render_host_requirements({"local_service_chaining": "required"}) == [
        'Host requirements: {"local_service_chaining": "required"}'
    ]

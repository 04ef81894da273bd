"""Tests for spin_info.oci.reference."""

from __future__ import annotations

import pytest

from spin_info.oci.reference import (
    InvalidReferenceError,
    is_probably_oci_reference,
    parse_reference,
)

DIGEST = "sha256:" + "0123456789abcdef" * 4


def test_parse_reference_with_tag() -> None:
    reference = parse_reference("ghcr.io/acme/todo:1.2.0")

    assert reference.registry == "ghcr.io"
    assert reference.repository == "acme/todo"
    assert reference.tag == "1.2.0"
    assert reference.digest is None
    assert reference.target == "1.2.0"
    assert str(reference) == "ghcr.io/acme/todo:1.2.0"


def test_parse_reference_with_port_defaults_tag() -> None:
    reference = parse_reference("localhost:5000/todo")

    assert reference.registry == "localhost:5000"
    assert reference.repository == "todo"
    assert reference.tag == "latest"


def test_parse_reference_with_digest() -> None:
    reference = parse_reference(f"ghcr.io/acme/todo@{DIGEST}")

    assert reference.tag is None
    assert reference.digest == DIGEST
    assert reference.target == DIGEST


def test_parse_reference_defaults_to_docker_hub() -> None:
    reference = parse_reference("todo")

    assert reference.registry == "docker.io"
    assert reference.repository == "library/todo"
    assert reference.api_host == "registry-1.docker.io"
    assert reference.explicit_registry is False


@pytest.mark.parametrize("text", ["", "ghcr.io/Acme/Todo", "ghcr.io/acme/todo@sha256:xyz", " ghcr.io/a/b"])
def test_parse_reference_rejects_invalid(text: str) -> None:
    with pytest.raises(InvalidReferenceError):
        parse_reference(text)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("ghcr.io/acme/todo:1.2.0", True),
        ("localhost:5000/todo", True),
        ("docker.io/library/todo", True),
        ("foo/spin.toml", False),
        ("spin.toml", False),
        ("./todo", False),
        ("/abs/path/spin.toml", False),
        ("todo", False),
    ],
)
def test_is_probably_oci_reference(text: str, expected: bool) -> None:
    assert is_probably_oci_reference(text) is expected

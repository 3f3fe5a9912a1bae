"""Tests for the manifest library."""

import pytest

from chart_preview.chart import Hook
from chart_preview.exceptions import MalformedSourceHeader
from chart_preview.manifest import (
    SplitDocument,
    assemble_manifest,
    filter_hooks,
    parse_source_path,
    source_path,
    split_manifests,
)

BLOB = """---
# Source: mychart/templates/service.yaml
apiVersion: v1
kind: Service
metadata:
  name: svc
---
# Source: mychart/templates/list.yaml
apiVersion: v1
kind: ConfigMap
metadata:
  name: first
---
# Source: mychart/templates/list.yaml
apiVersion: v1
kind: ConfigMap
metadata:
  name: second
---
# Source: mychart/templates/hooks/job.yaml
apiVersion: batch/v1
kind: Job
metadata:
  name: job
  annotations:
    helm.sh/hook: pre-install
"""

TEST_HOOK = Hook(
    name="test",
    path="mychart/templates/tests/test.yaml",
    manifest="kind: Pod",
    events=["test"],
)
INSTALL_HOOK = Hook(
    name="install",
    path="mychart/templates/hooks/install.yaml",
    manifest="kind: Job",
    events=["pre-install", "post-install"],
)
MIXED_HOOK = Hook(
    name="mixed",
    path="mychart/templates/hooks/mixed.yaml",
    manifest="kind: Pod",
    events=["post-upgrade", "test"],
)
HOOKS = [TEST_HOOK, INSTALL_HOOK, MIXED_HOOK]


def test_filter_hooks_skip_tests() -> None:
    """Test that hooks with a test event are removed."""
    assert filter_hooks(HOOKS, skip_tests=True) == [INSTALL_HOOK]


def test_filter_hooks_idempotent() -> None:
    """Test filtering hooks twice gives the same result as once."""
    once = filter_hooks(HOOKS, skip_tests=True)
    assert filter_hooks(once, skip_tests=True) == once


def test_filter_hooks_keep_tests() -> None:
    """Test all hooks are returned unchanged without skipping tests."""
    assert filter_hooks(HOOKS, skip_tests=False) == HOOKS


def test_assemble_manifest() -> None:
    """Test the manifest body is combined with hooks."""
    body = "\n\n---\n# Source: mychart/templates/cm.yaml\nkind: ConfigMap\n\n"
    assert assemble_manifest(body, [INSTALL_HOOK, TEST_HOOK]) == (
        "---\n# Source: mychart/templates/cm.yaml\nkind: ConfigMap\n"
        "---\n# Source: mychart/templates/hooks/install.yaml\nkind: Job\n"
        "---\n# Source: mychart/templates/tests/test.yaml\nkind: Pod\n"
    )


def test_assemble_manifest_disable_hooks() -> None:
    """Test hooks are omitted when disabled."""
    body = "---\n# Source: mychart/templates/cm.yaml\nkind: ConfigMap"
    assert assemble_manifest(body, HOOKS, disable_hooks=True) == f"{body}\n"


def test_assemble_manifest_empty_body() -> None:
    """Test a release with only hooks."""
    assert assemble_manifest("  \n", [INSTALL_HOOK]) == (
        "---\n# Source: mychart/templates/hooks/install.yaml\nkind: Job\n"
    )
    assert assemble_manifest("", []) == ""


def test_split_manifests() -> None:
    """Test splitting a blob into documents."""
    docs = split_manifests(BLOB)
    assert list(docs) == ["manifest-0", "manifest-1", "manifest-2", "manifest-3"]
    assert [doc.path for doc in docs.values()] == [
        "templates/service.yaml",
        "templates/list.yaml",
        "templates/list.yaml",
        "templates/hooks/job.yaml",
    ]
    assert [doc.kind for doc in docs.values()] == [
        "Service",
        "ConfigMap",
        "ConfigMap",
        "Job",
    ]
    assert [doc.is_hook for doc in docs.values()] == [False, False, False, True]


def test_split_round_trip() -> None:
    """Test the documents reproduce the original blob."""
    docs = split_manifests(BLOB)
    assert "".join(doc.text for doc in docs.values()) == BLOB


def test_split_duplicate_paths() -> None:
    """Test documents from the same template don't overwrite each other."""
    docs = split_manifests(BLOB)
    names = [
        doc.doc["metadata"]["name"]
        for doc in docs.values()
        if doc.path == "templates/list.yaml" and doc.doc is not None
    ]
    assert names == ["first", "second"]


def test_split_empty() -> None:
    """Test an empty blob has no documents."""
    assert split_manifests("") == {}


def test_split_without_header() -> None:
    """Test a document without a source header is kept without a path."""
    blob = "apiVersion: v1\nkind: Namespace\nmetadata:\n  name: example\n"
    docs = split_manifests(blob)
    assert len(docs) == 1
    doc = docs["manifest-0"]
    assert doc.path is None
    assert doc.header is None
    assert doc.kind == "Namespace"
    assert doc.text == blob


def test_split_preamble() -> None:
    """Test text before the first header becomes its own document."""
    blob = (
        "kind: Namespace\n"
        "---\n"
        "# Source: mychart/templates/cm.yaml\n"
        "kind: ConfigMap\n"
    )
    docs = list(split_manifests(blob).values())
    assert [doc.path for doc in docs] == [None, "templates/cm.yaml"]
    assert docs[0].text == "kind: Namespace\n"
    assert "".join(doc.text for doc in docs) == blob


def test_split_separator_without_header() -> None:
    """Test a separator not followed by a header does not start a document."""
    blob = (
        "---\n"
        "# Source: mychart/templates/multi.yaml\n"
        "kind: ConfigMap\n"
        "---\n"
        "kind: Secret\n"
        "---\n"
    )
    docs = split_manifests(blob)
    assert len(docs) == 1
    assert docs["manifest-0"].text == blob
    assert docs["manifest-0"].kind == "ConfigMap"


def test_split_malformed_header() -> None:
    """Test a header without a chart name prefix has no path."""
    blob = (
        "---\n"
        "# Source: service.yaml\n"
        "kind: Service\n"
        "---\n"
        "# Source: mychart/templates/cm.yaml\n"
        "kind: ConfigMap\n"
    )
    docs = list(split_manifests(blob).values())
    assert [doc.path for doc in docs] == [None, "templates/cm.yaml"]
    assert docs[0].header == "# Source: service.yaml"
    assert docs[0].body == "kind: Service"


def test_document_content() -> None:
    """Test the parts of a split document."""
    doc = SplitDocument(
        key="manifest-0",
        path="templates/cm.yaml",
        text="---\n# Source: mychart/templates/cm.yaml\nkind: ConfigMap\n\n",
    )
    assert doc.content == "# Source: mychart/templates/cm.yaml\nkind: ConfigMap"
    assert doc.header == "# Source: mychart/templates/cm.yaml"
    assert doc.body == "kind: ConfigMap"


def test_document_invalid_yaml() -> None:
    """Test a document that can't be parsed has no kind."""
    doc = SplitDocument(
        key="manifest-0",
        path="templates/bad.yaml",
        text="---\n# Source: mychart/templates/bad.yaml\nkind: [unclosed\n",
    )
    assert doc.doc is None
    assert doc.kind is None
    assert not doc.is_hook


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        ("# Source: mychart/templates/service.yaml", "templates/service.yaml"),
        ("# Source: mychart/templates/sub/dir/cm.yaml\n", "templates/sub/dir/cm.yaml"),
        ("# Source: mychart/charts/db/templates/svc.yaml", "charts/db/templates/svc.yaml"),
    ],
)
def test_parse_source_path(header: str, expected: str) -> None:
    """Test the chart name is removed from the source path."""
    assert parse_source_path(header) == expected


@pytest.mark.parametrize(
    "header",
    [
        "# Source: mychart",
        "# Source: /templates/service.yaml",
        "# Source: mychart/",
        "# Sauce: mychart/templates/service.yaml",
    ],
)
def test_parse_source_path_malformed(header: str) -> None:
    """Test headers that don't name a template in a chart."""
    with pytest.raises(MalformedSourceHeader):
        parse_source_path(header)
    assert source_path(header) is None


def test_source_path_missing() -> None:
    """Test a document without a header."""
    assert source_path(None) is None

"""Behaviour tests for navigation output and incremental rebuilds.

The scenarios live in ``features/navigation.feature``. Each one writes a
small versioned content tree into ``tmp_path``, runs the build orchestrator
and asserts on the resulting manifest and build report.

Usage:
    Run these behaviour tests with pytest, for example:

        pytest tests/bdd/test_navigation_scenarios.py -v
"""

from __future__ import annotations

import asyncio
import typing as typ
from pathlib import Path

import pytest
from pytest_bdd import given, parsers, scenarios, then, when

from docxes.build import BuildOrchestrator, BuildReport
from docxes.context import DocsContext

if typ.TYPE_CHECKING:
    from docxes.config import EngineConfig
    from docxes.models import NavItem

FEATURE_FILE = Path(__file__).resolve().parents[2] / "features" / "navigation.feature"
scenarios(FEATURE_FILE)


@pytest.fixture
def scenario_state() -> dict[str, object]:
    """Return a mutable dict used to share scenario state across BDD steps."""
    return {}


def _run_build(config: EngineConfig) -> BuildReport:
    return asyncio.run(BuildOrchestrator(DocsContext(config)).build())


def _navigation(scenario_state: dict[str, object], version: str) -> list[NavItem]:
    report: BuildReport = scenario_state["report"]  # type: ignore[assignment]
    return report.manifest.navigation[version]


@given(parsers.parse('a content root with versions "{first}" and "{second}"'))
def given_versions(content_root: Path, first: str, second: str) -> None:
    """Create empty version directories."""
    for version in (first, second):
        (content_root / version).mkdir()


@given(
    parsers.parse(
        '"{relative}" with title "{title}", order {order:d} and body "{body}"'
    )
)
def given_titled_document(
    content_root: Path,
    write_doc: typ.Callable[..., Path],
    relative: str,
    title: str,
    order: int,
    body: str,
) -> None:
    """Write a document with a title and order in its frontmatter."""
    write_doc(content_root, relative, f"{body}\n", title=title, order=order)


@given(parsers.parse('"{relative}" with an empty body'))
def given_empty_document(
    content_root: Path, write_doc: typ.Callable[..., Path], relative: str
) -> None:
    """Write a document without frontmatter or body text."""
    write_doc(content_root, relative, "")


@when("I build the documentation")
def when_build(engine_config: EngineConfig, scenario_state: dict[str, object]) -> None:
    """Run an incremental build and keep its report."""
    scenario_state["report"] = _run_build(engine_config)


@when(parsers.parse('I edit "{relative}" and build again'))
def when_edit_and_rebuild(
    content_root: Path,
    engine_config: EngineConfig,
    scenario_state: dict[str, object],
    relative: str,
) -> None:
    """Change one document's body and rebuild incrementally."""
    path = content_root / relative
    path.write_text(path.read_text(encoding="utf-8") + "\nEdited.\n", encoding="utf-8")
    scenario_state["first_report"] = scenario_state["report"]
    scenario_state["report"] = _run_build(engine_config)


@then(
    parsers.parse(
        'the "{version}" navigation has one clickable item "{title}" '
        'linking to "{href}" with order {order:d}'
    )
)
def then_single_clickable_item(
    scenario_state: dict[str, object], version: str, title: str, href: str, order: int
) -> None:
    """Verify the only navigation item and its link."""
    nav = _navigation(scenario_state, version)
    assert len(nav) == 1, f"expected a single navigation item, got {nav!r}"
    item = nav[0]
    assert (item.title, item.href, item.order) == (title, href, order), (
        f"unexpected navigation item {item!r}"
    )
    assert item.clickable, "expected the item to be clickable"


@then(parsers.parse('the "{version}" navigation has a "{title}" node without a link'))
def then_group_without_link(
    scenario_state: dict[str, object], version: str, title: str
) -> None:
    """Verify a grouping node is present but not clickable."""
    nav = {item.title: item for item in _navigation(scenario_state, version)}
    assert title in nav, f"expected a {title!r} node, got {sorted(nav)}"
    assert nav[title].href is None, "an empty landing page must not be linked"
    scenario_state["group"] = nav[title]


@then(parsers.parse('the "{title}" node has one child "{child}"'))
def then_group_has_child(
    scenario_state: dict[str, object], title: str, child: str
) -> None:
    """Verify the grouping node's single child."""
    group: NavItem = scenario_state["group"]  # type: ignore[assignment]
    assert group.title == title
    children = group.children or []
    assert [item.title for item in children] == [child], (
        f"expected one child {child!r}, got {children!r}"
    )
    assert children[0].href is not None, "the child document should be clickable"


@then(parsers.parse('exactly "{key}" is reprocessed'))
def then_only_key_reprocessed(scenario_state: dict[str, object], key: str) -> None:
    """Verify the second build reprocessed a single document."""
    report: BuildReport = scenario_state["report"]  # type: ignore[assignment]
    assert report.processed == [key], f"expected only {key!r}, got {report.processed}"


@then("every other document is skipped")
def then_others_skipped(scenario_state: dict[str, object]) -> None:
    """Verify every untouched document was reused from its artifact."""
    first: BuildReport = scenario_state["first_report"]  # type: ignore[assignment]
    report: BuildReport = scenario_state["report"]  # type: ignore[assignment]
    expected = sorted(set(first.processed) - set(report.processed))
    assert sorted(report.skipped) == expected, (
        f"expected {expected} to be skipped, got {sorted(report.skipped)}"
    )

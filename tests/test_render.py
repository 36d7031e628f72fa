from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from prerender.errors import ExecutionFailure, UnresolvedReference
from prerender.models import RenderRequest, RenderResult
from prerender.render import Renderer, render, render_by_name

BUNDLE_PATH = Path(__file__).parent / "fixtures" / "app.bundle.js"


@pytest.fixture()
def renderer() -> Renderer:
    return Renderer.from_path(BUNDLE_PATH)


def test_card_end_to_end(renderer: Renderer) -> None:
    results = renderer.render([{"name": "Card", "data": {"title": "Hi"}}])

    assert results == [RenderResult(name="Card", markup='<div><div class="title">Hi</div></div>', style=None)]


def test_single_request_returns_single_result(renderer: Renderer) -> None:
    result = renderer.render(RenderRequest(name="Card", data={"title": "Solo"}))

    assert isinstance(result, RenderResult)
    assert result.markup == '<div><div class="title">Solo</div></div>'


def test_list_rendered_before_comment_anchor(renderer: Renderer) -> None:
    result = renderer.render({"name": "NameList", "data": {"list": ["Franny", "Millie", "Minnie"]}})

    assert result.markup == (
        "<div><ul>"
        '<li data-index="0">Franny</li>'
        '<li data-index="1">Millie</li>'
        '<li data-index="2">Minnie</li>'
        "<!-- each list --></ul></div>"
    )
    soup = BeautifulSoup(result.markup, "html.parser")
    assert [li.get_text() for li in soup.find_all("li")] == ["Franny", "Millie", "Minnie"]


def test_style_fragments_concatenate_in_order(renderer: Renderer) -> None:
    result = renderer.render({"name": "Styled"})

    assert result.style == "a{color:red}b{color:blue}"
    assert result.markup == "<div><span></span></div>"


def test_fragment_comment_and_attributes(renderer: Renderer) -> None:
    result = renderer.render({"name": "Fragmented"})

    assert result.markup == '<div>hello<!-- note --><em title="x"></em></div>'


def test_repeated_component_renders_independently(renderer: Renderer) -> None:
    results = renderer.render(
        [
            {"name": "Greeting"},
            {"name": "Card", "data": {"title": "Between"}},
            {"name": "Greeting", "data": {"name": "Paul"}},
        ]
    )

    assert [result.name for result in results] == ["Greeting", "Card", "Greeting"]
    assert results[0].markup == "<div><p>Hello world!</p></div>"
    assert results[2].markup == "<div><p>Hello Paul!</p></div>"
    assert results[0].style == "p{color:red}"
    assert results[2].style == "p{color:red}"
    assert results[1].style is None


def test_render_by_name_keeps_last_duplicate(renderer: Renderer) -> None:
    results = renderer.render_by_name(
        [
            {"name": "Greeting"},
            {"name": "Greeting", "data": {"name": "Paul"}},
            {"name": "Card", "data": {"title": "Hi"}},
        ]
    )

    assert list(results) == ["Greeting", "Card"]
    assert results["Greeting"].markup == "<div><p>Hello Paul!</p></div>"
    assert results["Card"].markup == '<div><div class="title">Hi</div></div>'


def test_render_by_name_accepts_single_request(renderer: Renderer) -> None:
    results = renderer.render_by_name({"name": "Card", "data": {"title": "Hi"}})
    assert list(results) == ["Card"]


def test_query_selector_root_is_outside_targets(renderer: Renderer, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level("INFO", logger="prerender.sandbox")
    result = renderer.render({"name": "Mounted", "data": {"label": "first"}})

    assert result.markup == "<div>false</div>"
    assert "mounted first" in caplog.text


def test_unexported_component_fails(renderer: Renderer) -> None:
    with pytest.raises(UnresolvedReference) as excinfo:
        renderer.render([{"name": "Card", "data": {"title": "Hi"}}, {"name": "Missing"}])

    assert isinstance(excinfo.value, ExecutionFailure)
    assert excinfo.value.component_name == "Missing"
    assert excinfo.value.filename == str(BUNDLE_PATH)
    assert str(BUNDLE_PATH) in str(excinfo.value)


def test_throwing_component_fails_with_filename() -> None:
    source = BUNDLE_PATH.read_text(encoding="utf-8")
    with pytest.raises(ExecutionFailure) as excinfo:
        render(source, [{"name": "Broken"}], filename="dist/app.bundle.js")

    assert not isinstance(excinfo.value, UnresolvedReference)
    assert excinfo.value.filename == "dist/app.bundle.js"
    assert "component exploded" in str(excinfo.value)


def test_syntax_error_in_bundle_fails() -> None:
    with pytest.raises(ExecutionFailure):
        render("function (", {"name": "Card"}, filename="broken.js")


def test_batches_do_not_share_state() -> None:
    source = BUNDLE_PATH.read_text(encoding="utf-8")
    counter = "var calls = (typeof calls === 'number' ? calls : 0) + 1;"
    component = (
        "exports.Counter = function (options) {"
        " options.target.appendChild(document.createTextNode(String(calls)));"
        "};"
    )

    first = render_by_name(source + counter + component, [{"name": "Counter"}])
    second = render_by_name(source + counter + component, [{"name": "Counter"}])

    assert first["Counter"].markup == "<div>1</div>"
    assert second["Counter"].markup == "<div>1</div>"


def test_parent_node_inserts_before_anchor() -> None:
    source = (
        "exports.Anchored = function (options) {"
        " var a = document.createElement('a');"
        " var anchor = document.createComment('x');"
        " options.target.appendChild(a);"
        " a.appendChild(anchor);"
        " anchor.parentNode.insertBefore(document.createTextNode('t'), anchor);"
        " if (a.parentNode !== options.target) { throw new Error('parent wrapper differs'); }"
        " if (document.createElement('i').parentNode !== null) { throw new Error('detached node has a parent'); }"
        "};"
    )

    result = render(source, {"name": "Anchored"}, filename="inline.js")

    assert result.markup == "<div><a>t<!-- x --></a></div>"


def test_cyclic_append_fails_instead_of_recursing() -> None:
    source = (
        "exports.Loop = function (options) {"
        " var c = document.createElement('c');"
        " options.target.appendChild(c);"
        " c.appendChild(options.target);"
        "};"
    )

    with pytest.raises(ExecutionFailure):
        render(source, {"name": "Loop"}, filename="inline.js")

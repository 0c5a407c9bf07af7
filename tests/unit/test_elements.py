"""
Tests for the host integration layer (element registry and one-shot rendering).

Checked invariants:
1. Rendering is deferred by one loop tick after connection
2. Duplicate triggers never re-render
3. Render failures degrade to an error symbol
"""

import asyncio

import pytest
from lxml import etree

from actuarial_symbols import elements
from actuarial_symbols.elements import (ELEMENT_REGISTRY, LOAD_ANNOUNCEMENT, ActuarialElement, create_element,
                                        define, register_default_elements)
from actuarial_symbols.notation import decorate
from actuarial_symbols.symbol_tree import ErrorNode


@pytest.fixture(autouse=True)
def default_elements():
    register_default_elements()


class TestRegistry:
    """define / register_default_elements / create_element."""

    def test_defaults_registered(self):
        """All seven families have an act-* tag."""
        for tag in ["act-symbol", "act-annuity", "act-insurance", "act-premium", "act-reserve", "act-prob",
                    "act-commute"]:
            assert tag in ELEMENT_REGISTRY

    def test_announcement_printed_once(self, monkeypatch, capsys):
        """The load announcement is printed on first registration only."""
        monkeypatch.setattr(elements, "_announced", False)
        register_default_elements()
        register_default_elements()
        assert capsys.readouterr().out.count(LOAD_ANNOUNCEMENT) == 1

    def test_define_custom_tag(self):
        """A custom tag can alias a family."""
        try:
            define("my-annuity", "act-annuity")
            assert create_element("my-annuity").family == "annuity"
        finally:
            ELEMENT_REGISTRY.pop("my-annuity", None)

    def test_define_twice_rejected(self):
        """A tag can be defined only once."""
        with pytest.raises(ValueError):
            define("act-annuity", "annuity")

    def test_define_unknown_family(self):
        """Unknown families cannot be registered."""
        with pytest.raises(ValueError):
            define("act-bogus", "bogus")

    def test_create_undefined(self):
        """Undefined tags cannot be created."""
        with pytest.raises(ValueError):
            create_element("act-nothing")


class TestAttributes:
    """Element attribute access."""

    def test_set_get_remove(self):
        """Chained set/remove, string and flag access."""
        element = create_element("act-symbol").set_attribute("lr", "x").set_attribute("last-survivor")
        assert element.get_attribute("lr") == "x"
        assert element.has_attribute("last-survivor")
        assert element.get_attribute("last-survivor") is None
        element.remove_attribute("last-survivor")
        assert not element.has_attribute("last-survivor")


class TestRendering:
    """One-shot deferred rendering."""

    def test_deferred_one_tick(self):
        """Attributes set right after connecting are visible to the render."""
        async def scenario():
            element = create_element("act-annuity", {"age": "x"})
            element.connected_callback()
            element.set_attribute("type", "due")
            assert not element.rendered
            await asyncio.sleep(0)
            return element

        element = asyncio.run(scenario())
        assert element.rendered
        assert element.tree.base == decorate("a", "double-dot")
        assert etree.QName(element.output).localname == "math"

    def test_duplicate_triggers(self):
        """Connecting twice renders once; later renders return the first output."""
        async def scenario():
            element = create_element("act-commute")
            element.connected_callback()
            element.connected_callback()
            await asyncio.sleep(0)
            return element

        element = asyncio.run(scenario())
        first = element.output
        element.set_attribute("func", "N")
        assert element.render() is first
        assert "<mi>D</mi>" in element.to_markup()

    def test_connect_requires_loop(self):
        """Connecting outside a running loop is a programming error."""
        with pytest.raises(RuntimeError):
            create_element("act-prob").connected_callback()

    def test_render_failure(self, monkeypatch, capsys):
        """An exception while rendering yields an error symbol."""
        def explode(family, attributes):
            raise RuntimeError("boom")

        monkeypatch.setattr(elements, "render_family", explode)
        element = create_element("act-reserve")
        output = element.render()
        assert isinstance(element.tree, ErrorNode)
        assert etree.QName(output[0]).localname == "merror"
        assert "[ERROR]" in capsys.readouterr().out

    def test_unregistered_tag_renders_error(self, capsys):
        """A bare element with an unknown tag renders the unimplemented message."""
        element = ActuarialElement("act-nothing")
        element.render()
        assert isinstance(element.tree, ErrorNode)

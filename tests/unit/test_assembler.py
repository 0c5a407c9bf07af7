"""
Tests for the Four-Corner Assembler.

Checked invariants:
1. Any left corner switches to the full prescript form
2. Absent corners of the prescript form are explicit Empty slots
3. Right corners alone give a sub, sup or subsup form
4. The wrapper encloses the assembled tree, after assembly
"""

from actuarial_symbols.notation import assemble, compose_subscript, decorate
from actuarial_symbols.schemas import CornerSet, PrecedenceAnnotation
from actuarial_symbols.symbol_tree import Empty, PreSup, Row, SubSup, identifier, number, operator


class TestCornerTable:
    """Decision table of tree shapes."""

    def test_base_only(self):
        """No corners: the decorated base alone."""
        assert assemble(CornerSet(symbol="a", decoration="ddot")) == decorate("a", "ddot")

    def test_lower_right_only(self):
        """Only the lower-right corner: a plain sub form."""
        tree = assemble(CornerSet(symbol="A", lower_right="x"))
        assert tree == SubSup(base=identifier("A"), sub=identifier("x"))
        assert tree.sup is None

    def test_upper_right_only(self):
        """Only the upper-right corner: a plain sup form."""
        tree = assemble(CornerSet(symbol="A", upper_right="(m)"))
        assert isinstance(tree, SubSup)
        assert tree.sub is None
        assert tree.sup == Row(children=[operator("("), identifier("m"), operator(")")])

    def test_both_right(self):
        """Both right corners: the subsup form."""
        tree = assemble(CornerSet(symbol="A", lower_right="x", upper_right="1"))
        assert tree == SubSup(base=identifier("A"), sub=identifier("x"), sup=number("1"))

    def test_upper_left_switches_to_prescripts(self):
        """Adding an upper-left corner gives the four-corner form with explicit empty slots."""
        tree = assemble(CornerSet(symbol="A", lower_right="x", upper_left="2"))
        assert tree == PreSup(base=identifier("A"), pre_sub=Empty(), pre_sup=number("2"),
                              post_sub=identifier("x"), post_sup=Empty())
        assert isinstance(tree.pre_sub, Empty)
        assert isinstance(tree.post_sup, Empty)

    def test_lower_left_only(self):
        """A lower-left corner alone still yields all four slots."""
        tree = assemble(CornerSet(symbol="V", lower_left="k"))
        assert tree == PreSup(base=identifier("V"), pre_sub=identifier("k"), pre_sup=Empty(),
                              post_sub=Empty(), post_sup=Empty())

    def test_empty_strings_are_absent(self):
        """Empty corner text counts as no corner."""
        assert assemble(CornerSet(symbol="A", lower_right="", upper_left="")) == identifier("A")


class TestCornerContent:
    """How each corner is built."""

    def test_lower_right_is_composed(self):
        """The lower-right text goes through the subscript composer with all options."""
        precedence = [PrecedenceAnnotation(position=1, order=2)]
        corners = CornerSet(symbol="A", lower_right="xy:n", angle_variant="plain", precedence=precedence)
        assert assemble(corners).sub == compose_subscript("xy:n", "plain", precedence)

    def test_tree_corners_used_as_is(self):
        """Pre-built trees are placed without parsing."""
        corner = Row(children=[identifier("u"), operator("|", stretchy=False), identifier("t")])
        tree = assemble(CornerSet(symbol="q", lower_left=corner, lower_right="x"))
        assert tree.pre_sub == corner


class TestWrapper:
    """Premium/reserve style enclosure."""

    def test_text_wrapper(self):
        """A text wrapper becomes an identifier before the parenthesized tree."""
        tree = assemble(CornerSet(symbol="A", lower_right="x", wrapper="P"))
        assert tree == Row(children=[
            identifier("P"), operator("("), SubSup(base=identifier("A"), sub=identifier("x")), operator(")"),
        ])

    def test_tree_wrapper(self):
        """A prescripted wrapper is kept whole."""
        wrapper = assemble(CornerSet(symbol="V", lower_left="k"))
        tree = assemble(CornerSet(symbol="A", lower_right="x", wrapper=wrapper))
        assert tree.children[0] == wrapper

    def test_wrapper_after_prescripts(self):
        """The wrapper encloses the four-corner form, never the reverse."""
        tree = assemble(CornerSet(symbol="A", lower_left="n", wrapper="P"))
        assert isinstance(tree, Row)
        assert isinstance(tree.children[2], PreSup)

"""Tests for declaration rules"""

import pytest

from styleaudit.rules.declarations import collapse_box_values

from conftest import first_rule, lint


class TestZeroNeedsNoUnitRule:
    """Test zero-needs-no-unit"""

    def test_fires_on_zero_px(self):
        """Test margin: 0px is flagged"""
        violations = lint(".a { margin: 0px; }", 'zero-needs-no-unit')
        assert len(violations) == 1
        assert violations[0].rule_id == 'zero-needs-no-unit'
        assert "'0px'" in violations[0].message
        assert violations[0].column == len(".a { margin: ") + 1

    @pytest.mark.parametrize('source', [
        ".a { margin: 10px; }",
        ".a { margin: 0; }",
        ".a { margin: 0 auto; }",
        ".a { width: calc(0px + 10%); }",
        ".a { transition: opacity 0s; }",
        ".a { flex: 1 1 0px; }",
        ".a { --gap: 0px; }",
        "$gap: 0px;",
    ])
    def test_accepts(self, source):
        """Test values that need no change"""
        assert lint(source, 'zero-needs-no-unit') == []

    def test_each_zero_flagged(self):
        """Test every zero length in a multi-value declaration"""
        violations = lint(".a { padding: 0em 10px 0rem 0; }", 'zero-needs-no-unit')
        assert len(violations) == 2

    def test_bare_zero_detection(self):
        """Test DeclarationNode.is_bare_zero"""
        rule = first_rule(".a { margin: 0; padding: 0px; top: 0 0; }")
        assert [d.is_bare_zero for d in rule.declarations] == [True, False, False]


class TestPreferShorthandRule:
    """Test prefer-shorthand"""

    def test_fires_on_four_margins(self):
        """Test four literal margin longhands are flagged once"""
        source = (
            ".a {\n"
            "  margin-top: 1px;\n"
            "  margin-right: 2px;\n"
            "  margin-bottom: 3px;\n"
            "  margin-left: 4px;\n"
            "}\n"
        )
        violations = lint(source, 'prefer-shorthand')
        assert len(violations) == 1
        assert violations[0].line == 2
        assert "margin: 1px 2px 3px 4px" in violations[0].message

    def test_two_of_four_accepted(self):
        """Test partial longhands are left alone"""
        assert lint(".a { margin-top: 1px; margin-bottom: 1px; }", 'prefer-shorthand') == []

    def test_collapsed_suggestion(self):
        """Test the suggestion uses the shortest form"""
        source = ".a { padding-top: 0; padding-bottom: 0; padding-left: 5px; padding-right: 5px; }"
        violations = lint(source, 'prefer-shorthand')
        assert "padding: 0 5px" in violations[0].message

    def test_variable_values_skipped(self):
        """Test longhands using variables are left alone"""
        source = ".a { margin-top: $x; margin-right: 0; margin-bottom: 0; margin-left: 0; }"
        assert lint(source, 'prefer-shorthand') == []

    def test_mixed_important_skipped(self):
        """Test !important on some longhands only"""
        source = (".a { margin-top: 0 !important; margin-right: 0; "
                  "margin-bottom: 0; margin-left: 0; }")
        assert lint(source, 'prefer-shorthand') == []

    @pytest.mark.parametrize('keyword', ['inherit', 'initial', 'unset', 'revert', 'revert-layer'])
    def test_mixed_css_wide_keyword_skipped(self, keyword):
        """Test a global keyword cannot share a shorthand with other values"""
        source = (f".a {{ margin-top: {keyword}; margin-right: 0; "
                  "margin-bottom: 0; margin-left: 0; }")
        assert lint(source, 'prefer-shorthand') == []

    def test_uniform_css_wide_keyword(self):
        """Test four identical global keywords fold into one"""
        source = (".a { margin-top: inherit; margin-right: inherit; "
                  "margin-bottom: inherit; margin-left: inherit; }")
        violations = lint(source, 'prefer-shorthand')
        assert len(violations) == 1
        assert "'margin: inherit'" in violations[0].message

    def test_important_stripped_from_suggestion_value(self):
        """Test uniform !important is carried to the shorthand once"""
        source = (".a { margin-top: 0 !important; margin-right: 0 !important; "
                  "margin-bottom: 0 !important; margin-left: 0 !important; }")
        violations = lint(source, 'prefer-shorthand')
        assert "'margin: 0 !important'" in violations[0].message

    def test_multi_value_longhand_skipped(self):
        """Test elliptical radii cannot be folded"""
        source = (".a { border-top-left-radius: 2px 4px; border-top-right-radius: 2px; "
                  "border-bottom-right-radius: 2px; border-bottom-left-radius: 2px; }")
        assert lint(source, 'prefer-shorthand') == []

    def test_border_families(self):
        """Test border-width longhands"""
        source = (".a { border-top-width: 1px; border-right-width: 1px; "
                  "border-bottom-width: 1px; border-left-width: 1px; }")
        violations = lint(source, 'prefer-shorthand')
        assert len(violations) == 1
        assert "border-width: 1px" in violations[0].message

    def test_longhands_in_different_blocks(self):
        """Test longhands split across nested blocks are not combined"""
        source = ".a { margin-top: 0; margin-right: 0; &:hover { margin-bottom: 0; margin-left: 0; } }"
        assert lint(source, 'prefer-shorthand') == []


class TestCollapseBoxValues:
    """Test shorthand value collapsing"""

    @pytest.mark.parametrize('values,expected', [
        (['1px', '1px', '1px', '1px'], '1px'),
        (['1px', '2px', '1px', '2px'], '1px 2px'),
        (['1px', '2px', '3px', '2px'], '1px 2px 3px'),
        (['1px', '2px', '3px', '4px'], '1px 2px 3px 4px'),
        (['1px', '2px', '1px', '4px'], '1px 2px 1px 4px'),
    ])
    def test_collapse(self, values, expected):
        """Test collapsing follows the top/right/bottom/left shorthand rules"""
        assert collapse_box_values(values) == expected

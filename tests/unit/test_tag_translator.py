"""Unit tests for the tag translator."""

import pytest

from report_generator.interfaces.template import TagDelimiters
from report_generator.strategies.template_engine.delimiters import TagSyntaxError, TagTranslator


def translate(xml: str, **delimiters) -> str:
    return TagTranslator(TagDelimiters(**delimiters)).translate(xml)


BRACKETS = {"tag_start": "[[", "tag_end": "]]"}


# =============================================================================
# Variable Tags
# =============================================================================


class TestVariableTags:
    """Plain substitution tags."""

    def test_default_tags_unchanged(self):
        """Test that default tags come out as docxtpl already reads them."""
        xml = "<w:t>Hello {{name}} and {{ other }}</w:t>"
        assert translate(xml) == xml

    def test_custom_tags_become_jinja(self):
        """Test that [[name]] is rewritten to {{name}}."""
        assert translate("<w:t>Hello [[name]]</w:t>", **BRACKETS) == "<w:t>Hello {{name}}</w:t>"

    def test_tag_split_across_runs(self):
        """Test that markup Word inserts inside a tag is dropped."""
        xml = "<w:r><w:t>[[na</w:t></w:r><w:r><w:rPr><w:b/></w:rPr><w:t>me]]</w:t></w:r>"
        assert translate(xml, **BRACKETS) == "<w:r><w:t>{{name}}</w:t></w:r>"

    def test_delimiter_split_across_runs(self):
        """Test that a delimiter broken over two runs is still found."""
        xml = "<w:t>[</w:t><w:t>[name]]</w:t>"
        assert translate(xml, **BRACKETS) == "<w:t>{{name}}</w:t>"

    def test_xml_escaped_delimiters(self):
        """Test delimiters containing characters XML escapes."""
        xml = "<w:t>&lt;&lt;name&gt;&gt;</w:t>"
        assert translate(xml, tag_start="<<", tag_end=">>") == "<w:t>{{name}}</w:t>"

    def test_jinja_openers_escaped_with_custom_tags(self):
        """Test that literal Jinja syntax is kept as text when other tags are used."""
        xml = "<w:t>{{ keep }} {% raw %} [[name]]</w:t>"
        assert translate(xml, **BRACKETS) == (
            "<w:t>{{ '{{' }} keep }} {{ '{%' }} raw %} {{name}}</w:t>"
        )

    def test_jinja_blocks_kept_with_default_tags(self):
        """Test that native Jinja blocks still work with default tags."""
        xml = "<w:t>{% if vip %}VIP{% endif %}</w:t>"
        assert translate(xml) == xml


# =============================================================================
# Container Tags
# =============================================================================


class TestContainerTags:
    """Section (loop / conditional) tags."""

    def test_section_becomes_loop(self):
        """Test that a section wraps its body in a loop over _section()."""
        xml = "<w:t>{{#items}}</w:t><w:t>{{title}}</w:t><w:t>{{/items}}</w:t>"
        assert translate(xml) == (
            "<w:t>{% for _scope1 in _section(items, None) %}</w:t>"
            "<w:t>{{ _scope1['title'] }}</w:t>"
            "<w:t>{% endfor %}</w:t>"
        )

    def test_nested_sections(self):
        """Test that inner sections resolve their value in the enclosing scope."""
        xml = "{{#orders}}{{#lines}}{{sku}}{{/lines}}{{/orders}}"
        assert translate(xml) == (
            "{% for _scope1 in _section(orders, None) %}"
            "{% for _scope2 in _section(_scope1['lines'], _scope1) %}"
            "{{ _scope2['sku'] }}"
            "{% endfor %}"
            "{% endfor %}"
        )

    def test_dotted_path_inside_section(self):
        assert translate("{{#items}}{{ price.amount }}{{/items}}") == (
            "{% for _scope1 in _section(items, None) %}"
            "{{ _scope1['price'].amount }}"
            "{% endfor %}"
        )

    def test_scalar_element(self):
        """Test that '.' and 'this' name a scalar element."""
        result = translate("{{#tags}}{{.}},{{this}}{{/tags}}")
        assert "{{ _scope1['this'] }},{{ _scope1['this'] }}" in result

    def test_expression_inside_section_left_to_jinja(self):
        """Test that expressions other than plain names are not rewritten."""
        result = translate("{{#items}}{{ price|round }}{{/items}}")
        assert "{{ price|round }}" in result

    def test_custom_container_markers(self):
        xml = "[[@rows]][[cell]][[!rows]]"
        assert translate(
            xml, container_tag_open="@", container_tag_close="!", **BRACKETS
        ) == (
            "{% for _scope1 in _section(rows, None) %}"
            "{{ _scope1['cell'] }}"
            "{% endfor %}"
        )

    def test_close_without_name(self):
        """Test that a bare close marker ends the innermost section."""
        assert translate("{{#items}}x{{/}}").endswith("x{% endfor %}")

    # =========================================================================
    # Error Tests
    # =========================================================================

    def test_unclosed_section(self):
        with pytest.raises(TagSyntaxError, match="never closed"):
            translate("{{#items}}{{title}}")

    def test_mismatched_close(self):
        with pytest.raises(TagSyntaxError, match="does not match"):
            translate("{{#items}}{{/rows}}")

    def test_close_without_open(self):
        with pytest.raises(TagSyntaxError, match="no opening tag"):
            translate("{{/items}}")

    def test_open_without_name(self):
        with pytest.raises(TagSyntaxError, match="without a name"):
            translate("{{#}}{{/}}")


# =============================================================================
# Section Placement
# =============================================================================


def para(text: str) -> str:
    return f"<w:p><w:r><w:t>{text}</w:t></w:r></w:p>"


def cell(text: str) -> str:
    return f"<w:tc><w:tcPr/>{para(text)}</w:tc>"


def table(*rows: list[str]) -> str:
    body = "".join("<w:tr>" + "".join(cell(text) for text in texts) + "</w:tr>" for texts in rows)
    return "<w:tbl>" + body + "</w:tbl>"


LOOP = "{% for _scope1 in _section(items, None) %}"


class TestSectionPlacement:
    """Where section statements land in the document structure."""

    def test_marker_paragraphs_are_replaced(self):
        """Test that paragraphs holding only a marker give way to the statement."""
        xml = para("{{#items}}") + para("{{title}}") + para("{{/items}}")
        assert translate(xml) == LOOP + para("{{ _scope1['title'] }}") + "{% endfor %}"

    def test_marker_paragraph_with_text_stays_inline(self):
        """Test that a section is inline when one of its markers shares a paragraph."""
        xml = para("{{#items}}") + para("x{{/items}}")
        assert translate(xml) == para(LOOP) + para("x{% endfor %}")

    def test_marker_paragraph_inside_cell_is_kept(self):
        xml = "<w:tc>" + para("{{#items}}") + para("{{/items}}") + "</w:tc>"
        assert translate(xml) == "<w:tc>" + para(LOOP) + para("{% endfor %}") + "</w:tc>"

    def test_paragraph_with_section_properties_is_kept(self):
        marker = "<w:p><w:pPr><w:sectPr/></w:pPr><w:r><w:t>{{/items}}</w:t></w:r></w:p>"
        result = translate(para("{{#items}}") + marker)
        assert "<w:sectPr/>" in result
        assert result.startswith(para(LOOP))

    def test_section_across_cells_wraps_row(self):
        """Test that open and close in different cells of a row repeat the row."""
        xml = table(["{{#items}}{{a}}", "{{b}}{{/items}}"])
        first = cell("{{ _scope1['a'] }}")
        second = cell("{{ _scope1['b'] }}")
        assert translate(xml) == (
            "<w:tbl>" + LOOP + "<w:tr>" + first + second + "</w:tr>{% endfor %}</w:tbl>"
        )

    def test_section_across_rows_wraps_all_rows(self):
        xml = table(["{{#items}}"], ["{{a}}"], ["{{/items}}"])
        result = translate(xml)
        assert result.startswith("<w:tbl>" + LOOP + "<w:tr>")
        assert result.endswith("</w:tr>{% endfor %}</w:tbl>")

    def test_section_across_tables_stays_inline(self):
        xml = table(["{{#items}}"]) + table(["{{/items}}"])
        assert translate(xml) == table([LOOP]) + table(["{% endfor %}"])

    def test_tag_does_not_span_paragraphs(self):
        """Test that an unterminated tag is left as text instead of swallowing the next paragraph."""
        xml = para("see arr[[0]") + para("Hello [[name]]")
        assert translate(xml, **BRACKETS) == para("see arr[[0]") + para("Hello {{name}}")

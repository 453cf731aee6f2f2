"""Tag translation for docxtpl.

Rewrites the tags of one XML part of a template, written with a
configurable delimiter set, into the Jinja2 syntax docxtpl renders:

- ``[[name]]`` becomes ``{{name}}``
- ``[[#items]] ... [[/items]]`` becomes a for loop over ``_section(items)``
- inside a section, ``[[title]]`` reads the current element first

Word often splits a tag over several runs, so delimiters and tag bodies
may be interleaved with markup. The markup inside a tag is dropped. A tag
never spans two paragraphs.

Section markers are placed at the widest structure they delimit:

- open and close in different cells of a table repeat whole rows
- markers alone in their paragraphs repeat whole paragraphs and leave
  no empty paragraph behind
- anything else repeats the text between the markers
"""

import html
import logging
import re
from bisect import bisect_right
from collections.abc import Mapping
from typing import Any

from jinja2 import pass_context
from jinja2.runtime import Context

from report_generator.interfaces.template import TagDelimiters

logger = logging.getLogger(__name__)

SECTION_FUNCTION = "_section"
SCOPE_PREFIX = "_scope"
SCALAR_NAME = "this"

_MARKUP = r"(?:(?!</w:p>)<[^>]*>)*"
_BODY = r"(?P<body>(?:(?!</w:p>).)*?)"
_MARKUP_RE = re.compile(r"<[^>]*>")
_JINJA_LITERAL = r"(?P<literal>\{[{%#])"
_NAME_PATH_RE = re.compile(r"^([A-Za-z_]\w*)((?:\.\w+)*)$")

# NUL is not a legal XML character
_SENTINEL = "\x00%d\x00"
_SENTINEL_RE = re.compile(r"\x00(\d+)\x00")

_PARAGRAPH_RE = re.compile(r"<w:p[ >](?:(?!<w:p[ >]).)*?</w:p>", re.DOTALL)
_ROW_RE = re.compile(r"<w:tr[ >](?:(?!<w:tr[ >]).)*?</w:tr>", re.DOTALL)
_CELL_RE = re.compile(r"<w:tc[ >](?:(?!<w:tc[ >]).)*?</w:tc>", re.DOTALL)
_CELL_OPEN_RE = re.compile(r"<w:tc[ >]")
_CELL_CLOSE_RE = re.compile(r"</w:tc>")
_TABLE_BOUNDARY_RE = re.compile(r"<w:tbl[ >]|</w:tbl>")


class TagSyntaxError(ValueError):
    """Exception raised when container tags are unbalanced."""

    pass


def _delimiter_pattern(marker: str) -> str:
    """Regex for a delimiter as it appears in XML, possibly split by markup."""
    escaped = html.escape(marker, quote=False)
    return _MARKUP.join(re.escape(char) for char in escaped)


def _enclosing(spans: list[tuple[int, int]], pos: int) -> tuple[int, int] | None:
    return next((span for span in spans if span[0] <= pos < span[1]), None)


def _apply_edits(xml: str, edits: list[tuple[int, int, int, str]]) -> str:
    """Replace ``xml[start:end]`` with text for each edit.

    Edits must not overlap. Insertions at the same offset are ordered by
    their third field.
    """
    parts = []
    last = 0
    for start, end, _, text in sorted(edits):
        parts.append(xml[last:start])
        parts.append(text)
        last = end
    parts.append(xml[last:])
    return "".join(parts)


class SectionScope:
    """Name lookup for one section pass, falling back to the enclosing scope."""

    __slots__ = ("_values", "_parent")

    def __init__(self, values: Mapping[str, Any], parent: Any) -> None:
        self._values = values
        self._parent = parent

    def __getitem__(self, key: str) -> Any:
        if key in self._values:
            return self._values[key]
        return self._parent[key]


def _element_scope(element: Any, parent: Any) -> SectionScope:
    if isinstance(element, Mapping):
        return SectionScope(element, parent)
    return SectionScope({SCALAR_NAME: element}, parent)


@pass_context
def section(context: Context, value: Any, parent: Any = None) -> list[SectionScope]:
    """Expand the value bound to a container tag into one scope per pass.

    Lists give one pass per element, any other truthy value a single
    pass, falsy or undefined values none.
    """
    base = parent if parent is not None else context.get_all()
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        return [_element_scope(element, base) for element in value]
    return [_element_scope(value, base)]


class TagTranslator:
    """Translates tags of a template part into docxtpl's Jinja2 syntax.

    Example:
        ```python
        translator = TagTranslator(TagDelimiters(tag_start="[[", tag_end="]]"))
        translator.translate("<w:t>Hello [[name]]</w:t>")
        # '<w:t>Hello {{name}}</w:t>'
        ```
    """

    def __init__(self, delimiters: TagDelimiters) -> None:
        """Compile the tag pattern for a delimiter set.

        Args:
            delimiters: The markers used by the template.
        """
        self._delimiters = delimiters

        pattern = (
            f"(?P<tag>{_delimiter_pattern(delimiters.tag_start)}"
            f"{_BODY}"
            f"{_delimiter_pattern(delimiters.tag_end)})"
        )
        # Jinja openers are plain text once the template uses other delimiters
        if not delimiters.is_default_tag_start:
            pattern = f"{pattern}|{_JINJA_LITERAL}"
        self._pattern = re.compile(pattern, re.DOTALL)

        # Longest marker first, in case one is a prefix of the other
        self._markers = sorted(
            [
                (delimiters.container_tag_open, True),
                (delimiters.container_tag_close, False),
            ],
            key=lambda marker: len(marker[0]),
            reverse=True,
        )

    def translate(self, xml: str) -> str:
        """Rewrite all tags of an XML part.

        Args:
            xml: The XML source of a document part.

        Returns:
            The XML with tags in docxtpl syntax.

        Raises:
            TagSyntaxError: If container tags are unbalanced or mismatched.
        """
        statements: list[str] = []
        pairs: list[tuple[int, int]] = []
        sections: list[tuple[str, int]] = []
        count = 0

        def replace(match: re.Match) -> str:
            nonlocal count
            literal = match.groupdict().get("literal")
            if literal is not None:
                return "{{ %r }}" % literal

            count += 1
            body = html.unescape(_MARKUP_RE.sub("", match.group("body")))
            expression = body.strip()

            for marker, is_open in self._markers:
                if expression.startswith(marker):
                    name = expression[len(marker):].strip()
                    if is_open:
                        statements.append(self._open_section(name, len(sections)))
                        sections.append((name, len(statements) - 1))
                    else:
                        opened = self._close_section(name, sections)
                        statements.append("{% endfor %}")
                        pairs.append((opened, len(statements) - 1))
                    return _SENTINEL % (len(statements) - 1)

            resolved = self._resolve(expression, len(sections))
            if resolved is None:
                return "{{%s}}" % body
            return "{{ %s }}" % resolved

        translated = self._pattern.sub(replace, xml)

        if sections:
            raise TagSyntaxError(f"Container tag '{sections[-1][0]}' is never closed")

        if pairs:
            translated = self._place_row_sections(translated, statements, pairs)
            translated = self._place_paragraph_sections(translated, statements, pairs)
            translated = _SENTINEL_RE.sub(lambda m: statements[int(m.group(1))], translated)

        if count:
            logger.debug(f"Translated {count} tags ({len(pairs)} sections)")
        return translated

    def _open_section(self, name: str, depth: int) -> str:
        if not name:
            raise TagSyntaxError("Container tag without a name")

        value = self._resolve(name, depth) or name
        parent = f"{SCOPE_PREFIX}{depth}" if depth else "None"
        return "{%% for %s%d in %s(%s, %s) %%}" % (
            SCOPE_PREFIX,
            depth + 1,
            SECTION_FUNCTION,
            value,
            parent,
        )

    def _close_section(self, name: str, sections: list[tuple[str, int]]) -> int:
        """Pop the innermost open section and return its statement index."""
        if not sections:
            raise TagSyntaxError(f"Closing container tag '{name}' has no opening tag")

        opened, index = sections.pop()
        if name and name != opened:
            raise TagSyntaxError(
                f"Closing container tag '{name}' does not match '{opened}'"
            )
        return index

    def _place_row_sections(
        self,
        xml: str,
        statements: list[str],
        pairs: list[tuple[int, int]],
    ) -> str:
        """Move sections that start and end in different cells around whole rows."""
        rows = [m.span() for m in _ROW_RE.finditer(xml)]
        if not rows:
            return xml
        cells = [m.span() for m in _CELL_RE.finditer(xml)]

        edits = []
        for opened, closed in pairs:
            open_tag, close_tag = _SENTINEL % opened, _SENTINEL % closed
            start, end = xml.index(open_tag), xml.index(close_tag)

            open_cell, close_cell = _enclosing(cells, start), _enclosing(cells, end)
            open_row, close_row = _enclosing(rows, start), _enclosing(rows, end)
            if None in (open_cell, close_cell, open_row, close_row) or open_cell == close_cell:
                continue
            # Rows of one table only
            if _TABLE_BOUNDARY_RE.search(xml, open_row[0], close_row[1]):
                continue

            edits += [
                (open_row[0], open_row[0], start, statements[opened]),
                (start, start + len(open_tag), 0, ""),
                (end, end + len(close_tag), 0, ""),
                (close_row[1], close_row[1], end, statements[closed]),
            ]

        if edits:
            logger.debug(f"Repeating table rows for {len(edits) // 4} sections")
        return _apply_edits(xml, edits)

    def _place_paragraph_sections(
        self,
        xml: str,
        statements: list[str],
        pairs: list[tuple[int, int]],
    ) -> str:
        """Replace paragraphs holding nothing but section markers with the markers.

        Both markers of a section must qualify, otherwise the repeated
        fragment would not be well-formed. Paragraphs inside table cells
        and paragraphs carrying section properties are kept.
        """
        cell_opens = [m.start() for m in _CELL_OPEN_RE.finditer(xml)]
        cell_closes = [m.start() for m in _CELL_CLOSE_RE.finditer(xml)]

        candidates: list[tuple[tuple[int, int], list[int]]] = []
        for match in _PARAGRAPH_RE.finditer(xml):
            paragraph = match.group(0)
            indices = [int(index) for index in _SENTINEL_RE.findall(paragraph)]
            if not indices or "<w:sectPr" in paragraph:
                continue
            if _SENTINEL_RE.sub("", _MARKUP_RE.sub("", paragraph)).strip():
                continue
            if bisect_right(cell_opens, match.start()) > bisect_right(cell_closes, match.start()):
                continue
            candidates.append((match.span(), indices))

        removable = {index for _, indices in candidates for index in indices}
        changed = True
        while changed:
            changed = False
            for opened, closed in pairs:
                if (opened in removable) != (closed in removable):
                    removable -= {opened, closed}
                    changed = True
            for _, indices in candidates:
                if removable.intersection(indices) and not removable.issuperset(indices):
                    removable.difference_update(indices)
                    changed = True

        edits = [
            (start, end, 0, "".join(statements[index] for index in indices))
            for (start, end), indices in candidates
            if removable.issuperset(indices)
        ]
        return _apply_edits(xml, edits)

    def _resolve(self, expression: str, depth: int) -> str | None:
        """Point a simple name at the innermost section scope.

        Returns None when the expression should be left to Jinja as written.
        """
        if depth == 0:
            return None

        scope = f"{SCOPE_PREFIX}{depth}"
        if expression in (".", SCALAR_NAME):
            return f"{scope}[{SCALAR_NAME!r}]"

        match = _NAME_PATH_RE.match(expression)
        if match is None:
            return None
        head, rest = match.groups()
        return f"{scope}[{head!r}]{rest}"

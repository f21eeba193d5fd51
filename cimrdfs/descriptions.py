"""Description Repository — authored descriptions read as a stream of lines.

The authored document is not parsed into an XML tree. Its first line is the
namespace header (the opening rdf:RDF element) and is kept aside. Every
following rdf:Description block is captured verbatim, keyed by the name it
documents:

    <rdf:Description rdf:about="#Breaker">   →  key "Breaker"
    <rdf:Description rdf:ID="status">        →  key "status"

Between blocks only blank lines, XML comments and the closing </rdf:RDF> are
accepted. Anything else, an unterminated block, a nested block or a block
with no name aborts the parse.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Iterator

from .errors import DescriptionSourceError, IngestionError
from .types import Description, DescriptionSet, local_name

logger = logging.getLogger(__name__)

_START = re.compile(r"<rdf:Description\b")
_END = re.compile(r"</rdf:Description\s*>")
_SELF_CLOSING = re.compile(r"<rdf:Description\b[^>]*/>")
_KEY = re.compile(r"<rdf:Description\b[^>]*?\brdf:(about|ID)\s*=\s*([\"'])(.*?)\2")
_ROOT_END = re.compile(r"^\s*</rdf:RDF\s*>\s*$")


def read_descriptions(path: str | Path) -> DescriptionSet:
    """Parse the authored description document at `path`."""
    try:
        with open(path, encoding="utf-8", newline="") as handle:
            return parse_descriptions(handle)
    except OSError as exc:
        raise IngestionError(str(path), exc.strerror or str(exc)) from exc


def parse_descriptions(lines: Iterable[str]) -> DescriptionSet:
    it = iter(lines)
    try:
        header = next(it)
    except StopIteration:
        raise DescriptionSourceError("Description source is empty") from None

    entries: dict[str, Description] = {}
    for description in _blocks(it, first_line=2):
        if description.name in entries:
            logger.warning(
                "Duplicate description for '%s' at line %d ignored (first at line %d)",
                description.name, description.line, entries[description.name].line,
            )
            continue
        entries[description.name] = description

    logger.info("Read %d authored descriptions", len(entries))
    return DescriptionSet(header=_strip_eol(header), entries=entries)


def _blocks(lines: Iterator[str], first_line: int) -> Iterator[Description]:
    block: list[str] = []
    markup: list[str] = []
    start = 0
    in_comment = False

    for lineno, line in enumerate(lines, start=first_line):
        # structure is detected on the line with comments blanked out
        code, in_comment = _uncomment(line, in_comment)

        if block:
            if _START.search(code):
                raise DescriptionSourceError("Nested rdf:Description", lineno)
            block.append(line)
            markup.append(code)
            if _END.search(code) or _SELF_CLOSING.search("".join(markup)):
                yield _make_description(block, markup, start)
                block, markup = [], []
            continue

        if _START.search(code):
            start = lineno
            block, markup = [line], [code]
            if _END.search(code) or _SELF_CLOSING.search(code):
                yield _make_description(block, markup, start)
                block, markup = [], []
            continue

        stripped = code.strip()
        if not stripped or _ROOT_END.match(code):
            continue
        raise DescriptionSourceError(f"Unexpected content outside a description: {stripped[:60]!r}", lineno)

    if block:
        raise DescriptionSourceError("Unterminated rdf:Description", start)
    if in_comment:
        raise DescriptionSourceError("Unterminated comment at end of description source")


def _uncomment(line: str, in_comment: bool) -> tuple[str, bool]:
    """Return `line` with XML comment text replaced by spaces, and whether a
    comment is still open at its end."""
    out: list[str] = []
    pos = 0
    while pos < len(line):
        if in_comment:
            end = line.find("-->", pos)
            if end == -1:
                return "".join(out), True
            pos = end + 3
            in_comment = False
            out.append(" ")
        else:
            begin = line.find("<!--", pos)
            if begin == -1:
                out.append(line[pos:])
                break
            out.append(line[pos:begin])
            pos = begin + 4
            in_comment = True
    return "".join(out), in_comment


def _make_description(block: list[str], markup: list[str], start: int) -> Description:
    fragment = _strip_eol("".join(block))
    match = _KEY.search("".join(markup))
    if match is None:
        raise DescriptionSourceError("rdf:Description without rdf:about or rdf:ID", start)
    attribute, value = match.group(1), match.group(3)
    name = local_name(value) if attribute == "about" else value
    if not name:
        raise DescriptionSourceError("rdf:Description with an empty name", start)
    return Description(name=name, fragment=fragment, line=start)


def _strip_eol(text: str) -> str:
    return text.rstrip("\r\n")

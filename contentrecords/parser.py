"""Parse raw file text into `ContentRecord` instances and render them back."""

from __future__ import annotations

from typing import Any, Iterator, Optional

import yaml
from yaml.nodes import MappingNode, Node, ScalarNode, SequenceNode

from .config import DuplicateKeyPolicy, ParserOptions
from .records import ContentRecord, thaw

_BOM = "\ufeff"
_STR_TAG = "tag:yaml.org,2002:str"
_MERGE_TAG = "tag:yaml.org,2002:merge"
_BINARY_TAG = "tag:yaml.org,2002:binary"

# Block content starts on line 2 of the file.
_BLOCK_OFFSET = 2


class MalformedRecord(ValueError):
    """Raised when a metadata block is unterminated or not valid key-value text."""

    def __init__(self, reason: str, *, file: Optional[str] = None, line: Optional[int] = None) -> None:
        self.reason = reason
        self.file = file
        self.line = line
        location = file or "<text>"
        if line is not None:
            location = f"{location}:{line}"
        super().__init__(f"{location}: {reason}")


class _MetadataLoader(yaml.SafeLoader):
    """Safe loader used for metadata blocks; later duplicate keys win."""


def parse_record(
    text: str,
    *,
    source: Optional[str] = None,
    options: Optional[ParserOptions] = None,
) -> ContentRecord:
    """Split *text* into its metadata block and body.

    Text that does not open with the delimiter line is returned verbatim as
    the body with empty metadata. Otherwise the block between the first two
    delimiter lines is read as ``key: value`` pairs and the remainder becomes
    the body, minus at most one leading blank line.

    Raises:
        MalformedRecord: If the block is never closed or cannot be read as a
            mapping of string keys.
    """
    options = options or ParserOptions()
    lines = _split_lines(text)
    if not lines or not _is_delimiter(lines[0].lstrip(_BOM), options.delimiter):
        return ContentRecord(metadata={}, body=text, source=source)

    for idx in range(1, len(lines)):
        if _is_delimiter(lines[idx], options.delimiter):
            interior = "".join(lines[1:idx])
            metadata = _parse_metadata(interior, source, options.duplicate_keys)
            body = _strip_leading_blank_line("".join(lines[idx + 1 :]))
            return ContentRecord(metadata=metadata, body=body, source=source)

    raise MalformedRecord(
        f"closing metadata delimiter '{options.delimiter}' missing",
        file=source,
        line=1,
    )


def render_record(record: ContentRecord, *, options: Optional[ParserOptions] = None) -> str:
    """Serialize *record* to text that parses back into an equal record."""
    options = options or ParserOptions()
    delimiter = options.delimiter
    body = record.body
    first_line = body.partition("\n")[0]
    if not record.metadata and not _is_delimiter(first_line.lstrip(_BOM), delimiter):
        return body

    block = ""
    if record.metadata:
        block = yaml.safe_dump(
            thaw(record.metadata),
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
    separator = "\n" if body and not first_line.strip() else ""
    return f"{delimiter}\n{block}{delimiter}\n{separator}{body}"


def _split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only, keeping line endings."""
    parts = text.split("\n")
    lines = [f"{part}\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def _is_delimiter(line: str, delimiter: str) -> bool:
    return line.rstrip() == delimiter


def _strip_leading_blank_line(body: str) -> str:
    first, newline, rest = body.partition("\n")
    if newline and not first.strip():
        return rest
    return body


def _parse_metadata(
    interior: str,
    source: Optional[str],
    policy: DuplicateKeyPolicy,
) -> dict[str, Any]:
    loader = _MetadataLoader(interior)
    try:
        node = loader.get_single_node()
        if node is None:
            return {}
        if not isinstance(node, MappingNode):
            raise MalformedRecord(
                "metadata block must contain 'key: value' lines",
                file=source,
                line=_line_of(node),
            )
        _check_keys(node, source, line=None, seen=set())
        _check_nodes(loader, node, source, policy is DuplicateKeyPolicy.ERROR, seen=set())
        data = loader.construct_document(node)
    except yaml.MarkedYAMLError as exc:
        mark = exc.problem_mark or exc.context_mark
        # Scanner contexts point at the start of the offending token.
        if exc.context_mark is not None and (exc.context or "").startswith("while scanning"):
            mark = exc.context_mark
        line = mark.line + _BLOCK_OFFSET if mark is not None else None
        reason = exc.problem or exc.context or "invalid metadata"
        raise MalformedRecord(reason, file=source, line=line) from exc
    except yaml.YAMLError as exc:
        raise MalformedRecord(str(exc), file=source) from exc
    finally:
        loader.dispose()
    return dict(data)


def _line_of(node: Node) -> int:
    return node.start_mark.line + _BLOCK_OFFSET


def _check_keys(node: MappingNode, source: Optional[str], *, line: Optional[int], seen: set[int]) -> None:
    """Require string keys at the top level, including keys pulled in by ``<<`` merges.

    Merged keys are reported at the line of the ``<<`` entry that brought them in.
    """
    seen.add(id(node))
    for key_node, value_node in node.value:
        key_line = line if line is not None else _line_of(key_node)
        if key_node.tag == _MERGE_TAG:
            for merged in _merge_sources(value_node):
                if id(merged) not in seen:
                    _check_keys(merged, source, line=key_line, seen=seen)
            continue
        if key_node.tag != _STR_TAG:
            raise MalformedRecord(
                f"metadata key {key_node.value!r} must be a string",
                file=source,
                line=key_line,
            )


def _merge_sources(node: Node) -> Iterator[MappingNode]:
    if isinstance(node, MappingNode):
        yield node
    elif isinstance(node, SequenceNode):
        for child in node.value:
            if isinstance(child, MappingNode):
                yield child


def _check_nodes(
    loader: yaml.SafeLoader,
    node: Node,
    source: Optional[str],
    strict: bool,
    *,
    seen: set[int],
) -> None:
    """Reject binary values and, when *strict*, keys written twice in one mapping."""
    if id(node) in seen:
        return
    seen.add(id(node))

    if isinstance(node, ScalarNode):
        if node.tag == _BINARY_TAG:
            raise MalformedRecord("binary values are not supported", file=source, line=_line_of(node))
    elif isinstance(node, SequenceNode):
        for child in node.value:
            _check_nodes(loader, child, source, strict, seen=seen)
    elif isinstance(node, MappingNode):
        keys: set[Any] = set()
        for key_node, value_node in node.value:
            _check_nodes(loader, key_node, source, strict, seen=seen)
            _check_nodes(loader, value_node, source, strict, seen=seen)
            if not strict or key_node.tag == _MERGE_TAG or not isinstance(key_node, ScalarNode):
                continue
            key = loader.construct_object(key_node)
            if key in keys:
                raise MalformedRecord(
                    f"found duplicate key {key!r}",
                    file=source,
                    line=_line_of(key_node),
                )
            keys.add(key)

"""
Format-preserving updates of Helm values files.

Decoding a values file to plain dicts and dumping it again loses comments,
key order and quoting. Instead, ValuesDocument composes the YAML node tree
(PyYAML keeps the source position of every node), locates the scalar a
dot-delimited key addresses, and splices the new value into the original
text at that position. Everything outside the replaced scalars is written
back byte for byte.

Key paths:
    "image.tag"         mapping key "image", then mapping key "tag"
    "containers.0.tag"  numeric segments index into sequences (zero-based)

Missing path segments are an error; no structure is ever created. Paths
that pass through an alias (*name) are refused, since the value behind it
is shared with its anchor.
"""

import json
import logging
import re
from pathlib import Path
from typing import Mapping, Optional

import yaml
from yaml.nodes import MappingNode, Node, ScalarNode, SequenceNode

from promostep.errors import PatchError

logger = logging.getLogger(__name__)

# Anchor (&a) and tag (!!str) properties that precede a scalar's content
_NODE_PROPERTIES = re.compile(r"(?:[&!]\S*(?:\s+|$))*")

# Separation and ":" between a mapping key and its value
_VALUE_INDICATOR = re.compile(r"[ \t]*:")

# Characters that change meaning inside flow collections
_FLOW_INDICATORS = set(",[]{}")


def _double_quoted(value: str) -> str:
    # JSON strings are valid YAML double-quoted scalars
    return json.dumps(value, ensure_ascii=False)


def _is_plain_safe(value: str) -> bool:
    """Check whether value reads back as the same string when written unquoted."""
    if not value or value != value.strip() or "\n" in value:
        return False
    if _FLOW_INDICATORS.intersection(value):
        return False
    try:
        return yaml.safe_load(value) == value
    except yaml.YAMLError:
        return False


def render_scalar(value: str, style: Optional[str]) -> str:
    """
    Render value as a YAML scalar, keeping the original style where possible.

    Plain scalars stay plain unless the value would read back as something
    else (a number, a boolean, a mapping...), in which case it is double
    quoted. Quoted scalars keep their quote character. Block scalars are
    rewritten as double-quoted flow scalars.
    """
    if style == "'" and "\n" not in value:
        return "'" + value.replace("'", "''") + "'"
    if style is None and _is_plain_safe(value):
        return value
    return _double_quoted(value)


class ValuesDocument:
    """
    A YAML document that supports reading and replacing scalars by key path.

    Edits are recorded against the source positions of the parsed tree and
    only applied by render(), so a failing set() leaves nothing half-done.
    """

    def __init__(self, text: str):
        self.text = text
        self.root: Optional[Node] = yaml.compose(text, Loader=yaml.SafeLoader)
        # start index -> (end index, replacement)
        self._edits: dict[int, tuple[int, str]] = {}

    def _find(self, key: str) -> tuple[Node, Optional[ScalarNode]]:
        """
        Locate the node at key.

        Returns:
            The node and, when its parent is a mapping, the key node it
            belongs to

        Raises:
            ValueError: If a segment is missing or the path passes through
                an alias
        """
        node, owner = self.root, None
        for segment in key.split("."):
            if isinstance(node, MappingNode):
                for key_node, value_node in node.value:
                    if isinstance(key_node, ScalarNode) and key_node.value == segment:
                        child, owner, floor = value_node, key_node, key_node.end_mark.index
                        break
                else:
                    raise ValueError(f"key path {key!r} not found: no key {segment!r}")
            elif isinstance(node, SequenceNode):
                if not segment.isdigit() or int(segment) >= len(node.value):
                    raise ValueError(f"key path {key!r} not found: no index {segment!r}")
                index = int(segment)
                child, owner = node.value[index], None
                floor = node.value[index - 1].end_mark.index if index else node.start_mark.index
            else:
                raise ValueError(f"key path {key!r} not found: {segment!r} is not inside a mapping or sequence")

            # composed aliases are the anchored node, which sits before its use
            if child.start_mark.index < floor:
                raise ValueError(f"key path {key!r} reaches {segment!r} through an alias")
            node = child
        return node, owner

    def _find_scalar(self, key: str) -> tuple[ScalarNode, Optional[ScalarNode]]:
        node, owner = self._find(key)
        if not isinstance(node, ScalarNode):
            raise ValueError(f"key path {key!r} does not address a scalar")
        return node, owner

    def get(self, key: str) -> str:
        """Return the scalar at key as it appears in the source document."""
        return self._find_scalar(key)[0].value

    def set(self, key: str, value: str) -> None:
        """Replace the scalar at key with value."""
        node, owner = self._find_scalar(key)
        start, end = node.start_mark.index, node.end_mark.index

        if start == end:
            position, replacement = self._fill_empty(node, owner, value)
            self._edits[position] = (position, replacement)
            return

        span = self.text[start:end]
        prefix = _NODE_PROPERTIES.match(span).group(0)
        body = span[len(prefix):]
        if prefix and not prefix[-1].isspace():
            # properties with no content, e.g. "tag: !!str"
            prefix += " "
        replacement = prefix + render_scalar(value, node.style)
        if node.style in ("|", ">"):
            # the block scalar span swallows its trailing line breaks
            replacement += body[len(body.rstrip()):]

        self._edits[start] = (end, replacement)

    def _fill_empty(self, node: ScalarNode, owner: Optional[ScalarNode], value: str) -> tuple[int, str]:
        """
        Build the edit for a scalar with no text at all ("tag:" or "- ").

        The parser marks such a scalar at a single position, which need not
        be the key's value indicator, so the value is placed after the ":"
        of its key when there is one.

        Returns:
            (insertion index, text to insert)
        """
        position = node.start_mark.index
        if owner is not None:
            colon = _VALUE_INDICATOR.match(self.text, owner.end_mark.index)
            if colon:
                position = colon.end()

        rendered = render_scalar(value, None)
        following = self.text[position:position + 2]
        # reuse one separating space unless a comment needs it
        if following[:1] == " " and following[1:] not in ("#", " "):
            return position + 1, rendered
        return position, " " + rendered

    @property
    def changed(self) -> bool:
        return bool(self._edits)

    def render(self) -> str:
        """Return the document text with every recorded edit applied."""
        text = self.text
        for start in sorted(self._edits, reverse=True):
            end, replacement = self._edits[start]
            text = text[:start] + replacement + text[end:]
        return text


def _check_read_back(rendered: str, changes: Mapping[str, str]) -> None:
    """Raise ValueError unless every key in rendered holds its new value."""
    document = ValuesDocument(rendered)
    for key, value in changes.items():
        actual = document.get(key)
        if actual != value:
            raise ValueError(f"key path {key!r} reads back as {actual!r} instead of {value!r}")


def update_values_file(values_path: Path, changes: Mapping[str, str]) -> None:
    """
    Apply changes to the values file at values_path.

    An empty changes mapping is a strict no-op: the file is not read, not
    rewritten and not required to exist. Otherwise every key must address
    an existing scalar; the file is only written once all of them resolved
    and the rendered text reads every key back as its new value.

    Args:
        values_path: Path of the YAML values file
        changes: key path -> new value

    Raises:
        PatchError: If the file is missing, unparsable, a key does not
            resolve, or the file cannot be written
    """
    if not changes:
        logger.info("No changes for %s, leaving it untouched", values_path)
        return

    try:
        # bytes in, bytes out: no newline translation
        text = Path(values_path).read_bytes().decode("utf-8")
        document = ValuesDocument(text)
        for key, value in changes.items():
            document.set(key, value)
        rendered = document.render()
        _check_read_back(rendered, changes)
        Path(values_path).write_bytes(rendered.encode("utf-8"))
    except (OSError, yaml.YAMLError, ValueError) as e:
        raise PatchError(f"values file update failed: {e}") from e

    logger.info(
        "Updated %d key(s) in %s", len(changes), values_path,
        extra={"event": "values_updated", "metadata": {"keys": sorted(changes)}},
    )

"""Commit message generation for values file updates."""

from typing import Mapping


def generate_commit_message(path: str, changes: Mapping[str, str]) -> str:
    """
    Summarise changes to the values file at path.

    Entries are sorted by key so the message is deterministic. No changes
    yield an empty string.

    Example:
        Updated charts/app/values.yaml

        - image.tag: "1.19.0"
    """
    if not changes:
        return ""

    lines = [f"Updated {path}", ""]
    for key in sorted(changes):
        lines.append(f'- {key}: "{changes[key]}"')
    return "\n".join(lines)

"""
Artifact utility functions.

Assistant replies embed standalone documents as
``<artifact identifier="..." type="..." title="...">body</artifact>``.
These helpers split such a reply into display text and artifacts.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass, field
from typing import Optional

from core.constants import DEFAULT_ARTIFACT_TITLE, DEFAULT_ARTIFACT_TYPE
from core.models import Artifact, Message

ARTIFACT_PATTERN = re.compile(r"<artifact\s+([^>]*)>([\s\S]*?)</artifact>")


def _attribute_pattern(name: str) -> re.Pattern:
    # The closing quote must match the opening one
    return re.compile(rf"\b{name}\s*=\s*([\"'])((?:(?!\1).)+)\1")


_IDENTIFIER = _attribute_pattern("identifier")
_TYPE = _attribute_pattern("type")
_TITLE = _attribute_pattern("title")
_LANGUAGE = _attribute_pattern("language")


@dataclass
class ExtractionResult:
    """Display text with artifact regions removed, plus the artifacts found."""

    clean_text: str
    artifacts: list[Artifact] = field(default_factory=list)


def _attribute(pattern: re.Pattern, attributes: str) -> Optional[str]:
    match = pattern.search(attributes)
    return html.unescape(match.group(2)) if match else None


def _unique_id(identifier: str, seen: set[str]) -> str:
    if identifier not in seen:
        return identifier
    counter = 2
    while f"{identifier}-{counter}" in seen:
        counter += 1
    return f"{identifier}-{counter}"


def extract_artifacts(text: str) -> ExtractionResult:
    """
    Split assistant text into clean text and artifacts.

    Every matched region is removed from the text. Regions without an
    ``identifier`` attribute produce no artifact. Unterminated tags do not
    match and are left in place.

    Args:
        text: Raw assistant reply

    Returns:
        ExtractionResult with artifacts in source order
    """
    if not text:
        return ExtractionResult(clean_text="")

    artifacts: list[Artifact] = []
    seen: set[str] = set()

    for match in ARTIFACT_PATTERN.finditer(text):
        attributes, body = match.group(1), match.group(2)
        identifier = _attribute(_IDENTIFIER, attributes)
        if not identifier:
            continue
        artifact_id = _unique_id(identifier, seen)
        seen.add(artifact_id)
        artifacts.append(
            Artifact(
                id=artifact_id,
                type=_attribute(_TYPE, attributes) or DEFAULT_ARTIFACT_TYPE,
                title=_attribute(_TITLE, attributes) or DEFAULT_ARTIFACT_TITLE,
                language=_attribute(_LANGUAGE, attributes),
                content=body.strip(),
            )
        )

    clean_text = ARTIFACT_PATTERN.sub("", text).strip()
    return ExtractionResult(clean_text=clean_text, artifacts=artifacts)


def wrap_artifact(
    identifier: str,
    body: str,
    type: str = DEFAULT_ARTIFACT_TYPE,
    title: str = DEFAULT_ARTIFACT_TITLE,
    language: Optional[str] = None,
) -> str:
    """Render an artifact in the tagged form ``extract_artifacts`` accepts."""
    attributes = [
        f'identifier="{html.escape(identifier)}"',
        f'type="{html.escape(type)}"',
        f'title="{html.escape(title)}"',
    ]
    if language:
        attributes.append(f'language="{html.escape(language)}"')
    return f"<artifact {' '.join(attributes)}>\n{body}\n</artifact>"


def message_artifacts(message: Message) -> list[Artifact]:
    """Artifacts stored on the message first, then any found in its text."""
    artifacts = list(message.artifacts)
    known = {artifact.id for artifact in artifacts}
    for artifact in extract_artifacts(message.content).artifacts:
        if artifact.id not in known:
            artifacts.append(artifact)
            known.add(artifact.id)
    return artifacts


# ----- Downloads -----

_CODE_EXTENSIONS = {
    "python": "py",
    "javascript": "js",
    "typescript": "ts",
    "jsx": "jsx",
    "tsx": "tsx",
    "html": "html",
    "css": "css",
    "json": "json",
    "java": "java",
    "c": "c",
    "cpp": "cpp",
    "csharp": "cs",
    "go": "go",
    "rust": "rs",
    "ruby": "rb",
    "php": "php",
    "swift": "swift",
    "kotlin": "kt",
    "sql": "sql",
    "bash": "sh",
    "shell": "sh",
    "yaml": "yml",
    "xml": "xml",
}

_TYPE_EXTENSIONS = {
    "text/markdown": "md",
    "text/html": "html",
    "image/svg+xml": "svg",
    "application/vnd.ant.mermaid": "mmd",
}


def artifact_extension(artifact: Artifact) -> str:
    """File extension (without dot) used when saving an artifact."""
    if artifact.type == "application/vnd.ant.code":
        return _CODE_EXTENSIONS.get((artifact.language or "").lower(), "txt")
    return _TYPE_EXTENSIONS.get(artifact.type, "txt")


def artifact_filename(artifact: Artifact) -> str:
    """Safe download filename built from the artifact title."""
    stem = re.sub(r"[^\w\-. ]", "_", artifact.title or "").strip(" .")
    stem = re.sub(r"\s+", "_", stem)
    return f"{stem or 'artifact'}.{artifact_extension(artifact)}"

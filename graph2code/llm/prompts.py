"""Prompt merging for models without a system role, plus reference-source augmentation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Protocol

logger = logging.getLogger(__name__)

MERGE_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class SourceMaterial:
    path: str
    text: str


class SourceMaterialProvider(Protocol):
    """Supplies auxiliary reference text to attach to outgoing content."""

    def collect(self) -> list[SourceMaterial]: ...


class FileSourceMaterialProvider:
    """Reads reference source files from disk on every collection."""

    def __init__(self, paths: Iterable[Path | str]) -> None:
        self.paths = tuple(Path(path) for path in paths)

    def collect(self) -> list[SourceMaterial]:
        materials: list[SourceMaterial] = []
        for path in self.paths:
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Skipping unreadable reference source %s: %s", path, exc)
                continue
            if text.strip():
                materials.append(SourceMaterial(path=str(path), text=text))
        return materials


def merge_prompts(user_content: str, system_content: str) -> str:
    """Fold system instructions into the user content, at most once."""
    if not system_content:
        return user_content
    prefix = f"{system_content}{MERGE_SEPARATOR}"
    if user_content.startswith(prefix):
        return user_content
    return f"{prefix}{user_content}"


def render_source_materials(materials: list[SourceMaterial]) -> str:
    blocks = [
        f'<source path="{material.path}">\n{material.text.rstrip()}\n</source>'
        for material in materials
    ]
    return "<reference_sources>\n" + "\n".join(blocks) + "\n</reference_sources>"


class PromptMerger:
    def __init__(self, source_provider: SourceMaterialProvider | None = None) -> None:
        self.source_provider = source_provider

    def merge(self, user_content: str, system_content: str) -> str:
        return merge_prompts(user_content, system_content)

    def augment_with_source_material(self, content: str) -> str:
        """Prepend configured reference sources; identity when none are available."""
        if self.source_provider is None:
            return content
        materials = self.source_provider.collect()
        if not materials:
            return content
        logger.debug("Attaching %d reference source(s) to request content", len(materials))
        return f"{render_source_materials(materials)}{MERGE_SEPARATOR}{content}"

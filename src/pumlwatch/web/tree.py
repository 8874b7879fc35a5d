"""Folder tree of rendered diagrams for the index page."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class FileNode:
    """A folder or diagram in the index tree.

    ``path`` is the diagram name used in URLs (output-relative, no extension,
    forward slashes) and is empty for folders.
    """

    name: str
    path: str = ""
    is_folder: bool = False
    children: list[FileNode] = field(default_factory=list)


def list_diagrams(output_root: Path, extension: str = ".svg") -> list[str]:
    """Output-relative names (without extension) of every rendered diagram."""
    names = []
    if not output_root.is_dir():
        return names
    for dirpath, _dirnames, filenames in os.walk(output_root):
        for filename in filenames:
            if filename.endswith(extension):
                rel = (Path(dirpath) / filename).relative_to(output_root)
                names.append(rel.with_suffix("").as_posix())
    return names


def build_file_tree(names: list[str]) -> list[FileNode]:
    """Turn flat ``a/b/c`` names into a tree, folders first, then alphabetical."""
    root = FileNode(name="", is_folder=True)

    for name in names:
        parts = name.split("/")
        node = root
        for part in parts[:-1]:
            folder = next(
                (child for child in node.children if child.is_folder and child.name == part),
                None,
            )
            if folder is None:
                folder = FileNode(name=part, is_folder=True)
                node.children.append(folder)
            node = folder
        node.children.append(FileNode(name=parts[-1], path=name))

    _sort_tree(root)
    return root.children


def _sort_tree(node: FileNode) -> None:
    node.children.sort(key=lambda child: (not child.is_folder, child.name))
    for child in node.children:
        if child.is_folder:
            _sort_tree(child)

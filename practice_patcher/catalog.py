#!/usr/bin/env python3
"""
Hyper Demon Practice Patcher - Patch Catalog
============================================

Date: October 19, 2026
License: GNU General Public License v3.0 (GPL-3.0)

Description:
    Loads the tree of patches from JSON. Offsets and byte sequences are
    pure data, so they live in a catalog file next to the game instead of
    in code.

Catalog Format:
    {
      "name": "practice",
      "description": "All practice patches",
      "patches": [
        {"name": "beef", "location": "0x2", "before": "be ef", "after": "fa ce"},
        {"name": "timer", "patches": [ ...nested entries... ]}
      ]
    }

    An entry holding a "patches" list is a group, anything else is a single
    descriptor. Byte strings are hex (whitespace ignored); locations are
    integers or strings in any base int(x, 0) accepts.

Classes:
    CatalogError(Exception) - Malformed catalog data

Functions:
    node_from_dict(data: Dict[str, Any]) -> PatchNode
    load_catalog(filepath: Path) -> CompositePatch
    format_tree(node: PatchNode) -> str

Variables (Module-level):
    logger: logging.Logger - Module logger
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from .patch import CompositePatch, PatchDescriptor, PatchNode

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Raised when a catalog file cannot be read or is malformed"""
    pass


def _parse_location(value: Any, where: str) -> int:
    if isinstance(value, bool):
        raise CatalogError(f"{where}: location must be an integer, got {value!r}")
    if isinstance(value, int):
        location = value
    elif isinstance(value, str):
        try:
            location = int(value, 0)
        except ValueError:
            raise CatalogError(f"{where}: invalid location {value!r}")
    else:
        raise CatalogError(f"{where}: location must be an integer, got {value!r}")

    if location < 0:
        raise CatalogError(f"{where}: location must not be negative ({location})")
    return location


def _parse_bytes(value: Any, where: str, key: str) -> bytes:
    if not isinstance(value, str):
        raise CatalogError(f"{where}: '{key}' must be a hex string")
    try:
        return bytes.fromhex(value)
    except ValueError:
        raise CatalogError(f"{where}: '{key}' is not valid hex: {value!r}")


def node_from_dict(data: Dict[str, Any], where: str = "catalog") -> PatchNode:
    """Build a descriptor or group from one catalog entry."""
    if not isinstance(data, dict):
        raise CatalogError(f"{where}: entry must be an object, got {type(data).__name__}")

    name = str(data.get("name", ""))
    description = str(data.get("description", ""))
    if name:
        where = f"{where}/{name}"

    if "patches" in data:
        entries = data["patches"]
        if not isinstance(entries, list):
            raise CatalogError(f"{where}: 'patches' must be a list")
        members = [node_from_dict(entry, f"{where}[{i}]") for i, entry in enumerate(entries)]
        return CompositePatch(members=tuple(members), name=name, description=description)

    missing = [key for key in ("location", "before", "after") if key not in data]
    if missing:
        raise CatalogError(f"{where}: missing {', '.join(missing)}")

    return PatchDescriptor(
        location=_parse_location(data["location"], where),
        before=_parse_bytes(data["before"], where, "before"),
        after=_parse_bytes(data["after"], where, "after"),
        name=name,
        description=description,
    )


def load_catalog(filepath: Path) -> CompositePatch:
    """Load a catalog file; the root is always returned as a group."""
    filepath = Path(filepath)
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise CatalogError(f"Cannot read catalog {filepath}: {e}") from e
    except json.JSONDecodeError as e:
        raise CatalogError(f"Catalog {filepath} is not valid JSON: {e}") from e
    except UnicodeDecodeError as e:
        raise CatalogError(f"Catalog {filepath} is not valid UTF-8: {e}") from e

    if isinstance(data, list):
        data = {"name": filepath.stem, "patches": data}

    root = node_from_dict(data)
    if isinstance(root, PatchDescriptor):
        root = CompositePatch.of(root, name=root.name)

    count = sum(1 for _ in root.descriptors())
    logger.info(f"Loaded catalog '{root.label}' from {filepath} ({count} patches)")
    return root


def format_tree(node: PatchNode, indent: int = 0) -> str:
    """Render the catalog as an indented listing for the console."""
    lines: List[str] = []
    pad = "  " * indent
    if isinstance(node, CompositePatch):
        lines.append(f"{pad}{node.label}")
        for member in node.members:
            lines.append(format_tree(member, indent + 1))
    else:
        lines.append(f"{pad}- {node.label} @ 0x{node.location:08X} "
                     f"[{node.before.hex(' ')}] -> [{node.after.hex(' ')}]")
    return "\n".join(lines)

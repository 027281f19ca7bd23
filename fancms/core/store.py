"""
JSON document store - each document is one file holding one top-level array.

The store is schema-agnostic: it loads and persists plain lists of dicts.
It does not serialize concurrent mutations of the same document; callers that
need that take the per-document lock in ``fancms.core.dao``.
"""

import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Union

from util.logging import logger
from .errors import MalformedDocumentError

Record = Dict[str, Any]
Transform = Callable[[List[Record]], List[Record]]


class JsonStore:
    """Read/modify/write access to named JSON documents under a root directory."""

    def __init__(self, root: Union[str, Path] = "."):
        self.root = Path(root)

    def resolve(self, path: str) -> Path:
        """Absolute location of a document path such as ``data/posts.json``."""
        return (self.root / path).resolve()

    def load(self, path: str) -> List[Record]:
        """Load a document. A missing file is an empty collection."""
        absolute_path = self.resolve(path)
        try:
            with open(absolute_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            return []

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.log_store_operation("load", path, status="failed", details={"error": str(e)})
            raise MalformedDocumentError(path, str(e)) from e

        if not isinstance(data, list):
            raise MalformedDocumentError(path, f"expected a top-level array, got {type(data).__name__}")
        return data

    def write(self, path: str, records: List[Record]) -> None:
        """Overwrite a document atomically (temp file + rename)."""
        absolute_path = self.resolve(path)
        absolute_path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = absolute_path.with_name(absolute_path.name + ".tmp")

        try:
            with open(temp_path, 'w', encoding='utf-8') as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
            os.replace(temp_path, absolute_path)
        except Exception:
            # Clean up temp file on error
            try:
                temp_path.unlink()
            except FileNotFoundError:
                pass
            raise

    def mutate(self, path: str, transform: Transform) -> List[Record]:
        """
        Load a document, apply ``transform`` and persist its result.

        If ``transform`` raises, nothing is written and the exception propagates
        unchanged. The returned list is exactly what was written.
        """
        records = self.load(path)
        updated = transform(records)
        if not isinstance(updated, list):
            raise TypeError(f"transform for {path} must return a list, got {type(updated).__name__}")

        self.write(path, updated)
        logger.log_store_operation("mutate", path, record_count=len(updated))
        return updated

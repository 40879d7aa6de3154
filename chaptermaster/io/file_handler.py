"""Reading and writing project files: premises, story bible JSON, YAML config and documents."""

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Dict, Union

import yaml
from docx import Document as DocxDocument


def slugify(name: str) -> str:
    """Lowercase a name and replace every non-alphanumeric character with '-'."""
    return re.sub(r'[^a-z0-9]', '-', name.lower())


class FileHandler:
    """Project file access. JSON writes go through a temp file and a rename."""

    def read_file(self, file_path: Union[str, Path]) -> str:
        """Read a premise or other text file; .docx files are read paragraph by paragraph."""
        path = Path(file_path)

        if path.suffix.lower() == '.docx':
            return self._read_docx(path)
        else:
            # Markdown and anything else is plain text
            return path.read_text(encoding='utf-8')

    def write_file(self, file_path: Union[str, Path], content: str) -> Path:
        """Write a Markdown document, creating parent folders."""
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding='utf-8')
        return path

    def read_json(self, file_path: Union[str, Path]) -> Dict[str, Any]:
        """Load a JSON document such as the story bible."""
        path = Path(file_path)
        with path.open('r', encoding='utf-8') as f:
            return json.load(f)

    def write_json(self, file_path: Union[str, Path], data: Dict[str, Any]) -> Path:
        """Write JSON file atomically.

        The document is written to a temporary file in the same directory
        and renamed over the target, so readers see either the old or the
        new document, never a partial one.
        """
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.write('\n')
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        return path

    def read_yaml(self, file_path: Union[str, Path]) -> Dict[str, Any]:
        """Load a YAML mapping such as the project config."""
        path = Path(file_path)
        with path.open('r', encoding='utf-8') as f:
            return yaml.safe_load(f)

    def write_yaml(self, file_path: Union[str, Path], data: Dict[str, Any]) -> Path:
        """Dump a mapping as block-style YAML."""
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open('w', encoding='utf-8') as f:
            yaml.dump(data, f, default_flow_style=False)
        return path

    def _read_docx(self, path: Path) -> str:
        """Join the paragraphs of a Word document with newlines."""
        doc = DocxDocument(path)
        return '\n'.join(paragraph.text for paragraph in doc.paragraphs)

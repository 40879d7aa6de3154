"""Configuration and logging setup for Chapter Master."""

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from dotenv import load_dotenv

from .io.file_handler import FileHandler

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".chaptermaster.yaml"
STORY_BIBLE_DIR = "story-bible"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


@dataclass
class Config:
    """Central configuration for the application."""
    # API Settings
    api_key: str = field(default_factory=lambda: os.getenv('ANTHROPIC_API_KEY', ''))
    max_retries: int = 3
    request_timeout: float = 600.0

    # Model per role: "main" for creative generation, "research" for analysis
    models: Dict[str, str] = field(default_factory=lambda: {
        "main": "claude-opus-4-20250514",
        "research": "claude-sonnet-4-20250514",
    })

    max_tokens: Dict[str, int] = field(default_factory=lambda: {
        "main": 8000,
        "research": 4000,
    })

    # Seconds allowed for the advisory consistency analysis
    analysis_timeout: float = 120.0

    log_level: str = "WARNING"
    log_file: Optional[str] = None

    def model_for(self, role: str) -> str:
        """Get the model configured for a role."""
        return self.models.get(role, self.models["main"])

    def max_tokens_for(self, role: str) -> int:
        """Get the token budget configured for a role."""
        return self.max_tokens.get(role, self.max_tokens["main"])

    def update(self, values: Dict[str, Any]) -> None:
        """Apply values from a configuration file."""
        for key, value in values.items():
            if not hasattr(self, key):
                logger.warning(f"Ignoring unknown configuration key: {key}")
                continue
            current = getattr(self, key)
            if isinstance(current, dict) and isinstance(value, dict):
                current.update(value)
            else:
                setattr(self, key, value)

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> "Config":
        """Load configuration from defaults, the project YAML file and the environment."""
        load_dotenv()
        config = cls()

        if project_root:
            config_path = Path(project_root) / CONFIG_FILE_NAME
            if config_path.exists():
                values = FileHandler().read_yaml(config_path) or {}
                config.update(values)
                logger.debug(f"Loaded configuration from {config_path}")

        # Environment wins over the file
        if os.getenv('ANTHROPIC_API_KEY'):
            config.api_key = os.environ['ANTHROPIC_API_KEY']
        if os.getenv('CHAPTERMASTER_MAIN_MODEL'):
            config.models["main"] = os.environ['CHAPTERMASTER_MAIN_MODEL']
        if os.getenv('CHAPTERMASTER_RESEARCH_MODEL'):
            config.models["research"] = os.environ['CHAPTERMASTER_RESEARCH_MODEL']
        if os.getenv('CHAPTERMASTER_LOG_LEVEL'):
            config.log_level = os.environ['CHAPTERMASTER_LOG_LEVEL']

        return config


def find_project_root(start: Optional[Union[str, Path]] = None) -> Path:
    """Find the project root for the current invocation.

    An explicit CHAPTERMASTER_PROJECT_ROOT wins. Otherwise walk up from
    ``start`` looking for a story bible directory or a config file, and
    fall back to ``start`` itself.
    """
    env_root = os.getenv('CHAPTERMASTER_PROJECT_ROOT')
    if env_root:
        return Path(env_root).resolve()

    current = Path(start or Path.cwd()).resolve()
    for candidate in [current, *current.parents]:
        if (candidate / STORY_BIBLE_DIR).is_dir() or (candidate / CONFIG_FILE_NAME).exists():
            return candidate
    return current


def setup_logging(level: Union[str, int] = "INFO", log_file: Optional[str] = None) -> None:
    """Configure root logging.

    Log records go to stderr so the MCP stdio transport stays clean.
    """
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )

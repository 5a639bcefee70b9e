import json
import os
from dataclasses import dataclass
from typing import Optional

from doctree.component import DEFAULT_COMPONENT_NAME

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
SETTINGS_PATH = os.path.join(PROJECT_ROOT, "config", "settings.json")
DOCS_ROOT_ENV = "DOCTREE_DOCS_ROOT"


@dataclass
class Settings:
    docs_root: str
    component: str = DEFAULT_COMPONENT_NAME
    host: str = "127.0.0.1"
    port: int = 8000


def _resolve_path(base: str, relative: str) -> str:
    return os.path.abspath(os.path.join(base, relative))


def load_settings(path: Optional[str] = None) -> Settings:
    """Load renderer settings from config/settings.json.

    Relative paths are resolved against the directory holding the ``config``
    folder. The ``DOCTREE_DOCS_ROOT`` environment variable overrides ``docs_root``.
    """
    settings_path = path or SETTINGS_PATH
    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(settings_path)))
    settings = Settings(docs_root=_resolve_path(base_dir, "docs"))

    if not os.path.exists(settings_path):
        print(f"Warning: settings.json not found at {settings_path}")
    else:
        try:
            with open(settings_path, "r", encoding="utf-8") as settings_file:
                raw = json.load(settings_file) or {}

            docs_rel = raw.get("docs_root")
            if docs_rel:
                settings.docs_root = _resolve_path(base_dir, docs_rel)
            if raw.get("component"):
                settings.component = str(raw["component"])
            if raw.get("host"):
                settings.host = str(raw["host"])
            if raw.get("port"):
                settings.port = int(raw["port"])
        except (ValueError, TypeError, OSError) as exc:
            print(f"Warning: Could not load settings from {settings_path}: {exc}")

    env_root = os.environ.get(DOCS_ROOT_ENV)
    if env_root:
        settings.docs_root = os.path.abspath(env_root)

    if not os.path.isdir(settings.docs_root):
        print(f"Warning: documentation root does not exist or is not a directory: {settings.docs_root}")

    return settings

"""Repo-local configuration stored at <repo-root>/.gwt/config.

Two schema versions exist:

    1.0  {"version": "1.0", "ide": "idea"}
    2.0  {"version": "2.0", "editor": {"type": "custom", "command": "code"},
          "filesToCopy": [".env*"], "checkForUpdates": true}

Version 1.0 documents are upgraded on load; only 2.0 is ever written.
"""

import json
from dataclasses import dataclass, field, replace
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Any, List, Optional, Union

from .constants import CONFIG_DIR, CONFIG_FILE, CONFIG_VERSION, CONFIG_VERSION_V1
from .exceptions import (
    ConfigError,
    InvalidConfigVersionError,
    InvalidFilePatternError,
    NotInGitRepoError,
)
from .git_utils import get_repo_root, is_git_repo
from .logging_config import get_logger

logger = get_logger(__name__)

EDITOR_TYPE_CUSTOM = "custom"
EDITOR_TYPE_NONE = "none"
EDITOR_TYPES = (EDITOR_TYPE_CUSTOM, EDITOR_TYPE_NONE)

# Early 2.0 documents used a dedicated type for JetBrains IDEs
_LEGACY_EDITOR_TYPES = {"jetbrains": EDITOR_TYPE_CUSTOM}


@dataclass(frozen=True)
class EditorConfig:
    type: str = EDITOR_TYPE_NONE
    command: Optional[str] = None


@dataclass(frozen=True)
class ConfigV1:
    ide: str
    version: str = CONFIG_VERSION_V1


@dataclass(frozen=True)
class Config:
    editor: EditorConfig = field(default_factory=EditorConfig)
    files_to_copy: List[str] = field(default_factory=list)
    check_for_updates: Optional[bool] = None
    version: str = CONFIG_VERSION


AnyConfig = Union[ConfigV1, Config]


def migrate_config(config: AnyConfig) -> Config:
    """
    Upgrade a config of any version to the current (2.0) schema.

    Returns a new value; the input is never modified. A 2.0 config is returned as is.
    """
    if isinstance(config, Config):
        return config

    if config.ide:
        editor = EditorConfig(type=EDITOR_TYPE_CUSTOM, command=config.ide)
    else:
        editor = EditorConfig(type=EDITOR_TYPE_NONE)
    return Config(editor=editor, files_to_copy=[])


def _editor_from_dict(data: Any) -> EditorConfig:
    if not isinstance(data, dict):
        raise ConfigError("'editor' must be an object")

    editor_type = data.get("type", EDITOR_TYPE_NONE)
    editor_type = _LEGACY_EDITOR_TYPES.get(editor_type, editor_type)
    if editor_type not in EDITOR_TYPES:
        raise ConfigError(f"Unknown editor type: {editor_type}")

    command = data.get("command")
    if command is not None and not isinstance(command, str):
        raise ConfigError("'editor.command' must be a string")
    return EditorConfig(type=editor_type, command=command or None)


def config_from_dict(data: Any) -> AnyConfig:
    """
    Build a typed config from a decoded JSON document.

    Documents lacking `editor` or `filesToCopy` are treated as version 1.0,
    with or without an explicit version field.

    Raises:
        InvalidConfigVersionError: If the document declares an unknown version
        ConfigError: If the document is not a valid config object
    """
    if not isinstance(data, dict):
        raise ConfigError("Config must be a JSON object")

    version = data.get("version")
    if version is not None and version not in (CONFIG_VERSION_V1, CONFIG_VERSION):
        raise InvalidConfigVersionError(str(version))

    if "editor" not in data or "filesToCopy" not in data:
        ide = data.get("ide") or ""
        if not isinstance(ide, str):
            raise ConfigError("'ide' must be a string")
        return ConfigV1(ide=ide)

    files = data["filesToCopy"]
    if not isinstance(files, list) or not all(isinstance(item, str) for item in files):
        raise ConfigError("'filesToCopy' must be a list of strings")

    check = data.get("checkForUpdates")
    if check is not None and not isinstance(check, bool):
        raise ConfigError("'checkForUpdates' must be a boolean")

    return Config(
        editor=_editor_from_dict(data["editor"]),
        files_to_copy=list(files),
        check_for_updates=check,
    )


def config_to_dict(config: Config) -> dict[str, Any]:
    """Serialize a config to its 2.0 JSON shape."""
    editor: dict[str, Any] = {"type": config.editor.type}
    if config.editor.command:
        editor["command"] = config.editor.command

    data: dict[str, Any] = {
        "version": CONFIG_VERSION,
        "editor": editor,
        "filesToCopy": list(config.files_to_copy),
    }
    if config.check_for_updates is not None:
        data["checkForUpdates"] = config.check_for_updates
    return data


def validate_file_pattern(pattern: str) -> None:
    """
    Reject filesToCopy entries that could escape the repository.

    Raises:
        InvalidFilePatternError: For empty, absolute or parent-relative patterns
    """
    stripped = pattern.strip()
    if not stripped:
        raise InvalidFilePatternError(pattern)
    if PurePosixPath(stripped).is_absolute() or PureWindowsPath(stripped).is_absolute():
        raise InvalidFilePatternError(pattern)
    if ".." in PurePosixPath(stripped.replace("\\", "/")).parts:
        raise InvalidFilePatternError(pattern)


def get_config_path(cwd: Optional[Path] = None) -> Optional[Path]:
    """
    Get the path to the config file.

    Returns:
        <repo-root>/.gwt/config, or None when cwd is not inside a git repository
    """
    if not is_git_repo(cwd):
        return None
    return get_repo_root(cwd) / CONFIG_DIR / CONFIG_FILE


def load_config(cwd: Optional[Path] = None) -> Optional[Config]:
    """
    Load the configuration, upgrading old schema versions.

    Returns:
        The config, or None outside a repository, when the file does not exist
        or when it cannot be parsed

    Raises:
        InvalidConfigVersionError: If the file declares an unsupported version
    """
    config_path = get_config_path(cwd)
    if config_path is None or not config_path.exists():
        return None

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
        config = config_from_dict(data)
    except (OSError, json.JSONDecodeError, ConfigError) as e:
        logger.warning("Ignoring unreadable config %s: %s", config_path, e)
        return None

    if isinstance(config, ConfigV1):
        logger.info("Migrating config %s from version %s", config_path, config.version)
    return migrate_config(config)


def save_config(config: AnyConfig, cwd: Optional[Path] = None) -> Path:
    """
    Save the configuration in the current schema version.

    Args:
        config: Config to persist; version 1.0 values are upgraded first
        cwd: Directory inside the repository

    Returns:
        Path of the written file

    Raises:
        NotInGitRepoError: If cwd is not inside a git repository
        InvalidFilePatternError: If a filesToCopy entry is invalid
    """
    config_path = get_config_path(cwd)
    if config_path is None:
        raise NotInGitRepoError()

    config = migrate_config(config)
    for pattern in config.files_to_copy:
        validate_file_pattern(pattern)

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(config_to_dict(config), indent=2) + "\n", encoding="utf-8")
    logger.debug("Saved config to %s", config_path)
    return config_path


def set_editor_command(command: str, cwd: Optional[Path] = None) -> Config:
    """
    Set the editor command, keeping all other settings.

    The value "none" disables editor launching.

    Returns:
        The saved config
    """
    command = command.strip()
    if not command:
        raise ConfigError("Editor command cannot be empty")

    if command == EDITOR_TYPE_NONE:
        editor = EditorConfig(type=EDITOR_TYPE_NONE)
    else:
        editor = EditorConfig(type=EDITOR_TYPE_CUSTOM, command=command)

    current = load_config(cwd) or Config()
    updated = replace(current, editor=editor)
    save_config(updated, cwd)
    return updated

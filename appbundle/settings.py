"""Bundle settings: loading, validation and the Settings provider.

Settings come from a dotenv-format bundle file overlaid by BUNDLE_*
environment variables. Raw values are sanitized before use so that nothing
read from disk can break the generated desktop entry or escape the
destination tree through the binary name.
"""

import glob
import os
import re

from dotenv import dotenv_values

from appbundle.debug import log
from appbundle.env import env_file


ENV_PREFIX = "BUNDLE_"

DEFAULT_BINARY_NAME = "app"
DEFAULT_DESCRIPTION = "No description"
DEFAULT_MIME_TYPES = ["application/x-app"]

GLOB_CHARS = "*?["

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off", ""}


class SettingsError(Exception):
    """Raised for bundle settings that cannot be used."""


class Settings:
    """Read-only view of the bundle configuration consumed by the stages."""

    def __init__(
        self,
        binary_name=DEFAULT_BINARY_NAME,
        bundle_name=None,
        short_description=DEFAULT_DESCRIPTION,
        icon_patterns=None,
        linux_mime_types=None,
        app_category=None,
        linux_exec_args=None,
        linux_use_terminal=False,
        base_dir=".",
    ):
        self.binary_name = binary_name
        self.bundle_name = bundle_name or binary_name
        self.short_description = short_description
        self.icon_patterns = list(icon_patterns or [])
        self.linux_mime_types = list(
            DEFAULT_MIME_TYPES if linux_mime_types is None else linux_mime_types
        )
        self.app_category = app_category
        self.linux_exec_args = linux_exec_args
        self.linux_use_terminal = linux_use_terminal
        self.base_dir = base_dir

    @classmethod
    def default(cls):
        return cls()

    def icon_files(self):
        """
        Yield the icon source paths named by the icon patterns, in pattern
        order. Glob patterns yield their sorted matches. A literal pattern
        naming a missing file yields a SettingsError in its place so that
        the consumer decides when to fail.
        """
        for pattern in self.icon_patterns:
            full_pattern = os.path.join(self.base_dir, pattern)
            if not any(c in pattern for c in GLOB_CHARS):
                if os.path.isfile(full_pattern):
                    yield full_pattern
                else:
                    yield SettingsError(f"Icon file not found: {full_pattern}")
                continue
            for path in sorted(glob.glob(full_pattern)):
                if os.path.isfile(path):
                    yield path

    def __repr__(self):
        return f"Settings(binary_name={self.binary_name!r}, bundle_name={self.bundle_name!r})"


def _strip_crlf(value: str) -> str:
    return re.sub(r"[\r\n]", "", value)


def _split_list(value) -> list:
    if value is None:
        return []
    return [item.strip() for item in str(value).split(",") if item.strip()]


def _parse_bool(value, default: bool) -> bool:
    if value is None:
        return default
    lowered = str(value).strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    log(f"settings: invalid boolean {value!r}, using {default}", "warn")
    return default


def _optional_text(value):
    if value is None:
        return None
    return _strip_crlf(str(value)).strip() or None


def _validate_binary_name(value) -> str:
    if value is None or not str(value).strip():
        return DEFAULT_BINARY_NAME
    name = str(value).strip()
    if "/" in name or "\\" in name or name in (".", ".."):
        raise SettingsError(f"Binary name {name!r} must be a plain file name")
    return _strip_crlf(name)


def _validate_mime_types(value) -> list:
    if value is None:
        return list(DEFAULT_MIME_TYPES)
    valid = []
    for mime in _split_list(_strip_crlf(str(value))):
        if "/" in mime and ";" not in mime:
            valid.append(mime)
        else:
            log(f"settings: invalid MIME type {mime!r}, skipping", "warn")
    return valid


def validate_settings(raw: dict) -> Settings:
    """Validate and sanitize raw settings values.

    Keys are the lowercase setting names without the BUNDLE_ prefix.
    Unknown keys are dropped.
    """
    description = raw.get("short_description")
    return Settings(
        binary_name=_validate_binary_name(raw.get("binary_name")),
        bundle_name=_optional_text(raw.get("name")),
        short_description=(
            DEFAULT_DESCRIPTION if description is None else _strip_crlf(description)
        ),
        icon_patterns=_split_list(raw.get("icon")),
        linux_mime_types=_validate_mime_types(raw.get("linux_mime_types")),
        app_category=_optional_text(raw.get("category")),
        linux_exec_args=_optional_text(raw.get("linux_exec_args")),
        linux_use_terminal=_parse_bool(raw.get("linux_use_terminal"), False),
        base_dir=raw.get("base_dir") or ".",
    )


def load_settings(path=None) -> Settings:
    """
    Load settings from a dotenv-format bundle file, then apply any BUNDLE_*
    environment variables on top. A missing file is not an error; relative
    icon patterns resolve against the file's directory.
    """
    path = path or env_file()
    raw = {}
    if os.path.isfile(path):
        log(f"Loading bundle settings from {path}", "debug")
        raw["base_dir"] = os.path.dirname(os.path.abspath(path))
        for key, value in dotenv_values(path).items():
            if key.startswith(ENV_PREFIX):
                raw[key[len(ENV_PREFIX):].lower()] = value
    else:
        log(f"Bundle settings file {path} not found, using environment only", "debug")

    for key, value in os.environ.items():
        if key.startswith(ENV_PREFIX):
            raw[key[len(ENV_PREFIX):].lower()] = value

    return validate_settings(raw)

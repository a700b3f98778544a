"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module is the settings store for oidc_client:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.oidc-client/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_data_dir`, :func:`get_clients_dir`.
* **Client configs** -- One JSON file per client, each deserialised into a
  :class:`~oidc_client.models.ClientConfig`. Managed via
  :func:`load_client_config`, :func:`save_client_config`,
  :func:`delete_client_config`; :func:`import_client_file` reads a client
  definition from a JSON or YAML file.
* **Global config** -- :class:`~oidc_client.models.GlobalConfig` defaults.
* **Credential resolution** -- a stored ``client_secret_source`` of
  ``env:VAR`` or ``file:/path`` is resolved by :func:`resolve_credential`
  when the client is loaded, so secrets need not live in the config file.

All file writes use an atomic temp-file-then-rename strategy.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from oidc_client.exceptions import ConfigError, NotFoundError
from oidc_client.models import ClientConfig, GlobalConfig

_APP_NAME = "oidc-client"
_CONFIG_FILENAME = "config.json"
_SECRET_SOURCE_KEY = "client_secret_source"

BASE_URL_ENV = "OIDC_CLIENT_BASE_URL"
DEFAULT_BASE_URL = "http://127.0.0.1:8400"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory layout (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/oidc-client/`` (default ``~/.config/oidc-client/``).
    On macOS/Windows: ``~/.oidc-client/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/oidc-client/`` (default ``~/.local/share/oidc-client/``).
    On macOS/Windows: ``~/.oidc-client/data/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_clients_dir() -> Path:
    """Return ``<config_dir>/clients/``, creating it if necessary."""
    path = get_config_dir() / "clients"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created next to *path* so ``os.replace`` is an
    atomic rename on POSIX. Client files hold secrets, so the result is
    readable by the owner only.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.chmod(tmp_path, 0o600)
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration, or defaults when none is saved.

    Raises:
        ConfigError: If the file exists but is invalid.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


def resolve_base_url(cli_base_url: Optional[str] = None) -> str:
    """Return the host base URL the callback path is appended to.

    Precedence: *cli_base_url* > ``$OIDC_CLIENT_BASE_URL`` > global config >
    :data:`DEFAULT_BASE_URL`.
    """
    if cli_base_url:
        return cli_base_url
    env_value = os.environ.get(BASE_URL_ENV)
    if env_value:
        return env_value
    return load_global_config().base_url or DEFAULT_BASE_URL


def resolve_scope(cli_scope: Optional[str] = None) -> str:
    """Return the scope to request: *cli_scope* if given, else the global default."""
    if cli_scope:
        return cli_scope
    return load_global_config().scope


# --- Client configs ---


def _client_path(name: str) -> Path:
    return get_clients_dir() / f"{name}.json"


def list_clients() -> list[str]:
    """Return the names of all stored clients, sorted."""
    return sorted(p.stem for p in get_clients_dir().glob("*.json") if p.is_file())


def client_exists(name: str) -> bool:
    return _client_path(name).is_file()


def parse_client_config(data: dict[str, Any]) -> ClientConfig:
    """Validate a raw client definition, resolving ``client_secret_source``.

    Args:
        data: Mapping with ``name``, ``label``, ``provider`` and ``settings``.

    Raises:
        ConfigError: If validation fails or the secret source cannot be read.
    """
    settings = dict(data.get("settings") or {})
    source = settings.pop(_SECRET_SOURCE_KEY, None)
    if source and not settings.get("client_secret"):
        settings["client_secret"] = resolve_credential(source)

    try:
        return ClientConfig.model_validate({**data, "settings": settings})
    except ValidationError as exc:
        raise ConfigError(f"Invalid client definition: {exc}") from exc


def load_client_config(name: str) -> ClientConfig:
    """Load a stored client by name.

    Raises:
        NotFoundError: If no client with *name* is stored.
        ConfigError: If the stored file is invalid.
    """
    path = _client_path(name)
    if not path.is_file():
        raise NotFoundError(f"Client '{name}' not found at {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid client file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid client file {path}: expected a JSON object")
    return parse_client_config(data)


def save_client_config(config: ClientConfig, secret_source: Optional[str] = None) -> Path:
    """Persist a client atomically.

    Args:
        config: The client to save; the file name is ``config.name``.
        secret_source: When given, ``client_secret`` is stored as this
            source descriptor instead of as a literal value.

    Returns:
        The path written.
    """
    data = config.model_dump(mode="json")
    if secret_source:
        data["settings"].pop("client_secret", None)
        data["settings"][_SECRET_SOURCE_KEY] = secret_source
    path = _client_path(config.name)
    _atomic_write(path, json.dumps(data, indent=2) + "\n")
    return path


def delete_client_config(name: str) -> None:
    """Delete a stored client.

    Raises:
        NotFoundError: If no client with *name* is stored.
    """
    path = _client_path(name)
    if not path.is_file():
        raise NotFoundError(f"Client '{name}' not found at {path}")
    path.unlink()


def import_client_file(path: str) -> tuple[dict[str, Any], ClientConfig]:
    """Read a client definition from a JSON or YAML file.

    The format is picked from the extension; unknown extensions are tried
    as JSON first, then YAML.

    Returns:
        The raw mapping (secret sources unresolved) and the validated config.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise ConfigError(f"Client file not found: {path}")
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read client file {path}: {exc}") from exc

    suffix = file_path.suffix.lower()
    try:
        if suffix == ".json":
            data = json.loads(content)
        else:
            # Valid JSON is also valid YAML.
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to parse client file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Client file {path} must contain an object")
    return data, parse_client_config(data)


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    raise ConfigError(f"Unknown credential source format: {source}")

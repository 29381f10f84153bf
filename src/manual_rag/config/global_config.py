"""manual_rag.config.global_config

Global configuration loader and accessors.

This module defines a lightweight wrapper around a raw YAML configuration
dictionary, providing validated, cached access to the configuration sections
used across the ingestion and answering pipelines.

Environment variables of the form ``${VAR}`` are expanded recursively in all
string values at load time.

Classes
-------
GlobalConfig
    Loader and accessor for global project configuration.

Functions
---------
configure_logging
    Apply the ``logging`` section to the root logger.
"""

import logging
import os
import re
import yaml
from pathlib import Path
from functools import cached_property

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_UNEXPANDED_RE = re.compile(r"\$\{[^}]*\}")


def _expand_env(obj):
    """Recursively expand environment variables in a nested structure.

    This function walks nested dictionaries and lists and applies
    :func:`os.path.expandvars` to any string values, expanding patterns of the
    form ``${VAR}`` using the current process environment.

    Parameters
    ----------
    obj : Any
        Object to expand. Supported types are dictionaries, lists, and strings.
        Other types are returned unchanged.

    Returns
    -------
    Any
        A structure of the same shape as ``obj`` with environment variables
        expanded in all string values.
    """
    if isinstance(obj, dict):
        return {k: _expand_env(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_env(v) for v in obj]
    if isinstance(obj, str):
        return os.path.expandvars(obj)
    return obj


def _section(raw: dict, name: str, *, required: bool = False) -> dict:
    value = raw.get(name)
    if value is None:
        if required:
            raise KeyError(f"Missing '{name}' in configuration.")
        return {}
    if not isinstance(value, dict):
        raise TypeError(f"'{name}' must be a mapping, got {type(value)}.")
    return value


class GlobalConfig:
    """Loader and accessor for global project configuration.

    This class wraps a raw configuration dictionary (typically loaded from YAML)
    and exposes validated, cached accessors for the configuration sections.

    Parameters
    ----------
    raw : dict
        Raw configuration data as loaded from a YAML file.
    config_path : Path or None, optional
        Absolute path to the loaded config file, if known. Relative prompt
        paths are resolved against its directory.
    """

    def __init__(
            self,
            raw: dict,
            config_path: Path | None = None,
        ):
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise TypeError(f"Configuration root must be a mapping, got {type(raw)}.")
        self.raw = raw
        self.config_path = config_path

    @classmethod
    def load(
            cls,
            path: str | Path,
        ) -> "GlobalConfig":
        """Load configuration from a YAML file.

        Parameters
        ----------
        path : str or Path
            Path to the YAML configuration file.

        Returns
        -------
        GlobalConfig
            An instance initialised with the loaded and environment-expanded data.

        Notes
        -----
        All string values in the loaded YAML are processed with recursive
        environment-variable expansion (``${VAR}``) via :func:`os.path.expandvars`.
        References to unset variables are left as-is.
        """
        cfg_path = Path(path).expanduser().resolve()
        with cfg_path.open("r") as f:
            data = yaml.safe_load(f)
        data = _expand_env(data)
        return cls(data, config_path=cfg_path)

    @property
    def base_dir(self) -> Path | None:
        """Directory of the loaded config file, or ``None``."""
        return self.config_path.parent if self.config_path else None

    @cached_property
    def tenant_id(self) -> str:
        """Return the tenant every stored point and query is scoped to.

        Returns
        -------
        str
            The ``tenant_id`` value.

        Raises
        ------
        KeyError
            If ``tenant_id`` is missing.
        ValueError
            If ``tenant_id`` is empty or still contains an unexpanded ``${VAR}``
            reference.
        """
        tenant = self.raw.get("tenant_id")
        if tenant is None:
            raise KeyError("Missing 'tenant_id' in configuration.")
        tenant = str(tenant).strip()
        if not tenant:
            raise ValueError("'tenant_id' must be a non-empty string.")
        if _UNEXPANDED_RE.search(tenant):
            raise ValueError(
                f"'tenant_id' references an unset environment variable: {tenant!r}"
            )
        return tenant

    @cached_property
    def embedder(self) -> dict:
        """Return the embedder configuration section.

        Returns
        -------
        dict
            The ``embedder`` section of the configuration.

        Raises
        ------
        KeyError
            If ``embedder`` is missing.
        """
        return _section(self.raw, "embedder", required=True)

    @cached_property
    def vector_store(self) -> dict:
        """Return the vector-store configuration section.

        Returns
        -------
        dict
            The ``vector_store`` section, or an empty dict which connects to
            Qdrant on ``localhost:6333``.
        """
        return _section(self.raw, "vector_store")

    @cached_property
    def generator_llm(self) -> dict:
        """Return the generator LLM configuration section.

        Returns
        -------
        dict
            The ``generator_llm`` section of the configuration.

        Raises
        ------
        KeyError
            If ``generator_llm`` is missing.
        """
        return _section(self.raw, "generator_llm", required=True)

    @cached_property
    def segmenter(self) -> dict:
        """Return the ``segmenter`` section, or an empty dict."""
        return _section(self.raw, "segmenter")

    @cached_property
    def ranker(self) -> dict:
        """Return the ``ranker`` section, or an empty dict."""
        return _section(self.raw, "ranker")

    @cached_property
    def retriever(self) -> dict:
        """Return the retriever configuration section.

        Returns
        -------
        dict
            The ``retriever`` section of the configuration, or an empty dict if
            not present.

        Raises
        ------
        ValueError
            If ``retriever.top_k`` is present but not a positive integer.
        """
        section = _section(self.raw, "retriever")
        top_k = section.get("top_k")
        if top_k is not None and (isinstance(top_k, bool) or not isinstance(top_k, int) or top_k < 1):
            raise ValueError(f"'retriever.top_k' must be a positive integer, got {top_k!r}.")
        return section

    @cached_property
    def ingest(self) -> dict:
        """Return the ``ingest`` section (``batch_size``, ``max_metadata_chars``)."""
        return _section(self.raw, "ingest")

    @cached_property
    def api(self) -> dict:
        """Return the ``api`` section (``host``, ``port``, ``cors_origins``)."""
        return _section(self.raw, "api")

    @cached_property
    def logging(self) -> dict:
        """Return the ``logging`` section (``level``, ``format``)."""
        return _section(self.raw, "logging")

    @cached_property
    def prompts(self):
        """Return the prompts configuration entry.

        Returns
        -------
        str or list[str] or None
            The ``prompts`` entry, which may be a single source, a list of
            sources, or ``None`` if not configured.

        Notes
        -----
        This accessor returns the raw configured value without validation. Callers
        are responsible for handling ``None`` and normalising single vs multiple
        prompt sources.
        """
        return self.raw.get("prompts")

    @cached_property
    def prompt_name(self) -> str | None:
        """Return the configured prompt name, or ``None`` for the bundled default."""
        prompt_name = self.raw.get("prompt_name")
        return None if prompt_name is None else str(prompt_name)


def configure_logging(config: "GlobalConfig | None" = None) -> None:
    """Configure the root logger from the ``logging`` section.

    Parameters
    ----------
    config : GlobalConfig or None, optional
        Loaded configuration. ``None`` applies ``INFO`` with the default format.

    Raises
    ------
    ValueError
        If the configured level is not a known logging level name.
    """
    section = config.logging if config is not None else {}
    level_name = str(section.get("level", "INFO")).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown logging level: {level_name!r}")
    logging.basicConfig(level=level, format=section.get("format", DEFAULT_LOG_FORMAT))

"""manual_rag.generation.prompt_builder

Prompt template definitions and rendering utilities.

This module provides lightweight abstractions for defining, registering and
rendering named prompt templates. A template has an optional system part and
a user part; both are Jinja2 templates rendered with the same variables, so a
chat model can receive them as separate messages.

Classes
-------
PromptMessages
    Rendered system and user messages.
PromptTemplate
    Represents a single named prompt template.
PromptBuilder
    Registry and factory for prompt templates.
"""
from __future__ import annotations

import json
import warnings
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from jinja2 import Environment, StrictUndefined

_ENV = Environment(undefined=StrictUndefined, trim_blocks=True, lstrip_blocks=True)


def _template_text(label: str, value: Any) -> Optional[str]:
    # JSON prompt files may store long templates as a list of lines.
    if isinstance(value, list):
        return "\n".join(str(line) for line in value)
    if value is not None and not isinstance(value, str):
        raise TypeError(f"Template {label!r} must be a str or list of lines, got {type(value)!r}")
    return value


@dataclass(frozen=True)
class PromptMessages:
    """Rendered prompt parts.

    Attributes
    ----------
    system : str or None
        System message, if the template defines one.
    user : str
        User message.
    """

    system: Optional[str]
    user: str

    def to_string(self) -> str:
        """Join both parts into a single completion-style prompt."""
        return "\n\n".join(p for p in (self.system, self.user) if p)


class PromptTemplate:
    """Represents a single named prompt template.

    Parameters
    ----------
    name : str
        Name of the template.
    system : str or None, optional
        Jinja2 source of the system message.
    user : str, optional
        Jinja2 source of the user message.
    """

    def __init__(self,
                 name: str,
                 system: Optional[str] = None,
                 user: Optional[str] = ''
        ):
        self.name = name
        self.system = system
        self.user = user or ''

    def render_messages(self, **kwargs) -> PromptMessages:
        """Render the system and user parts separately.

        Parameters
        ----------
        **kwargs : Any
            Variables available to both templates.

        Returns
        -------
        PromptMessages
            Rendered parts. ``system`` is ``None`` when the template has none.

        Raises
        ------
        jinja2.UndefinedError
            If a template references a variable that was not supplied.
        """
        system = _ENV.from_string(self.system).render(**kwargs) if self.system else None
        user = _ENV.from_string(self.user).render(**kwargs)
        return PromptMessages(system=system, user=user)

    def render(self, **kwargs) -> str:
        """Render the full prompt as one string."""
        return self.render_messages(**kwargs).to_string()


class PromptBuilder:
    """Registry and factory for prompt templates."""

    def __init__(self):
        self.templates: Dict[str, PromptTemplate] = {}

    def register_from_dict(self, data: Dict[str, Any]) -> str:
        """Register a template from a mapping with ``name``, ``system`` and ``user`` keys.

        Returns
        -------
        str
            Name of the registered template.

        Raises
        ------
        KeyError
            If ``"name"`` is missing.
        TypeError
            If ``name``, ``system`` or ``user`` has the wrong type.
        ValueError
            If ``name`` is empty.
        """
        if "name" not in data:
            raise KeyError("Template definition missing required key: 'name'")
        name = data["name"]
        if not isinstance(name, str):
            raise TypeError(f"Template 'name' must be a str, got {type(name)!r}")
        if not name.strip():
            raise ValueError("Template 'name' must be a non-empty string")

        system = _template_text("system", data.get("system"))
        user = _template_text("user", data.get("user")) or ""

        if name in self.templates:
            warnings.warn(f"Overwriting existing prompt template: {name}")
        self.templates[name] = PromptTemplate(name=name, system=system, user=user)
        return name

    def _register_payload(self, data: Any, origin: str) -> List[str]:
        if isinstance(data, dict):
            return [self.register_from_dict(data)]
        if isinstance(data, list):
            registered: List[str] = []
            for item in data:
                if not isinstance(item, dict):
                    raise TypeError(f"Template list items must be dicts, got {type(item)!r}")
                registered.append(self.register_from_dict(item))
            return registered
        raise TypeError(f"{origin} must contain an object or list of objects, got {type(data)!r}")

    def register_from_file(self, path: Union[Path, str], base_dir: Optional[Path] = None) -> List[str]:
        """Load and register templates from a JSON file.

        Parameters
        ----------
        path : Path | str
            JSON file with one template object or a list of them.
        base_dir : Path | None, optional
            If provided and ``path`` is relative, resolve it relative to this directory.

        Returns
        -------
        list[str]
            Names of templates registered from this file.

        Raises
        ------
        FileNotFoundError
            If the file does not exist.
        ValueError
            If the file extension is not ``.json``.
        """
        p = Path(path)
        if not p.is_absolute() and base_dir is not None:
            p = base_dir / p
        p = p.resolve()
        if not p.exists():
            raise FileNotFoundError(f"Prompt file not found: {p}")
        if p.suffix.lower() != ".json":
            raise ValueError(f"Unsupported file type: {p.suffix}")

        with p.open("r", encoding="utf-8") as f:
            data = json.load(f)
        return self._register_payload(data, f"Prompt file {p}")

    def register_from_package(self, package: str, resource_path: str) -> List[str]:
        """Load and register templates from a JSON resource bundled in a package."""
        if not resource_path.lower().endswith(".json"):
            raise ValueError(f"Unsupported resource type: {resource_path}")

        res = resources.files(package).joinpath(resource_path)
        if not res.is_file():
            raise FileNotFoundError(f"Prompt resource not found: pkg:{package}:{resource_path}")

        data = json.loads(res.read_text(encoding="utf-8"))
        return self._register_payload(data, f"Prompt resource pkg:{package}:{resource_path}")

    def register_from_source(self, source: str, base_dir: Optional[Path] = None) -> List[str]:
        """Register templates from a source string.

        Supported formats are ``pkg:<package>:<resource_path>``, ``file:<path>``
        and a plain filesystem path.
        """
        if not isinstance(source, str):
            raise TypeError(f"source must be a str, got {type(source)!r}")

        if source.startswith("pkg:"):
            rest = source[len("pkg:"):]
            if ":" not in rest:
                raise ValueError("pkg: sources must be of the form 'pkg:<package>:<resource_path>'")
            package, resource_path = rest.split(":", 1)
            return self.register_from_package(package.strip(), resource_path.strip())

        if source.startswith("file:"):
            return self.register_from_file(Path(source[len("file:"):].strip()), base_dir=base_dir)

        return self.register_from_file(Path(source), base_dir=base_dir)

    def list_prompts(self) -> List[str]:
        return sorted(self.templates.keys())

    def has_prompt(self, name: str) -> bool:
        return name in self.templates

    def get_template(self, name: str) -> PromptTemplate:
        """Get a registered template by name.

        Raises
        ------
        KeyError
            If no template is registered under ``name``.
        """
        if name not in self.templates:
            available = ", ".join(self.list_prompts())
            raise KeyError(f"No template registered under name: {name}. Available: [{available}]")
        return self.templates[name]

    def build_messages(self, name: str, **kwargs) -> PromptMessages:
        """Render a template by name into system and user messages."""
        return self.get_template(name).render_messages(**kwargs)

    def build(self, name: str, **kwargs) -> str:
        """Render a template by name into a single prompt string."""
        return self.get_template(name).render(**kwargs)


DEFAULT_PROMPTS_SOURCE = "pkg:manual_rag.generation:prompts/manual_assistant.json"
DEFAULT_PROMPT_NAME = "manual_assistant"


def default_prompt_builder() -> PromptBuilder:
    """Return a builder with the bundled manual assistant prompt registered."""
    builder = PromptBuilder()
    builder.register_from_source(DEFAULT_PROMPTS_SOURCE)
    return builder


__all__ = [
    "DEFAULT_PROMPT_NAME",
    "DEFAULT_PROMPTS_SOURCE",
    "PromptBuilder",
    "PromptMessages",
    "PromptTemplate",
    "default_prompt_builder",
]

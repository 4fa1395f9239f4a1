"""
Configuration management for blockterm.
"""

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from ..session.ai import AiTool
from .exceptions import ConfigurationError
from .logging import get_logger

logger = get_logger(__name__)

PROMPT_PLACEHOLDER = "{prompt}"

# Flags that already pin a Claude session; when present we must not add --continue.
_CLAUDE_SESSION_FLAGS = (
    "--continue",
    "-c",
    "--resume",
    "-r",
    "--session-id",
    "--no-session-persistence",
)
_CLAUDE_SESSION_FLAG_PREFIXES = ("--resume=", "--session-id=")


@dataclass
class ResolvedAiCommand:
    """Concrete executable and argv for one AI tool invocation."""

    program: str
    args: list[str]

    def argv(self) -> list[str]:
        return [self.program, *self.args]


@dataclass
class AiCommandTemplate:
    """Program plus argument template; ``{prompt}`` is substituted per run."""

    program: str = ""
    args: list[str] = field(default_factory=list)

    def resolve(self, prompt: str) -> ResolvedAiCommand:
        return ResolvedAiCommand(
            program=self.program,
            args=[arg.replace(PROMPT_PLACEHOLDER, prompt) for arg in self.args],
        )


def _default_codex_template() -> AiCommandTemplate:
    return AiCommandTemplate(program="codex", args=["exec", PROMPT_PLACEHOLDER])


def _default_claude_template() -> AiCommandTemplate:
    return AiCommandTemplate(program="claude", args=["--print", PROMPT_PLACEHOLDER])


def ensure_claude_continue_args(args: list[str]) -> list[str]:
    """Prepend ``--continue`` unless the args already control the session."""
    for arg in args:
        if arg in _CLAUDE_SESSION_FLAGS or arg.startswith(_CLAUDE_SESSION_FLAG_PREFIXES):
            return list(args)
    return ["--continue", *args]


@dataclass
class AiConfig:
    """Configuration for external AI command-line tools."""

    timeout_sec: int = 300
    claude_continue: bool = True
    codex: AiCommandTemplate = field(default_factory=_default_codex_template)
    claude: AiCommandTemplate = field(default_factory=_default_claude_template)

    def resolve(self, tool: AiTool, prompt: str) -> ResolvedAiCommand:
        """Map a tool selector and prompt to the command that should be launched."""
        if tool is AiTool.CODEX_CLI:
            return self.codex.resolve(prompt)

        resolved = self.claude.resolve(prompt)
        if self.claude_continue:
            resolved.args = ensure_claude_continue_args(resolved.args)
        return resolved


@dataclass
class SessionConfig:
    """Configuration for session persistence."""

    autosave_interval_sec: int = 3
    session_file: str = "state/session.yaml"
    context_lines_per_block: int = 40


@dataclass
class TerminalConfig:
    """Sizing for the scrollback buffer and the viewport grid."""

    scrollback_capacity: int = 20_000
    viewport_width: int = 140
    viewport_height: int = 120


def _require_positive_int(section: str, obj: Any, *names: str) -> None:
    for name in names:
        value = getattr(obj, name)
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ConfigurationError(
                f"{section}.{name} must be a positive integer, got {value!r}"
            )


def _section(cls: type, raw: Any) -> Any:
    """Build a dataclass section from a dict, ignoring unknown keys."""
    if not isinstance(raw, dict):
        return cls()
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in raw.items() if k in known})


@dataclass
class AppConfig:
    """Top-level application configuration."""

    ai: AiConfig = field(default_factory=AiConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    terminal: TerminalConfig = field(default_factory=TerminalConfig)

    @classmethod
    def default(cls) -> "AppConfig":
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "AppConfig":
        """Build a config from plain data. Non-mapping sections fall back to defaults; bad values raise."""
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration root must be a mapping")

        ai_data = data.get("ai")
        if isinstance(ai_data, dict):
            ai_data = ai_data.copy()
            for tool_key in ("codex", "claude"):
                if tool_key in ai_data:
                    template = _section(AiCommandTemplate, ai_data[tool_key])
                    template.args = [str(arg) for arg in template.args or []]
                    ai_data[tool_key] = template
        ai = _section(AiConfig, ai_data)
        session = _section(SessionConfig, data.get("session"))
        terminal = _section(TerminalConfig, data.get("terminal"))

        _require_positive_int("ai", ai, "timeout_sec")
        if not isinstance(ai.claude_continue, bool):
            raise ConfigurationError(
                f"ai.claude_continue must be true or false, got {ai.claude_continue!r}"
            )
        _require_positive_int(
            "session", session, "autosave_interval_sec", "context_lines_per_block"
        )
        if not isinstance(session.session_file, str) or not session.session_file:
            raise ConfigurationError("session.session_file must be a non-empty path")
        _require_positive_int(
            "terminal", terminal, "scrollback_capacity", "viewport_width", "viewport_height"
        )

        return cls(ai=ai, session=session, terminal=terminal)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def load_from_file(cls, config_path: Path) -> "AppConfig":
        """Load configuration from a YAML or JSON file."""
        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, encoding="utf-8") as f:
                if config_path.suffix.lower() == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
            config = cls.from_dict(data)
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}")

        logger.debug("Loaded configuration from %s", config_path)
        return config

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to a YAML or JSON file."""
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            data = self.to_dict()
            with open(config_path, "w", encoding="utf-8") as f:
                if config_path.suffix.lower() == ".json":
                    json.dump(data, f, indent=2)
                else:
                    yaml.safe_dump(data, f, default_flow_style=False, indent=2, sort_keys=False)
        except Exception as e:
            raise ConfigurationError(f"Failed to save configuration: {e}")


class ConfigManager:
    """Manages the project configuration file."""

    CONFIG_FILENAME = "blockterm.yaml"

    def __init__(self, project_root: Path | None = None, config_path: Path | None = None):
        self.project_root = project_root or Path.cwd()
        self.config_path = config_path or self.project_root / self.CONFIG_FILENAME
        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get current configuration, loading if necessary."""
        if self._config is None:
            self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from file, falling back to defaults."""
        if self.config_path.exists():
            self._config = AppConfig.load_from_file(self.config_path)
        else:
            self._config = AppConfig.default()
        return self._config

    def save_config(self) -> None:
        if self._config is None:
            raise ConfigurationError("No configuration to save")
        self._config.save_to_file(self.config_path)

    def update_config(self, **kwargs: Any) -> None:
        """Replace whole sections (``ai``, ``session``, ``terminal``) and save."""
        config = self.config

        for key, value in kwargs.items():
            if hasattr(config, key):
                setattr(config, key, value)
            else:
                raise ConfigurationError(f"Unknown configuration key: {key}")

        self.save_config()

    def reset_config(self) -> None:
        self._config = AppConfig.default()
        self.save_config()

    def session_path(self) -> Path:
        """Absolute path of the snapshot file named in the session section."""
        path = Path(self.config.session.session_file)
        if not path.is_absolute():
            path = self.project_root / path
        return path

"""Configuration management for Scriptpad."""

import os
from pathlib import Path

import yaml

from . import log
from .errors import ConfigError

logger = log.get_logger()

CONFIG_DIR = Path.home() / ".scriptpad"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "config.yml"

# Layout of the config file: (comment lines, keys) per section.
# Used both for the default file and by save(), so comments survive a save.
CONFIG_SECTIONS = [
    (
        ["Interpreter used to run the script, and the flag placed before the script path"],
        ["interpreter", "mode_flag"],
    ),
    (
        [
            "Script file written before every run (overwritten each time).",
            'Diagnostics starting with "<script_name>:" become clickable.',
        ],
        ["script_name", "work_dir"],
    ),
    (["Bytes read from stdout before the output pane is refreshed"], ["chunk_size"]),
    (["Seconds before a run is stopped (null = never)"], ["timeout"]),
    (
        ["Appearance"],
        ["font_size", "text_color", "editor_background", "link_color", "running_color", "idle_color"],
    ),
    (
        ["Window layout (updated on exit)"],
        ["window_width", "window_height", "splitter_sizes"],
    ),
]


def render_config(values: dict) -> str:
    """Render config values as commented YAML, one section at a time."""
    sections = []
    for comments, keys in CONFIG_SECTIONS:
        lines = [f"# {comment}" for comment in comments]
        for key in keys:
            dumped = yaml.safe_dump({key: values[key]}, default_flow_style=None, sort_keys=False)
            lines.append(dumped.rstrip("\n"))
        sections.append("\n".join(lines))
    return "\n\n".join(sections) + "\n"


class Config:
    """Application configuration."""

    def __init__(
        self,
        interpreter: str = "kotlinc",
        mode_flag: str = "-script",
        script_name: str = "foo.kts",
        work_dir: str = ".",
        chunk_size: int = 100,
        timeout: float | None = None,
        font_size: int = 20,
        text_color: str = "#FFFFFF",
        editor_background: str = "#404040",
        link_color: str = "#FF0000",
        running_color: str = "#00C000",
        idle_color: str = "#FF0000",
        window_width: int = 1200,
        window_height: int = 800,
        splitter_sizes: list[int] | None = None,
        config_path: str | None = None,
    ):
        if not interpreter:
            raise ConfigError("interpreter must not be empty")
        if not script_name:
            raise ConfigError("script_name must not be empty")
        if chunk_size < 1:
            raise ConfigError(f"chunk_size must be positive, got {chunk_size}")
        if timeout is not None and timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {timeout}")

        self.interpreter = interpreter
        self.mode_flag = mode_flag
        self.script_name = script_name
        self.work_dir = work_dir
        self.chunk_size = chunk_size
        self.timeout = timeout
        self.font_size = font_size
        self.text_color = text_color
        self.editor_background = editor_background
        self.link_color = link_color
        self.running_color = running_color
        self.idle_color = idle_color
        self.window_width = window_width
        self.window_height = window_height
        self.splitter_sizes = splitter_sizes or [1, 1]
        self.config_path = config_path

    @property
    def script_path(self) -> Path:
        """Path of the script file handed to the interpreter."""
        return Path(self.work_dir) / self.script_name

    @classmethod
    def from_dict(cls, data: dict, config_path: str | None = None) -> "Config":
        """Build a config from parsed YAML, falling back to defaults for missing keys."""
        try:
            timeout = data.get("timeout")
            return cls(
                interpreter=str(data.get("interpreter", "kotlinc")),
                mode_flag=str(data.get("mode_flag", "-script")),
                script_name=str(data.get("script_name", "foo.kts")),
                work_dir=str(data.get("work_dir", ".")),
                chunk_size=int(data.get("chunk_size", 100)),
                timeout=float(timeout) if timeout is not None else None,
                font_size=int(data.get("font_size", 20)),
                text_color=data.get("text_color", "#FFFFFF"),
                editor_background=data.get("editor_background", "#404040"),
                link_color=data.get("link_color", "#FF0000"),
                running_color=data.get("running_color", "#00C000"),
                idle_color=data.get("idle_color", "#FF0000"),
                window_width=int(data.get("window_width", 1200)),
                window_height=int(data.get("window_height", 800)),
                splitter_sizes=[int(s) for s in data.get("splitter_sizes", [1, 1])],
                config_path=config_path,
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid config value: {e}") from e

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load configuration from YAML file.

        Args:
            config_path: Path to config file. If None, looks for scriptpad.yml
                        in the current directory, then ~/.scriptpad/config.yml.

        Returns:
            Config instance with loaded values.
        """
        if config_path is None:
            for path in (Path("scriptpad.yml"), DEFAULT_CONFIG_PATH):
                if path.exists():
                    config_path = str(path)
                    break

        if config_path and os.path.exists(config_path):
            with open(config_path, "r", encoding="utf-8") as f:
                try:
                    data = yaml.safe_load(f) or {}
                except yaml.YAMLError as e:
                    raise ConfigError(f"cannot parse {config_path}: {e}") from e
            if not isinstance(data, dict):
                raise ConfigError(f"{config_path} must contain a mapping")
            logger.debug("config loaded", path=config_path)
            return cls.from_dict(data, config_path=config_path)

        if config_path:
            logger.warning("config file not found, using defaults", path=config_path)
            return cls(config_path=config_path)

        # No config file found - create default in home directory
        config = cls(config_path=str(DEFAULT_CONFIG_PATH))
        config._create_default_config()
        return config

    def _create_default_config(self) -> None:
        """Create a default config file in the user's home directory."""
        if DEFAULT_CONFIG_PATH.exists():
            return

        try:
            CONFIG_DIR.mkdir(parents=True, exist_ok=True)
            with open(DEFAULT_CONFIG_PATH, "w", encoding="utf-8") as f:
                f.write(render_config(self.to_dict()))
        except OSError as e:
            logger.warning("could not create default config", path=str(DEFAULT_CONFIG_PATH), error=str(e))
            return

        logger.info("created default config", path=str(DEFAULT_CONFIG_PATH))

    def to_dict(self) -> dict:
        """Values written back by save()."""
        return {
            "interpreter": self.interpreter,
            "mode_flag": self.mode_flag,
            "script_name": self.script_name,
            "work_dir": self.work_dir,
            "chunk_size": self.chunk_size,
            "timeout": self.timeout,
            "font_size": self.font_size,
            "text_color": self.text_color,
            "editor_background": self.editor_background,
            "link_color": self.link_color,
            "running_color": self.running_color,
            "idle_color": self.idle_color,
            "window_width": self.window_width,
            "window_height": self.window_height,
            "splitter_sizes": list(self.splitter_sizes),
        }

    def save(self, config_path: str | None = None) -> None:
        """Write the current values to the file they were loaded from."""
        path = Path(config_path or self.config_path or DEFAULT_CONFIG_PATH)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(render_config(self.to_dict()))
        except OSError as e:
            logger.warning("could not save config", path=str(path), error=str(e))
            return
        logger.debug("config saved", path=str(path))

"""
Configuration and logging setup for the scenepatch tool server.

Provides centralized configuration with environment variable support
and sensible defaults for the tool host and the editor-side collaborators.
"""

import os
import sys
import logging
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


# =============================================================================
# Logging Configuration
# =============================================================================

class LogColors:
    """ANSI escape codes used by the console formatter."""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    WHITE = "\033[37m"

    BRIGHT_BLACK = "\033[90m"
    BRIGHT_RED = "\033[91m"
    BRIGHT_MAGENTA = "\033[95m"
    BRIGHT_CYAN = "\033[96m"
    BRIGHT_WHITE = "\033[97m"


class ColoredFormatter(logging.Formatter):
    """One line per record: time, level, component tag, message."""

    ROOT = "scenepatch"

    # Component tag -> (color, icon); tag is the logger name under ROOT
    COMPONENT_STYLES = {
        "SERVER": (LogColors.BRIGHT_CYAN, "🚀"),
        "MAIN_THREAD": (LogColors.YELLOW, "🧵"),
        "DISPATCH": (LogColors.MAGENTA, "🛠"),
        "LAYERS": (LogColors.GREEN, "📚"),
        "SCENE": (LogColors.BLUE, "🎮"),
        "TOOLS": (LogColors.BRIGHT_MAGENTA, "🔧"),
    }
    DEFAULT_STYLE = (LogColors.WHITE, "•")

    LEVEL_STYLES = {
        logging.DEBUG: (LogColors.BRIGHT_BLACK, "DBG"),
        logging.INFO: (LogColors.GREEN, "INF"),
        logging.WARNING: (LogColors.YELLOW, "WRN"),
        logging.ERROR: (LogColors.RED, "ERR"),
        logging.CRITICAL: (LogColors.BRIGHT_RED + LogColors.BOLD, "CRT"),
    }

    def __init__(self, use_colors: bool = True):
        super().__init__(datefmt="%H:%M:%S")
        self.use_colors = use_colors and sys.stdout.isatty()

    def component_tag(self, logger_name: str) -> str:
        """'scenepatch.main_thread.x' -> 'MAIN_THREAD'; foreign loggers keep their first segment."""
        parts = logger_name.split(".")
        if parts[0] != self.ROOT:
            return parts[0].upper()
        return parts[1].upper() if len(parts) > 1 else "SERVER"

    def format(self, record: logging.LogRecord) -> str:
        tag = self.component_tag(record.name)
        component_color, icon = self.COMPONENT_STYLES.get(tag, self.DEFAULT_STYLE)
        level_color, level_label = self.LEVEL_STYLES.get(record.levelno, (LogColors.WHITE, "???"))
        timestamp = self.formatTime(record, self.datefmt)
        message = record.getMessage()

        if not self.use_colors:
            line = f"{timestamp} {level_label} {tag:11} {message}"
        else:
            C = LogColors
            line = (
                f"{C.DIM}{timestamp}{C.RESET} {level_color}{level_label}{C.RESET} "
                f"{icon} {component_color}{tag:11}{C.RESET} {C.BRIGHT_WHITE}{message}{C.RESET}"
            )

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    level: int = logging.INFO,
    use_colors: bool = True
) -> logging.Logger:
    """
    Configure and return the main logger.

    Args:
        level: Logging level
        use_colors: Whether to use colored output

    Returns:
        Configured logger instance
    """
    # Remove any existing handlers
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(ColoredFormatter(use_colors=use_colors))
    console_handler.setLevel(level)

    root.setLevel(level)
    root.addHandler(console_handler)

    scenepatch_logger = logging.getLogger("scenepatch")
    scenepatch_logger.setLevel(level)
    scenepatch_logger.propagate = True

    for child in ["server", "main_thread", "dispatch", "layers", "scene", "tools"]:
        logging.getLogger(f"scenepatch.{child}").setLevel(level)

    # Silence noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    # Route uvicorn through our handler
    for name in ("uvicorn.access", "uvicorn.error"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = []
        uvicorn_logger.addHandler(console_handler)
    logging.getLogger("uvicorn").setLevel(logging.WARNING)

    return scenepatch_logger


def print_startup_banner(host: str, port: int, scene_name: str) -> None:
    """Print the startup banner with the endpoints."""
    C = LogColors
    banner = f"""
{C.BRIGHT_CYAN}  ┌─┐┌─┐┌─┐┌┐┌┌─┐┌─┐┌─┐┌┬┐┌─┐┬ ┬
  └─┐│  ├┤ │││├┤ ├─┘├─┤ │ │  ├─┤
  └─┘└─┘└─┘┘└┘└─┘┴  ┴ ┴ ┴ └─┘┴ ┴{C.RESET}
  {C.GREEN}▸ Server:{C.WHITE}  http://{host}:{port}
  {C.MAGENTA}▸ Tools:{C.WHITE}   http://{host}:{port}/tools
  {C.BLUE}▸ Scene:{C.WHITE}   {scene_name}
{C.RESET}"""
    print(banner)


def level_from_name(name: str) -> int:
    """Map a level name such as 'debug' to its logging constant (INFO if unknown)."""
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


# =============================================================================
# Server Configuration
# =============================================================================

@dataclass
class ServerConfig:
    """Tool host configuration."""
    host: str = "127.0.0.1"
    port: int = 8765

    # CORS settings
    cors_origins: list = field(default_factory=lambda: ["*"])
    cors_allow_credentials: bool = True

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Create config from environment variables."""
        return cls(
            host=os.getenv("SERVER_HOST", "127.0.0.1"),
            port=int(os.getenv("SERVER_PORT", "8765")),
            log_level=os.getenv("LOG_LEVEL", "INFO")
        )


@dataclass
class EditorConfig:
    """Editor-side collaborator configuration."""
    # Persisted layer name table (TagManager equivalent)
    layer_table_path: str = "ProjectSettings/TagManager.json"

    # Optional scene description loaded at startup
    scene_file: Optional[str] = None

    # Pending hand-offs the main thread queue will hold
    main_thread_queue_size: int = 256

    @classmethod
    def from_env(cls) -> "EditorConfig":
        """Create config from environment variables."""
        return cls(
            layer_table_path=os.getenv("SCENEPATCH_LAYER_TABLE", "ProjectSettings/TagManager.json"),
            scene_file=os.getenv("SCENEPATCH_SCENE_FILE") or None,
            main_thread_queue_size=int(os.getenv("MAIN_THREAD_QUEUE_SIZE", "256"))
        )


# =============================================================================
# Composite Configuration
# =============================================================================

@dataclass
class Config:
    """Complete application configuration."""
    server: ServerConfig = field(default_factory=ServerConfig)
    editor: EditorConfig = field(default_factory=EditorConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Create complete config from environment."""
        return cls(
            server=ServerConfig.from_env(),
            editor=EditorConfig.from_env()
        )

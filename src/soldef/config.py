import logging
import os
from dataclasses import dataclass

from rich.console import Console
from rich.logging import RichHandler

_DEFAULT_DEPENDENCY_DIRS = ("lib", "node_modules")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    dependency_dirs: tuple[str, ...] = _DEFAULT_DEPENDENCY_DIRS
    sources_dir: str = "src"
    log_level: str = "WARNING"


def normalize_log_level(level: str) -> str:
    normalized = level.strip().upper()
    if normalized not in _LOG_LEVELS:
        raise ValueError(f"Unsupported log level '{level}'. Supported: {list(_LOG_LEVELS)}")
    return normalized


def get_settings() -> Settings:
    raw_dirs = os.getenv("SOLDEF_DEPENDENCY_DIRS")
    dependency_dirs = _DEFAULT_DEPENDENCY_DIRS
    if raw_dirs is not None:
        dependency_dirs = tuple(d.strip() for d in raw_dirs.split(",") if d.strip())

    return Settings(
        dependency_dirs=dependency_dirs,
        sources_dir=os.getenv("SOLDEF_SOURCES_DIR", "src").strip(),
        log_level=normalize_log_level(os.getenv("SOLDEF_LOG_LEVEL", "WARNING")),
    )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=normalize_log_level(level),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )

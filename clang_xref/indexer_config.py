"""Configuration loader for indexer settings."""

import json
import os
from pathlib import Path
from typing import Dict, Any, Optional, Tuple

from . import diagnostics


class IndexerConfig:
    """Loads and manages configuration for one or more indexing invocations."""

    CONFIG_FILENAME = ".clang-xref.json"

    DEFAULT_CONFIG = {
        "index_locals": False,
        "index_type_references": False,
        "main_file_only": False,
        "max_type_depth": 32,
        "fail_on_fatal": True,
        "detailed_preprocessing": True,
        "diagnostics": {"level": "info", "enabled": True},  # debug, info, warning, error, fatal
    }

    def __init__(
        self,
        search_dir: Optional[Path] = None,
        overrides: Optional[Dict[str, Any]] = None,
        config_file: Optional[Path] = None,
    ):
        self.search_dir = Path(search_dir) if search_dir else Path.cwd()
        self.explicit_config = Path(config_file) if config_file else None
        self.config_path = None  # Will be set by _find_config_file
        self.config = self._load_config()
        if overrides:
            self.config.update(overrides)

    def _find_config_file(self) -> Tuple[Optional[Path], Optional[str]]:
        """Find config file by checking multiple locations in priority order.

        Priority order:
        1. Explicit config_file argument (--config)
        2. Environment variable CLANG_XREF_CONFIG
        3. Search directory (.clang-xref.json)
        """
        if self.explicit_config is not None:
            if self.explicit_config.exists():
                return (self.explicit_config, "command line")
            diagnostics.warning(f"Config file does not exist: {self.explicit_config}")

        env_config = os.environ.get("CLANG_XREF_CONFIG")
        if env_config:
            env_path = Path(env_config)
            if env_path.exists():
                diagnostics.debug(f"Using config from CLANG_XREF_CONFIG: {env_path}")
                return (env_path, "environment variable CLANG_XREF_CONFIG")
            else:
                diagnostics.warning(f"CLANG_XREF_CONFIG points to non-existent file: {env_path}")

        local_config = self.search_dir / self.CONFIG_FILENAME
        if local_config.exists():
            diagnostics.debug(f"Using config from {local_config}")
            return (local_config, "search directory")

        return (None, None)

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file or use defaults."""
        config_file, config_source = self._find_config_file()

        config = dict(self.DEFAULT_CONFIG)

        if config_file is None:
            return config

        self.config_path = config_file
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                user_config = json.load(f)
        except (OSError, ValueError) as e:
            diagnostics.error(f"Error loading config from {config_file}: {e}")
            diagnostics.warning("Using default configuration")
            return config

        if not isinstance(user_config, dict):
            diagnostics.error(f"Invalid config file format at {config_file}")
            diagnostics.error(
                f"Expected a JSON object (dict), but got {type(user_config).__name__}"
            )
            diagnostics.warning("Using default configuration")
            return config

        # User config takes precedence over defaults
        config.update(user_config)
        diagnostics.configure_from_config(config)
        diagnostics.debug(f"Configuration loaded from {config_source}: {config_file}")
        return config

    def get_index_locals(self) -> bool:
        """Whether parameters and function-local declarations produce facts."""
        return bool(self.config.get("index_locals", self.DEFAULT_CONFIG["index_locals"]))

    def get_index_type_references(self) -> bool:
        return bool(
            self.config.get("index_type_references", self.DEFAULT_CONFIG["index_type_references"])
        )

    def get_main_file_only(self) -> bool:
        return bool(self.config.get("main_file_only", self.DEFAULT_CONFIG["main_file_only"]))

    def get_max_type_depth(self) -> int:
        """Get the recursion cap for type resolution."""
        value = self.config.get("max_type_depth", self.DEFAULT_CONFIG["max_type_depth"])
        try:
            depth = int(value)
        except (TypeError, ValueError):
            diagnostics.warning(f"Invalid max_type_depth in config: {value!r}. Using default.")
            return self.DEFAULT_CONFIG["max_type_depth"]
        return max(depth, 0)

    def get_fail_on_fatal(self) -> bool:
        return bool(self.config.get("fail_on_fatal", self.DEFAULT_CONFIG["fail_on_fatal"]))

    def get_parse_options(self) -> int:
        """Get the libclang parse option bitmask."""
        # Imported lazily so configuration stays usable without libclang.
        from clang.cindex import TranslationUnit

        options = 0
        if self.config.get("detailed_preprocessing", self.DEFAULT_CONFIG["detailed_preprocessing"]):
            options |= TranslationUnit.PARSE_DETAILED_PROCESSING_RECORD
        return options

"""
Bridge settings: packaged config.yaml, overridden by environment variables.

The CLI loads .env after this module is imported, so it calls
config.reload() to pick those values up.
"""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, List, Optional

DEFAULT_PATH = Path(__file__).parent / "config.yaml"

ENV_MAPPINGS = {
    'BRIDGE_TIMEOUT': ('bridge', 'timeout'),
    'BRIDGE_FOLLOW_REDIRECTS': ('bridge', 'follow_redirects'),
    'BRIDGE_USER_AGENT': ('bridge', 'user_agent'),
    'LOG_LEVEL': ('logging', 'level'),
    'LOG_RENDERER': ('logging', 'renderer'),
}

RENDERERS = ('json', 'console')


class Config:
    """Typed view over the bridge and logging sections."""

    def __init__(self, config_path: str = None):
        self.config_path = Path(config_path) if config_path is not None else DEFAULT_PATH
        self._config = self._load_config()

    def reload(self):
        """Re-read the file and the environment."""
        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        try:
            with open(self.config_path, 'r') as f:
                raw = yaml.safe_load(f) or {}
        except FileNotFoundError:
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")

        if not isinstance(raw, dict):
            raise ValueError(f"Configuration root must be a mapping: {self.config_path}")

        raw = self._apply_env_overrides(raw)
        raw['bridge'] = self._check_bridge(raw.get('bridge') or {})
        raw['logging'] = self._check_logging(raw.get('logging') or {})
        return raw

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        for env_var, (section, key) in ENV_MAPPINGS.items():
            env_value = os.getenv(env_var)
            if env_value is None:
                continue
            if not isinstance(config.get(section), dict):
                config[section] = {}
            config[section][key] = self._convert_env_value(env_value)
        return config

    def _convert_env_value(self, value: str):
        """Convert environment variable string to appropriate Python type."""
        lowered = value.lower()
        if lowered in ('true', 'false'):
            return lowered == 'true'
        if lowered in ('null', 'none', ''):
            return None

        for convert in (int, float):
            try:
                return convert(value)
            except ValueError:
                pass
        return value

    def _check_bridge(self, section: Dict[str, Any]) -> Dict[str, Any]:
        timeout = section.get('timeout')
        if timeout is not None:
            if isinstance(timeout, bool) or not isinstance(timeout, (int, float, str)):
                raise ValueError(f"bridge.timeout must be a number, got {timeout!r}")
            try:
                timeout = float(timeout)
            except ValueError:
                raise ValueError(f"bridge.timeout must be a number, got {timeout!r}")
            if timeout <= 0:
                raise ValueError(f"bridge.timeout must be positive, got {timeout}")

        follow_redirects = section.get('follow_redirects', True)
        if not isinstance(follow_redirects, bool):
            raise ValueError(f"bridge.follow_redirects must be true or false, got {follow_redirects!r}")

        user_agent = section.get('user_agent')
        if user_agent is not None:
            user_agent = str(user_agent)

        methods = section.get('allowed_methods') or []
        if not isinstance(methods, list) or not all(isinstance(m, str) and m.strip() for m in methods):
            raise ValueError(f"bridge.allowed_methods must be a list of method names, got {methods!r}")

        return {
            **section,
            'timeout': timeout,
            'follow_redirects': follow_redirects,
            'user_agent': user_agent,
            'allowed_methods': [m.strip().upper() for m in methods],
        }

    def _check_logging(self, section: Dict[str, Any]) -> Dict[str, Any]:
        renderer = section.get('renderer', 'json')
        if renderer not in RENDERERS:
            raise ValueError(f"logging.renderer must be one of {RENDERERS}, got {renderer!r}")
        return {
            **section,
            'level': str(section.get('level', 'INFO')).upper(),
            'renderer': renderer,
        }

    def get(self, *keys, default=None):
        """Walk nested sections, e.g. get('bridge', 'timeout')."""
        current = self._config
        for key in keys:
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default
        return current

    @property
    def bridge(self) -> Dict[str, Any]:
        return self.get('bridge', default={})

    @property
    def logging(self) -> Dict[str, Any]:
        return self.get('logging', default={})

    @property
    def timeout(self) -> Optional[float]:
        return self.bridge['timeout']

    @property
    def allowed_methods(self) -> List[str]:
        return self.bridge['allowed_methods']


config = Config()

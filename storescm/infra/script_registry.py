"""
Store script registry for storescm.

The registry is the process-wide list of StoreScripts that monitors refer
to by name. Its lifecycle is explicit:

- load:    ScriptRegistry.from_config(config)
- read:    registry.scripts() / registry.get(name)
- replace: registry.replace(scripts), which swaps the whole list and saves it

Readers take an immutable tuple snapshot, so a concurrent replace never
exposes a partial list. Writers are serialised by a lock.
"""

import threading
from typing import Any, Callable, Dict, Iterable, Optional, Tuple
import logging

from ..domain import StoreScript
from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

Saver = Callable[[Tuple[StoreScript, ...]], None]


def save_scripts_to_config(scripts: Tuple[StoreScript, ...]) -> None:
    """Persist scripts into the storescm configuration file, leaving other settings as written."""
    from ..config import read_config_file, save_config

    config = read_config_file()
    config['store_scripts'] = [s.to_dict() for s in scripts]
    save_config(config)


class ScriptRegistry:
    """
    Named StoreScripts shared by all monitors.

    Example:
        registry = ScriptRegistry.from_config(load_config())
        script = registry.get("vw77")
        if script is None:
            ...  # configuration error
    """

    def __init__(self, scripts: Iterable[StoreScript] = (), saver: Optional[Saver] = None):
        """
        Initialize ScriptRegistry.

        Args:
            scripts: Initial scripts
            saver: Called with the new scripts after each replace (default: none)
        """
        self._scripts: Tuple[StoreScript, ...] = self._validated(scripts)
        self._saver = saver
        self._write_lock = threading.Lock()

    @classmethod
    def from_config(cls, config: Dict[str, Any], saver: Optional[Saver] = save_scripts_to_config) -> 'ScriptRegistry':
        """Load the registry from the 'store_scripts' configuration section."""
        scripts = [StoreScript.from_dict(d) for d in config.get('store_scripts', [])]
        return cls(scripts, saver=saver)

    @staticmethod
    def _validated(scripts: Iterable[StoreScript]) -> Tuple[StoreScript, ...]:
        result = tuple(scripts)
        names = [s.name for s in result]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ConfigurationError(f"Duplicate store script names: {', '.join(duplicates)}")
        return result

    def scripts(self) -> Tuple[StoreScript, ...]:
        """Return a snapshot of all registered scripts."""
        return self._scripts

    def get(self, name: str) -> Optional[StoreScript]:
        """Look up a script by name; None if no script has that name."""
        for script in self._scripts:
            if script.name == name:
                return script
        return None

    def replace(self, scripts: Iterable[StoreScript]) -> None:
        """
        Replace all scripts at once and persist them.

        Raises:
            ConfigurationError: If two scripts share a name
        """
        self.update(lambda _: scripts)

    def update(self, fn: Callable[[Tuple[StoreScript, ...]], Iterable[StoreScript]]) -> Tuple[StoreScript, ...]:
        """
        Replace the scripts with fn(current scripts) and persist them.

        fn runs under the writer lock, so concurrent updates are applied
        one after the other instead of overwriting each other.

        Example:
            registry.update(lambda scripts: scripts + (StoreScript("vw80", path),))

        Raises:
            ConfigurationError: If two scripts share a name (nothing is changed)
        """
        with self._write_lock:
            new_scripts = self._validated(fn(self._scripts))
            if self._saver is not None:
                self._saver(new_scripts)
            self._scripts = new_scripts
        logger.info(f"Store script registry now has {len(new_scripts)} script(s)")
        return new_scripts

    def __len__(self) -> int:
        return len(self._scripts)

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None


_registry: Optional[ScriptRegistry] = None
_registry_lock = threading.Lock()


def get_registry() -> ScriptRegistry:
    """Return the process-wide registry, loading it from configuration on first use."""
    global _registry
    with _registry_lock:
        if _registry is None:
            from ..config import load_config
            _registry = ScriptRegistry.from_config(load_config())
        return _registry


def set_registry(registry: Optional[ScriptRegistry]) -> None:
    """Install a process-wide registry (None forces a reload on next use)."""
    global _registry
    with _registry_lock:
        _registry = registry

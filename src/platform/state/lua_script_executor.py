"""
Lua script registry for Kvrocks.

Every ``*.lua`` file under the configured directories is registered with
redis-py's ``register_script()`` and addressed by its file stem, e.g.
``try_claim.lua`` runs as ``lua_script_executor.run('try_claim', ...)``.
"""

from pathlib import Path
from typing import Any, Iterable

from redis.exceptions import NoScriptError

from src.platform.constant.path import BOOKING_LUA_SCRIPT_DIR, LEDGER_LUA_SCRIPT_DIR
from src.platform.logging.loguru_io import Logger
from src.platform.state.kvrocks_client import KvrocksClientType


class LuaScripts:
    def __init__(self, *, script_dirs: Iterable[Path]) -> None:
        self._script_dirs = tuple(script_dirs)
        self._sources: dict[str, str] = {}
        self._scripts: dict[str, Any] = {}

    @property
    def is_initialized(self) -> bool:
        return bool(self._scripts)

    @property
    def names(self) -> list[str]:
        return sorted(self._sources)

    async def initialize(self, *, client: KvrocksClientType) -> None:
        """Load and register all scripts (idempotent)."""
        if self._scripts:
            return

        for script_dir in self._script_dirs:
            if not script_dir.is_dir():
                Logger.base.warning(f'⚠️ [LUA] Script directory not found: {script_dir}')
                continue
            for path in sorted(script_dir.glob('*.lua')):
                self._sources[path.stem] = path.read_text()

        for name, source in self._sources.items():
            self._scripts[name] = client.register_script(source)
        Logger.base.info(f'📜 [LUA] Registered {len(self._scripts)} scripts: {self.names}')

    async def run(
        self, name: str, *, client: KvrocksClientType, keys: list[str], args: list[Any]
    ) -> Any:
        """Execute a registered script, re-registering once if the server lost it."""
        script = self._scripts.get(name)
        if script is None:
            raise RuntimeError(f'Lua script "{name}" not registered')

        try:
            return await script(keys=keys, args=args, client=client)
        except NoScriptError:
            Logger.base.warning(f'⚠️ [LUA] {name} not found on server, re-registering...')
            script = client.register_script(self._sources[name])
            self._scripts[name] = script
            return await script(keys=keys, args=args, client=client)

    def reset(self) -> None:
        self._sources.clear()
        self._scripts.clear()


lua_script_executor = LuaScripts(script_dirs=(LEDGER_LUA_SCRIPT_DIR, BOOKING_LUA_SCRIPT_DIR))

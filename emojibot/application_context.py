"""Central application context wiring the bot's long-lived components."""

from __future__ import annotations

import asyncio
import logging

from .admin import AdminBridge
from .commands.interpreter import CommandInterpreter
from .config.model import BotConfig
from .emoji.directory import EmojiDirectory
from .health import StatusFilePublisher
from .session.supervisor import ConnectionSupervisor, Connector
from .storage.json_store import JsonEmojiStore
from .storage.protocols import EmojiStore


class ApplicationContext:
    """Holds shared async resources for the application lifecycle."""

    config: BotConfig
    store: EmojiStore
    directory: EmojiDirectory
    interpreter: CommandInterpreter
    supervisor: ConnectionSupervisor
    status_publisher: StatusFilePublisher
    admin: AdminBridge
    _started: bool
    _lock: asyncio.Lock

    def __init__(
        self,
        config: BotConfig,
        store: EmojiStore,
        connector: Connector | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self.directory = EmojiDirectory(store, config.node_ids)
        self.status_publisher = StatusFilePublisher(config.status_file)
        self.interpreter = CommandInterpreter(
            config.prefix,
            self.directory,
            store,
            shorthand=config.colon_emoji,
        )
        self.supervisor = ConnectionSupervisor(
            config,
            self.interpreter,
            connector,
            status_listener=self.status_publisher,
        )
        self.admin = AdminBridge(self.directory, self.supervisor)
        self._started = False
        self._lock = asyncio.Lock()

    # ------------------------- Construction ------------------------- #
    @classmethod
    def create(cls, config: BotConfig, store: EmojiStore | None = None) -> ApplicationContext:
        """Build a context, defaulting to the JSON store from ``data_file``."""
        logging.debug("🧪 Creating application context")
        return cls(config, store or JsonEmojiStore(config.data_file))

    # --------------------------- Lifecycle -------------------------- #
    async def start(self) -> None:
        """Load emojis, start the periodic refresh and connect to every VM.

        Idempotent.
        """
        async with self._lock:
            if self._started:
                return
            await self.directory.refresh()
            self.directory.start()
            self.supervisor.start()
            self._started = True
            logging.debug("🚀 Application context started")

    async def shutdown(self) -> None:
        """Close connections, stop timers and release the store."""
        async with self._lock:
            logging.info("🔻 Application context shutdown initiated")
            await self.supervisor.shutdown()
            await self.status_publisher.close()
            await self.directory.stop()
            await self.interpreter.drain()
            try:
                await self.store.close()
            except (RuntimeError, OSError, ValueError) as e:
                logging.error(f"💥 Error closing store: {str(e)}")
            self._started = False
            logging.info("✅ Application context shutdown complete")

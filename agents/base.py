"""
Base Agent Architecture
Lifecycle shared by the long-running agents: start/stop, signal handling and
shutdown-aware timers.
"""

from abc import ABC, abstractmethod
import logging
import asyncio
import signal
from typing import Any, Dict


class BaseAgent(ABC):
    """
    Abstract Base Class for autonomous agents.

    Handles:
    - Lifecycle management (start, stop)
    - Event loop integration
    - Signal handling
    - Interruptible sleeps between periodic work
    """

    def __init__(self, name: str, config: Dict[str, Any] = None):
        self.name = name
        self.config = config or {}
        self.is_running = False
        self._shutdown_event = asyncio.Event()
        self.logger = logging.getLogger(f"agent.{name}")

    async def start(self):
        """Start the agent's main loop and run until stopped."""
        self.is_running = True
        self._shutdown_event.clear()
        self.logger.info(f"Starting agent: {self.name}")

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, lambda: asyncio.create_task(self.stop()))
            except (NotImplementedError, RuntimeError):
                # Windows or non-main thread
                pass

        try:
            await self.run()
        except asyncio.CancelledError:
            self.logger.info("Agent task cancelled")
        except Exception as e:
            self.logger.error(f"Agent crashed: {e}", exc_info=True)
        finally:
            await self.cleanup()

    async def stop(self):
        """Signal the agent to stop."""
        self.logger.info(f"Stopping agent: {self.name}")
        self.is_running = False
        self._shutdown_event.set()

    @abstractmethod
    async def run(self):
        """Main execution logic. Must be implemented by subclasses."""
        pass

    async def cleanup(self):
        """Cleanup resources. Can be overridden."""
        self.logger.info("Cleaning up resources...")

    async def sleep(self, seconds: float) -> bool:
        """
        Sleep for up to `seconds`, waking early on shutdown.

        Returns True if the agent should keep running.
        """
        try:
            await asyncio.wait_for(self._shutdown_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass
        return self.is_running

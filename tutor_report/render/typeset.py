"""
MathJax Typesetting Gate

After the document reaches network idle, MathJax may still be initializing.
The gate polls the page until either entry point is available:

1. MathJax.typesetPromise  -> call it and wait for it
2. MathJax.startup.promise -> wait for startup to finish
3. neither                 -> sleep poll_interval and check again

The wait is bounded by a timeout and is cancelled with the surrounding task.
"""

import asyncio
import logging
from typing import Optional

from playwright.async_api import Error as PlaywrightError

from ..errors import ExportFailed, TypesetTimeout
from ..utils.config import Settings, get_settings

logger = logging.getLogger(__name__)

READY_TYPESET = "typeset"
READY_STARTUP = "startup"

READINESS_SCRIPT = """() => {
  const mj = window.MathJax;
  if (mj && typeof mj.typesetPromise === 'function') return 'typeset';
  if (mj && mj.startup && mj.startup.promise) return 'startup';
  return null;
}"""

TYPESET_SCRIPT = "() => window.MathJax.typesetPromise().then(() => true)"

STARTUP_SCRIPT = "() => window.MathJax.startup.promise.then(() => true)"


class TypesetGate:
    """Suspends until the page's math typesetting pass has completed."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self.timeout = timeout if timeout is not None else settings.TYPESET_TIMEOUT
        self.poll_interval = poll_interval if poll_interval is not None else settings.TYPESET_POLL_INTERVAL

    async def wait(self, session) -> str:
        """
        Wait for typesetting to complete.

        Args:
            session: RenderSession (anything with async evaluate())

        Returns:
            Which entry point resolved the wait ("typeset" or "startup")

        Raises:
            TypesetTimeout: MathJax did not finish within the timeout
            ExportFailed: evaluating in the page failed
        """
        try:
            return await asyncio.wait_for(self._poll(session), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.warning(f"MathJax typesetting did not complete within {self.timeout}s")
            raise TypesetTimeout(f"Math typesetting timed out after {self.timeout}s") from e
        except PlaywrightError as e:
            raise ExportFailed(f"Math typesetting failed: {e}") from e

    async def _poll(self, session) -> str:
        checks = 0
        while True:
            checks += 1
            state = await session.evaluate(READINESS_SCRIPT)
            if state == READY_TYPESET:
                await session.evaluate(TYPESET_SCRIPT)
                break
            if state == READY_STARTUP:
                await session.evaluate(STARTUP_SCRIPT)
                break
            await asyncio.sleep(self.poll_interval)

        logger.debug(f"Typesetting complete via {state} after {checks} check(s)")
        return state

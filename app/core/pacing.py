# app/core/pacing.py

import asyncio


class Pacer:
    """Fixed pause between consecutive calls to the messaging network.

    Args:
        interval: Seconds to wait after each call. 0 disables pacing.
    """

    def __init__(self, interval: float = 0.2):
        if interval < 0:
            raise ValueError("Pacing interval cannot be negative")
        self.interval = interval

    async def wait(self) -> None:
        if self.interval > 0:
            await asyncio.sleep(self.interval)

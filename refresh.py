"""
Refresh loop: fetch every airport on the roster, classify, and push the
resulting colors to the frame.

One tick fans out one fetch per airport, waits for all of them, then opens
the serial link and writes every assignment before the next tick starts.
Per-airport failures only skip that airport; failing to open the serial
link skips the tick.
"""
import asyncio
import logging
from typing import Callable, Optional

import httpx

from config import Config
from errors import MetarFrameError, SerialOpenError, SerialWriteError
from fetch import fetch_observation, make_client
from flight_rules import classify, color_for
from roster import Roster
from serial_link import Assignment, SerialEmitter


logger = logging.getLogger(__name__)


def serial_emitter(config: Config) -> SerialEmitter:
    return SerialEmitter(config.serial_port, config.baud_rate, config.serial_timeout_s)


class IntervalTimer:
    """
    Fixed-interval ticker on the event loop clock.

    The first tick fires immediately. If a refresh overruns the interval the
    next tick fires at once; missed ticks are not replayed.
    """

    def __init__(self, interval: float, clock: Optional[Callable[[], float]] = None):
        self.interval = interval
        self._clock = clock
        self._deadline: Optional[float] = None

    def _now(self) -> float:
        if self._clock is not None:
            return self._clock()
        return asyncio.get_running_loop().time()

    async def tick(self) -> None:
        now = self._now()
        if self._deadline is None:
            self._deadline = now
        elif self._deadline > now:
            await asyncio.sleep(self._deadline - now)
        else:
            self._deadline = now
        self._deadline += self.interval


async def resolve_assignment(
    client: httpx.AsyncClient,
    airport: str,
    led_index: int,
    conservative_ceilings: bool = False,
) -> Assignment:
    """Fetch one airport and turn its observation into an LED assignment."""
    observation = await fetch_observation(client, airport)
    rules = classify(observation, unknown_ceiling_as_low_ifr=conservative_ceilings)
    color = color_for(rules)
    logger.debug("%s is %s (%s)", airport, rules.name, color.value)
    return Assignment(led_index, color)


async def collect_assignments(config: Config, roster: Roster, client: httpx.AsyncClient) -> list[Assignment]:
    """Resolve every airport concurrently, skipping the ones that fail."""
    airports = list(roster)
    results = await asyncio.gather(
        *(resolve_assignment(client, airport, roster[airport], config.conservative_ceilings)
          for airport in airports),
        return_exceptions=True,
    )

    assignments = []
    for airport, result in zip(airports, results):
        if isinstance(result, Assignment):
            assignments.append(result)
        elif isinstance(result, MetarFrameError):
            logger.warning("Skipping %s (LED%d): %s", airport, roster[airport], result)
        elif isinstance(result, Exception):
            logger.error("Skipping %s (LED%d): unexpected error", airport, roster[airport],
                         exc_info=result)
        else:
            raise result
    return assignments


def write_assignments(emitter: SerialEmitter, assignments: list[Assignment]) -> list[Assignment]:
    """Write assignments in order; a failed write drops only that assignment."""
    written = []
    for assignment in assignments:
        try:
            emitter.emit(assignment)
        except SerialWriteError as e:
            logger.error("Failed to set LED%d: %s", assignment.led_index, e)
            continue
        written.append(assignment)
    return written


async def refresh_once(
    config: Config,
    roster: Roster,
    client: httpx.AsyncClient,
    emitter_factory: Callable[[Config], SerialEmitter] = serial_emitter,
) -> list[Assignment]:
    """Run one tick. Returns the assignments written to the frame."""
    assignments = await collect_assignments(config, roster, client)
    if not assignments:
        logger.warning("No flight rules available this tick; leaving LEDs unchanged")
        return []

    with emitter_factory(config) as emitter:
        written = write_assignments(emitter, assignments)

    logger.info("Set %d/%d LEDs", len(written), len(roster))
    return written


async def run(
    config: Config,
    roster: Roster,
    ticks: Optional[int] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    emitter_factory: Callable[[Config], SerialEmitter] = serial_emitter,
    timer: Optional[IntervalTimer] = None,
) -> None:
    """
    Refresh the frame every config.refresh_interval_s seconds.

    Runs forever unless ticks is given. A failed tick is logged and the next
    tick starts from scratch.
    """
    timer = timer or IntervalTimer(config.refresh_interval_s)
    count = 0

    async with make_client(config.http_timeout_s, transport) as client:
        while ticks is None or count < ticks:
            await timer.tick()
            count += 1
            logger.info("Querying METARs and setting colors")
            try:
                await refresh_once(config, roster, client, emitter_factory)
            except SerialOpenError as e:
                logger.error("Failed to set colors: %s", e)
            except Exception:
                logger.exception("Failed to set colors")

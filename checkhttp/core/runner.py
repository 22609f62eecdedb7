"""Retry orchestration over the single-request evaluator.

Consecutive mode (default) wants ``consecutive`` successes in a row and
stops at the first failure. Wait-for mode tolerates failures, restarting
the success count after each one, until the run deadline passes. Both
modes share one loop and one deadline-aware wait.
"""

import asyncio
from enum import Enum

import httpx

from checkhttp.core.deadline import Deadline
from checkhttp.core.engine import Engine
from checkhttp.core.errors import ConfigError
from checkhttp.core.models import CheckResult, Config, Verdict
from checkhttp.core.transport import build_client
from checkhttp.reporters.console import Log

GIVE_UP = "Give up waiting for success"


class Phase(Enum):
    ATTEMPTING = "attempting"
    WAITING = "waiting"
    DONE = "done"


class Runner:
    def __init__(self, config: Config, client: httpx.AsyncClient, logger: Log | None = None):
        self.config = config
        self.logger = logger or Log(verbose=config.verbose)
        self.engine = Engine(config, client, self.logger)
        self.attempts = 0

    async def run(self, deadline: Deadline | None = None) -> CheckResult:
        config = self.config
        if deadline is None:
            deadline = Deadline(config.deadline)
        target = max(config.consecutive, 1)
        pending = target
        interval = 0.0
        phase = Phase.ATTEMPTING
        result = CheckResult(Verdict.UNKNOWN, GIVE_UP)

        while phase is not Phase.DONE:
            if phase is Phase.WAITING:
                await deadline.sleep(interval)
                phase = Phase.ATTEMPTING
                continue

            if deadline.expired:
                self.logger.warn(f"deadline reached after {self.attempts} attempt(s)")
                result = CheckResult(Verdict.UNKNOWN, GIVE_UP)
                phase = Phase.DONE
                continue

            self.attempts += 1
            outcome = await self.engine.request(deadline)
            self.logger.attempt(self.attempts, outcome)
            if outcome.ok:
                pending -= 1
                if pending <= 0:
                    result = CheckResult(Verdict.OK, outcome.message)
                    phase = Phase.DONE
                else:
                    interval = config.interim
                    phase = Phase.WAITING
            elif config.wait_for:
                pending = target
                interval = config.wait_for_interval
                phase = Phase.WAITING
            else:
                result = CheckResult(outcome.verdict, outcome.message)
                phase = Phase.DONE
        return result


async def run_check(config: Config, transport: httpx.AsyncBaseTransport | None = None,
                    logger: Log | None = None) -> CheckResult:
    logger = logger or Log(verbose=config.verbose)
    try:
        client = build_client(config, transport=transport, log=logger)
    except ConfigError as exc:
        return CheckResult(Verdict.UNKNOWN, f"Error in http configuration: {exc}")
    async with client:
        return await Runner(config, client, logger).run()


def check(config: Config, transport: httpx.AsyncBaseTransport | None = None,
          logger: Log | None = None) -> CheckResult:
    """Run the probe to completion and return its single verdict."""
    return asyncio.run(run_check(config, transport=transport, logger=logger))

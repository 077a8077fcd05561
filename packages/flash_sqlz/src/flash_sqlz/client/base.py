from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from flash_sqlz.info import BuilderState, StatementInfo
from flash_sqlz.materializer import PydanticMaterializer

if TYPE_CHECKING:
    from flash_sqlz.executor import Executor
    from flash_sqlz.materializer import Materializer

logger = logging.getLogger(__name__)


class ClientBase:
    """
    Shared state of a client: the executor, the materializer and the
    statement currently being built.

    A client is not safe for concurrent use. Threads should each own a
    client; clients may share one engine, whose pool is thread-safe.
    """

    def __init__(
        self,
        executor: Executor,
        *,
        materializer: Materializer | None = None,
        where_joiner: str = ",",
    ):
        self.executor = executor
        self.materializer: Materializer = materializer or PydanticMaterializer()
        self.where_joiner = where_joiner
        self.auto_rollback = False
        self.info = StatementInfo()
        self._state = BuilderState.IDLE

    @property
    def state(self) -> BuilderState:
        return self._state

    def _configure(self) -> None:
        if self._state is BuilderState.IDLE:
            self._state = BuilderState.CONFIGURING

    def clear(self) -> None:
        """Drop the statement being built and return to IDLE."""
        self.info = StatementInfo()
        self._state = BuilderState.IDLE

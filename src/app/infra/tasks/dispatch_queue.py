"""Fila assíncrona limitada com pool fixo de workers.

- enable(): cria a fila e inicia os workers (chamada repetida é ignorada)
- submit(): bloqueia apenas enquanto a fila está cheia
- shutdown(): fecha a fila; os workers drenam o que restou e encerram
- exceção de uma tarefa é logada e não derruba o worker
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable

from utils.errors import AsyncNotEnabledError
from utils.errors.exceptions import ASYNC_NOT_ENABLED_MESSAGE

Task = Callable[[], object]

# Sentinela de parada, uma por worker
_STOP = object()


class AsyncDispatchQueue:
    """Executa tarefas sem argumento em background, em ordem FIFO por worker.

    Args:
        max_queue_size: Capacidade da fila
        worker_count: Quantidade de workers
        name: Prefixo dos nomes das threads
        logger: Logger injetado
    """

    def __init__(
        self,
        max_queue_size: int,
        worker_count: int,
        *,
        name: str = "uim-async",
        logger: logging.Logger | None = None,
    ) -> None:
        if max_queue_size <= 0 or worker_count <= 0:
            raise ValueError("max_queue_size e worker_count devem ser > 0")
        self.name = name
        self._max_queue_size = max_queue_size
        self._worker_count = worker_count
        self._logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._queue: queue.Queue[object] | None = None
        self._workers: list[threading.Thread] = []
        self._enabled = False

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    def enable(self) -> None:
        with self._lock:
            if self._enabled:
                self._logger.warning("async_queue_already_enabled", extra={"queue": self.name})
                return

            self._queue = queue.Queue(maxsize=self._max_queue_size)
            self._workers = [
                threading.Thread(
                    target=self._run,
                    args=(self._queue,),
                    name=f"{self.name}-{index}",
                    daemon=True,
                )
                for index in range(self._worker_count)
            ]
            for worker in self._workers:
                worker.start()
            self._enabled = True

        self._logger.info(
            "async_queue_enabled",
            extra={
                "queue": self.name,
                "max_queue_size": self._max_queue_size,
                "worker_count": self._worker_count,
            },
        )

    def submit(self, task: Task) -> None:
        """Enfileira `task`.

        Raises:
            AsyncNotEnabledError: fila não habilitada ou já encerrada
        """
        with self._lock:
            if not self._enabled or self._queue is None:
                raise AsyncNotEnabledError(ASYNC_NOT_ENABLED_MESSAGE)
            # put bloqueante sob o lock: shutdown não intercala com um submit
            self._queue.put(task)

    def shutdown(self, wait: bool = True) -> None:
        """Fecha a fila; tarefas já enfileiradas ainda são executadas."""
        with self._lock:
            if not self._enabled or self._queue is None:
                return
            self._enabled = False
            task_queue = self._queue
            workers = self._workers
            self._queue = None
            self._workers = []

        for _ in workers:
            task_queue.put(_STOP)
        if wait:
            for worker in workers:
                worker.join()

        self._logger.info("async_queue_shutdown", extra={"queue": self.name})

    def _run(self, task_queue: queue.Queue[object]) -> None:
        while True:
            task = task_queue.get()
            try:
                if task is _STOP:
                    return
                task()  # type: ignore[operator]
            except Exception:
                self._logger.exception("async_task_failed", extra={"queue": self.name})
            finally:
                task_queue.task_done()

# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Durable queue of resources waiting to be disposed of.

The queue is stored in a YAML file, so pending disposals survive restarts
of the process. Every operation reloads the file under an exclusive lock,
so the same file can be shared by several processes (e.g. `wipeout wipe`
adding new disposals while `wipeout process --loop` executes them).

Disposals are executed in worker threads. Before execution, a disposal is
leased by the executing process, which prevents concurrent executions of
the same disposal. The lease is renewed for as long as the disposal runs
and only its owner may record the outcome. Failed or still pending disposals
are retried with exponential backoff until they report that the resource
has been purged or until they are discarded by the operator.

All times stored in the queue are timezone-aware and in UTC.
"""

import fcntl
import os
import tempfile
import threading
import time
import uuid
from collections.abc import Callable, Iterator
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, NamedTuple, Self

import yaml

from wipeout_lib.core.common import (
    load_yaml_dumper,
    load_yaml_loader,
    to_utc,
    utc_now,
)
from wipeout_lib.core.config import CFG
from wipeout_lib.core.error import WipeoutError
from wipeout_lib.core.logger import get_logger
from wipeout_lib.runtime import Runtime

from .disposable import Disposable, DisposalState

logger = get_logger(__name__, show_time=True)

SafeLoader: type[yaml.SafeLoader] = load_yaml_loader()
Dumper: type[yaml.Dumper] = load_yaml_dumper()


@dataclass
class WorkItem:
    """
    Disposal registered in the queue together with the state of its processing.
    """

    # Unique identifier of the item
    id: str

    # The resource to dispose of
    disposable: Disposable

    # Time of registration
    registered: datetime

    # Number of finished attempts
    attempts: int = 0

    # Outcome of the last attempt
    last_state: DisposalState = DisposalState.PENDING

    # Description of the error raised by the last attempt
    problem: str | None = None

    # The item is not executed before this time
    next_attempt: datetime | None = None

    # The item is being executed by some process until this time
    lease_until: datetime | None = None

    # Token of the processing pass holding the lease
    lease_owner: str | None = None

    def __post_init__(self):
        self.registered = to_utc(self.registered)
        self.next_attempt = _to_utc_or_none(self.next_attempt)
        self.lease_until = _to_utc_or_none(self.lease_until)

    def isLeased(self, now: datetime) -> bool:
        """Return True if the item is reserved by an executing process."""
        return self.lease_until is not None and self.lease_until > to_utc(now)

    def isDue(self, now: datetime) -> bool:
        """Return True if the item should be executed now."""
        return not self.isLeased(now) and (
            self.next_attempt is None or self.next_attempt <= to_utc(now)
        )

    def toDict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "disposable": self.disposable.toDict(),
            "registered": self.registered.isoformat(),
            "attempts": self.attempts,
            "last_state": self.last_state.value,
            "problem": self.problem,
            "next_attempt": _isoformat_or_none(self.next_attempt),
            "lease_until": _isoformat_or_none(self.lease_until),
            "lease_owner": self.lease_owner,
        }

    @classmethod
    def fromDict(cls, data: dict[str, Any]) -> Self:
        """
        Construct the item from its dictionary form.

        Raises:
            WipeoutError: If the data are invalid.
        """
        try:
            return cls(
                id=str(data["id"]),
                disposable=Disposable.fromDict(data["disposable"]),
                registered=_to_datetime(data["registered"]),
                attempts=int(data.get("attempts", 0)),
                last_state=DisposalState.fromStr(
                    data.get("last_state") or DisposalState.PENDING.value
                ),
                problem=data.get("problem"),
                next_attempt=_to_datetime_or_none(data.get("next_attempt")),
                lease_until=_to_datetime_or_none(data.get("lease_until")),
                lease_owner=data.get("lease_owner"),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise WipeoutError(f"Invalid disposal record: {e}.") from e


class _Outcome(NamedTuple):
    """Result of a single execution of a disposal."""

    state: DisposalState
    # description of the raised error
    problem: str | None
    # time at which the execution finished
    finished: datetime
    # PENDING reported only because the process is going down
    interrupted: bool = False


class DisposalQueue:
    """
    Durable set of pending disposals, stored in a YAML file.
    """

    def __init__(
        self,
        file: Path,
        initial_backoff: timedelta | None = None,
        max_backoff: timedelta | None = None,
        lease: timedelta | None = None,
        workers: int | None = None,
    ):
        """
        Args:
            file (Path): File storing the queue. Created when first needed.
            initial_backoff (timedelta | None): Wait time before the first retry.
            max_backoff (timedelta | None): Maximal wait time between two attempts.
            lease (timedelta | None): Time for which an executed item is reserved.
            workers (int | None): Number of threads executing the disposals.

        Unspecified values are taken from `CFG.disposal`.
        """
        self._file = file
        self._lock_file = file.with_name(file.name + ".lock")
        self._initial_backoff = initial_backoff or timedelta(
            seconds=CFG.disposal.initial_backoff
        )
        self._max_backoff = max_backoff or timedelta(seconds=CFG.disposal.max_backoff)
        self._lease = lease or timedelta(seconds=CFG.disposal.lease)
        self._workers = workers or CFG.disposal.workers
        self._thread_lock = threading.Lock()

    @classmethod
    def fromConfig(cls) -> Self:
        """Create the queue stored in the file specified by the wipeout config."""
        return cls(CFG.disposal.queue_path)

    def getFile(self) -> Path:
        return self._file

    def dispose(self, disposable: Disposable) -> WorkItem:
        """
        Register a resource for asynchronous disposal.

        If the same resource is already pending, the existing item is returned.

        Returns:
            WorkItem: The item tracking the disposal.

        Raises:
            WipeoutError: If the queue file cannot be read or written.
        """
        with self._transaction() as items:
            for item in items.values():
                if item.disposable == disposable:
                    logger.debug(f"'{disposable}' is already pending.")
                    return item

            item = WorkItem(
                id=uuid.uuid4().hex[:12],
                disposable=disposable,
                registered=utc_now(),
            )
            items[item.id] = item

        logger.debug(f"Registered '{disposable}' for disposal as '{item.id}'.")
        return item

    def getItems(self) -> list[WorkItem]:
        """Return all pending items ordered by their registration time."""
        with self._transaction() as items:
            return sorted(items.values(), key=lambda item: item.registered)

    def getItem(self, item_id: str) -> WorkItem | None:
        """Return the item with the given identifier or None if there is no such item."""
        with self._transaction() as items:
            return items.get(item_id)

    def discard(self, item_id: str) -> WorkItem:
        """
        Remove an item from the queue without disposing of its resource.

        Raises:
            WipeoutError: If there is no such item.
        """
        with self._transaction() as items:
            try:
                item = items.pop(item_id)
            except KeyError as e:
                raise WipeoutError(f"No pending disposal '{item_id}'.") from e

        logger.debug(f"Discarded '{item.disposable}'.")
        return item

    def getBackoff(self, attempts: int) -> timedelta:
        """
        Return the wait time after the given number of unsuccessful attempts.
        """
        if attempts <= 0:
            return timedelta(0)

        # cap the exponent to avoid overflows for long-failing items
        factor = 2 ** min(attempts - 1, 32)
        return min(self._initial_backoff * factor, self._max_backoff)

    def processPending(self, now: datetime | None = None) -> list[WorkItem]:
        """
        Execute all items which are due.

        Items reporting PURGED are removed from the queue. Items reporting PENDING
        or raising an exception are rescheduled with backoff counted from the end
        of their execution. Items which report PENDING only because the runtime
        is shutting down keep their attempt count and stay due.

        The leases of the executed items are renewed while they run. The outcome
        of an item whose lease was taken over by another process is dropped.

        Args:
            now (datetime | None): The current time. Defaults to the current UTC time.

        Returns:
            list[WorkItem]: The executed items in their updated state.

        Raises:
            WipeoutError: If the queue file cannot be read or written.
        """
        now = utc_now() if now is None else to_utc(now)
        started = time.monotonic()

        def clock() -> datetime:
            # `now` advanced by the time spent in this call
            return now + timedelta(seconds=time.monotonic() - started)

        owner = uuid.uuid4().hex
        with self._transaction() as items:
            claimed = [item for item in items.values() if item.isDue(now)]
            for item in claimed:
                item.lease_until = now + self._lease
                item.lease_owner = owner

        if not claimed:
            logger.debug("No disposal is due.")
            return []

        logger.debug(f"Executing {len(claimed)} disposal(s) as '{owner}'.")
        stop = threading.Event()
        keeper = threading.Thread(
            target=self._keepLeases,
            args=([item.id for item in claimed], owner, clock, stop),
            name="wipeout-lease-keeper",
            daemon=True,
        )
        keeper.start()
        try:
            with ThreadPoolExecutor(max_workers=self._workers) as executor:
                outcomes = list(
                    executor.map(lambda item: self._attempt(item, clock), claimed)
                )
        finally:
            stop.set()
            keeper.join()

        with self._transaction() as items:
            for item, outcome in zip(claimed, outcomes):
                self._record(items, item, outcome, owner)

        return claimed

    def run(self, stop_event: threading.Event, poll_interval: float | None = None):
        """
        Periodically execute due items until `stop_event` is set.
        """
        interval = CFG.disposal.poll_interval if poll_interval is None else poll_interval
        logger.info(f"Processing disposals from '{self._file}'.")

        while not stop_event.is_set():
            try:
                self.processPending()
            except WipeoutError as e:
                logger.error(e)
            stop_event.wait(interval)

    def _attempt(self, item: WorkItem, clock: Callable[[], datetime]) -> _Outcome:
        """
        Execute a single item.
        """
        try:
            state = item.disposable.dispose()
        except Exception as e:
            logger.warning(
                f"Could not dispose of '{item.disposable}': {e}\nThis was attempt {item.attempts + 1}."
            )
            return _Outcome(DisposalState.PENDING, f"{type(e).__name__}: {e}", clock())

        interrupted = state == DisposalState.PENDING and Runtime.isShuttingDown()
        return _Outcome(state, None, clock(), interrupted)

    def _keepLeases(
        self,
        ids: list[str],
        owner: str,
        clock: Callable[[], datetime],
        stop: threading.Event,
    ) -> None:
        """
        Extend the leases held by `owner` on the items `ids` until `stop` is set.
        """
        interval = self._lease.total_seconds() / 3
        while not stop.wait(interval):
            try:
                with self._transaction() as items:
                    for item_id in ids:
                        item = items.get(item_id)
                        if item is not None and item.lease_owner == owner:
                            item.lease_until = clock() + self._lease
            except WipeoutError as e:
                logger.warning(f"Could not renew the leases of running disposals: {e}")

    def _record(
        self,
        items: dict[str, WorkItem],
        executed: WorkItem,
        outcome: _Outcome,
        owner: str,
    ) -> None:
        """
        Store the outcome of an attempt into the items loaded from the file.
        """
        executed.last_state = outcome.state
        executed.lease_until = None
        executed.lease_owner = None

        item = items.get(executed.id)
        if item is None:
            # discarded while being executed
            logger.debug(f"'{executed.disposable}' was discarded during its execution.")
            return

        if item.lease_owner != owner:
            logger.warning(
                f"Lease of '{item.disposable}' was taken over by another process. Dropping the outcome of this attempt."
            )
            return

        if outcome.state == DisposalState.PURGED:
            del items[item.id]
            logger.info(f"Disposed of '{item.disposable}'.")
        elif outcome.interrupted:
            logger.debug(f"Disposal of '{item.disposable}' was interrupted by shutdown.")
        else:
            item.attempts += 1
            item.problem = outcome.problem
            item.next_attempt = outcome.finished + self.getBackoff(item.attempts)

        item.last_state = outcome.state
        item.lease_until = None
        item.lease_owner = None

        # reflect the outcome in the returned item
        executed.attempts = item.attempts
        executed.problem = item.problem
        executed.next_attempt = item.next_attempt

    @contextmanager
    def _transaction(self) -> Iterator[dict[str, WorkItem]]:
        """
        Load the items under an exclusive lock and store them back on exit.

        Nothing is written if the body raises an exception.

        Raises:
            WipeoutError: If the queue file cannot be read or written.
        """
        try:
            self._file.parent.mkdir(parents=True, exist_ok=True)
            with self._thread_lock, self._lock_file.open("a") as lock:
                fcntl.flock(lock, fcntl.LOCK_EX)
                try:
                    items, unreadable = self._load()
                    yield items
                    self._save(items, unreadable)
                finally:
                    fcntl.flock(lock, fcntl.LOCK_UN)
        except OSError as e:
            raise WipeoutError(
                f"Could not access the disposal queue '{self._file}': {e}."
            ) from e

    def _load(self) -> tuple[dict[str, WorkItem], list[Any]]:
        """
        Read the items from the queue file.

        Records which cannot be interpreted are returned separately,
        so that they are preserved when the file is written back.
        """
        if not self._file.exists():
            return {}, []

        try:
            with self._file.open("r") as input:
                data = yaml.load(input, Loader=SafeLoader) or {}
        except yaml.YAMLError as e:
            raise WipeoutError(
                f"Could not parse the disposal queue '{self._file}': {e}."
            ) from e

        if not isinstance(data, dict):
            raise WipeoutError(
                f"Could not parse the disposal queue '{self._file}': not a mapping."
            )

        items: dict[str, WorkItem] = {}
        unreadable: list[Any] = []
        for record in data.get("items") or []:
            try:
                item = WorkItem.fromDict(record)
                items[item.id] = item
            except WipeoutError as e:
                logger.warning(f"Skipping a record in '{self._file}': {e}")
                unreadable.append(record)

        return items, unreadable

    def _save(self, items: dict[str, WorkItem], unreadable: list[Any]) -> None:
        """
        Atomically write the items into the queue file.
        """
        if not items and not unreadable and not self._file.exists():
            return

        content = "# wipeout disposal queue\n" + yaml.dump(
            {"items": [item.toDict() for item in items.values()] + unreadable},
            Dumper=Dumper,
            default_flow_style=False,
            sort_keys=False,
        )

        fd, tmp = tempfile.mkstemp(
            dir=self._file.parent, prefix=f".{self._file.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as output:
                output.write(content)
                output.flush()
                os.fsync(output.fileno())
            os.replace(tmp, self._file)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise


def _isoformat_or_none(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _to_datetime(value: Any) -> datetime:
    # the YAML loader may already have converted the value
    if isinstance(value, datetime):
        return to_utc(value)
    return to_utc(datetime.fromisoformat(str(value)))


def _to_datetime_or_none(value: Any) -> datetime | None:
    return None if value is None else _to_datetime(value)


def _to_utc_or_none(value: datetime | None) -> datetime | None:
    return None if value is None else to_utc(value)

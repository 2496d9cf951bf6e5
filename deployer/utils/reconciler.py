from dataclasses import dataclass, field
from typing import Any, List, Optional

from deployer.utils import log
from deployer.utils.edges import PermissionEdge, same_value
from deployer.utils.executor import TransactionRecord


@dataclass(frozen=True)
class ReconcileEvent:
    name: str
    index: int
    total: int
    label: str
    current: Any = None
    desired: Any = None
    record: Optional[TransactionRecord] = None
    error: Optional[BaseException] = None


@dataclass
class ReconcileReport:
    applied: List[TransactionRecord] = field(default_factory=list)
    pending: List[TransactionRecord] = field(default_factory=list)
    skipped: List[PermissionEdge] = field(default_factory=list)

    @property
    def transactions(self):
        return len(self.applied) + len(self.pending)

    @property
    def converged(self):
        return self.transactions == 0


def log_event(event: ReconcileEvent):
    # default observer, renders engine events on the console
    position = f"[{event.index + 1}/{event.total}]"
    if event.name == "edge_skipped":
        log.h3(f"{position} Skipping {event.label} (already {log.short(event.current)})")
    elif event.name == "edge_checked":
        log.h2(f"{position} {event.label}: {log.short(event.current)} -> {log.short(event.desired)}")
    elif event.name == "edge_applied":
        log.h3(f"{position} Applied {event.label}")
    elif event.name == "edge_pending":
        log.warn(f"{position} Signalled {event.label}, waiting for the timelock")
    elif event.name == "edge_failed":
        log.error(f"{position} Failed {event.label}: {event.error}")
        log.error(f"Edges after {event.index + 1} were not attempted, re-run once the cause is fixed")
    elif event.name == "pass_finished":
        log.info(f"Reconciliation finished: {event.current} transaction(s) sent for {event.total} edge(s)")


class Reconciler:
    """
    Brings on-chain state in line with an ordered list of `PermissionEdge`.

    Every edge is read, compared and, if needed, written before the next one
    is looked at: later reads observe earlier writes, and the single signer's
    nonce is never raced. Edges already holding are skipped, so re-running
    against a converged system sends nothing. There is no rollback: a failing
    edge halts the pass with earlier edges applied and later ones untouched.

    Writes are not re-verified after confirmation.
    """

    def __init__(self, executor, retry=None, observer=log_event):
        self.executor = executor
        self.retry = retry
        self.observer = observer

    def _emit(self, name, index, total, edge, **kwargs):
        if self.observer is not None:
            self.observer(ReconcileEvent(name=name, index=index, total=total, label=edge.describe(), **kwargs))

    def _read(self, read):
        if self.retry is None:
            return read()
        return self.retry.run(read)

    def reconcile(self, edges, reads=None) -> ReconcileReport:
        """
        Applies `edges` in declared order. `reads`, when given, is a parallel
        list of read functions used instead of each edge's own `read`.
        Returns a `ReconcileReport`; the first failure is re-raised.
        """
        edges = list(edges)
        if reads is not None:
            reads = list(reads)
            if len(reads) != len(edges):
                raise ValueError(f"Got {len(reads)} read functions for {len(edges)} edges")

        report = ReconcileReport()
        total = len(edges)

        for index, edge in enumerate(edges):
            read = reads[index] if reads is not None else edge.read
            try:
                desired = edge.resolve_desired()
                current = self._read(read)

                if same_value(current, desired):
                    report.skipped.append(edge)
                    self._emit("edge_skipped", index, total, edge, current=current, desired=desired)
                    continue

                self._emit("edge_checked", index, total, edge, current=current, desired=desired)
                record = self.executor.send(edge.write(desired), edge.describe())

            except Exception as exception:
                self._emit("edge_failed", index, total, edge, error=exception)
                raise

            if edge.deferred:
                report.pending.append(record)
                self._emit("edge_pending", index, total, edge, desired=desired, record=record)
            else:
                report.applied.append(record)
                self._emit("edge_applied", index, total, edge, desired=desired, record=record)

        if self.observer is not None:
            self.observer(ReconcileEvent(
                name="pass_finished", index=total - 1, total=total, label="", current=report.transactions,
            ))
        return report

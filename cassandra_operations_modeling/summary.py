from typing import List
from typing import Optional

import humanize

from cassandra_operations_modeling.estimators.utils import finite_or_zero
from cassandra_operations_modeling.interface import ExcludeUnsetModel
from cassandra_operations_modeling.interface import OperationsEstimate


class OperationsSummaryRow(ExcludeUnsetModel):
    table: str
    read_one: int = 0
    read_local_quorum: int = 0
    read_quorum: int = 0
    read_all: int = 0
    coordinator_reads: int = 0
    writes: int = 0
    # Sizes in bytes
    non_rf_space_used_compressed: float = 0.0
    non_rf_space_used_uncompressed: float = 0.0
    total_space_used_uncompressed: float = 0.0
    total_rows: int = 0
    average_row_size: int = 0
    resolved: bool = True

    @property
    def busyness(self) -> int:
        return self.read_local_quorum + self.writes


class OperationsSummary(ExcludeUnsetModel):
    """Per table rows, busiest first, with a totals row

    An unavailable estimate (some node without uptime) has no rows and no
    totals, callers should surface a warning instead.
    """

    rows: List[OperationsSummaryRow] = []
    total: Optional[OperationsSummaryRow] = None


def summarize(estimate: OperationsEstimate) -> OperationsSummary:
    if not estimate.is_available:
        return OperationsSummary()

    rows = []
    for table, reads in estimate.reads.items():
        writes = estimate.writes.get(table)
        row = OperationsSummaryRow(
            table=table,
            read_one=reads.one,
            read_local_quorum=reads.local_quorum,
            read_quorum=reads.quorum,
            read_all=reads.all,
            coordinator_reads=estimate.coordinator_reads.get(table, 0),
            total_rows=estimate.total_rows.get(table, 0),
            average_row_size=estimate.row_sizes.get(table, 0),
            resolved=reads.is_resolved and (writes is None or writes.is_resolved),
        )
        if writes is not None:
            row = row.model_copy(
                update={
                    "writes": writes.writes,
                    "non_rf_space_used_compressed": finite_or_zero(
                        writes.non_rf_space_used_compressed
                    ),
                    "non_rf_space_used_uncompressed": finite_or_zero(
                        writes.non_rf_space_used_uncompressed
                    ),
                    "total_space_used_uncompressed": finite_or_zero(
                        writes.total_space_used_uncompressed
                    ),
                }
            )
        rows.append(row)

    rows.sort(key=lambda r: r.busyness, reverse=True)

    # Unresolved rows carry -1 markers which would corrupt the sums
    resolved = [r for r in rows if r.resolved]
    total = OperationsSummaryRow(
        table="Total",
        read_one=sum(r.read_one for r in resolved),
        read_local_quorum=sum(r.read_local_quorum for r in resolved),
        read_quorum=sum(r.read_quorum for r in resolved),
        read_all=sum(r.read_all for r in resolved),
        coordinator_reads=sum(r.coordinator_reads for r in resolved),
        writes=sum(r.writes for r in resolved),
        non_rf_space_used_compressed=sum(
            r.non_rf_space_used_compressed for r in resolved
        ),
        non_rf_space_used_uncompressed=sum(
            r.non_rf_space_used_uncompressed for r in resolved
        ),
        total_space_used_uncompressed=sum(
            r.total_space_used_uncompressed for r in resolved
        ),
        total_rows=sum(r.total_rows for r in resolved),
    )
    return OperationsSummary(rows=rows, total=total)


def human_bytes(size: float) -> str:
    # SI units, 1 kB = 1000 B
    return humanize.naturalsize(int(finite_or_zero(size)))


def human_count(count: int) -> str:
    return humanize.intword(count)

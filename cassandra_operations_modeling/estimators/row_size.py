import logging

from cassandra_operations_modeling.estimators import EstimationInputs
from cassandra_operations_modeling.estimators import OperationsEstimator
from cassandra_operations_modeling.estimators.common import decompress
from cassandra_operations_modeling.estimators.common import effective_compression_ratio
from cassandra_operations_modeling.estimators.utils import finite_or_zero
from cassandra_operations_modeling.interface import TableMetricsAccessor

logger = logging.getLogger(__name__)


def total_rows(table: TableMetricsAccessor, inputs: EstimationInputs) -> int:
    if inputs.row_counts is None:
        return 0
    # Nodes without sstable statistics are simply missing from the sum
    return int(sum(inputs.row_counts.row_counts(table.name).values()))


def estimate_row_size(table: TableMetricsAccessor, inputs: EstimationInputs) -> int:
    """Approximate mean uncompressed row size in bytes

    Both the size and the row count are summed over every replica so the
    replication factor cancels out. When some nodes are missing both sums
    shrink proportionally and the estimate is based on what we have.
    """
    rows = total_rows(table, inputs)
    if rows <= 0:
        return 0

    ratio = finite_or_zero(effective_compression_ratio(table.compression_ratio_samples))
    uncompressed = decompress(sum(table.live_disk_space_used.values(), 0.0), ratio)
    row_size = int(finite_or_zero(uncompressed)) // rows
    logger.debug("Estimated row size for %s: %d bytes", table.name, row_size)
    return row_size


class RowSizeEstimator(OperationsEstimator):
    requires_uptime = False

    @staticmethod
    def estimate(table: TableMetricsAccessor, inputs: EstimationInputs) -> int:
        return estimate_row_size(table, inputs)

    @staticmethod
    def description():
        return "Mean uncompressed row size in bytes"


class TotalRowsEstimator(OperationsEstimator):
    requires_uptime = False

    @staticmethod
    def estimate(table: TableMetricsAccessor, inputs: EstimationInputs) -> int:
        return total_rows(table, inputs)

    @staticmethod
    def description():
        return "Rows summed over every node that reported sstable statistics"


row_size_estimator = RowSizeEstimator()
total_rows_estimator = TotalRowsEstimator()

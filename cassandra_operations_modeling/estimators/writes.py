import logging

from cassandra_operations_modeling.estimators import EstimationInputs
from cassandra_operations_modeling.estimators import OperationsEstimator
from cassandra_operations_modeling.estimators.common import decompress
from cassandra_operations_modeling.estimators.common import hours_since
from cassandra_operations_modeling.estimators.common import per_hour
from cassandra_operations_modeling.estimators.common import TableContext
from cassandra_operations_modeling.estimators.utils import round_half_up
from cassandra_operations_modeling.interface import TableMetricsAccessor
from cassandra_operations_modeling.interface import WriteOperationResult

logger = logging.getLogger(__name__)


def estimate_table_writes(
    table: TableMetricsAccessor, inputs: EstimationInputs
) -> WriteOperationResult:
    """Estimate client writes per hour and how much data sits behind them

    Whatever the consistency level, a write is sent to every replica, so
    the per replica write count divided by the total RF is the client count.
    """
    context = TableContext.resolve(inputs.cluster, table, inputs.keyspaces)
    if context is None:
        return WriteOperationResult.unresolved()

    total_space_used_compressed = sum(table.live_disk_space_used.values(), 0.0)
    if context.total_rf > 0:
        non_rf_space_used_compressed = total_space_used_compressed / context.total_rf
    else:
        non_rf_space_used_compressed = 0.0

    ratio = context.compression_ratio
    total_space_used_uncompressed = decompress(total_space_used_compressed, ratio)
    non_rf_space_used_uncompressed = decompress(non_rf_space_used_compressed, ratio)

    writes = 0.0
    if context.total_rf > 0:
        for node_name, node_writes in table.write_count.items():
            local_rf = context.write_datacenter_rf(
                inputs.cluster, node_name, inputs.arguments
            )
            if local_rf <= 0:
                # not replicated within this datacenter
                continue
            writes += (
                per_hour(node_writes, hours_since(inputs.cluster, node_name))
                / context.total_rf
            )

    result = WriteOperationResult(
        writes=round_half_up(writes),
        total_space_used_uncompressed=total_space_used_uncompressed,
        non_rf_space_used_compressed=non_rf_space_used_compressed,
        non_rf_space_used_uncompressed=non_rf_space_used_uncompressed,
    )
    logger.debug("Estimated writes for %s: %s", table.name, result)
    return result


class WriteOperationsEstimator(OperationsEstimator):
    @staticmethod
    def estimate(
        table: TableMetricsAccessor, inputs: EstimationInputs
    ) -> WriteOperationResult:
        return estimate_table_writes(table, inputs)

    @staticmethod
    def description():
        return "Client writes per hour plus compressed and uncompressed data size"


write_operations_estimator = WriteOperationsEstimator()

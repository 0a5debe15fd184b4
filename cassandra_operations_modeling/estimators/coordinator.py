from cassandra_operations_modeling.estimators import EstimationInputs
from cassandra_operations_modeling.estimators import OperationsEstimator
from cassandra_operations_modeling.estimators.common import hours_since
from cassandra_operations_modeling.estimators.common import per_hour
from cassandra_operations_modeling.estimators.utils import round_half_up
from cassandra_operations_modeling.interface import strip_quotes
from cassandra_operations_modeling.interface import TableMetricsAccessor


def estimate_coordinator_reads(
    table: TableMetricsAccessor, inputs: EstimationInputs
) -> int:
    """Reads per hour the nodes coordinated for this table

    Only available when per table client request metrics were exported,
    otherwise this is 0.
    """
    wanted = strip_quotes(table.name).lower()
    total = 0
    for metric in inputs.client_requests:
        if strip_quotes(metric.qualified_name).lower() != wanted:
            continue
        total += round_half_up(
            per_hour(metric.read_count, hours_since(inputs.cluster, metric.node))
        )
    return total


class CoordinatorReadEstimator(OperationsEstimator):
    @staticmethod
    def estimate(table: TableMetricsAccessor, inputs: EstimationInputs) -> int:
        return estimate_coordinator_reads(table, inputs)

    @staticmethod
    def description():
        return "Coordinator reads per hour from client request metrics"


coordinator_read_estimator = CoordinatorReadEstimator()

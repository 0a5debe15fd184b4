from .coordinator import coordinator_read_estimator
from .reads import read_operations_estimator
from .row_size import row_size_estimator
from .row_size import total_rows_estimator
from .writes import write_operations_estimator


def estimators():
    return {
        "reads": read_operations_estimator,
        "writes": write_operations_estimator,
        "row-size": row_size_estimator,
        "total-rows": total_rows_estimator,
        "coordinator-reads": coordinator_read_estimator,
    }

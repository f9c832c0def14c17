"""
Drywell Pipeline Runner
Loads, filters, joins and exports reported drywells for model calibration

Usage:
    python scripts/run_drywell_pipeline.py [dev|prod]
"""

import logging
import sys

from drywell_pipeline.pipeline import DrywellPipeline, configure_logging
from drywell_pipeline.shared.config import get_config
from drywell_pipeline.shared.exceptions import DrywellPipelineError

logger = logging.getLogger(__name__)


def main(environment: str | None = None) -> int:
    config = get_config(environment)
    configure_logging(config)

    try:
        result = DrywellPipeline(config).run()
    except DrywellPipelineError as e:
        logger.error(f"Drywell pipeline failed: {e}")
        return 1

    stats = result.statistics
    print("\n=== Drywell Pipeline Summary ===")
    print(f"Points in study area: {result.rows_in_study_area}")
    print(f"Points written: {stats['total_records']}")
    print(f"Issue date range: {stats['issue_date_range']}")
    print(f"Issue year distribution: {stats['issue_year_distribution']}")
    print(f"Output: {result.export.output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1] if len(sys.argv) > 1 else None))

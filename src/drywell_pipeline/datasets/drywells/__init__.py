"""
Drywell Pipeline - Drywell Dataset

Reported domestic well failures (point layer) within the study area.

Components:
    - DrywellIngester: Reads and reprojects the drywell points
    - BoundaryIngester: Reads and reprojects the study-area boundary
    - DrywellReportJoiner: Joins shortage reports and applies the issue-year window
    - DrywellExporter: Writes the final layer
"""

from drywell_pipeline.datasets.drywells.export import (
    DrywellExporter,
    ExportResult,
    export_drywells,
    infer_driver,
)
from drywell_pipeline.datasets.drywells.ingest import (
    BoundaryIngester,
    DrywellIngester,
    ingest_drywells,
    read_layer,
)
from drywell_pipeline.datasets.drywells.join import (
    DrywellReportJoiner,
    JoinResult,
    coerce_ids,
    join_reports,
)

__all__ = [
    "DrywellIngester",
    "BoundaryIngester",
    "DrywellReportJoiner",
    "DrywellExporter",
    "JoinResult",
    "ExportResult",
    "read_layer",
    "coerce_ids",
    "infer_driver",
    "ingest_drywells",
    "join_reports",
    "export_drywells",
]

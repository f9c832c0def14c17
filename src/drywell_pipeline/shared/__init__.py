from drywell_pipeline.shared.config import Settings, get_config, reload_config
from drywell_pipeline.shared.exceptions import (
    DrywellPipelineError,
    EmptyResultWarning,
    JoinKeyError,
    LoadError,
    ParseError,
    ProjectionError,
    WriteError,
)

__all__ = [
    "get_config",
    "reload_config",
    "Settings",
    "DrywellPipelineError",
    "LoadError",
    "ProjectionError",
    "ParseError",
    "JoinKeyError",
    "WriteError",
    "EmptyResultWarning",
]

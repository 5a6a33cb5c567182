"""Build orchestration: stage sequencing and the concurrency helpers it relies on."""

from .credentials import Credentials, read_credentials
from .joiner import join_first_error
from .mapper import bounded_map
from .orchestrator import BuildArgs, build, compute_concurrency, setup_output_dir

__all__ = [
    "BuildArgs",
    "Credentials",
    "bounded_map",
    "build",
    "compute_concurrency",
    "join_first_error",
    "read_credentials",
    "setup_output_dir",
]

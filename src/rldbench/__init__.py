"""
rldbench - Linker scalability benchmarks.

Sweep symbol counts, link synthetic modules, plot the timings.
"""

from rldbench.models.bench import GridPoint, RunConfig, RunResult

__version__ = "0.1.0"
__all__ = ["GridPoint", "RunConfig", "RunResult", "__version__"]

import importlib.metadata
import logging

from .differentiation import (
    DiffMode,
    finite_gradient,
    gradient_function,
    verify_gradient,
)
from .optimization.minimization import (
    StepSizeMode,
    proximal_gradient,
    proximal_gradient_descent,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

try:
    __version__ = importlib.metadata.version("proxgrad")
except importlib.metadata.PackageNotFoundError:
    __version__ = "unknown"

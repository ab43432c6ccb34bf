from .modes import DEFAULT_EPS, DiffMode
from .finite_gradient import finite_gradient, gradient_function, verify_gradient

from .proximal_gradient_descent import (
    StepSizeMode,
    proximal_gradient,
    proximal_gradient_descent,
)

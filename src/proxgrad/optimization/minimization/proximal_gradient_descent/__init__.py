from .step_size import StepSizeMode
from .proximal_gradient import proximal_gradient, proximal_gradient_descent

import logging
import math
import numbers
from typing import Any, Callable, Optional

from proxgrad.utils import Dispatcher

from .step_size import StepSizeMode

logger = logging.getLogger(__name__)

disp_proximal_gradient = Dispatcher()
disp_proximal_gradient_descent = Dispatcher()


try:
    from .proximal_gradient_np import (
        proximal_gradient as proximal_gradient_np,
        proximal_gradient_descent as proximal_gradient_descent_np,
    )

    disp_proximal_gradient.register("numpy", proximal_gradient_np)
    disp_proximal_gradient_descent.register("numpy", proximal_gradient_descent_np)
except ModuleNotFoundError:
    pass

try:
    from .proximal_gradient_torch import (
        proximal_gradient as proximal_gradient_torch,
        proximal_gradient_descent as proximal_gradient_descent_torch,
    )

    disp_proximal_gradient.register("torch", proximal_gradient_torch)
    disp_proximal_gradient_descent.register(
        "torch", proximal_gradient_descent_torch
    )
except ModuleNotFoundError:
    pass


def _check_operators(grad_f, prox_g, objective):
    for name, func in (("grad_f", grad_f), ("prox_g", prox_g)):
        if not callable(func):
            raise TypeError(f"{name} must be callable, got {type(func).__name__}")

    if objective is not None and not callable(objective):
        raise TypeError(
            f"objective must be callable, got {type(objective).__name__}"
        )


def _check_step_size(step_size) -> float:
    if isinstance(step_size, bool) or not isinstance(step_size, numbers.Real):
        raise TypeError(
            f"step_size must be a real number, got {type(step_size).__name__}"
        )

    step_size = float(step_size)
    if not math.isfinite(step_size) or step_size <= 0:
        raise ValueError(f"step_size must be a finite positive number, got {step_size}")

    return step_size


def proximal_gradient(
    X: Any,
    grad_f: Callable,
    prox_g: Callable,
    step_size: float,
    prox_param: Any,
    objective: Optional[Callable] = None,
    step_size_mode: StepSizeMode | str = StepSizeMode.CONSTANT,
    check_finite: bool = False,
    backend: Optional[str] = None,
):
    """
    Runs a fixed number of Proximal Gradient (Forward-Backward) iterations,
    writing every iterate into a pre-allocated buffer.

    The method minimizes $F(x) = f(x) + g(x)$ where $f$ is smooth and $g$ has
    a computable proximal operator. Column $k$ of `X` receives
    $$ x_k = \\text{prox}_g(x_{k-1} - t \\nabla f(x_{k-1}), \\theta) $$
    for $k = 1, \\dots, K-1$, where $K$ is the number of columns, $t$ the step
    size and $\\theta$ = `prox_param`.

    Iterate Buffer:
    ---------------
    `X` has shape $(n, K)$. Column 0 is the initial guess and is never
    written. The buffer is updated in place, so exactly $K - 1$ proximal
    steps are taken and the last column holds the solution.

    Termination:
    ------------
    There is no convergence test and no early stop. Divergence caused by a
    step size that is too large (for a smooth term with Lipschitz gradient
    $L$, stability requires $t < 2/L$) is propagated into the buffer as
    overflowing or NaN values. Set `check_finite=True` to raise instead.

    Parameters:
    -----------
    X : Any (ndarray or Tensor)
        Iterate buffer of shape $(n, K)$, floating dtype, $K \\ge 1$.
    grad_f : Callable
        Gradient of the smooth term, `grad_f(x) -> ndarray`. May be analytic
        or obtained from `gradient_function`.
    prox_g : Callable
        Proximal operator of the non-smooth term, `prox_g(v, prox_param)`.
        Must return a vector shaped like `v`.
    step_size : float
        Constant step size $t > 0$.
    prox_param : Any
        Passed unchanged as the second argument of `prox_g`. Whether this is
        $\\lambda$ or $t \\lambda$ is decided by the caller's operator.
    objective : Callable, optional
        If given, evaluated on every column to build a loss history.
    step_size_mode : StepSizeMode or str, optional (default='constant')
        Only `'constant'` is implemented. `'adaptive'` and `'line_search'`
        raise `NotImplementedError`.
    check_finite : bool, optional (default=False)
        Raise `FloatingPointError` as soon as an iterate is not finite.
    backend : str, optional (default=None)
        Force a specific backend ('numpy' or 'torch'). If None, automatically detected.

    Returns:
    --------
    X : Any
        The same buffer, filled with the iterates.
    loss : List[float], optional
        `objective` evaluated at each of the $K$ columns. Only returned when
        `objective` is given.
    """

    _check_operators(grad_f, prox_g, objective)
    step_size = _check_step_size(step_size)
    StepSizeMode.parse(step_size_mode)

    # a list would be copied by cast_values and the caller's buffer left untouched
    if not hasattr(X, "shape"):
        raise TypeError(
            f"Iterate buffer must be an ndarray or Tensor, got {type(X).__name__}"
        )

    disp_proximal_gradient.detect_backend(X, backend)
    X = disp_proximal_gradient.cast_values(X)

    logger.debug(
        "Proximal gradient on buffer of shape %s (step_size=%g, backend=%s)",
        tuple(X.shape),
        step_size,
        disp_proximal_gradient.backend,
    )

    return disp_proximal_gradient(
        X, grad_f, prox_g, step_size, prox_param, objective, check_finite
    )


def proximal_gradient_descent(
    grad_f: Callable,
    prox_g: Callable,
    x0: Any,
    step_size: float,
    prox_param: Any,
    num_iter: int = 100,
    objective: Optional[Callable] = None,
    step_size_mode: StepSizeMode | str = StepSizeMode.CONSTANT,
    check_finite: bool = False,
    return_iterates: bool = False,
    backend: Optional[str] = None,
):
    """
    Allocates an iterate buffer from `x0` and runs `proximal_gradient` on it.

    The buffer has `num_iter` columns with `x0` in the first one, so
    `num_iter - 1` proximal steps are taken.

    Returns:
    --------
    x : Any
        The last iterate, or the whole $(n, \\text{num\\_iter})$ buffer when
        `return_iterates=True`.
    loss : List[float], optional
        Objective history, only returned when `objective` is given.
    """

    _check_operators(grad_f, prox_g, objective)
    step_size = _check_step_size(step_size)
    StepSizeMode.parse(step_size_mode)

    if isinstance(num_iter, bool) or not isinstance(num_iter, numbers.Integral):
        raise TypeError(f"num_iter must be an integer, got {type(num_iter).__name__}")
    if num_iter < 1:
        raise ValueError(f"num_iter must be at least 1, got {num_iter}")

    disp_proximal_gradient_descent.detect_backend(x0, backend)
    x0 = disp_proximal_gradient_descent.cast_values(x0)

    return disp_proximal_gradient_descent(
        grad_f,
        prox_g,
        x0,
        step_size,
        prox_param,
        int(num_iter),
        objective,
        check_finite,
        return_iterates,
    )

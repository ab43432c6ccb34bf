import functools
import logging
import math
import numbers
from typing import Any, Callable, Optional

from proxgrad.utils import Dispatcher

from .modes import DEFAULT_EPS, DiffMode

logger = logging.getLogger(__name__)

disp_finite_gradient = Dispatcher()
disp_verify_gradient = Dispatcher()


try:
    from .finite_gradient_np import (
        finite_gradient as finite_gradient_np,
        verify_gradient as verify_gradient_np,
    )

    disp_finite_gradient.register("numpy", finite_gradient_np)
    disp_verify_gradient.register("numpy", verify_gradient_np)
except ModuleNotFoundError:
    pass

try:
    from .finite_gradient_torch import (
        finite_gradient as finite_gradient_torch,
        verify_gradient as verify_gradient_torch,
    )

    disp_finite_gradient.register("torch", finite_gradient_torch)
    disp_verify_gradient.register("torch", verify_gradient_torch)
except ModuleNotFoundError:
    pass


def _check_eps(eps) -> float:
    if isinstance(eps, bool) or not isinstance(eps, numbers.Real):
        raise TypeError(f"eps must be a real number, got {type(eps).__name__}")

    eps = float(eps)
    if not math.isfinite(eps) or eps <= 0:
        raise ValueError(f"eps must be a finite positive number, got {eps}")

    return eps


def _check_tol(tol) -> float:
    if isinstance(tol, bool) or not isinstance(tol, numbers.Real):
        raise TypeError(f"tol must be a real number, got {type(tol).__name__}")

    tol = float(tol)
    if not math.isfinite(tol) or tol < 0:
        raise ValueError(f"tol must be a finite non-negative number, got {tol}")

    return tol


def _check_callable(func, name: str):
    if not callable(func):
        raise TypeError(f"{name} must be callable, got {type(func).__name__}")


def finite_gradient(
    x: Any,
    f: Callable,
    mode: DiffMode | str = DiffMode.COMPLEX_STEP,
    eps: float = DEFAULT_EPS,
    backend: Optional[str] = None,
) -> Any:
    """
    Approximates the gradient of a scalar function using finite differences.

    Each partial derivative is obtained by perturbing a single coordinate of
    `x` by `eps` and evaluating a difference formula. For the i-th coordinate:

    - **Forward:** $\\frac{f(x + h e_i) - f(x)}{h}$
    - **Backward:** $\\frac{f(x) - f(x - h e_i)}{h}$
    - **Central:** $\\frac{f(x + h e_i) - f(x - h e_i)}{2h}$
    - **Complex step:** $\\frac{\\text{Im}(f(x + i h e_i))}{h}$

    The reference value $f(x)$ is computed once and only for the forward and
    backward schemes. Every perturbed point is a fresh copy of `x`, so `x` is
    never modified and coordinates are independent of each other.

    Complex Step:
    -------------
    The complex step scheme does not subtract nearby values and is therefore
    free of cancellation error, so it stays accurate for very small `eps`.
    It requires `f` to be complex-safe: every operation inside `f` must give
    the analytic continuation for complex input. In particular `abs`, `min`,
    `max`, conjugating transposes and norms (which call `abs` implicitly)
    must be rewritten by the caller. This cannot be checked here; a
    non-complex-safe `f` silently yields a wrong gradient.

    Complexity Analysis:
    --------------------
    - **Function Evaluations:** $n + 1$ for forward/backward, $2n$ for
      central, $n$ for complex step.
    - **Space Complexity:** $O(n)$ for the perturbed copy and the output.

    Parameters:
    -----------
    x : Any (ndarray or Tensor)
        Point where the gradient is evaluated. Shape $(n,)$ or $(n, 1)$,
        real and finite.
    f : Callable
        Objective function mapping a vector shaped like `x` to a scalar.
    mode : DiffMode or str, optional (default='complex_step')
        Difference scheme: `'forward'`, `'backward'`, `'central'` or
        `'complex_step'`.
    eps : float, optional (default=1e-6)
        Perturbation magnitude. Must be finite and positive.
    backend : str, optional (default=None)
        Force a specific backend ('numpy' or 'torch'). If None, automatically detected.

    Returns:
    --------
    grad : Any
        Real gradient approximation with the same shape as `x`.

    Raises:
    -------
    TypeError
        If `f` is not callable, `eps` is not a real number, or `x` is not
        real-valued.
    ValueError
        If `mode` is unknown, `eps` is not finite and positive, or `x` is not
        a finite vector.
    """

    _check_callable(f, "f")
    mode = DiffMode.parse(mode)
    eps = _check_eps(eps)

    disp_finite_gradient.detect_backend(x, backend)
    x = disp_finite_gradient.cast_values(x)

    logger.debug(
        "Estimating %s gradient at shape %s (eps=%g, backend=%s)",
        mode.value,
        tuple(x.shape),
        eps,
        disp_finite_gradient.backend,
    )

    return disp_finite_gradient(x, f, mode, eps)


def gradient_function(
    f: Callable,
    mode: DiffMode | str = DiffMode.COMPLEX_STEP,
    eps: float = DEFAULT_EPS,
    backend: Optional[str] = None,
) -> Callable:
    """
    Builds a gradient operator for `f` backed by `finite_gradient`.

    The returned callable has the signature `grad_f(x)` expected by
    `proximal_gradient`, so a numerically estimated gradient can be used in
    place of an analytic one. Arguments are validated once, here.
    """

    _check_callable(f, "f")
    mode = DiffMode.parse(mode)
    eps = _check_eps(eps)

    return functools.partial(
        finite_gradient, f=f, mode=mode, eps=eps, backend=backend
    )


def verify_gradient(
    grad_f: Callable,
    f: Callable,
    x: Any,
    mode: DiffMode | str = DiffMode.CENTRAL,
    eps: float = DEFAULT_EPS,
    tol: float = 1e-5,
    backend: Optional[str] = None,
) -> bool:
    """
    Checks an analytic gradient operator against a finite-difference estimate.

    The check passes when
    $$ \\|\\nabla f(x) - g_{fd}\\|_\\infty \\le \\text{tol} \\cdot \\|g_{fd}\\|_2 $$
    where $g_{fd}$ is `finite_gradient(x, f, mode, eps)`.

    Only gradients can be verified this way. A proximal operator has no
    finite-difference counterpart to compare against.

    Returns:
    --------
    ok : bool
        Whether `grad_f` agrees with the numerical gradient at `x`.
    """

    _check_callable(grad_f, "grad_f")
    _check_callable(f, "f")
    mode = DiffMode.parse(mode)
    eps = _check_eps(eps)
    tol = _check_tol(tol)

    disp_verify_gradient.detect_backend(x, backend)
    x = disp_verify_gradient.cast_values(x)

    ok = disp_verify_gradient(grad_f, f, x, mode, eps, tol)

    if not ok:
        logger.debug("Gradient check failed at tolerance %g", tol)

    return ok

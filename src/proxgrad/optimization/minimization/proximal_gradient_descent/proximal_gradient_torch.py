import logging
from typing import Callable, Optional

import torch

logger = logging.getLogger(__name__)


def _check_buffer(X: torch.Tensor):
    if X.ndim != 2:
        raise ValueError(
            f"Iterate buffer must be 2-D with shape (n, num_iter), got shape {tuple(X.shape)}"
        )
    if X.shape[1] < 1:
        raise ValueError("Iterate buffer must have at least one column")
    if not X.is_floating_point():
        raise ValueError(
            f"Iterate buffer must have a floating dtype, got {X.dtype}"
        )


def prox_step(
    x: torch.Tensor,
    grad_x: torch.Tensor,
    prox_g: Callable,
    gamma: float,
    prox_param,
):
    z = x - gamma * grad_x
    return prox_g(z, prox_param)


def proximal_gradient(
    X: torch.Tensor,
    grad_f: Callable,
    prox_g: Callable,
    step_size: float,
    prox_param,
    objective: Optional[Callable] = None,
    check_finite: bool = False,
):
    _check_buffer(X)

    num_iter = X.shape[1]
    loss = []

    with torch.no_grad():
        if objective is not None:
            loss.append(float(objective(X[:, 0])))

        for k in range(1, num_iter):
            x = X[:, k - 1]
            X[:, k] = prox_step(x, grad_f(x), prox_g, step_size, prox_param)

            if check_finite and not torch.isfinite(X[:, k]).all():
                logger.warning(
                    "Non-finite iterate at iteration %d of %d", k, num_iter - 1
                )
                raise FloatingPointError(
                    f"Iterate {k} is not finite; the step size {step_size} is likely too large"
                )

            if objective is not None:
                loss.append(float(objective(X[:, k])))

    if objective is not None:
        return X, loss

    return X


def proximal_gradient_descent(
    grad_f: Callable,
    prox_g: Callable,
    x0: torch.Tensor,
    step_size: float,
    prox_param,
    num_iter: int = 100,
    objective: Optional[Callable] = None,
    check_finite: bool = False,
    return_iterates: bool = False,
):
    if x0.ndim != 1:
        raise ValueError(f"x0 must be a 1-D vector, got shape {tuple(x0.shape)}")

    x0 = x0.detach()
    dtype = x0.dtype if x0.is_floating_point() else torch.get_default_dtype()

    X = torch.zeros((x0.shape[0], num_iter), dtype=dtype, device=x0.device)
    X[:, 0] = x0

    res = proximal_gradient(
        X, grad_f, prox_g, step_size, prox_param, objective, check_finite
    )

    if objective is not None:
        X, loss = res

    x = X if return_iterates else X[:, -1].clone()

    if objective is not None:
        return x, loss

    return x

from typing import Callable

import numpy as np

from .modes import DiffMode


def _check_vector(x: np.ndarray) -> np.ndarray:
    if x.dtype == np.bool_ or not np.issubdtype(x.dtype, np.number):
        raise TypeError(f"x must be a real numeric array, got dtype {x.dtype}")
    if np.iscomplexobj(x):
        raise TypeError("x must be real, got a complex array")

    is_column = x.ndim == 2 and x.shape[1] == 1
    if x.ndim != 1 and not is_column:
        raise ValueError(
            f"x must be a vector of shape (n,) or (n, 1), got shape {x.shape}"
        )
    if x.size == 0:
        raise ValueError("x must have at least one element")
    if not np.all(np.isfinite(x)):
        raise ValueError("x must contain only finite values")

    if not np.issubdtype(x.dtype, np.floating):
        x = x.astype(np.float64)

    return x


def _shifted(x: np.ndarray, i: int, step) -> np.ndarray:
    x_step = x.astype(np.result_type(x, step), copy=True)
    x_step.flat[i] += step
    return x_step


def _forward(f, x, i, eps, f_ref):
    return (f(_shifted(x, i, eps)) - f_ref) / eps


def _backward(f, x, i, eps, f_ref):
    return (f_ref - f(_shifted(x, i, -eps))) / eps


def _central(f, x, i, eps, f_ref):
    return (f(_shifted(x, i, eps)) - f(_shifted(x, i, -eps))) / (2 * eps)


def _complex_step(f, x, i, eps, f_ref):
    return np.imag(f(_shifted(x, i, 1j * eps))) / eps


SCHEMES = {
    DiffMode.FORWARD: _forward,
    DiffMode.BACKWARD: _backward,
    DiffMode.CENTRAL: _central,
    DiffMode.COMPLEX_STEP: _complex_step,
}


def finite_gradient(
    x: np.ndarray,
    f: Callable,
    mode: DiffMode,
    eps: float,
) -> np.ndarray:
    x = _check_vector(x)
    scheme = SCHEMES[mode]

    f_ref = f(x) if mode.needs_reference else None

    grad = np.zeros(x.shape, dtype=x.dtype)

    for i in range(x.size):
        grad.flat[i] = np.real(scheme(f, x, i, eps, f_ref))

    return grad


def verify_gradient(
    grad_f: Callable,
    f: Callable,
    x: np.ndarray,
    mode: DiffMode,
    eps: float,
    tol: float,
) -> bool:
    x = _check_vector(x)
    grad_fd = finite_gradient(x, f, mode, eps).reshape(-1)
    grad = np.asarray(grad_f(x)).reshape(-1)

    if grad.shape != grad_fd.shape:
        raise ValueError(
            f"grad_f returned {grad.size} entries, expected {grad_fd.size}"
        )

    err = np.max(np.abs(grad - grad_fd))
    return bool(err <= tol * np.linalg.norm(grad_fd))

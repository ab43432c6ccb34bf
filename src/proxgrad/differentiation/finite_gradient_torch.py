from typing import Callable

import torch

from .modes import DiffMode


def _check_vector(x: torch.Tensor) -> torch.Tensor:
    if x.dtype == torch.bool:
        raise TypeError("x must be a real numeric tensor, got dtype torch.bool")
    if x.is_complex():
        raise TypeError("x must be real, got a complex tensor")

    is_column = x.ndim == 2 and x.shape[1] == 1
    if x.ndim != 1 and not is_column:
        raise ValueError(
            f"x must be a vector of shape (n,) or (n, 1), got shape {tuple(x.shape)}"
        )
    if x.numel() == 0:
        raise ValueError("x must have at least one element")

    if not x.is_floating_point():
        x = x.to(torch.get_default_dtype())

    if not torch.isfinite(x).all():
        raise ValueError("x must contain only finite values")

    return x.detach().contiguous()


def _complex_dtype(dtype: torch.dtype) -> torch.dtype:
    if dtype == torch.float64:
        return torch.complex128
    return torch.complex64


def _shifted(x: torch.Tensor, i: int, step) -> torch.Tensor:
    if isinstance(step, complex):
        x_step = x.to(_complex_dtype(x.dtype))
    else:
        x_step = x.clone()

    x_step.view(-1)[i] += step
    return x_step


def _forward(f, x, i, eps, f_ref):
    return (f(_shifted(x, i, eps)) - f_ref) / eps


def _backward(f, x, i, eps, f_ref):
    return (f_ref - f(_shifted(x, i, -eps))) / eps


def _central(f, x, i, eps, f_ref):
    return (f(_shifted(x, i, eps)) - f(_shifted(x, i, -eps))) / (2 * eps)


def _complex_step(f, x, i, eps, f_ref):
    out = torch.as_tensor(f(_shifted(x, i, 1j * eps)))

    # a real result means f dropped the imaginary part
    if not out.is_complex():
        return torch.zeros_like(out)

    return out.imag / eps


SCHEMES = {
    DiffMode.FORWARD: _forward,
    DiffMode.BACKWARD: _backward,
    DiffMode.CENTRAL: _central,
    DiffMode.COMPLEX_STEP: _complex_step,
}


def finite_gradient(
    x: torch.Tensor,
    f: Callable,
    mode: DiffMode,
    eps: float,
) -> torch.Tensor:
    x = _check_vector(x)
    scheme = SCHEMES[mode]

    with torch.no_grad():
        f_ref = f(x) if mode.needs_reference else None

        grad = torch.zeros_like(x)
        flat_grad = grad.view(-1)

        for i in range(x.numel()):
            flat_grad[i] = torch.as_tensor(scheme(f, x, i, eps, f_ref)).real

    return grad


def verify_gradient(
    grad_f: Callable,
    f: Callable,
    x: torch.Tensor,
    mode: DiffMode,
    eps: float,
    tol: float,
) -> bool:
    x = _check_vector(x)
    grad_fd = finite_gradient(x, f, mode, eps).reshape(-1)

    with torch.no_grad():
        grad = torch.as_tensor(grad_f(x)).reshape(-1).to(grad_fd)

    if grad.shape != grad_fd.shape:
        raise ValueError(
            f"grad_f returned {grad.numel()} entries, expected {grad_fd.numel()}"
        )

    err = torch.max(torch.abs(grad - grad_fd))
    return bool(err <= tol * torch.linalg.norm(grad_fd))

from typing import Any, Callable, Dict, Optional


BACKEND_ALIASES = {"pytorch": "torch", "np": "numpy"}


def _is_tensor(value: Any) -> bool:
    return type(value).__module__.split(".")[0] == "torch"


class Dispatcher:
    """
    Routes a call to the implementation registered for the active backend.

    A front-end function owns one `Dispatcher`, registers one implementation
    per array library, and before every call selects the backend either from
    the type of its main input or from an explicit `backend` argument.

    Example:
    --------
    >>> dispatcher = Dispatcher()
    >>> dispatcher.register("numpy", impl_np)
    >>> dispatcher.detect_backend(x, None)
    >>> x = dispatcher.cast_values(x)
    >>> dispatcher(x)
    """

    def __init__(self):
        self.functions: Dict[str, Callable] = {}
        self.backend: Optional[str] = None

    def register(self, backend: str, func: Callable):
        self.functions[backend] = func

    def detect_backend(self, value: Any, backend: Optional[str] = None):
        if backend is None:
            backend = "torch" if _is_tensor(value) else "numpy"
        else:
            backend = BACKEND_ALIASES.get(backend, backend)

        if backend not in self.functions:
            raise ValueError(
                f"Backend '{backend}' is not available. "
                f"Registered backends: {list(self.functions)}"
            )

        self.backend = backend
        return backend

    def cast_values(self, *values: Any):
        if self.backend is None:
            raise RuntimeError("No backend selected. Call detect_backend first.")

        if self.backend == "torch":
            import torch

            cast = [v if torch.is_tensor(v) else torch.as_tensor(v) for v in values]
        else:
            import numpy as np

            cast = [np.asarray(v) for v in values]

        if len(cast) == 1:
            return cast[0]
        return tuple(cast)

    def __call__(self, *args, **kwargs):
        if self.backend is None:
            raise RuntimeError("No backend selected. Call detect_backend first.")

        return self.functions[self.backend](*args, **kwargs)

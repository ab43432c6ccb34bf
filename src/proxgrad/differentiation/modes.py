from enum import Enum


DEFAULT_EPS = 1e-6


class DiffMode(str, Enum):
    """
    Finite-difference scheme used to approximate a partial derivative.

    - `FORWARD`: $(f(x + h e_i) - f(x)) / h$, error $O(h)$.
    - `BACKWARD`: $(f(x) - f(x - h e_i)) / h$, error $O(h)$.
    - `CENTRAL`: $(f(x + h e_i) - f(x - h e_i)) / 2h$, error $O(h^2)$.
    - `COMPLEX_STEP`: $\\text{Im}(f(x + i h e_i)) / h$, error $O(h^2)$ with
      no subtractive cancellation. Requires `f` to be complex-safe.
    """

    FORWARD = "forward"
    BACKWARD = "backward"
    CENTRAL = "central"
    COMPLEX_STEP = "complex_step"

    @classmethod
    def parse(cls, mode) -> "DiffMode":
        try:
            return cls(mode)
        except ValueError:
            valid = [m.value for m in cls]
            raise ValueError(
                f"Unknown difference mode: {mode!r}. Expected one of {valid}"
            ) from None

    @property
    def needs_reference(self) -> bool:
        return self in (DiffMode.FORWARD, DiffMode.BACKWARD)

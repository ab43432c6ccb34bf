from enum import Enum


class StepSizeMode(str, Enum):
    CONSTANT = "constant"
    ADAPTIVE = "adaptive"
    LINE_SEARCH = "line_search"

    @classmethod
    def parse(cls, mode) -> "StepSizeMode":
        try:
            mode = cls(mode)
        except ValueError:
            valid = [m.value for m in cls]
            raise ValueError(
                f"Unknown step size mode: {mode!r}. Expected one of {valid}"
            ) from None

        if mode is not cls.CONSTANT:
            raise NotImplementedError(
                f"Step size mode '{mode.value}' is not implemented. "
                "Only 'constant' is supported."
            )

        return mode

"""
Error taxonomy for the comparison workflow.

All errors are terminal for a run: nothing is retried and a trainer
invocation either returns a complete result or raises one of these.
"""


class HauspreisError(Exception):
    """Base class for all workflow errors."""


class DataError(HauspreisError, ValueError):
    """Input table is missing, malformed or fails validation."""


class MissingColumnError(DataError, KeyError):
    """A referenced column does not exist in the loaded table."""

    def __init__(self, columns: list[str], available: list[str] | None = None) -> None:
        self.columns = columns
        msg = f"Column(s) not found in dataset: {', '.join(columns)}"
        if available is not None:
            msg += f" (available: {len(available)} columns)"
        super().__init__(msg)

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class ConfigurationError(HauspreisError, ValueError):
    """Invalid cross-validation setup or hyperparameter grid."""


class UnknownMethodError(ConfigurationError, KeyError):
    """A method identifier is not in the registry."""

    def __str__(self) -> str:
        return str(self.args[0])


class FittingError(HauspreisError, RuntimeError):
    """An estimator failed while fitting or predicting a fold."""

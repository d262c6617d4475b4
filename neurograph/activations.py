"""
Activation registry - a closed set of activation functions addressed by name

Every node carries one Activation. The identifier is what the model file
stores, so identifier <-> function must stay a total, exact mapping.
"""

import math
from enum import Enum
from typing import Callable, Tuple

from .exceptions import UnknownActivationError

ActivationFn = Callable[[float], float]


def identity(x: float) -> float:
    return x


def identity_prime(x: float) -> float:
    return 1.0


def relu(x: float) -> float:
    return x if x > 0 else 0.0


def step(x: float) -> float:
    return 1.0 if x > 0 else 0.0


def sigmoid(x: float) -> float:
    # Split on sign so math.exp never overflows
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


def sigmoid_prime(x: float) -> float:
    s = sigmoid(x)
    return s * (1.0 - s)


_FUNCTIONS = {
    'identity': (identity, identity_prime),
    'relu': (relu, step),
    'sigmoid': (sigmoid, sigmoid_prime),
}


class Activation(Enum):
    """
    Activation function of a node.

    Calling a member applies the function; ``derivative`` evaluates its
    derivative at the same point.

    Example:
        >>> Activation.SIGMOID(0.0)
        0.5
        >>> Activation.from_identifier('relu').derivative(-2.0)
        0.0
    """

    IDENTITY = 'identity'
    RELU = 'relu'
    SIGMOID = 'sigmoid'

    @property
    def identifier(self) -> str:
        """Stable textual name used by the model format."""
        return self.value

    @property
    def function(self) -> ActivationFn:
        return _FUNCTIONS[self.value][0]

    @property
    def derivative_function(self) -> ActivationFn:
        return _FUNCTIONS[self.value][1]

    def __call__(self, x: float) -> float:
        return self.function(x)

    def derivative(self, x: float) -> float:
        return self.derivative_function(x)

    @classmethod
    def from_identifier(cls, identifier: str) -> 'Activation':
        """
        Resolve an identifier such as ``'sigmoid'``.

        Raises:
            UnknownActivationError: If the identifier is not registered.
        """
        try:
            return cls(identifier)
        except ValueError:
            raise UnknownActivationError(
                f"Unknown activation function: {identifier!r}. "
                f"Must be one of {available_activations()}"
            ) from None


def available_activations():
    """Identifiers of every registered activation, in declaration order."""
    return [a.identifier for a in Activation]


def get_activation(activation) -> Activation:
    """Accept an Activation or its identifier and return the Activation."""
    if isinstance(activation, Activation):
        return activation
    return Activation.from_identifier(activation)


def lookup(identifier: str) -> Tuple[ActivationFn, ActivationFn]:
    """Return the ``(function, derivative)`` pair registered under ``identifier``."""
    activation = Activation.from_identifier(identifier)
    return activation.function, activation.derivative_function


def identifier_of(function) -> str:
    """
    Inverse of :func:`lookup`.

    Accepts an Activation, a registered function or a registered derivative.

    Raises:
        UnknownActivationError: If ``function`` is not in the registry.
    """
    if isinstance(function, Activation):
        return function.identifier
    for identifier, pair in _FUNCTIONS.items():
        if function in pair:
            return identifier
    raise UnknownActivationError(f"Function {function!r} is not a registered activation")

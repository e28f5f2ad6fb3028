"""Exceptions raised by lenstrace."""


class PreconditionError(ValueError):
    """A constructor was given arguments that violate its invariants.

    Raised before the object is built, so no half-initialized instance is
    ever observable.
    """

class ExpectationError(AssertionError):
    """
    Raised by `expect` when a checked condition on a computed result does not hold.
    """


def expect(condition: bool, message: str = "") -> None:
    """
    Checks a condition on a computed result, e.g. that a ground state energy lies within a tolerance
    of a reference value. Unlike `assert` it is never stripped by `python -O`.

    Args:
        condition (bool): The condition that must hold.
        message (str, optional): Describes what was checked. Defaults to "".

    Raises:
        ExpectationError: If the condition is false.
    """

    if not condition:
        raise ExpectationError(message or "expectation failed")

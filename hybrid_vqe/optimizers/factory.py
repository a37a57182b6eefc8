import inspect

from typing_extensions import Any, Iterable, Type, get_args

from .optimizer import Optimizer

NAME_SUFFIX = "_optimizer"


def available_optimizers() -> dict[str, Type[Optimizer]]:
    """
    Maps the factory name of every concrete optimizer, its `_name()` without the "_optimizer"
    suffix, to its class.
    """

    return {
        c._name().removesuffix(NAME_SUFFIX): c
        for c in Optimizer.all()
        if c._name().endswith(NAME_SUFFIX)
    }


def _convert(key: str, value: Any, annotation: Any) -> Any:
    """
    Converts an option value, possibly given as a string, to the type its constructor
    argument is annotated with. Only int, float and str arguments (or optional ones) are converted.
    """

    types = get_args(annotation) or (annotation,)

    if value is None and type(None) in types:
        return None

    for t in types:
        try:
            if t is int:
                number = float(value)
                if not number.is_integer():
                    raise ValueError()
                return int(number)
            if t is float:
                return float(value)
            if t is str and isinstance(value, str):
                return value
        except (TypeError, ValueError):
            continue

    raise ValueError(f"Invalid value {value!r} for option '{key}'.")


def create_optimizer(
    name: str, options: dict[str, Any] | Iterable[tuple[str, Any]] = {}
) -> Optimizer:
    """
    Creates a named optimizer configured by string options, each prefixed by the optimizer name:

        create_optimizer("scipy", {"scipy-optimizer": "l-bfgs", "scipy-maxeval": 20})
        create_optimizer("adam", [("adam-lr", "0.05"), ("adam-maxeval", 200)])

    Values may be given as strings and are converted to the type of the constructor argument.

    Args:
        name (str): The optimizer name, one of the keys of `available_optimizers()`.
        options (dict[str, Any] | Iterable[tuple[str, Any]], optional): The options as a dict or as key value pairs. Defaults to {}.

    Raises:
        ValueError: If the name or an option is unknown, or a value cannot be converted.

    Returns:
        Optimizer: The configured optimizer.
    """

    optimizers = available_optimizers()

    name = name.lower()
    if name not in optimizers:
        raise ValueError(
            f"Unknown optimizer '{name}'. Available: {sorted(optimizers)}"
        )

    cls = optimizers[name]
    prefix = f"{name}-"
    parameters = inspect.signature(cls).parameters

    kwargs: dict[str, Any] = {}
    for key, value in dict(options).items():
        option = key.lower().removeprefix(prefix)

        if option not in cls._options:
            raise ValueError(
                f"Unknown option '{key}' for optimizer '{name}'. Available: {sorted(prefix + o for o in cls._options)}"
            )

        arg = cls._options[option]
        kwargs[arg] = _convert(key, value, parameters[arg].annotation)

    return cls(**kwargs)

import inspect
import json
from abc import ABC, abstractmethod

from typing_extensions import Any, Callable, Self, Type, TypeVar

SerializableType = TypeVar("SerializableType", bound="Serializable")


class Serializable(ABC):
    """
    Base class for everything that is configured by plain data: optimizers, observables and backends.
    A subclass names itself through `_type()` and `_name()` and lists the constructor arguments
    that rebuild it in `_config_params`. Configs are dictionaries that survive a JSON round trip, which
    is how they are logged with each run and how they cross process boundaries in experiments.
    """

    @staticmethod
    @abstractmethod
    def _type() -> str:
        """
        Returns the family of the class, e.g. "optimizer". Overridden by the direct base class of a family.

        Returns:
            str: A string representation of the type of the class.
        """

        pass

    @staticmethod
    @abstractmethod
    def _name() -> str:
        """
        Returns the name of the concrete class within its family, e.g. "adam_optimizer".

        Returns:
            str: A string representation of the name of the class.
        """

        pass

    @property
    def _config_params(self: Self) -> list[str]:
        """
        Returns the attributes of the instance that are passed back to the constructor
        to rebuild it.

        Args:
            self (Self): A reference to the current class instance.

        Returns:
            list[str]: The parameters of the class required for configuration.
        """

        return []

    @classmethod
    def all(
        cls: Type[SerializableType],
    ) -> list[Type[SerializableType]]:
        """
        Returns every non abstract subclass of the current class, recursively.

        Args:
            cls (Type[SerializableType]): A reference to the current class.

        Returns:
            list[Type[SerializableType]]: A list of all subclasses.
        """

        classes = cls.__subclasses__()
        classes += [s for c in classes for s in c.all()]
        classes = [c for c in classes if not inspect.isabstract(c)]

        return list(dict.fromkeys(classes))

    @classmethod
    def all_constructors(
        cls: Type[SerializableType],
    ) -> list[Callable[..., SerializableType]]:
        """
        Implemented by non abstract classes that expose named constructors instead of subclasses.
        """

        raise NotImplementedError()

    @staticmethod
    def _filter_class_config(config: dict[str, Any]) -> dict[str, Any]:
        """
        Drops the bookkeeping keys, which all start with an underscore, from a config.

        Args:
           config (dict[str,Any]): The configuration to filter.

        Returns:
            dict[str, Any]: A filtered dictionary where no key starts with an underscore
        """

        return {k: v for k, v in config.items() if not k.startswith("_")}

    def to_config(self: Self) -> dict[str, Any]:
        """
        Converts the instance to a config, adding the "_name" and "_type" keys that identify
        the class that built it.

        Args:
            self (Self): A reference to the current class instance.

        Returns:
            dict[str, Any]: The dictionary representation of the object's config.
        """

        config = {"_type": self._type(), "_name": self._name()}
        config |= {p: getattr(self, p) for p in self._config_params}

        return config

    def to_json(self: Self) -> str:
        return json.dumps(self.to_config())

    @classmethod
    def from_config(
        cls: Type[SerializableType],
        config: dict[str, Any],
        **class_kwargs: Any,
    ) -> SerializableType:
        """
        Rebuilds an instance from a config. Called on an abstract class, the concrete subclass is
        looked up by the "_type" and "_name" keys.

        Args:
            cls (Type[SerializableType]): A reference to the current class.
            config (dict[str, Any]): The config to convert.
            class_kwargs (**dict[str, Any]): Additional non-serializable kwargs that should be passed to the class constructor.

        Raises:
            ValueError: If no subclass matches the config.

        Returns:
            Serializable: An instance of the class
        """

        if cls is Serializable:
            raise NotImplementedError(
                "Do not call from_config() directly from Serializable"
            )

        if inspect.isabstract(cls):
            matches = [
                c
                for c in cls.all()
                if c._type() == config.get("_type") and c._name() == config.get("_name")
            ]
            if len(matches) == 0:
                raise ValueError(
                    f"No {cls.__name__} matches config {config.get('_type')}/{config.get('_name')}."
                )
            cls = matches[0]

        class_config = Serializable._filter_class_config(config)

        return cls(**class_config, **class_kwargs)

    @classmethod
    def from_json(
        cls: Type[SerializableType], s: str, **class_kwargs: Any
    ) -> SerializableType:
        return cls.from_config(json.loads(s), **class_kwargs)

    def __str__(self: Self) -> str:
        class_config = Serializable._filter_class_config(self.to_config())

        name = self.__class__.__name__

        return f"{name}({', '.join(f'{k}={v}' for k, v in class_config.items())})"

    def __repr__(self: Self) -> str:
        return repr(str(self))

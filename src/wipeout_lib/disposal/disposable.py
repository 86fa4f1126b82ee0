# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from abc import ABC, ABCMeta, abstractmethod
from enum import Enum
from typing import Any, Self

from wipeout_lib.core.error import WipeoutError


class DisposalState(Enum):
    """
    Outcome of a single attempt to dispose of a resource.
    """

    # the resource still exists, try again later
    PENDING = "to_dispose"
    # the resource is gone for good
    PURGED = "purged"

    def __str__(self) -> str:
        return self.name

    @classmethod
    def fromStr(cls, s: str) -> Self:
        """
        Convert a string to the corresponding DisposalState.

        Raises:
            ValueError: If the string does not represent any state.
        """
        for state in cls:
            if s.lower() in (state.value, state.name.lower()):
                return state

        raise ValueError(f"Invalid disposal state '{s}'.")


class DisposableMeta(ABCMeta):
    """
    Metaclass for disposable resources.

    Every concrete subclass of `Disposable` defining the `kind` attribute
    is registered, so that it can be reconstructed from its dictionary form.
    """

    # registry of known kinds of disposables
    _registry: dict[str, type["Disposable"]] = {}

    def __init__(cls, name, bases, namespace, **kwargs):
        super().__init__(name, bases, namespace, **kwargs)
        kind = namespace.get("kind")
        if kind:
            DisposableMeta._registry[kind] = cls  # ty: ignore[invalid-assignment]

    @classmethod
    def fromStr(mcs, kind: str) -> type["Disposable"]:
        """
        Return the disposable class registered under `kind`.

        Raises:
            WipeoutError: If no class is registered for the given kind.
        """
        try:
            return mcs._registry[kind]
        except KeyError as e:
            raise WipeoutError(f"No disposable registered as '{kind}'.") from e


class Disposable(ABC, metaclass=DisposableMeta):
    """
    Resource to be disposed of asynchronously by the disposal queue.

    Implementations must be reconstructible from `toDict` output
    and must not rely on any state which is not part of it.
    """

    # name under which the class is registered; must be set by concrete subclasses
    kind: str = ""

    @abstractmethod
    def dispose(self) -> DisposalState:
        """
        Attempt to dispose of the resource.

        Returns:
            DisposalState: PURGED if the resource no longer exists,
            PENDING if another attempt is needed.

        Raises:
            Exception: Any failure is considered transient and the attempt is retried later.
        """
        pass

    @abstractmethod
    def getDisplayName(self) -> str:
        """Return a human-readable description of the resource."""
        pass

    @abstractmethod
    def _toDict(self) -> dict[str, Any]:
        """Return the durable fields of the disposable."""
        pass

    @classmethod
    @abstractmethod
    def _fromDict(cls, data: dict[str, Any]) -> Self:
        """Construct the disposable from its durable fields."""
        pass

    def toDict(self) -> dict[str, Any]:
        """Return the dictionary form of the disposable, including its kind."""
        return {"kind": self.kind, **self._toDict()}

    @staticmethod
    def fromDict(data: dict[str, Any]) -> "Disposable":
        """
        Reconstruct a disposable of any registered kind from its dictionary form.

        Raises:
            WipeoutError: If the kind is unknown or the data are invalid.
        """
        data = dict(data)
        kind = data.pop("kind", None)
        if not kind:
            raise WipeoutError("Disposable has no kind.")

        cls = DisposableMeta.fromStr(str(kind))
        try:
            return cls._fromDict(data)
        except (KeyError, TypeError) as e:
            raise WipeoutError(f"Invalid disposable of kind '{kind}': {e}.") from e

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Disposable):
            return NotImplemented
        return self.toDict() == other.toDict()

    def __hash__(self) -> int:
        return hash(tuple(sorted((k, str(v)) for k, v in self.toDict().items())))

    def __str__(self) -> str:
        return self.getDisplayName()

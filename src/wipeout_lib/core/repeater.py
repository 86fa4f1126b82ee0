# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from collections.abc import Callable
from typing import Any

# handler(exception, repeater)
Handler = Callable[[BaseException, "Repeater"], Any]


class Repeater:
    """
    Apply one operation to every argument of a wipeout command.

    A failure of the operation for one argument does not stop the others
    as long as a handler is registered for the raised exception type.
    The handler decides whether the command continues or exits.

    Attributes:
        items (list[Any]): Arguments to process, in order.
        encountered_errors (dict[int, BaseException]): Exceptions raised so far,
            keyed by the index of the argument.
        current_iteration (int): Index of the argument being processed.
    """

    def __init__(self, items: list[Any], func: Callable, *args: Any, **kwargs: Any):
        """
        Args:
            items (list[Any]): Arguments to process.
            func (Callable): The operation. Called as `func(item, *args, **kwargs)`.
        """
        self.items = items
        self.encountered_errors: dict[int, BaseException] = {}
        self.current_iteration = 0

        self._func = func
        self._args = args
        self._kwargs = kwargs
        self._handlers: dict[type[BaseException], Handler] = {}

    def onException(self, exc_type: type[BaseException], handler: Handler) -> None:
        """
        Call `handler(exception, self)` whenever the operation raises `exc_type`.

        When several registered types match a raised exception,
        the handler of the most specific type is used.
        """
        self._handlers[exc_type] = handler

    def run(self) -> None:
        """
        Process all items.

        Exceptions without a matching handler propagate and stop the processing.
        """
        handled = tuple(self._handlers)

        for index, item in enumerate(self.items):
            self.current_iteration = index
            try:
                self._func(item, *self._args, **self._kwargs)
            except handled as e:
                self.encountered_errors[index] = e
                self._findHandler(e)(e, self)

    def _findHandler(self, exception: BaseException) -> Handler:
        """Return the handler registered for the closest base type of `exception`."""
        handler = next(
            (
                self._handlers[exc_type]
                for exc_type in type(exception).__mro__
                if exc_type in self._handlers
            ),
            None,
        )
        if handler is None:
            raise KeyError(type(exception))
        return handler

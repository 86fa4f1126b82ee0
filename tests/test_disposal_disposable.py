# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from typing import Any

import pytest

from wipeout_lib.core.error import WipeoutError
from wipeout_lib.disposal.disposable import (
    Disposable,
    DisposableMeta,
    DisposalState,
)
from wipeout_lib.disposal.remote_delete import RemoteDeleteTask


class _TicketDisposable(Disposable):
    kind = "test_ticket"

    def __init__(self, ticket: str):
        self.ticket = ticket

    def dispose(self) -> DisposalState:
        return DisposalState.PURGED

    def getDisplayName(self) -> str:
        return f"Ticket {self.ticket}"

    def _toDict(self) -> dict[str, Any]:
        return {"ticket": self.ticket}

    @classmethod
    def _fromDict(cls, data: dict[str, Any]):
        return cls(data["ticket"])


@pytest.mark.parametrize(
    "string,expected",
    [
        ("to_dispose", DisposalState.PENDING),
        ("PENDING", DisposalState.PENDING),
        ("purged", DisposalState.PURGED),
        ("PURGED", DisposalState.PURGED),
    ],
)
def test_disposal_state_from_str(string, expected):
    assert DisposalState.fromStr(string) == expected


def test_disposal_state_from_str_invalid():
    with pytest.raises(ValueError, match="Invalid disposal state"):
        DisposalState.fromStr("gone")


def test_disposable_subclasses_are_registered():
    assert DisposableMeta.fromStr("remote_delete") is RemoteDeleteTask
    assert DisposableMeta.fromStr("test_ticket") is _TicketDisposable


def test_disposable_from_str_unknown_kind():
    with pytest.raises(WipeoutError, match="No disposable registered as 'unknown'"):
        DisposableMeta.fromStr("unknown")


def test_disposable_to_dict_contains_kind():
    assert _TicketDisposable("T-1").toDict() == {"kind": "test_ticket", "ticket": "T-1"}


def test_disposable_from_dict_reconstructs_registered_kind():
    disposable = Disposable.fromDict({"kind": "test_ticket", "ticket": "T-1"})

    assert isinstance(disposable, _TicketDisposable)
    assert disposable.ticket == "T-1"


def test_disposable_from_dict_without_kind():
    with pytest.raises(WipeoutError, match="has no kind"):
        Disposable.fromDict({"ticket": "T-1"})


def test_disposable_from_dict_missing_field():
    with pytest.raises(WipeoutError, match="Invalid disposable of kind 'test_ticket'"):
        Disposable.fromDict({"kind": "test_ticket"})


def test_disposable_equality_uses_durable_fields():
    assert _TicketDisposable("T-1") == _TicketDisposable("T-1")
    assert hash(_TicketDisposable("T-1")) == hash(_TicketDisposable("T-1"))
    assert _TicketDisposable("T-1") != _TicketDisposable("T-2")
    assert _TicketDisposable("T-1") != RemoteDeleteTask("", "T-1")

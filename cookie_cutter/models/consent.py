"""Consent-handling value types and controller messages."""

from __future__ import annotations

import dataclasses
from typing import Literal

import pydantic

from cookie_cutter.models import dom

MessageType = Literal["COOKIE_ACCEPTED", "GET_STATUS"]


@dataclasses.dataclass(frozen=True)
class Candidate:
    """An element judged eligible to be the accept action.

    Holds a borrowed reference into one :class:`~dom.DocumentSnapshot`;
    candidates are discarded once the click decision for that pass
    has been made.
    """

    element: dom.ElementNode
    score: int


class ConsentMessage(pydantic.BaseModel):
    """Message sent to the controlling process."""

    type: MessageType


class StatusResponse(pydantic.BaseModel):
    """Controller reply to ``GET_STATUS``."""

    enabled: bool = True


COOKIE_ACCEPTED = ConsentMessage(type="COOKIE_ACCEPTED")
GET_STATUS = ConsentMessage(type="GET_STATUS")

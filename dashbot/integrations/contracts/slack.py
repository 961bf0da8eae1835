"""
Slack payload models.

Only the fields the bot reads are declared; Slack sends many more and pydantic
ignores them.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

# Attachment action names used in the view list message.
ACTION_SELECT = "select"
ACTION_CANCEL = "cancel"


class Event(BaseModel):
    type: str = ""
    text: str = ""
    user: Optional[str] = None
    bot_id: Optional[str] = None
    channel: str = ""
    ts: Optional[str] = None


class EventCallback(BaseModel):
    token: str = ""
    type: str = ""
    challenge: Optional[str] = None
    team_id: Optional[str] = None
    event_id: Optional[str] = None
    event: Optional[Event] = None


class SelectedOption(BaseModel):
    value: str
    text: Optional[str] = None


class Action(BaseModel):
    name: str = ""
    type: str = ""
    value: Optional[str] = None
    selected_options: List[SelectedOption] = Field(default_factory=list)


class Channel(BaseModel):
    id: str = ""
    name: str = ""


class User(BaseModel):
    id: str = ""
    name: str = ""


class InteractionPayload(BaseModel):
    type: str = ""
    token: str = ""
    callback_id: Optional[str] = None
    actions: List[Action] = Field(default_factory=list)
    channel: Channel = Field(default_factory=Channel)
    user: User = Field(default_factory=User)
    response_url: str = ""


class ResponseMessage(BaseModel):
    text: str
    replace_original: bool = True
    delete_original: bool = False

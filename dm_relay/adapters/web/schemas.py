"""Request/response models for the /api routes."""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel


class TokenSubmitRequest(BaseModel):
    botToken: Optional[str] = None
    clientId: Optional[str] = None


class TokenSubmitResponse(BaseModel):
    success: bool
    message: str
    id: int


class GuildsRequest(BaseModel):
    token: Optional[str] = None


class GuildsResponse(BaseModel):
    success: bool
    guilds: List[Dict[str, Any]]


class MembersRequest(BaseModel):
    token: Optional[str] = None
    guildId: Optional[str] = None


class MembersResponse(BaseModel):
    success: bool
    members: List[Dict[str, Any]]


class DirectMessageRequest(BaseModel):
    token: Optional[str] = None
    userId: Optional[Union[str, int]] = None
    message: Optional[str] = None


class DirectMessageResponse(BaseModel):
    success: bool
    message: str


class BulkMessageRequest(BaseModel):
    token: Optional[str] = None
    userIds: List[Union[str, int]] = []
    message: Optional[str] = None
    selectAll: bool = False
    guildId: Optional[str] = None
    delay: Optional[int] = None


class BulkMessageResponse(BaseModel):
    success: bool
    message: str
    attemptedCount: int
    sentCount: int
    failedCount: int
    failedIds: List[str]


class RepliesResponse(BaseModel):
    success: bool
    replies: List[Dict[str, Any]]


class AdminTokensResponse(BaseModel):
    tokens: List[Dict[str, Any]]


class StatusResponse(BaseModel):
    status: str
    storage: str
    listener: bool
    liveViewers: int

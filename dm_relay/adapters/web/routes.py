"""/api routes: token intake, directory lookup, DMs and stored replies."""

from fastapi import APIRouter, Depends

from dm_relay.adapters.web.schemas import (
    AdminTokensResponse,
    BulkMessageRequest,
    BulkMessageResponse,
    DirectMessageRequest,
    DirectMessageResponse,
    GuildsRequest,
    GuildsResponse,
    MembersRequest,
    MembersResponse,
    RepliesResponse,
    TokenSubmitRequest,
    TokenSubmitResponse,
)
from dm_relay.adapters.web.services import Services, get_services
from dm_relay.domain.models import DispatchRequest

api_router = APIRouter(prefix="/api", tags=["DM"])


@api_router.post("/token", response_model=TokenSubmitResponse)
async def submit_token(req: TokenSubmitRequest, services: Services = Depends(get_services)):
    submission_id = await services.intake.submit(req.botToken, req.clientId)
    return TokenSubmitResponse(
        success=True,
        message="Token received successfully",
        id=submission_id,
    )


@api_router.post("/guilds", response_model=GuildsResponse)
async def list_guilds(req: GuildsRequest, services: Services = Depends(get_services)):
    guilds = await services.directory.list_guilds(req.token)
    return GuildsResponse(success=True, guilds=[g.to_dict() for g in guilds])


@api_router.post("/guild/members", response_model=MembersResponse)
async def list_members(req: MembersRequest, services: Services = Depends(get_services)):
    members = await services.directory.list_members(req.token, req.guildId or None)
    return MembersResponse(success=True, members=[m.to_dict() for m in members])


@api_router.post("/dm/single", response_model=DirectMessageResponse)
@api_router.post("/dm/send", response_model=DirectMessageResponse)
async def send_direct(req: DirectMessageRequest, services: Services = Depends(get_services)):
    user_id = str(req.userId) if req.userId is not None else ""
    await services.dispatcher.send_direct(req.token or "", user_id, req.message or "")
    return DirectMessageResponse(success=True, message=f"Message sent to user {user_id}")


@api_router.post("/dm/bulk", response_model=BulkMessageResponse)
async def send_bulk(req: BulkMessageRequest, services: Services = Depends(get_services)):
    result = await services.dispatcher.send_bulk(
        DispatchRequest(
            token=req.token or "",
            message=req.message or "",
            explicit_user_ids=[str(u) for u in req.userIds],
            select_all=req.selectAll,
            target_guild_id=req.guildId or None,
            inter_message_delay_ms=req.delay or 0,
        )
    )
    return BulkMessageResponse(
        success=True,
        message=f"Sent {result.succeeded} messages, failed {result.failed} messages",
        attemptedCount=result.attempted,
        sentCount=result.succeeded,
        failedCount=result.failed,
        failedIds=result.failed_ids,
    )


@api_router.get("/replies", response_model=RepliesResponse)
async def list_replies(services: Services = Depends(get_services)):
    replies = await services.ingestion.history()
    return RepliesResponse(success=True, replies=[r.to_dict() for r in replies])


@api_router.get("/admin/tokens", response_model=AdminTokensResponse)
async def admin_tokens(services: Services = Depends(get_services)):
    submissions = await services.intake.list_submissions()
    return AdminTokensResponse(tokens=[s.to_dict() for s in submissions])

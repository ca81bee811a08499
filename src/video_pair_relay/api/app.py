"""
FastAPI application for joining and leaving the video relay.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from ..config.settings import RelayConfig
from ..core.types import MSG_CAPACITY_EXCEEDED, MSG_UNKNOWN_PARTICIPANT
from ..core.video_router import VideoRouter
from ..infrastructure.exceptions import CapacityExceeded, UnknownParticipant

logger = logging.getLogger(__name__)


class JoinResponse(BaseModel):
    """Response model for a successful join."""
    id: int
    video_port: int
    paired: bool
    partner_id: Optional[int] = None


class LeaveRequest(BaseModel):
    """Request model for leaving."""
    id: int


class LeaveResponse(BaseModel):
    """Response model for a successful leave."""
    id: int


class PartnerResponse(BaseModel):
    """Response model for a partner lookup."""
    id: int
    partner_id: Optional[int] = None


# Global video router instance
video_router: Optional[VideoRouter] = None


def get_video_router() -> VideoRouter:
    """Dependency to get the video router instance."""
    if video_router is None or not video_router.is_started:
        raise HTTPException(status_code=503, detail="Video router not started")
    return video_router


def create_app(
    config: Optional[RelayConfig] = None,
    router: Optional[VideoRouter] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Relay configuration, used when no router is given
        router: Pre-built video router

    Returns:
        Configured FastAPI application
    """
    global video_router

    video_router = router or VideoRouter(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await video_router.start()
        try:
            yield
        finally:
            await video_router.stop()

    app = FastAPI(
        title="Video Pair Relay API",
        description="Join and leave a paired video relay",
        version="1.0.0",
        lifespan=lifespan,
    )

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.post("/user", response_model=JoinResponse)
    async def join(router: VideoRouter = Depends(get_video_router)):
        """
        Join as a new player.

        Returns:
            The player's identity, the port to stream video to and the
            pairing outcome
        """
        logger.info("Received a player join request")
        try:
            result = await router.on_join()
        except CapacityExceeded:
            raise HTTPException(status_code=503, detail=MSG_CAPACITY_EXCEEDED)

        return JoinResponse(
            id=result.participant_id,
            video_port=result.video_port,
            paired=result.paired,
            partner_id=result.partner_id,
        )

    @app.delete("/user", response_model=LeaveResponse)
    async def leave(
        request: LeaveRequest,
        router: VideoRouter = Depends(get_video_router),
    ):
        """
        Leave as an active player.

        Args:
            request: Leave request with the player's id
            router: Video router dependency
        """
        try:
            await router.on_leave(request.id)
        except UnknownParticipant:
            raise HTTPException(status_code=404, detail=MSG_UNKNOWN_PARTICIPANT)
        return LeaveResponse(id=request.id)

    @app.get("/user/{participant_id}/partner", response_model=PartnerResponse)
    async def partner(
        participant_id: int,
        router: VideoRouter = Depends(get_video_router),
    ):
        """Look up a player's current partner."""
        try:
            partner_id = await router.get_partner_id(participant_id)
        except UnknownParticipant:
            raise HTTPException(status_code=404, detail=MSG_UNKNOWN_PARTICIPANT)
        return PartnerResponse(id=participant_id, partner_id=partner_id)

    @app.get("/stats")
    async def stats(router: VideoRouter = Depends(get_video_router)):
        """Participant states, pairs and relay counters."""
        return await router.get_system_status()

    return app

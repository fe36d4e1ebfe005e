"""
Site content endpoints.

Posts, projects, the contact form, the visitor counter and the chat proxy.
Storage failures are turned into a generic 500 by the app's error handler.
"""

import logging
from typing import Dict, Iterator, List

from fastapi import APIRouter, HTTPException, Query, Request, status
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from nrv.errors import ChatError

from ..deps import ServicesDep

logger = logging.getLogger(__name__)

router = APIRouter()


# Request/Response models

class PostResponse(BaseModel):
    """Blog post."""
    id: int
    title: str
    content: str
    date: str


class ProjectResponse(BaseModel):
    """Project link."""
    id: int
    name: str
    description: str
    url: str


class InquiryRequest(BaseModel):
    """Contact form submission."""
    name: str = Field(..., description="Sender name")
    email: str = Field(..., description="Sender email")
    message: str = Field(..., description="Message")


class StatsResponse(BaseModel):
    """Visitor statistics."""
    visitors: int


def client_address(request: Request) -> str:
    return request.client.host if request.client else ""


def sse_events(chunks: Iterator[str]) -> Iterator[str]:
    """Format text chunks as server-sent events."""
    for chunk in chunks:
        lines = chunk.split("\n")
        yield "".join(f"data: {line}\n" for line in lines) + "\n"


# Endpoints

@router.get("/posts", response_model=Dict[str, PostResponse])
def get_posts(services: ServicesDep):
    """Get all blog posts keyed by slug."""
    posts = services.content.get_posts()
    return {slug: post.to_dict() for slug, post in posts.items()}


@router.get("/projects", response_model=List[ProjectResponse])
def get_projects(services: ServicesDep):
    """Get all projects."""
    return [p.to_dict() for p in services.content.get_projects()]


@router.post("/inquire", status_code=status.HTTP_201_CREATED)
def inquire(inquiry: InquiryRequest, request: Request, services: ServicesDep):
    """Store a contact form submission."""
    services.content.add_inquiry(
        name=inquiry.name,
        email=inquiry.email,
        message=inquiry.message,
        ip_address=client_address(request)
    )
    return {"success": True}


@router.get("/stats", response_model=StatsResponse)
def get_stats(services: ServicesDep):
    """Get the unique visitor count."""
    return StatsResponse(visitors=services.content.count_visitors())


@router.get("/chat")
def chat(services: ServicesDep, prompt: str = Query("", description="User prompt")):
    """
    Stream a chat completion as server-sent events.

    Each upstream chunk is sent as a `data:` event.
    """
    if not prompt:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing prompt"
        )

    try:
        chunks = services.chat.stream(prompt)
    except ChatError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Chat service unavailable"
        )

    return StreamingResponse(
        sse_events(chunks),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"}
    )

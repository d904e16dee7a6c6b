# assistant_route.py
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query

from deps import current_user, get_live_feed, get_proposal_generator
from generators import LiveProjectFeed, ProposalGenerator
from models import User, utc_now
from schemas import DataResponse, GeneratedProposalOut, GenerateProposalRequest, LiveProjectsResponse

router = APIRouter(prefix="/api", tags=["assistant"])

Platform = Literal["guru", "upwork", "freelancer", "fiverr", "jobicy"]


@router.post("/ai/generate-proposal", response_model=DataResponse[GeneratedProposalOut])
def generate_proposal(
  req: GenerateProposalRequest,
  user: User = Depends(current_user),
  generator: ProposalGenerator = Depends(get_proposal_generator),
):
  client_name = req.client_info.name if req.client_info else None
  proposal = generator.generate(req.job_description, client_name, user.username)
  return {"data": {"title": proposal.title, "content": proposal.content, "budget": proposal.budget}}

@router.get("/live-projects", response_model=LiveProjectsResponse)
def live_projects(
  platform: Optional[Platform] = None,
  limit: int = Query(12, ge=1, le=50),
  user: User = Depends(current_user),
  feed: LiveProjectFeed = Depends(get_live_feed),
):
  projects = [p.to_dict() for p in feed.fetch(limit, platform=platform)]
  return {
    "projects": projects,
    "timestamp": utc_now(),
    "total_count": len(projects),
    "sources": [platform] if platform else list(feed.sources),
  }

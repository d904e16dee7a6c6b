# generators.py
"""
Stand-ins for the AI proposal writer and the freelance-platform project feed.

Routes only see the `ProposalGenerator` / `LiveProjectFeed` protocols, so a
real model client or platform scraper can be dropped in through `create_app`.
"""
import random
import uuid
from dataclasses import asdict, dataclass, field
from datetime import timedelta
from typing import Dict, List, Optional, Protocol

from models import utc_now

PLATFORMS = ["guru", "upwork", "freelancer", "fiverr", "jobicy"]

PLATFORM_URLS = {
  "guru": "https://www.guru.com/work/detail/{id}",
  "upwork": "https://www.upwork.com/jobs/~{id}",
  "freelancer": "https://www.freelancer.com/projects/{id}",
  "fiverr": "https://www.fiverr.com/requests/{id}",
  "jobicy": "https://jobicy.com/jobs/{id}",
}

# category -> (title templates, skill pool)
CATALOG: Dict[str, tuple] = {
  "Web Development": (
    ["Build a {adj} marketing site for a {biz}", "Fix checkout bugs on our {biz} store", "Landing page redesign for a {biz}"],
    ["React", "Next.js", "TypeScript", "Tailwind CSS", "Node.js", "WordPress", "Shopify"],
  ),
  "Mobile Apps": (
    ["{adj} booking app for a {biz}", "Port our {biz} app to Android", "Flutter MVP for a {biz}"],
    ["React Native", "Flutter", "Swift", "Kotlin", "Firebase"],
  ),
  "Design": (
    ["Brand identity for a {adj} {biz}", "Figma UI kit for a {biz} dashboard", "Logo refresh for a {biz}"],
    ["Figma", "Illustrator", "Branding", "UI/UX", "Photoshop"],
  ),
  "Data & AI": (
    ["Sales dashboard for a {biz}", "Scrape and clean {biz} listings", "Chatbot prototype for a {biz}"],
    ["Python", "pandas", "SQL", "Power BI", "OpenAI API", "LangChain"],
  ),
  "Writing": (
    ["Blog posts for a {adj} {biz}", "Product copy for a {biz} launch", "Case study for a {biz}"],
    ["Copywriting", "SEO", "Content Strategy", "Editing"],
  ),
}

ADJECTIVES = ["modern", "fast", "minimal", "mobile-first", "scalable", "friendly"]
BUSINESSES = ["bakery", "fintech startup", "dental clinic", "SaaS tool", "fitness studio", "real estate agency", "non-profit"]


@dataclass
class GeneratedProposal:
  title: str
  content: str
  budget: str


@dataclass
class LiveProject:
  id: str
  title: str
  description: str
  budget: str
  deadline: str
  skills: List[str]
  platform: str
  url: str
  posted_time: str
  client_rating: float
  proposals_count: int
  verified: bool
  urgent: bool
  category: str

  def to_dict(self) -> dict:
    return asdict(self)


class ProposalGenerator(Protocol):
  def generate(self, job_description: str, client_name: Optional[str], author: str) -> GeneratedProposal:
    ...


class LiveProjectFeed(Protocol):
  sources: List[str]

  def fetch(self, limit: int, platform: Optional[str] = None) -> List[LiveProject]:
    ...


PROPOSAL_TEMPLATE = """Dear {client},

I am excited to submit my proposal for your project. Based on your requirements:

{job}

I propose to deliver a comprehensive solution that includes:
- Modern, responsive design
- Clean, maintainable code
- Regular progress updates
- Post-delivery support

Timeline: 2-4 weeks
Budget: Competitive pricing based on project scope

I look forward to discussing this opportunity further.

Best regards,
{author}"""


class TemplateProposalGenerator:
  """Deterministic fill-in-the-blanks proposal, no model call."""

  def __init__(self, budget: str = "2500.00"):
    self.budget = budget

  def generate(self, job_description: str, client_name: Optional[str], author: str) -> GeneratedProposal:
    client = (client_name or "").strip() or "Client"
    return GeneratedProposal(
      title=f"Proposal for {client} Project",
      content=PROPOSAL_TEMPLATE.format(client=client, job=job_description.strip(), author=author),
      budget=self.budget,
    )


@dataclass
class SyntheticProjectFeed:
  """Random but plausible postings; pass a seed to make the output repeatable."""

  seed: Optional[int] = None
  sources: List[str] = field(default_factory=lambda: list(PLATFORMS))

  def __post_init__(self):
    self._rng = random.Random(self.seed)

  def fetch(self, limit: int, platform: Optional[str] = None) -> List[LiveProject]:
    if platform is not None and platform not in self.sources:
      return []
    now = utc_now()
    return [self._one(platform or self._rng.choice(self.sources), now) for _ in range(limit)]

  def _one(self, platform: str, now) -> LiveProject:
    rng = self._rng
    category = rng.choice(sorted(CATALOG))
    titles, skills = CATALOG[category]
    biz = rng.choice(BUSINESSES)
    title = rng.choice(titles).format(adj=rng.choice(ADJECTIVES), biz=biz)
    low = rng.randrange(2, 60) * 50
    if rng.random() < 0.3:
      budget = f"${low // 20}-{low // 10}/hr"
    else:
      budget = f"${low:,}-${low * 2:,}"
    project_id = uuid.UUID(int=rng.getrandbits(128)).hex[:12]
    return LiveProject(
      id=f"{platform}-{project_id}",
      title=title,
      description=f"We are a {biz} looking for help: {title.lower()}. Share relevant work in your reply.",
      budget=budget,
      deadline=(now + timedelta(days=rng.randint(3, 60))).date().isoformat(),
      skills=rng.sample(skills, k=min(len(skills), rng.randint(2, 5))),
      platform=platform,
      url=PLATFORM_URLS[platform].format(id=project_id),
      posted_time=(now - timedelta(minutes=rng.randint(1, 72 * 60))).isoformat(timespec="seconds"),
      client_rating=round(rng.uniform(3.5, 5.0), 1),
      proposals_count=rng.randint(0, 50),
      verified=rng.random() < 0.7,
      urgent=rng.random() < 0.2,
      category=category,
    )

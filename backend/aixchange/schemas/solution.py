"""Solution Schemas — submission, import, vote and review payloads plus response shapes.

Invariants:
    - SolutionSubmission: title 3-100, description 10-1000, category 2-50,
      provider 2-100, tags 1-5, rating 0-5, tokenCost >= 0
    - Status labels (Active/Pending/Inactive) map to stored SolutionStatus values
    - SolutionImportRecord is looser (defaults for category/provider/launchUrl):
      imported catalogues are often sparse
    - Response models never read ORM relationships; callers pass author and
      review stats explicitly
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import Field

from aixchange.core.domain_types import ImportMode, SolutionStatus, VoteDirection
from aixchange.schemas.common import ApiInput, ApiOutput, UrlStr

StatusLabel = Literal["Active", "Pending", "Inactive"]


class ResourceConfig(ApiInput):
    cpu: str = Field(min_length=1)
    memory: str = Field(min_length=1)
    storage: str = Field(min_length=1)
    gpu: str | None = None


class SolutionSubmission(ApiInput):
    """User-facing solution form."""
    title: str = Field(min_length=3, max_length=100)
    description: str = Field(min_length=10, max_length=1000)
    category: str = Field(min_length=2, max_length=50)
    provider: str = Field(min_length=2, max_length=100)
    launch_url: UrlStr
    source_code_url: UrlStr | None = None
    token_cost: float = Field(0, ge=0)
    rating: float = Field(0, ge=0, le=5)
    status: StatusLabel = "Pending"
    resource_config: ResourceConfig
    tags: list[str] = Field(min_length=1, max_length=5)
    image_url: str | None = None
    metadata: dict[str, Any] | None = None

    @property
    def stored_status(self) -> SolutionStatus:
        return SolutionStatus.from_label(self.status)


class SolutionUpdate(SolutionSubmission):
    """Admin edit: same rules as a submission, resource config kept unless sent."""
    resource_config: ResourceConfig | None = None
    is_published: bool = True


class ImportResource(ApiInput):
    name: str = Field(min_length=1)
    type: str = Field(min_length=1)
    url: UrlStr


class SolutionImportRecord(ApiInput):
    """One record of a bulk import or bulk submission."""
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    version: str = "1.0.0"
    is_published: bool = False
    category: str = "Other"
    provider: str = "Unknown"
    launch_url: UrlStr = "https://example.com"
    source_code_url: UrlStr | None = None
    token_cost: float = Field(0, ge=0)
    resource_config: ResourceConfig | None = None
    tags: list[str]
    resources: list[ImportResource] | None = None
    image_url: UrlStr | None = None
    metadata: dict[str, Any] | None = None


class SolutionImportPayload(ApiInput):
    """Envelope only; records are validated one by one during reconciliation."""
    solutions: list[Any] = Field(min_length=1)
    default_author_id: str = Field(min_length=1)
    mode: ImportMode = ImportMode.TRANSACTION


class VoteRequest(ApiInput):
    vote: VoteDirection


class ReviewCreate(ApiInput):
    rating: int = Field(ge=1, le=5)
    comment: str | None = Field(None, max_length=2000)


class SolutionIdsRequest(ApiInput):
    solution_ids: list[str] = Field(min_length=1)


class SolutionStatusUpdate(SolutionIdsRequest):
    status: SolutionStatus


# --- Responses ---------------------------------------------------------------

class AuthorSummary(ApiOutput):
    name: str | None = None
    image: str | None = None


class AdminAuthorSummary(ApiOutput):
    name: str | None = None
    email: str


class SolutionOut(ApiOutput):
    id: str
    title: str
    description: str
    version: str
    is_published: bool
    author_id: str
    category: str
    provider: str
    launch_url: str
    source_code_url: str | None = None
    token_cost: float
    rating: float
    status: str
    tags: list[str]
    image_url: str | None = None
    resource_config: dict | None = None
    metadata: dict | None = Field(None, validation_alias="extra")
    upvotes: int
    downvotes: int
    total_votes: int
    event_id: str | None = None
    created_at: datetime
    updated_at: datetime
    published_at: datetime | None = None


class SolutionListItem(SolutionOut):
    author: AuthorSummary | None = None
    review_count: int = 0


class AdminSolutionItem(SolutionOut):
    author: AdminAuthorSummary | None = None
    review_count: int = 0


class VoteTally(ApiOutput):
    upvotes: int
    downvotes: int
    total_votes: int


class ReviewOut(ApiOutput):
    id: str
    solution_id: str
    user_id: str
    rating: int
    comment: str | None = None
    created_at: datetime

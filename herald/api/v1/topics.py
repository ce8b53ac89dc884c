"""Topic endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from herald.core.deps import CurrentUser, Pagination, Topics
from herald.schemas.topic import TopicCreate, TopicResponse

router = APIRouter()


@router.get("", response_model=list[TopicResponse], summary="List topics")
async def list_topics(_user: CurrentUser, topics: Topics, page: Pagination) -> list[TopicResponse]:
    return [TopicResponse.model_validate(t) for t in await topics.query(page.number, page.rows)]


@router.post(
    "",
    response_model=TopicResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create topic",
)
async def create_topic(data: TopicCreate, _user: CurrentUser, topics: Topics) -> TopicResponse:
    """Create a topic; names are unique."""
    return TopicResponse.model_validate(await topics.create(data.name))


@router.get("/{topic_id}", response_model=TopicResponse, summary="Get topic")
async def get_topic(topic_id: UUID, _user: CurrentUser, topics: Topics) -> TopicResponse:
    return TopicResponse.model_validate(await topics.query_by_id(topic_id))

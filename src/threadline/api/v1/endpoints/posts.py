# src/threadline/api/v1/endpoints/posts.py
"""Post-related endpoints: the ranked feed, post CRUD, votes and comment threads."""

from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from threadline.schemas.comment import CommentCreate, CommentNode, CommentResponse
from threadline.schemas.feed import FeedResponse
from threadline.schemas.post import PostCreate, PostResponse
from threadline.schemas.vote import MyVoteResponse, VoteRequest, VoteResponse
from threadline.services.comments import CommentService
from threadline.services.feed import FeedRequest, plan_feed
from threadline.services.posts import PostService
from threadline.services.votes import POST_VOTES, VoteAggregator

from ..dependencies import ClockDep, CurrentUserDep, SessionDep

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=FeedResponse)
def get_feed(
    db: SessionDep,
    clock: ClockDep,
    community: str | None = Query(None, description="Community name; omit for all"),
    sort: str | None = Query(None, description="hot, new, top, trending, controversial, rising"),
    time_frame: Annotated[
        str | None, Query(alias="timeFrame", description="1h, 6h, 24h, 7d, 30d or all")
    ] = None,
    limit: int | None = Query(None, description="Page size, clamped to [1, 100]"),
    offset: int | None = Query(None, description="Rows to skip, clamped to >= 0"),
) -> FeedResponse:
    """Return one page of the ranked feed.

    Unknown ``sort`` and ``timeFrame`` values fall back to ``hot`` and ``24h``;
    the metadata reports the values actually used.
    """
    request = FeedRequest.from_params(
        sort=sort,
        time_frame=time_frame,
        community=community,
        limit=limit,
        offset=offset,
    )
    return plan_feed(db, request, clock())


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    post_data: PostCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    clock: ClockDep,
) -> PostResponse:
    """Create a new post."""
    return PostService(db, clock).create(post_data, current_user.id)


@router.get("/{post_id}", response_model=PostResponse)
def get_post(post_id: str, db: SessionDep) -> PostResponse:
    """Get a specific post by ID."""
    return PostService(db).get(post_id)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_post(
    post_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
    clock: ClockDep,
) -> Response:
    """Soft-delete one of the caller's posts."""
    PostService(db, clock).delete(post_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{post_id}/vote", response_model=VoteResponse)
def vote_on_post(
    post_id: str,
    vote_data: VoteRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
    clock: ClockDep,
) -> dict[str, int | None]:
    """Cast, change or retract the caller's vote on a post."""
    tally = VoteAggregator(db, clock).apply_vote(
        POST_VOTES, post_id, current_user.id, vote_data.vote_type
    )
    return tally.as_dict()


@router.get("/{post_id}/my-vote", response_model=MyVoteResponse)
def get_my_post_vote(
    post_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> MyVoteResponse:
    """Return the caller's current vote on a post."""
    vote = VoteAggregator(db).get_user_vote(POST_VOTES, post_id, current_user.id)
    return MyVoteResponse(user_vote=vote)


@router.get("/{post_id}/comments", response_model=list[CommentNode])
def get_post_comments(
    post_id: str,
    db: SessionDep,
    max_depth: Annotated[int | None, Query(alias="maxDepth", ge=0)] = None,
) -> list[CommentNode]:
    """Return the post's comments as a forest of nested replies."""
    return CommentService(db).tree(post_id, max_depth)


@router.post(
    "/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_comment(
    post_id: str,
    comment_data: CommentCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    clock: ClockDep,
) -> CommentResponse:
    """Comment on a post, or reply to one of its comments."""
    comment = CommentService(db, clock).create(
        post_id, current_user.id, comment_data.body, comment_data.parent_id
    )
    return CommentResponse.model_validate(comment)

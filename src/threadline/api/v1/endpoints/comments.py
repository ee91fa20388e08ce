# src/threadline/api/v1/endpoints/comments.py
"""Comment endpoints: lookup, votes, edits and deletion."""

from fastapi import APIRouter, Response, status

from threadline.schemas.comment import CommentResponse, CommentUpdate
from threadline.schemas.vote import MyVoteResponse, VoteRequest, VoteResponse
from threadline.services.comments import CommentService
from threadline.services.votes import COMMENT_VOTES, VoteAggregator

from ..dependencies import ClockDep, CurrentUserDep, SessionDep

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("/{comment_id}", response_model=CommentResponse)
def get_comment(comment_id: str, db: SessionDep) -> CommentResponse:
    return CommentResponse.model_validate(CommentService(db).get(comment_id))


@router.post("/{comment_id}/vote", response_model=VoteResponse)
def vote_on_comment(
    comment_id: str,
    vote_data: VoteRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
    clock: ClockDep,
) -> dict[str, int | None]:
    """Cast, change or retract the caller's vote on a comment."""
    tally = VoteAggregator(db, clock).apply_vote(
        COMMENT_VOTES, comment_id, current_user.id, vote_data.vote_type
    )
    return tally.as_dict()


@router.get("/{comment_id}/my-vote", response_model=MyVoteResponse)
def get_my_comment_vote(
    comment_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> MyVoteResponse:
    vote = VoteAggregator(db).get_user_vote(COMMENT_VOTES, comment_id, current_user.id)
    return MyVoteResponse(user_vote=vote)


@router.put("/{comment_id}", response_model=CommentResponse)
def edit_comment(
    comment_id: str,
    update: CommentUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
    clock: ClockDep,
) -> CommentResponse:
    """Edit one of the caller's comments shortly after posting it."""
    comment = CommentService(db, clock).edit(comment_id, current_user.id, update.body)
    return CommentResponse.model_validate(comment)


@router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_comment(
    comment_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
    clock: ClockDep,
) -> Response:
    """Soft-delete one of the caller's comments."""
    CommentService(db, clock).delete(comment_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

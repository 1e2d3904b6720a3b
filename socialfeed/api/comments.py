from fastapi import APIRouter, Depends

from socialfeed.api.deps import get_current_user, get_interaction_service
from socialfeed.exceptions import NotFound
from socialfeed.models import User
from socialfeed.schemas import MessageResponse
from socialfeed.services.social import InteractionService

router = APIRouter(prefix="/comments", tags=["Comments"])


@router.delete("/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: int,
    current_user: User = Depends(get_current_user),
    interaction_service: InteractionService = Depends(get_interaction_service),
):
    """Delete a comment (owner only)."""
    if not await interaction_service.delete_comment(comment_id, current_user.id):
        raise NotFound("Comment not found or unauthorized")
    return MessageResponse(message="Comment deleted successfully")

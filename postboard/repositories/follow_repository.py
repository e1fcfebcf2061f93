from sqlalchemy import select

from postboard.models.follow_model import Follow


def followed_user_ids(follower_id: int):
    """Select of the ids ``follower_id`` follows, for use inside ``in_()``."""
    return select(Follow.following_id).where(Follow.follower_id == follower_id)

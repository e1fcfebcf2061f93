from sqlalchemy import and_, func, or_
from sqlalchemy.orm import joinedload, selectinload

from postboard.db import db
from postboard.models.comment_model import Comment
from postboard.models.enums import Visibility
from postboard.models.like_model import Like
from postboard.models.post_model import Post
from postboard.repositories.follow_repository import followed_user_ids


def create_post(user_id, title, description, category, tags, visibility, is_draft):
    post = Post(
        user_id=user_id,
        title=title,
        description=description,
        category=category,
        tags=[tag.value for tag in tags],
        visibility=visibility,
        is_draft=is_draft,
        cover_image="",
    )
    db.session.add(post)
    db.session.commit()

    return post


def update_cover_image(post_id, cover_image):
    post = db.session.get(Post, post_id)
    if not post:
        raise LookupError(f"Post {post_id} not found")

    post.cover_image = cover_image
    db.session.commit()
    return post


def delete_post(post_id) -> bool:
    post = db.session.get(Post, post_id)
    if not post:
        return False

    db.session.delete(post)
    db.session.commit()
    return True


def get_with_relations(post_id):
    return (
        Post.query
        .options(joinedload(Post.user), selectinload(Post.images))
        .filter(Post.id == post_id)
        .first()
    )


def visible_to(viewer_id: int):
    """Posts ``viewer_id`` may see: public, own, or followers-only from followed owners."""
    return or_(
        Post.visibility == Visibility.PUBLIC,
        Post.user_id == viewer_id,
        and_(
            Post.visibility == Visibility.FOLLOWERS,
            Post.user_id.in_(followed_user_ids(viewer_id)),
        ),
    )


def find_page(conditions, page: int, limit: int):
    query = Post.query.filter(*conditions)

    total = query.count()
    posts = (
        query
        .options(joinedload(Post.user), selectinload(Post.images))
        .order_by(Post.created_at.desc(), Post.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return posts, total


def _count_by_post(model, post_ids):
    rows = (
        db.session.query(model.post_id, func.count(model.id))
        .filter(model.post_id.in_(post_ids))
        .group_by(model.post_id)
        .all()
    )
    return {post_id: count for post_id, count in rows}


def count_engagement(post_ids):
    post_ids = list(post_ids)
    if not post_ids:
        return {}

    likes = _count_by_post(Like, post_ids)
    comments = _count_by_post(Comment, post_ids)
    return {
        post_id: {
            "likes": likes.get(post_id, 0),
            "comments": comments.get(post_id, 0),
        }
        for post_id in post_ids
    }

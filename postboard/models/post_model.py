from datetime import datetime

from postboard.db import db
from postboard.models.enums import Category, Visibility


class Post(db.Model):
    __tablename__ = "posts"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    category = db.Column(db.Enum(Category), nullable=False)
    tags = db.Column(db.JSON, nullable=False, default=list)
    visibility = db.Column(
        db.Enum(Visibility),
        nullable=False,
        default=Visibility.PUBLIC,
    )
    is_draft = db.Column(db.Boolean, nullable=False, default=False)
    cover_image = db.Column(db.String(1024), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    user = db.relationship("User", back_populates="posts")

    images = db.relationship(
        "Image",
        backref="post",
        lazy="select",
        order_by="Image.id",
        cascade="all, delete-orphan"
    )
    likes = db.relationship(
        "Like",
        backref="post",
        lazy="select",
        cascade="all, delete-orphan"
    )
    comments = db.relationship(
        "Comment",
        backref="post",
        lazy="select",
        cascade="all, delete-orphan"
    )

from postboard.extensions.extensions import ma


class OwnerSummarySchema(ma.Schema):
    id = ma.Int()
    username = ma.Str()
    avatar = ma.Str(allow_none=True)


class ImageSchema(ma.Schema):
    id = ma.Int()
    url = ma.Str()
    description = ma.Str(allow_none=True)
    created_at = ma.DateTime()


class PostResponseSchema(ma.Schema):
    id = ma.Int()
    title = ma.Str()
    description = ma.Str()
    category = ma.Function(lambda post: post.category.name)
    tags = ma.List(ma.Str())
    visibility = ma.Function(lambda post: post.visibility.name)
    is_draft = ma.Bool()
    cover_image = ma.Str(allow_none=True)
    user_id = ma.Int()
    created_at = ma.DateTime()
    user = ma.Nested(OwnerSummarySchema)
    images = ma.List(ma.Nested(ImageSchema))


post_schema = PostResponseSchema()

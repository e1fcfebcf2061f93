from postboard.db import db
from postboard.models.image_model import Image


def add_image(post_id, url, description=None):
    image = Image(
        post_id=post_id,
        url=url,
        description=description
    )
    db.session.add(image)
    db.session.flush()
    return image

from postboard.models.user_model import User


def get_by_email(email: str):
    return User.query.filter_by(email=email).first()

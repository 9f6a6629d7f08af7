from sqlalchemy.orm import Session
from portal.models import User

def get_user_by_email(db: Session, email: str):
    """Busca un usuario activo por su email."""
    return db.query(User).filter(User.email == email.lower(), User.is_active.is_(True)).first()

def get_user(db: Session, user_id: int):
    return db.query(User).filter(User.id == user_id).first()

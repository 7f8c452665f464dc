from .user import user
from .form import form

__all__ = ["user", "form"]

from app.models.admin_user import AdminUser
from app.models.base import Base
from app.models.prayer import Prayer
from app.models.registration import Registration

__all__ = ["Base", "AdminUser", "Prayer", "Registration"]

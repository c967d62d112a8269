from devotional_core.profile.images import ProfileImageManager
from devotional_core.profile.user import UserManager

__all__ = ["ProfileImageManager", "UserManager"]

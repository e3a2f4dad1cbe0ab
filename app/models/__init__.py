from app.models.activity_log import ActivityActionType, ActivityLog  # noqa: F401
from app.models.user import User  # noqa: F401

"""
Sync Log Schemas
================
"""

from pydantic import BaseModel, model_validator
from typing import Optional, Any
from datetime import datetime

from .base import BaseSchema


class SyncLogUserSchema(BaseModel):
    username: str
    email: Optional[str] = None


class SyncLogSchema(BaseSchema):
    """Response schema untuk SyncLog. User null ditampilkan sebagai 'System'."""
    id: int
    sync_type: str
    user_id: Optional[int] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    status: str
    records_processed: int = 0
    error_message: Optional[str] = None
    User: SyncLogUserSchema

    @model_validator(mode='before')
    @classmethod
    def attach_user(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return data
        user = getattr(data, 'user', None)
        if user is not None:
            user_info = {'username': user.username, 'email': user.email}
        elif data.user_id:
            user_info = {'username': f'User {data.user_id}', 'email': None}
        else:
            user_info = {'username': 'System', 'email': None}
        return {
            'id': data.id,
            'sync_type': data.sync_type,
            'user_id': data.user_id,
            'start_time': data.start_time,
            'end_time': data.end_time,
            'status': data.status,
            'records_processed': data.records_processed or 0,
            'error_message': data.error_message,
            'User': user_info,
        }


class SyncLogFilterSchema(BaseModel):
    sync_type: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

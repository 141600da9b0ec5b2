import bcrypt
from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from .base import BaseModel

USER_ROLES = ('admin', 'accountant', 'analyst')


class User(BaseModel):
    """User dashboard dengan role admin / accountant / analyst"""
    __tablename__ = 'users'

    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)

    role = Column(String(20), nullable=False, default='analyst')
    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime)

    sync_logs = relationship('SyncLog', back_populates='user', passive_deletes=True)

    def set_password(self, password):
        """Set password dengan bcrypt hashing"""
        self.password_hash = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')

    def check_password(self, password):
        """Check password"""
        if not self.password_hash:
            return False
        return bcrypt.checkpw(password.encode('utf-8'), self.password_hash.encode('utf-8'))

    def has_role(self, *roles):
        return self.role in roles

    def __repr__(self):
        return f'<User {self.username} ({self.role})>'

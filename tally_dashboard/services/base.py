"""
Base Service Classes
====================

Base classes dan utilities untuk semua services
"""

from abc import ABC
from typing import Optional, Dict, Any, List
from functools import wraps
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_

from .exceptions import NotFoundError, ConflictError

logger = logging.getLogger(__name__)


def transactional(func):
    """Decorator untuk automatic transaction management"""
    @wraps(func)
    async def wrapper(self, *args, **kwargs):
        try:
            result = await func(self, *args, **kwargs)
            if hasattr(self, 'db_session') and self.db_session:
                await self.db_session.commit()
            return result
        except Exception as e:
            if hasattr(self, 'db_session') and self.db_session:
                await self.db_session.rollback()
            logger.error(f"Transaction failed in {func.__name__}: {str(e)}")
            raise
    return wrapper


class BaseService(ABC):
    """Base service class dengan common functionality"""

    def __init__(self, db_session: AsyncSession, current_user=None):
        self.db_session = db_session
        self.current_user = current_user
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def current_user_id(self) -> Optional[int]:
        return getattr(self.current_user, 'id', None)

    async def _get_or_404(self, model_class, entity_id: int):
        """Get entity by ID or raise 404 error"""
        result = await self.db_session.execute(select(model_class).filter(model_class.id == entity_id))
        entity = result.scalars().first()
        if not entity:
            raise NotFoundError(model_class.__name__, entity_id)
        return entity

    async def _get_by_field(self, model_class, field_name: str, field_value: Any):
        result = await self.db_session.execute(
            select(model_class).filter(getattr(model_class, field_name) == field_value)
        )
        return result.scalars().first()

    async def _validate_unique_field(self, model_class, field_name: str, field_value: Any,
                                     exclude_id: int = None, error_message: str = None):
        """Validate that field value is unique"""
        query = select(model_class).filter(getattr(model_class, field_name) == field_value)
        if exclude_id:
            query = query.filter(model_class.id != exclude_id)

        result = await self.db_session.execute(query)
        existing = result.scalars().first()
        if existing:
            message = error_message or f"{field_name} '{field_value}' already exists"
            raise ConflictError(message, model_class.__name__)

    async def _paginate_query(self, query, page: int = 1, per_page: int = 20,
                              max_per_page: int = 100):
        """Paginate query results"""
        per_page = min(per_page, max_per_page)
        page = max(page, 1)

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db_session.execute(count_query)
        total = total_result.scalar()

        pages = (total + per_page - 1) // per_page if total > 0 else 1

        offset = (page - 1) * per_page
        items_result = await self.db_session.execute(query.offset(offset).limit(per_page))
        items = items_result.unique().scalars().all()

        return {
            'items': items,
            'pagination': {
                'page': page,
                'per_page': per_page,
                'total': total,
                'pages': pages,
                'has_prev': page > 1,
                'has_next': page < pages
            }
        }

    def _apply_filters(self, query, model_class, filters: Dict[str, Any]):
        """Apply equality filters, skip None"""
        for field, value in filters.items():
            if value is not None and hasattr(model_class, field):
                query = query.filter(getattr(model_class, field) == value)
        return query

    def _apply_search(self, query, model_class, search_term: str, search_fields: List[str]):
        """Apply text search to query"""
        if not search_term or not search_fields:
            return query

        search_conditions = [
            getattr(model_class, field).ilike(f'%{search_term}%')
            for field in search_fields if hasattr(model_class, field)
        ]
        if search_conditions:
            query = query.filter(or_(*search_conditions))
        return query

    def _apply_sorting(self, query, model_class, sort_by: str = None,
                       sort_order: str = 'asc', default_sort: str = 'id'):
        """Apply sorting to query"""
        sort_field = sort_by or default_sort

        if hasattr(model_class, sort_field):
            field_attr = getattr(model_class, sort_field)
            if sort_order.lower() == 'desc':
                query = query.order_by(field_attr.desc())
            else:
                query = query.order_by(field_attr.asc())
        return query

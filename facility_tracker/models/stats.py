"""
Модели агрегированной статистики по заявкам.
"""

from pydantic import BaseModel


class CategoryCount(BaseModel):
    name: str
    count: int


class Stats(BaseModel):
    total: int = 0
    pending_count: int = 0
    completed_count: int = 0
    avg_completion_hours: float = 0.0
    category_breakdown: list[CategoryCount] = []

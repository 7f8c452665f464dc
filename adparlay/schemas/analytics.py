# File: adparlay/schemas/analytics.py
from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from datetime import date, datetime
from enum import Enum
from adparlay.models.analytics_event import AnalyticsEventType


class EventType(str, Enum):
    VIEW = "view"
    START = "start"
    COMPLETE = "complete"
    ABANDON = "abandon"


class EventCreate(BaseModel):
    event_type: EventType
    session_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class EventResponse(BaseModel):
    id: int
    form_id: str
    event_type: AnalyticsEventType
    timestamp: datetime

    class Config:
        from_attributes = True


class DailyStat(BaseModel):
    day: date
    submissions: int
    views: int
    starts: int
    completes: int


class DeviceStat(BaseModel):
    device: str
    count: int
    percentage: float


class FormAnalyticsSummary(BaseModel):
    form_id: str
    submission_count: int
    total_views: int
    total_starts: int
    total_completes: int
    total_abandons: int
    recent_responses: int
    conversion_rate: float
    completion_rate: float
    abandon_rate: float
    average_lead_score: Optional[float] = None
    daily_stats: List[DailyStat] = []
    device_stats: List[DeviceStat] = []


class FormPerformance(BaseModel):
    form_id: str
    title: str
    submissions: int
    views: int
    starts: int
    completes: int
    abandons: int
    conversion_rate: float


class AnalyticsOverview(BaseModel):
    total_forms: int
    total_submissions: int
    total_views: int
    total_starts: int
    total_completes: int
    total_abandons: int
    conversion_rate: float
    forms: List[FormPerformance]
    device_stats: List[DeviceStat] = []

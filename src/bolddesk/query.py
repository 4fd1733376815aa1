"""Builder for BoldDesk ``Q`` filter expressions.

Conditions look like ``status:[1,2]`` or ``createdon:today`` and are
joined with `` AND ``::

    q = QueryBuilder().status(1, 2).created_on(TimePeriod.TODAY).build()
    # 'status:[1,2] AND createdon:today'
"""
from datetime import datetime
from enum import Enum
from typing import Optional, List, Iterable, Union

from .params import format_utc


class TimePeriod(str, Enum):
    WITHIN_4_HOURS = "within4hours"
    WITHIN_12_HOURS = "within12hours"
    WITHIN_24_HOURS = "within24hours"
    TODAY = "today"
    YESTERDAY = "yesterday"
    THIS_WEEK = "thisweek"
    LAST_7_DAYS = "last7days"
    THIS_MONTH = "thismonth"
    LAST_30_DAYS = "last30days"
    OVERDUE = "overdue"
    TOMORROW = "tomorrow"
    NEXT_30_MINUTES = "next30minutes"
    NEXT_HOUR = "nexthour"
    NEXT_2_HOURS = "next2hours"
    NEXT_4_HOURS = "next4hours"
    NEXT_8_HOURS = "next8hours"
    NEXT_24_HOURS = "next24hours"


Period = Union[TimePeriod, str]


def format_id_array(ids: Iterable[int]) -> str:
    return "[" + ",".join(str(i) for i in ids) + "]"


def format_date_range(start: datetime, end: datetime) -> str:
    return '{"from":"%s","to":"%s"}' % (format_utc(start), format_utc(end))


class QueryBuilder:
    def __init__(self) -> None:
        self._conditions: List[str] = []

    def add(self, condition: str) -> "QueryBuilder":
        if condition and condition.strip():
            self._conditions.append(condition)
        return self

    def build(self) -> str:
        return " AND ".join(self._conditions)

    def build_array(self) -> List[str]:
        return list(self._conditions)

    def __str__(self) -> str:
        return self.build()

    def __len__(self) -> int:
        return len(self._conditions)

    # generic condition shapes

    def date(self, field: str, period: Optional[Period] = None, *, start: Optional[datetime] = None,
             end: Optional[datetime] = None) -> "QueryBuilder":
        if start is not None and end is not None:
            return self.add(f"{field}:{format_date_range(start, end)}")
        if period is None:
            raise ValueError(f"{field}: pass a period or both start and end")
        value = period.value if isinstance(period, TimePeriod) else period
        return self.add(f"{field}:{value}")

    def in_(self, field: str, ids: Iterable[int]) -> "QueryBuilder":
        ids = list(ids)
        if ids:
            self.add(f"{field}:{format_id_array(ids)}")
        return self

    def text(self, field: str, value: Optional[str]) -> "QueryBuilder":
        if value and value.strip():
            self.add(f'{field}:"{value}"')
        return self

    def texts(self, field: str, values: Iterable[str]) -> "QueryBuilder":
        quoted = [f'"{v}"' for v in values if v and v.strip()]
        if quoted:
            self.add(f"{field}:[{','.join(quoted)}]")
        return self

    def flag(self, field: str, value: bool = True) -> "QueryBuilder":
        return self.add(f"{field}:{'true' if value else 'false'}")

    # common to tickets, agents, contacts and contact groups

    def created_on(self, period: Optional[Period] = None, **kwargs) -> "QueryBuilder":
        return self.date("createdon", period, **kwargs)

    def last_modified_on(self, period: Optional[Period] = None, **kwargs) -> "QueryBuilder":
        return self.date("lastmodifiedon", period, **kwargs)

    def ids(self, *ids: int) -> "QueryBuilder":
        return self.in_("ids", ids)

    # tickets

    def closed_on(self, period: Optional[Period] = None, **kwargs) -> "QueryBuilder":
        return self.date("closedon", period, **kwargs)

    def response_due(self, period: Period) -> "QueryBuilder":
        return self.date("responsedue", period)

    def resolution_due(self, period: Period) -> "QueryBuilder":
        return self.date("resolutiondue", period)

    def brands(self, *ids: int) -> "QueryBuilder":
        return self.in_("brands", ids)

    def agents(self, *ids: int) -> "QueryBuilder":
        return self.in_("agents", ids)

    def groups(self, *ids: int) -> "QueryBuilder":
        return self.in_("groups", ids)

    def status(self, *ids: int) -> "QueryBuilder":
        return self.in_("status", ids)

    def priority(self, *ids: int) -> "QueryBuilder":
        return self.in_("priority", ids)

    def categories(self, *ids: int) -> "QueryBuilder":
        return self.in_("categories", ids)

    def requester(self, *ids: int) -> "QueryBuilder":
        return self.in_("requester", ids)

    def created_by(self, *ids: int) -> "QueryBuilder":
        return self.in_("createdby", ids)

    def source(self, *ids: int) -> "QueryBuilder":
        return self.in_("source", ids)

    def tags(self, *ids: int) -> "QueryBuilder":
        return self.in_("tags", ids)

    def type(self, *ids: int) -> "QueryBuilder":
        return self.in_("type", ids)

    def contact_groups(self, *ids: int) -> "QueryBuilder":
        return self.in_("contactgroups", ids)

    def ticket_ids(self, *ids: int) -> "QueryBuilder":
        return self.in_("ticketids", ids)

    def status_category(self, *ids: int) -> "QueryBuilder":
        return self.in_("statuscategory", ids)

    def external_reference_ids(self, *refs: str) -> "QueryBuilder":
        return self.texts("externalreferenceids", refs)

    def requester_email(self, email: str) -> "QueryBuilder":
        return self.text("requesteremail", email)

    def requester_phone(self, phone: str) -> "QueryBuilder":
        return self.text("requesterphone", phone)

    def agent_email(self, email: str) -> "QueryBuilder":
        return self.text("agentemail", email)

    def subject(self, subject: str) -> "QueryBuilder":
        return self.text("subject", subject)

    def has_comment(self, value: bool = True) -> "QueryBuilder":
        return self.flag("hascomment", value)

    # activities

    def updated_on(self, period: Optional[Period] = None, **kwargs) -> "QueryBuilder":
        return self.date("updatedon", period, **kwargs)

    def activity_due_date(self, period: Optional[Period] = None, **kwargs) -> "QueryBuilder":
        return self.date("activityduedate", period, **kwargs)

    def activity_agent(self, *ids: int) -> "QueryBuilder":
        return self.in_("activityagent", ids)

    def activity_status(self, *ids: int) -> "QueryBuilder":
        return self.in_("activitystatus", ids)

    def activity_priority(self, *ids: int) -> "QueryBuilder":
        return self.in_("activitypriority", ids)

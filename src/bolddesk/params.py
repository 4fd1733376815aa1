from datetime import datetime, timezone
from typing import Optional, Any, List, Tuple

from pydantic import BaseModel, ConfigDict, Field

QueryPairs = List[Tuple[str, str]]


def format_timestamp(value: datetime) -> str:
    """Millisecond timestamp with the offset BoldDesk expects (``Z`` for UTC)."""
    text = value.strftime("%Y-%m-%dT%H:%M:%S") + f".{value.microsecond // 1000:03d}"
    offset = value.utcoffset()
    if offset is None:
        return text
    if offset.total_seconds() == 0:
        return text + "Z"
    return text + value.strftime("%z")[:3] + ":" + value.strftime("%z")[3:]


def format_utc(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return format_timestamp(value.astimezone(timezone.utc))


def _wire(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, (list, tuple)):
        return ",".join(_wire(v) for v in value)
    return str(value)


def _add(query: QueryPairs, name: str, value: Any) -> None:
    """Append ``name=value`` unless the value is unset or blank."""
    if value is None:
        return
    if isinstance(value, str) and not value.strip():
        return
    if isinstance(value, (list, tuple)) and not value:
        return
    query.append((name, _wire(value)))


class PageParams(BaseModel):
    """Paging fields shared by every list endpoint."""
    model_config = ConfigDict(validate_assignment=True)

    page: int = Field(1, ge=1, description="1-based page number")
    per_page: int = Field(100, ge=1, description="Items per page")
    requires_counts: bool = Field(True, description="Ask the server to compute the total count")

    def _paging(self, query: QueryPairs, *, cap: Optional[int] = 100, style: str = "camel") -> None:
        per_page = min(self.per_page, cap) if cap else self.per_page
        names = {
            "camel": ("page", "perPage", "requiresCounts"),
            "pascal": ("Page", "PerPage", "RequiresCounts"),
        }[style]
        query.append((names[0], str(self.page)))
        query.append((names[1], str(per_page)))
        query.append((names[2], _wire(self.requires_counts)))

    def to_query(self) -> QueryPairs:
        query: QueryPairs = []
        self._paging(query)
        return query


class TicketQueryParams(PageParams):
    q: Optional[str] = Field(None, description="Q filter expression")
    filter_id: Optional[str] = None
    field_names: Optional[List[str]] = None
    brand_ids: Optional[List[int]] = None
    order_by: Optional[str] = Field(None, description='e.g. "createdon desc"')

    def to_query(self) -> QueryPairs:
        query: QueryPairs = []
        self._paging(query)
        _add(query, "q", self.q)
        _add(query, "filterId", self.filter_id)
        _add(query, "fields", self.field_names)
        _add(query, "brandIds", self.brand_ids)
        _add(query, "orderBy", self.order_by)
        return query


class TicketMessageQueryParams(PageParams):
    order_by: Optional[str] = None
    message_type_ids: Optional[List[int]] = None
    message_tag_ids: Optional[List[int]] = None
    is_first_update_required: Optional[bool] = None
    attachments_count: Optional[int] = None

    def to_query(self) -> QueryPairs:
        query: QueryPairs = []
        self._paging(query)
        _add(query, "orderBy", self.order_by)
        _add(query, "messageTypeIds", self.message_type_ids)
        _add(query, "messageTagIds", self.message_tag_ids)
        _add(query, "isFirstUpdateRequired", self.is_first_update_required)
        _add(query, "attachmentsCount", self.attachments_count)
        return query


class WorklogQueryParams(PageParams):
    order_by: Optional[str] = None
    last_created_date_from: Optional[datetime] = None
    last_created_date_to: Optional[datetime] = None
    last_updated_date_from: Optional[datetime] = None
    last_updated_date_to: Optional[datetime] = None
    include_deleted_worklogs: bool = False

    def to_query(self) -> QueryPairs:
        query: QueryPairs = []
        self._paging(query)
        _add(query, "orderBy", self.order_by)
        _add(query, "lastCreatedDateFrom", self.last_created_date_from)
        _add(query, "lastCreatedDateTo", self.last_created_date_to)
        _add(query, "lastUpdatedDateFrom", self.last_updated_date_from)
        _add(query, "lastUpdatedDateTo", self.last_updated_date_to)
        if self.include_deleted_worklogs:
            query.append(("includeDeletedWorklogs", "true"))
        return query


class AgentQueryParams(PageParams):
    per_page: int = Field(10, ge=1)
    user_status: Optional[int] = None
    is_available: Optional[bool] = None
    role_id: Optional[str] = None
    is_verified_agents: Optional[bool] = None
    agent_tag: Optional[str] = None
    q: Optional[str] = None
    filter: Optional[str] = None
    order_by: Optional[str] = None
    brand_ids: Optional[str] = None
    ticket_access_scope_id: Optional[int] = None

    def to_query(self) -> QueryPairs:
        query: QueryPairs = []
        self._paging(query)
        _add(query, "UserStatus", self.user_status)
        _add(query, "IsAvailable", self.is_available)
        _add(query, "RoleId", self.role_id)
        _add(query, "IsVerifiedAgents", self.is_verified_agents)
        _add(query, "AgentTag", self.agent_tag)
        _add(query, "Q", self.q)
        _add(query, "Filter", self.filter)
        _add(query, "OrderBy", self.order_by)
        _add(query, "BrandIds", self.brand_ids)
        _add(query, "TicketAccessScopeId", self.ticket_access_scope_id)
        return query


class AgentCollectionQueryParams(PageParams):
    per_page: int = Field(10, ge=1)
    filter: Optional[str] = None
    order_by: Optional[str] = None
    group_id: Optional[int] = None
    role_id: Optional[int] = None
    shift_id: Optional[int] = None
    user_id: Optional[str] = None
    exclusion_ids: Optional[str] = None

    def to_query(self) -> QueryPairs:
        query: QueryPairs = []
        self._paging(query)
        _add(query, "Filter", self.filter)
        _add(query, "OrderBy", self.order_by)
        _add(query, "groupId", self.group_id)
        _add(query, "roleId", self.role_id)
        _add(query, "shiftId", self.shift_id)
        _add(query, "userId", self.user_id)
        _add(query, "exclusionIds", self.exclusion_ids)
        return query


class ContactQueryParams(PageParams):
    per_page: int = Field(50, ge=1)
    q: Optional[List[str]] = Field(None, description="Q expressions, sent as repeated Q parameters")
    filter: Optional[str] = None
    order_by: Optional[str] = None
    view: Optional[str] = None
    contact_group_id: Optional[int] = None

    def to_query(self) -> QueryPairs:
        query: QueryPairs = []
        for expression in self.q or []:
            _add(query, "Q", expression)
        _add(query, "Filter", self.filter)
        self._paging(query, cap=None, style="pascal")
        _add(query, "OrderBy", self.order_by)
        _add(query, "view", self.view)
        _add(query, "contactGroupId", self.contact_group_id)
        return query


class ContactGroupQueryParams(PageParams):
    per_page: int = Field(50, ge=1)
    q: Optional[List[str]] = None
    filter: Optional[str] = None
    order_by: Optional[str] = None

    def to_query(self) -> QueryPairs:
        query: QueryPairs = []
        self._paging(query, cap=None)
        _add(query, "filter", self.filter)
        _add(query, "orderBy", self.order_by)
        for expression in self.q or []:
            _add(query, "Q", expression)
        return query


class ContactGroupMembersQueryParams(PageParams):
    per_page: int = Field(50, ge=1)
    filter: Optional[str] = None
    order_by: Optional[str] = None

    def to_query(self) -> QueryPairs:
        query: QueryPairs = []
        self._paging(query, cap=None)
        _add(query, "filter", self.filter)
        _add(query, "orderBy", self.order_by)
        return query


class ContactGroupDomainsQueryParams(ContactGroupMembersQueryParams):
    domain_ids: Optional[List[int]] = None

    def to_query(self) -> QueryPairs:
        query = super().to_query()
        for domain_id in self.domain_ids or []:
            query.append(("domainIds", str(domain_id)))
        return query


class NotesQueryParams(PageParams):
    per_page: int = Field(50, ge=1)
    order_by: Optional[str] = None

    def to_query(self) -> QueryPairs:
        query: QueryPairs = []
        self._paging(query, cap=None)
        _add(query, "orderBy", self.order_by)
        return query


class UserBrandQueryParams(BaseModel):
    filter: Optional[str] = None
    need_to_include_deactivated_brands: bool = False

    def to_query(self) -> QueryPairs:
        query: QueryPairs = []
        _add(query, "filter", self.filter)
        if self.need_to_include_deactivated_brands:
            query.append(("needToIncludeDeactivatedBrands", "true"))
        return query


class FieldOptionQueryParams(PageParams):
    per_page: int = Field(10, ge=1)
    requires_counts: bool = False
    filter: Optional[str] = None
    parent_option_id: Optional[int] = None
    order_by: Optional[str] = None
    exclusion_ids: Optional[str] = None
    include_read_only_also: bool = False

    def to_query(self) -> QueryPairs:
        query: QueryPairs = []
        _add(query, "Filter", self.filter)
        _add(query, "parentOptionId", self.parent_option_id)
        query.append(("Page", str(self.page)))
        query.append(("PerPage", str(self.per_page)))
        if self.requires_counts:
            query.append(("RequiresCounts", "true"))
        _add(query, "OrderBy", self.order_by)
        _add(query, "exclusionIds", self.exclusion_ids)
        if self.include_read_only_also:
            query.append(("includeReadOnlyAlso", "true"))
        return query

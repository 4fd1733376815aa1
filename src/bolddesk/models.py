from datetime import datetime
from typing import Optional, Dict, Any, List, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class BoldDeskModel(BaseModel):
    """Base for wire models: camelCase on the wire, snake_case in Python.

    Unknown keys are kept so custom fields survive a round trip.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class PagedResponse(BoldDeskModel, Generic[T]):
    result: List[T] = Field(default_factory=list)
    count: int = 0

    @field_validator("result", mode="before")
    @classmethod
    def _none_is_empty(cls, v):
        return [] if v is None else v

    @field_validator("count", mode="before")
    @classmethod
    def _none_is_zero(cls, v):
        return 0 if v is None else v


class OperationResponse(BoldDeskModel):
    id: Optional[int] = None
    message: Optional[str] = None
    is_success: Optional[bool] = None


class ItemResult(BoldDeskModel):
    id: Optional[int] = None
    user_id: Optional[int] = None
    contact_group_id: Optional[int] = None
    is_success: Optional[bool] = None
    reason: Optional[str] = None


class BulkOperationResponse(BoldDeskModel):
    result: List[ItemResult] = Field(default_factory=list)
    message: Optional[str] = None


# --- shared references ---

class IdName(BoldDeskModel):
    id: Optional[int] = None
    name: Optional[str] = None


class StatusRef(BoldDeskModel):
    id: Optional[int] = None
    description: Optional[str] = None
    text_color: Optional[str] = None
    background_color: Optional[str] = None


class UserRef(BoldDeskModel):
    user_id: Optional[int] = None
    name: Optional[str] = None
    display_name: Optional[str] = None
    email_id: Optional[str] = None
    short_code: Optional[str] = None
    color_code: Optional[str] = None
    status: Optional[str] = None
    is_verified: Optional[bool] = None
    profile_image_url: Optional[str] = None
    is_agent: Optional[bool] = None


# --- tickets ---

class Ticket(BoldDeskModel):
    ticket_id: Optional[int] = None
    title: Optional[str] = None
    ticket_status_category_id: Optional[int] = None
    agent: Optional[IdName] = None
    group: Optional[IdName] = None
    category: Optional[IdName] = None
    status: Optional[StatusRef] = None
    priority: Optional[StatusRef] = None
    resolution_due: Optional[datetime] = None
    created_on: Optional[datetime] = None
    last_updated_on: Optional[datetime] = None
    brand: Optional[str] = None
    brand_id: Optional[int] = None
    mode: Optional[str] = None
    is_visible_to_customer: Optional[bool] = None
    updates_count: Optional[int] = None
    attachment_count: Optional[int] = None
    source: Optional[Any] = None
    source_id: Optional[int] = None
    last_replied_on: Optional[datetime] = None
    requested_by: Optional[UserRef] = None
    is_spam_or_deleted: Optional[bool] = None
    closed_on: Optional[datetime] = None
    last_status_changed_on: Optional[datetime] = None
    response_due: Optional[datetime] = None
    is_sla_timer_running: Optional[bool] = None
    sla_breached_count: Optional[int] = None
    sla_achieved_count: Optional[int] = None
    is_resolution_overdue: Optional[bool] = None
    is_response_overdue: Optional[bool] = None
    last_replied_by: Optional[Any] = None
    custom_fields: Optional[Any] = None


class TicketMessage(BoldDeskModel):
    message_id: Optional[int] = None
    ticket_id: Optional[int] = None
    description: Optional[str] = None
    from_user_id: Optional[int] = None
    from_user: Optional[UserRef] = None
    to_user_ids: Optional[List[int]] = None
    cc_user_ids: Optional[List[int]] = None
    is_private: Optional[bool] = None
    created_on: Optional[datetime] = None
    last_modified_on: Optional[datetime] = None
    message_type: Optional[str] = None
    message_type_id: Optional[int] = None
    attachments: Optional[List[Any]] = None
    message_tags: Optional[List[Any]] = None


class TicketNote(BoldDeskModel):
    note_id: Optional[int] = None
    ticket_id: Optional[int] = None
    description: Optional[str] = None
    from_user_id: Optional[int] = None
    from_user: Optional[UserRef] = None
    is_private: Optional[bool] = None
    created_on: Optional[datetime] = None
    at_mentioned_user_ids: Optional[List[int]] = None


class Tag(BoldDeskModel):
    tag_id: Optional[int] = None
    tag_name: Optional[str] = None
    color: Optional[str] = None


class TicketWatcher(BoldDeskModel):
    user_id: Optional[int] = None
    user: Optional[UserRef] = None
    added_on: Optional[datetime] = None


class TicketMetrics(BoldDeskModel):
    ticket_id: Optional[int] = None
    first_response_time: Optional[Any] = None
    resolution_time: Optional[Any] = None
    response_count: Optional[int] = None
    reopen_count: Optional[int] = None
    agent_interactions: Optional[int] = None
    customer_interactions: Optional[int] = None


class TicketSource(BoldDeskModel):
    source_id: Optional[int] = None
    source_name: Optional[str] = None
    icon: Optional[str] = None


class TicketField(BoldDeskModel):
    field_id: Optional[int] = None
    field_name: Optional[str] = None
    field_type: Optional[str] = None
    is_required: Optional[bool] = None
    is_visible: Optional[bool] = None
    options: Optional[List[Any]] = None


class TicketForm(BoldDeskModel):
    form_id: Optional[int] = None
    form_name: Optional[str] = None
    form_fields: Optional[List[Any]] = Field(None, alias="fields")
    is_active: Optional[bool] = None
    created_on: Optional[datetime] = None


class DateRange(BoldDeskModel):
    from_: Optional[datetime] = Field(None, alias="from")
    to: Optional[datetime] = None


class CreateTicketRequest(BoldDeskModel):
    subject: str = Field(..., description="Ticket subject")
    description: str = Field(..., description="HTML or plain text body")
    requester_id: Optional[int] = None
    requested_for_id: Optional[int] = None
    cc_user_ids: Optional[List[int]] = None
    category_id: Optional[int] = None
    sub_category_id: Optional[int] = None
    priority_id: Optional[int] = None
    status_id: Optional[int] = None
    agent_id: Optional[int] = None
    group_id: Optional[int] = None
    source_id: Optional[int] = None
    tags: Optional[str] = None
    custom_fields: Optional[Dict[str, Any]] = None
    brand_id: Optional[int] = None
    type_id: Optional[int] = None
    is_spam: Optional[bool] = None
    product_id: Optional[int] = None
    skip_email_notification: Optional[bool] = None
    due_date: Optional[datetime] = None
    external_reference_id: Optional[str] = None


class UpdateTicketRequest(BoldDeskModel):
    title: Optional[str] = None
    category_id: Optional[int] = None
    sub_category_id: Optional[int] = None
    priority_id: Optional[int] = None
    status_id: Optional[int] = None
    agent_id: Optional[int] = None
    group_id: Optional[int] = None
    type_id: Optional[int] = None
    product_id: Optional[int] = None
    due_date: Optional[datetime] = None
    external_reference_id: Optional[str] = None
    custom_fields: Optional[Dict[str, Any]] = None

    def to_fields(self) -> Dict[str, Any]:
        """Body for update_fields; title is sent as ``subject``."""
        fields: Dict[str, Any] = {}
        payload = self.model_dump(by_alias=True, exclude_none=True, mode="json", exclude={"custom_fields"})
        if "title" in payload:
            fields["subject"] = payload.pop("title")
        fields.update(payload)
        if self.custom_fields:
            fields.update(self.custom_fields)
        return fields


class ReplyTicketRequest(BoldDeskModel):
    description: str
    from_user_id: Optional[int] = None
    to_user_ids: Optional[List[int]] = None
    cc: Optional[List[str]] = None
    is_private: Optional[bool] = None
    skip_email_notification: Optional[bool] = None
    at_mentioned_user_ids: Optional[List[int]] = None
    reply_on_behalf_of_requester: Optional[bool] = None


class AddTicketNoteRequest(BoldDeskModel):
    description: str
    from_user_id: Optional[int] = None
    is_private: bool = True
    at_mentioned_user_ids: Optional[List[int]] = None


# --- worklogs ---

class WorklogUser(UserRef):
    agent_shift_id: Optional[int] = None
    agent_shift_name: Optional[str] = None
    ticket_limit: Optional[int] = None
    chat_limit: Optional[int] = None


class Worklog(BoldDeskModel):
    worklog_id: Optional[int] = None
    ticket_id: Optional[int] = None
    time_spent: Optional[float] = None
    is_billable: Optional[bool] = None
    is_deleted: Optional[bool] = None
    worklog_date: Optional[datetime] = None
    description: Optional[str] = None
    created_by: Optional[WorklogUser] = None
    created_on: Optional[datetime] = None
    last_modified_on: Optional[datetime] = None


# --- agents ---

class AgentDetail(BoldDeskModel):
    user_id: Optional[int] = None
    name: Optional[str] = None
    display_name: Optional[str] = None
    email_id: Optional[str] = None
    is_available: Optional[bool] = None
    roles: Optional[List[Any]] = None
    groups: Optional[List[Any]] = None
    brands: Optional[List[Any]] = None
    status: Optional[Any] = None
    is_blocked: Optional[bool] = None
    is_verified: Optional[bool] = None
    last_activity_on: Optional[datetime] = None
    created_on: Optional[datetime] = None
    last_modified_on: Optional[datetime] = None
    short_code: Optional[str] = None
    has_all_brand_access: Optional[bool] = None
    ticket_access_scope: Optional[str] = None
    ticket_access_scope_id: Optional[int] = None
    availability_status: Optional[Any] = None
    timezone: Optional[Any] = None
    ticket_limit: Optional[int] = None
    phone_no: Optional[str] = None
    mobile_no: Optional[str] = None
    job_title: Optional[str] = None
    external_reference_id: Optional[str] = None
    agent_tag: Optional[str] = None
    custom_fields: Optional[Any] = None


class CreateAgentRequest(BoldDeskModel):
    name: str
    email_id: str
    display_name: Optional[str] = None
    role_ids: Optional[str] = None
    brand_ids: Optional[str] = None
    group_ids: Optional[str] = None
    ticket_access_scope_id: Optional[int] = None
    has_all_brand_access: Optional[bool] = None
    is_verified: Optional[bool] = None
    phone_no: Optional[str] = None
    mobile_no: Optional[str] = None
    time_zone_id: Optional[int] = None
    language_id: Optional[int] = None
    external_reference_id: Optional[str] = None
    agent_tag: Optional[str] = None
    custom_fields: Optional[Dict[str, Any]] = None


class UpdateAgentRequest(BoldDeskModel):
    name: Optional[str] = None
    display_name: Optional[str] = None
    role_ids: Optional[str] = None
    brand_ids: Optional[str] = None
    group_ids: Optional[str] = None
    ticket_access_scope_id: Optional[int] = None
    has_all_brand_access: Optional[bool] = None
    phone_no: Optional[str] = None
    mobile_no: Optional[str] = None
    time_zone_id: Optional[int] = None
    language_id: Optional[int] = None
    external_reference_id: Optional[str] = None
    agent_tag: Optional[str] = None


# --- contacts ---

class Contact(BoldDeskModel):
    user_id: Optional[int] = None
    contact_display_name: Optional[str] = None
    contact_name: Optional[str] = None
    email_id: Optional[str] = None
    secondary_email_id: Optional[str] = None
    status: Optional[str] = None
    last_activity_on: Optional[datetime] = None
    is_verified: Optional[bool] = None
    is_blocked: Optional[bool] = None
    is_deleted: Optional[bool] = None
    contact_phone_no: Optional[str] = None
    contact_mobile_no: Optional[str] = None
    contact_address: Optional[str] = None
    time_zone_id: Optional[int] = None
    language_id: Optional[int] = None
    contact_tag: Optional[str] = None
    contact_group: Optional[List[Any]] = None
    contact_external_reference_id: Optional[str] = None
    contact_job_title: Optional[str] = None
    contact_notes: Optional[str] = None
    created_on: Optional[datetime] = None
    last_modified_on: Optional[datetime] = None
    primary_contact_group: Optional[Any] = None
    custom_fields: Optional[Any] = None


class CreateContactRequest(BoldDeskModel):
    contact_name: str
    email_id: str
    contact_display_name: Optional[str] = None
    contact_phone_no: Optional[str] = None
    contact_mobile_no: Optional[str] = None
    contact_address: Optional[str] = None
    contact_job_title: Optional[str] = None
    contact_tag: Optional[str] = None
    contact_external_reference_id: Optional[str] = None
    contact_notes: Optional[str] = None
    time_zone_id: Optional[int] = None
    language_id: Optional[int] = None
    custom_fields: Optional[Dict[str, Any]] = None


class DeleteContactRequest(BoldDeskModel):
    contact_id: List[int]
    is_mark_ticket_as_spam: bool = False


class ContactNote(BoldDeskModel):
    id: Optional[int] = None
    subject: Optional[str] = None
    description: Optional[str] = None
    has_attachment: Optional[bool] = None
    created_on: Optional[datetime] = None
    updated_on: Optional[datetime] = None
    created_by: Optional[UserRef] = None


class ContactNotesResponse(BoldDeskModel):
    contact_note_objects: List[ContactNote] = Field(default_factory=list)
    total_list_count: int = 0

    @field_validator("contact_note_objects", mode="before")
    @classmethod
    def _none_is_empty(cls, v):
        return [] if v is None else v

    @field_validator("total_list_count", mode="before")
    @classmethod
    def _none_is_zero(cls, v):
        return 0 if v is None else v


class NoteRequest(BoldDeskModel):
    subject: Optional[str] = None
    description: str
    attachments: Optional[List[Any]] = None


# --- contact groups ---

class ContactGroup(BoldDeskModel):
    contact_group_id: Optional[int] = None
    contact_group_name: Optional[str] = None
    short_code: Optional[str] = None
    color_code: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    address: Optional[str] = None
    external_reference_id: Optional[str] = None
    created_on: Optional[datetime] = None
    last_modified_on: Optional[datetime] = None
    custom_fields: Optional[Any] = None


class ContactGroupDomain(BoldDeskModel):
    id: Optional[int] = None
    contact_group_id: Optional[int] = None
    contact_group_name: Optional[str] = None
    domain: Optional[str] = None


class AddContactGroupRequest(BoldDeskModel):
    contact_group_name: str
    contact_group_description: Optional[str] = None
    contact_group_notes: Optional[str] = None
    contact_group_external_reference_id: Optional[str] = None
    contact_group_address: Optional[str] = None
    contact_group_tag: Optional[str] = None
    contact_group_domain: Optional[str] = None
    custom_fields: Optional[Dict[str, Any]] = None


class AddContactToGroupRequest(BoldDeskModel):
    user_id: int
    access_scope_id: int = 1


class ContactGroupNote(ContactNote):
    is_edited: Optional[bool] = None
    attachments: Optional[List[Any]] = None


class ContactGroupNotesResponse(BoldDeskModel):
    contact_group_notes_object: List[ContactGroupNote] = Field(default_factory=list)
    count: int = 0

    @field_validator("contact_group_notes_object", mode="before")
    @classmethod
    def _none_is_empty(cls, v):
        return [] if v is None else v

    @field_validator("count", mode="before")
    @classmethod
    def _none_is_zero(cls, v):
        return 0 if v is None else v


# --- brands ---

class Brand(BoldDeskModel):
    brand_id: Optional[int] = None
    brand_name: Optional[str] = None
    is_published: Optional[bool] = None
    is_disabled: Optional[bool] = None


class UserBrand(BoldDeskModel):
    key: Optional[int] = None
    value: Optional[str] = None
    text: Optional[str] = None
    logo_link: Optional[str] = None
    is_default: Optional[bool] = None
    field_option_id: Optional[int] = None
    is_deactivated: Optional[bool] = None
    is_customer_portal_active: Optional[bool] = None
    default_ticket_form_id: Optional[int] = None
    is_kb_enabled: Optional[bool] = None


# --- field options ---

class FieldOption(BoldDeskModel):
    id: Optional[int] = None
    name: Optional[str] = None
    is_read_only: Optional[bool] = None
    is_default: Optional[bool] = None
    sort_order: Optional[int] = None
    parent_option_id: Optional[List[int]] = None
    is_private: Optional[bool] = None
    can_delete: Optional[bool] = None
    is_system_default: Optional[bool] = None


class FieldPositionChange(BoldDeskModel):
    to_position: int
    is_sort_by_alphabetical_order: bool = False
    is_move_to_top_position: bool = False
    is_move_to_bottom_position: bool = False


class FieldApiResponse(BoldDeskModel):
    message: Optional[str] = None


class AgentCount(BoldDeskModel):
    status: Optional[str] = None
    count: Optional[int] = None


class DeactivateAgentRequest(BoldDeskModel):
    new_agent_id: Optional[int] = None
    new_group_id: Optional[int] = None
    reassign_group_or_agent: Optional[bool] = Field(None, alias="reassignGrouporAgent")


class ContactGroupLink(BoldDeskModel):
    """A contact's membership in a contact group."""
    id: Optional[int] = None
    name: Optional[str] = None
    access_scope_id: Optional[int] = None
    is_primary: Optional[bool] = None


class CustomField(BoldDeskModel):
    field_id: Optional[int] = None
    api_name: Optional[str] = None
    label_for_agent_portal: Optional[str] = None
    label_for_customer_portal: Optional[str] = None
    is_default_system_field: Optional[bool] = None
    is_active: Optional[bool] = None
    field_type: Optional[str] = None
    sort_order: Optional[int] = None

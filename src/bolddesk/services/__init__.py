from .agents import AgentService
from .brands import BrandService
from .contact_groups import ContactGroupService
from .contacts import ContactService
from .fields import FieldService
from .tickets import TicketService
from .worklogs import WorklogService

__all__ = [
    "AgentService",
    "BrandService",
    "ContactGroupService",
    "ContactService",
    "FieldService",
    "TicketService",
    "WorklogService",
]

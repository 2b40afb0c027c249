"""Resource helpers exposed by the portal client."""

from .cases import CasesResource
from .conversations import ConversationsResource
from .projects import ProjectsResource

__all__ = ["CasesResource", "ConversationsResource", "ProjectsResource"]

"""Mentor panel: controller, channel, messages and reply services."""

from .channel import ChannelEndpoint, MessageChannel
from .controller import MentorPanelController
from .diagnostics import DiagnosticsAdapter
from .messages import ChatMessage, ErrorFinding, ResponseMode, Tab, parse_inbound, parse_outbound
from .reply_service import MockReplyService, ReplyGuard, ReplyService
from .surface import MentorSurface, SurfaceState

__all__ = [
    "ChannelEndpoint",
    "ChatMessage",
    "DiagnosticsAdapter",
    "ErrorFinding",
    "MentorPanelController",
    "MentorSurface",
    "MessageChannel",
    "MockReplyService",
    "ReplyGuard",
    "ReplyService",
    "ResponseMode",
    "SurfaceState",
    "Tab",
    "parse_inbound",
    "parse_outbound",
]

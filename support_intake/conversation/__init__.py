from support_intake.conversation.escalation import evaluate
from support_intake.conversation.extractor import ExtractionRule, extract
from support_intake.conversation.policy import DialoguePolicy, PolicyDecision
from support_intake.conversation.profile import confidence_score, merge, replay_profile
from support_intake.conversation.session import ConversationSession, SessionRegistry

__all__ = [
    "extract",
    "ExtractionRule",
    "merge",
    "confidence_score",
    "replay_profile",
    "ConversationSession",
    "SessionRegistry",
    "DialoguePolicy",
    "PolicyDecision",
    "evaluate",
]

from .client import AssistantClient, AssistantUnavailableError, get_assistant_client
from .prompt import NO_INFORMATION_SENTENCE, build_messages, format_patient_record

__all__ = [
    "AssistantClient",
    "AssistantUnavailableError",
    "get_assistant_client",
    "NO_INFORMATION_SENTENCE",
    "build_messages",
    "format_patient_record",
]

from .llm import LLMService, OpenAILLMService, create_llm_service
from .profile_generator import ProfileGenerationService
from .profile_store import DirectoryProfileStore, InMemoryProfileStore, ProfileStore

__all__ = [
    "DirectoryProfileStore",
    "InMemoryProfileStore",
    "LLMService",
    "OpenAILLMService",
    "ProfileGenerationService",
    "ProfileStore",
    "create_llm_service",
]

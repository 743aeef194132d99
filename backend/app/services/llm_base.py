"""
Notewise Backend - Abstract LLM Client Interface
=================================================

What:  The narrow contract the AI-assisted actions need from a provider.
How:   Concrete implementations inherit from LLMClient. GeminiService is the
       production one; the test suite uses an in-memory stub.
Who:   Called by AssistantService.

Operations:
    generate_content(turns)            → text from a multi-turn conversation
    generate_with_file(prompt, file)   → text from a prompt plus an uploaded file
    upload_file(path, ...)             → RemoteFile handle
    delete_file(remote_file)           → removes the hosted copy
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

USER_ROLE = "user"
MODEL_ROLE = "model"


@dataclass(frozen=True)
class Turn:
    """One message of a conversation, attributed to the user or the model."""
    role: str
    text: str

    @classmethod
    def user(cls, text: str) -> "Turn":
        return cls(role=USER_ROLE, text=text)

    @classmethod
    def model(cls, text: str) -> "Turn":
        return cls(role=MODEL_ROLE, text=text)


@dataclass(frozen=True)
class RemoteFile:
    """
    Opaque reference to a file hosted by the provider.

    Attributes:
        name:      Provider resource name, used to delete the file (e.g. "files/abc123")
        uri:       URI used to attach the file to a generation request
        mime_type: Media type declared at upload time
    """
    name: str
    uri: str
    mime_type: str
    display_name: str = ""


class LLMClient(ABC):
    """
    Abstract interface for the generative-AI provider.

    Contract:
        - Generation methods return the model's text, stripped. An empty
          string means the model produced no usable output.
        - Every provider failure is raised as UpstreamError.
        - delete_file may raise; callers treat deletion as best-effort.
    """

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True when a provider credential is available."""
        ...

    @abstractmethod
    async def generate_content(self, turns: Sequence[Turn]) -> str:
        """
        Generate the next model message for a conversation.

        Args:
            turns: Ordered conversation, oldest first. The last turn is the
                   user message being answered.
        """
        ...

    @abstractmethod
    async def generate_with_file(self, prompt: str, remote_file: RemoteFile) -> str:
        """Generate text for a single user turn made of a prompt and an uploaded file."""
        ...

    @abstractmethod
    async def upload_file(self, path: str, mime_type: str, display_name: str) -> RemoteFile:
        """Upload a local file to the provider's file service."""
        ...

    @abstractmethod
    async def delete_file(self, remote_file: RemoteFile) -> None:
        """Delete a previously uploaded file from the provider."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Lightweight connectivity test. Returns False instead of raising."""
        ...

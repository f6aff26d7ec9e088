"""
Exception hierarchy for book generation.

Every external-call failure is wrapped into a stage error whose message is
safe to show to the user as the workspace's current error.
"""


class BookWeaverError(Exception):
    """Base class for all Book Weaver errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BookWeaverError):
    """Raised when required form fields are missing. No external call is made."""

    status_code = 400


class GenerationError(BookWeaverError):
    """A call to the AI service failed or returned an unusable response."""

    status_code = 502
    stage = "generation"


class BioGenerationError(GenerationError):
    stage = "bio"


class OutlineGenerationError(GenerationError):
    stage = "outline"


class ContentGenerationError(GenerationError):
    stage = "content"

    def __init__(self, message: str, section_title: str = ""):
        super().__init__(message)
        self.section_title = section_title


class CoverGenerationError(GenerationError):
    stage = "cover"


class TitleSuggestionError(GenerationError):
    stage = "titles"


class PublishingDetailsError(GenerationError):
    stage = "publishing"


class AssemblyError(BookWeaverError):
    """Raised when expanded sections do not line up with the outline."""


class RunInProgressError(BookWeaverError):
    """Raised when a generation is requested while another one is running."""

    status_code = 409


class InvalidTransitionError(BookWeaverError):
    """Raised on an illegal run-state transition."""

    status_code = 409


class WorkspaceNotFoundError(BookWeaverError):
    status_code = 404


class BookNotReadyError(BookWeaverError):
    """Raised when an action needs an assembled book and there is none."""

    status_code = 400


class CoverNotFoundError(BookWeaverError):
    status_code = 404


class StaleResultError(BookWeaverError):
    """Raised when a side result arrives after its book was replaced by a new run."""

    status_code = 409

from __future__ import annotations


FRIENDLY_MESSAGE = "The AI processing service is temporarily unavailable. Please try again later."


class PhotoStudioError(Exception):
    """Base for every error surfaced to the user."""


class CredentialError(PhotoStudioError):
    """The API key is missing or was rejected; the message carries setup instructions."""


class MissingCredentialError(CredentialError):
    pass


class GenerationMismatchError(PhotoStudioError):
    """The model answered with an explanation instead of an image."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"Generation failed, the model returned text instead of an image: {text}")


class NoOutputError(PhotoStudioError):
    def __init__(self, message: str = "The model returned no image data."):
        super().__init__(message)


class ReadError(PhotoStudioError):
    """The source image could not be read; the user should select the file again."""


class TransportError(PhotoStudioError):
    pass


class InvalidImageError(PhotoStudioError):
    pass


class ClientBusyError(PhotoStudioError):
    def __init__(self, message: str = "A request is already being processed. Please wait for it to finish."):
        super().__init__(message)

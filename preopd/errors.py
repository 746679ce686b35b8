# preopd/errors.py


class IntakeError(Exception):
    """Base class for intake service errors."""


class UnsupportedFileTypeError(IntakeError, ValueError):
    def __init__(self, content_type: str):
        self.content_type = content_type
        super().__init__(
            f"Unsupported file type: {content_type}. Text extraction failed."
        )


class ExtractionError(IntakeError, ValueError):
    """The file claimed a supported type but could not be parsed."""

    def __init__(self, filename: str, reason: str):
        self.filename = filename
        super().__init__(f"Could not read {filename}: {reason}")


class OCRNotImplementedError(IntakeError, NotImplementedError):
    """Image uploads need OCR, which is not wired in yet."""

    def __init__(self, filename: str, content_type: str):
        self.filename = filename
        self.content_type = content_type
        super().__init__(
            f"OCR is not available: cannot extract text from {filename} ({content_type})."
        )


class UnknownCategoryError(IntakeError, KeyError):
    def __init__(self, category: str):
        self.category = category
        super().__init__(category)

    def __str__(self) -> str:
        return f"Unknown record category: {self.category}"


class SessionNotFoundError(IntakeError, LookupError):
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Intake session {session_id} not found")


class InvalidVitalsError(IntakeError, ValueError):
    def __init__(self, errors: dict):
        self.errors = errors
        super().__init__("Please fix the errors before saving.")


class PatientNotFoundError(IntakeError, LookupError):
    def __init__(self, patient_id: str):
        self.patient_id = patient_id
        super().__init__(f"Patient {patient_id} not found")

"""Analysis service exceptions."""


class AnalysisServiceError(Exception):
    """Raised when the analysis service fails or returns an unusable answer.

    ``status_code`` is set when the failure came from an HTTP response.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

"""
Exceptions raised by the Guru MCP server.
"""


class ConfigurationError(Exception):
    """Raised at startup when required settings (credentials) are missing."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("Invalid configuration: " + "; ".join(self.errors))


class UpstreamError(Exception):
    """The Guru API answered with a non-success HTTP status."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Guru API error {status_code}: {body}")

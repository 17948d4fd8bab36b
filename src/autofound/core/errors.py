"""Exception types shared by the provider adapters, the loop and the tools."""


class ProviderError(RuntimeError):
    """Raised when a model provider answers with a non-success status or an unreadable body."""

    def __init__(self, provider: str, status_code: int, body: str = "") -> None:
        self.provider = provider
        self.status_code = status_code
        # Error payloads can be huge or echo secrets back; keep a short excerpt only
        self.body = body[:200]
        super().__init__(f"{provider} {status_code}: {self.body}")


class ToolExecutionError(RuntimeError):
    """Raised by a tool executor when it cannot do what was asked."""


class AgentNotFoundError(LookupError):
    """Raised when a runner is asked to drive an agent the user does not own."""


class MissingCredentialsError(RuntimeError):
    """Raised when no API key is configured for the provider an agent's model needs."""

    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(f"No {provider} API key configured.")

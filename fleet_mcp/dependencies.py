"""Dependency container for Fleet MCP.

Built once at startup and passed explicitly to whatever needs it.
"""

from dataclasses import dataclass

from fleet_mcp.config import Settings
from fleet_mcp.services import (
    CredentialStore,
    Dispatcher,
    OpenAISummarizer,
    Summarizer,
    SummarizerError,
    make_connector,
)


@dataclass
class Dependencies:
    """Container for Fleet MCP dependencies.

    Example:
        deps = Dependencies.from_settings(Settings.from_env())
        result = await execute(PerformCommand(names=["web1"], command="uptime"), deps)
    """

    settings: Settings
    store: CredentialStore
    dispatcher: Dispatcher
    summarizer: Summarizer | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        summarizer: Summarizer | None = None,
    ) -> "Dependencies":
        """Create dependencies from settings.

        The OpenAI summarizer is built only when an API key is configured.

        Raises:
            PersistenceError: If the host registry cannot be loaded
        """
        store = CredentialStore(settings.registry_path)
        dispatcher = Dispatcher(
            store,
            connector=make_connector(settings.connect_timeout),
            max_concurrency=settings.max_concurrency,
            command_timeout=settings.command_timeout,
        )
        if summarizer is None and settings.openai_api_key:
            summarizer = OpenAISummarizer.from_api_key(
                settings.openai_api_key, model=settings.openai_model
            )
        return cls(
            settings=settings,
            store=store,
            dispatcher=dispatcher,
            summarizer=summarizer,
        )

    def require_summarizer(self) -> Summarizer:
        """Return the summarizer or fail if none is configured.

        Raises:
            SummarizerError: If no summarizer is available
        """
        if self.summarizer is None:
            raise SummarizerError(
                "no summarizer configured (set OPENAI_API_KEY to enable summaries)"
            )
        return self.summarizer

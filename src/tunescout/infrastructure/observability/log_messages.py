"""Structured log message templates for consistent, human-readable logging.

Hey future me - instead of scattered f-strings like "Spotify error: 500", search
logs look like this:

    🔴 Spotify Search Failed
    ├─ Query: daft punk
    ├─ Reason: Server error '500 Internal Server Error'
    └─ 💡 Other providers still answer; check Spotify API status

Usage:
    from tunescout.infrastructure.observability.log_messages import LogMessages

    logger.warning(LogMessages.provider_failed(provider="Spotify", query=q, error=str(e)))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class LogTemplate:
    """A reusable log message template with placeholders."""

    icon: str
    title: str
    fields: dict[str, str]
    hint: str | None = None

    def format(self, **kwargs: Any) -> str:
        """Format the template with provided values.

        Args:
            **kwargs: Values to fill into template placeholders

        Returns:
            Formatted multi-line log message with icon, title, fields, and optional hint
        """
        lines = [f"{self.icon} {self.title}"]

        field_items = list(self.fields.items())
        for i, (key, value_template) in enumerate(field_items):
            prefix = "└─" if i == len(field_items) - 1 and not self.hint else "├─"
            try:
                value = value_template.format(**kwargs)
            except (KeyError, IndexError) as e:
                value = f"<missing: {e}>"
            lines.append(f"{prefix} {key}: {value}")

        if self.hint:
            try:
                hint_text = self.hint.format(**kwargs)
            except (KeyError, IndexError) as e:
                hint_text = f"<missing: {e}>"
            lines.append(f"└─ 💡 {hint_text}")

        return "\n".join(lines)


def _escape(value: str) -> str:
    """Escape braces so user input survives LogTemplate.format()."""
    return value.replace("{", "{{").replace("}", "}}")


def _shorten(query: str, limit: int = 80) -> str:
    return query if len(query) <= limit else f"{query[: limit - 1]}…"


class LogMessages:
    """Collection of standardized log message templates.

    Template categories:
    - Provider search (failed, timed out)
    - Aggregation (completed, all failed)
    - Authentication (token exchange)
    """

    # === Provider Search ===

    @staticmethod
    def provider_failed(
        provider: str,
        query: str,
        error: str,
        hint: str | None = None,
    ) -> str:
        """Format a single-provider search failure.

        Args:
            provider: Provider display name (e.g., "Spotify")
            query: Search query
            error: Error description
            hint: Custom troubleshooting hint
        """
        default_hint = f"Other providers still answer; check {provider} API status"

        template = LogTemplate(
            icon="🔴",
            title=f"{provider} Search Failed",
            fields={"Query": _escape(_shorten(query)), "Reason": _escape(error)},
            hint=_escape(hint or default_hint),
        )
        return template.format()

    @staticmethod
    def provider_timeout(provider: str, query: str, timeout: float) -> str:
        """Format a provider search timeout.

        Args:
            provider: Provider display name
            query: Search query
            timeout: Timeout in seconds
        """
        template = LogTemplate(
            icon="⏱️",
            title=f"{provider} Search Timeout",
            fields={"Query": _escape(_shorten(query)), "Timeout": f"{timeout}s"},
            hint=f"Raise SEARCH_PROVIDER_TIMEOUT_SECONDS or check {provider} latency",
        )
        return template.format()

    # === Aggregation ===

    @staticmethod
    def search_completed(
        query: str,
        source_counts: dict[str, int],
        failed: list[str] | None = None,
    ) -> str:
        """Format an aggregate search summary.

        Args:
            query: Search query
            source_counts: Songs returned per platform
            failed: Platforms that failed (partial failure)
        """
        icon = "✅" if not failed else "⚠️"
        fields = {"Query": _escape(_shorten(query))}
        for platform, count in source_counts.items():
            fields[platform] = str(count)
        if failed:
            fields["Failed"] = ", ".join(failed)

        template = LogTemplate(icon=icon, title="Search Complete", fields=fields)
        return template.format()

    @staticmethod
    def all_providers_failed(query: str, errors: dict[str, str]) -> str:
        """Format a total search failure.

        Args:
            query: Search query
            errors: Error description per platform
        """
        fields = {"Query": _escape(_shorten(query))}
        for platform, error in errors.items():
            fields[platform] = _escape(error)

        template = LogTemplate(
            icon="❌",
            title="All Search Providers Failed",
            fields=fields,
            hint="Check network connectivity and provider credentials",
        )
        return template.format()

    # === Authentication ===

    @staticmethod
    def token_refreshed(provider: str, expires_in: int) -> str:
        """Format a successful client-credentials token refresh.

        Args:
            provider: Provider display name
            expires_in: Token lifetime in seconds
        """
        template = LogTemplate(
            icon="🔑",
            title=f"{provider} Token Refreshed",
            fields={"Expires In": f"{expires_in}s"},
        )
        return template.format()

    @staticmethod
    def token_exchange_failed(provider: str, error: str) -> str:
        """Format a failed credential exchange.

        Args:
            provider: Provider display name
            error: Error description
        """
        template = LogTemplate(
            icon="🔐",
            title=f"{provider} Token Exchange Failed",
            fields={"Reason": _escape(error)},
            hint=f"Check {provider.upper()}_CLIENT_ID and {provider.upper()}_CLIENT_SECRET",
        )
        return template.format()

"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use SHARPBANG_ prefix (e.g., SHARPBANG_WHITESPACE_POLICY=allow_space).

Settings can also be loaded from a .env file in the working directory.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..models.directives import LineCrossingPolicy, WhitespacePolicy


class AppSettings(BaseSettings):
    """
    Reader configuration via environment variables.

    Environment variables use SHARPBANG_ prefix.

    Examples:
        SHARPBANG_WHITESPACE_POLICY=allow_space
        SHARPBANG_LINE_CROSSING=truncate
        SHARPBANG_FOLD_CASE=true
    """

    model_config = SettingsConfigDict(
        env_prefix="SHARPBANG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Directive scanning
    whitespace_policy: WhitespacePolicy = Field(
        default=WhitespacePolicy.STRICT_NO_SPACE,
        description="Whether '#!' must be followed by whitespace, newline or EOF to start a line directive",
    )

    line_crossing: LineCrossingPolicy = Field(
        default=LineCrossingPolicy.ERROR,
        description="Error on, or truncate the directive at, a datum that ends past the directive's line",
    )

    # Host reader
    fold_case: bool = Field(
        default=False,
        description="Start reading with symbol and character-name case folding enabled",
    )

    # Report configuration
    report_filename: str = Field(
        default="directives.yaml",
        description="Name of the YAML directive report written by the CLI",
    )

    highlight_filename: str = Field(
        default="source.html",
        description="Name of the highlighted source HTML written by the CLI",
    )

    debug_mode: bool = Field(
        default=False,
        description="Print tracebacks for reader errors in the CLI",
    )

    def directivePolicy_describe(self) -> str:
        """
        Summarize the active scanning policies for log output.

        Example:
            >>> AppSettings().directivePolicy_describe()
            'whitespace=strict_no_space, line_crossing=error'
        """
        return f"whitespace={self.whitespace_policy.value}, line_crossing={self.line_crossing.value}"


# Singleton instance - import this in your code
appsettings = AppSettings()

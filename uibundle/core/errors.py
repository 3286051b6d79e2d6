"""
Error taxonomy for the build pipeline.

Every failure a task can raise derives from ``UiBundleError`` so the CLI
can report it uniformly:

    ConfigError           — bad ui-build.yml, missing tool runner
    StreamError           — glob with no matches, unsupported contents
    ToolError             — an external Node tool could not run
    LintError             — linter crash or lint errors at stream end
    CssError              — stylesheet could not be processed
    BundleError           — JavaScript bundling failed
    PageCompilationError  — preview page could not be rendered
"""

from __future__ import annotations


class UiBundleError(Exception):
    """Base class for all build pipeline errors."""


class ConfigError(UiBundleError):
    """Raised when configuration is invalid or the environment is unusable."""


class StreamError(UiBundleError):
    """Raised when a file stream cannot be sourced or processed."""


class ToolError(UiBundleError):
    """Raised when an external tool fails to run."""


class PluginError(UiBundleError):
    """An error raised by a named pipeline plugin.

    The message is prefixed with the plugin name, the way task runners
    report stage failures: ``[eslint] Failed with 2 errors``.
    """

    def __init__(self, plugin: str, message: str, *, file_path: str | None = None):
        self.plugin = plugin
        self.file_path = file_path
        self.detail = message
        super().__init__(f"[{plugin}] {message}")


class LintError(PluginError):
    """Raised by lint stages."""


class CssError(PluginError):
    """Raised by the CSS transform pipeline."""

    def __init__(self, message: str, *, file_path: str | None = None):
        super().__init__("postcss", message, file_path=file_path)


class BundleError(PluginError):
    """Raised by the JavaScript bundle pipeline."""

    def __init__(self, message: str, *, file_path: str | None = None):
        super().__init__("bundle", message, file_path=file_path)


class PageCompilationError(UiBundleError):
    """Raised when a preview page fails to render.

    ``template_path`` names the layout or partial that failed.
    """

    def __init__(self, message: str, *, template_path: str = "", layout: str = ""):
        self.template_path = template_path
        self.layout = layout
        super().__init__(message)

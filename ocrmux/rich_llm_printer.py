"""
Rich printer module for displaying LLM completion results.
"""
from typing import Any, Dict, Optional
from rich.console import Console
from rich.markdown import Markdown
from rich.syntax import Syntax
from rich.panel import Panel
from rich.console import Group
from rich.text import Text
import json

from .types import ChatResult

console = Console()


class RichPrinter:
    """
    A class for displaying completion results using rich.

    Designed to work with the ChatResult returned by ``complete`` and
    ``dispatch``.

    Attributes:
        title: Title for the display panel
        show_metadata: Whether to show metadata below the response
        code_theme: Theme for code blocks
        inline_code_theme: Theme for inline code
        show_provider_info: Whether to show provider information in title
        border_style: Border style for successful responses
        error_style: Border style for errors
    """

    def __init__(
        self,
        title: str = "Response",
        show_metadata: bool = True,
        code_theme: str = "coffee",
        inline_code_theme: str = "monokai",
        show_provider_info: bool = True,
        border_style: str = "green",
        error_style: str = "red",
        output: Optional[Console] = None,
    ):
        self.title = title
        self.show_metadata = show_metadata
        self.code_theme = code_theme
        self.inline_code_theme = inline_code_theme
        self.show_provider_info = show_provider_info
        self.border_style = border_style
        self.error_style = error_style
        self.console = output or console

    def print_result(self, result: ChatResult) -> ChatResult:
        """
        Display a completion result with rich formatting.

        Args:
            result: ChatResult from ``complete`` or ``dispatch``.

        Returns:
            The same result for chaining
        """
        if result.ok:
            title = self._build_title(self.title, result.provider)
            body = self._build_text(result.text)
            style = self.border_style
        else:
            title = self._build_title(f"Error: {result.error.kind.value}", result.provider)
            body = Text(result.error.describe(), style="bold")
            style = self.error_style

        self.console.print(
            Panel(
                self._with_metadata(body, result.meta),
                title=title,
                border_style=style,
                padding=(1, 2)
            )
        )

        return result

    def _build_title(self, label: str, provider: str) -> str:
        """Build the panel title."""
        title_parts = [f"[bold]{label}[/bold]"]

        if self.show_provider_info and provider:
            title_parts.append(f"[dim]({provider})[/dim]")

        return " ".join(title_parts)

    def _build_text(self, text: str) -> Any:
        if not text.strip():
            return Text("(empty response)", style="dim italic")

        return Markdown(
            text,
            code_theme=self.code_theme,
            inline_code_theme=self.inline_code_theme
        )

    def _with_metadata(self, body: Any, meta: Dict[str, Any]) -> Any:
        # The prompt turn repeats the OCR text
        meta = {k: v for k, v in meta.items() if k != "prompt_turn"}
        if not (self.show_metadata and meta):
            return body

        metadata_json = json.dumps(meta, indent=2, default=str)
        metadata_display = Syntax(
            metadata_json,
            "json",
            theme="lightbulb",
            background_color="default"
        )

        # Create info panel for metadata
        metadata_panel = Panel(
            metadata_display,
            title="[bold]Metadata[/bold]",
            border_style="dim"
        )

        return Group(body, metadata_panel)

"""Tests for the StringIO-backed Rich console."""

from rich.text import Text

from defquery.output.console import DEFQUERY_THEME, create_console, get_output


class TestConsole:
    def test_renders_to_buffer(self) -> None:
        console = create_console()
        console.print("hello")
        assert get_output(console) == "hello\n"

    def test_theme_styles_resolve(self) -> None:
        console = create_console()
        console.print(Text("DEP-0001", style="dq.id"))
        assert "DEP-0001" in get_output(console)
        assert "dq.id" in DEFQUERY_THEME.styles

    def test_width(self) -> None:
        assert create_console(width=60).width == 60
        assert create_console().width == 120

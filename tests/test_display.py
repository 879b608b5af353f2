import io
from datetime import date
from unittest.mock import patch

from rich.console import Console

from bingers.display import DisplayManager
from conftest import THE_ORVILLE, make_episode, make_show


class TestDisplayManager:
    def setup_method(self):
        self.output = io.StringIO()
        self.display = DisplayManager(Console(file=self.output, width=120, color_system=None))

    def test_show_candidates(self):
        self.display.show_candidates([
            make_show(1, "The Orville"),
            make_show(2, "[Bracketed] Show", network="Hulu", premiered=None),
        ])

        out = self.output.getvalue()
        assert "[0] The Orville (FOX, 2017)" in out
        assert "[1] [Bracketed] Show (Hulu)" in out

    def test_shows_table(self):
        show = make_show(THE_ORVILLE, "The Orville", last_watched=[2, 5], runtime=None)
        self.display.shows_table([show])

        out = self.output.getvalue()
        assert "The Orville" in out
        assert "S02E05" in out

    def test_episodes_table(self):
        episodes = [
            make_episode(THE_ORVILLE, 1, 1, name="Old Wounds", watched=True),
            make_episode(THE_ORVILLE, 1, 2, airdate=None),
        ]
        self.display.episodes_table(episodes, show_names={THE_ORVILLE: "The Orville"}, today=date(2020, 1, 1))

        out = self.output.getvalue()
        assert "S01E01" in out
        assert "Old Wounds" in out
        assert "TBA" in out
        assert "The Orville" in out

    def test_tables_do_not_parse_markup_in_data(self):
        episode = make_episode(1, 1, 1, name="Pilot [/b]")
        self.display.episodes_table([episode], show_names={1: "Tales [/from] the Loop"}, today=date(2020, 1, 1))
        self.display.shows_table([make_show(1, "Tales [/from] the Loop", network="[/i]Amazon", status="[/x]Ended")])

        out = self.output.getvalue()
        assert "Tales [/from] the Loop" in out
        assert "Pilot [/b]" in out
        assert "[/i]Amazon" in out
        assert "[/x]Ended" in out

    @patch("bingers.display.Prompt.ask")
    def test_choose(self, mock_ask):
        mock_ask.side_effect = ["7", "x", "1"]
        assert self.display.choose("Pick", 2) == 1
        assert mock_ask.call_count == 3
        assert "between 0 and 1" in self.output.getvalue()

    @patch("bingers.display.Prompt.ask", return_value="q")
    def test_choose_abort(self, mock_ask):
        assert self.display.choose("Pick", 2) is None

    def test_error_is_not_markup(self):
        self.display.error("User data version mismatch [bold]")
        assert "[bold]" in self.output.getvalue()

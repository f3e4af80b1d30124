import discord

from eventdesk.messaging import create_embed, get_embed_color, get_message


class TestTemplates:
    def test_formats_template(self):
        assert get_message("events.deleted", id="12") == "Event `12` deleted."

    def test_missing_key_placeholder(self):
        assert get_message("nope.missing") == "<Missing Template: nope.missing>"
        assert get_message("nope.missing", default="fallback") == "fallback"

    def test_missing_placeholder_argument_uses_default(self):
        assert get_message("events.deleted", default="x") == "x"


class TestEmbeds:
    def test_embed_from_keys(self):
        embed = create_embed(
            title_key="reports.detail_title",
            title_kwargs={"id": "5"},
            color_type="success",
            fields=[("Status", "Resolved", True)],
        )
        assert embed.title == "Report #5"
        assert embed.color == get_embed_color("success")
        assert embed.fields[0].name == "Status"
        assert embed.footer.text == "Powered by EventDesk"

    def test_unknown_color_falls_back(self):
        assert get_embed_color("purple") == discord.Color.default()

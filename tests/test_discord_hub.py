import unittest
from unittest.mock import AsyncMock, Mock

import discord

from raidplanner.errors import ExternalUnavailableError
from raidplanner.raids.notifications import COLOR_REMINDER, RaidMessage
from raidplanner.utils.discord_hub import DiscordNotificationHub, build_embed

from tests.helpers import CHANNEL_ID, FIXED_NOW


def make_message() -> RaidMessage:
    message = RaidMessage(
        title="⏰ Reminder: Savage",
        description="Tomorrow!",
        color=COLOR_REMINDER,
        footer="Raid ID: 1",
        timestamp=FIXED_NOW,
        content="<@1> <@2>",
        reactions=("✅", "❌"),
    )
    message.add_field("Raid", "Savage", inline=True)
    message.add_field("Empty", "")
    return message


def make_http_response(status: int):
    return Mock(status=status, reason="error")


class TestBuildEmbed(unittest.TestCase):

    def test_embed_mirrors_message(self):
        embed = build_embed(make_message())

        self.assertEqual(embed.title, "⏰ Reminder: Savage")
        self.assertEqual(embed.color, discord.Color.gold())
        self.assertEqual(embed.footer.text, "Raid ID: 1")
        self.assertEqual(embed.timestamp, FIXED_NOW)
        self.assertEqual([field.name for field in embed.fields], ["Raid", "Empty"])
        self.assertTrue(embed.fields[0].inline)
        self.assertEqual(embed.fields[1].value, "—")

    def test_long_field_values_are_cut(self):
        message = RaidMessage(title="Long").add_field("Names", "x" * 2000)
        self.assertEqual(len(build_embed(message).fields[0].value), 1024)


class TestDiscordNotificationHub(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.sent = Mock()
        self.sent.id = 777
        self.sent.add_reaction = AsyncMock()

        self.existing = Mock()
        self.existing.edit = AsyncMock()
        self.existing.delete = AsyncMock()

        self.channel = Mock(spec=discord.TextChannel)
        self.channel.send = AsyncMock(return_value=self.sent)
        self.channel.fetch_message = AsyncMock(return_value=self.existing)

        self.bot = Mock()
        self.bot.get_channel = Mock(return_value=self.channel)
        self.bot.fetch_channel = AsyncMock()
        self.hub = DiscordNotificationHub(self.bot)

    async def test_send_posts_embed_and_reactions(self):
        message_id = await self.hub.send(CHANNEL_ID, make_message())

        self.assertEqual(message_id, 777)
        kwargs = self.channel.send.await_args.kwargs
        self.assertEqual(kwargs["content"], "<@1> <@2>")
        self.assertIsInstance(kwargs["embed"], discord.Embed)
        self.assertEqual(
            [call.args[0] for call in self.sent.add_reaction.await_args_list], ["✅", "❌"]
        )

    async def test_send_to_missing_channel_raises(self):
        self.bot.get_channel.return_value = None
        self.bot.fetch_channel.side_effect = discord.NotFound(make_http_response(404), "Unknown Channel")

        with self.assertRaises(ExternalUnavailableError):
            await self.hub.send(CHANNEL_ID, make_message())

    async def test_send_http_error_raises(self):
        self.channel.send.side_effect = discord.HTTPException(make_http_response(500), "oops")
        with self.assertRaises(ExternalUnavailableError):
            await self.hub.send(CHANNEL_ID, make_message())

    async def test_update_edits_existing_message(self):
        self.assertTrue(await self.hub.update(CHANNEL_ID, 55, make_message()))
        self.channel.fetch_message.assert_awaited_once_with(55)
        self.existing.edit.assert_awaited_once()

    async def test_update_of_deleted_message_returns_false(self):
        self.channel.fetch_message.side_effect = discord.NotFound(make_http_response(404), "Unknown Message")
        self.assertFalse(await self.hub.update(CHANNEL_ID, 55, make_message()))

    async def test_delete_is_best_effort(self):
        self.assertTrue(await self.hub.delete(CHANNEL_ID, 55))
        self.existing.delete.assert_awaited_once()

        self.existing.delete.side_effect = discord.Forbidden(make_http_response(403), "Missing Access")
        self.assertFalse(await self.hub.delete(CHANNEL_ID, 55))


if __name__ == "__main__":
    unittest.main()

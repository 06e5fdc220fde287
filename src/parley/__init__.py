"""parley -- an asyncio client for a Discord-compatible chat-platform REST API.

Applications send and manage messages through channel-like targets, and
third-party extensions attach event handlers and commands to the client
without modifying it::

    from parley import Client, Embed
    from parley.extensions import Extension, event

    class Greeter(Extension):
        @event("member_join")
        async def welcome(self, member):
            await self.client.channel(WELCOME_CHANNEL).post(f"Welcome {member}!")

    async with Client.from_config() as client:
        client.load_extension(Greeter)
        await client.channel(123).post(embed=Embed("Ready"))

Modules:
    client: The host :class:`Client`.
    messageable: The messaging pipeline shared by every target.
    embed: The :class:`Embed` value model.
    extensions: Extension declaration, binding and loading.
    http: The REST transport.
    config: Configuration loading and precedence resolution.
    exceptions: Exception hierarchy.
"""

__version__ = "0.3.0"

from parley.allowed_mentions import AllowedMentions  # noqa: E402
from parley.channel import DMTarget, TextChannel, VoiceChannel  # noqa: E402
from parley.client import Client  # noqa: E402
from parley.components import Button, ButtonStyle, SelectMenu, SelectOption  # noqa: E402
from parley.embed import Author, Embed, EmbedField, Footer, Image, Thumbnail  # noqa: E402
from parley.file import File  # noqa: E402
from parley.message import Message, MessageReference  # noqa: E402

__all__ = [
    "AllowedMentions",
    "Author",
    "Button",
    "ButtonStyle",
    "Client",
    "DMTarget",
    "Embed",
    "EmbedField",
    "File",
    "Footer",
    "Image",
    "Message",
    "MessageReference",
    "SelectMenu",
    "SelectOption",
    "TextChannel",
    "Thumbnail",
    "VoiceChannel",
    "__version__",
]

"""Extension manager -- discovery, loading, and unloading.

:class:`ExtensionManager` instantiates extensions, merges their bound
handlers into the host's :class:`~parley.dispatch.EventDispatcher`, and
removes exactly those handler objects again on unload.

Third-party packages can publish extensions as entry points in the
``parley.extensions`` group::

    [project.entry-points."parley.extensions"]
    message-expander = "my_package.expander:MessageExpander"
"""

from __future__ import annotations

import importlib.metadata
import logging
from typing import TYPE_CHECKING, Optional, Union

from parley.exceptions import ExtensionError
from parley.extensions.base import BoundCommand, Extension
from parley.models import ExtensionsConfig

if TYPE_CHECKING:
    from parley.client import Client
    from parley.dispatch import EventDispatcher

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "parley.extensions"
"""The entry-point group name used for extension discovery."""


def iter_entry_points() -> list[importlib.metadata.EntryPoint]:
    """Return every entry point registered in :data:`ENTRY_POINT_GROUP`."""
    return list(importlib.metadata.entry_points().select(group=ENTRY_POINT_GROUP))


class ExtensionManager:
    """Loads and unloads extensions for one client.

    Args:
        client: The host client passed to every extension constructor.
        dispatcher: The dispatch table extension handlers are merged into.

    Example::

        manager = ExtensionManager(client, client.dispatcher)
        manager.load_extension(MessageExpander)
        manager.unload_extension("MessageExpander")
    """

    def __init__(self, client: Client, dispatcher: EventDispatcher) -> None:
        self._client = client
        self._dispatcher = dispatcher
        self._extensions: dict[str, Extension] = {}

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def discover(self, config: ExtensionsConfig) -> list[str]:
        """Load extensions published in the ``parley.extensions`` entry-point group.

        When ``config.enabled`` is non-empty only those entry points are
        loaded; otherwise every entry point not in ``config.disabled`` is.

        Returns:
            Names of the extensions that were loaded. Entry points that
            fail to load are logged as warnings and skipped.
        """
        loaded_names: list[str] = []
        enabled_set = set(config.enabled)
        disabled_set = set(config.disabled)

        for ep in iter_entry_points():
            name = ep.name
            if enabled_set and name not in enabled_set:
                logger.debug("Extension '%s' not in enabled list, skipping", name)
                continue
            if name in disabled_set:
                logger.debug("Extension '%s' is disabled, skipping", name)
                continue

            try:
                self.load_extension(ep.load(), name=name)
                loaded_names.append(name)
            except Exception as exc:
                logger.warning("Failed to load extension '%s': %s", name, exc)

        return loaded_names

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_extension(
        self,
        extension: Union[type[Extension], Extension],
        name: Optional[str] = None,
    ) -> Extension:
        """Instantiate (if given a class) and load an extension.

        Calls :meth:`~parley.extensions.base.Extension.on_load`, then merges
        the instance's :attr:`~parley.extensions.base.Extension.events` into
        the dispatcher.

        Args:
            extension: An :class:`Extension` subclass or instance.
            name: Registration name. Defaults to ``extension.name``.

        Raises:
            ExtensionError: If *extension* is not an extension, or an
                extension with the same name is already loaded.
        """
        if isinstance(extension, type):
            if not issubclass(extension, Extension):
                raise ExtensionError(f"{extension.__qualname__} is not an Extension subclass")
            instance = extension(self._client)
        elif isinstance(extension, Extension):
            instance = extension
        else:
            raise ExtensionError(f"{extension!r} is not an Extension")

        name = name or instance.name
        if name in self._extensions:
            raise ExtensionError(f"Extension '{name}' is already loaded")

        instance.on_load()
        self._dispatcher.add_handlers(instance.events)
        self._extensions[name] = instance
        logger.info("Loaded extension '%s' v%s", name, instance.version)
        return instance

    def unload_extension(self, name: str) -> Extension:
        """Remove every handler the extension contributed and call its ``on_unload``.

        Raises:
            ExtensionError: If no extension with *name* is loaded.
        """
        try:
            instance = self._extensions.pop(name)
        except KeyError:
            raise ExtensionError(f"Extension '{name}' is not loaded") from None

        self._dispatcher.remove_handlers(instance.events)
        try:
            instance.on_unload()
        except Exception as exc:
            logger.warning("Error unloading extension '%s': %s", name, exc)
        logger.info("Unloaded extension '%s'", name)
        return instance

    def unload_all(self) -> None:
        """Unload every loaded extension, most recently loaded first."""
        for name in reversed(list(self._extensions)):
            self.unload_extension(name)

    # ------------------------------------------------------------------
    # Querying
    # ------------------------------------------------------------------

    def get_extension(self, name: str) -> Extension:
        """Retrieve a loaded extension by name.

        Raises:
            ExtensionError: If no extension with *name* is loaded.
        """
        try:
            return self._extensions[name]
        except KeyError:
            raise ExtensionError(f"Extension '{name}' is not loaded") from None

    def __contains__(self, name: object) -> bool:
        return name in self._extensions

    def list_extensions(self) -> list[dict[str, str]]:
        """List loaded extensions as ``{"name", "version", "description"}`` dicts."""
        return [
            {
                "name": name,
                "version": extension.version,
                "description": extension.description,
            }
            for name, extension in self._extensions.items()
        ]

    @property
    def commands(self) -> list[BoundCommand]:
        """Commands of every loaded extension, in load order."""
        return [c for extension in self._extensions.values() for c in extension.commands]

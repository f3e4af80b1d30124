"""Handles loading and formatting of user-facing messages and embeds from templates."""

import json
import logging
import os
from typing import Any, Dict, List, Optional, Tuple

import discord

from eventdesk.config import get_config_value

logger = logging.getLogger(__name__)

MESSAGE_TEMPLATES: Dict[str, Any] = {}


def load_message_templates(path: Optional[str] = None) -> None:
    """
    Loads message templates from the JSON file named in message_settings.templates_file.
    A relative name is looked up in the working directory first, then next to this module.
    """
    global MESSAGE_TEMPLATES
    templates_file_path = path or get_config_value(
        "message_settings.templates_file", "message_templates.json"
    )

    possible_paths = [
        templates_file_path,
        os.path.join(os.path.dirname(__file__), templates_file_path),
    ]

    loaded_path = None
    for path_option in possible_paths:
        abs_path = os.path.abspath(path_option)
        if os.path.exists(abs_path):
            loaded_path = abs_path
            break

    if not loaded_path:
        logger.error(
            f"Message templates file could not be found (tried {possible_paths}). Messaging system will be impaired."
        )
        MESSAGE_TEMPLATES = {}
        return

    try:
        with open(loaded_path, "r", encoding="utf-8") as f:
            MESSAGE_TEMPLATES = json.load(f)
        logger.info(f"Successfully loaded message templates from: {loaded_path}")
    except json.JSONDecodeError as e:
        logger.error(
            f"Error decoding JSON from message templates file {loaded_path}: {e}. Using empty templates."
        )
        MESSAGE_TEMPLATES = {}
    except OSError as e:
        logger.error(
            f"Could not read message templates file {loaded_path}: {e}. Using empty templates."
        )
        MESSAGE_TEMPLATES = {}


def get_bot_display_name() -> str:
    return get_config_value(
        "message_settings.bot_display_name_in_messages",
        get_config_value("bot_settings.bot_name", "EventDesk"),
    )


def get_message(key: str, default: Optional[str] = None, **kwargs: Any) -> str:
    """
    Retrieves a message template by its dot-separated key and formats it with kwargs.

    Example: get_message("reports.status_updated", report_id="12", status="RESOLVED")
    """
    if not MESSAGE_TEMPLATES:
        logger.warning(
            f"Attempted to get message for key '{key}' but templates are not loaded."
        )
        return default if default is not None else f"<Missing Template: {key}>"

    value: Any = MESSAGE_TEMPLATES
    try:
        for k in key.split("."):
            if not isinstance(value, dict):
                raise KeyError(k)
            value = value[k]

        if not isinstance(value, str):
            logger.warning(
                f"Template value for key '{key}' is not a string: {type(value)}."
            )
            return str(value) if default is None else default

        return value.format(**kwargs)
    except KeyError:
        logger.warning(
            f"Message template key '{key}' not found. Returning default or placeholder."
        )
        return default if default is not None else f"<Missing Template: {key}>"
    except (IndexError, ValueError) as e:
        logger.error(f"Error formatting message for key '{key}' with args {kwargs}: {e}")
        return default if default is not None else f"<Error Formatting Template: {key}>"


def get_embed_color(color_type: str) -> discord.Color:
    """
    Looks up message_settings.embed_colors.<color_type> (a '0xRRGGBB' string).
    Falls back to discord.Color.default() if not found or invalid.
    """
    hex_color_str = get_config_value(f"message_settings.embed_colors.{color_type}")

    if isinstance(hex_color_str, str):
        try:
            return discord.Color(int(hex_color_str, 16))
        except ValueError:
            logger.warning(
                f"Invalid hex color format for '{color_type}': '{hex_color_str}'. Using default color."
            )
    else:
        logger.warning(
            f"Embed color type '{color_type}' not found in config. Using default color."
        )

    return discord.Color.default()


def create_embed(
    title_key: Optional[str] = None,
    description_key: Optional[str] = None,
    color_type: str = "info",
    title_kwargs: Optional[Dict[str, Any]] = None,
    description_kwargs: Optional[Dict[str, Any]] = None,
    footer_key: Optional[str] = None,
    footer_kwargs: Optional[Dict[str, Any]] = None,
    fields: Optional[List[Tuple[str, str, bool]]] = None,
    **embed_constructor_kwargs: Any,
) -> discord.Embed:
    """
    Creates a discord.Embed using message templates for title and description.

    Args:
        title_key: Dot-separated key for the embed title in message_templates.json.
        description_key: Dot-separated key for the embed description.
        color_type: 'success', 'error', 'info', 'warning' or 'blue'.
        title_kwargs: Keyword arguments for formatting the title string.
        description_kwargs: Keyword arguments for formatting the description string.
        footer_key: Dot-separated key for the footer text; the configured default footer is used otherwise.
        footer_kwargs: Keyword arguments for formatting the footer string.
        fields: Already formatted (name, value, inline) tuples.
        **embed_constructor_kwargs: Passed straight to discord.Embed (e.g. timestamp=...).

    Returns:
        A discord.Embed object.
    """
    title = get_message(title_key, **(title_kwargs or {})) if title_key else None
    description = (
        get_message(description_key, **(description_kwargs or {}))
        if description_key
        else None
    )

    valid_embed_kwargs = {
        k: v
        for k, v in embed_constructor_kwargs.items()
        if k not in ["footer", "title", "description", "color"]
    }
    embed = discord.Embed(
        title=title,
        description=description,
        color=get_embed_color(color_type),
        **valid_embed_kwargs,
    )

    bot_name = get_bot_display_name()
    footer_text = None
    if footer_key:
        footer_text = get_message(footer_key, **(footer_kwargs or {}), bot_name=bot_name)
    else:
        default_footer = get_config_value("message_settings.embed_footer_text")
        if default_footer:
            try:
                footer_text = default_footer.format(bot_name=bot_name)
            except KeyError:
                footer_text = default_footer
    if footer_text:
        embed.set_footer(text=footer_text)

    for name, value, inline in fields or []:
        embed.add_field(name=name, value=value, inline=inline)

    return embed


load_message_templates()

"""
App content requests.

The actual text/JSON generator is an injected callable (prompt -> str), or one
named as "package.module:function" and loaded with load_generator(). This
module builds the per-app prompt and makes sure a failure never reaches the
gesture layer: any exception becomes a fixed offline placeholder.
"""
from __future__ import annotations

import importlib
import json
import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)

OFFLINE_PLACEHOLDER = json.dumps({"error": "Comms Offline"})
EMPTY_PLACEHOLDER = "No data received."

Generator = Callable[[str], Optional[str]]

JSON_APPS = ("mail", "weather")


def build_prompt(app_id: str, context: str = "User opened app") -> str:
    if app_id == "mail":
        return (
            "Generate a list of 3 fictional, futuristic emails for a user named 'Commander'. "
            "Return valid JSON with array of objects having keys: 'from', 'subject', 'preview'. "
            "Do not use markdown blocks."
        )
    if app_id == "weather":
        return (
            "Generate a futuristic weather report for 'Neo Tokyo' sector 7. "
            "Return valid JSON object with keys: 'temp', 'condition', 'forecast' (short string). "
            "Do not use markdown blocks."
        )
    if app_id == "assistant":
        return (
            f'You are GazeOS, a helpful AI operating system. The user asks: "{context}". '
            "Keep the answer short (max 30 words) and helpful."
        )
    return f"Generate placeholder content for an app named {app_id}. Short text."


def format_content(app_id: str, text: str) -> str:
    """Text shown in the open-app panel.

    Mail and weather payloads are JSON and are pretty-printed; anything that
    does not parse is shown as-is. Other apps show the text quoted, with its
    own double quotes removed.
    """
    if app_id in JSON_APPS:
        try:
            return json.dumps(json.loads(text), indent=2, ensure_ascii=False)
        except ValueError:
            return text
    return '"' + text.replace('"', "") + '"'


def load_generator(ref: Optional[str]) -> Optional[Generator]:
    """Resolve a "package.module:function" reference to a generator callable.

    Returns None, and the service stays offline, when ref is empty or cannot
    be resolved.
    """
    if not ref:
        return None
    module_name, _, attr = ref.partition(":")
    try:
        fn = getattr(importlib.import_module(module_name), attr or "generate")
    except (ImportError, AttributeError, ValueError) as e:
        logger.warning("Cannot load content generator %r: %s", ref, e)
        return None
    if not callable(fn):
        logger.warning("Content generator %r is not callable", ref)
        return None
    logger.info("Using content generator %s", ref)
    return fn


class ContentService:
    def __init__(self, generator: Optional[Generator] = None) -> None:
        self.generator = generator

    def generate(self, app_id: str, context: str = "User opened app") -> str:
        if self.generator is None:
            return OFFLINE_PLACEHOLDER
        try:
            text = self.generator(build_prompt(app_id, context))
        except Exception:
            logger.exception("Content generation failed for %s", app_id)
            return OFFLINE_PLACEHOLDER
        return text or EMPTY_PLACEHOLDER

    def request(self, app_id: str, callback: Callable[[str, str], None]) -> threading.Thread:
        """Generate content on a daemon thread and hand (app_id, text) to callback."""
        t = threading.Thread(
            target=lambda: callback(app_id, self.generate(app_id)),
            name=f"content-{app_id}",
            daemon=True,
        )
        t.start()
        return t

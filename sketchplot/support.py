"""Environment checks for offering direct plotting.

These are advisory: the transport reports an unsupported environment on its
own when it has no serial backend.
"""
from __future__ import annotations

import importlib.util
import re
from typing import Optional

_CHROMIUM = re.compile(r"Chrome|Chromium|Edg/")
_FIREFOX = re.compile(r"Firefox/")


def supports_serial() -> bool:
    return importlib.util.find_spec("serial") is not None


def is_chromium_user_agent(user_agent: Optional[str]) -> bool:
    if not user_agent:
        return False
    return bool(_CHROMIUM.search(user_agent)) and not _FIREFOX.search(user_agent)


def supports_direct_plotting(user_agent: Optional[str]) -> bool:
    return supports_serial() and is_chromium_user_agent(user_agent)


__all__ = ["is_chromium_user_agent", "supports_direct_plotting", "supports_serial"]

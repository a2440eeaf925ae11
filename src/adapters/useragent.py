"""
User agent classifier adapter - Implements UserAgentClassifier protocol.

Real browsers send long, Mozilla-prefixed user agents. Scripts tend to send
nothing, something short, or their library name.
"""

_MIN_LENGTH = 30

_AUTOMATION_TOKENS = (
    "curl/",
    "wget/",
    "python-requests",
    "python-httpx",
    "aiohttp",
    "okhttp",
    "go-http-client",
    "java/",
    "libwww-perl",
    "headlesschrome",
    "phantomjs",
)


class HeuristicUserAgentClassifier:
    """Implements UserAgentClassifier protocol with string heuristics."""

    def is_weird(self, user_agent: str | None) -> bool:
        if not user_agent:
            return True
        ua = user_agent.strip()
        if len(ua) < _MIN_LENGTH:
            return True
        lowered = ua.lower()
        return any(token in lowered for token in _AUTOMATION_TOKENS)

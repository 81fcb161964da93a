"""Canned replies the operator can send without the drafting model."""

from glowup.errors import UnknownScriptError

SAFETY_SCRIPTS: dict[str, str] = {
    "us": (
        "If you're feeling unsafe right now, please reach out for support. "
        "You can call or text 988 anytime in the US and Canada. "
        "It's free, confidential, and available 24/7."
    ),
    "intl": (
        "Please know you're not alone. If you're outside the US, you can find "
        "support at findahelpline.com. There are people ready to listen right now."
    ),
    "pause": (
        "I’m still here with you. I just want to respond thoughtfully. "
        "Give me a moment."
    ),
}

TONE_DRIFT_SCRIPTS: list[str] = [
    "Got you. Thanks for being honest. What’s going on for you right now?",
    "Fair. I’m here though — talk to me.",
    "Alright. I’m with you. What’s up?",
    "I hear you. I’m still here with you — what’s on your mind?",
]

QUICK_REPLIES: list[str] = [
    "I’m right here with you.",
    "Take a slow breath.",
    "That sounds really heavy.",
    "What is your gut telling you?",
    "There’s no rush.",
]

# One-click operator replies keyed ``<group>-<name>``, e.g. ``safety-us``, ``quick-2``.
OPERATOR_SCRIPTS: dict[str, str] = {
    **{f"safety-{key}": text for key, text in SAFETY_SCRIPTS.items()},
    **{f"tone-{i}": text for i, text in enumerate(TONE_DRIFT_SCRIPTS, start=1)},
    **{f"quick-{i}": text for i, text in enumerate(QUICK_REPLIES, start=1)},
}


def get_script(key: str) -> str:
    try:
        return OPERATOR_SCRIPTS[key]
    except KeyError:
        raise UnknownScriptError(key) from None

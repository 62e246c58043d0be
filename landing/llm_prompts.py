from __future__ import annotations

import json
from typing import Any, Dict, List


# Props each known section type is rendered from; keys outside these are ignored.
SECTION_PROPS_GUIDE: Dict[str, str] = {
    "hero": "heading, subheading, optional buttonLabel, optional backgroundImage",
    "features": "title, features: [{title, description}]",
    "testimonials": "title, testimonials: [{quote, author}]",
    "cta": "heading, subheading, optional buttonLabel",
    "about": "title, description",
    "contact": "email, phone",
}

_EXAMPLE_SECTIONS: List[Dict[str, Any]] = [
    {
        "type": "hero",
        "props": {
            "heading": "Welcome to Sweet Crumbs",
            "subheading": "Freshly baked daily.",
            "backgroundImage": "/hero.jpg",
        },
    },
    {
        "type": "about",
        "props": {
            "title": "About Us",
            "description": "We are a family bakery with a passion for pastry.",
        },
    },
    {
        "type": "contact",
        "props": {"email": "hello@bakery.com", "phone": "123-456-7890"},
    },
]


def _section_guide() -> str:
    return "\n".join(f'- "{name}": {keys}' for name, keys in SECTION_PROPS_GUIDE.items())


def build_landing_page_prompt(idea: str) -> str:
    """Return the generation prompt for a trimmed, non-empty business idea.

    Pure and deterministic: the same idea always yields the same prompt.
    """
    example = json.dumps({"sections": _EXAMPLE_SECTIONS}, ensure_ascii=False, indent=2)
    return (
        f'You are a frontend AI assistant. Given the idea "{idea}", generate a landing page layout as JSON.\n'
        "\n"
        'Output contract: a single JSON object with exactly one key, "sections". '
        '"sections" is an array of objects, each with a string "type" and an object "props".\n'
        "\n"
        "Supported section types and their props:\n"
        f"{_section_guide()}\n"
        "\n"
        "Return ONLY valid JSON in this exact format with NO additional text, markdown, or explanations:\n"
        "\n"
        f"{example}\n"
        "\n"
        "CRITICAL: Return ONLY the JSON object, nothing else."
    )

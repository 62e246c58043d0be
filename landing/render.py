from __future__ import annotations

import logging
import os
from typing import Any, Dict, Type

from jinja2 import Environment, FileSystemLoader, select_autoescape
from pydantic import BaseModel, ValidationError

from landing.models import (
    AboutProps,
    ContactProps,
    CtaProps,
    FeaturesProps,
    HeroProps,
    LandingPageRecord,
    Section,
    TestimonialsProps,
    UnknownProps,
)

log = logging.getLogger(__name__)

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")

_env = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html", "xml"]),
    enable_async=False,
)

# Closed set of rendering variants, keyed by section type.
SECTION_VARIANTS: Dict[str, Type[BaseModel]] = {
    "hero": HeroProps,
    "features": FeaturesProps,
    "testimonials": TestimonialsProps,
    "cta": CtaProps,
    "about": AboutProps,
    "contact": ContactProps,
}

UNKNOWN_TEMPLATE = "partials/unknown.html"


def _coerce_section(section: Any) -> Section:
    if isinstance(section, Section):
        return section
    return Section.from_raw(section if isinstance(section, dict) else {})


def _variant_props(model_cls: Type[BaseModel], props: Dict[str, Any]) -> BaseModel:
    try:
        return model_cls.model_validate(props)
    except ValidationError as e:
        log.debug("render: props rejected by %s (%d errors); rendering empty", model_cls.__name__, e.error_count())
        return model_cls()


def render_section(section: Any) -> str:
    """
    Map one section to its HTML partial by type. Unknown types render a
    visible placeholder naming the type; missing props simply leave their
    element out.
    """
    sec = _coerce_section(section)
    kind = sec.type
    # exact match only; "HERO" or " hero" is an unknown type
    model_cls = SECTION_VARIANTS.get(kind)
    if model_cls is None:
        tpl = _env.get_template(UNKNOWN_TEMPLATE)
        return tpl.render(section_type=sec.type, props=UnknownProps.model_validate(sec.props))
    tpl = _env.get_template(f"partials/{kind}.html")
    return tpl.render(section_type=kind, props=_variant_props(model_cls, sec.props))


def render_page_html(record: LandingPageRecord) -> str:
    rendered = [render_section(s) for s in record.sections]
    base = _env.get_template("page.html")
    return base.render(record=record, rendered_sections=rendered)


def render_index_html(examples: Any = None) -> str:
    return _env.get_template("index.html").render(examples=list(examples or EXAMPLE_IDEAS))


EXAMPLE_IDEAS = [
    "A modern fitness app for busy professionals",
    "An eco-friendly meal planning service",
    "A productivity tool for remote teams",
    "A local bakery specializing in artisanal breads",
]

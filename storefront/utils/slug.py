"""URL slug generation and validation"""
import re

_SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def generate_slug(text: str) -> str:
    """URL-friendly slug: lower-case words joined by hyphens"""
    slug = text.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[\s_-]+", "-", slug)
    return slug.strip("-")


def make_unique_slug(base_slug: str, existing_slugs) -> str:
    slug = base_slug
    counter = 1
    while slug in existing_slugs:
        slug = f"{base_slug}-{counter}"
        counter += 1
    return slug


def is_valid_slug(slug: str) -> bool:
    return bool(_SLUG_PATTERN.match(slug))
